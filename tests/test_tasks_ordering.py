"""Tests for workflow graph analysis: cycles, branches and topological order."""

import pytest

from taskrep.errors import WorkflowGraphError
from taskrep.tasks.ordering import (
    analyze_workflow,
    detect_status_cycles,
    find_branch_points,
    forward_status_order,
    order_statuses,
    strict_status_sequence,
)
from tests.harness import CHAIN, make_transitions

DIAMOND = make_transitions(("New", "A"), ("New", "B"), ("A", "Done"), ("B", "Done"))
BACK_EDGE = make_transitions(*CHAIN, ("Review", "In Progress"))


class TestDetectStatusCycles:
    """Tests for cycle detection."""

    def test_chain_has_no_cycles(self) -> None:
        result = detect_status_cycles(make_transitions(*CHAIN))
        assert not result.has_cycles
        assert result.cycles == []
        assert result.message == "No cycles detected"

    def test_back_edge_cycle(self) -> None:
        """Review -> In Progress closes a loop with In Progress -> Review."""
        result = detect_status_cycles(BACK_EDGE)
        assert result.has_cycles
        assert result.cycles == [["In Progress", "Review", "In Progress"]]
        assert result.message == "Found 1 cycle(s)"

    def test_self_loop_is_a_cycle(self) -> None:
        result = detect_status_cycles(make_transitions(("New", "New")))
        assert result.cycles == [["New", "New"]]

    def test_diamond_is_acyclic(self) -> None:
        assert not detect_status_cycles(DIAMOND).has_cycles

    def test_empty_transitions(self) -> None:
        assert not detect_status_cycles([]).has_cycles

    def test_case_insensitive_merges_names(self) -> None:
        transitions = make_transitions(("A", "b"), ("B", "a"))
        assert not detect_status_cycles(transitions).has_cycles

        result = detect_status_cycles(transitions, case_sensitive=False)
        assert result.cycles == [["A", "b", "A"]]

    def test_long_chain_with_back_edge(self) -> None:
        """Deep graphs are walked without recursion."""
        names = [f"S{i}" for i in range(3000)]
        pairs = [*zip(names, names[1:], strict=False), (names[-1], names[0])]

        result = detect_status_cycles(make_transitions(*pairs))

        assert len(result.cycles) == 1
        assert result.cycles[0][0] == result.cycles[0][-1] == "S0"
        assert len(result.cycles[0]) == 3001


class TestFindBranchPoints:
    """Tests for branch detection."""

    def test_diamond_branches_once(self) -> None:
        assert find_branch_points(DIAMOND) == {"New": ["A", "B"]}

    def test_chain_has_no_branches(self) -> None:
        assert find_branch_points(make_transitions(*CHAIN)) == {}

    def test_duplicate_edges_are_not_branches(self) -> None:
        assert find_branch_points(make_transitions(("A", "B"), ("A", "B"))) == {}

    def test_back_edge_counts_as_branch(self) -> None:
        assert find_branch_points(BACK_EDGE) == {"Review": ["Completed", "In Progress"]}


class TestOrderStatuses:
    """Tests for topological ordering."""

    def test_chain_listed_out_of_order(self) -> None:
        transitions = make_transitions(
            ("Review", "Completed"), ("New", "In Progress"), ("In Progress", "Review")
        )
        result = order_statuses(transitions)
        assert result.ordered_statuses == ["New", "In Progress", "Review", "Completed"]
        assert result.unordered_statuses == []
        assert result.warnings == []

    def test_diamond_keeps_both_branches(self) -> None:
        """Unlike the sequence walk, no status is dropped."""
        assert order_statuses(DIAMOND).ordered_statuses == ["New", "A", "B", "Done"]

    def test_ties_broken_by_appearance(self) -> None:
        transitions = make_transitions(("B", "C"), ("A", "C"))
        assert order_statuses(transitions).ordered_statuses == ["B", "A", "C"]

    def test_cycle_members_left_unordered(self) -> None:
        result = order_statuses(BACK_EDGE)
        assert result.ordered_statuses == ["New"]
        assert result.unordered_statuses == ["In Progress", "Review", "Completed"]
        assert result.warnings == ["3 status(es) could not be ordered due to cycles"]

    def test_empty_transitions(self) -> None:
        result = order_statuses([])
        assert result.ordered_statuses == []
        assert result.unordered_statuses == []


class TestStrictStatusSequence:
    """Tests for strict ordering."""

    def test_chain(self) -> None:
        assert strict_status_sequence(make_transitions(*CHAIN)) == [
            "New",
            "In Progress",
            "Review",
            "Completed",
        ]

    def test_cycle_raises(self) -> None:
        with pytest.raises(WorkflowGraphError, match="1 cycle") as exc_info:
            strict_status_sequence(BACK_EDGE, allow_branches=True)

        assert exc_info.value.cycles == [["In Progress", "Review", "In Progress"]]
        assert exc_info.value.details["cycles"] == exc_info.value.cycles

    def test_branch_raises(self) -> None:
        with pytest.raises(WorkflowGraphError, match="Workflow branches at: New") as exc_info:
            strict_status_sequence(DIAMOND)

        assert exc_info.value.branch_points == {"New": ["A", "B"]}

    def test_branches_allowed(self) -> None:
        assert strict_status_sequence(DIAMOND, allow_branches=True) == ["New", "A", "B", "Done"]

    def test_empty_transitions(self) -> None:
        assert strict_status_sequence([]) == []


class TestForwardStatusOrder:
    """Tests for topological order with back edges left out."""

    def test_rework_edge_left_out(self) -> None:
        assert forward_status_order(BACK_EDGE) == ["New", "In Progress", "Review", "Completed"]

    def test_acyclic_matches_order_statuses(self) -> None:
        assert forward_status_order(DIAMOND) == order_statuses(DIAMOND).ordered_statuses

    def test_full_cycle_places_every_status(self) -> None:
        transitions = make_transitions(("B", "C"), ("C", "A"), ("A", "B"))
        assert forward_status_order(transitions) == ["B", "C", "A"]

    def test_self_loop_left_out(self) -> None:
        transitions = make_transitions(("New", "New"), ("New", "Done"))
        assert forward_status_order(transitions) == ["New", "Done"]

    def test_long_chain(self) -> None:
        names = [f"S{i}" for i in range(3000)]
        pairs = [*zip(names, names[1:], strict=False), (names[-1], names[0])]

        assert forward_status_order(make_transitions(*pairs)) == names

    def test_empty_transitions(self) -> None:
        assert forward_status_order([]) == []


class TestAnalyzeWorkflow:
    """Tests for the structural report."""

    def test_linear_chain(self) -> None:
        analysis = analyze_workflow(make_transitions(*CHAIN))

        assert analysis.is_linear
        assert analysis.sequence == ["New", "In Progress", "Review", "Completed"]
        assert analysis.start_statuses == ["New"]
        assert analysis.terminal_statuses == ["Completed"]
        assert analysis.unreachable_statuses == []

    def test_empty_transitions(self) -> None:
        analysis = analyze_workflow([])
        assert analysis.statuses == []
        assert analysis.sequence == []
        assert analysis.is_linear

    def test_reports_every_defect(self) -> None:
        transitions = make_transitions(
            ("New", "A"),
            ("New", "B"),
            ("A", "Done"),
            ("A", "Done"),
            ("Done", "Done"),
        )
        analysis = analyze_workflow(transitions)

        assert not analysis.is_linear
        assert analysis.statuses == ["New", "A", "B", "Done"]
        assert analysis.sequence == ["New", "A", "Done"]
        assert analysis.start_statuses == ["New"]
        assert analysis.terminal_statuses == ["B"]
        assert analysis.self_loops == ["Done"]
        assert analysis.duplicate_transitions == [("A", "Done")]
        assert analysis.cycles == [["Done", "Done"]]
        assert analysis.branch_points == {"New": ["A", "B"]}
        assert analysis.unreachable_statuses == ["B"]

    def test_disconnected_chains(self) -> None:
        """Only the first chain is walked; the second is unreachable."""
        analysis = analyze_workflow(make_transitions(("A", "B"), ("C", "D")))

        assert analysis.start_statuses == ["A", "C"]
        assert analysis.sequence == ["A", "B"]
        assert analysis.unreachable_statuses == ["C", "D"]
        assert not analysis.is_linear

    def test_duplicates_ignore_case_when_asked(self) -> None:
        transitions = make_transitions(("New", "Done"), ("new", "DONE"))

        assert analyze_workflow(transitions).duplicate_transitions == []
        assert analyze_workflow(transitions, case_sensitive=False).duplicate_transitions == [
            ("new", "DONE")
        ]

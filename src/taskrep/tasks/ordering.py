"""Workflow graph analysis: cycle detection, branch detection, topological order.

The sequencer in ``taskrep.tasks.sequencer`` assumes the transitions form a
single chain and silently drops edges when they do not. The functions here
treat the transitions as a general directed graph so callers can see where
that assumption breaks, or demand a strict ordering that refuses to guess.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import structlog

from taskrep.errors import WorkflowGraphError
from taskrep.models.workflow import StatusTransition
from taskrep.tasks.sequencer import StatusKey, get_status_sequence, status_key

log = structlog.get_logger()


@dataclass
class CycleResult:
    """Result of cycle detection."""

    has_cycles: bool
    cycles: list[list[str]] = field(default_factory=list)  # Each path ends where it starts
    message: str = ""


@dataclass
class StatusOrderResult:
    """Result of topological sort."""

    ordered_statuses: list[str]
    unordered_statuses: list[str] = field(default_factory=list)  # Statuses on cycles
    warnings: list[str] = field(default_factory=list)


@dataclass
class WorkflowAnalysis:
    """Structural report on a transition graph."""

    statuses: list[str]
    sequence: list[str]
    start_statuses: list[str] = field(default_factory=list)
    terminal_statuses: list[str] = field(default_factory=list)
    self_loops: list[str] = field(default_factory=list)
    duplicate_transitions: list[tuple[str, str]] = field(default_factory=list)
    cycles: list[list[str]] = field(default_factory=list)
    branch_points: dict[str, list[str]] = field(default_factory=dict)
    unreachable_statuses: list[str] = field(default_factory=list)  # Not on the sequence

    @property
    def is_linear(self) -> bool:
        """True when the transitions form exactly one simple chain."""
        return not (
            self.cycles
            or self.branch_points
            or self.duplicate_transitions
            or self.unreachable_statuses
        )


@dataclass
class _StatusGraph:
    names: dict[str, str]  # Comparison key -> first spelling seen
    edges: dict[str, list[str]]  # Comparison key -> distinct target keys, input order

    def display(self, keys: Sequence[str]) -> list[str]:
        return [self.names[k] for k in keys]


def _build_graph(transitions: Sequence[StatusTransition], key: StatusKey) -> _StatusGraph:
    names: dict[str, str] = {}
    edges: dict[str, list[str]] = {}
    for transition in transitions:
        source, target = key(transition.from_status), key(transition.to_status)
        names.setdefault(source, transition.from_status)
        names.setdefault(target, transition.to_status)
        edges.setdefault(source, [])
        edges.setdefault(target, [])
        if target not in edges[source]:
            edges[source].append(target)
    return _StatusGraph(names=names, edges=edges)


def _find_cycles(graph: _StatusGraph) -> list[list[str]]:
    """DFS over the graph; one key path per back edge, closed on its first node.

    Iterative with an explicit stack so long chains do not hit the
    recursion limit.
    """
    cycles: list[list[str]] = []
    visited: set[str] = set()
    rec_stack: set[str] = set()

    for root in graph.edges:
        if root in visited:
            continue
        visited.add(root)
        rec_stack.add(root)
        path = [root]
        stack = [iter(graph.edges[root])]

        while stack:
            neighbor = next(stack[-1], None)
            if neighbor is None:
                stack.pop()
                rec_stack.remove(path.pop())
            elif neighbor not in visited:
                visited.add(neighbor)
                rec_stack.add(neighbor)
                path.append(neighbor)
                stack.append(iter(graph.edges[neighbor]))
            elif neighbor in rec_stack:
                cycle_start = path.index(neighbor)
                cycles.append([*path[cycle_start:], neighbor])

    return cycles


def _kahn_order(graph: _StatusGraph, edges: dict[str, list[str]]) -> list[str]:
    """Kahn's algorithm over ``edges``; ready statuses go in order of appearance."""
    appearance = {k: i for i, k in enumerate(graph.names)}

    in_degree: dict[str, int] = dict.fromkeys(edges, 0)
    for targets in edges.values():
        for target in targets:
            in_degree[target] += 1

    queue: list[tuple[int, str]] = [
        (appearance[node], node) for node, degree in in_degree.items() if degree == 0
    ]
    queue.sort()
    ordered: list[str] = []

    while queue:
        _, node = queue.pop(0)
        ordered.append(node)

        for target in edges[node]:
            in_degree[target] -= 1
            if in_degree[target] == 0:
                queue.append((appearance[target], target))
                queue.sort()

    return ordered


def detect_status_cycles(
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> CycleResult:
    """Detect cycles in the transition graph.

    Uses DFS-based cycle detection. A self-loop is reported as ``[A, A]``.

    Args:
        transitions: Transition snapshot
        case_sensitive: Compare names exactly

    Returns:
        CycleResult with detected cycle paths.
    """
    graph = _build_graph(transitions, status_key(case_sensitive))
    cycles = [graph.display(path) for path in _find_cycles(graph)]

    has_cycles = len(cycles) > 0
    message = f"Found {len(cycles)} cycle(s)" if has_cycles else "No cycles detected"

    log.debug("cycle_detection_complete", has_cycles=has_cycles, cycle_count=len(cycles))
    return CycleResult(has_cycles=has_cycles, cycles=cycles, message=message)


def find_branch_points(
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> dict[str, list[str]]:
    """Map each status with more than one distinct outgoing target to its targets."""
    graph = _build_graph(transitions, status_key(case_sensitive))
    return {
        graph.names[source]: graph.display(targets)
        for source, targets in graph.edges.items()
        if len(targets) > 1
    }


def order_statuses(
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> StatusOrderResult:
    """Order statuses so every transition points forward.

    Kahn's algorithm; among statuses that are ready at the same time the one
    that appears first in the transition list goes first. Statuses on a
    cycle cannot be ordered and are reported separately.

    Args:
        transitions: Transition snapshot
        case_sensitive: Compare names exactly

    Returns:
        StatusOrderResult with ordered status names.
    """
    graph = _build_graph(transitions, status_key(case_sensitive))
    ordered = _kahn_order(graph, graph.edges)

    placed = set(ordered)
    unordered = [node for node in graph.edges if node not in placed]
    warnings: list[str] = []
    if unordered:
        warnings.append(f"{len(unordered)} status(es) could not be ordered due to cycles")

    log.debug(
        "status_order_complete",
        ordered_count=len(ordered),
        unordered_count=len(unordered),
    )
    return StatusOrderResult(
        ordered_statuses=graph.display(ordered),
        unordered_statuses=graph.display(unordered),
        warnings=warnings,
    )


def strict_status_sequence(
    transitions: Sequence[StatusTransition],
    *,
    allow_branches: bool = False,
    case_sensitive: bool = True,
) -> list[str]:
    """Topological status order that refuses ambiguous graphs.

    Raises:
        WorkflowGraphError: If the graph has a cycle, or branches while
            ``allow_branches`` is false.
    """
    cycles = detect_status_cycles(transitions, case_sensitive=case_sensitive)
    if cycles.has_cycles:
        paths = "; ".join(" -> ".join(c) for c in cycles.cycles)
        raise WorkflowGraphError(
            f"Workflow contains {len(cycles.cycles)} cycle(s): {paths}",
            cycles=cycles.cycles,
        )

    if not allow_branches:
        branches = find_branch_points(transitions, case_sensitive=case_sensitive)
        if branches:
            raise WorkflowGraphError(
                f"Workflow branches at: {', '.join(branches)}",
                branch_points=branches,
            )

    return order_statuses(transitions, case_sensitive=case_sensitive).ordered_statuses


def forward_status_order(
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> list[str]:
    """Topological status order with back edges left out.

    The edges that close a cycle during DFS (such as a rework edge
    ``Review -> In Progress``) are dropped, the rest is ordered with Kahn's
    algorithm. Every status is placed, so a move along a dropped edge shows
    up as a move to an earlier position.
    """
    graph = _build_graph(transitions, status_key(case_sensitive))
    back_edges = {(path[-2], path[-1]) for path in _find_cycles(graph)}
    forward_edges = {
        source: [t for t in targets if (source, t) not in back_edges]
        for source, targets in graph.edges.items()
    }

    ordered = _kahn_order(graph, forward_edges)
    log.debug("forward_order_complete", back_edges=len(back_edges), ordered_count=len(ordered))
    return graph.display(ordered)


def analyze_workflow(
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> WorkflowAnalysis:
    """Report how far the transitions are from a single linear chain."""
    key = status_key(case_sensitive)
    graph = _build_graph(transitions, key)

    incoming = {target for targets in graph.edges.values() for target in targets}
    starts = [node for node in graph.edges if node not in incoming and graph.edges[node]]
    terminals = [node for node, targets in graph.edges.items() if not targets]

    seen_pairs: set[tuple[str, str]] = set()
    duplicates: list[tuple[str, str]] = []
    self_loops: list[str] = []
    for transition in transitions:
        pair = (key(transition.from_status), key(transition.to_status))
        if pair[0] == pair[1] and graph.names[pair[0]] not in self_loops:
            self_loops.append(graph.names[pair[0]])
        if pair in seen_pairs:
            duplicates.append((transition.from_status, transition.to_status))
        seen_pairs.add(pair)

    sequence = get_status_sequence(transitions, case_sensitive=case_sensitive)
    on_sequence = {key(name) for name in sequence}

    analysis = WorkflowAnalysis(
        statuses=list(graph.names.values()),
        sequence=sequence,
        start_statuses=graph.display(starts),
        terminal_statuses=graph.display(terminals),
        self_loops=self_loops,
        duplicate_transitions=duplicates,
        cycles=detect_status_cycles(transitions, case_sensitive=case_sensitive).cycles,
        branch_points=find_branch_points(transitions, case_sensitive=case_sensitive),
        unreachable_statuses=[graph.names[k] for k in graph.names if k not in on_sequence],
    )
    log.debug(
        "workflow_analyzed",
        statuses=len(analysis.statuses),
        is_linear=analysis.is_linear,
    )
    return analysis

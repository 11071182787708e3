"""Test helpers for TaskRep workflow tests.

Example usage:

    from tests.harness import CHAIN, make_transitions

    def test_sequence():
        assert get_status_sequence(make_transitions(*CHAIN))[0] == "New"
"""

from tests.harness.workflow import (
    CHAIN,
    make_transitions,
    transition_records,
    write_workflow_file,
)

__all__ = [
    "CHAIN",
    "make_transitions",
    "transition_records",
    "write_workflow_file",
]

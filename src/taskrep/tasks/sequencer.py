"""Status sequencing derived from workflow transition edges.

The transition list is an unordered set of ``from_status -> to_status``
edges. From it we derive a best-effort linear ordering of statuses and use
that ordering to answer forward/backward questions. The ordering assumes the
edges form a single chain; for branching or cyclic graphs it follows the
first matching edge and ignores the rest (see ``taskrep.tasks.ordering`` for
a strict alternative).

Nothing here raises: empty input, unknown names and self-loops degrade to
empty results or ``False``.
"""

from collections.abc import Callable, Iterable, Sequence

from taskrep.models.workflow import StatusTransition

StatusKey = Callable[[str], str]


def _identity(name: str) -> str:
    return name


def status_key(case_sensitive: bool = True) -> StatusKey:
    """Return the function used to compare status names."""
    return _identity if case_sensitive else str.casefold


def get_allowed_next_statuses(
    current_status: str,
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> list[str]:
    """Get the statuses a task may move to from ``current_status``.

    Args:
        current_status: Status the task is in now
        transitions: Transition snapshot
        case_sensitive: Compare names exactly

    Returns:
        Destination statuses in the order their transitions appear. Empty
        when the status is terminal or unknown.
    """
    key = status_key(case_sensitive)
    current = key(current_status)
    return [t.to_status for t in transitions if key(t.from_status) == current]


def is_transition_allowed(
    from_status: str,
    to_status: str,
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> bool:
    """Check whether a transition record exists for the given pair.

    No trimming is applied; with the default sensitivity ``"New"`` and
    ``"new"`` are different statuses.
    """
    key = status_key(case_sensitive)
    source, target = key(from_status), key(to_status)
    return any(key(t.from_status) == source and key(t.to_status) == target for t in transitions)


def _start_status(transitions: Sequence[StatusTransition], key: StatusKey) -> str:
    incoming = {key(t.to_status) for t in transitions}
    for transition in transitions:
        if key(transition.from_status) not in incoming:
            return transition.from_status
    # No status without incoming edges: fall back to the first listed edge
    return transitions[0].from_status


def get_status_sequence(
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> list[str]:
    """Derive the linear status sequence from transition edges.

    The walk starts at the first status (in input order) that has outgoing
    but no incoming edges, or at the first edge's source if every status has
    an incoming edge. It then repeatedly follows the first transition from
    the current tail to a status not yet visited.

    Args:
        transitions: Transition snapshot
        case_sensitive: Compare names exactly

    Returns:
        Status names from start to finish, each at most once.
    """
    if not transitions:
        return []

    key = status_key(case_sensitive)
    start = _start_status(transitions, key)
    sequence = [start]
    visited = {key(start)}
    current = key(start)

    # A blank status name ends the walk
    while current:
        next_transition = next(
            (
                t
                for t in transitions
                if key(t.from_status) == current and key(t.to_status) not in visited
            ),
            None,
        )
        if next_transition is None:
            break
        sequence.append(next_transition.to_status)
        current = key(next_transition.to_status)
        visited.add(current)

    return sequence


def is_moving_backwards(
    from_status: str,
    to_status: str,
    transitions: Sequence[StatusTransition],
    *,
    case_sensitive: bool = True,
) -> bool:
    """Check whether moving ``from_status -> to_status`` goes back in the sequence.

    Statuses missing from the derived sequence are never considered a
    backward move.
    """
    key = status_key(case_sensitive)
    positions: dict[str, int] = {}
    for index, name in enumerate(get_status_sequence(transitions, case_sensitive=case_sensitive)):
        positions.setdefault(key(name), index)

    from_index = positions.get(key(from_status))
    to_index = positions.get(key(to_status))
    if from_index is None or to_index is None:
        return False
    return to_index < from_index


class WorkflowSequencer:
    """Answers workflow-ordering questions against one transition snapshot.

    The snapshot is copied into a tuple at construction; the sequence is
    recomputed on every query so the object carries no derived state.
    """

    def __init__(
        self,
        transitions: Iterable[StatusTransition],
        *,
        case_sensitive: bool = True,
    ) -> None:
        self._transitions = tuple(transitions)
        self._case_sensitive = case_sensitive

    @property
    def transitions(self) -> tuple[StatusTransition, ...]:
        return self._transitions

    @property
    def case_sensitive(self) -> bool:
        return self._case_sensitive

    def allowed_next_statuses(self, current_status: str) -> list[str]:
        return get_allowed_next_statuses(
            current_status, self._transitions, case_sensitive=self._case_sensitive
        )

    def is_transition_allowed(self, from_status: str, to_status: str) -> bool:
        return is_transition_allowed(
            from_status, to_status, self._transitions, case_sensitive=self._case_sensitive
        )

    def sequence(self) -> list[str]:
        return get_status_sequence(self._transitions, case_sensitive=self._case_sensitive)

    def is_moving_backwards(self, from_status: str, to_status: str) -> bool:
        return is_moving_backwards(
            from_status, to_status, self._transitions, case_sensitive=self._case_sensitive
        )

    def is_terminal(self, status: str) -> bool:
        """A status with no outgoing transitions."""
        return not self.allowed_next_statuses(status)

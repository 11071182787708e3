"""Workflow CLI commands.

Commands that answer workflow questions against a transitions file:
sequence, next, check, order, lint.

All commands output JSON by default. Use -t for table output.
"""

from pathlib import Path
from typing import Annotated

import typer

from taskrep.cli.common import (
    console,
    create_panel,
    create_table,
    error,
    format_status,
    info,
    print_json,
    success,
    warn,
)
from taskrep.config import settings
from taskrep.errors import TaskRepError, WorkflowGraphError
from taskrep.models.workflow import StatusTransition
from taskrep.store import load_workflow_file
from taskrep.tasks.ordering import analyze_workflow, order_statuses, strict_status_sequence
from taskrep.tasks.sequencer import WorkflowSequencer

app = typer.Typer(
    name="workflow",
    help="Status sequencing and transition checks",
    no_args_is_help=True,
)

FileOption = Annotated[
    Path | None,
    typer.Option(
        "-f",
        "--file",
        help="Workflow JSON (defaults to TASKREP_TRANSITIONS_FILE)",
        dir_okay=False,
    ),
]
IgnoreCaseOption = Annotated[
    bool, typer.Option("--ignore-case", "-i", help="Compare status names case-insensitively")
]
TableOption = Annotated[bool, typer.Option("--table", "-t", help="Table output (human-readable)")]


def _load_transitions(file: Path | None) -> list[StatusTransition]:
    """Read transitions from ``file`` or the configured workflow file."""
    path = file or settings.transitions_file
    if path is None:
        error("No workflow file. Pass --file or set TASKREP_TRANSITIONS_FILE.")
        raise typer.Exit(1)
    try:
        return load_workflow_file(path).transitions
    except OSError as e:
        error(f"Cannot read {path}: {e.strerror or e}")
        raise typer.Exit(1) from e
    except TaskRepError as e:
        error(e.message)
        raise typer.Exit(1) from e


def _sequencer(file: Path | None, ignore_case: bool) -> WorkflowSequencer:
    return WorkflowSequencer(
        _load_transitions(file),
        case_sensitive=settings.case_sensitive_match and not ignore_case,
    )


@app.command("sequence")
def sequence(
    file: FileOption = None,
    ignore_case: IgnoreCaseOption = False,
    table_out: TableOption = False,
) -> None:
    """Show the status sequence derived from the transitions."""
    statuses = _sequencer(file, ignore_case).sequence()

    if not table_out:
        print_json({"sequence": statuses})
        return

    if not statuses:
        info("No transitions defined")
        return
    table = create_table("Status Sequence", "#", "Status")
    for position, name in enumerate(statuses, start=1):
        table.add_row(str(position), format_status(name))
    console.print(table)


@app.command("next")
def next_statuses(
    status: Annotated[str, typer.Argument(help="Current status")],
    file: FileOption = None,
    ignore_case: IgnoreCaseOption = False,
    table_out: TableOption = False,
) -> None:
    """List the statuses a task may move to from STATUS."""
    allowed = _sequencer(file, ignore_case).allowed_next_statuses(status)

    if not table_out:
        print_json({"status": status, "allowed": allowed, "terminal": not allowed})
        return

    if not allowed:
        info(f"{format_status(status)} is a terminal status")
        return
    table = create_table(f"Next from {status}", "Status")
    for name in allowed:
        table.add_row(format_status(name))
    console.print(table)


@app.command("check")
def check(
    from_status: Annotated[str, typer.Argument(help="Current status")],
    to_status: Annotated[str, typer.Argument(help="Target status")],
    file: FileOption = None,
    ignore_case: IgnoreCaseOption = False,
    table_out: TableOption = False,
) -> None:
    """Check whether FROM_STATUS -> TO_STATUS is permitted."""
    sequencer = _sequencer(file, ignore_case)
    allowed = sequencer.is_transition_allowed(from_status, to_status)
    backwards = sequencer.is_moving_backwards(from_status, to_status)

    if not table_out:
        print_json(
            {
                "from_status": from_status,
                "to_status": to_status,
                "allowed": allowed,
                "moving_backwards": backwards,
            }
        )
        return

    move = f"{format_status(from_status)} → {format_status(to_status)}"
    if allowed:
        success(f"{move} is allowed")
    else:
        error(f"{move} is not allowed")
    if backwards:
        warn("This moves the task backwards in the workflow")


@app.command("order")
def order(
    file: FileOption = None,
    strict: Annotated[
        bool, typer.Option("--strict", help="Fail on cycles or branches instead of guessing")
    ] = False,
    allow_branches: Annotated[
        bool, typer.Option("--allow-branches", help="With --strict, tolerate branches")
    ] = False,
    ignore_case: IgnoreCaseOption = False,
    table_out: TableOption = False,
) -> None:
    """Order statuses topologically."""
    transitions = _load_transitions(file)
    case_sensitive = settings.case_sensitive_match and not ignore_case

    if strict:
        try:
            ordered = strict_status_sequence(
                transitions, allow_branches=allow_branches, case_sensitive=case_sensitive
            )
        except WorkflowGraphError as e:
            if table_out:
                error(e.message)
            else:
                print_json({"error": e.message, **e.details})
            raise typer.Exit(1) from e
        unordered: list[str] = []
        warnings: list[str] = []
    else:
        result = order_statuses(transitions, case_sensitive=case_sensitive)
        ordered, unordered, warnings = (
            result.ordered_statuses,
            result.unordered_statuses,
            result.warnings,
        )

    if not table_out:
        print_json(
            {"ordered_statuses": ordered, "unordered_statuses": unordered, "warnings": warnings}
        )
        return

    table = create_table("Status Order", "#", "Status")
    for position, name in enumerate(ordered, start=1):
        table.add_row(str(position), format_status(name))
    console.print(table)
    for message in warnings:
        warn(message)
    if unordered:
        warn(f"Unordered: {', '.join(unordered)}")


@app.command("lint")
def lint(
    file: FileOption = None,
    ignore_case: IgnoreCaseOption = False,
    table_out: TableOption = False,
) -> None:
    """Report cycles, branches and other departures from a linear chain.

    Exits with status 1 when the workflow is not a single chain.
    """
    transitions = _load_transitions(file)
    analysis = analyze_workflow(
        transitions, case_sensitive=settings.case_sensitive_match and not ignore_case
    )

    if not table_out:
        print_json(
            {
                "is_linear": analysis.is_linear,
                "sequence": analysis.sequence,
                "start_statuses": analysis.start_statuses,
                "terminal_statuses": analysis.terminal_statuses,
                "self_loops": analysis.self_loops,
                "duplicate_transitions": [list(p) for p in analysis.duplicate_transitions],
                "cycles": analysis.cycles,
                "branch_points": analysis.branch_points,
                "unreachable_statuses": analysis.unreachable_statuses,
            }
        )
    else:
        lines = [f"Sequence: {' → '.join(analysis.sequence) or '(empty)'}"]
        if analysis.cycles:
            lines.extend(f"Cycle: {' → '.join(c)}" for c in analysis.cycles)
        for source, targets in analysis.branch_points.items():
            lines.append(f"Branch: {source} → {', '.join(targets)}")
        lines.extend(f"Duplicate: {a} → {b}" for a, b in analysis.duplicate_transitions)
        if analysis.unreachable_statuses:
            lines.append(f"Off sequence: {', '.join(analysis.unreachable_statuses)}")
        console.print(create_panel("\n".join(lines), title="Workflow Lint"))
        if analysis.is_linear:
            success("Workflow is a single linear chain")
        else:
            error("Workflow is not a single linear chain")

    if not analysis.is_linear:
        raise typer.Exit(1)

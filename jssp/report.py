"""Plain-text schedule report and an independent feasibility check."""

from __future__ import annotations

from typing import Sequence

from .graph import ScheduleGraph
from .models import Problem


def format_report(graph: ScheduleGraph) -> str:
    """Render ``makespan`` on the first line, then one line of start times per job.

    Example for two jobs::

        6
        0 3
        0 3
    """
    lines = [str(graph.makespan())]
    lines.extend(" ".join(str(s) for s in starts) for starts in graph.job_start_times())
    return "\n".join(lines)


def verify_schedule(problem: Problem, start_times: Sequence[int]) -> bool:
    """Check precedence and machine capacity of a start-time vector.

    Args:
        problem: Problem the schedule belongs to.
        start_times: Start time per operation id.

    Returns:
        True if the schedule is feasible.

    Raises:
        AssertionError: On the first precedence violation or machine overlap.
    """
    if len(start_times) != problem.operation_count:
        raise AssertionError(
            f"Expected {problem.operation_count} start times, got {len(start_times)}"
        )
    for job in problem.jobs:
        for a, b in zip(job, job[1:]):
            if start_times[b.id] < start_times[a.id] + a.duration:
                raise AssertionError(
                    f"Job {a.job}: operation {b.index} starts at {start_times[b.id]} "
                    f"before operation {a.index} ends at {start_times[a.id] + a.duration}"
                )
    for machine, ops in problem.machine_operations.items():
        prev_end = -1
        for op in sorted(ops, key=lambda o: start_times[o.id]):
            if start_times[op.id] < prev_end:
                raise AssertionError(
                    f"Overlap on machine {machine} between end {prev_end} "
                    f"and start {start_times[op.id]}"
                )
            prev_end = start_times[op.id] + op.duration
    return True

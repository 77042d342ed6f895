"""Priority dispatching rules that build an initial schedule without search.

The simulation keeps, per job, the index of its next unscheduled operation
and its ready time, and per machine its next free time. At every step one of
the eligible operations (the next operation of each unfinished job) is picked
and placed at ``max(job ready, machine free)``. The order in which operations
land on each machine becomes the machine orientation of the returned graph.
"""

from __future__ import annotations

import random
from enum import Enum
from typing import Callable, Optional

from .graph import ScheduleGraph
from .models import Operation, Problem

Chooser = Callable[[list[Operation]], Operation]


class DispatchRule(str, Enum):
    """Selection rule; values double as the ``priority-*`` solver suffixes."""

    SPS = "sps"  # smallest position in job sequence
    LPS = "lps"  # largest position in job sequence
    SPT = "spt"  # shortest processing time
    LPT = "lpt"  # longest processing time
    LWRM = "lwrm"  # least work remaining
    MWRM = "mwrm"  # most work remaining


def _dispatch(problem: Problem, choose: Chooser) -> ScheduleGraph:
    job_ready = [0] * problem.job_count
    next_index = [0] * problem.job_count
    machine_free = {m: 0 for m in problem.machines}
    sequences: dict[int, list[int]] = {m: [] for m in problem.machines}

    remaining = problem.operation_count
    while remaining:
        eligible = [
            problem.jobs[j][next_index[j]]
            for j in range(problem.job_count)
            if next_index[j] < len(problem.jobs[j])
        ]
        op = choose(eligible)
        end = max(job_ready[op.job], machine_free[op.machine]) + op.duration
        job_ready[op.job] = end
        machine_free[op.machine] = end
        sequences[op.machine].append(op.id)
        next_index[op.job] += 1
        remaining -= 1

    return ScheduleGraph.build(problem, sequences)


def _rule_key(problem: Problem, rule: DispatchRule) -> Callable[[Operation], tuple[int, int, int]]:
    if rule in (DispatchRule.SPT, DispatchRule.LPT):
        def value(op: Operation) -> int:
            return op.duration
    elif rule in (DispatchRule.LWRM, DispatchRule.MWRM):
        def value(op: Operation) -> int:
            return problem.remaining_work(op)
    else:
        def value(op: Operation) -> int:
            return op.index

    sign = -1 if rule in (DispatchRule.LPS, DispatchRule.LPT, DispatchRule.MWRM) else 1
    return lambda op: (sign * value(op), op.job, op.index)


def construct(problem: Problem, rule: DispatchRule | str) -> ScheduleGraph:
    """Build a schedule with a dispatching rule.

    Ties are broken by lowest job index, then lowest operation index, so the
    result is fully determined by ``rule``.

    Args:
        problem: Validated problem.
        rule: ``DispatchRule`` or its string value (e.g. ``"spt"``).

    Returns:
        Recomputed ScheduleGraph.
    """
    rule = DispatchRule(rule)
    key = _rule_key(problem, rule)
    return _dispatch(problem, lambda eligible: min(eligible, key=key))


def construct_sequential(problem: Problem) -> ScheduleGraph:
    """Trivial baseline: operations dispatched in raw input (job-major) order.

    Only the machine orders are job-major; start times are the left-shifted
    times of that graph, so operations of different jobs on different
    machines may overlap. The makespan is therefore at most, not equal to,
    the sum of all durations that a strictly one-at-a-time schedule gives.
    """
    return _dispatch(problem, lambda eligible: min(eligible, key=lambda op: (op.job, op.index)))


def construct_random(problem: Problem, rng: Optional[random.Random] = None) -> ScheduleGraph:
    """Random feasible schedule.

    At each step uniformly chooses among jobs with remaining operations and
    dispatches that job's next operation.

    Args:
        problem: Validated problem.
        rng: Random generator owned by the caller (for reproducibility).
    """
    if rng is None:
        rng = random.Random()
    return _dispatch(problem, rng.choice)


def random_orderings(problem: Problem, rng: random.Random) -> dict[int, list[int]]:
    """Machine orderings of a random feasible schedule."""
    return construct_random(problem, rng).orderings()

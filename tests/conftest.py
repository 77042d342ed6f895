"""Pytest configuration, shared instances & custom summary hook.

Also ensures the project root is on sys.path so ``import jssp`` works without
an editable install.
"""

from __future__ import annotations

import itertools
import random
import sys
from pathlib import Path
from typing import Callable

import pytest

# Ensure project root is on sys.path so 'import jssp.*' works
_root = Path(__file__).resolve().parents[1]
if str(_root) not in sys.path:
    sys.path.insert(0, str(_root))

from jssp.errors import InfeasibleOrderingError  # noqa: E402
from jssp.graph import ScheduleGraph  # noqa: E402
from jssp.models import Problem  # noqa: E402

# job 0: (m0, 3) (m1, 2); job 1: (m1, 2) (m0, 3); optimum 6
TWO_BY_TWO = "2 2\n0 3 1 2\n1 2 0 3\n"


def random_problem(jobs: int, machines: int, seed: int, max_duration: int = 20) -> Problem:
    """Taillard-like instance: every job visits every machine once, random order."""
    rng = random.Random(seed)
    raw = []
    for _ in range(jobs):
        order = list(range(machines))
        rng.shuffle(order)
        raw.append([(m, rng.randint(1, max_duration)) for m in order])
    return Problem.from_jobs(raw)


def brute_force_optimum(problem: Problem) -> int:
    """Minimum makespan over every feasible combination of machine orderings."""
    machines = problem.machines
    choices = [
        list(itertools.permutations(op.id for op in problem.machine_operations[m]))
        for m in machines
    ]
    best = None
    for combo in itertools.product(*choices):
        try:
            graph = ScheduleGraph.build(problem, dict(zip(machines, combo)))
        except InfeasibleOrderingError:
            continue
        if best is None or graph.makespan() < best:
            best = graph.makespan()
    assert best is not None
    return best


@pytest.fixture
def two_by_two() -> Problem:
    return Problem.from_jobs([[(0, 3), (1, 2)], [(1, 2), (0, 3)]])


@pytest.fixture
def three_by_three() -> Problem:
    return Problem.from_jobs(
        [
            [(0, 3), (1, 2), (2, 2)],
            [(0, 2), (2, 1), (1, 4)],
            [(1, 4), (2, 3)],
        ]
    )


@pytest.fixture
def make_problem() -> Callable[..., Problem]:
    return random_problem


def pytest_terminal_summary(
    terminalreporter: pytest.TerminalReporter,
    exitstatus: int,
    config: pytest.Config,
) -> None:  # noqa: D401
    """Append a compact custom summary at the end of test session."""
    stats = terminalreporter.stats
    collected = terminalreporter._numcollected  # type: ignore[attr-defined]
    passed = len(stats.get("passed", []))
    failed = len(stats.get("failed", []))
    errors = len(stats.get("error", []))
    skipped = len(stats.get("skipped", []))

    terminalreporter.section("Custom summary", sep="=")
    terminalreporter.write_line(
        f"Collected: {collected} | Passed: {passed} | Failed: {failed} | "
        f"Errors: {errors} | Skipped: {skipped}"
    )
    if failed:
        terminalreporter.write_line("Failed tests:")
        for rep in stats["failed"]:
            terminalreporter.write_line(f"  - {rep.nodeid}")

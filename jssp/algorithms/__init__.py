"""Search algorithms for the job shop scheduling problem.

Contains:
- Hill climbing (best improvement) and its random-restart variant
- Tabu Search
- Simulated Annealing

plus the name registry used by :func:`solve` and the CLI.
"""

from __future__ import annotations

import dataclasses
import logging
import random
from typing import Any, Callable, Optional

from ..dispatching import DispatchRule, construct, construct_sequential
from ..errors import UnknownSolverError
from ..graph import ScheduleGraph
from ..models import Problem
from .annealing import SimulatedAnnealing
from .base import Outcome, SearchConfig, SearchResult, Solver, run_search
from .hill_climb import HillClimber
from .random_restart import RandomRestartHillClimber
from .tabu import TabuSearch, default_tenure

logger = logging.getLogger("jssp.search")

SolverFactory = Callable[[Problem, SearchConfig, random.Random], Solver]
Constructor = Callable[[Problem], ScheduleGraph]

SOLVERS: dict[str, SolverFactory] = {
    "hill-climber": lambda problem, config, rng: HillClimber(problem),
    "random-restart-hill-climber": lambda problem, config, rng: RandomRestartHillClimber(
        problem, rng
    ),
    "tabu-search": lambda problem, config, rng: TabuSearch(
        problem, rng, tenure=config.tabu_tenure, frequency_penalty=config.tabu_frequency_penalty
    ),
    "simulated-annealing": lambda problem, config, rng: SimulatedAnnealing(
        problem,
        rng,
        start_acceptance_ratio=config.sa_start_acceptance_ratio,
        delta=config.sa_delta,
        sample_size=config.sa_sample_size,
    ),
}

CONSTRUCTORS: dict[str, Constructor] = {
    f"priority-{rule.value}": (lambda problem, rule=rule: construct(problem, rule))
    for rule in DispatchRule
}
CONSTRUCTORS["sequential"] = construct_sequential


def available_solvers() -> list[str]:
    return sorted(SOLVERS) + sorted(CONSTRUCTORS)


def create_solver(name: str, problem: Problem, config: SearchConfig) -> Solver:
    """Instantiate a search strategy with a fresh ``Random(config.seed)``.

    Raises:
        UnknownSolverError: ``name`` is not a search strategy.
    """
    try:
        factory = SOLVERS[name]
    except KeyError:
        raise UnknownSolverError(name, available_solvers()) from None
    return factory(problem, config, random.Random(config.seed))


def solve(
    problem: Problem,
    name: str,
    config: Optional[SearchConfig] = None,
    **overrides: Any,
) -> SearchResult:
    """Run one named solver on ``problem``.

    Construction heuristics (``priority-*``, ``sequential``) return their
    schedule directly; search strategies are driven by :func:`run_search`.

    Args:
        problem: Problem to solve.
        name: Solver name, see :func:`available_solvers`.
        config: Run parameters; defaults to ``SearchConfig()``.
        **overrides: Field overrides applied on top of ``config``
            (e.g. ``seed=3, timeout=1.0``).

    Returns:
        SearchResult with the best schedule found.

    Raises:
        UnknownSolverError: Unknown ``name`` (raised before any work).
        ValueError: Invalid parameters.
        InvalidProblemError: Structurally invalid problem.
    """
    if name not in SOLVERS and name not in CONSTRUCTORS:
        raise UnknownSolverError(name, available_solvers())
    config = dataclasses.replace(config or SearchConfig(), **overrides)
    config.validate()
    problem.validate()

    if name in CONSTRUCTORS:
        graph = CONSTRUCTORS[name](problem)
        logger.info("[%s] makespan=%d", name, graph.makespan())
        return SearchResult(
            solver=name, best=graph, makespan=graph.makespan(), history=[graph.makespan()]
        )

    return run_search(create_solver(name, problem, config), config)


__all__ = [
    "CONSTRUCTORS",
    "HillClimber",
    "Outcome",
    "RandomRestartHillClimber",
    "SOLVERS",
    "SearchConfig",
    "SearchResult",
    "SimulatedAnnealing",
    "Solver",
    "TabuSearch",
    "available_solvers",
    "create_solver",
    "default_tenure",
    "run_search",
    "solve",
]

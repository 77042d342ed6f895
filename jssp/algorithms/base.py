"""Common structures and helper functions for search algorithms.

Every solver is a small strategy object exposing ``current``, ``best``,
``respects_timeout`` and a single ``step()`` method returning an
:class:`Outcome`. :func:`run_search` owns the loop, the deadline and the
progress history so that solvers only describe one iteration.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional, Protocol

from ..graph import ScheduleGraph
from ..neighborhood import Move, generate_moves

logger = logging.getLogger("jssp.search")


class Outcome(Enum):
    IMPROVED = "improved"
    UNCHANGED = "unchanged"
    TERMINATED = "terminated"


class Solver(Protocol):
    name: str
    respects_timeout: bool
    current: ScheduleGraph
    best: ScheduleGraph

    def step(self) -> Outcome: ...


@dataclass(slots=True)
class SearchConfig:
    """Bundle of run parameters shared by all solvers.

    Only the relevant subset is read by each solver. ``max_iterations`` caps
    the number of ``step()`` calls independently of wall-clock time, which
    gives reproducible runs regardless of machine speed.
    """

    timeout: float = 10.0
    seed: int = 0
    max_iterations: Optional[int] = None
    tabu_tenure: Optional[int] = None
    tabu_frequency_penalty: bool = True
    sa_start_acceptance_ratio: float = 0.8
    sa_delta: float = 0.1
    sa_sample_size: int = 30

    def validate(self) -> None:
        if self.timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {self.timeout}")
        if self.max_iterations is not None and self.max_iterations < 0:
            raise ValueError(f"max_iterations must be >= 0, got {self.max_iterations}")
        if self.tabu_tenure is not None and self.tabu_tenure < 1:
            raise ValueError(f"tabu tenure must be >= 1, got {self.tabu_tenure}")
        if not 0.0 < self.sa_start_acceptance_ratio < 1.0:
            raise ValueError(
                "sa-start-acceptance-ratio must be in (0, 1), "
                f"got {self.sa_start_acceptance_ratio}"
            )
        if self.sa_delta <= 0.0:
            raise ValueError(f"sa-delta must be > 0, got {self.sa_delta}")
        if self.sa_sample_size < 1:
            raise ValueError(f"sa sample size must be >= 1, got {self.sa_sample_size}")


@dataclass
class SearchResult:
    """Outcome of one run: best schedule plus progress traces."""

    solver: str
    best: ScheduleGraph
    makespan: int
    iterations: int = 0
    elapsed: float = 0.0
    history: list[int] = field(default_factory=list)
    current_history: list[int] = field(default_factory=list)


class Deadline:
    """Wall-clock budget checked between iterations."""

    def __init__(self, seconds: float) -> None:
        self.seconds = seconds
        self.start = time.perf_counter()

    def elapsed(self) -> float:
        return time.perf_counter() - self.start

    def expired(self) -> bool:
        return self.elapsed() >= self.seconds


def best_neighbor(
    graph: ScheduleGraph,
    admissible: Optional[Callable[[Move, int], bool]] = None,
    score: Optional[Callable[[Move, int], float]] = None,
) -> Optional[tuple[Move, ScheduleGraph]]:
    """Rank every move of ``graph`` by its estimated makespan, apply the best.

    Candidates are scored with :meth:`ScheduleGraph.swap_estimate`; only the
    chosen move is applied and fully recomputed. Ties keep the earliest move
    in generation order.

    Args:
        graph: Recomputed current solution.
        admissible: Optional filter ``(move, estimate) -> bool``.
        score: Optional ranking ``(move, estimate) -> value``; defaults to
            the estimate itself.

    Returns:
        ``(move, recomputed_graph)`` or None when no (admissible) move exists.
    """
    chosen: Optional[Move] = None
    chosen_value = 0.0
    for move in generate_moves(graph):
        estimate = graph.swap_estimate(move)
        if admissible is not None and not admissible(move, estimate):
            continue
        value = score(move, estimate) if score is not None else estimate
        if chosen is None or value < chosen_value:
            chosen, chosen_value = move, value
    if chosen is None:
        return None
    return chosen, graph.apply_move(chosen).recompute()


def run_search(solver: Solver, config: SearchConfig) -> SearchResult:
    """Drive ``solver.step()`` until termination, timeout or iteration cap.

    The timeout is only checked between steps, so an iteration in progress
    always completes. The search also stops once the best makespan reaches
    the problem's trivial lower bound.
    """
    deadline = Deadline(config.timeout)
    lower_bound = solver.best.problem.lower_bound()
    history = [solver.best.makespan()]
    current_history = [solver.current.makespan()]
    iterations = 0
    logger.info("[%s] start makespan=%d lower_bound=%d", solver.name, history[0], lower_bound)

    while True:
        if config.max_iterations is not None and iterations >= config.max_iterations:
            logger.info("[%s] stop iteration limit %d reached", solver.name, iterations)
            break
        if solver.respects_timeout and deadline.expired():
            logger.info("[%s] stop time limit reached at iter %d", solver.name, iterations)
            break
        outcome = solver.step()
        iterations += 1
        history.append(solver.best.makespan())
        current_history.append(solver.current.makespan())
        if outcome is Outcome.TERMINATED:
            logger.info("[%s] terminated at iter %d", solver.name, iterations)
            break
        if solver.best.makespan() <= lower_bound:
            logger.info(
                "[%s] lower bound %d reached at iter %d", solver.name, lower_bound, iterations
            )
            break

    elapsed = deadline.elapsed()
    logger.info(
        "[%s] best=%d iterations=%d elapsed=%.3fs",
        solver.name,
        solver.best.makespan(),
        iterations,
        elapsed,
    )
    return SearchResult(
        solver=solver.name,
        best=solver.best,
        makespan=solver.best.makespan(),
        iterations=iterations,
        elapsed=elapsed,
        history=history,
        current_history=current_history,
    )

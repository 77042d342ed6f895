"""Disjunctive graph representation of a schedule.

Concepts
--------
Arena
    Every operation is a node identified by its dense ``Operation.id``. The
    source and sink sentinels are implicit: a node without a job and machine
    predecessor hangs off the source, a node without successors feeds the sink.
Conjunctive arcs
    Fixed job order, stored once in ``_job_pred`` / ``_job_succ``.
Disjunctive arcs
    The chosen processing order on each machine, stored as one ordered list of
    operation ids per machine (``_sequences``) plus the derived adjacent
    predecessor/successor arrays. The transitive arcs of the total order are
    implied; only adjacent pairs matter for longest paths.

``recompute()`` is a Kahn topological pass over at most two predecessors per
node, so it is linear in the number of operations. Missing predecessors are
encoded as ``-1``.
"""

from __future__ import annotations

from collections import deque
from typing import Iterator, Mapping, Sequence

from .errors import InfeasibleOrderingError, InvalidProblemError
from .models import Problem

NONE = -1


def _job_links(problem: Problem) -> tuple[list[int], list[int]]:
    n = problem.operation_count
    pred = [NONE] * n
    succ = [NONE] * n
    for job in problem.jobs:
        for a, b in zip(job, job[1:]):
            pred[b.id] = a.id
            succ[a.id] = b.id
    return pred, succ


class ScheduleGraph:
    """Candidate solution: one processing order per machine.

    Instances are cheap to derive from each other with :meth:`apply_move`;
    per-machine lists are shared copy-on-write and never mutated in place, so
    a graph handed to another solver can not be changed behind its back.
    """

    def __init__(
        self,
        problem: Problem,
        sequences: dict[int, list[int]],
        job_links: tuple[list[int], list[int]] | None = None,
        machine_links: tuple[list[int], list[int]] | None = None,
    ) -> None:
        self.problem = problem
        self._sequences = sequences
        self._job_pred, self._job_succ = job_links or _job_links(problem)
        if machine_links is None:
            n = problem.operation_count
            mach_pred = [NONE] * n
            mach_succ = [NONE] * n
            for seq in sequences.values():
                for a, b in zip(seq, seq[1:]):
                    mach_pred[b] = a
                    mach_succ[a] = b
            machine_links = (mach_pred, mach_succ)
        self._mach_pred, self._mach_succ = machine_links
        self._durations = [op.duration for op in problem.operations]
        self._starts: list[int] = []
        self._tails: list[int] = []
        self._makespan = 0
        self._stale = True

    # ------------------------------------------------------------------ build
    @classmethod
    def build(cls, problem: Problem, orderings: Mapping[int, Sequence[int]]) -> "ScheduleGraph":
        """Create a graph from per-machine processing orders and recompute it.

        Args:
            problem: Problem the orderings refer to.
            orderings: Machine id -> sequence of operation ids in processing
                order. Every machine of the problem must be present and list
                each of its operations exactly once.

        Returns:
            Recomputed ScheduleGraph.

        Raises:
            InvalidProblemError: An ordering is incomplete, has duplicates or
                names operations of another machine.
            InfeasibleOrderingError: The orderings together with the job
                order contain a cycle.
        """
        if set(orderings) != set(problem.machine_operations):
            raise InvalidProblemError(
                "Orderings must cover exactly the machines "
                f"{sorted(problem.machine_operations)}, got {sorted(orderings)}"
            )
        sequences: dict[int, list[int]] = {}
        for m, ops in problem.machine_operations.items():
            seq = [int(v) for v in orderings[m]]
            if sorted(seq) != sorted(op.id for op in ops):
                raise InvalidProblemError(f"Ordering for machine {m} is not a permutation")
            sequences[m] = seq
        return cls(problem, sequences).recompute()

    @classmethod
    def from_start_times(cls, problem: Problem, starts: Sequence[int]) -> "ScheduleGraph":
        """Orient machine arcs by sorting each machine's operations by start.

        Ties are broken by duration and then by operation id.
        """
        orderings = {
            m: [
                op.id
                for op in sorted(ops, key=lambda o: (starts[o.id], o.duration, o.id))
            ]
            for m, ops in problem.machine_operations.items()
        }
        return cls.build(problem, orderings)

    # -------------------------------------------------------------- recompute
    def recompute(self) -> "ScheduleGraph":
        """Derive start times, tails and makespan by a topological pass.

        Returns:
            ``self`` (for chaining).

        Raises:
            InfeasibleOrderingError: The graph contains a cycle.
        """
        n = self.problem.operation_count
        jp, js, mp, ms = self._job_pred, self._job_succ, self._mach_pred, self._mach_succ
        dur = self._durations

        indegree = [(jp[v] != NONE) + (mp[v] != NONE) for v in range(n)]
        queue = deque(v for v in range(n) if indegree[v] == 0)
        order: list[int] = []
        while queue:
            u = queue.popleft()
            order.append(u)
            for s in (js[u], ms[u]):
                if s != NONE:
                    indegree[s] -= 1
                    if indegree[s] == 0:
                        queue.append(s)
        if len(order) != n:
            raise InfeasibleOrderingError(
                f"Machine orderings contain a cycle ({n - len(order)} operations unreachable)"
            )

        starts = [0] * n
        for u in order:
            ready = 0
            if jp[u] != NONE:
                ready = starts[jp[u]] + dur[jp[u]]
            if mp[u] != NONE:
                ready = max(ready, starts[mp[u]] + dur[mp[u]])
            starts[u] = ready

        tails = [0] * n
        for u in reversed(order):
            after = 0
            if js[u] != NONE:
                after = tails[js[u]]
            if ms[u] != NONE:
                after = max(after, tails[ms[u]])
            tails[u] = after + dur[u]

        self._starts = starts
        self._tails = tails
        self._makespan = max(starts[v] + dur[v] for v in range(n))
        self._stale = False
        return self

    def _require_fresh(self) -> None:
        if self._stale:
            raise RuntimeError("Schedule times are stale; call recompute() first")

    @property
    def is_stale(self) -> bool:
        return self._stale

    # ---------------------------------------------------------------- queries
    def makespan(self) -> int:
        self._require_fresh()
        return self._makespan

    def start_time(self, op: int) -> int:
        self._require_fresh()
        return self._starts[op]

    def completion_time(self, op: int) -> int:
        self._require_fresh()
        return self._starts[op] + self._durations[op]

    def tail(self, op: int) -> int:
        """Longest path from the start of ``op`` to the sink (includes ``op``)."""
        self._require_fresh()
        return self._tails[op]

    def start_times(self) -> list[int]:
        self._require_fresh()
        return list(self._starts)

    def job_start_times(self) -> list[list[int]]:
        """Start times per job, in job operation order."""
        self._require_fresh()
        return [[self._starts[op.id] for op in job] for job in self.problem.jobs]

    def machine_sequence(self, machine: int) -> list[int]:
        return list(self._sequences[machine])

    def orderings(self) -> dict[int, list[int]]:
        return {m: list(seq) for m, seq in self._sequences.items()}

    def machine_predecessor(self, op: int) -> int:
        return self._mach_pred[op]

    def job_predecessor(self, op: int) -> int:
        return self._job_pred[op]

    def is_critical(self, op: int) -> bool:
        self._require_fresh()
        return self._starts[op] + self._tails[op] == self._makespan

    def critical_path(self) -> list[int]:
        """One longest source-to-sink path, as operation ids in path order.

        The walk starts at the lowest-id operation finishing at the makespan
        and steps back through a predecessor finishing exactly at the current
        start, preferring the machine predecessor.
        """
        self._require_fresh()
        dur = self._durations
        starts = self._starts
        current = min(
            v for v in range(len(starts)) if starts[v] + dur[v] == self._makespan
        )
        path = [current]
        while starts[current] > 0:
            mp = self._mach_pred[current]
            jp = self._job_pred[current]
            if mp != NONE and starts[mp] + dur[mp] == starts[current]:
                current = mp
            elif jp != NONE and starts[jp] + dur[jp] == starts[current]:
                current = jp
            else:  # pragma: no cover - start > 0 always has a tight predecessor
                raise InfeasibleOrderingError(f"No tight predecessor for operation {current}")
            path.append(current)
        path.reverse()
        return path

    def critical_blocks(self) -> Iterator[tuple[int, ...]]:
        """Yield maximal machine-arc runs of the critical path, in path order.

        Consecutive path operations belong to the same block when the second
        one directly follows the first on their machine. Single-operation
        blocks are yielded as well.
        """
        block: list[int] = []
        for op in self.critical_path():
            if block and self._mach_pred[op] == block[-1]:
                block.append(op)
            else:
                if block:
                    yield tuple(block)
                block = [op]
        if block:
            yield tuple(block)

    # ------------------------------------------------------------------ moves
    def swap_estimate(self, move) -> int:
        """Makespan estimate after exchanging ``move.first`` and ``move.second``.

        Evaluated in O(1) from the current heads and tails (Taillard): new
        start and tail of both swapped operations, everything else unchanged.
        The result is the longest path through either operation in the
        swapped graph, so it never exceeds the recomputed makespan and equals
        it whenever one of the two operations stays critical.

        Args:
            move: Adjacent pair ``first -> second`` on one machine.

        Returns:
            Estimated makespan of ``self.apply_move(move)``.
        """
        self._require_fresh()
        a, b = move.first, move.second
        starts, tails, dur = self._starts, self._tails, self._durations

        def end(v: int) -> int:
            return starts[v] + dur[v] if v != NONE else 0

        def tail(v: int) -> int:
            return tails[v] if v != NONE else 0

        b_start = max(end(self._mach_pred[a]), end(self._job_pred[b]))
        a_start = max(b_start + dur[b], end(self._job_pred[a]))
        a_tail = max(tail(self._mach_succ[b]), tail(self._job_succ[a])) + dur[a]
        b_tail = max(a_tail, tail(self._job_succ[b])) + dur[b]
        return max(b_start + b_tail, a_start + a_tail)

    def apply_move(self, move) -> "ScheduleGraph":
        """Return a new, stale graph with ``move.first`` and ``move.second`` swapped.

        ``self`` is left untouched. Call :meth:`recompute` on the result
        before reading times.

        Raises:
            ValueError: ``move.second`` does not directly follow
                ``move.first`` on ``move.machine``.
        """
        a, b, m = move.first, move.second, move.machine
        if (
            m not in self._sequences
            or self.problem.operations[a].machine != m
            or self._mach_succ[a] != b
        ):
            raise ValueError(f"Operations {a} -> {b} are not adjacent on machine {m}")
        seq = list(self._sequences[m])
        i = seq.index(a)
        seq[i], seq[i + 1] = b, a
        sequences = dict(self._sequences)
        sequences[m] = seq

        mach_pred = list(self._mach_pred)
        mach_succ = list(self._mach_succ)
        before, after = self._mach_pred[a], self._mach_succ[b]
        if before != NONE:
            mach_succ[before] = b
        if after != NONE:
            mach_pred[after] = a
        mach_pred[b], mach_succ[b] = before, a
        mach_pred[a], mach_succ[a] = b, after

        return ScheduleGraph(
            self.problem,
            sequences,
            job_links=(self._job_pred, self._job_succ),
            machine_links=(mach_pred, mach_succ),
        )

    def copy(self) -> "ScheduleGraph":
        clone = ScheduleGraph(
            self.problem,
            dict(self._sequences),
            job_links=(self._job_pred, self._job_succ),
            machine_links=(list(self._mach_pred), list(self._mach_succ)),
        )
        if not self._stale:
            clone._starts = list(self._starts)
            clone._tails = list(self._tails)
            clone._makespan = self._makespan
            clone._stale = False
        return clone

    def __repr__(self) -> str:
        cmax = "stale" if self._stale else self._makespan
        return (
            f"ScheduleGraph(jobs={self.problem.job_count}, "
            f"machines={self.problem.machine_count}, makespan={cmax})"
        )

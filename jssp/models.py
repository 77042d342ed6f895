"""Core data structures for Job Shop instances.

This module defines:
    Job          -- alias describing a single raw operation (machine, duration).
    Operation    -- one operation of the arena, with its dense integer id.
    Problem      -- immutable container with all jobs for one instance.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from .errors import InvalidProblemError

Job = tuple[int, int]  # (machine, duration)


@dataclass(frozen=True)
class Operation:
    """Single operation of a job.

    Attributes:
        id: Dense arena index (job-major order, 0..operation_count-1).
        job: Job the operation belongs to.
        index: Position inside the job's sequence (0-based).
        machine: Machine required by the operation.
        duration: Positive processing time.
    """

    id: int
    job: int
    index: int
    machine: int
    duration: int


@dataclass(frozen=True)
class Problem:
    """Immutable representation of a JSSP instance.

    Build with :meth:`from_jobs`; the constructor expects already validated
    operation tuples. A ``Problem`` is read-only and may be shared by any
    number of schedule graphs and solvers.

    Attributes:
        jobs: ``jobs[j][k]`` -> Operation ``k`` of job ``j``.
        operations: Flat arena, ``operations[op.id] is op``.
        machine_operations: Machine id -> operations requiring it (arena order).
    """

    jobs: tuple[tuple[Operation, ...], ...]
    operations: tuple[Operation, ...]
    machine_operations: dict[int, tuple[Operation, ...]] = field(compare=False)

    @classmethod
    def from_jobs(cls, jobs: Iterable[Sequence[Job]]) -> "Problem":
        """Create a problem from ``jobs[j] = [(machine, duration), ...]``.

        Raises:
            InvalidProblemError: No jobs, an empty job, a negative machine id
                or a non-positive duration.
        """
        job_list = [list(job) for job in jobs]
        if not job_list:
            raise InvalidProblemError("Problem has no jobs")

        operations: list[Operation] = []
        built_jobs: list[tuple[Operation, ...]] = []
        for j, job in enumerate(job_list):
            if not job:
                raise InvalidProblemError(f"Job {j} has no operations")
            ops = []
            for k, pair in enumerate(job):
                try:
                    machine, duration = (int(v) for v in pair)
                except (TypeError, ValueError) as e:
                    raise InvalidProblemError(
                        f"Job {j} operation {k}: expected (machine, duration), got {pair!r}"
                    ) from e
                if machine < 0:
                    raise InvalidProblemError(f"Job {j} operation {k}: negative machine {machine}")
                if duration <= 0:
                    raise InvalidProblemError(
                        f"Job {j} operation {k}: non-positive duration {duration}"
                    )
                op = Operation(
                    id=len(operations), job=j, index=k, machine=machine, duration=duration
                )
                operations.append(op)
                ops.append(op)
            built_jobs.append(tuple(ops))

        by_machine: dict[int, list[Operation]] = {}
        for op in operations:
            by_machine.setdefault(op.machine, []).append(op)
        machine_operations = {m: tuple(by_machine[m]) for m in sorted(by_machine)}
        return cls(
            jobs=tuple(built_jobs),
            operations=tuple(operations),
            machine_operations=machine_operations,
        )

    @property
    def job_count(self) -> int:
        return len(self.jobs)

    @property
    def machines(self) -> list[int]:
        return list(self.machine_operations)

    @property
    def machine_count(self) -> int:
        return len(self.machine_operations)

    @property
    def operation_count(self) -> int:
        return len(self.operations)

    def job_length(self, job: int) -> int:
        """Total processing time of a job."""
        return sum(op.duration for op in self.jobs[job])

    def remaining_work(self, op: Operation) -> int:
        """Processing time of ``op`` and every later operation of its job."""
        return sum(o.duration for o in self.jobs[op.job][op.index :])

    def lower_bound(self) -> int:
        """Trivial makespan lower bound: longest job vs. heaviest machine."""
        longest_job = max(self.job_length(j) for j in range(self.job_count))
        heaviest_machine = max(
            sum(op.duration for op in ops) for ops in self.machine_operations.values()
        )
        return max(longest_job, heaviest_machine)

    def validate(self) -> None:
        """Re-check the structural invariants (used before any search starts).

        Raises:
            InvalidProblemError: If the problem is empty or a machine entry
                has no operations.
        """
        if not self.jobs:
            raise InvalidProblemError("Problem has no jobs")
        for m, ops in self.machine_operations.items():
            if not ops:
                raise InvalidProblemError(f"Machine {m} has no operations")
        for i, op in enumerate(self.operations):
            if op.id != i:
                raise InvalidProblemError(f"Operation arena out of order at {i}")

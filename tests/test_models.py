import dataclasses

import pytest

from jssp.errors import InvalidProblemError
from jssp.models import Operation, Problem


def test_operation_arena_is_job_major(three_by_three: Problem) -> None:
    ids = [[op.id for op in job] for job in three_by_three.jobs]
    assert ids == [[0, 1, 2], [3, 4, 5], [6, 7]]
    for i, op in enumerate(three_by_three.operations):
        assert op.id == i
        assert three_by_three.jobs[op.job][op.index] is op


def test_machine_operations_grouping(three_by_three: Problem) -> None:
    grouped = {m: [op.id for op in ops] for m, ops in three_by_three.machine_operations.items()}
    assert grouped == {0: [0, 3], 1: [1, 5, 6], 2: [2, 4, 7]}
    assert three_by_three.machine_count == 3


def test_remaining_work_and_lower_bound(three_by_three: Problem) -> None:
    first = three_by_three.jobs[1][0]
    assert three_by_three.remaining_work(first) == 2 + 1 + 4
    assert three_by_three.remaining_work(three_by_three.jobs[1][2]) == 4
    # longest job 7 (jobs 0, 1 and 2); machine 1 carries 2 + 4 + 4 = 10
    assert three_by_three.lower_bound() == 10


@pytest.mark.parametrize(
    "jobs",
    [
        [],
        [[]],
        [[(0, 3)], []],
        [[(0, 0)]],
        [[(-1, 2)]],
        [[(0, 2, 1)]],
    ],
)
def test_from_jobs_rejects_invalid(jobs) -> None:
    with pytest.raises(InvalidProblemError):
        Problem.from_jobs(jobs)


def test_validate_accepts_built_problem(two_by_two: Problem) -> None:
    two_by_two.validate()


def test_operation_is_identified_by_arena_id(two_by_two: Problem) -> None:
    names = [f.name for f in dataclasses.fields(Operation)]
    assert names == ["id", "job", "index", "machine", "duration"]
    assert not hasattr(two_by_two.operations[0], "key")

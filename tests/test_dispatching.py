from __future__ import annotations

import random

import pytest
from conftest import TWO_BY_TWO, brute_force_optimum, random_problem

from jssp.dispatching import (
    DispatchRule,
    construct,
    construct_random,
    construct_sequential,
    random_orderings,
)
from jssp.graph import ScheduleGraph
from jssp.models import Problem
from jssp.parser import parse_instance
from jssp.report import verify_schedule

SIZES = [(1, 1), (1, 4), (3, 1), (3, 3), (6, 6), (20, 15)]


@pytest.mark.parametrize("rule", list(DispatchRule))
@pytest.mark.parametrize("jobs,machines", SIZES)
def test_every_rule_is_feasible(rule: DispatchRule, jobs: int, machines: int) -> None:
    problem = random_problem(jobs, machines, seed=jobs * 100 + machines)
    graph = construct(problem, rule)
    assert verify_schedule(problem, graph.start_times())
    assert graph.makespan() >= problem.lower_bound()
    for m in problem.machines:
        assert sorted(graph.machine_sequence(m)) == [
            op.id for op in problem.machine_operations[m]
        ]


@pytest.mark.parametrize("jobs,machines", SIZES)
def test_random_and_sequential_are_feasible(jobs: int, machines: int) -> None:
    problem = random_problem(jobs, machines, seed=7)
    for graph in (construct_sequential(problem), construct_random(problem, random.Random(1))):
        assert verify_schedule(problem, graph.start_times())


def test_spt_on_two_by_two_is_optimal() -> None:
    problem = parse_instance(TWO_BY_TWO)
    graph = construct(problem, DispatchRule.SPT)
    assert graph.job_start_times() == [[0, 3], [0, 3]]
    assert graph.makespan() == 6
    assert graph.makespan() == brute_force_optimum(problem)


def test_rule_accepts_string_value(two_by_two: Problem) -> None:
    by_name = construct(two_by_two, "spt")
    assert by_name.orderings() == construct(two_by_two, DispatchRule.SPT).orderings()
    with pytest.raises(ValueError):
        construct(two_by_two, "fifo")


def test_ties_go_to_lowest_job(two_by_two: Problem) -> None:
    # LPT: op0 (3) first, then op1 and op2 tie at 2 -> job 0 wins machine 1
    graph = construct(two_by_two, DispatchRule.LPT)
    assert graph.machine_sequence(1) == [1, 2]
    assert graph.makespan() == 10


def test_mwrm_prefers_more_remaining_work(two_by_two: Problem) -> None:
    graph = construct(two_by_two, DispatchRule.MWRM)
    assert graph.orderings() == {0: [0, 3], 1: [2, 1]}
    assert graph.makespan() == 6


def test_sps_and_lwrm_differ() -> None:
    # SPS works through first operations of every job; LWRM finishes short jobs
    problem = Problem.from_jobs([[(0, 5), (1, 5)], [(1, 1), (0, 1)]])
    sps = construct(problem, DispatchRule.SPS)
    lwrm = construct(problem, DispatchRule.LWRM)
    assert sps.orderings() == {0: [0, 3], 1: [2, 1]}
    assert lwrm.orderings() == {0: [3, 0], 1: [2, 1]}


def test_sequential_is_job_major(two_by_two: Problem) -> None:
    graph = construct_sequential(two_by_two)
    assert graph.orderings() == {0: [0, 3], 1: [1, 2]}
    assert graph.makespan() == 10


def test_random_construction_is_seeded(make_problem) -> None:
    problem = make_problem(5, 4, seed=2)
    a = random_orderings(problem, random.Random(42))
    b = random_orderings(problem, random.Random(42))
    assert a == b
    ScheduleGraph.build(problem, a)


@pytest.mark.parametrize("seed", range(3))
def test_sequential_orders_are_job_major_and_left_shifted(seed: int) -> None:
    problem = random_problem(6, 4, seed)
    graph = construct_sequential(problem)
    for m, seq in graph.orderings().items():
        assert seq == sorted(seq)
        assert seq == [op.id for op in problem.machine_operations[m]]
    total = sum(op.duration for op in problem.operations)
    assert problem.lower_bound() <= graph.makespan() <= total


def test_sequential_overlaps_jobs_on_different_machines() -> None:
    problem = Problem.from_jobs([[(0, 3), (1, 2)], [(0, 1), (1, 4)]])
    graph = construct_sequential(problem)
    assert graph.orderings() == {0: [0, 2], 1: [1, 3]}
    # job 1 starts on machine 0 while job 0 runs on machine 1
    assert graph.start_time(2) == graph.start_time(1) == 3
    assert graph.makespan() == 9 < sum(op.duration for op in problem.operations)

"""Heuristics for the job shop scheduling problem on a disjunctive graph."""

from .algorithms import SearchConfig, SearchResult, available_solvers, solve
from .dispatching import DispatchRule, construct, construct_random, construct_sequential
from .errors import InfeasibleOrderingError, InvalidProblemError, JSSPError, UnknownSolverError
from .graph import ScheduleGraph
from .models import Operation, Problem
from .neighborhood import Move, generate_moves
from .parser import load_instance, parse_instance
from .report import format_report, verify_schedule

__all__ = [
    "DispatchRule",
    "InfeasibleOrderingError",
    "InvalidProblemError",
    "JSSPError",
    "Move",
    "Operation",
    "Problem",
    "ScheduleGraph",
    "SearchConfig",
    "SearchResult",
    "UnknownSolverError",
    "available_solvers",
    "construct",
    "construct_random",
    "construct_sequential",
    "format_report",
    "generate_moves",
    "load_instance",
    "parse_instance",
    "solve",
    "verify_schedule",
]

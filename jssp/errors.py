"""Exception types raised by the scheduling engine.

All engine failures are structural (bad input or a broken invariant), never
transient, so nothing here is meant to be retried.
"""


class JSSPError(Exception):
    """Base class for all engine errors."""


class InvalidProblemError(JSSPError, ValueError):
    """Malformed or empty problem instance (rejected before any search)."""


class InfeasibleOrderingError(JSSPError, RuntimeError):
    """Machine orderings that induce a cycle in the disjunctive graph."""


class UnknownSolverError(JSSPError, ValueError):
    """Requested solver name is not registered."""

    def __init__(self, name: str, available: list[str] | None = None) -> None:
        self.name = name
        self.available = available or []
        msg = f"Unknown solver: {name}"
        if self.available:
            msg += f" (available: {', '.join(self.available)})"
        super().__init__(msg)

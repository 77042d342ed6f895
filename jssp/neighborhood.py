"""Critical-block neighborhood for the disjunctive graph.

For every critical block with at least two operations the generator proposes
exchanging the first two operations of the block and, when the block has three
or more operations, the last two. Both are swaps of adjacent critical
operations on one machine, which can never close a cycle (van Laarhoven,
Aarts & Lenstra), so every generated move keeps the schedule feasible.
Exchanges strictly inside a block are not generated: they can not shorten the
critical path.

The generator never applies moves; callers decide what to do with them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from .graph import ScheduleGraph

TabuKey = tuple[int, tuple[int, int]]


@dataclass(frozen=True)
class Move:
    """Exchange of two adjacent operations ``first -> second`` on ``machine``."""

    machine: int
    first: int
    second: int

    @property
    def key(self) -> TabuKey:
        """Direction-independent identity ``(machine, (low_id, high_id))``."""
        a, b = sorted((self.first, self.second))
        return (self.machine, (a, b))


def generate_moves(graph: ScheduleGraph) -> Iterator[Move]:
    """Lazily yield block-boundary moves of ``graph`` in critical-path order.

    Args:
        graph: Recomputed schedule graph.

    Yields:
        Moves in a fixed order: blocks in path order, the head swap of a block
        before its tail swap. A block of two operations yields a single move.
        Pairs from the same job are skipped (their order is fixed).
    """
    ops = graph.problem.operations
    seen: set[tuple[int, int]] = set()
    for block in graph.critical_blocks():
        if len(block) < 2:
            continue
        machine = ops[block[0]].machine
        for a, b in ((block[0], block[1]), (block[-2], block[-1])):
            if (a, b) in seen or ops[a].job == ops[b].job:
                continue
            seen.add((a, b))
            yield Move(machine=machine, first=a, second=b)

"""Parser for instances in the standard JSSP text format.

Format::

    <jobs> <machines>
    <m> <d> <m> <d> ...     # one line per job, alternating machine / duration

Blank lines and lines starting with ``#`` are ignored. Machine ids may be
0-based or 1-based; 1-based files (no machine 0, every id in ``1..M``) are
normalised to 0-based.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .errors import InvalidProblemError
from .models import Job, Problem

logger = logging.getLogger("jssp.parser")


def _to_ints(tokens: list[str], line_no: int) -> list[int]:
    try:
        return [int(t) for t in tokens]
    except ValueError as e:
        raise InvalidProblemError(f"Line {line_no}: non-integer token") from e


def parse_instance(text: str) -> Problem:
    """Parse instance text into a :class:`Problem`.

    Raises:
        InvalidProblemError: Bad header, missing job lines, odd token count,
            non-positive duration or machine id outside ``0..M-1``.
    """
    lines = [
        (no, line.split())
        for no, line in enumerate(text.splitlines(), start=1)
        if line.strip() and not line.lstrip().startswith("#")
    ]
    if not lines:
        raise InvalidProblemError("Empty instance")

    header_no, header = lines[0]
    header_vals = _to_ints(header, header_no)
    if len(header_vals) < 2:
        raise InvalidProblemError(f"Line {header_no}: header must be '<jobs> <machines>'")
    jobs_number, machines_number = header_vals[0], header_vals[1]
    if jobs_number <= 0 or machines_number <= 0:
        raise InvalidProblemError("Header declares no jobs or no machines")

    body = lines[1:]
    if len(body) < jobs_number:
        raise InvalidProblemError(f"Expected {jobs_number} job lines, found {len(body)}")
    if len(body) > jobs_number:
        logger.warning("Ignoring %d trailing lines after job data", len(body) - jobs_number)

    raw: list[list[Job]] = []
    for no, tokens in body[:jobs_number]:
        vals = _to_ints(tokens, no)
        if not vals or len(vals) % 2:
            raise InvalidProblemError(f"Line {no}: expected machine/duration pairs")
        raw.append([(vals[i], vals[i + 1]) for i in range(0, len(vals), 2)])

    machine_ids = {m for job in raw for (m, _) in job}
    if 0 not in machine_ids and machine_ids and max(machine_ids) <= machines_number:
        logger.debug("Normalising 1-based machine ids")
        raw = [[(m - 1, d) for (m, d) in job] for job in raw]

    for j, job in enumerate(raw):
        for m, _ in job:
            if not (0 <= m < machines_number):
                raise InvalidProblemError(f"Job {j}: machine index out of range: {m}")

    return Problem.from_jobs(raw)


def load_instance(path: str | Path) -> Problem:
    """Read and parse an instance file."""
    with open(path, "r", encoding="utf-8") as f:
        problem = parse_instance(f.read())
    logger.info(
        "Loaded %s: jobs=%d machines=%d ops=%d",
        path,
        problem.job_count,
        problem.machine_count,
        problem.operation_count,
    )
    return problem

"""
Errors raised by the matching pipeline.

The core never recovers from these itself; the CLI and scripts report them
and abort the run without writing anything.
"""

from __future__ import annotations

from typing import Optional


class RouletteError(Exception):
    """Base class for all fatal errors of a matching run."""


class MalformedHistoryEntry(RouletteError, ValueError):
    """A history line does not hold 2 or 3 comma-separated participants."""

    def __init__(self, line: str, line_number: Optional[int] = None, reason: str = ""):
        self.line = line
        self.line_number = line_number
        self.reason = reason
        where = f" (line {line_number})" if line_number is not None else ""
        detail = f": {reason}" if reason else ""
        super().__init__(
            "Encountered unexpected history line, should only contain 2 or 3 "
            f"comma-separated identifiers{where}: {line!r}{detail}"
        )


class NoFeasibleMatching(RouletteError, RuntimeError):
    """No perfect matching was found, even after shrinking the history window."""

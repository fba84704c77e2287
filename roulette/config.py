"""
Configuration for Coffee Roulette.

File locations and the tie-break policy can be overridden through environment
variables (a local `.env` file is picked up by the CLI and scripts via
`python-dotenv`).
"""

from __future__ import annotations

import os
import random
from pathlib import Path
from typing import Any, Callable, Literal, Optional, Sequence, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# =====================================================
# Files
# =====================================================

# A text file with the name or email address of exactly one participant per line
DEFAULT_POOL_FILE = "pool.txt"

# Append-only log of previous matches, one group per line
DEFAULT_HISTORY_FILE = "previous-pairs.csv"

POOL_FILE_ENV = "ROULETTE_POOL_FILE"
HISTORY_FILE_ENV = "ROULETTE_HISTORY_FILE"
TIE_BREAK_ENV = "ROULETTE_TIE_BREAK"
SEED_ENV = "ROULETTE_SEED"

TieBreak = Literal["alphabetical", "random"]

T = TypeVar("T")


class RoulettePolicy(BaseModel):
    """Tunable knobs of the matching pipeline.

    The history window is a heuristic, not a proven bound. With the default
    margins a round may hold `n // 2 + 2` meetings and the window spans
    `(meetings + 2) * (n - 1)` history pairs, which keeps existing history
    files behaving as they always have.

    Fields:
        meeting_margin: Meetings added on top of `n // 2` per round.
        triple_margin: Extra entries per round for triples, which are logged as three pairs.
        tie_break: How to pick among equally good leftover candidates.
        seed: Seed for the "random" tie-break; fixed seeds give reproducible runs.
    """

    model_config = ConfigDict(frozen=True)

    meeting_margin: int = Field(default=2, ge=0)
    triple_margin: int = Field(default=2, ge=0)
    tie_break: TieBreak = "alphabetical"
    seed: Optional[int] = None

    def choose(self, candidates: Sequence[T], key: Optional[Callable[[T], Any]] = None) -> T:
        """Pick one of several equally good candidates."""
        if not candidates:
            raise ValueError("Cannot choose from an empty set of candidates.")
        ordered = sorted(candidates, key=key)  # type: ignore[arg-type, type-var]
        if self.tie_break == "random":
            return random.Random(self.seed).choice(ordered)
        return ordered[0]


def default_pool_file() -> Path:
    return Path(os.environ.get(POOL_FILE_ENV, DEFAULT_POOL_FILE))


def default_history_file() -> Path:
    return Path(os.environ.get(HISTORY_FILE_ENV, DEFAULT_HISTORY_FILE))


def policy_from_env(
    tie_break: Optional[str] = None,
    seed: Optional[int] = None,
) -> RoulettePolicy:
    """Build the policy from explicit values, falling back to the environment."""
    chosen_tie_break = tie_break or os.environ.get(TIE_BREAK_ENV, "alphabetical")
    if seed is None and os.environ.get(SEED_ENV):
        seed = int(os.environ[SEED_ENV])
    return RoulettePolicy(tie_break=chosen_tie_break, seed=seed)  # type: ignore[arg-type]

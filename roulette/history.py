"""
History model and history-window sizing.

The history log is a chronological list of records (oldest first). For
matching purposes every record is exploded into pairs; the three pairs of a
triple sit next to each other, at the position of the triple.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Sequence

from .config import RoulettePolicy
from .data_models import HistoryRecord, Pair

logger = logging.getLogger(__name__)


def meetings_per_round(num_participants: int, policy: Optional[RoulettePolicy] = None) -> int:
    """How many meetings a single round may contain (with a small safety margin)."""
    policy = policy or RoulettePolicy()
    return num_participants // 2 + policy.meeting_margin


def history_entries_to_consider(num_participants: int, policy: Optional[RoulettePolicy] = None) -> int:
    """Number of most recent history pairs that count as "too recent to repeat".

    In a round-robin every pair can meet once in `n - 1` rounds, so that is
    how many rounds we can hope to go without repeating a meeting. The triple
    margin accounts for three-way meetings being logged as three pairs.
    """
    policy = policy or RoulettePolicy()
    max_rounds_without_repeat = num_participants - 1
    per_round = meetings_per_round(num_participants, policy) + policy.triple_margin
    return per_round * max_rounds_without_repeat


def history_cutoff_index(
    total_history: int,
    num_participants: int,
    policy: Optional[RoulettePolicy] = None,
) -> int:
    return max(0, total_history - history_entries_to_consider(num_participants, policy))


class HistoryModel:
    """Read-only view over the history log."""

    def __init__(self, records: Iterable[HistoryRecord] = ()):
        self._records = tuple(records)
        self._pairs = tuple(pair for record in self._records for pair in record.pairs())

    @property
    def pairs(self) -> Sequence[Pair]:
        """All past pairs, oldest first."""
        return self._pairs

    def triples(self) -> List[HistoryRecord]:
        return [record for record in self._records if record.is_triple]

    def window(self, num_participants: int, policy: Optional[RoulettePolicy] = None) -> List[Pair]:
        """The recent slice of pairs the next round should avoid."""
        cutoff = history_cutoff_index(len(self._pairs), num_participants, policy)
        logger.debug(
            "History window: %d of %d pairs (cutoff index %d)",
            len(self._pairs) - cutoff,
            len(self._pairs),
            cutoff,
        )
        return list(self._pairs[cutoff:])

    def extended(self, records: Iterable[HistoryRecord]) -> "HistoryModel":
        return HistoryModel([*self._records, *records])

    def __len__(self) -> int:
        return len(self._pairs)

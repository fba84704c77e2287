"""
Dry-run several rounds in a row to see how the history window behaves.

Useful when tuning RoulettePolicy: every simulated round is appended to an
in-memory copy of the history, exactly as a weekly job would do.
"""

from __future__ import annotations

from typing import Iterable, List, Optional

from pydantic import BaseModel, Field

from .config import RoulettePolicy
from .data_models import HistoryRecord
from .history import HistoryModel
from .matcher import generate_round
from .matching_models import MatchRound


class RoundReport(BaseModel):
    round_number: int = Field(..., ge=1)
    match_round: MatchRound
    repeated_pairs: int = Field(default=0, ge=0, description="Pairs that already met at any point before")


def simulate_rounds(
    pool: Iterable[str],
    records: Iterable[HistoryRecord] = (),
    rounds: int = 1,
    policy: Optional[RoulettePolicy] = None,
) -> List[RoundReport]:
    if rounds < 1:
        raise ValueError("Need to simulate at least one round.")
    participants = list(pool)
    history = HistoryModel(records)
    reports: List[RoundReport] = []
    for number in range(1, rounds + 1):
        match_round = generate_round(participants, history, policy)
        seen = set(history.pairs)
        repeated = sum(1 for pair in match_round.pairs() if pair in seen)
        reports.append(RoundReport(round_number=number, match_round=match_round, repeated_pairs=repeated))
        history = history.extended(HistoryRecord(members=group.members) for group in match_round.groups)
    return reports

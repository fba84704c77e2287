from __future__ import annotations

from typing import List, Sequence

import pandas as pd

from .data_models import HistoryRecord
from .matching_models import MatchRound
from .simulate import RoundReport

ROUND_COLUMNS = ["group_index", "participant_a", "participant_b", "participant_c", "is_triple"]
SUMMARY_COLUMNS = ["participant_a", "participant_b", "meetings", "records_ago"]


def round_frame(match_round: MatchRound) -> pd.DataFrame:
    """Tabular view of a round, one row per group (third column empty for pairs)."""
    rows = []
    for i, group in enumerate(match_round.groups, start=1):
        members = list(group.members) + [""] * (3 - len(group.members))
        rows.append(
            {
                "group_index": i,
                "participant_a": members[0],
                "participant_b": members[1],
                "participant_c": members[2],
                "is_triple": group.is_triple,
            }
        )
    return pd.DataFrame(rows, columns=ROUND_COLUMNS)


def history_summary(records: Sequence[HistoryRecord]) -> pd.DataFrame:
    """How often each pair met, and how many records ago they last met (0 = newest record).

    Triples count as a meeting for each of their three pairs.
    """
    rows = [
        {"participant_a": pair.left, "participant_b": pair.right, "record_index": i}
        for i, record in enumerate(records)
        for pair in record.pairs()
    ]
    if not rows:
        return pd.DataFrame(columns=SUMMARY_COLUMNS)

    df = pd.DataFrame(rows)
    summary = (
        df.groupby(["participant_a", "participant_b"])
        .agg(meetings=("record_index", "size"), last_index=("record_index", "max"))
        .reset_index()
    )
    summary["records_ago"] = len(records) - 1 - summary["last_index"]
    return (
        summary[SUMMARY_COLUMNS]
        .sort_values(["meetings", "records_ago", "participant_a", "participant_b"], ascending=[False, True, True, True])
        .reset_index(drop=True)
    )


def simulation_frame(reports: List[RoundReport]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "round": r.round_number,
                "groups": len(r.match_round.groups),
                "leftover": r.match_round.leftover or "",
                "excluded_history": r.match_round.excluded_history,
                "repeated_pairs": r.repeated_pairs,
            }
            for r in reports
        ],
        columns=["round", "groups", "leftover", "excluded_history", "repeated_pairs"],
    )

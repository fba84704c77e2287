from typing import List

import pytest

from roulette.data_models import HistoryRecord, Pair


def make_records(*lines: str) -> List[HistoryRecord]:
    """Build history records from "a, b" / "a, b, c" strings."""
    return [HistoryRecord(members=tuple(m.strip() for m in line.split(","))) for line in lines]


def assert_perfect_matching(groups, pool) -> None:
    """Every participant appears in exactly one group, and no pair repeats."""
    members = [m for group in groups for m in group]
    assert sorted(members) == sorted(pool)
    pairs = [Pair.of(a, b) for group in groups for i, a in enumerate(group) for b in group[i + 1:]]
    assert len(pairs) == len(set(pairs))


@pytest.fixture
def four() -> List[str]:
    return ["a", "b", "c", "d"]


@pytest.fixture
def pool_files(tmp_path):
    """Write a pool (and optionally a history) file and return both paths."""

    def _write(pool: List[str], history: str = None):
        pool_path = tmp_path / "pool.txt"
        pool_path.write_text("\n".join(pool) + "\n", encoding="utf-8")
        history_path = tmp_path / "previous-pairs.csv"
        if history is not None:
            history_path.write_text(history, encoding="utf-8")
        return pool_path, history_path

    return _write

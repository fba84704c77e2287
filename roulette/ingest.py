from __future__ import annotations

from pathlib import Path
from typing import Iterable, List

from pydantic import ValidationError

from .data_models import HistoryRecord, normalize_identifier
from .errors import MalformedHistoryEntry
from .matching_models import MatchRound


def _read_lines(path: Path) -> List[str]:
    return path.read_text(encoding="utf-8").splitlines()


def parse_pool(lines: Iterable[str]) -> List[str]:
    """Normalize pool lines, dropping blanks and duplicates (first occurrence wins)."""
    participants = (normalize_identifier(line) for line in lines)
    return list(dict.fromkeys(p for p in participants if p))


def read_pool(path: Path) -> List[str]:
    return parse_pool(_read_lines(path))


def parse_history_line(line: str, line_number: int | None = None) -> HistoryRecord:
    fields = line.split(",")
    # A trailing comma adds no participant
    while fields and not fields[-1].strip():
        fields.pop()
    if len(fields) < 2:
        raise MalformedHistoryEntry(line, line_number)
    try:
        return HistoryRecord(members=tuple(fields))
    except ValidationError as e:
        reason = "; ".join(err["msg"] for err in e.errors())
        raise MalformedHistoryEntry(line, line_number, reason) from e


def parse_history(lines: Iterable[str]) -> List[HistoryRecord]:
    """Parse history log lines into records, oldest first.

    Blank lines are separators between rounds and carry no meaning.

    Raises:
        MalformedHistoryEntry: On the first line that is not 2 or 3 identifiers.
    """
    records: List[HistoryRecord] = []
    for number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        records.append(parse_history_line(line, number))
    return records


def read_history(path: Path) -> List[HistoryRecord]:
    """Read the history log; a log that does not exist yet is an empty history."""
    if not path.exists():
        return []
    return parse_history(_read_lines(path))


def append_round(path: Path, match_round: MatchRound) -> None:
    """Append a round to the history log, separated from the previous one by a blank line."""
    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    chunks: List[str] = []
    if existing.strip():
        if not existing.endswith("\n"):
            chunks.append("\n")
        chunks.append("\n")
    chunks.extend(f"{line}\n" for line in match_round.lines())
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as f:
        f.write("".join(chunks))

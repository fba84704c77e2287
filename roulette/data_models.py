from __future__ import annotations

from typing import Any, Iterable, List, Tuple

from pydantic import BaseModel, ConfigDict, field_validator, model_validator


def normalize_identifier(raw: str) -> str:
    """Trim and case-fold a participant identifier (name or email)."""
    return str(raw).strip().casefold()


class Pair(BaseModel):
    """
    An unordered pair of participants, i.e. Pair.of(a, b) == Pair.of(b, a).

    Members are stored in canonical (lexicographic) order so equal pairs hash
    identically and can be used as set members and dict keys.
    """

    model_config = ConfigDict(frozen=True)

    left: str
    right: str

    @model_validator(mode="before")
    @classmethod
    def _canonical_order(cls, data: Any) -> Any:
        if isinstance(data, dict) and "left" in data and "right" in data:
            left, right = data["left"], data["right"]
            if left == right:
                raise ValueError(f"A pair needs two distinct participants, got {left!r} twice")
            if right < left:
                return {**data, "left": right, "right": left}
        return data

    @classmethod
    def of(cls, a: str, b: str) -> "Pair":
        return cls(left=a, right=b)

    @classmethod
    def from_members(cls, members: Iterable[str]) -> "Pair":
        """Build a pair from any collection holding exactly two participants."""
        items = list(members)
        if len(items) != 2:
            raise ValueError(f"A pair needs exactly two participants, got {len(items)}")
        return cls(left=items[0], right=items[1])

    @property
    def key(self) -> Tuple[str, str]:
        return (self.left, self.right)

    @property
    def members(self) -> Tuple[str, str]:
        return (self.left, self.right)

    def contains(self, participant: str) -> bool:
        return participant == self.left or participant == self.right

    def __contains__(self, participant: object) -> bool:
        return isinstance(participant, str) and self.contains(participant)

    def partner(self, participant: str) -> str:
        """Return the other member of the pair.

        Raises:
            ValueError: If `participant` is not part of this pair.
        """
        if participant == self.left:
            return self.right
        if participant == self.right:
            return self.left
        raise ValueError(f"{participant!r} is not part of pair ({self})")

    def overlaps(self, other: "Pair") -> bool:
        return self.contains(other.left) or self.contains(other.right)

    def __str__(self) -> str:
        return f"{self.left}, {self.right}"


class HistoryRecord(BaseModel):
    """
    One line of the history log: a past 2-way meeting or a 3-way group.

    Members keep the order in which they were recorded.
    """

    model_config = ConfigDict(frozen=True)

    members: Tuple[str, ...]

    @field_validator("members", mode="before")
    @classmethod
    def _normalize_members(cls, members: Any) -> Any:
        if isinstance(members, (list, tuple)):
            return tuple(normalize_identifier(m) for m in members)
        return members

    @field_validator("members")
    @classmethod
    def _two_or_three_distinct(cls, members: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(members) not in (2, 3):
            raise ValueError(f"A history record holds 2 or 3 participants, got {len(members)}")
        if any(not m for m in members):
            raise ValueError("History records cannot contain empty identifiers")
        if len(set(members)) != len(members):
            raise ValueError(f"History record repeats a participant: {', '.join(members)}")
        return members

    @property
    def is_triple(self) -> bool:
        return len(self.members) == 3

    def pairs(self) -> List[Pair]:
        """Explode the record into its pairs (a triple yields all three of them)."""
        if not self.is_triple:
            return [Pair.of(*self.members)]
        a, b, c = self.members
        return [Pair.of(a, b), Pair.of(a, c), Pair.of(b, c)]

    def __str__(self) -> str:
        return ", ".join(self.members)

# pydantic models for the results of a matching round
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .data_models import Pair


class MatchGroup(BaseModel):
    """A single meeting of this round.

    Fields:
        members: Two participants, or three when the leftover participant was
            folded into a pair. In a triple the leftover is listed first.
    """

    model_config = ConfigDict(frozen=True)

    members: Tuple[str, ...]

    @field_validator("members")
    @classmethod
    def _two_or_three(cls, members: Tuple[str, ...]) -> Tuple[str, ...]:
        if len(members) not in (2, 3):
            raise ValueError(f"A match group holds 2 or 3 participants, got {len(members)}")
        return members

    @classmethod
    def from_pair(cls, pair: Pair) -> "MatchGroup":
        return cls(members=pair.members)

    @classmethod
    def triple(cls, leftover: str, pair: Pair) -> "MatchGroup":
        return cls(members=(leftover, pair.left, pair.right))

    @property
    def is_triple(self) -> bool:
        return len(self.members) == 3

    def pairs(self) -> List[Pair]:
        return [
            Pair.of(a, b)
            for i, a in enumerate(self.members)
            for b in self.members[i + 1:]
        ]

    def __str__(self) -> str:
        return ", ".join(self.members)


class MatchRound(BaseModel):
    """Canonical result of one run of the matching pipeline.

    Fields:
        groups: The meetings, the triple (if any) first, then pairs in canonical order.
        leftover: The participant folded into the triple for odd pools.
        excluded_history: Size of the history window that was avoided to get this result.
        participants: Number of distinct participants in the pool.
    """

    groups: List[MatchGroup] = Field(default_factory=list)
    leftover: Optional[str] = None
    excluded_history: int = Field(default=0, ge=0)
    participants: int = Field(default=0, ge=0)

    def lines(self) -> List[str]:
        return [str(group) for group in self.groups]

    def pairs(self) -> List[Pair]:
        """All pairs that meet this round, triples exploded."""
        return [pair for group in self.groups for pair in group.pairs()]

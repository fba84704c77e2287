"""
Handling of the leftover participant when the pool size is odd.

One participant is set aside before matching and folded into one of the
resulting pairs afterwards, forming the round's only three-way group.
"""

from __future__ import annotations

import logging
from typing import AbstractSet, List, Optional, Sequence, Tuple

from .config import RoulettePolicy
from .data_models import Pair
from .history import HistoryModel
from .matching_models import MatchGroup

logger = logging.getLogger(__name__)


def _linearize_triples(history: HistoryModel) -> List[str]:
    """Participants of past triples, ordered by recency of their taking part (newest last)."""
    linearized: List[str] = []
    for record in history.triples():
        for pair in record.pairs():
            linearized.extend(pair.members)
    return linearized


def select_leftover(
    participants: Sequence[str],
    history: HistoryModel,
    policy: Optional[RoulettePolicy] = None,
) -> str:
    """Pick a participant that hasn't recently been part of a three-way group.

    Starting out, everybody could become the leftover. Walking the triple
    history from newest to oldest, people who recently were in a triple are
    thrown out until only one candidate is left (or history runs out, in
    which case the policy's tie-break decides).
    """
    policy = policy or RoulettePolicy()
    if not participants:
        raise ValueError("Cannot select a leftover from an empty pool.")

    candidates = set(participants)
    for participant in reversed(_linearize_triples(history)):
        if len(candidates) == 1:
            break
        candidates.discard(participant)

    leftover = policy.choose(list(candidates))
    logger.debug("Leftover participant: %s (out of %d candidates)", leftover, len(candidates))
    return leftover


def promote_leftover(
    leftover: str,
    matches: AbstractSet[Pair],
    history: HistoryModel,
    policy: Optional[RoulettePolicy] = None,
) -> Tuple[MatchGroup, frozenset]:
    """Fold the leftover into the pair they have had the least recent contact with.

    Walks the full (unwindowed) history from newest to oldest. Every past
    partner of the leftover disqualifies the match they are part of this
    round, until a single match remains or history is exhausted.

    Returns:
        The new three-way group (leftover first) and the remaining pairs.
    """
    policy = policy or RoulettePolicy()
    if not matches:
        raise ValueError("Cannot promote a leftover without any matches to join.")

    candidates = set(matches)
    for pair in reversed(history.pairs):
        if len(candidates) == 1:
            break
        if pair.contains(leftover):
            past_partner = pair.partner(leftover)
            candidates = {match for match in candidates if not match.contains(past_partner)}

    chosen = policy.choose(list(candidates), key=lambda pair: pair.key)
    logger.debug("Leftover %s joins %s", leftover, chosen)
    return MatchGroup.triple(leftover, chosen), frozenset(matches) - {chosen}

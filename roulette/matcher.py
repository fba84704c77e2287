"""
This is the engine that matches participants for the next round.
It is responsible for:

- Setting aside a leftover participant if the pool size is odd
- Building the universe of all potential pairs
- Excluding every pair seen in the recent history window
- Searching a perfect matching over the remaining pairs by backtracking
    - If there is none, shrinking the window (oldest entries first) and retrying
    - Giving up once the window is down to about a single round
- Folding the leftover participant back in as the round's only triple

The engine is pure: it takes the pool and the history records and returns a
MatchRound. Reading and writing files is left to the caller.
"""
import logging
from itertools import combinations
from typing import AbstractSet, FrozenSet, Iterable, List, Optional, Sequence, Set, Tuple, Union

from .config import RoulettePolicy
from .data_models import HistoryRecord, Pair, normalize_identifier
from .errors import NoFeasibleMatching
from .history import HistoryModel, meetings_per_round
from .leftover import promote_leftover, select_leftover
from .matching_models import MatchGroup, MatchRound

logger = logging.getLogger(__name__)


def potential_pairs(participants: Iterable[str]) -> FrozenSet[Pair]:
    """
    Return the set of all potential pairs between the given participants.

    Args:
        participants: Participant identifiers; duplicates are ignored.

    Returns:
        FrozenSet[Pair]: All two-combinations of the participants.
    """
    unique = sorted(set(participants))
    return frozenset(Pair.of(a, b) for a, b in combinations(unique, 2))


def _participants_of(pairs: Iterable[Pair]) -> Set[str]:
    covered: Set[str] = set()
    for pair in pairs:
        covered.update(pair.members)
    return covered


def _backtrack(
    available: FrozenSet[Pair],
    chosen: Tuple[Pair, ...],
    dead_ends: Set[FrozenSet[Pair]],
) -> Optional[FrozenSet[Pair]]:
    if not available:
        return frozenset(chosen)
    if available in dead_ends:
        return None

    covered = _participants_of(available)
    # Every perfect matching pairs up the first uncovered participant exactly
    # once, so branching on their pairs alone keeps the search complete.
    anchor = min(covered)
    options = sorted((pair for pair in available if pair.contains(anchor)), key=lambda pair: pair.key)

    for pair in options:
        remaining = frozenset(other for other in available if not other.overlaps(pair))
        # Using `pair` must take away exactly its own two participants. If it
        # also strands someone whose only potential partners were in `pair`,
        # that person can no longer be matched and `pair` is not an option.
        if len(covered) - len(_participants_of(remaining)) != 2:
            continue
        found = _backtrack(remaining, chosen + (pair,), dead_ends)
        if found is not None:
            return found

    dead_ends.add(available)
    return None


def search_perfect_matching(
    candidates: AbstractSet[Pair],
    participants: Iterable[str],
) -> Optional[FrozenSet[Pair]]:
    """Find a perfect matching over `participants` using only `candidates`.

    Tries pairs in canonical order and backtracks when it has painted itself
    into a corner, e.g. with candidates [(a, b), (a, c), (b, c), (b, d)]
    picking (b, c) strands a and d, so (a, c) and (b, d) are used instead.

    Returns:
        The matching, or None if the candidates admit no perfect matching.
    """
    wanted = set(participants)
    available = frozenset(pair for pair in candidates if pair.left in wanted and pair.right in wanted)
    if _participants_of(available) != wanted:
        # Somebody has no potential partner left at all
        return None
    return _backtrack(available, (), set())


def find_matches(
    participants: Sequence[str],
    history: HistoryModel,
    policy: Optional[RoulettePolicy] = None,
) -> Tuple[FrozenSet[Pair], int]:
    """Pick the matches that best respect the given history.

    Excludes every pair in the history window from the potential pairs and
    searches a perfect matching over the rest. If there is none, the oldest
    round's worth of entries is dropped from the window and the search runs
    again, until the window is down to a single round.

    Args:
        participants: An even number of distinct participants.
        history: The full history; the window is derived from it.
        policy: Window sizing knobs.

    Returns:
        Tuple of the matches and the size of the window they avoid.

    Raises:
        NoFeasibleMatching: If no window down to the minimum admits a matching.
    """
    policy = policy or RoulettePolicy()
    universe = potential_pairs(participants)
    meetings = meetings_per_round(len(participants), policy)
    window = history.window(len(participants), policy)

    while True:
        candidates = universe - set(window)
        matches = search_perfect_matching(candidates, participants)
        if matches is not None:
            logger.debug("Found %d matches avoiding %d history pairs", len(matches), len(window))
            return matches, len(window)
        if len(window) <= meetings + 1:
            raise NoFeasibleMatching(
                f"Could not find any matches for {len(participants)} participants, "
                f"even when only avoiding the last {len(window)} history pairs."
            )
        logger.debug(
            "No matching avoids %d history pairs, dropping the oldest %d",
            len(window),
            meetings,
        )
        window = window[meetings:]


def generate_round(
    pool: Iterable[str],
    history: Union[HistoryModel, Iterable[HistoryRecord]] = (),
    policy: Optional[RoulettePolicy] = None,
) -> MatchRound:
    """Compute the matches for the next round.

    The result contains one group of three people iff the number of distinct
    participants is odd.

    Raises:
        NoFeasibleMatching: If the pool is too small or no matching respects the history.
    """
    policy = policy or RoulettePolicy()
    if not isinstance(history, HistoryModel):
        history = HistoryModel(history)

    normalized = (normalize_identifier(p) for p in pool)
    participants: List[str] = list(dict.fromkeys(p for p in normalized if p))
    total = len(participants)
    if total < 2:
        raise NoFeasibleMatching(f"Need at least two participants to match, got {total}.")

    leftover: Optional[str] = None
    if total % 2 != 0:
        leftover = select_leftover(participants, history, policy)
        # Ensure an even number of participants so we can find a perfect match
        participants.remove(leftover)

    matches, excluded = find_matches(participants, history, policy)

    groups: List[MatchGroup] = []
    if leftover is not None:
        triple, matches = promote_leftover(leftover, matches, history, policy)
        groups.append(triple)
    groups.extend(MatchGroup.from_pair(pair) for pair in sorted(matches, key=lambda pair: pair.key))

    return MatchRound(
        groups=groups,
        leftover=leftover,
        excluded_history=excluded,
        participants=total,
    )

"""Tests for the matching engine and the full round pipeline."""

import pytest

from roulette.data_models import HistoryRecord, Pair
from roulette.errors import NoFeasibleMatching
from roulette.history import HistoryModel
from roulette.matcher import find_matches, generate_round, potential_pairs, search_perfect_matching
from roulette.simulate import simulate_rounds
from tests.conftest import assert_perfect_matching, make_records


def _pairs(*names):
    return {Pair.of(*name.split("-")) for name in names}


def test_potential_pairs_are_all_two_combinations(four):
    universe = potential_pairs(four + ["a"])
    assert len(universe) == 6
    assert Pair.of("d", "a") in universe


def test_potential_pairs_of_single_participant_is_empty():
    assert potential_pairs(["a"]) == frozenset()


def test_search_backtracks_out_of_a_corner(four):
    # Picking (b, c) would leave a and d without partners
    candidates = _pairs("a-b", "a-c", "b-c", "b-d")
    assert search_perfect_matching(candidates, four) == _pairs("a-c", "b-d")


def test_search_fails_if_someone_has_no_candidates(four):
    assert search_perfect_matching(_pairs("a-b", "a-c", "b-c"), four) is None


def test_search_fails_without_perfect_matching(four):
    # b, c and d can only meet a
    assert search_perfect_matching(_pairs("a-b", "a-c", "a-d"), four) is None


def test_search_ignores_candidates_outside_participants():
    assert search_perfect_matching(_pairs("a-b", "a-z"), ["a", "b"]) == _pairs("a-b")


def test_search_over_empty_pool_is_trivially_perfect():
    assert search_perfect_matching(set(), []) == frozenset()


def test_search_is_deterministic():
    pool = [f"p{i:02d}" for i in range(12)]
    first = search_perfect_matching(potential_pairs(pool), pool)
    assert first == search_perfect_matching(potential_pairs(pool), pool)


def test_example_empty_history_four_participants():
    match_round = generate_round(["A", "B", "C", "D"])
    assert match_round.leftover is None
    assert len(match_round.groups) == 2
    assert_perfect_matching([g.members for g in match_round.groups], ["a", "b", "c", "d"])


def test_example_three_participants_form_a_single_triple():
    match_round = generate_round(["A", "B", "C"])
    assert match_round.leftover in {"a", "b", "c"}
    assert len(match_round.lines()) == 1
    assert sorted(match_round.groups[0].members) == ["a", "b", "c"]
    assert match_round.lines() == ["a, b, c"]


def test_example_recent_pair_is_not_repeated(four):
    match_round = generate_round(four, make_records("a, b"))
    result = set(match_round.pairs())
    assert Pair.of("a", "b") not in result
    assert result in (_pairs("a-c", "b-d"), _pairs("a-d", "b-c"))


def test_pool_is_normalized_and_deduplicated():
    match_round = generate_round([" Alice", "BOB", "alice ", ""])
    assert match_round.participants == 2
    assert match_round.lines() == ["alice, bob"]


@pytest.mark.parametrize("pool", [[], ["a"], ["a", "A "]])
def test_too_few_participants(pool):
    with pytest.raises(NoFeasibleMatching):
        generate_round(pool)


def test_window_shrinks_when_everything_was_seen(four):
    # Three rounds used up every pair of four people
    history = HistoryModel(make_records("a, b", "c, d", "a, c", "b, d", "a, d", "b, c"))
    matches, excluded = find_matches(four, history)
    # Dropping the oldest round's worth (4 entries) frees up the first round
    assert excluded == 2
    assert matches == _pairs("a-b", "c-d")


def test_no_feasible_matching_once_window_is_minimal():
    with pytest.raises(NoFeasibleMatching):
        generate_round(["a", "b"], make_records("a, b"))


def test_exclusion_respected_when_feasible():
    pool = ["a", "b", "c", "d", "e", "f"]
    history = make_records("a, b", "c, d", "e, f", "a, c", "b, e", "d, f")
    match_round = generate_round(pool, history)
    assert match_round.excluded_history == 6
    assert not set(match_round.pairs()) & set(HistoryModel(history).pairs)
    assert_perfect_matching([g.members for g in match_round.groups], pool)


def test_odd_pool_puts_leftover_first_in_triple():
    pool = ["a", "b", "c", "d", "e"]
    match_round = generate_round(pool)
    triple = match_round.groups[0]
    assert triple.is_triple
    assert triple.members[0] == match_round.leftover
    assert sum(g.is_triple for g in match_round.groups) == 1
    assert_perfect_matching([g.members for g in match_round.groups], pool)


def test_leftover_avoids_recent_triple_members():
    pool = ["a", "b", "c", "d", "e", "f", "g"]
    match_round = generate_round(pool, make_records("a, b, c", "d, e", "f, g"))
    assert match_round.leftover not in {"a", "b", "c"}
    assert_perfect_matching([g.members for g in match_round.groups], pool)


@pytest.mark.parametrize("n", [4, 6, 8, 10, 12])
def test_perfect_matching_over_consecutive_rounds(n):
    pool = [f"p{i:02d}" for i in range(n)]
    reports = simulate_rounds(pool, rounds=3)
    for report in reports:
        groups = [g.members for g in report.match_round.groups]
        assert len(groups) == n // 2
        assert_perfect_matching(groups, pool)
        assert report.repeated_pairs == 0


def test_odd_pool_over_consecutive_rounds():
    pool = [f"p{i:02d}" for i in range(7)]
    reports = simulate_rounds(pool, rounds=2)
    leftovers = [r.match_round.leftover for r in reports]
    assert leftovers[0] != leftovers[1]
    for report in reports:
        assert_perfect_matching([g.members for g in report.match_round.groups], pool)


def test_mixed_case_history_matches_normalized_pool():
    history = [HistoryRecord(members=(" A", "B "))]
    match_round = generate_round(["A", "B", "C", "D"], history)
    assert Pair.of("a", "b") not in set(match_round.pairs())
    assert match_round.excluded_history == 1

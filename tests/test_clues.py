import pytest

from clues import NO_MORE_INFO, PRESENTED, ClueProgressionEngine
from fairness import CLUE_DIFFICULTY, clue_category


@pytest.fixture()
def clue_engine(tracker, rng):
    return ClueProgressionEngine(tracker, rng)


@pytest.fixture()
def pair(make_city):
    source = make_city("source")
    target = make_city(
        "target",
        difficult=["d1", "d2"],
        medium=["m1", "m2"],
        easy=["e1", "e2"],
    )
    return source, target


def test_tier_fall_through_then_no_more_info(clue_engine, pair):
    source, target = pair
    collected = []
    tiers, levels = [], []

    for _ in range(6):
        request = clue_engine.request_clues(source, target, collected)
        assert request.status == PRESENTED
        assert len(request.clues) == 1
        collected.extend(request.clues)
        tiers.append(request.clues[0].difficulty)
        levels.append(request.level)

    assert tiers == ["difficult", "difficult", "medium", "medium", "easy", "easy"]
    assert levels == ["hard", "hard", "medium", "medium", "easy", "easy"]
    assert sorted(c.text for c in collected) == ["d1", "d2", "e1", "e2", "m1", "m2"]

    final = clue_engine.request_clues(source, target, collected)
    assert final.status == NO_MORE_INFO
    assert final.is_exhausted
    assert final.clues == []


def test_presented_clues_carry_source_and_target(clue_engine, pair):
    source, target = pair
    clue = clue_engine.request_clues(source, target, []).clues[0]
    assert clue.source_city == "source"
    assert clue.about_city == "target"
    assert clue.id


def test_empty_pools_give_no_more_info_immediately(clue_engine, make_city):
    request = clue_engine.request_clues(make_city("a"), make_city("b"), [])
    assert request.status == NO_MORE_INFO


def test_clues_from_another_source_do_not_block(clue_engine, pair, make_city):
    source, target = pair
    other = make_city("other")
    seen_elsewhere = [clue_engine.request_clues(other, target, []).clues[0]]

    request = clue_engine.request_clues(source, target, seen_elsewhere)
    assert request.clues[0].difficulty == "difficult"


def test_select_clues_without_replacement(clue_engine, pair):
    _, target = pair
    picked = clue_engine.select_clues(target, "medium", max_per_tier=5)
    assert sorted(picked) == ["m1", "m2"]


def test_select_clues_respects_exclude(clue_engine, pair):
    _, target = pair
    assert clue_engine.select_clues(target, "easy", 2, exclude=["e1"]) == ["e2"]
    assert clue_engine.select_clues(target, "easy", 2, exclude=["e1", "e2"]) == []


def test_unknown_tier_raises(clue_engine, pair):
    _, target = pair
    with pytest.raises(KeyError):
        clue_engine.select_clues(target, "impossible")


def test_difficulty_distribution_is_recorded(clue_engine, pair, tracker):
    source, target = pair
    collected = []
    for _ in range(3):
        collected.extend(clue_engine.request_clues(source, target, collected).clues)
    assert tracker.counts(CLUE_DIFFICULTY) == {"difficult": 2, "medium": 1}


def test_remaining_counts(clue_engine, pair):
    source, target = pair
    collected = clue_engine.request_clues(source, target, []).clues
    assert clue_engine.remaining_counts(source, target, collected) == {
        "difficult": 1,
        "medium": 2,
        "easy": 2,
    }


def test_select_clues_prefers_rarely_drawn_strings(clue_engine, pair, tracker):
    _, target = pair
    tracker.record_selection(clue_category("difficult"), "d1")
    tracker.record_selection(clue_category("difficult"), "d1")
    assert clue_engine.select_clues(target, "difficult") == ["d2"]

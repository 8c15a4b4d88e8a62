import copy
import json

import pytest

from config import GAME_CONFIG
from errors import InvalidActionError
from game_engine import NO_MORE_INFO_LINE, GameEngine, should_present_final_destination
from models import GameStats, SessionState
from random_source import SeededRandomSource
from session import SessionLifecycleManager


def wrong_city(engine):
    state = engine.state
    return next(c.id for c in engine.manager.catalog if c.id not in state.route)


def travel_correctly(engine):
    expected = engine.state.next_city_id()
    engine.begin_travel()
    return engine.guess_destination(expected)


def test_start_game_routes_and_enters_investigation(engine):
    result = engine.start_game()
    state = engine.state

    assert state.phase == "investigation"
    assert state.is_initialized
    assert state.current_clue_level == "hard"
    assert result.outcome == "started"
    city = engine.city(state.current_city_id)
    assert result.dialogue == ((city.informant.name, city.informant.greeting),)


def test_start_game_only_from_intro(started):
    with pytest.raises(InvalidActionError) as excinfo:
        started.start_game()
    assert excinfo.value.action == "start_game"


def test_request_clues_presents_hard_clue_about_next_city(started):
    result = started.request_clues()
    state = started.state

    assert result.outcome == "presented"
    assert len(result.clues) == 1
    clue = result.clues[0]
    assert clue.difficulty == "difficult"
    assert clue.source_city == state.current_city_id
    assert clue.about_city == state.next_city_id()
    assert state.collected_clues == [clue]
    assert state.current_clue_level == "hard"


def test_request_clues_until_exhausted(started):
    levels = []
    for _ in range(6):
        started.request_clues()
        levels.append(started.state.current_clue_level)
    assert levels == ["hard", "hard", "medium", "medium", "easy", "easy"]

    result = started.request_clues()
    assert result.outcome == "no_more_info"
    assert result.dialogue[0][1] == NO_MORE_INFO_LINE
    assert len(started.state.collected_clues) == 6
    texts = [c.text for c in started.state.collected_clues]
    assert len(set(texts)) == 6


@pytest.mark.parametrize("requests_made, points", [(0, 3), (1, 3), (3, 2), (5, 1)])
def test_correct_guess_scores_by_clue_level(started, requests_made, points):
    for _ in range(requests_made):
        started.request_clues()
    origin = started.state.current_city_id

    result = travel_correctly(started)
    state = started.state

    assert result.outcome == "correct"
    assert result.points_awarded == points
    assert state.stats.score == points
    assert state.stats.cities_completed == 1
    assert state.route_index == 1
    assert state.current_city_id == state.route[1]
    assert state.visited_cities == [origin]
    assert state.current_clue_level == "hard"
    assert state.phase == "investigation"


def test_full_winning_playthrough(started):
    for _ in range(4):
        started.request_clues()
        travel_correctly(started)

    state = started.state
    assert state.is_at_final_city()
    assert state.stats.score == 12
    assert state.stats.cities_completed == 4
    assert should_present_final_destination(state)
    assert started.snapshot().milestone
    assert state.final_encounter_step == 0

    speakers = [started.snapshot().encounter_line[0]]
    speakers.append(started.continue_encounter().dialogue[0][0])
    speakers.append(started.continue_encounter().dialogue[0][0])
    assert speakers == ["Nadine Vuan", "Steve", "Case Closed"]

    result = started.continue_encounter()
    assert result.outcome == "conclusion"
    assert state.phase == "conclusion"
    assert state.is_game_complete
    assert state.has_won
    assert state.final_encounter_step is None


def test_cannot_travel_from_final_city(started):
    for _ in range(4):
        travel_correctly(started)
    with pytest.raises(InvalidActionError):
        started.begin_travel()


def test_request_clues_at_final_city_advances_encounter(started):
    for _ in range(4):
        travel_correctly(started)
    assert started.state.final_encounter_step == 0
    started.request_clues()
    assert started.state.final_encounter_step == 1


def test_wrong_guess_with_one_attempt_ends_game(started):
    started.state.stats.attempts_remaining = 1
    started.begin_travel()
    guess = wrong_city(started)

    result = started.guess_destination(guess)
    state = started.state

    assert result.outcome == "game_over"
    assert state.phase == "game_over"
    assert state.is_game_complete
    assert not state.has_won
    assert state.stats.attempts_remaining == 0
    details = state.failure_details
    assert details.reason == "attempts_exhausted"
    assert details.route_progress == "0/5"
    assert details.next_destination == started.city(state.route[1]).name
    assert details.investigation_path == started.city(state.route[0]).name


def test_attempts_decrease_monotonically(started):
    started.begin_travel()
    guesses = [c.id for c in started.manager.catalog if c.id not in started.state.route][:3]
    seen = []
    for guess in guesses:
        result = started.guess_destination(guess)
        seen.append(started.state.stats.attempts_remaining)
    assert seen == [2, 1, 0]
    assert result.outcome == "game_over"

    with pytest.raises(InvalidActionError):
        started.guess_destination(guesses[0])
    assert started.state.stats.attempts_remaining == 0


def test_wrong_guess_stays_in_travel_with_not_here_line(started):
    started.begin_travel()
    guess = wrong_city(started)
    result = started.guess_destination(guess)

    assert result.outcome == "incorrect"
    assert started.state.phase == "travel"
    assert result.dialogue[0][1] == started.city(guess).not_here_response


@pytest.mark.parametrize(
    "setup, guess",
    [
        ("investigating", "next"),
        ("travelling", "atlantis"),
        ("travelling", "current"),
        ("travelling_later", "visited"),
    ],
)
def test_invalid_guesses_leave_state_untouched(started, store, setup, guess):
    if setup == "travelling_later":
        travel_correctly(started)
    if setup != "investigating":
        started.begin_travel()
    state = started.state
    target = {
        "next": state.next_city_id(),
        "atlantis": "atlantis",
        "current": state.current_city_id,
        "visited": state.visited_cities[0] if state.visited_cities else None,
    }[guess]

    before = copy.deepcopy(state)
    stored = store.get(GAME_CONFIG.storage_key)

    with pytest.raises(InvalidActionError):
        started.guess_destination(target)

    assert started.state == before
    assert store.get(GAME_CONFIG.storage_key) == stored


def test_guess_without_route_is_rejected(engine):
    with pytest.raises(InvalidActionError):
        engine.guess_destination("paris")


def test_back_to_investigation(started):
    started.begin_travel()
    started.back_to_investigation()
    assert started.state.phase == "investigation"
    with pytest.raises(InvalidActionError):
        started.back_to_investigation()


def test_farewell_depends_on_help(started):
    city = started.city(started.state.current_city_id)
    result = started.begin_travel()
    assert result.dialogue[0][1] == city.informant.farewell_unhelpful

    started.back_to_investigation()
    started.request_clues()
    result = started.begin_travel()
    assert result.dialogue[0][1] == city.informant.farewell_helpful


def test_every_action_persists(started, store):
    started.request_clues()
    record = json.loads(store.get(GAME_CONFIG.storage_key))
    assert len(record["collectedClues"]) == 1

    started.begin_travel()
    record = json.loads(store.get(GAME_CONFIG.storage_key))
    assert record["phase"] == "travel"


def test_restart_gives_blank_intro_and_can_start_again(started):
    old_id = started.state.session_id
    started.request_clues()

    result = started.restart()

    assert result.outcome == "reset"
    assert started.state.session_id != old_id
    assert started.state.phase == "intro"
    assert started.state.collected_clues == []
    started.start_game()
    assert started.state.is_initialized


def test_snapshot_is_a_copy(started):
    snap = started.snapshot()
    snap.stats.score = 99
    assert started.state.stats.score == 0
    with pytest.raises(AttributeError):
        snap.phase = "conclusion"


def test_destination_options_exclude_current_and_visited(started):
    travel_correctly(started)
    ids = {c.id for c in started.destination_options()}
    assert started.state.current_city_id not in ids
    assert not ids & set(started.state.visited_cities)


def test_engine_resumes_restored_session(started, store, catalog, tracker):
    started.request_clues()
    manager = SessionLifecycleManager(store, catalog, SeededRandomSource(3), tracker)
    manager.restore()
    resumed = GameEngine(manager)

    assert resumed.state.session_id == started.state.session_id
    assert resumed.state.phase == "investigation"
    resumed.begin_travel()


def test_should_present_final_destination_is_pure():
    state = SessionState(route=["a", "b", "c", "d", "e"], stats=GameStats(cities_completed=4))
    assert should_present_final_destination(state)
    assert not should_present_final_destination(SessionState(stats=GameStats(cities_completed=4)))
    assert not should_present_final_destination(SessionState(route=["a", "b", "c", "d", "e"]))


def test_snapshot_counts_clues_left_to_ask(started):
    assert started.snapshot().clues_remaining == {"difficult": 2, "medium": 2, "easy": 2}
    started.request_clues()
    assert started.snapshot().clues_remaining == {"difficult": 1, "medium": 2, "easy": 2}

    for _ in range(4):
        travel_correctly(started)
    assert started.snapshot().clues_remaining == {}

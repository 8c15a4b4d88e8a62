import math
from collections import Counter

import pytest

from errors import RouteGenerationError
from fairness import STARTING_CITY, FairnessTracker
from random_source import SeededRandomSource
from routing import RouteGenerator, RouteValidation, select_starting_city, validate_route


def assert_route_invariants(route, catalog):
    by_id = {c.id: c for c in catalog}
    assert len(route) == 5
    assert len(set(route)) == 5
    assert all(city_id in by_id for city_id in route)
    assert by_id[route[-1]].is_final
    assert not any(by_id[city_id].is_final for city_id in route[:4])


def test_generates_valid_route_from_bundled_catalog(catalog, tracker, rng):
    route = RouteGenerator().generate(catalog, tracker, rng)

    assert_route_invariants(route, catalog)
    assert route[-1] == "buenos_aires"
    assert validate_route(route, catalog).is_valid
    assert tracker.history(STARTING_CITY) == route[:4]


def test_route_invariants_hold_across_many_seeds(catalog):
    tracker = FairnessTracker()
    generator = RouteGenerator()
    for seed in range(200):
        route = generator.generate(catalog, tracker, SeededRandomSource(seed))
        assert_route_invariants(route, catalog)


def test_same_seed_gives_same_route(catalog):
    first = RouteGenerator().generate(catalog, FairnessTracker(), SeededRandomSource(7))
    second = RouteGenerator().generate(catalog, FairnessTracker(), SeededRandomSource(7))
    assert first == second


def test_no_final_city(make_city, tracker, rng):
    cities = [make_city(f"c{i}") for i in range(6)]
    with pytest.raises(RouteGenerationError):
        RouteGenerator().generate(cities, tracker, rng)


def test_more_than_one_final_city(make_city, tracker, rng):
    cities = [make_city(f"c{i}") for i in range(6)]
    cities += [make_city("f1", is_final=True), make_city("f2", is_final=True)]
    with pytest.raises(RouteGenerationError):
        RouteGenerator().generate(cities, tracker, rng)


def test_too_few_non_final_cities(make_city, tracker, rng):
    cities = [make_city(f"c{i}") for i in range(3)] + [make_city("end", is_final=True)]
    with pytest.raises(RouteGenerationError):
        RouteGenerator().generate(cities, tracker, rng)


def test_exactly_four_non_final_cities_is_enough(make_city, tracker, rng):
    cities = [make_city(f"c{i}") for i in range(4)] + [make_city("end", is_final=True)]
    route = RouteGenerator().generate(cities, tracker, rng)
    assert sorted(route[:4]) == ["c0", "c1", "c2", "c3"]
    assert route[-1] == "end"


def test_retries_after_failed_validation(catalog, tracker, rng, monkeypatch):
    generator = RouteGenerator()
    calls = []
    real = generator.validate_route

    def flaky(route, cities):
        calls.append(route)
        if len(calls) < 3:
            return RouteValidation(is_valid=False, errors=["forced failure"])
        return real(route, cities)

    monkeypatch.setattr(generator, "validate_route", flaky)
    route = generator.generate(catalog, tracker, rng)

    assert len(calls) == 3
    assert route == calls[-1]
    # only the accepted route is recorded for fairness
    assert tracker.history(STARTING_CITY) == route[:4]


def test_gives_up_after_retry_bound(catalog, tracker, rng, monkeypatch):
    generator = RouteGenerator()
    calls = []

    def always_bad(route, cities):
        calls.append(route)
        return RouteValidation(is_valid=False, errors=["forced failure"])

    monkeypatch.setattr(generator, "validate_route", always_bad)
    with pytest.raises(RouteGenerationError):
        generator.generate(catalog, tracker, rng)
    assert len(calls) == 3
    assert tracker.history(STARTING_CITY) == []


def test_validate_route_reports_errors(catalog):
    assert not validate_route(["paris", "rome"], catalog).is_valid

    dupes = validate_route(["paris", "paris", "rome", "tokyo", "buenos_aires"], catalog)
    assert not dupes.is_valid
    assert any("duplicate" in e for e in dupes.errors)

    unknown = validate_route(["paris", "atlantis", "rome", "tokyo", "buenos_aires"], catalog)
    assert any("atlantis" in e for e in unknown.errors)

    final_early = validate_route(["buenos_aires", "paris", "rome", "tokyo", "cairo"], catalog)
    assert not final_early.is_valid
    assert len(final_early.errors) == 2


def test_low_diversity_is_only_a_warning(make_city, tracker, rng):
    cities = [make_city(f"c{i}", country="Same") for i in range(4)]
    cities.append(make_city("end", is_final=True))
    generator = RouteGenerator()

    route = generator.generate(cities, tracker, rng)

    assert len(route) == 5
    assert generator.last_warnings
    assert "diversity" in generator.last_warnings[0]


def test_starting_city_fairness_bound(catalog):
    tracker = FairnessTracker()
    rng = SeededRandomSource(99)
    picks = [select_starting_city(catalog, tracker, rng).id for _ in range(60)]

    non_final = [c for c in catalog if not c.is_final]
    bound = math.ceil(len(picks) / len(non_final)) + tracker.cap_for(STARTING_CITY)
    assert max(Counter(picks).values()) <= bound
    assert "buenos_aires" not in picks


def test_starting_city_never_repeats_within_window(catalog):
    tracker = FairnessTracker()
    rng = SeededRandomSource(5)
    picks = [select_starting_city(catalog, tracker, rng).id for _ in range(50)]
    for i in range(3, len(picks)):
        assert picks[i] not in picks[i - 3:i]


def test_select_starting_city_without_candidates(make_city, tracker, rng):
    with pytest.raises(RouteGenerationError):
        select_starting_city([make_city("end", is_final=True)], tracker, rng)


def test_unrecorded_starting_city_draw(catalog, tracker, rng):
    select_starting_city(catalog, tracker, rng, record=False)
    assert tracker.history(STARTING_CITY) == []


def test_route_opens_with_the_fair_starting_city(catalog):
    expected = select_starting_city(
        catalog, FairnessTracker(), SeededRandomSource(8), record=False
    )
    route = RouteGenerator().generate(catalog, FairnessTracker(), SeededRandomSource(8))
    assert route[0] == expected.id

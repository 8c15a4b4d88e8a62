"""
routing.py
==========
Route generation for a single playthrough.

A route is five city ids: four non-final stops drawn at random (with
FairnessTracker steering away from recent picks) followed by the unique final
city. Every generated route is checked by validate_route() before it is
handed out; a failing build is retried a small fixed number of times before
RouteGenerationError is raised.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

from config import GAME_CONFIG, GameConfig
from errors import RouteGenerationError
from fairness import STARTING_CITY, FairnessTracker
from models import City
from random_source import RandomSource

logger = logging.getLogger("informant_trail.routing")


@dataclass
class RouteValidation:
    """Outcome of validate_route(); warnings never make a route invalid."""

    is_valid: bool
    errors:   List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stats:    Dict[str, object] = field(default_factory=dict)


def validate_route(
    route: Sequence[str],
    catalog: Sequence[City],
    config: GameConfig = GAME_CONFIG,
) -> RouteValidation:
    """
    Check the structural invariants of a route against the catalog.

    Errors: wrong length, duplicate ids, ids missing from the catalog,
    a last element that is not final, a final city in positions 0..3.
    Warning: fewer than `min_route_countries` countries among the stops.
    """
    errors: List[str] = []
    warnings: List[str] = []
    expected_len = config.route_length

    if len(route) != expected_len:
        errors.append(f"Route must contain exactly {expected_len} cities, got {len(route)}")
        return RouteValidation(is_valid=False, errors=errors)

    by_id = {city.id: city for city in catalog}

    if len(set(route)) != len(route):
        errors.append("Route contains duplicate cities")

    for position, city_id in enumerate(route):
        if city_id not in by_id:
            errors.append(f"City at position {position} ({city_id}) not found in catalog")

    last = by_id.get(route[-1])
    if last is None or not last.is_final:
        errors.append(f"Last city ({route[-1]}) is not the final destination")

    for position, city_id in enumerate(route[:-1]):
        city = by_id.get(city_id)
        if city is not None and city.is_final:
            errors.append(f"City at position {position} ({city_id}) is marked as final")

    countries = {by_id[c].country for c in route[:-1] if c in by_id}
    if len(countries) < config.min_route_countries:
        warnings.append(
            f"Route has limited geographic diversity: only {len(countries)} different countries"
        )

    return RouteValidation(
        is_valid=not errors,
        errors=errors,
        warnings=warnings,
        stats={
            "total_cities": len(route),
            "unique_cities": len(set(route)),
            "countries": len(countries),
            "final_destination": route[-1],
        },
    )


def _split_catalog(all_cities: Sequence[City]):
    finals = [c for c in all_cities if c.is_final]
    non_final = [c for c in all_cities if not c.is_final]
    return finals, non_final


class RouteGenerator:
    """
    Builds fair five-city routes.

    Attributes:
        config:        Supplies route length, retry bound and diversity target.
        last_warnings: Soft-check warnings from the most recent successful route.
    """

    def __init__(self, config: GameConfig = GAME_CONFIG) -> None:
        self.config = config
        self.last_warnings: List[str] = []

    def generate(
        self,
        all_cities: Sequence[City],
        fairness_tracker: FairnessTracker,
        random_source: RandomSource,
    ) -> List[str]:
        """
        Return a validated route of city ids.

        Raises:
            RouteGenerationError: no final city, more than one final city,
                too few non-final cities, or every retry failed validation.
        """
        finals, non_final = _split_catalog(all_cities)
        stops = self.config.non_final_stops

        if not finals:
            raise RouteGenerationError("Catalog has no final city")
        if len(finals) > 1:
            raise RouteGenerationError(
                f"Catalog has {len(finals)} final cities; exactly one is required"
            )
        if len(non_final) < stops:
            raise RouteGenerationError(
                f"Catalog has {len(non_final)} non-final cities; at least {stops} are required"
            )
        final_city = finals[0]

        last_errors: List[str] = []
        for attempt in range(1, self.config.route_generation_attempts + 1):
            selected = self._draw_stops(non_final, stops, fairness_tracker, random_source)
            route = [city.id for city in selected] + [final_city.id]

            result = self.validate_route(route, all_cities)
            if not result.is_valid:
                last_errors = result.errors
                logger.warning(
                    "Route attempt %d/%d failed validation: %s",
                    attempt,
                    self.config.route_generation_attempts,
                    result.errors,
                )
                continue

            for city in selected:
                fairness_tracker.record_selection(STARTING_CITY, city.id)

            self.last_warnings = list(result.warnings)
            for warning in result.warnings:
                logger.warning("Route %s: %s", route, warning)

            logger.info("Generated route (attempt %d): %s", attempt, " -> ".join(route))
            return route

        raise RouteGenerationError(
            f"No valid route after {self.config.route_generation_attempts} attempts: "
            + "; ".join(last_errors)
        )

    def validate_route(self, route: Sequence[str], catalog: Sequence[City]) -> RouteValidation:
        return validate_route(route, catalog, self.config)

    @staticmethod
    def _draw_stops(
        candidates: Sequence[City],
        count: int,
        tracker: FairnessTracker,
        random_source: RandomSource,
    ) -> List[City]:
        """Draw `count` cities without replacement, fairness first."""
        remaining = list(candidates)
        first = select_starting_city(remaining, tracker, random_source, record=False)
        picked: List[City] = [first]
        remaining.remove(first)
        for _ in range(count - 1):
            eligible = tracker.get_eligible_set(STARTING_CITY, remaining, key=lambda c: c.id)
            choice = eligible[random_source.index(len(eligible))]
            picked.append(choice)
            remaining.remove(choice)
        return picked


def select_starting_city(
    all_cities: Sequence[City],
    fairness_tracker: FairnessTracker,
    random_source: RandomSource,
    record: bool = True,
) -> City:
    """
    Fairly draw a single non-final starting city.

    The pick is recorded under "startingCity" unless `record` is False;
    RouteGenerator records its stops only once the whole route validates.

    Raises:
        RouteGenerationError: the catalog has no non-final city.
    """
    _, non_final = _split_catalog(all_cities)
    if not non_final:
        raise RouteGenerationError("No valid starting cities available")

    eligible = fairness_tracker.get_eligible_set(STARTING_CITY, non_final, key=lambda c: c.id)
    city = eligible[random_source.index(len(eligible))]
    if record:
        fairness_tracker.record_selection(STARTING_CITY, city.id)
    logger.debug("Starting city selected: %s (%s)", city.name, city.id)
    return city

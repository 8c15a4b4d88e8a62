"""
catalog.py
==========
City catalog provider.

load_catalog() accepts:
    - None                 -> the bundled case_data.DEFAULT_GAME_DATA
    - a local JSON path    -> read from disk
    - an http(s) URL       -> fetched with requests, bounded by a timeout

Both the wrapped ({"game_data": {"cities": [...]}}) and the unwrapped
({"cities": [...]}) document shapes are accepted. Every record is validated
with Pydantic before it becomes an immutable models.City; any problem is
collected and surfaced as a single CatalogLoadError.

The loader checks record shape only. How many final cities a playable
catalog needs is RouteGenerator's call; here it is only logged.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import requests
from pydantic import BaseModel, ConfigDict, Field, StrictBool
from pydantic import ValidationError as PydanticValidationError

from case_data import DEFAULT_GAME_DATA
from config import GAME_CONFIG
from errors import CatalogLoadError
from models import City, CluePools, FinalEncounter, Informant

logger = logging.getLogger("informant_trail.catalog")


# ---------------------------------------------------------------------------
# Raw record schema (snake_case keys, as stored in catalog JSON)
# ---------------------------------------------------------------------------

_RAW_CONFIG = ConfigDict(extra="ignore")


class RawCluePools(BaseModel):
    model_config = _RAW_CONFIG

    easy:      List[str] = Field(default_factory=list)
    medium:    List[str] = Field(default_factory=list)
    difficult: List[str] = Field(default_factory=list)


class RawInformant(BaseModel):
    model_config = _RAW_CONFIG

    name:               str = Field(min_length=1)
    greeting:           str
    farewell_helpful:   str
    farewell_unhelpful: str


class RawFinalEncounter(BaseModel):
    model_config = _RAW_CONFIG

    nadine_speech:   str
    steve_response:  str
    victory_message: str


class RawCity(BaseModel):
    model_config = _RAW_CONFIG

    id:                str = Field(min_length=1)
    name:              str = Field(min_length=1)
    country:           str = Field(min_length=1)
    is_final:          StrictBool = False
    clues:             RawCluePools = Field(default_factory=RawCluePools)
    informant:         RawInformant
    not_here_response: str = ""
    final_encounter:   Optional[RawFinalEncounter] = None

    def to_city(self) -> City:
        encounter = self.final_encounter
        return City(
            id=self.id,
            name=self.name,
            country=self.country,
            is_final=self.is_final,
            clues=CluePools(
                easy=tuple(self.clues.easy),
                medium=tuple(self.clues.medium),
                difficult=tuple(self.clues.difficult),
            ),
            informant=Informant(
                name=self.informant.name,
                greeting=self.informant.greeting,
                farewell_helpful=self.informant.farewell_helpful,
                farewell_unhelpful=self.informant.farewell_unhelpful,
            ),
            not_here_response=self.not_here_response,
            final_encounter=(
                FinalEncounter(
                    nadine_speech=encounter.nadine_speech,
                    steve_response=encounter.steve_response,
                    victory_message=encounter.victory_message,
                )
                if encounter is not None
                else None
            ),
        )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def _format_pydantic_errors(position: int, exc: PydanticValidationError) -> List[str]:
    problems = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        problems.append(f"cities[{position}].{location}: {err.get('msg')}")
    return problems


def _extract_city_list(data: Any) -> List[Any]:
    if isinstance(data, dict) and isinstance(data.get("game_data"), dict):
        data = data["game_data"]
    if isinstance(data, dict) and "cities" in data:
        cities = data["cities"]
    else:
        raise CatalogLoadError(
            "Catalog document has no cities list",
            ["expected {'game_data': {'cities': [...]}} or {'cities': [...]}"],
        )
    if not isinstance(cities, list):
        raise CatalogLoadError("Catalog 'cities' is not a list", ["cities must be a JSON array"])
    return cities


def parse_catalog(data: Any) -> List[City]:
    """
    Validate a decoded catalog document and build City records.

    Raises:
        CatalogLoadError: with one problem string per bad field or duplicate id.
    """
    raw_cities = _extract_city_list(data)
    problems: List[str] = []
    cities: List[City] = []
    seen_ids: Dict[str, int] = {}

    for position, raw in enumerate(raw_cities):
        try:
            record = RawCity.model_validate(raw)
        except PydanticValidationError as exc:
            problems.extend(_format_pydantic_errors(position, exc))
            continue
        if record.id in seen_ids:
            problems.append(
                f"cities[{position}].id: duplicate id {record.id!r} "
                f"(first seen at cities[{seen_ids[record.id]}])"
            )
            continue
        seen_ids[record.id] = position
        cities.append(record.to_city())

    if not raw_cities:
        problems.append("catalog contains no cities")

    if problems:
        raise CatalogLoadError(f"Catalog has {len(problems)} problem(s)", problems)

    finals = [c.id for c in cities if c.is_final]
    if len(finals) != 1:
        logger.warning("Catalog has %d final cities (%s); exactly one is playable", len(finals), finals)
    for city in cities:
        if city.is_final and city.final_encounter is None:
            logger.warning("Final city %s has no final_encounter dialogue", city.id)

    logger.info("Catalog parsed: %d cities, final=%s", len(cities), finals)
    return cities


# ---------------------------------------------------------------------------
# Sources
# ---------------------------------------------------------------------------

def _is_url(source: str) -> bool:
    return source.startswith(("http://", "https://"))


def _fetch_url(url: str, timeout: float) -> Any:
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response.json()
    except requests.Timeout as exc:
        raise CatalogLoadError(
            f"Timed out fetching catalog from {url}", [f"timeout after {timeout}s"]
        ) from exc
    except requests.RequestException as exc:
        raise CatalogLoadError(f"Cannot fetch catalog from {url}", [str(exc)]) from exc
    except ValueError as exc:
        raise CatalogLoadError(f"Catalog at {url} is not valid JSON", [str(exc)]) from exc


def _read_file(path: Path) -> Any:
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CatalogLoadError(f"Cannot read catalog file {path}", [str(exc)]) from exc
    try:
        return json.loads(text)
    except ValueError as exc:
        raise CatalogLoadError(f"Catalog file {path} is not valid JSON", [str(exc)]) from exc


def load_catalog(
    source: Optional[Union[str, Path]] = None,
    timeout: float = GAME_CONFIG.catalog_timeout_seconds,
) -> List[City]:
    """
    Load and validate the city catalog.

    Args:
        source:  File path, http(s) URL, or None for the bundled catalog.
        timeout: Seconds allowed for a URL fetch.

    Returns:
        List of City records in catalog order.

    Raises:
        CatalogLoadError: on I/O failure, timeout, malformed JSON or records.
    """
    if source is None:
        logger.debug("Using bundled catalog")
        return parse_catalog(DEFAULT_GAME_DATA)

    source_text = str(source)
    if _is_url(source_text):
        logger.info("Fetching catalog from %s (timeout %.1fs)", source_text, timeout)
        data = _fetch_url(source_text, timeout)
    else:
        logger.info("Reading catalog from %s", source_text)
        data = _read_file(Path(source_text))
    return parse_catalog(data)

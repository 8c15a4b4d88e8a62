import pytest

from catalog import load_catalog
from fairness import FairnessTracker
from game_engine import GameEngine
from models import City, CluePools, FinalEncounter, Informant
from random_source import SeededRandomSource
from session import SessionLifecycleManager
from storage import InMemoryStore


def _make_city(
    city_id,
    country=None,
    is_final=False,
    easy=(),
    medium=(),
    difficult=(),
):
    return City(
        id=city_id,
        name=city_id.title(),
        country=country or f"{city_id}-land",
        is_final=is_final,
        clues=CluePools(easy=tuple(easy), medium=tuple(medium), difficult=tuple(difficult)),
        informant=Informant(
            name=f"{city_id} informant",
            greeting="hello",
            farewell_helpful="good luck",
            farewell_unhelpful="sorry",
        ),
        not_here_response=f"not in {city_id}",
        final_encounter=(
            FinalEncounter("nadine", "steve", "victory") if is_final else None
        ),
    )


@pytest.fixture()
def make_city():
    return _make_city


@pytest.fixture()
def catalog():
    return load_catalog()


@pytest.fixture()
def rng():
    return SeededRandomSource(1234)


@pytest.fixture()
def tracker():
    return FairnessTracker()


@pytest.fixture()
def store():
    return InMemoryStore()


@pytest.fixture()
def manager(store, catalog, rng, tracker):
    return SessionLifecycleManager(store, catalog, rng, tracker)


@pytest.fixture()
def engine(manager):
    return GameEngine(manager)


@pytest.fixture()
def started(engine):
    engine.start_game()
    return engine

import json

import pytest
import requests

import catalog as catalog_module
from case_data import DEFAULT_GAME_DATA
from catalog import load_catalog, parse_catalog
from errors import CatalogLoadError


def raw_city(city_id, **overrides):
    record = {
        "id": city_id,
        "name": city_id.title(),
        "country": "Somewhere",
        "is_final": False,
        "clues": {"easy": ["e"], "medium": ["m"], "difficult": ["d"]},
        "informant": {
            "name": "Informant",
            "greeting": "hi",
            "farewell_helpful": "bye",
            "farewell_unhelpful": "sorry",
        },
        "not_here_response": "not here",
    }
    record.update(overrides)
    return record


class FakeResponse:
    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    def raise_for_status(self):
        if self.status >= 400:
            raise requests.HTTPError(f"{self.status} error")

    def json(self):
        return self.payload


def test_bundled_catalog():
    cities = load_catalog()
    assert len(cities) == 11
    finals = [c for c in cities if c.is_final]
    assert [c.id for c in finals] == ["buenos_aires"]
    assert finals[0].final_encounter is not None
    for city in cities:
        assert len(city.clues.difficult) == 2
        assert len(city.clues.medium) == 2
        assert len(city.clues.easy) == 2


def test_wrapped_and_unwrapped_files(tmp_path):
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps(DEFAULT_GAME_DATA), encoding="utf-8")
    unwrapped = tmp_path / "unwrapped.json"
    unwrapped.write_text(json.dumps(DEFAULT_GAME_DATA["game_data"]), encoding="utf-8")

    assert [c.id for c in load_catalog(wrapped)] == [c.id for c in load_catalog(str(unwrapped))]


def test_clue_pools_become_tuples():
    city = parse_catalog({"cities": [raw_city("rome")]})[0]
    assert city.clues.easy == ("e",)
    assert city.final_encounter is None


def test_missing_file(tmp_path):
    with pytest.raises(CatalogLoadError):
        load_catalog(tmp_path / "nope.json")


def test_invalid_json_file(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{oops", encoding="utf-8")
    with pytest.raises(CatalogLoadError) as excinfo:
        load_catalog(path)
    assert excinfo.value.problems


def test_document_without_cities():
    with pytest.raises(CatalogLoadError):
        parse_catalog({"something": []})


def test_bad_records_are_listed():
    bad = raw_city("rome")
    del bad["informant"]
    with pytest.raises(CatalogLoadError) as excinfo:
        parse_catalog({"cities": [raw_city("paris"), bad, raw_city("paris")]})

    problems = excinfo.value.problems
    assert any(p.startswith("cities[1].informant") for p in problems)
    assert any("duplicate id 'paris'" in p for p in problems)


def test_is_final_is_not_coerced():
    with pytest.raises(CatalogLoadError):
        parse_catalog({"cities": [raw_city("rome", is_final="yes")]})


def test_empty_catalog():
    with pytest.raises(CatalogLoadError):
        parse_catalog({"cities": []})


def test_url_source(monkeypatch):
    calls = {}

    def fake_get(url, timeout):
        calls["url"] = url
        calls["timeout"] = timeout
        return FakeResponse({"game_data": {"cities": [raw_city("rome")]}})

    monkeypatch.setattr(catalog_module.requests, "get", fake_get)
    cities = load_catalog("https://example.test/cities.json", timeout=2.5)

    assert [c.id for c in cities] == ["rome"]
    assert calls == {"url": "https://example.test/cities.json", "timeout": 2.5}


def test_url_timeout(monkeypatch):
    def slow_get(url, timeout):
        raise requests.Timeout("too slow")

    monkeypatch.setattr(catalog_module.requests, "get", slow_get)
    with pytest.raises(CatalogLoadError) as excinfo:
        load_catalog("http://example.test/cities.json")
    assert "Timed out" in str(excinfo.value)


def test_url_http_error(monkeypatch):
    monkeypatch.setattr(
        catalog_module.requests, "get", lambda url, timeout: FakeResponse({}, status=503)
    )
    with pytest.raises(CatalogLoadError):
        load_catalog("http://example.test/cities.json")

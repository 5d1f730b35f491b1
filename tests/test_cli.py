"""Tests for the command-line interface."""

import json

import pytest

from calendar_map import cli
from calendar_map.config import get_settings
from calendar_map.geocoding.service import GeocodingService


@pytest.fixture
def fake_service(monkeypatch, make_provider, static_map, downing_street):
    service = GeocodingService(
        make_provider({"10 Downing St": downing_street}), static_map=static_map
    )
    monkeypatch.setattr(
        GeocodingService, "from_settings", classmethod(lambda cls, settings: service)
    )
    return service


def test_no_command_prints_help(capsys):
    assert cli.main([]) == 0
    assert "geocode" in capsys.readouterr().out


def test_geocode_prints_json(capsys, fake_service):
    exit_code = cli.main(["geocode", "PD-2-301", "10 Downing St"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 0
    assert [r["address"] for r in output] == ["PD-2-301", "10 Downing St"]
    assert output[0]["location"]["formattedAddress"] == "262 High Holborn, London WC1V 7EE, UK"
    assert output[1]["location"]["lat"] == 51.5034


def test_geocode_unresolved_exit_code(capsys, fake_service):
    exit_code = cli.main(["geocode", "Atlantis"])

    output = json.loads(capsys.readouterr().out)
    assert exit_code == 1
    assert output == [{"address": "Atlantis", "location": None}]


def test_geocode_without_api_key(capsys, monkeypatch):
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "")
    get_settings.cache_clear()

    exit_code = cli.main(["geocode", "10 Downing St"])

    assert exit_code == 2
    assert "GOOGLE_MAPS_API_KEY" in capsys.readouterr().err

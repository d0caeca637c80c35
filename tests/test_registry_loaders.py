"""Unit tests for the sponsor register and B Corp directory loaders."""

import json
import os
import time

import pytest
import requests

from jobboard import bcorp, sponsor_register
from jobboard.sponsor_register import load_sponsor_register, parse_register

REGISTER_CSV = """Organisation Name,Town/City,County,Type & Rating,Route
"Acme Consulting Ltd",London,,Worker (A rating),Skilled Worker
"Acme Consulting Ltd",London,,Worker (A rating),Global Business Mobility: Senior or Specialist Worker
Beta Energy PLC,Leeds,West Yorkshire,Worker (B rating),Skilled Worker
Gamma Partners LLP,Bristol,,Temporary Worker,Creative Worker

"""


def _age(path, days):
    then = time.time() - days * 86400
    os.utime(path, (then, then))


def test_parse_register_merges_routes():
    entries = parse_register(REGISTER_CSV)
    assert list(entries) == ["acme consulting", "beta energy", "gamma partners"]
    assert entries["acme consulting"]["routes"] == [
        "Skilled Worker",
        "Global Business Mobility: Senior or Specialist Worker",
    ]
    assert entries["acme consulting"]["name"] == "Acme Consulting Ltd"
    assert entries["beta energy"]["rating"] == "B"
    assert entries["beta energy"]["city"] == "Leeds"
    assert entries["gamma partners"]["rating"] == "Unknown"


def test_parse_register_empty():
    assert parse_register("") == {}


def test_download_then_cache(monkeypatch, tmp_path, fake_response):
    cache = tmp_path / "sponsor_cache.json"
    calls = []

    def fake_get(url, **kwargs):
        calls.append(url)
        return fake_response(text=REGISTER_CSV)

    monkeypatch.setattr("jobboard.sponsor_register.requests.get", fake_get)

    snapshot = load_sponsor_register(cache, url="https://example.test/register.csv")
    assert len(snapshot) == 3
    assert snapshot.name == sponsor_register.NAME
    assert calls == ["https://example.test/register.csv"]
    assert json.loads(cache.read_text())["entries"][0][0] == "acme consulting"

    # A fresh cache satisfies the next load without a download.
    again = load_sponsor_register(cache, url="https://example.test/register.csv")
    assert len(calls) == 1
    assert dict(again) == dict(snapshot)


@pytest.fixture
def offline(monkeypatch):
    def fake_get(url, **kwargs):
        raise requests.ConnectionError("offline")

    monkeypatch.setattr("jobboard.sponsor_register.requests.get", fake_get)


def test_download_failure_falls_back_to_stale_cache(tmp_path, offline):
    cache = tmp_path / "sponsor_cache.json"
    cache.write_text(json.dumps({
        "entries": [["acme consulting", {"name": "Acme Consulting Ltd", "rating": "A"}]],
        "updated_at": "2026-01-01T00:00:00+00:00",
    }))
    _age(cache, 3)

    snapshot = load_sponsor_register(cache)
    assert list(snapshot) == ["acme consulting"]
    assert snapshot["acme consulting"]["rating"] == "A"


def test_download_failure_without_cache_is_empty(tmp_path, offline):
    snapshot = load_sponsor_register(tmp_path / "sponsor_cache.json")
    assert len(snapshot) == 0


def test_corrupt_cache_triggers_download(monkeypatch, tmp_path, fake_response):
    cache = tmp_path / "sponsor_cache.json"
    cache.write_text("{truncated")
    monkeypatch.setattr("jobboard.sponsor_register.requests.get", lambda url, **kw: fake_response(text=REGISTER_CSV))
    assert len(load_sponsor_register(cache)) == 3


def test_bcorp_embedded_list_is_cached(tmp_path):
    cache = tmp_path / "bcorp_cache.json"
    snapshot = bcorp.load_bcorp_directory(cache)
    assert "anthesis" in snapshot
    assert "futerra" in snapshot
    data = json.loads(cache.read_text())
    assert data["names"] == list(bcorp.UK_BCORPS)
    assert data["count"] == len(snapshot)


def test_bcorp_fresh_cache_wins(tmp_path):
    cache = tmp_path / "bcorp_cache.json"
    cache.write_text(json.dumps({"names": ["Only One Ltd"]}))
    assert list(bcorp.load_bcorp_directory(cache)) == ["only one"]


def test_bcorp_stale_cache_is_replaced(tmp_path):
    cache = tmp_path / "bcorp_cache.json"
    cache.write_text(json.dumps({"names": ["Only One Ltd"]}))
    _age(cache, 8)
    snapshot = bcorp.load_bcorp_directory(cache)
    assert "only one" not in snapshot
    assert "anthesis" in snapshot

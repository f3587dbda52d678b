import json
from io import BytesIO
from urllib.error import HTTPError, URLError
from urllib.parse import parse_qsl, urlsplit

import pytest

import beymeta.store_client as store_module
from beymeta.store_client import StoreClient, StorePayloadError, StoreUnavailableError


@pytest.fixture
def client():
    return StoreClient("https://league.example.co/", "anon-key", timeout_seconds=5)


def _fake_urlopen(payloads, seen):
    def fake_urlopen(req, timeout=20):
        seen.append((req.full_url, dict(req.header_items()), timeout))
        payload = payloads.pop(0)
        if isinstance(payload, Exception):
            raise payload
        return BytesIO(payload if isinstance(payload, bytes) else json.dumps(payload).encode("utf-8"))
    return fake_urlopen


def test_requires_base_url():
    with pytest.raises(ValueError):
        StoreClient("", "key")


def test_table_url(client):
    url = client.table_url(
        "Beyblade - Blades",
        select="id,name",
        filters={"tournament_id": 7, "status": "confirmed"},
        order="tournament_date.desc",
    )
    parts = urlsplit(url)
    assert parts.path == "/rest/v1/Beyblade%20-%20Blades"
    assert parse_qsl(parts.query) == [
        ("select", "id,name"),
        ("tournament_id", "eq.7"),
        ("status", "eq.confirmed"),
        ("order", "tournament_date.desc"),
    ]


def test_headers_carry_key(client):
    assert client.headers["apikey"] == "anon-key"
    assert client.headers["Authorization"] == "Bearer anon-key"


def test_get_match_results(client, monkeypatch):
    seen = []
    rows = [{"player1_name": "Alice", "winner_name": "Alice"}]
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen([rows], seen))

    assert client.get_match_results(42) == rows
    url, headers, timeout = seen[0]
    assert "match_results" in url
    assert "tournament_id=eq.42" in url
    assert headers["Apikey"] == "anon-key"
    assert timeout == 5


def test_get_part_rows(client, monkeypatch):
    seen = []
    payloads = [[{"Blades": "Dran Sword"}], [{"Ratchet": "3-60"}], [{"Bit": "Flat", "Shortcut": "F"}]]
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen(payloads, seen))

    rows = client.get_part_rows()
    assert rows["bit"] == [{"Bit": "Flat", "Shortcut": "F"}]
    assert len(seen) == 3


def test_rate_limit_retry(client, monkeypatch):
    seen = []
    sleeps = []
    too_many = HTTPError("https://league.example.co", 429, "Too Many Requests", hdrs=None, fp=BytesIO(b"{}"))
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen([too_many, [{"id": "t1"}]], seen))
    monkeypatch.setattr(store_module.time, "sleep", lambda seconds: sleeps.append(seconds))

    assert client.get_tournaments() == [{"id": "t1"}]
    assert len(seen) == 2
    assert sleeps == [StoreClient.RETRY_429_SLEEP_SECONDS]


def test_rate_limit_retries_once(client, monkeypatch):
    errors = [
        HTTPError("https://league.example.co", 429, "Too Many Requests", hdrs=None, fp=BytesIO(b"{}"))
        for _ in range(2)
    ]
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen(errors, []))
    monkeypatch.setattr(store_module.time, "sleep", lambda *_: None)

    with pytest.raises(StoreUnavailableError, match="429"):
        client.get_tournaments()


def test_http_error(client, monkeypatch):
    error = HTTPError("https://league.example.co", 500, "Server Error", hdrs=None, fp=BytesIO(b""))
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen([error], []))

    with pytest.raises(StoreUnavailableError):
        client.get_tournaments()


def test_unreachable(client, monkeypatch):
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen([URLError("no route")], []))

    with pytest.raises(StoreUnavailableError, match="no route"):
        client.get_all_match_results()


def test_non_json_payload(client, monkeypatch):
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen([b"<html>"], []))

    with pytest.raises(StorePayloadError):
        client.get_tournaments()


def test_non_list_payload(client, monkeypatch):
    monkeypatch.setattr(store_module, "urlopen", _fake_urlopen([{"message": "denied"}], []))

    with pytest.raises(StorePayloadError, match="list"):
        client.get_tournaments()

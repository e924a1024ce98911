# api/tests/test_bible_client.py
"""
Tests for bible_client.py - helloao / Bolls.life fetch with requests stubbed out.
"""

import os
import sys

import pytest
import requests

# Add api directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.references import bible_client
from services.references.bible_client import (
    BibleApiClient,
    NetworkError,
    UnresolvedBookError,
    strip_html,
)


class FakeResponse:
    def __init__(self, status_code=200, data=None, bad_json=False):
        self.status_code = status_code
        self._data = data
        self._bad_json = bad_json

    def json(self):
        if self._bad_json:
            raise ValueError("No JSON object could be decoded")
        return self._data


HELLOAO_JOHN_3 = {
    "chapter": {
        "number": 3,
        "content": [
            {"type": "heading", "content": ["For God So Loved the World"]},
            {"type": "verse", "number": 15, "content": ["that everyone who believes in Him may have eternal life."]},
            {"type": "verse", "number": 16, "content": ["For God so loved the world ", {"text": "that He gave"}, " His one and only Son"]},
            {"type": "verse", "number": 17, "content": ["For God did not send His Son into the world to condemn the world."]},
            {"type": "line_break"},
        ],
    }
}

BOLLS_JOHN_3 = [
    {"pk": 1, "verse": 16, "text": "For God so loved the <i>world</i>"},
    {"pk": 2, "verse": 17, "text": "For God did not send His Son"},
]


def _client():
    return BibleApiClient(
        base_url="https://bible.example/api",
        bolls_base_url="https://bolls.example",
        bolls_translations=["NKJV"],
        timeout=5,
    )


def _stub_get(monkeypatch, response=None, error=None):
    calls = []

    def fake_get(url, timeout=None):
        calls.append((url, timeout))
        if error is not None:
            raise error
        return response

    monkeypatch.setattr(bible_client.requests, "get", fake_get)
    return calls


def test_helloao_range(monkeypatch):
    """helloao verses in range are numbered and joined with spaces."""
    calls = _stub_get(monkeypatch, FakeResponse(data=HELLOAO_JOHN_3))

    text = _client().fetch_verse_text("JHN", 3, 16, 17, "BSB")

    assert text == (
        "16 For God so loved the world that He gave His one and only Son "
        "17 For God did not send His Son into the world to condemn the world."
    )
    assert calls == [("https://bible.example/api/BSB/JHN/3.json", 5)]


def test_bolls_translation_by_book_number(monkeypatch):
    """NKJV goes to Bolls.life with the canonical book number and tags stripped."""
    calls = _stub_get(monkeypatch, FakeResponse(data=BOLLS_JOHN_3))

    text = _client().fetch_verse_text("JHN", 3, 16, 16, "nkjv")

    assert text == "16 For God so loved the world"
    assert calls[0][0] == "https://bolls.example/get-text/nkjv/43/3/"


def test_client_is_callable(monkeypatch):
    """The client can be injected wherever a fetch function is expected."""
    _stub_get(monkeypatch, FakeResponse(data=HELLOAO_JOHN_3))
    assert _client()("JHN", 3, 15, 15, "BSB").startswith("15 that everyone")


def test_no_verses_in_range(monkeypatch):
    """An empty range is an unresolved reference, not empty text."""
    _stub_get(monkeypatch, FakeResponse(data=HELLOAO_JOHN_3))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 40, 41, "BSB")


def test_http_404_is_unresolved(monkeypatch):
    _stub_get(monkeypatch, FakeResponse(status_code=404))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 16, 16, "XYZ")


def test_server_errors_are_network_errors(monkeypatch):
    """5xx and 429 responses mean the provider is unavailable."""
    for status in (500, 503, 429):
        _stub_get(monkeypatch, FakeResponse(status_code=status))
        with pytest.raises(NetworkError):
            _client().fetch_verse_text("JHN", 3, 16, 16, "BSB")


def test_transport_errors_are_network_errors(monkeypatch):
    for error in (requests.ConnectionError("refused"), requests.Timeout("slow")):
        _stub_get(monkeypatch, error=error)
        with pytest.raises(NetworkError):
            _client().fetch_verse_text("JHN", 3, 16, 16, "BSB")


def test_malformed_payloads(monkeypatch):
    """Bad JSON or an unexpected shape is an unresolved reference."""
    _stub_get(monkeypatch, FakeResponse(bad_json=True))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 16, 16, "BSB")

    _stub_get(monkeypatch, FakeResponse(data={"unexpected": True}))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 16, 16, "BSB")

    _stub_get(monkeypatch, FakeResponse(data={"detail": "not found"}))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 16, 16, "NKJV")


def test_non_integer_verse_numbers_skipped(monkeypatch):
    """String or missing verse numbers are skipped instead of compared."""
    helloao = {"chapter": {"content": [{"type": "verse", "number": "16", "content": ["For God so loved"]}]}}
    _stub_get(monkeypatch, FakeResponse(data=helloao))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 16, 16, "BSB")

    _stub_get(monkeypatch, FakeResponse(data={"chapter": {"content": None}}))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("JHN", 3, 16, 16, "BSB")

    bolls = [{"pk": 0, "verse": "16", "text": "bad"}, {"pk": 3, "verse": True, "text": "bad"}] + BOLLS_JOHN_3
    _stub_get(monkeypatch, FakeResponse(data=bolls))
    assert _client().fetch_verse_text("JHN", 3, 1, 16, "NKJV") == "16 For God so loved the world"


def test_unknown_book_for_bolls(monkeypatch):
    calls = _stub_get(monkeypatch, FakeResponse(data=BOLLS_JOHN_3))
    with pytest.raises(UnresolvedBookError):
        _client().fetch_verse_text("XYZ", 1, 1, 1, "NKJV")
    assert calls == []


def test_strip_html():
    assert strip_html("<b>In</b> the <i>beginning</i> ") == "In the beginning"

import pytest
import requests

from tradie_hub.vendors import google_places


class DummyResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload or {}
        self._invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError("http error")

    def json(self):
        if self._invalid_json:
            raise ValueError("Expecting value")
        return self._payload


class DummySession:
    def __init__(self):
        self.calls = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.calls.append((url, json, headers, timeout))
        return self.response


@pytest.fixture(autouse=True)
def patch_session(monkeypatch):
    session = DummySession()
    monkeypatch.setattr(google_places, "_SESSION", session)
    return session


def test_search_text_sends_query_and_field_mask(patch_session):
    patch_session.response = DummyResponse(payload={"places": []})
    payload = google_places.search_text("electrician in Perth WA", "key", page_size=10)

    assert payload == {"places": []}
    url, body, headers, timeout = patch_session.calls[0]
    assert url.endswith("places:searchText")
    assert body == {"textQuery": "electrician in Perth WA", "pageSize": 10, "languageCode": "en"}
    assert headers["X-Goog-Api-Key"] == "key"
    assert "places.nationalPhoneNumber" in headers["X-Goog-FieldMask"]
    assert timeout == 10


def test_search_places_returns_empty_list_without_results(patch_session):
    patch_session.response = DummyResponse(payload={})
    assert google_places.search_places("plumber in Perth WA", "key") == []


def test_search_places_returns_places(patch_session):
    place = {"id": "abc", "displayName": {"text": "Dr Sparky"}}
    patch_session.response = DummyResponse(payload={"places": [place]})
    assert google_places.search_places("electrician in Perth WA", "key") == [place]


def test_search_text_error_payload(patch_session):
    patch_session.response = DummyResponse(
        status_code=403,
        payload={"error": {"code": 403, "message": "API key not valid", "status": "PERMISSION_DENIED"}},
    )
    with pytest.raises(google_places.GooglePlacesError, match="API key not valid"):
        google_places.search_text("pizza", "key")


def test_search_text_invalid_json(patch_session):
    patch_session.response = DummyResponse(invalid_json=True)
    with pytest.raises(google_places.GooglePlacesError):
        google_places.search_text("pizza", "key")

"""Client utilities for the Google Places API (New) text search."""

import logging
from typing import Any, Dict, List

import requests

logger = logging.getLogger(__name__)
_SESSION = requests.Session()
_SEARCH_TEXT_URL = "https://places.googleapis.com/v1/places:searchText"
_USER_AGENT = "Perth-Trades-Hub/1.0"
FIELD_MASK = ",".join(
    [
        "places.id",
        "places.displayName",
        "places.formattedAddress",
        "places.nationalPhoneNumber",
        "places.websiteUri",
        "places.rating",
        "places.userRatingCount",
        "places.businessStatus",
        "places.regularOpeningHours",
        "places.types",
        "places.location",
    ]
)


class GooglePlacesError(RuntimeError):
    """Raised when the Places API returns an error payload or an unreadable response."""


def search_text(query: str, api_key: str, page_size: int = 10, language_code: str = "en") -> Dict[str, Any]:
    body = {"textQuery": query, "pageSize": page_size, "languageCode": language_code}
    headers = {
        "Content-Type": "application/json",
        "User-Agent": _USER_AGENT,
        "X-Goog-Api-Key": api_key,
        "X-Goog-FieldMask": FIELD_MASK,
    }
    response = _SESSION.post(_SEARCH_TEXT_URL, json=body, headers=headers, timeout=10)
    try:
        payload = response.json()
    except ValueError as exc:
        raise GooglePlacesError(f"Failed to parse JSON: {exc}") from exc

    error = payload.get("error") if isinstance(payload, dict) else None
    if error:
        message = error.get("message") or error.get("status") or str(error)
        logger.error("searchText failed: status=%s, message=%s", error.get("status"), message)
        raise GooglePlacesError(message)
    response.raise_for_status()
    return payload


def search_places(query: str, api_key: str, page_size: int = 10) -> List[Dict[str, Any]]:
    """Return the candidate places for ``query``; an empty list when there are none."""
    payload = search_text(query, api_key, page_size=page_size)
    places = payload.get("places") or []
    if not isinstance(places, list):
        raise GooglePlacesError("places is not a list")
    return places

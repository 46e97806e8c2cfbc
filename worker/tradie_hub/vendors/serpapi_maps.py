"""SerpAPI Google Maps backend for the tradie search gateway.

Results are reshaped into the Places API (New) place layout so the
normalizer only ever sees one record shape.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from serpapi import GoogleSearch

logger = logging.getLogger(__name__)


class SerpApiError(RuntimeError):
    """Raised when SerpAPI returns an empty or error payload."""


def build_serpapi_params(query: str, api_key: str) -> Dict[str, Any]:
    """Construct SerpAPI request parameters for the Google Maps engine."""
    if not query or not query.strip():
        raise ValueError("Query must be provided for SerpAPI lookups.")
    return {
        "engine": "google_maps",
        "q": query.strip(),
        "api_key": api_key,
        "type": "search",
        "hl": "en",
    }


def fetch_from_serpapi(query: str, api_key: str) -> Dict[str, Any]:
    """Call SerpAPI Google Maps once and return the raw JSON response.

    Every request is billed, so there is no retry here: a failed call is
    reported to the caller and counts against its budget.
    """
    params = build_serpapi_params(query, api_key)
    logger.info("Calling SerpAPI for query=%s", query)
    data = GoogleSearch(params).get_dict()
    if not data:
        raise SerpApiError("SerpAPI returned an empty payload.")
    if "error" in data:
        # "no results" is reported through the error field as well
        message = str(data.get("error") or "")
        if "hasn't returned any results" in message:
            return {"local_results": []}
        raise SerpApiError(f"SerpAPI returned an error response: {message}")
    return data


def search_places(query: str, api_key: str, page_size: int = 10) -> List[Dict[str, Any]]:
    """Return up to ``page_size`` candidates in Places API (New) shape."""
    data = fetch_from_serpapi(query, api_key)
    return [to_place(item) for item in _extract_items(data) if isinstance(item, dict)][:page_size]


def to_place(raw: Dict[str, Any]) -> Dict[str, Any]:
    place: Dict[str, Any] = {
        "id": _strip_or_none(raw.get("place_id") or raw.get("data_id")),
        "displayName": {"text": (raw.get("title") or raw.get("name") or "").strip()},
        "formattedAddress": _strip_or_none(raw.get("address")),
        "nationalPhoneNumber": _strip_or_none(raw.get("phone")),
        "websiteUri": _strip_or_none(raw.get("website")),
        "rating": _safe_float(raw.get("rating")),
        "userRatingCount": _safe_int(raw.get("reviews")),
        "types": _types(raw),
    }
    gps = raw.get("gps_coordinates") or {}
    latitude = _safe_float(gps.get("latitude"))
    longitude = _safe_float(gps.get("longitude"))
    if latitude is not None and longitude is not None:
        place["location"] = {"latitude": latitude, "longitude": longitude}
    return {key: value for key, value in place.items() if value not in (None, "", {"text": ""})}


def _types(raw: Dict[str, Any]) -> List[str]:
    labels = raw.get("types") or ([raw["type"]] if raw.get("type") else [])
    return [str(label).strip().lower().replace(" ", "_") for label in labels if str(label).strip()]


def _extract_items(data: Dict[str, Any]) -> Iterable[Any]:
    """SerpAPI sometimes returns local_results as a list or nested dict."""
    local_results = data.get("local_results")
    if isinstance(local_results, list):
        return local_results
    if isinstance(local_results, dict):
        for maybe in (local_results.get("places"), local_results.get("results")):
            if isinstance(maybe, list):
                return maybe
    place_results = data.get("place_results")
    if isinstance(place_results, dict):
        return [place_results]
    return []


def _strip_or_none(value: Any) -> Optional[str]:
    if value is None:
        return None
    value_str = str(value).strip()
    return value_str or None


def _safe_float(value: Any) -> Optional[float]:
    try:
        if value is None:
            return None
        return float(value)
    except (TypeError, ValueError):
        return None


def _safe_int(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str):
        digits = "".join(ch for ch in value if ch.isdigit())
        if digits:
            return int(digits)
    return None

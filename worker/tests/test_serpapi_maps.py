from unittest.mock import patch

import pytest

from tradie_hub.vendors import serpapi_maps


def test_build_serpapi_params_requires_query():
    with pytest.raises(ValueError):
        serpapi_maps.build_serpapi_params("  ", "key")


def test_to_place_maps_local_result_to_places_shape():
    raw = {
        "place_id": "ChIJ123",
        "title": " Westline Electricians ",
        "address": "12 Hay St, Perth WA 6000",
        "phone": "(08) 9000 0000",
        "website": "https://westline.example",
        "rating": "4.8",
        "reviews": "1,204",
        "type": "Electrician",
        "gps_coordinates": {"latitude": -31.95, "longitude": 115.86},
    }

    place = serpapi_maps.to_place(raw)

    assert place["id"] == "ChIJ123"
    assert place["displayName"] == {"text": "Westline Electricians"}
    assert place["formattedAddress"] == "12 Hay St, Perth WA 6000"
    assert place["nationalPhoneNumber"] == "(08) 9000 0000"
    assert place["rating"] == 4.8
    assert place["userRatingCount"] == 1204
    assert place["types"] == ["electrician"]
    assert place["location"] == {"latitude": -31.95, "longitude": 115.86}


def test_to_place_drops_missing_fields():
    place = serpapi_maps.to_place({"title": "Metro Plumbing", "types": ["Plumber", "Gas installation service"]})
    assert place == {
        "displayName": {"text": "Metro Plumbing"},
        "types": ["plumber", "gas_installation_service"],
    }


@patch("tradie_hub.vendors.serpapi_maps.GoogleSearch")
def test_search_places_limits_to_page_size(mock_search):
    mock_search.return_value.get_dict.return_value = {
        "local_results": [{"title": f"Tradie {index}"} for index in range(5)]
    }

    places = serpapi_maps.search_places("plumber in Perth WA", "key", page_size=2)

    assert [place["displayName"]["text"] for place in places] == ["Tradie 0", "Tradie 1"]
    params = mock_search.call_args[0][0]
    assert params["q"] == "plumber in Perth WA"
    assert params["engine"] == "google_maps"


@patch("tradie_hub.vendors.serpapi_maps.GoogleSearch")
def test_search_places_treats_no_results_error_as_empty(mock_search):
    mock_search.return_value.get_dict.return_value = {"error": "Google hasn't returned any results for this query."}
    assert serpapi_maps.search_places("gas fitter in Mandurah WA", "key") == []


@patch("tradie_hub.vendors.serpapi_maps.GoogleSearch")
def test_fetch_raises_on_error_payload(mock_search):
    mock_search.return_value.get_dict.return_value = {"error": "Invalid API key."}
    with pytest.raises(serpapi_maps.SerpApiError):
        serpapi_maps.fetch_from_serpapi("plumber in Perth WA", "key")
    assert mock_search.call_count == 1

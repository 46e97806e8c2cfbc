import json

import pytest

from tradie_hub.core.config import ConfigError
from tradie_hub.core.profile import DiscoveryProfile, load_profile


def test_default_profile_covers_the_three_trades():
    profile = load_profile()
    assert [category.type for category in profile.categories] == ["electrician", "plumber", "gas_fitter"]
    assert profile.category("gas_fitter").query == "gas fitter"
    assert profile.region.abbreviation == "WA"
    assert "tafe" in profile.filters.exclude_keywords


def test_select_categories_keeps_requested_order():
    profile = DiscoveryProfile()
    assert [category.type for category in profile.select_categories(["plumber", "electrician"])] == [
        "plumber",
        "electrician",
    ]
    assert profile.select_categories(None) == profile.categories


def test_select_unknown_category_raises():
    with pytest.raises(ConfigError):
        DiscoveryProfile().select_categories(["roofer"])


def test_load_profile_from_file(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text(
        json.dumps(
            {
                "region": {
                    "abbreviation": "QLD",
                    "full_name": "Queensland",
                    "metro_area": "Brisbane Metro",
                    "service_area": "Brisbane metro area",
                    "site_name": "Brisbane Trades Hub",
                    "timezone": "Australia/Brisbane",
                },
                "locations": ["Brisbane QLD"],
                "categories": [{"type": "air_conditioning", "licence_type": "Refrigeration Mechanic"}],
                "filters": {"exclude_keywords": ["harvey norman"]},
            }
        )
    )

    profile = load_profile(str(path))

    assert profile.region.metro_area == "Brisbane Metro"
    assert profile.locations == ("Brisbane QLD",)
    category = profile.categories[0]
    assert category.query == "air conditioning"
    assert category.specialties == ("General services",)
    assert profile.filters.exclude_keywords == ("harvey norman",)
    assert profile.filters.relevant_type_fragments == ("contractor", "service")
    assert profile.name_suffixes == DiscoveryProfile().name_suffixes


def test_load_profile_rejects_bad_file(tmp_path):
    path = tmp_path / "profile.json"
    path.write_text(json.dumps({"categories": [{"query": "no type"}]}))
    with pytest.raises(ConfigError):
        load_profile(str(path))

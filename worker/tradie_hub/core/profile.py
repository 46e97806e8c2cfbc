"""Discovery profile: the region, search space and keyword lists driving the pipeline.

Everything region- or trade-specific lives here as data so that adding a
category or pointing the worker at another metro area means editing a
profile (or a JSON override via ``DISCOVERY_PROFILE_FILE``), not code.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from tradie_hub.core.config import ConfigError

logger = logging.getLogger(__name__)

GENERAL_SPECIALTIES = ("General services",)


@dataclass(frozen=True)
class TradeCategory:
    """One searchable trade.

    type: stored ``category`` value (``gas_fitter``).
    query: text used in the search query (``gas fitter``).
    specialties: fixed specialty list copied onto discovered records.
    licence_type: licence class reported when the register confirms a match.
    """

    type: str
    query: str
    specialties: Tuple[str, ...] = GENERAL_SPECIALTIES
    licence_type: str = ""


@dataclass(frozen=True)
class Region:
    """Region markers and display text.

    abbreviation / full_name: an address must contain one of them to pass the region check.
    metro_area: fallback ``areas`` entry when an address yields no locality.
    service_area: region phrase used in generated descriptions.
    site_name / timezone: used when stamping the published page.
    """

    abbreviation: str = "WA"
    full_name: str = "Western Australia"
    metro_area: str = "Perth Metro"
    service_area: str = "Perth metro area"
    site_name: str = "Perth Trades Hub"
    timezone: str = "Australia/Perth"


@dataclass(frozen=True)
class FilterRules:
    """Validity filter inputs.

    exclude_keywords: case-insensitive name fragments of non-tradie results
        (big-box retail, training providers, wholesalers).
    relevant_types: category tags that mark a result as in scope.
    relevant_type_fragments: any tag containing one of these also counts as relevant.
    """

    exclude_keywords: Tuple[str, ...] = (
        "bunnings",
        "masters",
        "home depot",
        "hardware store",
        "supply",
        "warehouse",
        "wholesale",
        "retail",
        "shop",
        "training",
        "course",
        "school",
        "university",
        "tafe",
    )
    relevant_types: Tuple[str, ...] = (
        "electrician",
        "plumber",
        "contractor",
        "home_improvement_store",
        "point_of_interest",
        "establishment",
    )
    relevant_type_fragments: Tuple[str, ...] = ("contractor", "service")


DEFAULT_CATEGORIES = (
    TradeCategory(
        type="electrician",
        query="electrician",
        specialties=("General electrical", "Repairs", "Installations"),
        licence_type="Electrical Contractor",
    ),
    TradeCategory(
        type="plumber",
        query="plumber",
        specialties=("General plumbing", "Repairs", "Maintenance"),
        licence_type="Plumber",
    ),
    TradeCategory(
        type="gas_fitter",
        query="gas fitter",
        specialties=("Gas installations", "Gas repairs", "Safety inspections"),
        licence_type="Gas Fitter",
    ),
)

# Trailing words stripped from business names before querying the licence register.
DEFAULT_NAME_SUFFIXES = (
    "pty",
    "ltd",
    "electrical",
    "plumbing",
    "services",
    "solutions",
    "group",
    "company",
    "co",
    "inc",
)


@dataclass(frozen=True)
class DiscoveryProfile:
    region: Region = field(default_factory=Region)
    locations: Tuple[str, ...] = ("Perth WA", "Fremantle WA", "Joondalup WA", "Mandurah WA")
    categories: Tuple[TradeCategory, ...] = DEFAULT_CATEGORIES
    filters: FilterRules = field(default_factory=FilterRules)
    name_suffixes: Tuple[str, ...] = DEFAULT_NAME_SUFFIXES

    def category(self, type_name: Optional[str]) -> Optional[TradeCategory]:
        for category in self.categories:
            if category.type == type_name:
                return category
        return None

    def select_categories(self, type_names) -> Tuple[TradeCategory, ...]:
        """Return categories for ``type_names`` in the given order; unknown names raise ConfigError."""
        if not type_names:
            return self.categories
        selected = []
        for name in type_names:
            category = self.category(name)
            if category is None:
                known = ", ".join(c.type for c in self.categories)
                raise ConfigError(f"Unknown trade category {name!r}; expected one of: {known}")
            selected.append(category)
        return tuple(selected)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DiscoveryProfile":
        """Build a profile from a JSON mapping; missing sections keep their defaults."""
        defaults = cls()
        region = Region(**data["region"]) if "region" in data else defaults.region
        filters = defaults.filters
        if "filters" in data:
            filters = FilterRules(**{key: tuple(value) for key, value in data["filters"].items()})
        categories = defaults.categories
        if "categories" in data:
            categories = tuple(
                TradeCategory(
                    type=item["type"],
                    query=item.get("query") or item["type"].replace("_", " "),
                    specialties=tuple(item.get("specialties") or GENERAL_SPECIALTIES),
                    licence_type=item.get("licence_type", ""),
                )
                for item in data["categories"]
            )
        return cls(
            region=region,
            locations=tuple(data.get("locations", defaults.locations)),
            categories=categories,
            filters=filters,
            name_suffixes=tuple(data.get("name_suffixes", defaults.name_suffixes)),
        )


def load_profile(path: Optional[str] = None) -> DiscoveryProfile:
    """Return the default profile, or the one described by the JSON file at ``path``."""
    if not path:
        return DiscoveryProfile()

    profile_path = Path(path)
    try:
        data = json.loads(profile_path.read_text(encoding="utf-8"))
        profile = DiscoveryProfile.from_dict(data)
    except (OSError, ValueError, KeyError, TypeError) as exc:
        raise ConfigError(f"Could not load discovery profile from {profile_path}: {exc}") from exc

    logger.info(
        "Loaded discovery profile from %s: %d locations, %d categories",
        profile_path,
        len(profile.locations),
        len(profile.categories),
    )
    return profile

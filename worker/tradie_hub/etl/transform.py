"""Utilities for turning Places search results into tradie records."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from tradie_hub.core.profile import FilterRules, Region, TradeCategory
from tradie_hub.models import Business

logger = logging.getLogger(__name__)

UNKNOWN_BUSINESS = "Unknown Business"


def extract_areas(address: Optional[str], region: Region) -> List[str]:
    """Locality from the second address segment, e.g. ``"1 Hay St, Perth WA 6000"`` -> ``["Perth"]``."""
    if not address:
        return [region.metro_area]
    parts = address.split(",")
    if len(parts) < 2:
        return [region.metro_area]

    segment = parts[1].strip()
    marker = re.search(rf"\s*\b(?:{re.escape(region.abbreviation)}|{re.escape(region.full_name)})\b", segment)
    if marker:
        segment = segment[: marker.start()].strip()
    return [segment] if segment else [region.metro_area]


def describe(category: str, region: Region) -> str:
    return f"Professional {category.replace('_', ' ')} services in {region.service_area}."


def to_business(
    place: Dict[str, Any],
    category: TradeCategory,
    *,
    location: str,
    region: Region,
    provisional_id: int,
    now: Optional[datetime] = None,
) -> Business:
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    name = ((place.get("displayName") or {}).get("text") or "").strip() or UNKNOWN_BUSINESS
    address = (place.get("formattedAddress") or "").strip() or None
    rating = place.get("rating")

    return Business(
        id=provisional_id,
        name=name,
        category=category.type,
        phone=(place.get("nationalPhoneNumber") or "").strip() or None,
        website=(place.get("websiteUri") or "").strip() or None,
        address=address,
        rating=float(rating) if rating is not None else None,
        review_count=int(place.get("userRatingCount") or 0),
        areas=extract_areas(address, region),
        specialties=list(category.specialties),
        description=describe(category.type, region),
        types=list(place.get("types") or []),
        external_id=place.get("id") or None,
        discovered_location=location,
        discovered_date=timestamp,
        last_updated=timestamp,
    )


def rejection_reason(business: Business, rules: FilterRules, region: Region) -> Optional[str]:
    """Return why ``business`` is not an in-scope tradie, or None when it passes."""
    name = business.name.lower()
    for keyword in rules.exclude_keywords:
        if keyword.lower() in name:
            return f"name contains '{keyword}'"

    # no address is not evidence of being out of region
    if business.address and region.abbreviation not in business.address and region.full_name not in business.address:
        return f"address outside {region.abbreviation}"

    types = business.types
    if types and not any(
        type_name in rules.relevant_types or any(fragment in type_name for fragment in rules.relevant_type_fragments)
        for type_name in types
    ):
        return f"irrelevant type: {', '.join(types)}"
    return None


def is_valid_tradie(business: Business, rules: FilterRules, region: Region) -> bool:
    reason = rejection_reason(business, rules, region)
    if reason:
        logger.debug("Excluded %s (%s)", business.name, reason)
        return False
    return True

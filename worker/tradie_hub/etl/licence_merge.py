"""Cross-reference stored tradies against a licensing register.

Only licence fields are ever written. Each record receives the whole licence
field group in a single update, whether or not a licence was found, so a
record never carries a mix of old and new licence data.
"""

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, MutableMapping, Optional, Sequence

from tradie_hub.core.profile import DEFAULT_NAME_SUFFIXES
from tradie_hub.models import LicenceMatch

logger = logging.getLogger(__name__)

LicenceLookup = Callable[[str, str], Optional[LicenceMatch]]

LICENCE_FIELDS = (
    "licensed",
    "licenseVerified",
    "licenseNumber",
    "licenseType",
    "licenseHolderName",
    "licenseStatus",
    "licenseVerifiedDate",
)
NOT_FOUND = "not_found"

# snake_case licence keys left on records by older verification runs
LEGACY_LICENCE_KEYS = {
    "license_verified": "licenseVerified",
    "license_number": "licenseNumber",
    "license_type": "licenseType",
    "license_holder_name": "licenseHolderName",
    "license_status": "licenseStatus",
    "license_verified_date": "licenseVerifiedDate",
}


@dataclass
class LicenceStats:
    checked: int = 0
    licensed: int = 0

    @property
    def unlicensed(self) -> int:
        return self.checked - self.licensed


def _suffix_pattern(suffixes: Sequence[str]) -> re.Pattern:
    alternatives = "|".join(re.escape(suffix) for suffix in suffixes)
    return re.compile(rf"\s+\b(?:{alternatives})\b.*$", re.IGNORECASE)


def generate_search_terms(business_name: str, suffixes: Sequence[str] = DEFAULT_NAME_SUFFIXES) -> List[str]:
    """Ordered, de-duplicated register queries for a business name.

    >>> generate_search_terms("Westline Electrical Pty Ltd")
    ['Westline Electrical Pty Ltd', 'Westline']
    """
    name = " ".join((business_name or "").split())
    if not name:
        return []

    terms = [name]
    clean_name = _suffix_pattern(suffixes).sub("", name).strip() if suffixes else name
    if clean_name != name and len(clean_name) > 2:
        terms.append(clean_name)

    first_word = name.split(" ")[0]
    if len(first_word) > 3:
        terms.append(first_word)

    last_word = (clean_name or name).split(" ")[-1]
    if len(last_word) > 3:
        terms.append(last_word)

    return list(dict.fromkeys(terms))


def licence_fields(match: Optional[LicenceMatch], verified_at: str) -> Dict[str, Any]:
    """The complete licence field group for a verification outcome."""
    if match is None:
        return {
            "licensed": False,
            "licenseVerified": True,
            "licenseNumber": None,
            "licenseType": None,
            "licenseHolderName": None,
            "licenseStatus": NOT_FOUND,
            "licenseVerifiedDate": verified_at,
        }
    return {
        "licensed": True,
        "licenseVerified": True,
        "licenseNumber": match.license_number,
        "licenseType": match.license_type,
        "licenseHolderName": match.holder_name,
        "licenseStatus": match.status,
        "licenseVerifiedDate": verified_at,
    }


def find_licence(
    business_name: str,
    category: str,
    lookup: LicenceLookup,
    suffixes: Sequence[str] = DEFAULT_NAME_SUFFIXES,
) -> Optional[LicenceMatch]:
    """Query ``lookup`` with each search term in order; the first match wins."""
    for term in generate_search_terms(business_name, suffixes):
        logger.debug("Checking register for %r (%s)", term, category)
        try:
            match = lookup(term, category)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Licence lookup failed for %r: %s", term, exc)
            continue
        if match:
            return match
    return None


def verify_record(
    record: MutableMapping[str, Any],
    lookup: LicenceLookup,
    *,
    suffixes: Sequence[str] = DEFAULT_NAME_SUFFIXES,
    now: Optional[datetime] = None,
) -> Optional[LicenceMatch]:
    name = record.get("name") or record.get("business_name") or ""
    category = record.get("category") or record.get("trade_type") or ""
    match = find_licence(name, category, lookup, suffixes)
    verified_at = (now or datetime.now(timezone.utc)).isoformat()
    fields = licence_fields(match, verified_at)
    fields.update({legacy: fields[key] for legacy, key in LEGACY_LICENCE_KEYS.items() if legacy in record})
    record.update(fields)

    if match:
        logger.info("LICENSED: %s -> %s (%s), holder %s", name, match.license_number, match.license_type, match.holder_name)
    else:
        logger.info("NOT LICENSED: no register entry found for %s", name)
    return match


def verify_licences(
    records: Sequence[MutableMapping[str, Any]],
    lookup: LicenceLookup,
    *,
    suffixes: Sequence[str] = DEFAULT_NAME_SUFFIXES,
    delay: float = 2.0,
) -> LicenceStats:
    """Verify every record in order, pausing ``delay`` seconds between register queries."""
    stats = LicenceStats()
    for index, record in enumerate(records):
        if index and delay:
            time.sleep(delay)
        logger.info("%d/%d: %s", index + 1, len(records), record.get("name") or record.get("business_name"))
        match = verify_record(record, lookup, suffixes=suffixes)
        stats.checked += 1
        if match:
            stats.licensed += 1
    return stats

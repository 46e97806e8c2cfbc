"""Identity resolution between newly discovered tradies and the accumulated store."""

from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Set, Union

from tradie_hub.models import Business

# Display fallbacks written by older exports; they are not phone numbers.
PHONE_PLACEHOLDERS = {"contact via website", "no phone"}

RecordLike = Union[Business, Mapping[str, Any]]


@dataclass(frozen=True)
class RecordIdentity:
    name: str
    phone: Optional[str]
    external_id: Optional[str]


def _first(record: Mapping[str, Any], *keys: str) -> Optional[str]:
    for key in keys:
        value = record.get(key)
        if value not in (None, ""):
            return str(value)
    return None


def identity_of(record: RecordLike) -> RecordIdentity:
    """Extract the identity keys from a Business or a stored record of any vintage."""
    if isinstance(record, Business):
        name, phone, external_id = record.name, record.phone, record.external_id
    else:
        name = _first(record, "name", "business_name")
        phone = _first(record, "phone", "nationalPhoneNumber")
        external_id = _first(record, "externalId", "google_place_id", "place_id")

    phone = (phone or "").strip()
    if phone.lower() in PHONE_PLACEHOLDERS:
        phone = ""
    return RecordIdentity(
        name=(name or "").strip().lower(),
        phone=phone or None,
        external_id=(external_id or "").strip() or None,
    )


class DedupIndex:
    """Name, phone and external-id sets for everything already accepted."""

    def __init__(self, records: Iterable[RecordLike] = ()) -> None:
        self._names: Set[str] = set()
        self._phones: Set[str] = set()
        self._external_ids: Set[str] = set()
        for record in records:
            self.add(record)

    def add(self, record: RecordLike) -> None:
        identity = identity_of(record)
        if identity.name:
            self._names.add(identity.name)
        if identity.phone:
            self._phones.add(identity.phone)
        if identity.external_id:
            self._external_ids.add(identity.external_id)

    def matches(self, record: RecordLike) -> bool:
        identity = identity_of(record)
        return bool(
            (identity.name and identity.name in self._names)
            or (identity.phone and identity.phone in self._phones)
            or (identity.external_id and identity.external_id in self._external_ids)
        )


def is_duplicate(existing: Iterable[RecordLike], candidate: RecordLike) -> bool:
    """True when ``candidate`` names the same business as any record in ``existing``."""
    return DedupIndex(existing).matches(candidate)

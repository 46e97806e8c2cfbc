"""File-backed licensing register.

The register answers "is ``search_term`` licensed for ``category``?"
deterministically from a JSON export supplied by the operator. Entries look
like::

    {"category": "electrician", "name": "Dr Sparky", "licenseNumber": "EC18901",
     "holderName": "Dr Sparky Electrical Services", "status": "Current"}
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional

from tradie_hub.models import LicenceMatch

logger = logging.getLogger(__name__)


class LicenceRegisterError(RuntimeError):
    """Raised when the register export cannot be loaded."""


@dataclass(frozen=True)
class RegisterEntry:
    category: str
    name: str
    license_number: str
    holder_name: str
    status: str = "Current"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RegisterEntry":
        return cls(
            category=data["category"],
            name=data["name"],
            license_number=data.get("licenseNumber") or data["license_number"],
            holder_name=data.get("holderName") or data.get("holder_name") or data["name"],
            status=data.get("status", "Current"),
        )


class LicenceRegister:
    """In-memory register with substring matching in either direction."""

    def __init__(self, entries: Iterable[RegisterEntry], licence_types: Optional[Mapping[str, str]] = None) -> None:
        self._entries: List[RegisterEntry] = list(entries)
        self._licence_types = dict(licence_types or {})

    def __len__(self) -> int:
        return len(self._entries)

    def lookup(self, search_term: str, category: str) -> Optional[LicenceMatch]:
        term = (search_term or "").strip().lower()
        if not term:
            return None
        for entry in self._entries:
            if entry.category != category:
                continue
            name = entry.name.lower()
            if term in name or name in term:
                return LicenceMatch(
                    license_number=entry.license_number,
                    license_type=self._licence_types.get(category, category.replace("_", " ").title()),
                    holder_name=entry.holder_name,
                    status=entry.status,
                )
        return None

    @classmethod
    def from_file(cls, path, licence_types: Optional[Mapping[str, str]] = None) -> "LicenceRegister":
        register_path = Path(path)
        try:
            data = json.loads(register_path.read_text(encoding="utf-8"))
            items = data["licences"] if isinstance(data, dict) else data
            entries = [RegisterEntry.from_dict(item) for item in items]
        except (OSError, ValueError, KeyError, TypeError) as exc:
            raise LicenceRegisterError(f"Could not load licence register {register_path}: {exc}") from exc
        logger.info("Loaded %d licence register entries from %s", len(entries), register_path)
        return cls(entries, licence_types)

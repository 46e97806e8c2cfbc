"""Core data models shared by the discovery and licence pipelines."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(slots=True)
class Business:
    """Normalized trade business as stored in ``tradies.json``."""

    id: int
    name: str
    category: str
    phone: Optional[str] = None
    website: Optional[str] = None
    address: Optional[str] = None
    rating: Optional[float] = None
    review_count: int = 0
    areas: List[str] = field(default_factory=list)
    specialties: List[str] = field(default_factory=list)
    description: str = ""
    types: List[str] = field(default_factory=list)
    external_id: Optional[str] = None
    licensed: Optional[bool] = None
    license_number: Optional[str] = None
    owner_recommended: bool = False
    discovered_location: Optional[str] = None
    discovered_date: Optional[str] = None
    last_updated: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the camelCase keys the website reads."""
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "licensed": self.licensed,
            "licenseNumber": self.license_number,
            "rating": self.rating,
            "reviewCount": self.review_count,
            "phone": self.phone,
            "website": self.website,
            "areas": list(self.areas),
            "specialties": list(self.specialties),
            "description": self.description,
            "ownerRecommended": self.owner_recommended,
            "externalId": self.external_id,
            "address": self.address,
            "types": list(self.types),
            "discoveredLocation": self.discovered_location,
            "discoveredDate": self.discovered_date,
            "lastUpdated": self.last_updated,
        }


@dataclass(slots=True, frozen=True)
class LicenceMatch:
    """A positive answer from the licensing register."""

    license_number: str
    license_type: str
    holder_name: str
    status: str = "Current"

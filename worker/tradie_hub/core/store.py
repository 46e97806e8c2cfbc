"""JSON document store holding every known tradie plus derived run metadata."""

import json
import logging
import os
import tempfile
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    """Raised when the store document cannot be read or written."""


class StoreNotFoundError(StoreError):
    """Raised when an operation requires an existing store document."""


@dataclass
class StoreDocument:
    path: Path
    tradies: List[Dict[str, Any]] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def exists(self) -> bool:
        return self.path.exists()


def load_store(path, *, required: bool = False) -> StoreDocument:
    """Read the store at ``path``.

    A missing file yields an empty document unless ``required`` is set, in
    which case StoreNotFoundError is raised. Unparseable content always raises
    StoreError; the store is never silently reset.
    """
    store_path = Path(path)
    if not store_path.exists():
        if required:
            raise StoreNotFoundError(f"{store_path} does not exist; run discovery first")
        logger.info("No store at %s; starting with an empty dataset", store_path)
        return StoreDocument(path=store_path)

    try:
        with store_path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
    except (OSError, ValueError) as exc:
        raise StoreError(f"Could not read store {store_path}: {exc}") from exc

    if not isinstance(payload, dict):
        raise StoreError(f"Store {store_path} must contain a JSON object")
    tradies = payload.get("tradies") or []
    if not isinstance(tradies, list):
        raise StoreError(f"Store {store_path} has a non-list 'tradies' entry")

    metadata = {key: value for key, value in payload.items() if key != "tradies"}
    logger.info("Loaded %d existing tradies from %s", len(tradies), store_path)
    return StoreDocument(path=store_path, tradies=tradies, metadata=metadata)


def next_id(tradies: Sequence[Dict[str, Any]]) -> int:
    ids = [
        record["id"]
        for record in tradies
        if isinstance(record.get("id"), int) and not isinstance(record.get("id"), bool)
    ]
    return max(ids, default=0) + 1


def finalize_ids(existing: Sequence[Dict[str, Any]], new_records: Sequence[Dict[str, Any]]) -> None:
    """Replace provisional ids on ``new_records`` with ids that cannot clash with ``existing``."""
    start = next_id(existing)
    for offset, record in enumerate(new_records):
        record["id"] = start + offset


def trade_breakdown(tradies: Sequence[Dict[str, Any]]) -> Dict[str, int]:
    counts = Counter(record.get("category") or record.get("trade_type") or "unknown" for record in tradies)
    return dict(counts)


def licence_stats(tradies: Sequence[Dict[str, Any]]) -> Dict[str, Any]:
    licensed = sum(1 for record in tradies if record.get("licensed") is True)
    unlicensed = sum(1 for record in tradies if record.get("licensed") is False)
    checked = licensed + unlicensed
    rate = (licensed / checked * 100) if checked else 0.0
    return {
        "totalChecked": checked,
        "licensed": licensed,
        "unlicensed": unlicensed,
        "verificationRate": f"{rate:.1f}%",
    }


def build_document(
    tradies: Sequence[Dict[str, Any]],
    *,
    api_calls_used: int,
    new_tradies_added: int = 0,
    last_licence_check: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Assemble the full store document; every key except ``tradies`` is derived."""
    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "lastUpdated": timestamp,
        "totalTradies": len(tradies),
        "newTradiesAdded": new_tradies_added,
        "apiCallsUsed": api_calls_used,
        "breakdown": trade_breakdown(tradies),
        "licenseVerificationStats": licence_stats(tradies),
        "lastLicenseCheck": last_licence_check,
        "tradies": list(tradies),
    }


def save_store(
    document: StoreDocument,
    new_records: Sequence[Dict[str, Any]] = (),
    *,
    api_calls_used: Optional[int] = None,
    last_licence_check: Optional[str] = None,
    now: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Append ``new_records`` to the loaded records and replace the file in one step.

    ``api_calls_used`` and ``last_licence_check`` default to the values of
    the previous document so passes that make no gateway calls (licence
    checks) do not erase them.
    """
    tradies = list(document.tradies) + list(new_records)
    if api_calls_used is None:
        api_calls_used = int(document.metadata.get("apiCallsUsed") or 0)
    if last_licence_check is None:
        last_licence_check = document.metadata.get("lastLicenseCheck")

    payload = build_document(
        tradies,
        api_calls_used=api_calls_used,
        new_tradies_added=len(new_records),
        last_licence_check=last_licence_check,
        now=now,
    )
    _atomic_write_json(document.path, payload)

    document.tradies = tradies
    document.metadata = {key: value for key, value in payload.items() if key != "tradies"}
    logger.info("Saved %d tradies (%d new) to %s", len(tradies), len(new_records), document.path)
    return payload


def _atomic_write_json(path: Path, payload: Dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, ensure_ascii=False, indent=2)
            fh.write("\n")
        os.replace(tmp_name, path)
    except OSError as exc:
        logger.error("Failed to write store %s: %s", path, exc)
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise StoreError(f"Could not write store {path}: {exc}") from exc

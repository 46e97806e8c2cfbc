"""Publish the store into the static page's embedded ``tradiesData`` block."""

import json
import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence
from zoneinfo import ZoneInfo

from tradie_hub.core.profile import GENERAL_SPECIALTIES, Region, TradeCategory
from tradie_hub.etl.transform import UNKNOWN_BUSINESS, describe, extract_areas

logger = logging.getLogger(__name__)

DATA_MARKER = "const tradiesData = "
PHONE_FALLBACK = "Contact via website"


class PublishError(RuntimeError):
    """Raised when the page cannot be located or does not contain the data block."""


def page_record(
    record: Mapping[str, Any],
    region: Region,
    categories: Sequence[TradeCategory] = (),
) -> Dict[str, Any]:
    """Copy of ``record`` with display defaults in place of missing fields.

    Older records written with snake_case or raw Places keys are read through
    their aliases, and ``areas``/``specialties``/``description`` are derived
    when the record never had them.
    """
    view = dict(record)
    category = record.get("category") or record.get("trade_type") or "general"
    address = record.get("address") or record.get("formattedAddress")

    view["name"] = record.get("name") or record.get("business_name") or UNKNOWN_BUSINESS
    view["category"] = category
    view["phone"] = record.get("phone") or record.get("nationalPhoneNumber") or PHONE_FALLBACK
    view["website"] = record.get("website") or record.get("websiteUri") or ""
    view["address"] = address or region.metro_area
    view["areas"] = list(record.get("areas") or extract_areas(address, region))
    view["rating"] = record.get("rating") or 0
    view["reviewCount"] = record.get("reviewCount") or record.get("review_count") or record.get("userRatingCount") or 0
    view["licenseNumber"] = record.get("licenseNumber") or record.get("license_number")
    if "licensed" not in record:
        view["licensed"] = bool(record.get("license_verified"))
    if not record.get("specialties"):
        known = {trade.type: trade for trade in categories}
        view["specialties"] = list(known[category].specialties if category in known else GENERAL_SPECIALTIES)
    if not record.get("description"):
        view["description"] = describe(category, region)
    view["ownerRecommended"] = bool(record.get("ownerRecommended"))
    return view


def build_page_records(
    tradies: Sequence[Mapping[str, Any]],
    region: Region,
    categories: Sequence[TradeCategory] = (),
) -> List[Dict[str, Any]]:
    return [page_record(record, region, categories) for record in tradies]


def _data_block_end(html: str, array_start: int) -> int:
    try:
        _, end = json.JSONDecoder().raw_decode(html, array_start)
    except ValueError:
        # hand-written pages may hold a JS literal rather than JSON
        end = html.find("];", array_start)
        if end == -1:
            raise PublishError("Could not find the end of the tradiesData array") from None
        logger.warning("tradiesData block is not valid JSON; replacing up to the first '];'")
        end += 1
    if html.startswith(";", end):
        end += 1
    return end


def embed_tradies(html: str, records: Sequence[Mapping[str, Any]]) -> str:
    start = html.find(DATA_MARKER + "[")
    if start == -1:
        raise PublishError("Could not find tradiesData array in page")
    array_start = start + len(DATA_MARKER)
    end = _data_block_end(html, array_start)

    data = json.dumps(list(records), indent=4, ensure_ascii=False).replace("</", "<\\/")
    return f"{html[:start]}{DATA_MARKER}{data};{html[end:]}"


def stamp_last_updated(html: str, region: Region, now: Optional[datetime] = None) -> str:
    local = (now or datetime.now(timezone.utc)).astimezone(ZoneInfo(region.timezone))
    stamp = local.strftime("%d %b %Y, %I:%M %p")
    footer = re.compile(r"<p>(?:Last updated: [^|<]*\| )?(&copy; \d{4} " + re.escape(region.site_name) + r"\.)")
    updated, count = footer.subn(lambda match: f"<p>Last updated: {stamp} | {match.group(1)}", html, count=1)
    if not count:
        logger.warning("Footer copyright line not found; page left without a timestamp")
    return updated


def publish_site(
    html_path,
    tradies: Sequence[Mapping[str, Any]],
    region: Region,
    now: Optional[datetime] = None,
    categories: Sequence[TradeCategory] = (),
) -> List[Dict[str, Any]]:
    page = Path(html_path)
    if not page.exists():
        raise PublishError(f"{page} not found")

    records = build_page_records(tradies, region, categories)
    html = embed_tradies(page.read_text(encoding="utf-8"), records)
    html = stamp_last_updated(html, region, now)
    page.write_text(html, encoding="utf-8")
    logger.info("Updated %s with %d tradies", page, len(records))
    return records


def summarize(records: Sequence[Mapping[str, Any]]) -> Dict[str, int]:
    return {
        "total": len(records),
        "licensed": sum(1 for record in records if record.get("licensed") is True),
        "with_ratings": sum(1 for record in records if (record.get("rating") or 0) > 0),
        "owner_recommended": sum(1 for record in records if record.get("ownerRecommended")),
    }

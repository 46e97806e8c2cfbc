"""CLI job that discovers tradies through the search gateway and accumulates them in the store."""

import argparse
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence

from tradie_hub.core.config import ConfigError, Settings, get_settings
from tradie_hub.core.profile import FilterRules, Region, TradeCategory, load_profile
from tradie_hub.core.store import StoreError, finalize_ids, load_store, save_store
from tradie_hub.etl.dedup import DedupIndex
from tradie_hub.etl.transform import is_valid_tradie, to_business
from tradie_hub.models import Business
from tradie_hub.vendors import google_places, serpapi_maps

logger = logging.getLogger(__name__)

SearchGateway = Callable[[str, int], List[Dict[str, Any]]]


@dataclass
class DiscoveryResult:
    new_tradies: List[Business]
    api_calls_used: int


def build_gateway(settings: Settings) -> SearchGateway:
    """Return ``search(query, page_size) -> places`` for the configured backend."""
    api_key = settings.search_api_key()
    if settings.search_backend == "serpapi":
        return lambda query, page_size: serpapi_maps.search_places(query, api_key, page_size=page_size)
    return lambda query, page_size: google_places.search_places(query, api_key, page_size=page_size)


class DiscoveryRun:
    """Mutable state of one discovery run: call counter, accepted records and the dedup index."""

    def __init__(
        self,
        search: SearchGateway,
        existing: Sequence[Dict[str, Any]],
        *,
        region: Region,
        filters: FilterRules,
        max_calls: int,
        page_size: int,
    ) -> None:
        self.search = search
        self.region = region
        self.filters = filters
        self.max_calls = max_calls
        self.page_size = page_size
        self.existing_count = len(existing)
        self.index = DedupIndex(existing)
        self.results: List[Business] = []
        self.api_calls = 0

    @property
    def budget_exhausted(self) -> bool:
        return self.api_calls >= self.max_calls

    def search_location(self, location: str, category: TradeCategory) -> int:
        """Run one gateway query and accept its new, valid tradies; returns how many were added."""
        query = f"{category.query} in {location}"
        logger.info("Searching: %s (call %d/%d)", query, self.api_calls + 1, self.max_calls)

        # a failed call still spends its budget slot
        self.api_calls += 1
        try:
            places = self.search(query, self.page_size)
        except Exception as exc:  # noqa: BLE001
            logger.error("Error searching %s: %s", query, exc)
            return 0

        if not places:
            logger.info("No results found for %s", query)
            return 0
        logger.info("Found %d results for %s", len(places), query)

        added = 0
        for place in places:
            try:
                business = to_business(
                    place,
                    category,
                    location=location,
                    region=self.region,
                    provisional_id=self.existing_count + len(self.results) + 1,
                )
            except (AttributeError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed result from %s: %s", query, exc)
                continue

            if not is_valid_tradie(business, self.filters, self.region):
                continue
            if self.index.matches(business):
                logger.debug("Duplicate skipped: %s", business.name)
                continue

            self.index.add(business)
            self.results.append(business)
            added += 1
            logger.info("Added %s", business.name)
        return added


def discover_tradies(
    *,
    search: SearchGateway,
    existing: Sequence[Dict[str, Any]],
    locations: Sequence[str],
    categories: Sequence[TradeCategory],
    region: Region,
    filters: FilterRules,
    max_calls: int,
    page_size: int,
    delay: float,
) -> DiscoveryResult:
    """Search every location x category pair in order until the call budget runs out."""
    run = DiscoveryRun(
        search,
        existing,
        region=region,
        filters=filters,
        max_calls=max_calls,
        page_size=page_size,
    )
    logger.info(
        "Starting discovery: %d calls max, %d locations, %d categories",
        max_calls,
        len(locations),
        len(categories),
    )

    for location, category in itertools.product(locations, categories):
        if run.budget_exhausted:
            logger.warning("API limit reached (%d calls); stopping discovery", max_calls)
            break
        run.search_location(location, category)
        time.sleep(delay)

    logger.info("Discovery complete: api_calls=%d new_tradies=%d", run.api_calls, len(run.results))
    return DiscoveryResult(new_tradies=run.results, api_calls_used=run.api_calls)


def run_discovery_job(
    *,
    locations: Optional[Sequence[str]] = None,
    categories: Optional[Sequence[str]] = None,
    max_calls: Optional[int] = None,
    page_size: Optional[int] = None,
    delay: Optional[float] = None,
    data_file: Optional[str] = None,
) -> DiscoveryResult:
    settings = get_settings()
    search = build_gateway(settings)
    profile = load_profile(settings.profile_file)

    max_calls = settings.max_api_calls if max_calls is None else max_calls
    if max_calls < 0:
        raise ConfigError("max_calls must not be negative")

    document = load_store(data_file or settings.data_file)
    result = discover_tradies(
        search=search,
        existing=document.tradies,
        locations=list(locations or profile.locations),
        categories=profile.select_categories(categories),
        region=profile.region,
        filters=profile.filters,
        max_calls=max_calls,
        page_size=settings.page_size if page_size is None else page_size,
        delay=settings.search_delay if delay is None else delay,
    )

    records = [business.to_dict() for business in result.new_tradies]
    finalize_ids(document.tradies, records)
    for business, record in zip(result.new_tradies, records):
        business.id = record["id"]

    payload = save_store(document, records, api_calls_used=result.api_calls_used)
    for trade, count in payload["breakdown"].items():
        logger.info("  %s: %d businesses", trade, count)
    return result


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Discover local tradies and add them to tradies.json")
    parser.add_argument(
        "--location",
        dest="locations",
        action="append",
        help="Location to search, e.g. 'Fremantle WA' (repeatable; defaults to the profile's locations)",
    )
    parser.add_argument(
        "--category",
        dest="categories",
        action="append",
        help="Trade category to search, e.g. 'plumber' (repeatable; defaults to all categories)",
    )
    parser.add_argument("--max-calls", dest="max_calls", type=int, help="Search API call budget for this run")
    parser.add_argument("--page-size", dest="page_size", type=int, help="Results requested per query")
    parser.add_argument("--delay", dest="delay", type=float, help="Seconds to wait between queries")
    parser.add_argument("--data-file", dest="data_file", help="Path to tradies.json")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    try:
        run_discovery_job(
            locations=args.locations,
            categories=args.categories,
            max_calls=args.max_calls,
            page_size=args.page_size,
            delay=args.delay,
            data_file=args.data_file,
        )
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except StoreError as exc:
        logger.error("Store error: %s", exc)
        raise SystemExit(1) from exc
    except Exception as exc:  # pragma: no cover - CLI fallback
        logger.error("Discovery failed: %s", exc, exc_info=True)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()

"""CLI job that republishes tradies.json into the website's data block."""

import argparse
import logging
from typing import Any, Dict, List, Optional

from tradie_hub.core.config import ConfigError, get_settings
from tradie_hub.core.profile import load_profile
from tradie_hub.core.publisher import PublishError, publish_site, summarize
from tradie_hub.core.store import StoreError, load_store

logger = logging.getLogger(__name__)


def run_publish_job(*, data_file: Optional[str] = None, html_file: Optional[str] = None) -> List[Dict[str, Any]]:
    settings = get_settings()
    profile = load_profile(settings.profile_file)
    document = load_store(data_file or settings.data_file, required=True)

    records = publish_site(
        html_file or settings.html_file,
        document.tradies,
        profile.region,
        categories=profile.categories,
    )

    summary = summarize(records)
    logger.info(
        "Website summary: total=%d licensed=%d with_ratings=%d owner_recommended=%d",
        summary["total"],
        summary["licensed"],
        summary["with_ratings"],
        summary["owner_recommended"],
    )
    for index, record in enumerate(records[:3], start=1):
        logger.info(
            "  %d. %s (%s) rating %s/5 from %s reviews, areas: %s",
            index,
            record["name"],
            record["category"],
            record["rating"],
            record["reviewCount"],
            ", ".join(record["areas"]),
        )
    return records


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Publish tradies.json into index.html")
    parser.add_argument("--data-file", dest="data_file", help="Path to tradies.json")
    parser.add_argument("--html-file", dest="html_file", help="Path to the page holding the tradiesData block")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    try:
        run_publish_job(data_file=args.data_file, html_file=args.html_file)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except (StoreError, PublishError) as exc:
        logger.error("Website update failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()

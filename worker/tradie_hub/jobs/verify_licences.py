"""CLI job that cross-references every stored tradie against the licence register."""

import argparse
import logging
from datetime import datetime, timezone
from typing import Optional

from tradie_hub.core.config import ConfigError, get_settings
from tradie_hub.core.profile import load_profile
from tradie_hub.core.store import StoreError, load_store, save_store
from tradie_hub.etl.licence_merge import LicenceLookup, LicenceStats, verify_licences
from tradie_hub.vendors.licence_register import LicenceRegister, LicenceRegisterError

logger = logging.getLogger(__name__)


def run_licence_job(
    *,
    data_file: Optional[str] = None,
    register_file: Optional[str] = None,
    delay: Optional[float] = None,
    lookup: Optional[LicenceLookup] = None,
) -> LicenceStats:
    settings = get_settings()
    profile = load_profile(settings.profile_file)

    if lookup is None:
        register_path = register_file or settings.licence_register_file
        if not register_path:
            raise ConfigError("LICENCE_REGISTER_FILE is required for licence verification")
        licence_types = {category.type: category.licence_type for category in profile.categories if category.licence_type}
        try:
            lookup = LicenceRegister.from_file(register_path, licence_types).lookup
        except LicenceRegisterError as exc:
            raise ConfigError(str(exc)) from exc

    document = load_store(data_file or settings.data_file, required=True)
    logger.info("Verifying licences for %d tradies", len(document.tradies))

    stats = verify_licences(
        document.tradies,
        lookup,
        suffixes=profile.name_suffixes,
        delay=settings.licence_delay if delay is None else delay,
    )
    payload = save_store(document, last_licence_check=datetime.now(timezone.utc).isoformat())

    logger.info(
        "Licence verification complete: checked=%d licensed=%d unlicensed=%d rate=%s",
        stats.checked,
        stats.licensed,
        stats.unlicensed,
        payload["licenseVerificationStats"]["verificationRate"],
    )
    for record in document.tradies:
        if record.get("licensed") is True:
            logger.info(
                "  %s: %s (%s), holder %s",
                record.get("name") or record.get("business_name"),
                record.get("licenseNumber"),
                record.get("licenseType"),
                record.get("licenseHolderName"),
            )
    logger.warning("Always confirm licence status directly with the licensing authority before hiring.")
    return stats


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Verify tradie licences against the licence register")
    parser.add_argument("--data-file", dest="data_file", help="Path to tradies.json")
    parser.add_argument("--register-file", dest="register_file", help="Path to the licence register JSON export")
    parser.add_argument("--delay", dest="delay", type=float, help="Seconds to wait between tradies")
    return parser


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s - %(message)s")
    args = build_parser().parse_args()

    try:
        run_licence_job(data_file=args.data_file, register_file=args.register_file, delay=args.delay)
    except ConfigError as exc:
        logger.error("Configuration error: %s", exc)
        raise SystemExit(2) from exc
    except StoreError as exc:
        logger.error("Store error: %s", exc)
        raise SystemExit(1) from exc
    except Exception as exc:  # pragma: no cover - CLI fallback
        logger.error("Licence verification failed: %s", exc, exc_info=True)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()

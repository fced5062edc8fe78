"""
Run one source's competitor price scrape from CLI.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
from dataclasses import asdict

from app.scraping.config import get_price_scraping_settings
from app.scraping.logging_utils import run_log_file
from app.services.price_scraping_service import PriceScrapingService
from db.session import SessionLocal


def _configure_logging() -> None:
    log_level = os.getenv("LOG_LEVEL", "INFO").strip().upper()
    logging.basicConfig(
        level=getattr(logging, log_level, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Scrape competitor prices for one source.")
    parser.add_argument("--source", required=True, help="Source name from the sources config.")
    parser.add_argument("--catalog", default=None, help="Catalog CSV path.")
    parser.add_argument("--output-dir", default=None, help="Directory for the CSV snapshot.")
    parser.add_argument(
        "--no-db",
        action="store_true",
        help="Skip the shared table and only write the CSV snapshot.",
    )
    parser.add_argument("--log-file", default=None, help="Append this run's log to a file.")
    args = parser.parse_args()

    _configure_logging()
    settings = get_price_scraping_settings()
    service = PriceScrapingService(settings=settings)

    with run_log_file(logging.getLogger(), args.log_file or settings.log_file):
        if args.no_db:
            summary = service.scrape(
                source=args.source,
                catalog_path=args.catalog,
                output_dir=args.output_dir,
            )
        else:
            with SessionLocal() as db:
                summary = service.scrape(
                    source=args.source,
                    db=db,
                    catalog_path=args.catalog,
                    output_dir=args.output_dir,
                )

    print(json.dumps(asdict(summary), indent=2))
    if not summary.data_saved:
        print("No data was saved.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

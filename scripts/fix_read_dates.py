#!/usr/bin/env python3
"""
Backfill Finish Dates

Books on the "read" shelf without a date_finished are invisible to
reading goals and monthly stats. This stamps them with the current time.

USAGE:
    python scripts/fix_read_dates.py
"""

import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookworm.database import SessionLocal
from bookworm.services.library import backfill_finish_dates

logger = logging.getLogger("fix_read_dates")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = SessionLocal()
    try:
        updated = backfill_finish_dates(db)
        logger.info(f"Updated {updated} read entries")
    finally:
        db.close()


if __name__ == "__main__":
    main()

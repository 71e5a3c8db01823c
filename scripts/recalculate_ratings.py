#!/usr/bin/env python3
"""
Recalculate Book Ratings

Rebuilds ratings_average and ratings_count of every book from its
approved reviews. Run it after editing reviews directly in the database.

USAGE:
    python scripts/recalculate_ratings.py
"""

import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from bookworm.database import SessionLocal
from bookworm.services.ratings import recalculate_all_book_ratings

logger = logging.getLogger("recalculate_ratings")


def main() -> None:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    db = SessionLocal()
    try:
        count = recalculate_all_book_ratings(db)
        logger.info(f"Recalculated ratings for {count} books")
    finally:
        db.close()


if __name__ == "__main__":
    main()

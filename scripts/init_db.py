#!/usr/bin/env python3
"""
Standalone database initialization script
Creates the MealLog tables in the database configured by DATABASE_URL
"""

import logging
import os
import sys

# Ensure we're using the right Python path
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

from app.config import settings  # noqa: E402
from domain.models import init_database  # noqa: E402

logger = logging.getLogger("meallog.scripts.init_db")


def main() -> int:
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper()), format=settings.log_format
    )
    try:
        init_database()
    except Exception:
        logger.exception("Database initialization failed")
        return 1
    logger.info("Tables ready")
    return 0


if __name__ == "__main__":
    print("\n" + "=" * 60)
    print("MealLog Database Initialization")
    print("=" * 60 + "\n")

    exit_code = main()

    print("\n" + "=" * 60)
    print("SUCCESS! Your database is ready to use." if exit_code == 0 else "FAILED! Check the errors above.")
    print("=" * 60 + "\n")

    sys.exit(exit_code)

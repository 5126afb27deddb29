"""
Populate a database with demo categories, tags, posts and comments.

Optionally creates (or promotes) an admin account first.
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from blog_backend.auth import ensure_admin_user
from blog_backend.config import get_settings
from blog_backend.seed import seed_demo_content
from blog_backend.sql_db import PostgresDbClient

logger = logging.getLogger(__name__)


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the blog database with demo content")
    parser.add_argument(
        "--database-url",
        type=str,
        default=None,
        help="SQLAlchemy URL (defaults to DATABASE_URL)",
    )
    parser.add_argument(
        "--admin-username",
        type=str,
        default=None,
        help="Create or promote this account to admin",
    )
    parser.add_argument(
        "--admin-email",
        type=str,
        default=None,
        help="Email for a newly created admin account",
    )
    parser.add_argument(
        "--skip-demo",
        action="store_true",
        help="Only set up the admin account",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(name)s %(levelname)s %(asctime)s %(message)s",
        datefmt="%m/%d/%Y %I:%M:%S %p",
    )

    database_url = args.database_url or get_settings().database_url
    if not database_url:
        logger.error("No database URL given and DATABASE_URL is not set")
        return 1

    db = PostgresDbClient(database_url)

    if args.admin_username:
        password = os.environ.get("BLOG_ADMIN_PASSWORD")
        if not password or not args.admin_email:
            logger.error("--admin-email and BLOG_ADMIN_PASSWORD are required with --admin-username")
            return 1
        ensure_admin_user(db, args.admin_username, args.admin_email, password)

    if args.skip_demo:
        return 0
    if seed_demo_content(db):
        logger.info("Seed complete")
    else:
        logger.info("Nothing to do")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

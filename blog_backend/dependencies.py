"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from blog_backend.config import get_settings
from blog_backend.db import DbClient
from blog_backend.memory_db import InMemoryDbClient
from blog_backend.seed import seed_demo_content
from blog_backend.sql_db import PostgresDbClient

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so data persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory storage")
        _db_client = InMemoryDbClient()
    else:
        _db_client = PostgresDbClient(settings.database_url)

    if settings.seed_demo_data:
        seed_demo_content(_db_client)
    return _db_client


def reset_db_client() -> None:
    """Forget the cached client so the next request builds a fresh one."""
    global _db_client
    _db_client = None

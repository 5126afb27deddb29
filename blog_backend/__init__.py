"""
Backend package for the blog API.

This package provides a FastAPI application for posts, categories, tags,
threaded comments, media metadata and user accounts, backed either by an
in-memory store or by any SQLAlchemy database (Postgres in production).
"""

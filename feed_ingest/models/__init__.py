"""Data models for feed_ingest."""

from .schemas import Feed, Post

__all__ = ["Feed", "Post"]

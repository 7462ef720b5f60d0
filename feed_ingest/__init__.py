"""feed_ingest - RSS/Atom feed ingestion and subscription storage."""

__version__ = "0.1.0"

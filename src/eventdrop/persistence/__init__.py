"""Persistence layer for EventDrop.

This module provides:
- The MetadataStore contract (event lookup, upload commit/listing)
- A single-document JSON store for local deployments
- A SQLAlchemy async store for PostgreSQL deployments
"""

from eventdrop.persistence.base import MetadataStore
from eventdrop.persistence.db import Database
from eventdrop.persistence.factory import close_metadata_store, get_metadata_store
from eventdrop.persistence.json_store import JsonMetadataStore
from eventdrop.persistence.sql_store import SqlMetadataStore

__all__ = [
    "MetadataStore",
    "Database",
    "JsonMetadataStore",
    "SqlMetadataStore",
    "get_metadata_store",
    "close_metadata_store",
]

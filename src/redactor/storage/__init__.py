"""Storage layer — SQLite article store and schema management."""

from redactor.storage.articles import ArticleStore, UpsertResult
from redactor.storage.connection import get_connection
from redactor.storage.schema import init_db

__all__ = ["ArticleStore", "UpsertResult", "get_connection", "init_db"]

"""Shared repository layer for the lobbywatch services."""

from .documents import (
    DocumentDecodeError,
    DocumentStore,
    DocumentStoreError,
    JsonFileDocumentStore,
    PostgresDocumentStore,
)
from .history import DOCUMENT_KEYS, HistoryRepository

__all__ = [
    "DOCUMENT_KEYS",
    "DocumentDecodeError",
    "DocumentStore",
    "DocumentStoreError",
    "HistoryRepository",
    "JsonFileDocumentStore",
    "PostgresDocumentStore",
]

"""Persistence collaborator contract and its implementations."""

from __future__ import annotations

from .base import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    ApplicantQuery,
    ContractQuery,
    Page,
    Repository,
    Store,
    UnitOfWork,
)
from .memory import MemoryStore
from .sql import SqlStore

__all__ = [
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "ApplicantQuery",
    "ContractQuery",
    "Page",
    "Repository",
    "Store",
    "UnitOfWork",
    "MemoryStore",
    "SqlStore",
]

"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
Supabase is the backend; tests run against an in-memory implementation.
"""

from family_accountant.services.storage.interface import (
    AuditStorageInterface,
    ConnectionError,
    FinanceStorageInterface,
    NotFoundError,
    StorageError,
)
from family_accountant.services.storage.supabase_store import (
    SupabaseAuditStorage,
    SupabaseClient,
    SupabaseFinanceStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "FinanceStorageInterface",
    # Exceptions
    "ConnectionError",
    "NotFoundError",
    "StorageError",
    # Supabase implementation
    "SupabaseAuditStorage",
    "SupabaseClient",
    "SupabaseFinanceStorage",
]

"""Services package."""

from family_accountant.services.storage import (
    AuditStorageInterface,
    ConnectionError,
    FinanceStorageInterface,
    NotFoundError,
    StorageError,
    SupabaseAuditStorage,
    SupabaseClient,
    SupabaseFinanceStorage,
)

__all__ = [
    "AuditStorageInterface",
    "ConnectionError",
    "FinanceStorageInterface",
    "NotFoundError",
    "StorageError",
    "SupabaseAuditStorage",
    "SupabaseClient",
    "SupabaseFinanceStorage",
]

# logvault/core/errors.py
"""
Error taxonomy shared by the store, the request layer and the HTTP app.

Every error carries the HTTP status and machine-readable code it maps to, so
the API layer can render any failure with a single exception handler:

- ClientError (4xx): the caller sent something we cannot accept.
- ServerError (5xx): storage or engine faults. Never retried.
"""

from __future__ import annotations


class LogVaultError(Exception):
    """Base class for all failures surfaced by logvault."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ClientError(LogVaultError):
    status_code = 400
    code = "BAD_REQUEST"


class ServerError(LogVaultError):
    status_code = 500
    code = "SERVER_ERROR"


class ValidationError(ClientError):
    """Malformed or unparseable input (bad JSON, wrong types, bad paging)."""

    code = "VALIDATION_ERROR"


class DuplicateIdError(ClientError):
    """A log entry with the same id is already stored."""

    code = "DUPLICATE_ID"

    def __init__(self, log_id: str) -> None:
        super().__init__(f"A log entry with id '{log_id}' already exists.")
        self.log_id = log_id


class StorageInitError(ServerError):
    """The database could not be opened or the schema could not be created."""

    code = "STORAGE_INIT_ERROR"


class StorageWriteError(ServerError):
    code = "STORAGE_WRITE_ERROR"


class StorageReadError(ServerError):
    code = "STORAGE_READ_ERROR"

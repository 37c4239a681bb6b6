"""
Custom Exception Classes for SIMPLE-DDNS.

Exception Hierarchy:
    DynDNSException (Base)
    ├─ ConfigError           - Configuration issues (TOML parsing, missing keys, wrong types)
    ├─ ValidationError       - Input validation failures (addresses, record types)
    ├─ OperationCancelled    - Cancellation signal observed during a blocking call
    ├─ ResolutionError       - Public IP detection for one address family
    ├─ DatabaseError         - Record store operations (sqlite3 errors)
    │  ├─ InitializationError  - Connection / schema setup failed
    │  ├─ StoreError           - Reading active records failed
    │  └─ TransactionError     - Record write rolled back
    └─ SubmissionError       - One or more zone batches rejected by the provider
"""

from typing import List, Optional


class DynDNSException(Exception):
    """Base exception for all SIMPLE-DDNS errors."""
    pass


class ConfigError(DynDNSException):
    """Configuration error (TOML parsing, missing keys, invalid values)."""
    pass


class ValidationError(DynDNSException):
    """Input validation failed (invalid IP address, unknown record type)."""
    pass


class OperationCancelled(DynDNSException):
    """Cancellation was requested while an operation was in progress."""
    pass


class ResolutionError(DynDNSException):
    """Public IP detection failed for a single address family."""

    def __init__(self, family: str, message: str) -> None:
        super().__init__(f"{family}: {message}")
        self.family = family


class DatabaseError(DynDNSException):
    """Database operation failed (SQLite errors, connection issues)."""
    pass


class InitializationError(DatabaseError):
    """Database connection or schema creation failed."""
    pass


class StoreError(DatabaseError):
    """Reading records from the database failed."""
    pass


class TransactionError(DatabaseError):
    """Record write failed and its transaction was rolled back.

    ``stage`` tells which step failed: ``begin``, ``deactivate``, ``insert``
    or ``commit``. Callers usually only need to know the update did not apply.
    """

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage}: {message}")
        self.stage = stage


class SubmissionError(DynDNSException):
    """One or more zone batches could not be submitted.

    Raised once after every batch was attempted; the individual provider
    errors are logged where they happen.
    """

    def __init__(self, message: str = "some records couldn't be updated",
                 failed_zones: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.failed_zones = list(failed_zones or [])

    @property
    def count(self) -> int:
        return len(self.failed_zones)

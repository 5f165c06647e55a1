"""
Custom exceptions for the catalog transfer pipeline with structured error context.

Each exception carries context information for debugging and for the
per-record log messages collected during a batch write.

Exception Hierarchy:
    CatalogException (base)
    ├── ReadError
    │   ├── NotFoundError
    │   └── InvalidArgumentError
    └── WriteError
        ├── ValidationError
        └── AdapterError

Read errors always propagate. AdapterError is the only recoverable write
error: the orchestrator rolls back the offending record and, in lenient
mode, continues with the next one. Any other exception raised while writing
aborts the batch.
"""

from typing import Optional, Dict, Any
from datetime import datetime, timezone


class CatalogException(Exception):
    """
    Base exception for all catalog transfer errors.

    Attributes:
        message: Human-readable error message
        context: Additional context information (record index, order number, etc.)
        original_exception: The original exception that was caught (if any)
    """

    def __init__(
        self,
        message: str,
        context: Optional[Dict[str, Any]] = None,
        original_exception: Optional[Exception] = None
    ):
        self.message = message
        self.context = context or {}
        self.original_exception = original_exception
        self.timestamp = datetime.now(timezone.utc)

        self.context["error_timestamp"] = self.timestamp.isoformat()

        super().__init__(message)
        if original_exception:
            self.__cause__ = original_exception

    def __str__(self) -> str:
        """Format error message with context."""
        base_msg = f"{self.__class__.__name__}: {self.message}"

        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg += f" | Context: {context_str}"

        if self.original_exception:
            base_msg += f" | Caused by: {type(self.original_exception).__name__}: {str(self.original_exception)}"

        return base_msg

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging/storage."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
            "timestamp": self.timestamp.isoformat(),
            "original_error": str(self.original_exception) if self.original_exception else None
        }


# ============================================================================
# Read Errors
# ============================================================================

class ReadError(CatalogException):
    """Base exception for export (read side) failures."""
    pass


class NotFoundError(ReadError):
    """
    Raised when a filter references an entity that does not exist.

    Context should include:
        - entity: Entity type (category, product stream)
        - entity_id: The id that did not resolve
    """
    pass


class InvalidArgumentError(ReadError):
    """
    Raised for unusable read arguments.

    Covers empty id sets, empty or unknown column specs and product
    streams whose criteria resolve to no base condition.
    """
    pass


# ============================================================================
# Write Errors
# ============================================================================

class WriteError(CatalogException):
    """Base exception for import (write side) failures."""
    pass


class ValidationError(WriteError):
    """
    Raised when a write batch cannot be processed at all.

    Context should include:
        - groups: Group names present in the batch
    """
    pass


class AdapterError(WriteError):
    """
    Raised by a sub-writer that rejects one root record.

    Recoverable: only the current record is rolled back.

    Context should include:
        - order_number: Order number of the root record
        - group: Row group that caused the rejection (price, category, ...)
        - field_name: Offending field (if applicable)
    """
    pass

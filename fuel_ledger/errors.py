"""
Centralized error types for the fuel ledger engine.

Unmatched routes or truck suffixes are NOT errors: resolvers return
matched=False results instead. Exceptions here cover broken configuration,
orders fed to the wrong operation, and illegal lifecycle transitions.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Error categories for classification"""

    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    LIFECYCLE = "lifecycle"
    INTERNAL = "internal"


class FuelLedgerError(Exception):
    """Base exception for the fuel ledger engine"""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }


class ConfigurationError(FuelLedgerError):
    """Fuel configuration file missing or malformed"""

    def __init__(self, message: str, path: Optional[str] = None):
        details = {"path": path} if path else None
        super().__init__(message, category=ErrorCategory.CONFIGURATION, details=details)


class InvalidDeliveryOrderError(FuelLedgerError):
    """Delivery order cannot be used for the requested operation"""

    def __init__(self, message: str, do_number: Optional[str] = None):
        details = {"do_number": do_number} if do_number else None
        super().__init__(message, category=ErrorCategory.VALIDATION, details=details)


class LifecycleError(FuelLedgerError):
    """Illegal fuel record state transition"""

    def __init__(self, message: str, truck_no: str = "", status: Optional[str] = None):
        super().__init__(
            message,
            category=ErrorCategory.LIFECYCLE,
            details={"truck_no": truck_no, "status": status},
        )
        self.truck_no = truck_no
        self.status = status


class ReturnAlreadyAppliedError(LifecycleError):
    """A return order was already applied to this record (duplicate delivery)"""


class RecordLockedError(LifecycleError):
    """Record is waiting for route/truck configuration"""


class RecordQueuedError(LifecycleError):
    """Record waits for the truck's earlier journey to finish"""


class RecordCancelledError(LifecycleError):
    """Record was cancelled and is frozen"""


class JourneyCompleteError(LifecycleError):
    """Journey is complete; structural changes are no longer allowed"""


__all__ = [
    "ErrorCategory",
    "FuelLedgerError",
    "ConfigurationError",
    "InvalidDeliveryOrderError",
    "LifecycleError",
    "ReturnAlreadyAppliedError",
    "RecordLockedError",
    "RecordQueuedError",
    "RecordCancelledError",
    "JourneyCompleteError",
]

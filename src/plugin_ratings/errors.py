"""Exception types for plugin-ratings.

All exceptions inherit from RatingError to enable catch-all error handling.
Malformed signal data is never an error: only weight configuration changes
can fail.

Exception Hierarchy:
    RatingError (base)
    ├── WeightValidationError - Candidate weights rejected
    │   ├── MissingComponentError - A required component key is absent
    │   ├── InvalidWeightRangeError - A weight is outside [0, 100]
    │   └── InvalidWeightTotalError - Weights do not sum to 100
    └── WeightPersistenceError - Configuration store write failed

Example:
    >>> from plugin_ratings.errors import WeightValidationError, WeightErrorKind
    >>> try:
    ...     calculator.update_weights({"user_rating": 100})
    ... except WeightValidationError as e:
    ...     assert e.kind is WeightErrorKind.MISSING_COMPONENT
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class WeightErrorKind(str, Enum):
    """Reason a candidate weight configuration was rejected."""

    MISSING_COMPONENT = "missing_component"
    """One of the required component keys is absent or not numeric."""

    INVALID_RANGE = "invalid_range"
    """A weight is not an integer in [0, 100]."""

    INVALID_TOTAL = "invalid_total"
    """The weights do not sum to exactly 100."""


class RatingError(Exception):
    """Base exception for all plugin-ratings errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize RatingError.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the error."""
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({details_str})"
        return self.message


# =============================================================================
# Weight Validation Errors
# =============================================================================


class WeightValidationError(RatingError):
    """Candidate weight configuration failed validation.

    Raised synchronously by update_weights(); the current configuration is
    left unchanged. Callers recover by supplying corrected weights.

    Attributes:
        kind: The WeightErrorKind describing the failure.
        component: The offending component name (if applicable).
    """

    kind: WeightErrorKind = WeightErrorKind.INVALID_TOTAL

    def __init__(
        self,
        message: str,
        component: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize WeightValidationError.

        Args:
            message: Human-readable error description.
            component: Name of the component that failed validation.
            details: Additional error context.
        """
        _details = details or {}
        if component:
            _details["component"] = component
        super().__init__(message, _details)
        self.component = component

    @property
    def code(self) -> str:
        """Return the machine-readable error code (e.g. ``invalid_total``)."""
        return self.kind.value


class MissingComponentError(WeightValidationError):
    """A required component weight is absent or not numeric."""

    kind = WeightErrorKind.MISSING_COMPONENT

    def __init__(self, component: str) -> None:
        super().__init__(
            f"Missing or invalid weight for {component}",
            component=component,
        )


class InvalidWeightRangeError(WeightValidationError):
    """A component weight is not an integer between 0 and 100."""

    kind = WeightErrorKind.INVALID_RANGE

    def __init__(self, component: str, value: Any) -> None:
        super().__init__(
            f"Weight for {component} must be an integer between 0 and 100",
            component=component,
            details={"value": value},
        )
        self.value = value


class InvalidWeightTotalError(WeightValidationError):
    """Component weights do not sum to exactly 100."""

    kind = WeightErrorKind.INVALID_TOTAL

    def __init__(self, total: int) -> None:
        super().__init__(
            "Algorithm weights must sum to 100",
            details={"total": total},
        )
        self.total = total


# =============================================================================
# Persistence Errors
# =============================================================================


class WeightPersistenceError(RatingError):
    """The configuration store failed to persist a weight configuration.

    Distinct from WeightValidationError: the weights were valid, but the
    store rejected the write. The in-memory configuration is unchanged.

    Attributes:
        key: The storage key that could not be written.
    """

    def __init__(
        self,
        key: str,
        reason: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        _details = details or {}
        _details["key"] = key
        if reason:
            _details["reason"] = reason
        super().__init__("Failed to persist weight configuration", _details)
        self.key = key


__all__ = [
    "InvalidWeightRangeError",
    "InvalidWeightTotalError",
    "MissingComponentError",
    "RatingError",
    "WeightErrorKind",
    "WeightPersistenceError",
    "WeightValidationError",
]

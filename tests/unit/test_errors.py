"""Unit tests for plugin-ratings error types."""

from __future__ import annotations

import pytest

from plugin_ratings.errors import (
    InvalidWeightRangeError,
    InvalidWeightTotalError,
    MissingComponentError,
    RatingError,
    WeightErrorKind,
    WeightPersistenceError,
    WeightValidationError,
)

# =============================================================================
# Base Exception Tests
# =============================================================================


class TestRatingError:
    """Tests for base RatingError exception."""

    def test_basic_construction(self) -> None:
        error = RatingError("Something went wrong")
        assert str(error) == "Something went wrong"
        assert error.message == "Something went wrong"
        assert error.details == {}

    def test_construction_with_details(self) -> None:
        error = RatingError("Operation failed", details={"key": "k", "reason": "io"})
        assert "key=k" in str(error)
        assert "reason=io" in str(error)


# =============================================================================
# Validation Error Tests
# =============================================================================


class TestWeightValidationErrors:
    """Tests for the validation error kinds."""

    @pytest.mark.parametrize(
        ("error", "kind"),
        [
            (MissingComponentError("user_rating"), WeightErrorKind.MISSING_COMPONENT),
            (InvalidWeightRangeError("user_rating", -10), WeightErrorKind.INVALID_RANGE),
            (InvalidWeightTotalError(120), WeightErrorKind.INVALID_TOTAL),
        ],
    )
    def test_kind_and_hierarchy(self, error: WeightValidationError, kind: WeightErrorKind) -> None:
        assert error.kind is kind
        assert error.code == kind.value
        assert isinstance(error, WeightValidationError)
        assert isinstance(error, RatingError)

    def test_missing_component_message(self) -> None:
        error = MissingComponentError("rating_count")
        assert error.component == "rating_count"
        assert "rating_count" in str(error)

    def test_range_keeps_value(self) -> None:
        error = InvalidWeightRangeError("user_rating", -10)
        assert error.value == -10
        assert error.details["value"] == -10

    def test_total_keeps_total(self) -> None:
        error = InvalidWeightTotalError(120)
        assert error.total == 120
        assert error.component is None
        assert "total=120" in str(error)


# =============================================================================
# Persistence Error Tests
# =============================================================================


class TestWeightPersistenceError:
    def test_not_a_validation_error(self) -> None:
        """Test persistence failures are not conflated with validation failures."""
        error = WeightPersistenceError("usability_weights", reason="read-only")
        assert not isinstance(error, WeightValidationError)
        assert isinstance(error, RatingError)

    def test_details(self) -> None:
        error = WeightPersistenceError("usability_weights", reason="read-only")
        assert error.key == "usability_weights"
        assert "key=usability_weights" in str(error)
        assert "reason=read-only" in str(error)

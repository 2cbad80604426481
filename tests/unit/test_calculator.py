"""Unit tests for UsabilityRatingCalculator."""

from __future__ import annotations

from typing import Any

import pytest

from plugin_ratings.calculator import UsabilityRatingCalculator, scale_rating
from plugin_ratings.errors import (
    InvalidWeightRangeError,
    InvalidWeightTotalError,
    MissingComponentError,
    WeightErrorKind,
    WeightPersistenceError,
)
from plugin_ratings.models import SignalRecord
from plugin_ratings.store import InMemoryWeightStore
from plugin_ratings.weights import DEFAULT_USABILITY_WEIGHTS

# =============================================================================
# Calculation
# =============================================================================


class TestCalculate:
    """Tests for calculate() and the breakdown it leaves behind."""

    def test_worked_example(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        """Test the reference record scores 4.38 under default weights."""
        assert calculator.calculate(worked_example) == 4.38

    def test_worked_example_breakdown(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        calculator.calculate(worked_example)
        breakdown = calculator.last_breakdown
        assert breakdown is not None
        assert breakdown.weighted_sum == pytest.approx(84.5)
        assert breakdown.total_weight == 100
        assert breakdown.normalized_score == pytest.approx(0.845)
        assert breakdown.weights == dict(DEFAULT_USABILITY_WEIGHTS)
        assert calculator.get_calculation_breakdown() is breakdown

    def test_no_breakdown_before_first_call(self, calculator: UsabilityRatingCalculator) -> None:
        assert calculator.last_breakdown is None

    @pytest.mark.parametrize(
        "record",
        [
            {},
            {"rating": 0, "num_ratings": 0, "active_installs": 0},
            {
                "rating": 0,
                "num_ratings": 0,
                "active_installs": 0,
                "support_threads": 0,
                "support_threads_resolved": 0,
            },
        ],
    )
    def test_no_signal_scores_minimum(
        self, calculator: UsabilityRatingCalculator, record: dict[str, Any]
    ) -> None:
        """Test records with every field absent or zero score exactly 1.0."""
        assert calculator.calculate(record) == 1.0
        assert calculator.last_breakdown is not None
        assert calculator.last_breakdown.total_weight == 0

    def test_missing_signals_are_not_penalized(self, calculator: UsabilityRatingCalculator) -> None:
        """Test weights renormalize over present components only."""
        # user_rating 1.0 (weight 40) and neutral support 0.5 (weight 15)
        assert calculator.calculate({"rating": 5.0}) == round(1 + 47.5 / 55 * 4, 2)

    def test_support_only(self, calculator: UsabilityRatingCalculator) -> None:
        assert calculator.calculate({"support_threads": 10, "support_threads_resolved": 2}) == 2.2

    @pytest.mark.parametrize(
        "record",
        [
            {"rating": 1e9, "num_ratings": 1e30, "active_installs": 1e30},
            {"rating": -4, "num_ratings": -1, "active_installs": -100, "support_threads": -2},
            {"rating": "garbage", "num_ratings": None, "active_installs": [1, 2]},
            {"rating": float("inf"), "support_threads": 5, "support_threads_resolved": 50},
            {"rating": 4.0, "active_installs": 10**400},
        ],
    )
    def test_always_within_scale(
        self, calculator: UsabilityRatingCalculator, record: dict[str, Any]
    ) -> None:
        """Test extreme or malformed input never escapes [1.0, 5.0]."""
        score = calculator.calculate(record)
        assert 1.0 <= score <= 5.0

    def test_maximum_signals_score_five(self, calculator: UsabilityRatingCalculator) -> None:
        record = {
            "rating": 5,
            "num_ratings": 5000,
            "active_installs": 5_000_000,
            "support_threads": 10,
            "support_threads_resolved": 10,
        }
        assert calculator.calculate(record) == 5.0

    def test_idempotent(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        assert calculator.calculate(worked_example) == calculator.calculate(worked_example)

    def test_monotonic_in_rating(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        """Test raising one signal never lowers the score."""
        scores = [
            calculator.calculate({**worked_example, "rating": rating})
            for rating in (0.5, 1.0, 2.0, 3.0, 4.0, 4.5, 5.0)
        ]
        assert scores == sorted(scores)

    def test_monotonic_in_installs(self, calculator: UsabilityRatingCalculator) -> None:
        scores = [
            calculator.calculate({"rating": 3.0, "active_installs": installs})
            for installs in (1, 500, 5_000, 50_000, 500_000, 5_000_000)
        ]
        assert scores == sorted(scores)

    def test_accepts_signal_record(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        assert calculator.calculate(SignalRecord.from_mapping(worked_example)) == 4.38


class TestScaleRating:
    def test_zero_weight_is_minimum(self) -> None:
        assert scale_rating(0.9, 0) == 1.0

    def test_linear_map(self) -> None:
        assert scale_rating(0.5, 100) == 3.0


# =============================================================================
# Batch
# =============================================================================


class TestCalculateBatch:
    """Tests for calculate_batch()."""

    def test_mapping_input(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        result = calculator.calculate_batch({"a": worked_example, "b": {}})
        assert result == {"a": 4.38, "b": 1.0}

    def test_iterable_input_keyed_by_slug(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        """Test a list of records is keyed by slug; records without one are skipped."""
        result = calculator.calculate_batch([worked_example, {"rating": 4.0}])
        assert result == {"contact-form": 4.38}

    def test_matches_single_calculation(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        records = {
            f"item-{i}": {**worked_example, "rating": i / 2, "num_ratings": i * 40}
            for i in range(11)
        }
        batch = calculator.calculate_batch(records)
        for item_id, record in records.items():
            assert batch[item_id] == calculator.calculate(record)

    def test_thread_pool_matches_sequential(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        records = {
            f"item-{i}": {**worked_example, "active_installs": 10**i} for i in range(8)
        }
        assert calculator.calculate_batch(records, max_workers=4) == calculator.calculate_batch(
            records
        )

    def test_duplicate_slugs_keep_last(self, calculator: UsabilityRatingCalculator) -> None:
        result = calculator.calculate_batch(
            [{"slug": "dup", "rating": 5.0}, {"slug": "dup", "rating": 1.0}]
        )
        assert result == {"dup": calculator.calculate({"rating": 1.0})}

    def test_last_breakdown_is_last_item(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        calculator.calculate_batch({"a": {}, "b": worked_example})
        assert calculator.last_breakdown is not None
        assert calculator.last_breakdown.final_score == 4.38

    def test_empty_batch(self, calculator: UsabilityRatingCalculator) -> None:
        assert calculator.calculate_batch({}) == {}
        assert calculator.last_breakdown is None


# =============================================================================
# Weights
# =============================================================================


VALID_WEIGHTS = {
    "user_rating": 50,
    "rating_count": 15,
    "installation_count": 20,
    "support_responsiveness": 15,
}


class TestWeights:
    """Tests for the weight configuration operations."""

    def test_defaults(self, calculator: UsabilityRatingCalculator) -> None:
        assert calculator.get_weights() == {
            "user_rating": 40,
            "rating_count": 20,
            "installation_count": 25,
            "support_responsiveness": 15,
        }

    def test_components_in_weight_order(self, calculator: UsabilityRatingCalculator) -> None:
        assert calculator.components == tuple(DEFAULT_USABILITY_WEIGHTS)

    def test_get_weights_is_a_copy(self, calculator: UsabilityRatingCalculator) -> None:
        weights = calculator.get_weights()
        weights["user_rating"] = 99
        assert calculator.get_weights()["user_rating"] == 40

    def test_update_applies_and_persists(
        self, store: InMemoryWeightStore, calculator: UsabilityRatingCalculator
    ) -> None:
        assert calculator.update_weights(VALID_WEIGHTS) == VALID_WEIGHTS
        assert calculator.get_weights() == VALID_WEIGHTS
        assert store.read("usability_weights") == VALID_WEIGHTS

    def test_update_changes_scores(
        self, calculator: UsabilityRatingCalculator, worked_example: dict[str, Any]
    ) -> None:
        calculator.update_weights(
            {
                "user_rating": 100,
                "rating_count": 0,
                "installation_count": 0,
                "support_responsiveness": 0,
            }
        )
        assert calculator.calculate(worked_example) == 4.6

    def test_invalid_total(self, calculator: UsabilityRatingCalculator) -> None:
        """Test weights summing to 120 are rejected and nothing changes."""
        with pytest.raises(InvalidWeightTotalError) as exc_info:
            calculator.update_weights({**VALID_WEIGHTS, "support_responsiveness": 35})
        assert exc_info.value.kind is WeightErrorKind.INVALID_TOTAL
        assert exc_info.value.total == 120
        assert calculator.get_weights() == dict(DEFAULT_USABILITY_WEIGHTS)

    def test_invalid_range(self, calculator: UsabilityRatingCalculator) -> None:
        """Test a negative weight is reported before the total is checked."""
        with pytest.raises(InvalidWeightRangeError) as exc_info:
            calculator.update_weights(
                {
                    "user_rating": -10,
                    "rating_count": 40,
                    "installation_count": 35,
                    "support_responsiveness": 35,
                }
            )
        assert exc_info.value.component == "user_rating"
        assert exc_info.value.code == "invalid_range"

    def test_oversized_weight_is_out_of_range(
        self, calculator: UsabilityRatingCalculator
    ) -> None:
        with pytest.raises(InvalidWeightRangeError) as exc_info:
            calculator.update_weights({**VALID_WEIGHTS, "user_rating": 10**400})
        assert exc_info.value.component == "user_rating"
        assert calculator.get_weights() == dict(DEFAULT_USABILITY_WEIGHTS)

    def test_missing_component(self, calculator: UsabilityRatingCalculator) -> None:
        """Test presence is checked before range."""
        with pytest.raises(MissingComponentError) as exc_info:
            calculator.update_weights(
                {"user_rating": 500, "rating_count": 20, "installation_count": 25}
            )
        assert exc_info.value.component == "support_responsiveness"

    def test_reset(
        self, store: InMemoryWeightStore, calculator: UsabilityRatingCalculator
    ) -> None:
        calculator.update_weights(VALID_WEIGHTS)
        assert calculator.reset_weights_to_default() == dict(DEFAULT_USABILITY_WEIGHTS)
        assert calculator.get_weights() == dict(DEFAULT_USABILITY_WEIGHTS)
        assert store.read("usability_weights") == dict(DEFAULT_USABILITY_WEIGHTS)

    def test_loads_stored_weights(self) -> None:
        store = InMemoryWeightStore({"usability_weights": VALID_WEIGHTS})
        assert UsabilityRatingCalculator(store).get_weights() == VALID_WEIGHTS

    def test_construction_does_not_write(self, store: InMemoryWeightStore) -> None:
        UsabilityRatingCalculator(store)
        assert store.writes == 0
        assert store.read("usability_weights") is None

    def test_custom_key(self, store: InMemoryWeightStore) -> None:
        calculator = UsabilityRatingCalculator(store, key="site_2_usability")
        calculator.update_weights(VALID_WEIGHTS)
        assert store.read("site_2_usability") == VALID_WEIGHTS
        assert store.read("usability_weights") is None

    def test_persistence_failure_is_distinct(self) -> None:
        """Test a failed store write raises WeightPersistenceError and keeps weights."""

        class RejectingStore(InMemoryWeightStore):
            def write(self, key: str, weights: Any) -> bool:
                return False

        calculator = UsabilityRatingCalculator(RejectingStore())
        with pytest.raises(WeightPersistenceError):
            calculator.update_weights(VALID_WEIGHTS)
        assert calculator.get_weights() == dict(DEFAULT_USABILITY_WEIGHTS)


class TestAlgorithmExplanation:
    """Tests for get_algorithm_explanation()."""

    def test_reports_current_weights(self, calculator: UsabilityRatingCalculator) -> None:
        calculator.update_weights(VALID_WEIGHTS)
        explanation = calculator.get_algorithm_explanation()
        assert explanation.title == "Usability Rating Algorithm"
        assert {name: c.weight for name, c in explanation.components.items()} == VALID_WEIGHTS

    def test_labels_and_scale(self, calculator: UsabilityRatingCalculator) -> None:
        explanation = calculator.get_algorithm_explanation()
        assert explanation.components["rating_count"].label == "Rating Credibility"
        assert "1.0 to 5.0" in explanation.scale
        assert explanation.color_coding is None

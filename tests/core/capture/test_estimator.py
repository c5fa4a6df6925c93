"""Tests for the token → energy → emissions conversion."""

import pytest

from suggestion_meter.configs.system import EstimatorConfig
from suggestion_meter.core.capture.estimator import JOULES_PER_KWH, UsageEstimator
from suggestion_meter.core.capture.models import UsageTotals


def _estimator(**overrides) -> UsageEstimator:
    return UsageEstimator(EstimatorConfig(**overrides), UsageTotals())


class TestEstimate:
    def test_energy_is_linear_in_tokens(self):
        estimate = _estimator().estimate(6)
        assert estimate is not None
        assert estimate.token_count == 6
        assert estimate.energy_joules == 12.96
        assert estimate.total_energy_joules == 12.96

    def test_alternate_calibration(self):
        estimate = _estimator(joules_per_token=3.0).estimate(10)
        assert estimate is not None
        assert estimate.energy_joules == 30.0

    def test_emissions_recomputed_from_cumulative_energy(self):
        estimator = _estimator(joules_per_token=1_000_000.0)
        estimator.estimate(2)
        second = estimator.estimate(2)
        assert second is not None
        expected = 4_000_000 / JOULES_PER_KWH * 77
        assert estimator.totals.total_emissions_grams == pytest.approx(expected)
        assert second.total_emissions_grams == round(expected, 2)

    def test_published_values_are_rounded(self):
        estimate = _estimator(joules_per_token=0.333).estimate(1)
        assert estimate is not None
        assert estimate.energy_joules == 0.33

    def test_totals_are_not_rounded_internally(self):
        estimator = _estimator(joules_per_token=0.333)
        estimator.estimate(1)
        estimator.estimate(1)
        assert estimator.totals.total_energy_joules == pytest.approx(0.666)

    def test_monotonic_totals(self):
        estimator = _estimator()
        seen = []
        for tokens in (5, 0, 12, 1, 3):
            estimator.estimate(tokens)
            seen.append(estimator.totals.total_energy_joules)
        assert seen == sorted(seen)


class TestThreshold:
    def test_count_equal_to_threshold_is_accepted(self):
        estimator = _estimator(min_tokens=5)
        assert estimator.estimate(5) is not None
        assert estimator.totals.episodes == 1

    def test_count_below_threshold_is_rejected(self):
        estimator = _estimator(min_tokens=5)
        assert estimator.estimate(4) is None
        assert estimator.totals.total_energy_joules == 0.0
        assert estimator.totals.total_emissions_grams == 0.0
        assert estimator.totals.episodes == 0

    def test_zero_tokens_rejected_by_default(self):
        assert _estimator().estimate(0) is None

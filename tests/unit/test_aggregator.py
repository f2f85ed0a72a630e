"""Unit tests for per-bucket skill aggregation."""

from datetime import date
from decimal import Decimal

import pytest

from shared.utils.errors import MalformedMetricsResponseError
from services.challenge_trigger.app.aggregator import (
    SkillAggregator,
    apply_default_rate,
    coerce_metric_value,
    days_in_rolling_window,
    reduce_metric_values,
)
from services.challenge_trigger.app.buckets import BucketMembership
from services.challenge_trigger.app.scanner import PaginatedScanner
from tests.fixtures.mock_services import MockActivitySource, MockScanStore

# January (31) + February (29) + March (31) 2024
MARCH_2024_DAYS = 91


@pytest.mark.parametrize(
    "raw, expected",
    [
        (100, 100),
        (0, 0),
        (12.9, 12),
        (-3.7, -3),
        (Decimal("250"), 250),
        ("42", 42),
        ("  42.9km", 42),
        ("-8", -8),
        ("abc", None),
        ("", None),
        (None, None),
        (True, None),
        (float("nan"), None),
        (float("inf"), None),
        ([1, 2], None),
        (10 ** 400, None),
        (-(10 ** 400), None),
        ("9" * 400, None),
        ("1" * 5000, None),
        (Decimal("1e400"), None),
    ],
)
def test_coerce_metric_value(raw, expected):
    assert coerce_metric_value(raw) == expected


def test_reduce_all_zeros_keeps_single_zero():
    assert reduce_metric_values([0, 0, 0]) == 0


def test_reduce_discards_zeros_before_averaging():
    assert reduce_metric_values([0, 5, 0, 3]) == 4


def test_reduce_without_values_is_zero():
    assert reduce_metric_values([]) == 0


@pytest.mark.parametrize(
    "today, expected",
    [
        (date(2024, 3, 15), MARCH_2024_DAYS),
        (date(2023, 3, 1), 31 + 28 + 31),
        (date(2024, 1, 31), 30 + 31 + 31),
        (date(2024, 2, 10), 31 + 31 + 29),
        (date(2024, 7, 4), 30 + 31 + 31),
    ],
)
def test_days_in_rolling_window(today, expected):
    assert days_in_rolling_window(today) == expected


@pytest.mark.parametrize(
    "rate, expected_rate, used_default",
    [
        (0.0, 2.5, True),
        (0.05, 2.5, True),
        (0.1, 2.5, True),
        (0.1001, 0.1001, False),
        (7.25, 7.25, False),
    ],
)
def test_apply_default_rate(rate, expected_rate, used_default):
    assert apply_default_rate(rate, threshold=0.1, default=2.5) == (expected_rate, used_default)


def _aggregator(config, items, values, clock, metrics=None):
    membership = BucketMembership(PaginatedScanner(MockScanStore(items)))
    activity = MockActivitySource(values)
    return SkillAggregator(config, membership, activity, clock=clock, metrics=metrics), activity


class TestSkillAggregator:
    """Test SkillAggregator class."""

    @pytest.mark.asyncio
    async def test_average_is_mean_over_rolling_window_days(self, test_config, clock):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}, {'user_id': 'u2', 'bucket_id': 'b1'}]
        aggregator, activity = _aggregator(test_config, items, {'u1': 100, 'u2': 50}, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == pytest.approx(75 / MARCH_2024_DAYS)
        assert activity.calls == [['u1', 'u2']]

    @pytest.mark.asyncio
    async def test_empty_bucket_short_circuits(self, test_config, clock):
        """A bucket without users is zero and never calls the metrics service."""
        aggregator, activity = _aggregator(test_config, [{'user_id': 'u1', 'bucket_id': 'b1'}], {}, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b2')

        assert average == 0
        assert activity.calls == []

    @pytest.mark.asyncio
    async def test_zero_users_are_ignored(self, test_config, clock):
        items = [{'user_id': f'u{i}', 'bucket_id': 'b1'} for i in range(4)]
        values = {'u0': 0, 'u1': 500, 'u2': 0, 'u3': 300}
        aggregator, _ = _aggregator(test_config, items, values, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == pytest.approx(400 / MARCH_2024_DAYS)

    @pytest.mark.asyncio
    async def test_all_zero_bucket_uses_default_rate(self, test_config, clock, job_metrics):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}, {'user_id': 'u2', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(test_config, items, {'u1': 0, 'u2': 0}, clock, metrics=job_metrics)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == 2.5
        assert job_metrics.default_rate._value.get() == 1

    @pytest.mark.asyncio
    async def test_low_rate_uses_default_rate(self, test_config, clock):
        """9 units over 91 days is below 0.1 per day."""
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(test_config, items, {'u1': 9}, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == 2.5

    @pytest.mark.asyncio
    async def test_string_values_are_coerced(self, test_config, clock):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}, {'user_id': 'u2', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(test_config, items, {'u1': '182', 'u2': '364.8'}, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == pytest.approx(273 / MARCH_2024_DAYS)

    @pytest.mark.asyncio
    async def test_non_numeric_values_are_dropped_by_default(self, test_config, clock, job_metrics):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}, {'user_id': 'u2', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(
            test_config, items, {'u1': 'n/a', 'u2': 910}, clock, metrics=job_metrics
        )

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == pytest.approx(10.0)
        assert job_metrics.invalid_values._value.get() == 1

    @pytest.mark.asyncio
    async def test_out_of_range_integers_are_treated_as_non_numeric(self, test_config, clock, job_metrics):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}, {'user_id': 'u2', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(
            test_config, items, {'u1': 10 ** 400, 'u2': 910}, clock, metrics=job_metrics
        )

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == pytest.approx(10.0)
        assert job_metrics.invalid_values._value.get() == 1

    @pytest.mark.asyncio
    async def test_only_non_numeric_values_fall_back_to_default(self, test_config, clock):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(test_config, items, {'u1': 'garbage'}, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == 2.5

    @pytest.mark.asyncio
    async def test_non_numeric_values_raise_under_error_policy(self, test_config, clock):
        test_config.invalid_value_policy = 'error'
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(test_config, items, {'u1': 'garbage'}, clock)

        with pytest.raises(MalformedMetricsResponseError) as excinfo:
            await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert excinfo.value.details == {'user_id': 'u1', 'value': 'garbage'}

    @pytest.mark.asyncio
    async def test_metrics_failure_propagates(self, test_config, clock):
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}]
        aggregator, activity = _aggregator(test_config, items, {'u1': 100}, clock)
        activity.fail_on_call = 1

        with pytest.raises(RuntimeError, match="activity service unavailable"):
            await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

    @pytest.mark.asyncio
    async def test_custom_threshold_and_default(self, test_config, clock):
        test_config.default_rate_threshold = 1.0
        test_config.default_rate = 4.0
        items = [{'user_id': 'u1', 'bucket_id': 'b1'}]
        aggregator, _ = _aggregator(test_config, items, {'u1': 91}, clock)

        average = await aggregator.calculate_average_skill_for_bucket('leaderboard', 'b1')

        assert average == 4.0

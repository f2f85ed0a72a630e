"""
Per-bucket skill aggregation.

A bucket's skill is the mean rolling three-month activity of its users,
expressed as a per-day rate. Zero totals are read as "no data" unless
every user in the bucket is at zero, and rates at or below a small
threshold are replaced by a nominal default rate.
"""

from __future__ import annotations

import math
import re
import sys
from calendar import monthrange
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, List, Mapping, Optional, Protocol, Sequence, Tuple

import structlog

from shared.utils.errors import MalformedMetricsResponseError

from .buckets import BucketMembership
from .config import ChallengeTriggerConfig
from .job_metrics import ChallengeTriggerMetrics
from .models import BucketId, UserId, utc_now

logger = structlog.get_logger(__name__)

ROLLING_WINDOW_MONTHS = 3

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")

# Larger magnitudes cannot be averaged as floats
_MAX_METRIC_MAGNITUDE = int(sys.float_info.max)


class ActivitySource(Protocol):
    """Anything that can return per-user rolling activity aggregates."""

    async def batch_aggregate(self, user_ids: Sequence[UserId]) -> Mapping[UserId, Any]:
        """Return one raw aggregate value per user."""


def coerce_metric_value(raw: Any) -> Optional[int]:
    """Coerce a raw aggregate to an integer, or None if it is not numeric.

    Strings contribute their leading integer digits ("42.9km" -> 42) and
    finite numbers are truncated toward zero. Integers outside the float
    range count as non-numeric.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return _within_float_range(raw)
    if isinstance(raw, (float, Decimal)):
        number = float(raw)
        if not math.isfinite(number):
            return None
        return int(number)
    if isinstance(raw, str):
        match = _LEADING_INTEGER.match(raw)
        if match is None:
            return None
        try:
            value = int(match.group(1))
        except ValueError:
            # digit strings beyond the interpreter's int conversion limit
            return None
        return _within_float_range(value)
    return None


def _within_float_range(value: int) -> Optional[int]:
    return value if abs(value) <= _MAX_METRIC_MAGNITUDE else None


def reduce_metric_values(values: Sequence[int]) -> float:
    """Average the values after applying the zero rule.

    If every value is zero (or there are none) a single zero stands in for
    the bucket; otherwise zeros are discarded before averaging.
    """
    if all(value == 0 for value in values):
        survivors: List[int] = [0]
    else:
        survivors = [value for value in values if value != 0]
    return sum(survivors) / len(survivors)


def days_in_rolling_window(today: date, months: int = ROLLING_WINDOW_MONTHS) -> int:
    """Days in the month containing ``today`` plus the preceding ``months - 1`` months."""
    total = 0
    for offset in range(months - 1, -1, -1):
        month_index = today.year * 12 + (today.month - 1) - offset
        year, month = divmod(month_index, 12)
        total += monthrange(year, month + 1)[1]
    return total


def apply_default_rate(rate: float, threshold: float, default: float) -> Tuple[float, bool]:
    """Return ``(rate, used_default)``; rates at or below ``threshold`` become ``default``."""
    if rate <= threshold:
        return default, True
    return rate, False


class SkillAggregator:
    """Computes the average per-day skill for one bucket."""

    def __init__(
        self,
        config: ChallengeTriggerConfig,
        membership: BucketMembership,
        activity: ActivitySource,
        clock: Callable[[], datetime] = utc_now,
        metrics: Optional[ChallengeTriggerMetrics] = None,
    ) -> None:
        self._config = config
        self._membership = membership
        self._activity = activity
        self._clock = clock
        self._metrics = metrics

    async def calculate_average_skill_for_bucket(self, table: str, bucket_id: BucketId) -> float:
        user_ids = await self._membership.get_users_in_bucket(table, bucket_id)
        if not user_ids:
            logger.info("Bucket has no users", bucket_id=bucket_id)
            return 0.0

        raw_values = await self._activity.batch_aggregate(user_ids)
        values = self._coerce_values(bucket_id, raw_values)

        three_month_aggregate = reduce_metric_values(values)
        day_count = days_in_rolling_window(self._clock().date())
        rate, used_default = apply_default_rate(
            three_month_aggregate / day_count,
            threshold=self._config.default_rate_threshold,
            default=self._config.default_rate,
        )

        if used_default:
            if self._metrics:
                self._metrics.default_rate_applied()
            logger.info("Default average used", bucket_id=bucket_id, average=rate)
        else:
            logger.info(
                "Bucket average computed",
                bucket_id=bucket_id,
                average=rate,
                users=len(user_ids),
                day_count=day_count,
            )

        return rate if user_ids else 0.0

    def _coerce_values(self, bucket_id: BucketId, raw_values: Mapping[UserId, Any]) -> List[int]:
        values: List[int] = []
        for user_id, raw in raw_values.items():
            value = coerce_metric_value(raw)
            if value is not None:
                values.append(value)
                continue

            if self._metrics:
                self._metrics.invalid_value()
            if self._config.invalid_value_policy == "error":
                raise MalformedMetricsResponseError(
                    f"Non-numeric activity value for user {user_id}",
                    user_id=user_id,
                    value=raw,
                )
            logger.warning(
                "Dropping non-numeric activity value",
                bucket_id=bucket_id,
                user_id=user_id,
                value=repr(raw),
            )
        return values

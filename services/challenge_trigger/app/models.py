"""
Data models used by the challenge trigger job.
"""

from __future__ import annotations

import math
from calendar import monthrange
from datetime import date, datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

UserId = str
BucketId = str


class BucketAggregate(BaseModel):
    """Skill summary for one bucket of users.

    ``bucket_id`` and ``users`` are always text; numeric ids from the store
    are stringified.
    """

    model_config = ConfigDict(frozen=True)

    bucket_id: BucketId = Field(min_length=1)
    average_skill: float
    users: List[UserId] = Field(default_factory=list)

    @field_validator("average_skill")
    @classmethod
    def _check_average_skill(cls, value: float) -> float:
        if not math.isfinite(value) or value < 0:
            raise ValueError(f"average_skill must be finite and non-negative, got {value!r}")
        return value


class SeasonPayload(BaseModel):
    """Body submitted to the challenge-creation service."""

    model_config = ConfigDict(frozen=True)

    season_id: str
    start_date: str
    end_date: Optional[str] = None
    buckets: List[BucketAggregate] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def season_id_for(today: date) -> str:
    """Return the ``season_YYYY_MM`` key for the month containing ``today``."""
    return f"season_{today.year}_{today.month:02d}"


def season_start_for(today: date) -> str:
    return today.replace(day=1).isoformat()


def season_end_for(today: date) -> str:
    last_day = monthrange(today.year, today.month)[1]
    return today.replace(day=last_day).isoformat()

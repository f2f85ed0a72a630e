"""
Season payload assembly and challenge triggering.
"""

from __future__ import annotations

import asyncio
from datetime import datetime
from typing import Any, Callable, List, Optional

import structlog

from shared.utils.errors import DataProcessingError, create_error_context
from shared.utils.logging import get_run_id

from .aggregator import SkillAggregator
from .buckets import BucketDirectory, BucketMembership
from .config import ChallengeTriggerConfig
from .job_metrics import ChallengeTriggerMetrics
from .models import (
    BucketAggregate,
    BucketId,
    SeasonPayload,
    season_end_for,
    season_id_for,
    season_start_for,
    utc_now,
)
from .submitter import ChallengeSubmitter

logger = structlog.get_logger(__name__)


class PayloadAssembler:
    """Builds the season payload bucket by bucket and submits it.

    Buckets are processed in directory order. Empty bucket ids are skipped;
    any other failure aborts the whole run so no partial payload is ever
    submitted.
    """

    def __init__(
        self,
        config: ChallengeTriggerConfig,
        directory: BucketDirectory,
        membership: BucketMembership,
        aggregator: SkillAggregator,
        submitter: ChallengeSubmitter,
        clock: Callable[[], datetime] = utc_now,
        metrics: Optional[ChallengeTriggerMetrics] = None,
    ) -> None:
        self._config = config
        self._directory = directory
        self._membership = membership
        self._aggregator = aggregator
        self._submitter = submitter
        self._clock = clock
        self._metrics = metrics

    async def assemble(self, table: Optional[str] = None) -> SeasonPayload:
        table = table or self._config.table_name
        bucket_ids = await self._directory.get_all_unique_buckets(table)

        valid_ids: List[BucketId] = []
        for bucket_id in bucket_ids:
            if not bucket_id:
                logger.error("Encountered empty bucket id in unique buckets", table=table)
                if self._metrics:
                    self._metrics.bucket_skipped()
                continue
            valid_ids.append(bucket_id)

        if self._config.bucket_concurrency > 1:
            buckets = await self._build_concurrently(table, valid_ids)
        else:
            buckets = [await self._build_bucket(table, bucket_id) for bucket_id in valid_ids]

        today = self._clock().date()
        payload = SeasonPayload(
            season_id=season_id_for(today),
            start_date=season_start_for(today),
            end_date=season_end_for(today) if self._config.include_end_date else None,
            buckets=buckets,
        )
        logger.info(
            "Season payload assembled",
            season_id=payload.season_id,
            buckets=len(payload.buckets),
            skipped=len(bucket_ids) - len(valid_ids),
        )
        return payload

    async def prepare_and_trigger(self, table: Optional[str] = None) -> Any:
        """Assemble the payload and submit it to the challenge-creation service."""
        try:
            payload = await self.assemble(table)
            response = await self._submitter.submit(self._config.challenge_url, payload)
        except Exception as exc:
            logger.error("Error preparing data for challenge generation", error=str(exc))
            raise

        logger.info("Challenge generation response received", response=response)
        return response

    async def _build_bucket(self, table: str, bucket_id: BucketId) -> BucketAggregate:
        try:
            average_skill = await self._aggregator.calculate_average_skill_for_bucket(table, bucket_id)
            users = await self._membership.get_users_in_bucket(table, bucket_id)
        except DataProcessingError as exc:
            if exc.context is None:
                exc.context = create_error_context(
                    service=self._config.service_name,
                    operation="build_bucket",
                    table=table,
                    bucket_id=str(bucket_id),
                    correlation_id=get_run_id(),
                )
            raise

        if self._metrics:
            self._metrics.bucket_aggregated()
        # Non-string ids (e.g. DynamoDB numbers) are scanned as-is but reported as text
        return BucketAggregate(
            bucket_id=str(bucket_id),
            average_skill=average_skill,
            users=[str(user_id) for user_id in users],
        )

    async def _build_concurrently(self, table: str, bucket_ids: List[BucketId]) -> List[BucketAggregate]:
        semaphore = asyncio.Semaphore(self._config.bucket_concurrency)

        async def build(bucket_id: BucketId) -> BucketAggregate:
            async with semaphore:
                return await self._build_bucket(table, bucket_id)

        tasks = [asyncio.create_task(build(bucket_id)) for bucket_id in bucket_ids]
        try:
            # gather preserves input order, so output still follows the directory
            return list(await asyncio.gather(*tasks))
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

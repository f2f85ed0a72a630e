"""
Invocation boundary for the challenge trigger job.

This is the only place where failures are translated into a response;
everything below it lets exceptions propagate.
"""

from __future__ import annotations

import asyncio
import json
import time
from datetime import datetime
from typing import Any, Callable, Dict, Optional, Protocol
from uuid import uuid4

import structlog

from shared.framework.http_client import JSONHttpClient
from shared.storage.dynamodb import DynamoDBClient, DynamoDBConfig
from shared.utils.errors import ConfigurationError, DataProcessingError
from shared.utils.logging import bind_run_id, clear_run_id, setup_logging

from .activity import ActivityAggregateClient
from .aggregator import SkillAggregator
from .assembler import PayloadAssembler
from .buckets import BucketDirectory, BucketMembership
from .config import ChallengeTriggerConfig
from .job_metrics import ChallengeTriggerMetrics
from .models import utc_now
from .scanner import PaginatedScanner, ScanPageSource
from .submitter import ChallengeSubmitter

logger = structlog.get_logger(__name__)

SUCCESS_MESSAGE = "Challenge generation triggered."
FAILURE_MESSAGE = "Failed to trigger challenge generation due to an internal error."

_STORE_CLIENT: Optional[DynamoDBClient] = None
_LOGGING_CONFIGURED = False


class ChallengeTrigger(Protocol):
    async def prepare_and_trigger(self, table: Optional[str] = None) -> Any:
        """Assemble and submit the season payload."""


def success_response() -> Dict[str, Any]:
    return {"statusCode": 200, "body": {"message": SUCCESS_MESSAGE}}


def failure_response(exc: BaseException) -> Dict[str, Any]:
    return {"statusCode": 500, "body": {"error": FAILURE_MESSAGE, "details": str(exc)}}


def get_store_client(config: ChallengeTriggerConfig) -> DynamoDBClient:
    """Return the process-wide store client, creating it on first use.

    Warm Lambda containers reuse the client across invocations.
    """
    global _STORE_CLIENT
    if _STORE_CLIENT is None:
        _STORE_CLIENT = DynamoDBClient(
            DynamoDBConfig(
                region=config.aws.region,
                endpoint_url=config.aws.dynamodb_endpoint_url,
                page_size=config.scan_page_size,
            )
        )
    return _STORE_CLIENT


class ChallengeTriggerHandler:
    """Runs the pipeline once and maps the outcome to a status envelope."""

    def __init__(
        self,
        trigger: ChallengeTrigger,
        metrics: Optional[ChallengeTriggerMetrics] = None,
    ) -> None:
        self._trigger = trigger
        self._metrics = metrics

    async def handle(self, event: Any) -> Dict[str, Any]:
        # The triggering event carries no data the pipeline needs
        run_id = uuid4().hex
        bind_run_id(run_id)
        started = time.perf_counter()
        logger.info("Challenge generation triggered")
        try:
            await self._trigger.prepare_and_trigger()
        except Exception as exc:
            error_info = exc.to_dict() if isinstance(exc, DataProcessingError) else None
            logger.exception("Error in handler", error=str(exc), error_info=error_info)
            self._record("failure", started, error=exc)
            return failure_response(exc)
        finally:
            clear_run_id()

        self._record("success", started)
        return success_response()

    def _record(self, status: str, started: float, error: Optional[BaseException] = None) -> None:
        if not self._metrics:
            return
        collector = self._metrics.collector
        if error is not None:
            collector.record_error(type(error).__name__, "pipeline")
        collector.record_run(status, time.perf_counter() - started)


def build_assembler(
    config: ChallengeTriggerConfig,
    store: ScanPageSource,
    http: JSONHttpClient,
    clock: Callable[[], datetime] = utc_now,
    metrics: Optional[ChallengeTriggerMetrics] = None,
) -> PayloadAssembler:
    """Wire the pipeline components around the given collaborators."""
    scanner = PaginatedScanner(store)
    directory = BucketDirectory(scanner)
    membership = BucketMembership(scanner)
    aggregator = SkillAggregator(
        config,
        membership,
        ActivityAggregateClient(config.metrics_url, http),
        clock=clock,
        metrics=metrics,
    )
    return PayloadAssembler(
        config,
        directory,
        membership,
        aggregator,
        ChallengeSubmitter(http, metrics=metrics),
        clock=clock,
        metrics=metrics,
    )


async def run_once(
    event: Any,
    config: Optional[ChallengeTriggerConfig] = None,
    store: Optional[ScanPageSource] = None,
    clock: Callable[[], datetime] = utc_now,
    metrics: Optional[ChallengeTriggerMetrics] = None,
) -> Dict[str, Any]:
    """Build the pipeline for one invocation and run it through the handler."""
    try:
        config = config or ChallengeTriggerConfig()
    except ConfigurationError as exc:
        logger.error("Invalid configuration", error=str(exc), details=exc.details)
        return failure_response(exc)

    store = store or get_store_client(config)
    async with JSONHttpClient(
        config.service_slug,
        timeout_seconds=config.http.timeout_seconds,
    ) as http:
        assembler = build_assembler(config, store, http, clock=clock, metrics=metrics)
        handler = ChallengeTriggerHandler(assembler, metrics=metrics)
        return await handler.handle(event)


def _ensure_logging(config: ChallengeTriggerConfig) -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return
    observability = config.observability
    setup_logging(
        config.service_name,
        log_level=observability.log_level,
        format_type=observability.log_format,
    )
    _LOGGING_CONFIGURED = True


def lambda_handler(event: Any, context: Any) -> Dict[str, Any]:
    """AWS Lambda entry point; returns an API Gateway proxy response."""
    try:
        config = ChallengeTriggerConfig()
    except ConfigurationError as exc:
        logger.error("Invalid configuration", error=str(exc), details=exc.details)
        return _proxy_response(failure_response(exc))

    _ensure_logging(config)
    return _proxy_response(asyncio.run(run_once(event, config=config)))


def _proxy_response(response: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "statusCode": response["statusCode"],
        "body": json.dumps(response["body"]),
    }

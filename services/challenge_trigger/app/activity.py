"""
Client for the three-month activity aggregate endpoint.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Sequence

import aiohttp
import structlog

from shared.framework.http_client import JSONHttpClient
from shared.utils.errors import MalformedMetricsResponseError, MetricsCallError

from .models import UserId

logger = structlog.get_logger(__name__)


class ActivityAggregateClient:
    """Fetches one rolling three-calendar-month aggregate per user."""

    def __init__(self, url: str, http: JSONHttpClient) -> None:
        self._url = url
        self._http = http

    async def batch_aggregate(self, user_ids: Sequence[UserId]) -> Dict[UserId, Any]:
        """Return a mapping of user id to the raw aggregate value.

        Values are returned exactly as the endpoint sent them; numeric
        coercion belongs to the aggregator.

        Raises:
            MetricsCallError: On network failure or a non-2xx status.
            MalformedMetricsResponseError: If the body is not a JSON object.
        """
        try:
            status, text = await self._http.post_json(self._url, {"user_ids": list(user_ids)})
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            logger.error("Activity aggregate request failed", url=self._url, error=str(exc))
            raise MetricsCallError(
                f"Activity aggregate request failed: {exc}",
                url=self._url,
            ) from exc

        if not 200 <= status < 300:
            logger.error("Activity aggregate returned error status", url=self._url, status=status)
            raise MetricsCallError(
                f"Network response was not ok (HTTP {status})",
                url=self._url,
                status=status,
            )

        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise MalformedMetricsResponseError(
                f"Activity aggregate response is not valid JSON: {exc.msg}",
                value=text[:200],
            ) from exc

        if not isinstance(data, dict):
            raise MalformedMetricsResponseError(
                "Activity aggregate response must be a JSON object",
                value=type(data).__name__,
            )

        logger.debug("Activity aggregates received", users=len(user_ids), values=len(data))
        return data

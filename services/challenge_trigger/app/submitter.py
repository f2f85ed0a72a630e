"""
Submission of season payloads to the challenge-creation service.
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, Dict, Optional, Union

import aiohttp
import structlog

from shared.framework.http_client import JSONHttpClient
from shared.utils.errors import SubmissionError

from .job_metrics import ChallengeTriggerMetrics
from .models import SeasonPayload

logger = structlog.get_logger(__name__)


class ChallengeSubmitter:
    """POSTs the payload as JSON and returns the parsed JSON response."""

    def __init__(
        self,
        http: JSONHttpClient,
        metrics: Optional[ChallengeTriggerMetrics] = None,
    ) -> None:
        self._http = http
        self._metrics = metrics

    async def submit(self, url: str, payload: Union[SeasonPayload, Dict[str, Any]]) -> Any:
        """
        Submit ``payload`` to ``url``.

        The downstream body schema is opaque; anything that parses as JSON
        is returned as-is, including bodies sent with an error status.

        Raises:
            SubmissionError: On network failure or a body that is not JSON.
        """
        body = payload.to_dict() if isinstance(payload, SeasonPayload) else payload

        try:
            status, text = await self._http.post_json(url, body)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            self._record("network_error")
            logger.error("Challenge submission failed", url=url, error=str(exc))
            raise SubmissionError(f"Challenge submission failed: {exc}", url=url) from exc

        logger.info("Challenge submission completed", url=url, status=status, response=text)

        try:
            parsed = json.loads(text)
        except json.JSONDecodeError as exc:
            self._record("invalid_response")
            logger.error("Error parsing challenge submission response", url=url, status=status)
            raise SubmissionError(
                f"Challenge submission response is not valid JSON: {exc.msg}",
                url=url,
                status=status,
            ) from exc

        if not 200 <= status < 300:
            logger.warning("Challenge submission returned error status", url=url, status=status)
        self._record("success" if 200 <= status < 300 else "error_status")
        return parsed

    def _record(self, status: str) -> None:
        if self._metrics:
            self._metrics.submission(status)

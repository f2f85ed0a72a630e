"""JSON-over-HTTP client used for outbound service calls."""

import json
from typing import Any, Optional, Tuple

import aiohttp
import structlog


class JSONHttpClient:
    """Thin aiohttp wrapper that POSTs JSON bodies and hands back raw text.

    Decoding of the response is left to the caller so that each caller
    can map malformed bodies onto its own error type.
    """

    def __init__(
        self,
        name: str,
        timeout_seconds: float = 30,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        self.name = name
        self.timeout_seconds = timeout_seconds
        self.logger = structlog.get_logger(name)
        self.session = session
        self._owns_session = session is None

    async def start(self) -> None:
        """Open the underlying session."""
        if self.session:
            return

        self.session = aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
        )
        self._owns_session = True
        self.logger.debug("HTTP client started")

    async def stop(self) -> None:
        """Close the session if this client created it."""
        if self.session and self._owns_session:
            await self.session.close()
            self.logger.debug("HTTP client stopped")
        self.session = None

    async def __aenter__(self) -> "JSONHttpClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.stop()

    async def post_json(self, url: str, payload: Any) -> Tuple[int, str]:
        """POST ``payload`` as JSON and return ``(status, body_text)``.

        Network failures surface as ``aiohttp.ClientError``.
        """
        if not self.session:
            await self.start()

        body = json.dumps(payload)
        headers = {
            "Content-Type": "application/json",
            "Content-Length": str(len(body.encode("utf-8"))),
        }

        async with self.session.post(url, data=body, headers=headers) as response:
            text = await response.text()
            self.logger.debug("HTTP POST completed", url=url, status=response.status)
            return response.status, text

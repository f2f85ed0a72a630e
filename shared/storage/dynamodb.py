"""
DynamoDB async client wrapper for the leaderboard table.

Exposes a single page-at-a-time scan primitive. Pagination, filtering
semantics and aggregation live in the calling service; this module only
translates between plain filter/projection arguments and boto3 calls.
"""

import asyncio
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from shared.utils.errors import StoreScanError


@dataclass
class DynamoDBConfig:
    """DynamoDB configuration."""
    region: str = "eu-west-2"
    endpoint_url: Optional[str] = None
    page_size: Optional[int] = None


@dataclass(frozen=True)
class ScanFilter:
    """Equality filter applied server-side to a scan."""
    attribute: str
    value: Any


@dataclass(frozen=True)
class ScanPage:
    """One page of scan results plus the cursor for the next page."""
    items: List[Dict[str, Any]] = field(default_factory=list)
    next_cursor: Optional[Dict[str, Any]] = None


def build_scan_kwargs(
    table: str,
    scan_filter: Optional[ScanFilter] = None,
    projection: Optional[Sequence[str]] = None,
    cursor: Optional[Dict[str, Any]] = None,
    page_size: Optional[int] = None,
) -> Dict[str, Any]:
    """Translate scan arguments into ``Table.scan`` keyword arguments.

    Attribute names always go through placeholders so reserved words
    are never an issue.
    """
    kwargs: Dict[str, Any] = {}
    names: Dict[str, str] = {}

    if projection:
        placeholders = []
        for index, attribute in enumerate(projection):
            placeholder = f"#p{index}"
            names[placeholder] = attribute
            placeholders.append(placeholder)
        kwargs["ProjectionExpression"] = ", ".join(placeholders)

    if scan_filter is not None:
        names["#f0"] = scan_filter.attribute
        kwargs["FilterExpression"] = "#f0 = :f0"
        kwargs["ExpressionAttributeValues"] = {":f0": scan_filter.value}

    if names:
        kwargs["ExpressionAttributeNames"] = names
    if cursor:
        kwargs["ExclusiveStartKey"] = cursor
    if page_size:
        kwargs["Limit"] = page_size

    return kwargs


class DynamoDBClient:
    """
    Async DynamoDB client with one lazily created boto3 resource per thread.

    boto3 is blocking, so every scan is pushed onto a worker thread. boto3
    resources must not be shared between threads, so each worker thread
    builds its own from a fresh session and keeps it for the life of the
    process.
    """

    def __init__(
        self,
        config: Optional[DynamoDBConfig] = None,
        resource_factory: Optional[Callable[[], Any]] = None,
        **kwargs: Any,
    ):
        self.config = config or DynamoDBConfig(
            region=kwargs.get("region", "eu-west-2"),
            endpoint_url=kwargs.get("endpoint_url"),
            page_size=kwargs.get("page_size"),
        )
        self.logger = structlog.get_logger("dynamodb-client")
        self._resource_factory = resource_factory or self._create_resource
        self._local = threading.local()
        self._connected = False

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """Mark the client ready; resources are built on first use in each thread."""
        if self._connected:
            return

        self._connected = True
        self.logger.info(
            "DynamoDB client ready",
            region=self.config.region,
            endpoint_url=self.config.endpoint_url,
        )

    async def close(self) -> None:
        """Forget every per-thread resource and table handle."""
        self._local = threading.local()
        self._connected = False

    def _create_resource(self) -> Any:
        session = boto3.session.Session()
        return session.resource(
            "dynamodb",
            region_name=self.config.region,
            endpoint_url=self.config.endpoint_url,
        )

    def _table(self, name: str) -> Any:
        """Return the calling thread's handle for ``name``."""
        local = self._local
        if not hasattr(local, "tables"):
            local.resource = self._resource_factory()
            local.tables = {}
        table = local.tables.get(name)
        if table is None:
            table = local.resource.Table(name)
            local.tables[name] = table
        return table

    def _scan(self, table: str, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        return self._table(table).scan(**kwargs)

    async def scan_page(
        self,
        table: str,
        scan_filter: Optional[ScanFilter] = None,
        projection: Optional[Sequence[str]] = None,
        cursor: Optional[Dict[str, Any]] = None,
    ) -> ScanPage:
        """Fetch a single scan page."""
        if not self.is_connected:
            await self.connect()

        kwargs = build_scan_kwargs(
            table,
            scan_filter=scan_filter,
            projection=projection,
            cursor=cursor,
            page_size=self.config.page_size,
        )

        try:
            response = await asyncio.to_thread(self._scan, table, kwargs)
        except (BotoCoreError, ClientError) as exc:
            self.logger.error("DynamoDB scan error", table=table, error=str(exc))
            raise StoreScanError(
                f"DynamoDB scan failed on table {table}: {exc}",
                table=table,
            ) from exc

        return ScanPage(
            items=list(response.get("Items", [])),
            next_cursor=response.get("LastEvaluatedKey"),
        )

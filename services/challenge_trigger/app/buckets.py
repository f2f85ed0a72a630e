"""
Bucket directory and bucket membership lookups.
"""

from __future__ import annotations

from typing import List, Optional

import structlog

from shared.storage.dynamodb import ScanFilter

from .models import BucketId, UserId
from .scanner import PaginatedScanner

logger = structlog.get_logger(__name__)

BUCKET_ATTRIBUTE = "bucket_id"
USER_ATTRIBUTE = "user_id"


class BucketDirectory:
    """Lists the distinct bucket identifiers present in the table."""

    def __init__(self, scanner: PaginatedScanner) -> None:
        self._scanner = scanner

    async def get_all_unique_buckets(self, table: str) -> List[Optional[BucketId]]:
        """Return distinct bucket ids in first-seen order.

        Records without a bucket id contribute ``None``; callers are
        expected to skip falsy entries.
        """
        records = await self._scanner.scan(table, projection=[BUCKET_ATTRIBUTE])
        # first-seen order
        unique = dict.fromkeys(record.get(BUCKET_ATTRIBUTE) for record in records)
        buckets = list(unique)
        logger.info("Unique buckets scanned", table=table, buckets=len(buckets))
        return buckets


class BucketMembership:
    """Lists the users assigned to one bucket."""

    def __init__(self, scanner: PaginatedScanner) -> None:
        self._scanner = scanner

    async def get_users_in_bucket(self, table: str, bucket_id: BucketId) -> List[UserId]:
        records = await self._scanner.scan(
            table,
            scan_filter=ScanFilter(attribute=BUCKET_ATTRIBUTE, value=bucket_id),
            projection=[USER_ATTRIBUTE],
        )
        users: List[UserId] = []
        for record in records:
            user_id = record.get(USER_ATTRIBUTE)
            if not user_id:
                logger.warning("Bucket record without user id", table=table, bucket_id=bucket_id)
                continue
            users.append(user_id)
        logger.debug("Bucket members scanned", table=table, bucket_id=bucket_id, users=len(users))
        return users

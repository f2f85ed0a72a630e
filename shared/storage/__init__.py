"""
Storage abstractions for the challenge trigger job.

Provides async clients for:
- DynamoDB (leaderboard table)
"""

from .dynamodb import DynamoDBClient, DynamoDBConfig, ScanFilter, ScanPage

__all__ = [
    "DynamoDBClient",
    "DynamoDBConfig",
    "ScanFilter",
    "ScanPage",
]

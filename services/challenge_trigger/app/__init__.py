"""
Challenge Trigger package.

Scans the leaderboard table for user buckets, computes a per-bucket
average daily skill over a rolling three-month window, and submits the
resulting season payload to the challenge-creation service.

Modules:
- scanner: paginated scan over the backing store
- buckets: bucket directory and bucket membership lookups
- activity: client for the three-month activity aggregate endpoint
- aggregator: per-bucket skill reduction
- assembler: season payload assembly
- submitter: challenge-creation submission
- handler: invocation boundary and AWS Lambda entry point

The command-line entrypoint is `app.main`.
"""

__all__ = [
    "__doc__",
]

"""
Command-line entry point for the challenge trigger job.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any, Dict, Optional, Sequence

from shared.framework.http_client import JSONHttpClient
from shared.utils.errors import ConfigurationError
from shared.utils.logging import setup_logging

from .config import ChallengeTriggerConfig
from .handler import build_assembler, failure_response, get_store_client, run_once
from .job_metrics import ChallengeTriggerMetrics


async def dry_run(config: ChallengeTriggerConfig, table: Optional[str] = None) -> Dict[str, Any]:
    """Assemble the season payload without submitting it."""
    async with JSONHttpClient(
        config.service_slug,
        timeout_seconds=config.http.timeout_seconds,
    ) as http:
        assembler = build_assembler(config, get_store_client(config), http)
        payload = await assembler.assemble(table)
    return payload.to_dict()


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate bucket skills and trigger challenge generation.")
    parser.add_argument("--table", type=str, default=None, help="Override the leaderboard table name.")
    parser.add_argument("--dry-run", action="store_true", help="Print the payload instead of submitting it.")
    parser.add_argument("--print-metrics", action="store_true", help="Print Prometheus metrics after the run.")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = _parse_args(argv)
    try:
        config = ChallengeTriggerConfig()
    except ConfigurationError as exc:
        print(json.dumps(failure_response(exc), indent=2))
        return 1
    if args.table:
        config.table_name = args.table
    setup_logging(
        config.service_name,
        log_level=config.observability.log_level,
        format_type=config.observability.log_format,
    )

    if args.dry_run:
        payload = asyncio.run(dry_run(config, table=args.table))
        print(json.dumps(payload, indent=2))
        return 0

    metrics = ChallengeTriggerMetrics()
    metrics.collector.update_service_info(version="1.0.0", environment=config.environment)
    response = asyncio.run(run_once({}, config=config, metrics=metrics))
    print(json.dumps(response, indent=2))
    if args.print_metrics:
        sys.stdout.write(metrics.collector.get_metrics().decode("utf-8"))
    return 0 if response["statusCode"] == 200 else 1


if __name__ == "__main__":
    sys.exit(main())

"""Pytest configuration and fixtures."""

from datetime import datetime, timezone

import pytest
from prometheus_client import CollectorRegistry

from shared.framework.metrics import MetricsCollector
from services.challenge_trigger.app.config import ChallengeTriggerConfig
from services.challenge_trigger.app.job_metrics import ChallengeTriggerMetrics
from tests.fixtures.mock_services import MockActivitySource, MockHttpClient, MockScanStore


METRICS_URL = "https://metrics.test/3-months-aggregate"
CHALLENGE_URL = "https://challenges.test/challenge-creation"


@pytest.fixture
def fixed_now():
    """Invocation time used by every clock-dependent test."""
    return datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now):
    """Clock callable pinned to ``fixed_now``."""
    return lambda: fixed_now


@pytest.fixture
def test_config(monkeypatch):
    """Job configuration isolated from the host environment."""
    for key in (
        "CHALLENGE_TRIGGER_TABLE",
        "CHALLENGE_TRIGGER_INVALID_VALUE_POLICY",
        "CHALLENGE_TRIGGER_BUCKET_CONCURRENCY",
        "CHALLENGE_TRIGGER_INCLUDE_END_DATE",
        "CHALLENGE_TRIGGER_DEFAULT_RATE",
        "CHALLENGE_TRIGGER_DEFAULT_RATE_THRESHOLD",
    ):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("CHALLENGE_TRIGGER_ENV", "local")
    monkeypatch.setenv("CHALLENGE_TRIGGER_METRICS_URL", METRICS_URL)
    monkeypatch.setenv("CHALLENGE_TRIGGER_CHALLENGE_URL", CHALLENGE_URL)
    return ChallengeTriggerConfig()


@pytest.fixture
def job_metrics():
    """Metrics bound to a private registry so tests never collide."""
    return ChallengeTriggerMetrics(MetricsCollector("challenge_trigger", registry=CollectorRegistry()))


@pytest.fixture
def leaderboard_items():
    """Sample leaderboard rows spread over three buckets."""
    return [
        {'user_id': 'u1', 'bucket_id': 'b1'},
        {'user_id': 'u2', 'bucket_id': 'b1'},
        {'user_id': 'u3', 'bucket_id': 'b2'},
        {'user_id': 'u4', 'bucket_id': 'b3'},
        {'user_id': 'u5', 'bucket_id': 'b2'},
    ]


@pytest.fixture
def scan_store(leaderboard_items):
    """Paged in-memory leaderboard table."""
    return MockScanStore(leaderboard_items, page_size=2)


@pytest.fixture
def activity_source():
    """Activity collaborator with canned values."""
    return MockActivitySource()


@pytest.fixture
def http_client():
    """Recorded HTTP client double."""
    return MockHttpClient()

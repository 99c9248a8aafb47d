"""
Shared fixtures for the campaign management test-suite.

Every service test runs against the in-memory adapters and a frozen clock.
"""

from datetime import datetime, timedelta, timezone

import pytest

from campaign_management.application.services.campaign_service import CampaignService
from campaign_management.core.config import Settings
from campaign_management.domain import (
    Campaign,
    CampaignType,
    Money,
    RuleID,
    UserID,
)
from campaign_management.infrastructure import (
    InMemoryCampaignEventRepository,
    InMemoryCampaignRepository,
    InMemoryTargetingService,
    LoggingNotificationService,
    RecordingEventPublisher,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def user_id():
    return UserID.generate()


@pytest.fixture
def rule_ids():
    return [RuleID.generate(), RuleID.generate()]


@pytest.fixture
def make_campaign(user_id, rule_ids):
    """Factory for new DRAFT campaigns that may be activated at NOW."""

    def factory(**overrides) -> Campaign:
        values = {
            "name": "Summer Loyalty Push",
            "campaign_type": CampaignType.LOYALTY,
            "targeting_rules": rule_ids,
            "start_date": NOW - timedelta(days=1),
            "created_by": user_id,
            "description": "Double points for returning customers",
            "end_date": NOW + timedelta(days=30),
            "budget": Money("1000.00", "EUR"),
            "now": NOW - timedelta(days=2),
        }
        values.update(overrides)
        return Campaign.create(**values)

    return factory


@pytest.fixture
def test_settings():
    """Settings with short collaborator timeouts."""
    return Settings(
        EVENT_PUBLISH_TIMEOUT_SECONDS=0.05,
        NOTIFICATION_TIMEOUT_SECONDS=0.05,
        DEFAULT_PAGE_SIZE=20,
        MAX_PAGE_SIZE=100,
    )


@pytest.fixture
def repository():
    return InMemoryCampaignRepository()


@pytest.fixture
def event_repository():
    return InMemoryCampaignEventRepository()


@pytest.fixture
def publisher():
    return RecordingEventPublisher()


@pytest.fixture
def notifier():
    return LoggingNotificationService()


@pytest.fixture
def targeting():
    return InMemoryTargetingService()


@pytest.fixture
def service(repository, publisher, targeting, notifier, event_repository, test_settings):
    return CampaignService(
        repository=repository,
        event_publisher=publisher,
        targeting_service=targeting,
        notification_service=notifier,
        event_repository=event_repository,
        settings=test_settings,
        clock=lambda: NOW,
    )


@pytest.fixture
def create_campaign(service, user_id, rule_ids):
    """Create a campaign through the service; returns a coroutine function."""

    async def factory(**overrides) -> Campaign:
        values = {
            "name": "Summer Loyalty Push",
            "campaign_type": CampaignType.LOYALTY,
            "targeting_rules": rule_ids,
            "start_date": NOW - timedelta(days=1),
            "created_by": user_id,
            "end_date": NOW + timedelta(days=30),
            "budget": Money("1000.00", "EUR"),
        }
        values.update(overrides)
        return await service.create_campaign(**values)

    return factory

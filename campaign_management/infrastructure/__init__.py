"""
Infrastructure adapters for the campaign ports.

Only in-memory implementations ship here; they back the test-suite and
local wiring.
"""

from .memory import (
    InMemoryCampaignEventRepository,
    InMemoryCampaignRepository,
    InMemoryTargetingService,
    LoggingNotificationService,
    RecordingEventPublisher,
)

__all__ = [
    "InMemoryCampaignEventRepository",
    "InMemoryCampaignRepository",
    "InMemoryTargetingService",
    "LoggingNotificationService",
    "RecordingEventPublisher",
]

"""Application services."""

from .campaign_service import CampaignService, CampaignUpdate
from .cross_cutting import ApplicationLogger, AuditEvent, LogLevel, performance_monitor

__all__ = [
    "CampaignService",
    "CampaignUpdate",
    "ApplicationLogger",
    "AuditEvent",
    "LogLevel",
    "performance_monitor",
]

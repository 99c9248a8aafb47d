"""
Domain Port Interfaces

Abstract interfaces for the collaborators the campaign core depends on:
persistence, event publishing, targeting rule validation and notifications.
These interfaces are implemented by the infrastructure layer.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Sequence

from .entities import Campaign
from .events import DomainEvent
from .exceptions import FieldError, ValidationError
from .metrics import CampaignEventType, TrackedEvent
from .services import BudgetAlert, PerformanceAlert
from .value_objects import CampaignID, CampaignStatus, CampaignType, RuleID, UserID

SORT_FIELDS = ("name", "created_at", "updated_at", "start_date", "status")
SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class ListCriteria:
    """Filtering, sorting and pagination for campaign listings."""

    status: Optional[CampaignStatus] = None
    campaign_type: Optional[CampaignType] = None
    created_by: Optional[UserID] = None
    start_date_from: Optional[datetime] = None
    start_date_to: Optional[datetime] = None
    search: Optional[str] = None
    page: int = 1
    page_size: int = 20
    sort_by: str = "created_at"
    sort_order: str = "desc"

    def __post_init__(self):
        errors = []
        if self.page < 1:
            errors.append(FieldError("page", "page must be at least 1"))
        if self.page_size < 1:
            errors.append(FieldError("page_size", "page size must be at least 1"))
        if self.sort_by not in SORT_FIELDS:
            errors.append(FieldError("sort_by", f"cannot sort by {self.sort_by!r}"))
        if self.sort_order not in SORT_ORDERS:
            errors.append(FieldError("sort_order", "sort order must be 'asc' or 'desc'"))
        if errors:
            raise ValidationError("invalid list criteria", field_errors=errors)

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size


class CampaignRepositoryInterface(ABC):
    """
    Repository interface for the Campaign aggregate.

    Implementations must reject a save whose ``persisted_version`` no longer
    matches the stored version, and must refuse a second non-deleted campaign
    with the same name; both with ConflictError.
    """

    @abstractmethod
    async def save(self, campaign: Campaign) -> None:
        """Save a campaign (create or update)."""
        pass

    @abstractmethod
    async def get_by_id(self, campaign_id: CampaignID) -> Optional[Campaign]:
        """Get a non-deleted campaign by ID."""
        pass

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[Campaign]:
        """Get a non-deleted campaign by its exact name."""
        pass

    @abstractmethod
    async def list(self, criteria: ListCriteria) -> List[Campaign]:
        """List one page of campaigns matching the criteria."""
        pass

    @abstractmethod
    async def count(self, criteria: ListCriteria) -> int:
        """Count every campaign matching the criteria, ignoring pagination."""
        pass

    @abstractmethod
    async def delete(self, campaign_id: CampaignID) -> bool:
        """Soft delete a campaign; False when there was nothing to delete."""
        pass

    @abstractmethod
    async def exists_by_name(self, name: str) -> bool:
        """Check whether a non-deleted campaign already uses this name."""
        pass


class CampaignEventRepositoryInterface(ABC):
    """
    Append-only store of the raw interactions tracked for campaigns.

    The folded counters live on the aggregate; this store keeps every event
    so bounces, unsubscribes and date windows can be analysed later.
    """

    @abstractmethod
    async def save(self, campaign_id: CampaignID, event: TrackedEvent) -> None:
        """Record one tracked event for a campaign."""
        pass

    @abstractmethod
    async def find_by_campaign_id(
        self,
        campaign_id: CampaignID,
        event_type: Optional[CampaignEventType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[TrackedEvent]:
        """Events of a campaign, oldest first; the time window is [start_date, end_date)."""
        pass

    @abstractmethod
    async def count_by_campaign_id(
        self, campaign_id: CampaignID, event_type: Optional[CampaignEventType] = None
    ) -> int:
        pass


class EventPublisherInterface(ABC):
    """Publishes domain events to the rest of the platform."""

    @abstractmethod
    async def publish(self, event: DomainEvent) -> None:
        """Publish one event; raises on failure."""
        pass


class TargetingServiceInterface(ABC):
    """Gateway to the rules engine owning targeting rules."""

    @abstractmethod
    async def validate_targeting_rules(self, rule_ids: Sequence[RuleID]) -> None:
        """Raise ValidationError if any rule cannot be attached to a campaign."""
        pass


class NotificationServiceInterface(ABC):
    """Delivers advisory campaign notifications."""

    @abstractmethod
    async def send_performance_alert(self, alert: PerformanceAlert) -> None:
        pass

    @abstractmethod
    async def send_budget_alert(self, alert: BudgetAlert) -> None:
        pass

    @abstractmethod
    async def send_campaign_started(self, campaign_id: CampaignID) -> None:
        pass

    @abstractmethod
    async def send_campaign_ended(self, campaign_id: CampaignID) -> None:
        pass

"""
In-memory adapters for every campaign port.

Used by the test-suite and for local wiring. The repository behaves like a
real store would: it keeps deep copies, enforces the optimistic version
check and the unique-name constraint, and soft deletes.
"""

import asyncio
import copy
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..domain.entities import Campaign
from ..domain.events import DomainEvent
from ..domain.exceptions import ConflictError, FieldError, ValidationError
from ..domain.metrics import CampaignEventType, TrackedEvent
from ..domain.interfaces import (
    CampaignEventRepositoryInterface,
    CampaignRepositoryInterface,
    EventPublisherInterface,
    ListCriteria,
    NotificationServiceInterface,
    TargetingServiceInterface,
)
from ..domain.services import BudgetAlert, PerformanceAlert
from ..domain.value_objects import CampaignID, RuleID

logger = logging.getLogger(__name__)


def _utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


class InMemoryCampaignRepository(CampaignRepositoryInterface):
    """Dict-backed campaign store with version checks and soft delete."""

    def __init__(self):
        self._campaigns: Dict[CampaignID, Campaign] = {}
        self._deleted_at: Dict[CampaignID, datetime] = {}
        self._lock = asyncio.Lock()

    async def save(self, campaign: Campaign) -> None:
        async with self._lock:
            stored = self._campaigns.get(campaign.id)
            stored_version = stored.version if stored is not None else 0

            if campaign.id in self._deleted_at:
                raise ConflictError(
                    f"Campaign {campaign.id} has been deleted",
                    reason=ConflictError.VERSION_MISMATCH,
                    resource_id=str(campaign.id),
                    expected_version=campaign.persisted_version,
                    actual_version=stored_version,
                )

            if stored_version != campaign.persisted_version:
                raise ConflictError(
                    f"Campaign {campaign.id} was modified concurrently",
                    reason=ConflictError.VERSION_MISMATCH,
                    resource_id=str(campaign.id),
                    expected_version=campaign.persisted_version,
                    actual_version=stored_version,
                )

            for other in self._active():
                if other.id != campaign.id and other.name == campaign.name:
                    raise ConflictError(
                        f"Campaign with name '{campaign.name}' already exists",
                        reason=ConflictError.DUPLICATE_NAME,
                        resource_id=str(other.id),
                    )

            snapshot = copy.deepcopy(campaign)
            # pending events are transient and never stored
            snapshot.pull_events()
            snapshot.mark_persisted()
            self._campaigns[campaign.id] = snapshot

    async def get_by_id(self, campaign_id: CampaignID) -> Optional[Campaign]:
        if campaign_id in self._deleted_at:
            return None
        stored = self._campaigns.get(campaign_id)
        return copy.deepcopy(stored) if stored is not None else None

    async def get_by_name(self, name: str) -> Optional[Campaign]:
        for campaign in self._active():
            if campaign.name == name:
                return copy.deepcopy(campaign)
        return None

    async def list(self, criteria: ListCriteria) -> List[Campaign]:
        matches = self._matching(criteria)
        page = matches[criteria.offset: criteria.offset + criteria.page_size]
        return [copy.deepcopy(campaign) for campaign in page]

    async def count(self, criteria: ListCriteria) -> int:
        return len(self._matching(criteria))

    async def delete(self, campaign_id: CampaignID) -> bool:
        async with self._lock:
            if campaign_id not in self._campaigns or campaign_id in self._deleted_at:
                return False
            self._deleted_at[campaign_id] = datetime.now(timezone.utc)
            return True

    async def exists_by_name(self, name: str) -> bool:
        return any(campaign.name == name for campaign in self._active())

    def is_deleted(self, campaign_id: CampaignID) -> bool:
        return campaign_id in self._deleted_at

    def _active(self) -> List[Campaign]:
        return [
            campaign
            for campaign_id, campaign in self._campaigns.items()
            if campaign_id not in self._deleted_at
        ]

    def _matching(self, criteria: ListCriteria) -> List[Campaign]:
        matches = [campaign for campaign in self._active() if self._matches(campaign, criteria)]
        matches.sort(
            key=lambda campaign: self._sort_key(campaign, criteria.sort_by),
            reverse=criteria.sort_order == "desc",
        )
        return matches

    @staticmethod
    def _matches(campaign: Campaign, criteria: ListCriteria) -> bool:
        if criteria.status is not None and campaign.status != criteria.status:
            return False
        if criteria.campaign_type is not None and campaign.campaign_type != criteria.campaign_type:
            return False
        if criteria.created_by is not None and campaign.created_by != criteria.created_by:
            return False
        if criteria.start_date_from is not None and campaign.start_date < _utc(criteria.start_date_from):
            return False
        if criteria.start_date_to is not None and campaign.start_date > _utc(criteria.start_date_to):
            return False
        if criteria.search:
            needle = criteria.search.lower()
            if needle not in campaign.name.lower() and needle not in campaign.description.lower():
                return False
        return True

    @staticmethod
    def _sort_key(campaign: Campaign, sort_by: str):
        if sort_by == "name":
            return campaign.name.lower()
        if sort_by == "status":
            return campaign.status.value
        return getattr(campaign, sort_by)


class InMemoryCampaignEventRepository(CampaignEventRepositoryInterface):
    """Append-only list of tracked events per campaign."""

    def __init__(self):
        self._events: Dict[CampaignID, List[TrackedEvent]] = {}

    async def save(self, campaign_id: CampaignID, event: TrackedEvent) -> None:
        self._events.setdefault(campaign_id, []).append(event)

    async def find_by_campaign_id(
        self,
        campaign_id: CampaignID,
        event_type: Optional[CampaignEventType] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[TrackedEvent]:
        events = [
            event
            for event in self._events.get(campaign_id, [])
            if (event_type is None or event.event_type == event_type)
            and (start_date is None or _utc(event.occurred_at) >= _utc(start_date))
            and (end_date is None or _utc(event.occurred_at) < _utc(end_date))
        ]
        events.sort(key=lambda event: _utc(event.occurred_at))
        return events[:limit] if limit is not None else events

    async def count_by_campaign_id(
        self, campaign_id: CampaignID, event_type: Optional[CampaignEventType] = None
    ) -> int:
        return len(await self.find_by_campaign_id(campaign_id, event_type=event_type))


class RecordingEventPublisher(EventPublisherInterface):
    """Keeps every published event, in order, for inspection."""

    def __init__(self):
        self.published: List[DomainEvent] = []

    async def publish(self, event: DomainEvent) -> None:
        logger.debug(f"Publishing {event.event_type} for campaign {event.aggregate_id}")
        self.published.append(event)

    @property
    def event_types(self) -> List[str]:
        return [event.event_type for event in self.published]

    def clear(self) -> None:
        self.published.clear()


class LoggingNotificationService(NotificationServiceInterface):
    """Writes notifications to the log and remembers what was sent."""

    def __init__(self):
        self.sent: List[Tuple[str, object]] = []

    async def send_performance_alert(self, alert: PerformanceAlert) -> None:
        logger.info(f"Performance alert [{alert.severity.value}] {alert.type.value}: {alert.message}")
        self.sent.append(("performance_alert", alert))

    async def send_budget_alert(self, alert: BudgetAlert) -> None:
        logger.info(f"Budget alert [{alert.severity.value}] {alert.type.value}: {alert.message}")
        self.sent.append(("budget_alert", alert))

    async def send_campaign_started(self, campaign_id: CampaignID) -> None:
        logger.info(f"Campaign started: {campaign_id}")
        self.sent.append(("campaign_started", campaign_id))

    async def send_campaign_ended(self, campaign_id: CampaignID) -> None:
        logger.info(f"Campaign ended: {campaign_id}")
        self.sent.append(("campaign_ended", campaign_id))

    def kinds(self) -> List[str]:
        return [kind for kind, _ in self.sent]


class InMemoryTargetingService(TargetingServiceInterface):
    """
    Accepts any targeting rule, or only those in ``allowed_rule_ids`` when
    an allow-list is given.
    """

    def __init__(self, allowed_rule_ids: Optional[Iterable[RuleID]] = None):
        self.allowed_rule_ids: Optional[Set[RuleID]] = (
            set(allowed_rule_ids) if allowed_rule_ids is not None else None
        )
        self.validated: List[List[RuleID]] = []

    async def validate_targeting_rules(self, rule_ids: Sequence[RuleID]) -> None:
        self.validated.append(list(rule_ids))
        if self.allowed_rule_ids is None:
            return

        errors = [
            FieldError(f"targeting_rules[{index}]", f"unknown targeting rule: {rule_id}")
            for index, rule_id in enumerate(rule_ids)
            if rule_id not in self.allowed_rule_ids
        ]
        if errors:
            raise ValidationError("invalid targeting rules", field_errors=errors)

"""
Campaign orchestration service.

Sequences every campaign use case the same way: load the aggregate, mutate
it, persist it, publish its events, then run best-effort side effects.
Nothing is published for a change that failed to persist, and a failed
publish or notification never fails the use case.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, List, Optional, Sequence

from ...core.config import Settings, get_settings
from ...domain.entities import Campaign
from ...domain.exceptions import (
    ConflictError,
    InfrastructureError,
    NotFoundError,
    ValidationError,
)
from ...domain.interfaces import (
    CampaignEventRepositoryInterface,
    CampaignRepositoryInterface,
    EventPublisherInterface,
    ListCriteria,
    NotificationServiceInterface,
    TargetingServiceInterface,
)
from ...domain.metrics import CampaignEventType, CampaignMetrics, TrackedEvent
from ...domain.services import (
    CampaignAlertService,
    CampaignPerformanceService,
    PerformanceComparison,
    PerformanceReport,
)
from ...domain.settings import CampaignSettings
from ...domain.value_objects import CampaignID, CampaignType, Money, RuleID, UserID
from .cross_cutting import ApplicationLogger, AuditEvent, LogLevel

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CampaignUpdate:
    """
    Field changes applied to a campaign in one load/persist cycle.

    ``None`` leaves a field untouched; ``clear_budget`` removes the budget.
    Schedule changes need ``start_date``; ``end_date`` alone keeps the
    current start date.
    """

    name: Optional[str] = None
    description: Optional[str] = None
    targeting_rules: Optional[List[RuleID]] = None
    budget: Optional[Money] = None
    clear_budget: bool = False
    settings: Optional[CampaignSettings] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    def is_empty(self) -> bool:
        return (
            self.name is None
            and self.description is None
            and self.targeting_rules is None
            and self.budget is None
            and not self.clear_budget
            and self.settings is None
            and self.start_date is None
            and self.end_date is None
        )


class CampaignService:
    """
    Application service orchestrating the Campaign aggregate and its ports.
    """

    def __init__(
        self,
        repository: CampaignRepositoryInterface,
        event_publisher: EventPublisherInterface,
        targeting_service: TargetingServiceInterface,
        notification_service: NotificationServiceInterface,
        event_repository: CampaignEventRepositoryInterface,
        settings: Optional[Settings] = None,
        alert_service: Optional[CampaignAlertService] = None,
        performance_service: Optional[CampaignPerformanceService] = None,
        app_logger: Optional[ApplicationLogger] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.repository = repository
        self.event_publisher = event_publisher
        self.targeting_service = targeting_service
        self.notification_service = notification_service
        self.event_repository = event_repository
        self.settings = settings or get_settings()
        self.alert_service = alert_service or CampaignAlertService(
            low_ctr_threshold=self.settings.LOW_CTR_THRESHOLD,
            low_ctr_min_impressions=self.settings.LOW_CTR_MIN_IMPRESSIONS,
            low_conversion_threshold=self.settings.LOW_CONVERSION_THRESHOLD,
            low_conversion_min_clicks=self.settings.LOW_CONVERSION_MIN_CLICKS,
            budget_alert_threshold=self.settings.BUDGET_ALERT_THRESHOLD,
        )
        self.performance_service = performance_service or CampaignPerformanceService(
            budget_alert_threshold=self.settings.BUDGET_ALERT_THRESHOLD
        )
        self.app_logger = app_logger or ApplicationLogger()
        self._clock = clock

    # Commands

    async def create_campaign(
        self,
        name: str,
        campaign_type: CampaignType,
        targeting_rules: Sequence[RuleID],
        start_date: datetime,
        created_by: UserID,
        description: str = "",
        end_date: Optional[datetime] = None,
        budget: Optional[Money] = None,
        settings: Optional[CampaignSettings] = None,
    ) -> Campaign:
        """Create a DRAFT campaign with a unique name and validated targeting rules."""
        logger.info(f"Creating campaign: {name}")

        await self._ensure_name_available(name)
        await self._validate_targeting_rules(targeting_rules)

        campaign = Campaign.create(
            name=name,
            campaign_type=campaign_type,
            targeting_rules=targeting_rules,
            start_date=start_date,
            created_by=created_by,
            description=description,
            end_date=end_date,
            budget=budget,
            settings=settings,
            default_currency=self.settings.DEFAULT_CURRENCY,
            now=self._clock(),
        )

        await self._persist(campaign, "create")
        await self._publish_events(campaign)

        self.app_logger.log_audit_event(
            AuditEvent.CAMPAIGN_CREATED,
            user_id=str(created_by),
            resource_id=str(campaign.id),
            details={"name": campaign.name, "type": campaign.campaign_type.value},
        )
        logger.info(f"Campaign created successfully: {campaign.id}")
        return campaign

    async def activate_campaign(
        self, campaign_id: CampaignID, user_id: Optional[UserID] = None
    ) -> Campaign:
        campaign = await self._load(campaign_id)
        campaign.activate(now=self._clock())
        await self._commit(campaign, "activate", AuditEvent.CAMPAIGN_ACTIVATED, user_id)

        await self._notify(
            "campaign_started",
            campaign_id,
            lambda: self.notification_service.send_campaign_started(campaign_id),
        )
        return campaign

    async def pause_campaign(
        self, campaign_id: CampaignID, user_id: Optional[UserID] = None
    ) -> Campaign:
        campaign = await self._load(campaign_id)
        campaign.pause(now=self._clock())
        await self._commit(campaign, "pause", AuditEvent.CAMPAIGN_PAUSED, user_id)
        return campaign

    async def resume_campaign(
        self, campaign_id: CampaignID, user_id: Optional[UserID] = None
    ) -> Campaign:
        campaign = await self._load(campaign_id)
        campaign.resume(now=self._clock())
        await self._commit(campaign, "resume", AuditEvent.CAMPAIGN_RESUMED, user_id)
        return campaign

    async def complete_campaign(
        self, campaign_id: CampaignID, user_id: Optional[UserID] = None
    ) -> Campaign:
        campaign = await self._load(campaign_id)
        campaign.complete(now=self._clock())
        await self._commit(campaign, "complete", AuditEvent.CAMPAIGN_COMPLETED, user_id)

        await self._notify(
            "campaign_ended",
            campaign_id,
            lambda: self.notification_service.send_campaign_ended(campaign_id),
        )
        return campaign

    async def cancel_campaign(
        self, campaign_id: CampaignID, reason: str, user_id: Optional[UserID] = None
    ) -> Campaign:
        campaign = await self._load(campaign_id)
        campaign.cancel(reason, now=self._clock())
        await self._commit(
            campaign, "cancel", AuditEvent.CAMPAIGN_CANCELLED, user_id, {"reason": reason}
        )
        return campaign

    async def update_campaign(
        self,
        campaign_id: CampaignID,
        update: CampaignUpdate,
        user_id: Optional[UserID] = None,
    ) -> Campaign:
        """
        Apply every requested field change, then persist once.

        Renames re-run the uniqueness check and new targeting rules are
        validated by the rules engine before anything is changed.
        """
        if update.is_empty():
            raise ValidationError("nothing to update")

        campaign = await self._load(campaign_id)
        now = self._clock()

        if update.name is not None and update.name != campaign.name:
            await self._ensure_name_available(update.name)
        if update.targeting_rules is not None:
            await self._validate_targeting_rules(update.targeting_rules)

        if update.name is not None or update.description is not None:
            campaign.update_details(name=update.name, description=update.description, now=now)
        if update.targeting_rules is not None:
            campaign.update_targeting_rules(update.targeting_rules, now=now)
        if update.clear_budget:
            campaign.update_budget(None, now=now)
        elif update.budget is not None:
            campaign.update_budget(update.budget, now=now)
        if update.settings is not None:
            campaign.update_settings(update.settings, now=now)
        if update.start_date is not None or update.end_date is not None:
            campaign.reschedule(
                start_date=update.start_date or campaign.start_date,
                end_date=update.end_date if update.end_date is not None else campaign.end_date,
                now=now,
            )

        await self._commit(campaign, "update", AuditEvent.CAMPAIGN_UPDATED, user_id)
        return campaign

    async def track_event(self, campaign_id: CampaignID, event: TrackedEvent) -> Campaign:
        """
        Fold a tracked interaction into the metrics, then evaluate alerts.

        The raw event is stored once the aggregate has accepted it and before
        the campaign itself is persisted.
        """
        campaign = await self._load(campaign_id)
        campaign.track_event(event, now=self._clock())
        await self._repository_call(
            "save", self.event_repository.save, campaign.id, event, store="event_repository"
        )
        await self._commit(
            campaign,
            "track_event",
            AuditEvent.CAMPAIGN_EVENT_TRACKED,
            None,
            {"event_type": event.event_type.value},
        )

        await self._check_alerts(campaign)
        return campaign

    async def delete_campaign(
        self, campaign_id: CampaignID, user_id: Optional[UserID] = None
    ) -> None:
        """Soft delete a campaign."""
        await self._load(campaign_id)
        deleted = await self._repository_call("delete", self.repository.delete, campaign_id)
        if not deleted:
            raise NotFoundError(
                f"Campaign {campaign_id} not found",
                resource_type="campaign",
                resource_id=str(campaign_id),
            )

        self.app_logger.log_audit_event(
            AuditEvent.CAMPAIGN_DELETED,
            user_id=str(user_id) if user_id else None,
            resource_id=str(campaign_id),
        )

    # Reads

    async def get_campaign(self, campaign_id: CampaignID) -> Campaign:
        return await self._load(campaign_id)

    async def list_campaigns(self, criteria: ListCriteria) -> List[Campaign]:
        return await self._repository_call("list", self.repository.list, criteria)

    async def count_campaigns(self, criteria: ListCriteria) -> int:
        return await self._repository_call("count", self.repository.count, criteria)

    async def exists_by_name(self, name: str) -> bool:
        return await self._repository_call(
            "exists_by_name", self.repository.exists_by_name, name
        )

    async def get_performance_report(self, campaign_id: CampaignID) -> PerformanceReport:
        campaign = await self._load(campaign_id)
        return self.performance_service.build_report(campaign)

    async def compare_campaigns(self, campaign_ids: Sequence[CampaignID]) -> PerformanceComparison:
        campaigns = [await self._load(campaign_id) for campaign_id in campaign_ids]
        return self.performance_service.compare(campaigns)

    async def get_tracked_events(
        self,
        campaign_id: CampaignID,
        event_type: Optional[CampaignEventType] = None,
        limit: Optional[int] = None,
    ) -> List[TrackedEvent]:
        await self._load(campaign_id)
        return await self._repository_call(
            "find_by_campaign_id",
            self.event_repository.find_by_campaign_id,
            campaign_id,
            event_type=event_type,
            limit=limit,
            store="event_repository",
        )

    async def count_tracked_events(
        self, campaign_id: CampaignID, event_type: Optional[CampaignEventType] = None
    ) -> int:
        await self._load(campaign_id)
        return await self._repository_call(
            "count_by_campaign_id",
            self.event_repository.count_by_campaign_id,
            campaign_id,
            event_type,
            store="event_repository",
        )

    async def aggregate_metrics(
        self,
        campaign_id: CampaignID,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> CampaignMetrics:
        """Rebuild metrics from the stored events in [start_date, end_date)."""
        campaign = await self._load(campaign_id)
        events = await self._repository_call(
            "find_by_campaign_id",
            self.event_repository.find_by_campaign_id,
            campaign_id,
            start_date=start_date,
            end_date=end_date,
            store="event_repository",
        )

        metrics = CampaignMetrics(currency=campaign.metrics.currency, last_updated=self._clock())
        for event in events:
            metrics.record_event(event, now=self._clock())
        return metrics

    # Orchestration steps

    async def _load(self, campaign_id: CampaignID) -> Campaign:
        campaign = await self._repository_call("get_by_id", self.repository.get_by_id, campaign_id)
        if campaign is None:
            raise NotFoundError(
                f"Campaign {campaign_id} not found",
                resource_type="campaign",
                resource_id=str(campaign_id),
            )
        return campaign

    async def _commit(
        self,
        campaign: Campaign,
        operation: str,
        audit_event: AuditEvent,
        user_id: Optional[UserID],
        details: Optional[dict] = None,
    ) -> None:
        """Persist, publish and audit a successful mutation."""
        await self._persist(campaign, operation)
        await self._publish_events(campaign)

        self.app_logger.log_audit_event(
            audit_event,
            user_id=str(user_id) if user_id else None,
            resource_id=str(campaign.id),
            details={"version": campaign.version, "status": campaign.status.value, **(details or {})},
        )

    async def _persist(self, campaign: Campaign, operation: str) -> None:
        await self._repository_call(operation, self.repository.save, campaign)
        campaign.mark_persisted()

    async def _repository_call(
        self,
        operation: str,
        call: Callable[..., Awaitable[Any]],
        *args,
        store: str = "repository",
        **kwargs,
    ):
        """Run a store call; conflicts pass through, other failures are wrapped."""
        try:
            return await call(*args, **kwargs)
        except (ConflictError, InfrastructureError):
            raise
        except Exception as e:
            self.app_logger.log_error(e, f"{store}.{operation}")
            raise InfrastructureError(
                f"Campaign {store.replace('_', ' ')} failed during {operation}: {e}",
                operation=operation,
            ) from e

    async def _ensure_name_available(self, name: str) -> None:
        # the repository's unique constraint stays the final authority
        if await self._repository_call("exists_by_name", self.repository.exists_by_name, name):
            raise ConflictError(
                f"Campaign with name '{name}' already exists",
                reason=ConflictError.DUPLICATE_NAME,
            )

    async def _validate_targeting_rules(self, rule_ids: Sequence[RuleID]) -> None:
        if not rule_ids:
            raise ValidationError.for_field(
                "targeting_rules", "at least one targeting rule is required"
            )
        try:
            await self.targeting_service.validate_targeting_rules(list(rule_ids))
        except ValidationError:
            raise
        except Exception as e:
            self.app_logger.log_error(e, "targeting.validate_targeting_rules")
            raise InfrastructureError(
                f"Targeting rules could not be validated: {e}",
                operation="validate_targeting_rules",
            ) from e

    async def _publish_events(self, campaign: Campaign) -> None:
        """Publish queued events in order; failures are logged and dropped."""
        timeout = self.settings.EVENT_PUBLISH_TIMEOUT_SECONDS
        for event in campaign.pull_events():
            try:
                await asyncio.wait_for(self.event_publisher.publish(event), timeout=timeout)
            except Exception as e:
                logger.warning(
                    f"Failed to publish {event.event_type} for campaign {event.aggregate_id}: "
                    f"{type(e).__name__}: {e}"
                )

    async def _notify(
        self,
        kind: str,
        campaign_id: CampaignID,
        send: Callable[[], Awaitable[None]],
    ) -> None:
        try:
            await asyncio.wait_for(send(), timeout=self.settings.NOTIFICATION_TIMEOUT_SECONDS)
        except Exception as e:
            logger.warning(
                f"Failed to send {kind} notification for campaign {campaign_id}: "
                f"{type(e).__name__}: {e}"
            )

    async def _check_alerts(self, campaign: Campaign) -> None:
        try:
            performance_alerts = self.alert_service.performance_alerts(campaign)
            budget_alerts = self.alert_service.budget_alerts(campaign)
        except Exception as e:
            logger.warning(f"Failed to evaluate alerts for campaign {campaign.id}: {e}")
            return

        for alert in (*performance_alerts, *budget_alerts):
            self.app_logger.log_operation(
                "alert_raised",
                campaign_id=str(campaign.id),
                level=LogLevel.WARNING,
                alert_type=alert.type.value,
                severity=alert.severity.value,
                current_value=alert.current_value,
            )

        for alert in performance_alerts:
            await self._notify(
                alert.type.value,
                campaign.id,
                lambda alert=alert: self.notification_service.send_performance_alert(alert),
            )
        for alert in budget_alerts:
            await self._notify(
                alert.type.value,
                campaign.id,
                lambda alert=alert: self.notification_service.send_budget_alert(alert),
            )

"""
Domain Entities

The Campaign aggregate root: identity, lifecycle state machine, settings,
metrics and the queue of pending domain events.

Every successful mutation bumps the version, moves ``updated_at`` forward and
queues exactly one event. A rejected operation changes nothing.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .events import (
    CampaignActivatedEvent,
    CampaignBudgetUpdatedEvent,
    CampaignCancelledEvent,
    CampaignCompletedEvent,
    CampaignCreatedEvent,
    CampaignDetailsUpdatedEvent,
    CampaignEventTrackedEvent,
    CampaignPausedEvent,
    CampaignRescheduledEvent,
    CampaignResumedEvent,
    CampaignSettingsUpdatedEvent,
    CampaignTargetingRulesUpdatedEvent,
    DomainEvent,
)
from .exceptions import (
    BusinessRuleError,
    CurrencyMismatchError,
    FieldError,
    InvalidStatusTransitionError,
    ValidationError,
)
from .metrics import CampaignMetrics, TrackedEvent
from .settings import CampaignSettings, Channel
from .value_objects import (
    CampaignID,
    CampaignStatus,
    CampaignType,
    Currency,
    Money,
    RuleID,
    UserID,
)

MAX_NAME_LENGTH = 255
MAX_DESCRIPTION_LENGTH = 1000
DEFAULT_BUDGET_ALERT_THRESHOLD = 0.9


def _utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC so comparisons never mix kinds."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _now(now: Optional[datetime]) -> datetime:
    return _utc(now) if now is not None else datetime.now(timezone.utc)


def default_settings() -> CampaignSettings:
    return CampaignSettings(channels=frozenset({Channel.EMAIL}))


def _name_errors(name: Any) -> List[FieldError]:
    if not isinstance(name, str) or not name.strip():
        return [FieldError("name", "campaign name is required")]
    if len(name) > MAX_NAME_LENGTH:
        return [FieldError("name", f"campaign name cannot exceed {MAX_NAME_LENGTH} characters")]
    return []


def _description_errors(description: Any) -> List[FieldError]:
    if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
        return [
            FieldError(
                "description",
                f"campaign description cannot exceed {MAX_DESCRIPTION_LENGTH} characters",
            )
        ]
    return []


def _schedule_errors(start_date: Optional[datetime], end_date: Optional[datetime]) -> List[FieldError]:
    if start_date is None:
        return [FieldError("start_date", "start date is required")]
    if end_date is not None and _utc(end_date) <= _utc(start_date):
        return [FieldError("end_date", "end date must be after start date")]
    return []


def _targeting_errors(rules: Iterable[RuleID]) -> List[FieldError]:
    if not list(rules):
        return [FieldError("targeting_rules", "at least one targeting rule is required")]
    return []


def _budget_errors(budget: Optional[Money]) -> List[FieldError]:
    if budget is not None and not budget.is_positive():
        return [FieldError("budget", "budget must be positive")]
    return []


@dataclass
class AggregateEnvelope:
    """
    Identity and concurrency bookkeeping kept apart from business state.

    ``version`` is bumped by every mutation; ``persisted_version`` is the
    version the store held when the aggregate was loaded (0 for a new one).
    """

    aggregate_id: CampaignID
    version: int = 1
    persisted_version: int = 0

    @property
    def is_new(self) -> bool:
        return self.persisted_version == 0

    @property
    def has_unsaved_changes(self) -> bool:
        return self.version != self.persisted_version


class Campaign:
    """
    Campaign aggregate root with rich business logic.

    Use ``Campaign.create`` for new campaigns; the constructor rehydrates an
    existing one and queues no events.
    """

    def __init__(
        self,
        campaign_id: CampaignID,
        name: str,
        campaign_type: CampaignType,
        targeting_rules: Iterable[RuleID],
        start_date: datetime,
        created_by: UserID,
        description: str = "",
        status: CampaignStatus = CampaignStatus.DRAFT,
        end_date: Optional[datetime] = None,
        budget: Optional[Money] = None,
        settings: Optional[CampaignSettings] = None,
        metrics: Optional[CampaignMetrics] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        version: int = 1,
        persisted_version: Optional[int] = None,
    ):
        self._envelope = AggregateEnvelope(
            aggregate_id=campaign_id,
            version=version,
            persisted_version=version if persisted_version is None else persisted_version,
        )
        self._name = name
        self._description = description or ""
        self._status = CampaignStatus(status)
        self._campaign_type = CampaignType(campaign_type)
        self._targeting_rules: List[RuleID] = list(targeting_rules)
        self._start_date = _utc(start_date)
        self._end_date = _utc(end_date) if end_date else None
        self._budget = budget
        self._created_by = created_by
        self._settings = settings or default_settings()
        self._metrics = metrics or CampaignMetrics(
            currency=budget.currency if budget else Currency.EUR
        )
        self._created_at = _now(created_at)
        self._updated_at = _utc(updated_at) if updated_at else self._created_at
        self._events: List[DomainEvent] = []

    @classmethod
    def create(
        cls,
        name: str,
        campaign_type: CampaignType,
        targeting_rules: Iterable[RuleID],
        start_date: datetime,
        created_by: UserID,
        description: str = "",
        end_date: Optional[datetime] = None,
        budget: Optional[Money] = None,
        settings: Optional[CampaignSettings] = None,
        default_currency: str = Currency.EUR.value,
        now: Optional[datetime] = None,
    ) -> "Campaign":
        """
        Create a new DRAFT campaign with zeroed metrics and one queued
        ``CampaignCreated`` event.

        Every field is checked up front and all problems are reported together
        in a single ValidationError.
        """
        targeting_rules = list(targeting_rules)
        settings = settings or default_settings()

        errors: List[FieldError] = []
        errors.extend(_name_errors(name))
        errors.extend(_description_errors(description))
        errors.extend(_schedule_errors(start_date, end_date))
        errors.extend(_budget_errors(budget))
        errors.extend(_targeting_errors(targeting_rules))
        errors.extend(settings.validate())
        if errors:
            raise ValidationError("invalid campaign", field_errors=errors)

        created_at = _now(now)
        campaign = cls(
            campaign_id=CampaignID.generate(),
            name=name,
            description=description,
            campaign_type=campaign_type,
            targeting_rules=targeting_rules,
            start_date=start_date,
            end_date=end_date,
            budget=budget,
            created_by=created_by,
            settings=settings,
            metrics=CampaignMetrics(
                currency=budget.currency if budget else default_currency,
                last_updated=created_at,
            ),
            created_at=created_at,
            version=1,
            persisted_version=0,
        )
        campaign._record(
            CampaignCreatedEvent(
                campaign_id=str(campaign.id),
                campaign_name=campaign.name,
                campaign_type=campaign.campaign_type.value,
                created_by=str(created_by),
                targeting_rules=[str(rule) for rule in targeting_rules],
                start_date=campaign.start_date,
                end_date=campaign.end_date,
                budget=budget,
                occurred_at=created_at,
            )
        )
        return campaign

    # Read access

    @property
    def id(self) -> CampaignID:
        return self._envelope.aggregate_id

    @property
    def envelope(self) -> AggregateEnvelope:
        return AggregateEnvelope(
            self._envelope.aggregate_id,
            self._envelope.version,
            self._envelope.persisted_version,
        )

    @property
    def version(self) -> int:
        return self._envelope.version

    @property
    def persisted_version(self) -> int:
        return self._envelope.persisted_version

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def status(self) -> CampaignStatus:
        return self._status

    @property
    def campaign_type(self) -> CampaignType:
        return self._campaign_type

    @property
    def targeting_rules(self) -> Tuple[RuleID, ...]:
        return tuple(self._targeting_rules)

    @property
    def start_date(self) -> datetime:
        return self._start_date

    @property
    def end_date(self) -> Optional[datetime]:
        return self._end_date

    @property
    def budget(self) -> Optional[Money]:
        return self._budget

    @property
    def created_by(self) -> UserID:
        return self._created_by

    @property
    def created_at(self) -> datetime:
        return self._created_at

    @property
    def updated_at(self) -> datetime:
        return self._updated_at

    @property
    def settings(self) -> CampaignSettings:
        return self._settings

    @property
    def metrics(self) -> CampaignMetrics:
        """A copy; metrics only change through ``track_event``."""
        return self._metrics.copy()

    @property
    def pending_events(self) -> Tuple[DomainEvent, ...]:
        return tuple(self._events)

    def pull_events(self) -> List[DomainEvent]:
        """Take the queued events, in the order they were raised. Single use."""
        events, self._events = self._events, []
        return events

    def mark_persisted(self) -> None:
        """Record that the store now holds the current version."""
        self._envelope.persisted_version = self._envelope.version

    # Lifecycle transitions

    def activate(self, now: Optional[datetime] = None) -> None:
        """
        Activate a DRAFT or PAUSED campaign.

        The start date must have been reached. When coming back from PAUSED
        the end date, if any, must not have passed.
        """
        now = _now(now)
        self._ensure_transition(CampaignStatus.ACTIVE)
        self._ensure_started(now)
        if self._status == CampaignStatus.PAUSED:
            self._ensure_not_ended(now)

        previous = self._status
        self._status = CampaignStatus.ACTIVE
        self._mark_updated(
            now,
            CampaignActivatedEvent(
                str(self.id), self._name, previous_status=previous, occurred_at=now
            ),
        )

    def pause(self, now: Optional[datetime] = None) -> None:
        """Pause an active campaign."""
        now = _now(now)
        if self._status != CampaignStatus.ACTIVE:
            raise InvalidStatusTransitionError(
                f"Can only pause active campaigns, campaign is {self._status.value}",
                current_status=self._status.value,
                requested_status=CampaignStatus.PAUSED.value,
                campaign_id=str(self.id),
            )

        self._status = CampaignStatus.PAUSED
        self._mark_updated(now, CampaignPausedEvent(str(self.id), self._name, occurred_at=now))

    def resume(self, now: Optional[datetime] = None) -> None:
        """Resume a paused campaign."""
        now = _now(now)
        if self._status != CampaignStatus.PAUSED:
            raise InvalidStatusTransitionError(
                f"Can only resume paused campaigns, campaign is {self._status.value}",
                current_status=self._status.value,
                requested_status=CampaignStatus.ACTIVE.value,
                campaign_id=str(self.id),
            )
        self._ensure_not_ended(now)

        self._status = CampaignStatus.ACTIVE
        self._mark_updated(now, CampaignResumedEvent(str(self.id), self._name, occurred_at=now))

    def complete(self, now: Optional[datetime] = None) -> None:
        """Mark the campaign as completed."""
        now = _now(now)
        self._ensure_transition(CampaignStatus.COMPLETED)

        previous = self._status
        self._status = CampaignStatus.COMPLETED
        self._mark_updated(
            now,
            CampaignCompletedEvent(
                str(self.id),
                self._name,
                previous_status=previous,
                final_metrics=self._metrics.to_dict(),
                occurred_at=now,
            ),
        )

    def cancel(self, reason: str, now: Optional[datetime] = None) -> None:
        """Cancel the campaign; a non-empty reason is required."""
        now = _now(now)
        if not isinstance(reason, str) or not reason.strip():
            raise ValidationError.for_field("reason", "cancellation reason is required")
        self._ensure_transition(CampaignStatus.CANCELLED)

        previous = self._status
        self._status = CampaignStatus.CANCELLED
        self._mark_updated(
            now,
            CampaignCancelledEvent(
                str(self.id),
                self._name,
                previous_status=previous,
                reason=reason.strip(),
                occurred_at=now,
            ),
        )

    # Field updates

    def update_details(
        self,
        name: Optional[str] = None,
        description: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Rename the campaign and/or change its description."""
        now = _now(now)
        if name is None and description is None:
            raise ValidationError("nothing to update: provide a name or a description")

        errors: List[FieldError] = []
        if name is not None:
            errors.extend(_name_errors(name))
        errors.extend(_description_errors(description))
        if errors:
            raise ValidationError("invalid campaign details", field_errors=errors)
        self._ensure_modifiable("details")

        old_name = self._name
        if name is not None:
            self._name = name
        if description is not None:
            self._description = description
        self._mark_updated(
            now,
            CampaignDetailsUpdatedEvent(
                str(self.id),
                self._name,
                old_name=old_name,
                description=self._description,
                occurred_at=now,
            ),
        )

    def update_targeting_rules(self, rule_ids: Iterable[RuleID], now: Optional[datetime] = None) -> None:
        """Replace the targeting rules; not allowed while the campaign is running."""
        now = _now(now)
        rule_ids = list(rule_ids)
        errors = _targeting_errors(rule_ids)
        if errors:
            raise ValidationError("invalid targeting rules", field_errors=errors)
        self._ensure_modifiable("targeting rules")
        if self._status == CampaignStatus.ACTIVE:
            raise BusinessRuleError(
                "Cannot update targeting rules while campaign is active",
                campaign_id=str(self.id),
                current_status=self._status.value,
            )

        old_rules = self._targeting_rules
        self._targeting_rules = rule_ids
        self._mark_updated(
            now,
            CampaignTargetingRulesUpdatedEvent(
                str(self.id),
                self._name,
                old_rules=[str(rule) for rule in old_rules],
                new_rules=[str(rule) for rule in rule_ids],
                occurred_at=now,
            ),
        )

    def update_budget(self, budget: Optional[Money], now: Optional[datetime] = None) -> None:
        """
        Set or clear the budget.

        The budget shares its currency with the metrics; while no money has
        been recorded the metrics follow the new budget currency.
        """
        now = _now(now)
        errors = _budget_errors(budget)
        if errors:
            raise ValidationError("invalid budget", field_errors=errors)
        self._ensure_modifiable("budget")

        if budget is not None and budget.currency != self._metrics.currency:
            # raises CurrencyMismatchError once money has been recorded
            self._metrics.rebase_currency(budget.currency)

        old_budget = self._budget
        self._budget = budget
        self._mark_updated(
            now,
            CampaignBudgetUpdatedEvent(
                str(self.id),
                self._name,
                old_budget=old_budget,
                new_budget=budget,
                occurred_at=now,
            ),
        )

    def update_settings(self, settings: CampaignSettings, now: Optional[datetime] = None) -> None:
        """Replace the campaign settings after validating them."""
        now = _now(now)
        settings.ensure_valid()
        self._ensure_modifiable("settings")

        self._settings = settings
        self._mark_updated(
            now,
            CampaignSettingsUpdatedEvent(
                str(self.id), self._name, settings=settings.to_dict(), occurred_at=now
            ),
        )

    def reschedule(
        self,
        start_date: datetime,
        end_date: Optional[datetime] = None,
        now: Optional[datetime] = None,
    ) -> None:
        """Move the campaign window; not allowed while the campaign is running."""
        now = _now(now)
        errors = _schedule_errors(start_date, end_date)
        if errors:
            raise ValidationError("invalid campaign schedule", field_errors=errors)
        self._ensure_modifiable("schedule")
        if self._status == CampaignStatus.ACTIVE:
            raise BusinessRuleError(
                "Cannot reschedule campaign while it is active",
                campaign_id=str(self.id),
                current_status=self._status.value,
            )

        self._start_date = _utc(start_date)
        self._end_date = _utc(end_date) if end_date else None
        self._mark_updated(
            now,
            CampaignRescheduledEvent(
                str(self.id),
                self._name,
                start_date=self._start_date,
                end_date=self._end_date,
                occurred_at=now,
            ),
        )

    # Metrics

    def track_event(self, event: TrackedEvent, now: Optional[datetime] = None) -> None:
        """
        Fold a tracked interaction into the metrics.

        Allowed in every status so late-arriving data is never dropped.
        """
        now = _now(now)
        self._metrics.record_event(event, now=now)
        self._mark_updated(
            now,
            CampaignEventTrackedEvent(
                str(self.id), self._name, tracked_event=event.to_dict(), occurred_at=now
            ),
        )

    def has_exceeded_budget(self) -> bool:
        """True once the recorded cost reaches the budget."""
        if self._budget is None:
            return False
        self._ensure_budget_currency()
        return self._metrics.cost.amount >= self._budget.amount

    def is_approaching_budget_limit(self, threshold: float = DEFAULT_BUDGET_ALERT_THRESHOLD) -> bool:
        """True once the recorded cost reaches ``threshold`` of the budget."""
        if self._budget is None:
            return False
        self._ensure_budget_currency()
        limit = self._budget.amount * Decimal(str(threshold))
        return self._metrics.cost.amount >= limit

    def budget_utilization(self) -> Optional[float]:
        """Cost as a percentage of the budget, or None without a budget."""
        if self._budget is None:
            return None
        self._ensure_budget_currency()
        return float(self._metrics.cost.amount / self._budget.amount * 100)

    def remaining_budget(self) -> Optional[Money]:
        if self._budget is None:
            return None
        self._ensure_budget_currency()
        if self._metrics.cost.is_at_least(self._budget):
            return Money.zero(self._budget.currency)
        return self._budget.subtract(self._metrics.cost)

    # Queries

    def is_active(self, now: Optional[datetime] = None) -> bool:
        """ACTIVE and inside the scheduled window."""
        now = _now(now)
        if self._status != CampaignStatus.ACTIVE:
            return False
        if now < self._start_date:
            return False
        return self._end_date is None or now <= self._end_date

    def can_be_modified(self) -> bool:
        return self._status.can_be_modified()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": str(self.id),
            "name": self._name,
            "description": self._description,
            "status": self._status.value,
            "type": self._campaign_type.value,
            "targeting_rules": [str(rule) for rule in self._targeting_rules],
            "start_date": self._start_date.isoformat(),
            "end_date": self._end_date.isoformat() if self._end_date else None,
            "budget": self._budget.to_dict() if self._budget else None,
            "created_by": str(self._created_by),
            "created_at": self._created_at.isoformat(),
            "updated_at": self._updated_at.isoformat(),
            "settings": self._settings.to_dict(),
            "metrics": self._metrics.to_dict(),
            "version": self.version,
        }

    # Internal helpers

    def _record(self, event: DomainEvent) -> None:
        self._events.append(event)

    def _mark_updated(self, now: datetime, event: DomainEvent) -> None:
        """Bump the version, move updated_at forward and queue the event."""
        self._envelope.version += 1
        if now > self._updated_at:
            self._updated_at = now
        self._record(event)

    def _ensure_transition(self, target: CampaignStatus) -> None:
        if not self._status.can_transition_to(target):
            raise InvalidStatusTransitionError(
                f"Cannot change campaign from {self._status.value} to {target.value}",
                current_status=self._status.value,
                requested_status=target.value,
                campaign_id=str(self.id),
            )

    def _ensure_modifiable(self, what: str) -> None:
        if not self._status.can_be_modified():
            raise BusinessRuleError(
                f"Cannot modify campaign {what} in {self._status.value} status",
                campaign_id=str(self.id),
                current_status=self._status.value,
            )

    def _ensure_started(self, now: datetime) -> None:
        if self._start_date > now:
            raise BusinessRuleError(
                "Cannot activate campaign before its start date",
                campaign_id=str(self.id),
                current_status=self._status.value,
                details={"start_date": self._start_date.isoformat()},
            )

    def _ensure_not_ended(self, now: datetime) -> None:
        if self._end_date is not None and self._end_date < now:
            raise BusinessRuleError(
                "Cannot resume campaign after its end date",
                campaign_id=str(self.id),
                current_status=self._status.value,
                details={"end_date": self._end_date.isoformat()},
            )

    def _ensure_budget_currency(self) -> None:
        if self._budget.currency != self._metrics.currency:
            raise CurrencyMismatchError(
                "Budget and metrics use different currencies",
                currency_a=self._budget.currency,
                currency_b=self._metrics.currency,
                operation="budget_check",
            )

    def __eq__(self, other) -> bool:
        if not isinstance(other, Campaign):
            return False
        return self.id == other.id

    def __hash__(self) -> int:
        return hash(self.id)

    def __str__(self) -> str:
        return f"Campaign {self._name} ({self._status.value})"

    def __repr__(self) -> str:
        return (
            f"Campaign(id='{self.id}', name='{self._name}', "
            f"status='{self._status.value}', version={self.version})"
        )

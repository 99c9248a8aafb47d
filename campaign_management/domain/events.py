"""
Domain Events

Events that represent something significant that happened to a campaign.
The aggregate queues them; the orchestration service publishes them after
the change has been persisted.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import uuid4

from .value_objects import CampaignStatus, Money

EVENT_VERSION = 1


class DomainEvent:
    """
    Base class for all campaign domain events.

    ``to_dict()`` renders the published envelope: event id, type, aggregate id,
    occurrence time, schema version and a string-keyed payload.
    """

    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        event_id: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ):
        self.event_id = event_id or str(uuid4())
        self.campaign_id = campaign_id
        self.campaign_name = campaign_name
        self.occurred_at = occurred_at or datetime.now(timezone.utc)

    @property
    def event_type(self) -> str:
        name = self.__class__.__name__
        return name[: -len("Event")] if name.endswith("Event") else name

    @property
    def aggregate_id(self) -> str:
        return self.campaign_id

    @property
    def event_version(self) -> int:
        return EVENT_VERSION

    @property
    def payload(self) -> Dict[str, Any]:
        return {
            "campaign_id": self.campaign_id,
            "name": self.campaign_name,
            "timestamp": self.occurred_at.isoformat(),
            **self._event_data(),
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert the event to a dictionary representation."""
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "aggregate_id": self.aggregate_id,
            "occurred_at": self.occurred_at.isoformat(),
            "event_version": self.event_version,
            "payload": self.payload,
        }

    def _event_data(self) -> Dict[str, Any]:
        """Override this method to provide event-specific data."""
        return {}

    def __str__(self) -> str:
        return f"{self.event_type}(event_id={self.event_id}, campaign_id={self.campaign_id})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.to_dict()})"


class CampaignCreatedEvent(DomainEvent):
    """Fired once, when a campaign is created in DRAFT."""

    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        campaign_type: str,
        created_by: str,
        targeting_rules: List[str],
        start_date: datetime,
        end_date: Optional[datetime] = None,
        budget: Optional[Money] = None,
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.campaign_type = campaign_type
        self.created_by = created_by
        self.targeting_rules = list(targeting_rules)
        self.start_date = start_date
        self.end_date = end_date
        self.budget = budget

    def _event_data(self) -> Dict[str, Any]:
        return {
            "type": self.campaign_type,
            "created_by": self.created_by,
            "targeting_rules": list(self.targeting_rules),
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "budget": self.budget.to_dict() if self.budget else None,
        }


class CampaignActivatedEvent(DomainEvent):
    """Fired when a DRAFT or PAUSED campaign goes live."""

    def __init__(self, campaign_id: str, campaign_name: str, previous_status: CampaignStatus, **kwargs):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.previous_status = previous_status

    def _event_data(self) -> Dict[str, Any]:
        return {"previous_status": self.previous_status.value}


class CampaignPausedEvent(DomainEvent):
    """Fired when an active campaign is paused."""


class CampaignResumedEvent(DomainEvent):
    """Fired when a paused campaign is resumed."""


class CampaignCompletedEvent(DomainEvent):
    """Fired when a campaign is completed; carries the final metrics snapshot."""

    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        previous_status: CampaignStatus,
        final_metrics: Dict[str, Any],
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.previous_status = previous_status
        self.final_metrics = final_metrics

    def _event_data(self) -> Dict[str, Any]:
        return {
            "previous_status": self.previous_status.value,
            "final_metrics": self.final_metrics,
        }


class CampaignCancelledEvent(DomainEvent):
    """Fired when a campaign is cancelled, with the reason given."""

    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        previous_status: CampaignStatus,
        reason: str,
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.previous_status = previous_status
        self.reason = reason

    def _event_data(self) -> Dict[str, Any]:
        return {"previous_status": self.previous_status.value, "reason": self.reason}


class CampaignTargetingRulesUpdatedEvent(DomainEvent):
    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        old_rules: List[str],
        new_rules: List[str],
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.old_rules = list(old_rules)
        self.new_rules = list(new_rules)

    def _event_data(self) -> Dict[str, Any]:
        return {"old_rules": list(self.old_rules), "new_rules": list(self.new_rules)}


class CampaignBudgetUpdatedEvent(DomainEvent):
    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        old_budget: Optional[Money],
        new_budget: Optional[Money],
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.old_budget = old_budget
        self.new_budget = new_budget

    def _event_data(self) -> Dict[str, Any]:
        return {
            "old_budget": self.old_budget.to_dict() if self.old_budget else None,
            "new_budget": self.new_budget.to_dict() if self.new_budget else None,
        }


class CampaignSettingsUpdatedEvent(DomainEvent):
    def __init__(self, campaign_id: str, campaign_name: str, settings: Dict[str, Any], **kwargs):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.settings = settings

    def _event_data(self) -> Dict[str, Any]:
        return {"settings": self.settings}


class CampaignDetailsUpdatedEvent(DomainEvent):
    """Fired when the name or description changes."""

    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        old_name: str,
        description: str,
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.old_name = old_name
        self.description = description

    def _event_data(self) -> Dict[str, Any]:
        return {"old_name": self.old_name, "description": self.description}


class CampaignRescheduledEvent(DomainEvent):
    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        start_date: datetime,
        end_date: Optional[datetime],
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.start_date = start_date
        self.end_date = end_date

    def _event_data(self) -> Dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat() if self.end_date else None,
        }


class CampaignEventTrackedEvent(DomainEvent):
    """Fired for every interaction folded into the campaign metrics."""

    def __init__(
        self,
        campaign_id: str,
        campaign_name: str,
        tracked_event: Dict[str, Any],
        **kwargs,
    ):
        super().__init__(campaign_id, campaign_name, **kwargs)
        self.tracked_event = tracked_event

    def _event_data(self) -> Dict[str, Any]:
        return {"tracked_event": self.tracked_event}

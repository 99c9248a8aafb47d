"""
Command handlers for write operations in the campaign management service.

Handlers translate command DTOs into domain values and delegate to the
CampaignService, returning plain result dictionaries.
"""

import logging
from typing import Any, Dict

from ...domain.entities import Campaign
from ...domain.metrics import TrackedEvent
from ...domain.value_objects import CampaignID, CustomerID, Money, RuleID, UserID
from ..services.campaign_service import CampaignService, CampaignUpdate
from .dto import (
    ActivateCampaignCommand,
    CancelCampaignCommand,
    CompleteCampaignCommand,
    CreateCampaignCommand,
    DeleteCampaignCommand,
    PauseCampaignCommand,
    ResumeCampaignCommand,
    TrackCampaignEventCommand,
    UpdateCampaignCommand,
)

logger = logging.getLogger(__name__)


def _status_result(campaign: Campaign, message: str) -> Dict[str, Any]:
    return {
        "campaign_id": str(campaign.id),
        "status": campaign.status.value,
        "version": campaign.version,
        "updated_at": campaign.updated_at.isoformat(),
        "message": message,
    }


class CreateCampaignHandler:
    """Handler for creating new campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: CreateCampaignCommand) -> Dict[str, Any]:
        """
        Handle campaign creation command.

        Builds the domain values from the command and lets the service run
        the uniqueness check, targeting validation and persistence.
        """
        logger.info(f"Creating campaign: {command.name}")

        budget = None
        if command.budget_amount is not None:
            budget = Money(command.budget_amount, command.budget_currency)

        campaign = await self.campaign_service.create_campaign(
            name=command.name,
            description=command.description,
            campaign_type=command.campaign_type,
            targeting_rules=[RuleID(rule_id) for rule_id in command.targeting_rules],
            start_date=command.start_date,
            end_date=command.end_date,
            budget=budget,
            settings=command.settings.to_domain() if command.settings else None,
            created_by=UserID(command.created_by),
        )

        return {
            "campaign_id": str(campaign.id),
            "name": campaign.name,
            "status": campaign.status.value,
            "version": campaign.version,
            "created_at": campaign.created_at.isoformat(),
            "message": "Campaign created successfully",
        }


class UpdateCampaignHandler:
    """Handler for updating existing campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: UpdateCampaignCommand) -> Dict[str, Any]:
        """Handle campaign update command."""
        logger.info(f"Updating campaign: {command.campaign_id}")
        campaign_id = CampaignID(command.campaign_id)

        budget = None
        if command.budget_amount is not None:
            currency = command.budget_currency
            if currency is None:
                current = await self.campaign_service.get_campaign(campaign_id)
                currency = current.budget.currency if current.budget else current.metrics.currency
            budget = Money(command.budget_amount, currency)

        update = CampaignUpdate(
            name=command.name,
            description=command.description,
            targeting_rules=(
                [RuleID(rule_id) for rule_id in command.targeting_rules]
                if command.targeting_rules is not None
                else None
            ),
            budget=budget,
            clear_budget=command.clear_budget,
            settings=command.settings.to_domain() if command.settings else None,
            start_date=command.start_date,
            end_date=command.end_date,
        )

        campaign = await self.campaign_service.update_campaign(
            campaign_id,
            update,
            user_id=UserID(command.updated_by) if command.updated_by else None,
        )
        return _status_result(campaign, "Campaign updated successfully")


class ActivateCampaignHandler:
    """Handler for activating campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: ActivateCampaignCommand) -> Dict[str, Any]:
        logger.info(f"Activating campaign: {command.campaign_id}")
        campaign = await self.campaign_service.activate_campaign(
            CampaignID(command.campaign_id),
            user_id=UserID(command.activated_by) if command.activated_by else None,
        )
        return _status_result(campaign, "Campaign activated successfully")


class PauseCampaignHandler:
    """Handler for pausing campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: PauseCampaignCommand) -> Dict[str, Any]:
        logger.info(f"Pausing campaign: {command.campaign_id}")
        campaign = await self.campaign_service.pause_campaign(
            CampaignID(command.campaign_id),
            user_id=UserID(command.paused_by) if command.paused_by else None,
        )
        return _status_result(campaign, "Campaign paused successfully")


class ResumeCampaignHandler:
    """Handler for resuming paused campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: ResumeCampaignCommand) -> Dict[str, Any]:
        logger.info(f"Resuming campaign: {command.campaign_id}")
        campaign = await self.campaign_service.resume_campaign(
            CampaignID(command.campaign_id),
            user_id=UserID(command.resumed_by) if command.resumed_by else None,
        )
        return _status_result(campaign, "Campaign resumed successfully")


class CompleteCampaignHandler:
    """Handler for completing campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: CompleteCampaignCommand) -> Dict[str, Any]:
        logger.info(f"Completing campaign: {command.campaign_id}")
        campaign = await self.campaign_service.complete_campaign(
            CampaignID(command.campaign_id),
            user_id=UserID(command.completed_by) if command.completed_by else None,
        )
        result = _status_result(campaign, "Campaign completed successfully")
        result["final_metrics"] = campaign.metrics.to_dict()
        return result


class CancelCampaignHandler:
    """Handler for cancelling campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: CancelCampaignCommand) -> Dict[str, Any]:
        logger.info(f"Cancelling campaign: {command.campaign_id}")
        campaign = await self.campaign_service.cancel_campaign(
            CampaignID(command.campaign_id),
            command.reason,
            user_id=UserID(command.cancelled_by) if command.cancelled_by else None,
        )
        result = _status_result(campaign, "Campaign cancelled successfully")
        result["reason"] = command.reason
        return result


class TrackCampaignEventHandler:
    """Handler for recording campaign interactions."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: TrackCampaignEventCommand) -> Dict[str, Any]:
        logger.debug(f"Tracking {command.event_type.value} for campaign: {command.campaign_id}")

        optional = {}
        if command.occurred_at is not None:
            optional["occurred_at"] = command.occurred_at

        event = TrackedEvent(
            event_type=command.event_type,
            customer_id=CustomerID(command.customer_id) if command.customer_id else None,
            revenue=(
                Money(command.revenue_amount, command.currency)
                if command.revenue_amount is not None
                else None
            ),
            cost=(
                Money(command.cost_amount, command.currency)
                if command.cost_amount is not None
                else None
            ),
            data=dict(command.event_data),
            **optional,
        )

        campaign = await self.campaign_service.track_event(CampaignID(command.campaign_id), event)
        metrics = campaign.metrics
        return {
            "campaign_id": str(campaign.id),
            "event_id": event.id,
            "event_type": event.event_type.value,
            "version": campaign.version,
            "metrics": metrics.to_dict(),
            "message": "Campaign event tracked successfully",
        }


class DeleteCampaignHandler:
    """Handler for soft deleting campaigns."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, command: DeleteCampaignCommand) -> Dict[str, Any]:
        logger.info(f"Deleting campaign: {command.campaign_id}")
        await self.campaign_service.delete_campaign(
            CampaignID(command.campaign_id),
            user_id=UserID(command.deleted_by) if command.deleted_by else None,
        )
        return {
            "campaign_id": str(command.campaign_id),
            "deleted": True,
            "message": "Campaign deleted successfully",
        }

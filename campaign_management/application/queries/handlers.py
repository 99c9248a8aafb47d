"""
Query handlers for read operations in the campaign management service.

Handlers never mutate campaigns; they shape aggregates into result
dictionaries for callers.
"""

import logging
import math
from typing import Any, Dict

from ...domain.interfaces import ListCriteria
from ...domain.value_objects import CampaignID, UserID
from ..services.campaign_service import CampaignService
from .dto import GetCampaignMetricsQuery, GetCampaignQuery, ListCampaignsQuery

logger = logging.getLogger(__name__)


class GetCampaignHandler:
    """Handler for fetching a single campaign."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, query: GetCampaignQuery) -> Dict[str, Any]:
        campaign = await self.campaign_service.get_campaign(CampaignID(query.campaign_id))

        result = campaign.to_dict()
        if not query.include_metrics:
            result.pop("metrics")
        if not query.include_settings:
            result.pop("settings")
        return result


class ListCampaignsHandler:
    """Handler for paginated, filtered and sorted campaign listings."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, query: ListCampaignsQuery) -> Dict[str, Any]:
        criteria = ListCriteria(
            status=query.status,
            campaign_type=query.campaign_type,
            created_by=UserID(query.created_by) if query.created_by else None,
            start_date_from=query.start_date_from,
            start_date_to=query.start_date_to,
            search=query.search,
            page=query.page,
            page_size=query.page_size,
            sort_by=query.sort_by,
            sort_order=query.sort_order,
        )

        campaigns = await self.campaign_service.list_campaigns(criteria)
        total = await self.campaign_service.count_campaigns(criteria)
        total_pages = math.ceil(total / query.page_size) if total else 0

        logger.debug(f"Listed {len(campaigns)} of {total} campaigns (page {query.page})")

        return {
            "campaigns": [
                {
                    "id": str(campaign.id),
                    "name": campaign.name,
                    "status": campaign.status.value,
                    "type": campaign.campaign_type.value,
                    "start_date": campaign.start_date.isoformat(),
                    "end_date": campaign.end_date.isoformat() if campaign.end_date else None,
                    "budget": campaign.budget.to_dict() if campaign.budget else None,
                    "created_at": campaign.created_at.isoformat(),
                }
                for campaign in campaigns
            ],
            "pagination": {
                "page": query.page,
                "page_size": query.page_size,
                "total": total,
                "total_pages": total_pages,
                "has_next": query.page < total_pages,
                "has_previous": query.page > 1,
            },
        }


class GetCampaignMetricsHandler:
    """Handler for campaign metrics and performance analysis."""

    def __init__(self, campaign_service: CampaignService):
        self.campaign_service = campaign_service

    async def handle(self, query: GetCampaignMetricsQuery) -> Dict[str, Any]:
        report = await self.campaign_service.get_performance_report(
            CampaignID(query.campaign_id)
        )

        result = report.to_dict()
        if not query.include_recommendations:
            result.pop("recommendations")
        if not query.include_budget:
            result.pop("budget")
        return result

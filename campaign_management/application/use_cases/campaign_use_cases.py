"""
Campaign Use Cases for the campaign management service.

Use cases orchestrate multi-step business workflows by coordinating
commands and queries.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from ...core.config import get_settings
from ...domain.exceptions import BusinessRuleError, DomainError
from ...domain.performance import NEEDS_ATTENTION_SCORE, PERFORMING_WELL_SCORE
from ...domain.value_objects import CampaignStatus
from ..commands.dto import ActivateCampaignCommand, CreateCampaignCommand
from ..commands.handlers import ActivateCampaignHandler, CreateCampaignHandler
from ..queries.dto import GetCampaignMetricsQuery, GetCampaignQuery, ListCampaignsQuery
from ..queries.handlers import GetCampaignHandler, GetCampaignMetricsHandler, ListCampaignsHandler
from ..services.cross_cutting import ApplicationLogger, performance_monitor

logger = logging.getLogger(__name__)
app_logger = ApplicationLogger()

TOP_PERFORMERS_COUNT = 3


class LaunchCampaignUseCase:
    """
    Use case for launching a campaign in one go.

    Creates the campaign, optionally activates it and returns the full
    campaign details. A rejected activation leaves the DRAFT campaign in
    place and is reported in the result.
    """

    def __init__(
        self,
        create_campaign_handler: CreateCampaignHandler,
        activate_campaign_handler: ActivateCampaignHandler,
        get_campaign_handler: GetCampaignHandler,
    ):
        self.create_campaign_handler = create_campaign_handler
        self.activate_campaign_handler = activate_campaign_handler
        self.get_campaign_handler = get_campaign_handler

    @performance_monitor(app_logger)
    async def execute(
        self,
        campaign_data: CreateCampaignCommand,
        auto_activate: bool = False,
    ) -> Dict[str, Any]:
        """
        Create a campaign and optionally activate it.

        Args:
            campaign_data: Campaign creation data
            auto_activate: Whether to activate campaign immediately

        Returns:
            Campaign details with the result of every step
        """
        logger.info(f"Launching campaign: {campaign_data.name}")

        try:
            # Step 1: Create the campaign
            creation_result = await self.create_campaign_handler.handle(campaign_data)
            campaign_id = UUID(creation_result["campaign_id"])

            # Step 2: Activate if requested
            activation_result = None
            activation_error = None
            if auto_activate:
                activation_command = ActivateCampaignCommand(
                    campaign_id=campaign_id,
                    activated_by=campaign_data.created_by,
                )
                try:
                    activation_result = await self.activate_campaign_handler.handle(
                        activation_command
                    )
                except BusinessRuleError as e:
                    logger.warning(f"Campaign {campaign_id} created but not activated: {e}")
                    activation_error = {"error_code": e.error_code, "message": e.message}

            # Step 3: Get complete campaign data
            campaign_details = await self.get_campaign_handler.handle(
                GetCampaignQuery(campaign_id=campaign_id)
            )

            return {
                "campaign": campaign_details,
                "creation_result": creation_result,
                "activation_result": activation_result,
                "activation_error": activation_error,
                "workflow_completed": activation_error is None,
                "message": (
                    "Campaign launched successfully"
                    if activation_error is None
                    else "Campaign created but could not be activated"
                ),
            }

        except DomainError:
            raise
        except Exception as e:
            logger.error(f"Campaign launch use case failed: {str(e)}")
            raise DomainError(f"Campaign launch failed: {str(e)}") from e


class CampaignPerformanceAnalysisUseCase:
    """
    Use case for portfolio-wide campaign performance analysis.

    Scores every campaign in scope, then derives top performers,
    underperformers and portfolio-level recommendations.
    """

    def __init__(
        self,
        list_campaigns_handler: ListCampaignsHandler,
        get_campaign_metrics_handler: GetCampaignMetricsHandler,
    ):
        self.list_campaigns_handler = list_campaigns_handler
        self.get_campaign_metrics_handler = get_campaign_metrics_handler

    @performance_monitor(app_logger)
    async def execute(
        self,
        campaign_ids: Optional[List[UUID]] = None,
        status: Optional[CampaignStatus] = CampaignStatus.ACTIVE,
    ) -> Dict[str, Any]:
        """
        Analyse campaign performance.

        Args:
            campaign_ids: Specific campaigns to analyse; all campaigns with
                ``status`` when omitted
            status: Status filter used when no ids are given (None for all)

        Returns:
            Per-campaign analysis plus the portfolio view
        """
        if campaign_ids is None:
            logger.info(f"Performing performance analysis for status: {status}")
        else:
            logger.info(f"Performing performance analysis for {len(campaign_ids)} campaigns")

        try:
            if campaign_ids is None:
                campaign_ids = await self._campaign_ids_with_status(status)

            # Step 1: Score each campaign
            performance_analysis = []
            for campaign_id in campaign_ids:
                report = await self.get_campaign_metrics_handler.handle(
                    GetCampaignMetricsQuery(campaign_id=campaign_id)
                )
                performance_analysis.append(
                    {
                        "campaign_id": report["campaign_id"],
                        "campaign_name": report["campaign_name"],
                        "status": report["status"],
                        "performance_score": report["performance_score"],
                        "performance_grade": report["performance_grade"],
                        "needs_attention": report["needs_attention"],
                        "metrics": report["metrics"],
                        "recommendations": report["recommendations"],
                    }
                )

            # Step 2: Portfolio-level analysis
            ranked = sorted(
                performance_analysis, key=lambda c: c["performance_score"], reverse=True
            )
            average_score = (
                sum(c["performance_score"] for c in performance_analysis) / len(performance_analysis)
                if performance_analysis
                else 0.0
            )

            portfolio_analysis = {
                "total_campaigns": len(performance_analysis),
                "average_performance_score": round(average_score, 2),
                "top_performers": [
                    c for c in ranked if c["performance_score"] >= PERFORMING_WELL_SCORE
                ][:TOP_PERFORMERS_COUNT],
                "underperformers": [
                    c for c in reversed(ranked) if c["performance_score"] < NEEDS_ATTENTION_SCORE
                ][:TOP_PERFORMERS_COUNT],
                "portfolio_recommendations": self._generate_portfolio_recommendations(
                    performance_analysis, average_score
                ),
            }

            return {
                "campaigns_analyzed": len(performance_analysis),
                "campaign_performance": performance_analysis,
                "portfolio_analysis": portfolio_analysis,
                "generated_at": datetime.now(timezone.utc).isoformat(),
                "analysis_completed": True,
            }

        except DomainError:
            raise
        except Exception as e:
            logger.error(f"Performance analysis use case failed: {str(e)}")
            raise DomainError(f"Performance analysis failed: {str(e)}") from e

    async def _campaign_ids_with_status(self, status: Optional[CampaignStatus]) -> List[UUID]:
        """Walk every page of the listing."""
        page_size = get_settings().MAX_PAGE_SIZE
        campaign_ids: List[UUID] = []
        page = 1
        while True:
            result = await self.list_campaigns_handler.handle(
                ListCampaignsQuery(page=page, page_size=page_size, status=status)
            )
            campaign_ids.extend(UUID(campaign["id"]) for campaign in result["campaigns"])
            if not result["pagination"]["has_next"]:
                return campaign_ids
            page += 1

    def _generate_portfolio_recommendations(
        self, performance_analysis: List[Dict[str, Any]], average_score: float
    ) -> List[str]:
        """Generate portfolio-level recommendations."""
        if not performance_analysis:
            return ["No campaigns to analyse"]

        recommendations = []
        if average_score < 50:
            recommendations.append("Overall portfolio needs significant optimization")
            recommendations.append("Consider consolidating budgets to top performers")
        else:
            recommendations.append("Portfolio showing good performance overall")
            recommendations.append("Focus on scaling successful strategies")

        attention_count = sum(1 for c in performance_analysis if c["needs_attention"])
        if attention_count:
            recommendations.append(
                f"{attention_count} campaign(s) need immediate attention"
            )
        return recommendations

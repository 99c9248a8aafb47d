"""
Test suite for multi-step campaign use cases.
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from campaign_management.application.commands import (
    ActivateCampaignHandler,
    CreateCampaignCommand,
    CreateCampaignHandler,
)
from campaign_management.application.queries import (
    GetCampaignHandler,
    GetCampaignMetricsHandler,
    ListCampaignsHandler,
)
from campaign_management.application.use_cases import (
    CampaignPerformanceAnalysisUseCase,
    LaunchCampaignUseCase,
)
from campaign_management.domain import (
    CampaignEventType,
    ConflictError,
    DomainError,
    Money,
    TrackedEvent,
)

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


def _command(**overrides):
    values = {
        "name": "Retargeting Wave",
        "campaign_type": "RETARGETING",
        "targeting_rules": [uuid4()],
        "start_date": NOW - timedelta(hours=1),
        "budget_amount": "750",
        "created_by": uuid4(),
    }
    values.update(overrides)
    return CreateCampaignCommand(**values)


@pytest.fixture
def launch(service):
    return LaunchCampaignUseCase(
        CreateCampaignHandler(service),
        ActivateCampaignHandler(service),
        GetCampaignHandler(service),
    )


@pytest.fixture
def analysis(service):
    return CampaignPerformanceAnalysisUseCase(
        ListCampaignsHandler(service),
        GetCampaignMetricsHandler(service),
    )


class TestLaunchCampaignUseCase:
    """Test suite for creating and activating in one go."""

    @pytest.mark.asyncio
    async def test_create_only(self, launch):
        result = await launch.execute(_command())

        assert result["campaign"]["status"] == "DRAFT"
        assert result["activation_result"] is None
        assert result["workflow_completed"] is True

    @pytest.mark.asyncio
    async def test_create_and_activate(self, launch, notifier):
        result = await launch.execute(_command(), auto_activate=True)

        assert result["campaign"]["status"] == "ACTIVE"
        assert result["activation_result"]["status"] == "ACTIVE"
        assert result["message"] == "Campaign launched successfully"
        assert notifier.kinds() == ["campaign_started"]

    @pytest.mark.asyncio
    async def test_rejected_activation_keeps_draft(self, launch):
        result = await launch.execute(
            _command(start_date=NOW + timedelta(days=3)), auto_activate=True
        )

        assert result["campaign"]["status"] == "DRAFT"
        assert result["workflow_completed"] is False
        assert result["activation_error"]["error_code"] == "BUSINESS_RULE_VIOLATION"

    @pytest.mark.asyncio
    async def test_domain_errors_propagate(self, launch):
        await launch.execute(_command())
        with pytest.raises(ConflictError):
            await launch.execute(_command())

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_domain_errors(self, launch):
        launch.get_campaign_handler.handle = None

        with pytest.raises(DomainError) as exc_info:
            await launch.execute(_command())

        assert "Campaign launch failed" in exc_info.value.message
        assert isinstance(exc_info.value.__cause__, TypeError)


class TestCampaignPerformanceAnalysisUseCase:
    """Test suite for portfolio analysis."""

    @pytest.mark.asyncio
    async def test_portfolio(self, service, create_campaign, analysis):
        strong = await create_campaign(name="Strong")
        weak = await create_campaign(name="Weak")
        await create_campaign(name="Still Draft")
        await service.activate_campaign(strong.id)
        await service.activate_campaign(weak.id)

        for _ in range(20):
            await service.track_event(strong.id, TrackedEvent(CampaignEventType.IMPRESSION))
        await service.track_event(
            strong.id, TrackedEvent(CampaignEventType.CLICK, cost=Money(1, "EUR"))
        )
        await service.track_event(
            strong.id, TrackedEvent(CampaignEventType.CONVERSION, revenue=Money(10, "EUR"))
        )

        result = await analysis.execute()

        assert result["campaigns_analyzed"] == 2
        portfolio = result["portfolio_analysis"]
        assert portfolio["average_performance_score"] == 55.0
        assert [c["campaign_name"] for c in portfolio["top_performers"]] == ["Strong"]
        assert [c["campaign_name"] for c in portfolio["underperformers"]] == ["Weak"]
        assert portfolio["portfolio_recommendations"] == [
            "Portfolio showing good performance overall",
            "Focus on scaling successful strategies",
            "1 campaign(s) need immediate attention",
        ]

    @pytest.mark.asyncio
    async def test_explicit_ids(self, create_campaign, analysis):
        draft = await create_campaign(name="Draft")

        result = await analysis.execute(campaign_ids=[draft.id.value])

        assert result["campaigns_analyzed"] == 1
        assert result["campaign_performance"][0]["status"] == "DRAFT"

    @pytest.mark.asyncio
    async def test_empty_portfolio(self, analysis):
        result = await analysis.execute()

        assert result["campaigns_analyzed"] == 0
        assert result["portfolio_analysis"]["portfolio_recommendations"] == ["No campaigns to analyse"]

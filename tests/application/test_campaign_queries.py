"""
Test suite for query DTOs and query handlers.
"""

from datetime import timedelta
from uuid import uuid4

import pytest

from campaign_management.application.queries import (
    GetCampaignHandler,
    GetCampaignMetricsHandler,
    GetCampaignMetricsQuery,
    GetCampaignQuery,
    ListCampaignsHandler,
    ListCampaignsQuery,
    parse_query,
)
from campaign_management.domain import CampaignStatus, CampaignType, NotFoundError, ValidationError


class TestListCampaignsQuery:
    """Test suite for listing query validation."""

    def test_defaults(self):
        query = ListCampaignsQuery()
        assert query.page == 1
        assert query.page_size == 20
        assert query.sort_by == "created_at"
        assert query.sort_order == "desc"

    def test_page_size_is_capped(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_query(ListCampaignsQuery, {"page_size": 500})
        assert exc_info.value.field_errors[0].field == "page_size"

    def test_unknown_sort_field(self):
        with pytest.raises(ValidationError):
            parse_query(ListCampaignsQuery, {"sort_by": "budget"})

    def test_sort_order_is_normalized(self):
        assert parse_query(ListCampaignsQuery, {"sort_order": "ASC"}).sort_order == "asc"
        with pytest.raises(ValidationError):
            parse_query(ListCampaignsQuery, {"sort_order": "sideways"})

    def test_date_window_must_be_ordered(self):
        with pytest.raises(ValidationError):
            parse_query(
                ListCampaignsQuery,
                {"start_date_from": "2024-06-10T00:00:00Z", "start_date_to": "2024-06-01T00:00:00Z"},
            )


class TestGetCampaignHandler:
    """Test suite for single campaign lookups."""

    @pytest.mark.asyncio
    async def test_full_details(self, service, create_campaign):
        campaign = await create_campaign()

        result = await GetCampaignHandler(service).handle(GetCampaignQuery(campaign_id=campaign.id.value))

        assert result["id"] == str(campaign.id)
        assert result["status"] == "DRAFT"
        assert result["metrics"]["impressions"] == 0
        assert result["settings"]["channels"] == ["EMAIL"]

    @pytest.mark.asyncio
    async def test_sections_can_be_left_out(self, service, create_campaign):
        campaign = await create_campaign()

        result = await GetCampaignHandler(service).handle(
            GetCampaignQuery(campaign_id=campaign.id.value, include_metrics=False, include_settings=False)
        )

        assert "metrics" not in result
        assert "settings" not in result

    @pytest.mark.asyncio
    async def test_missing_campaign(self, service):
        with pytest.raises(NotFoundError):
            await GetCampaignHandler(service).handle(GetCampaignQuery(campaign_id=uuid4()))


class TestListCampaignsHandler:
    """Test suite for paginated listings."""

    @pytest.mark.asyncio
    async def test_pagination(self, service, create_campaign):
        for name in ("Charlie", "Alpha", "Bravo"):
            await create_campaign(name=name)
        handler = ListCampaignsHandler(service)

        first = await handler.handle(ListCampaignsQuery(page=1, page_size=2, sort_by="name", sort_order="asc"))
        second = await handler.handle(ListCampaignsQuery(page=2, page_size=2, sort_by="name", sort_order="asc"))

        assert [c["name"] for c in first["campaigns"]] == ["Alpha", "Bravo"]
        assert [c["name"] for c in second["campaigns"]] == ["Charlie"]
        assert first["pagination"] == {
            "page": 1,
            "page_size": 2,
            "total": 3,
            "total_pages": 2,
            "has_next": True,
            "has_previous": False,
        }
        assert second["pagination"]["has_next"] is False
        assert second["pagination"]["has_previous"] is True

    @pytest.mark.asyncio
    async def test_filters(self, service, create_campaign, now):
        active = await create_campaign(name="Spring Coupons", campaign_type=CampaignType.COUPON)
        await create_campaign(name="Loyalty Tiers", description="spring refresh of tiers")
        await create_campaign(name="Later", start_date=now + timedelta(days=10), end_date=None)
        await service.activate_campaign(active.id)
        handler = ListCampaignsHandler(service)

        by_status = await handler.handle(ListCampaignsQuery(status=CampaignStatus.ACTIVE))
        by_type = await handler.handle(ListCampaignsQuery(campaign_type=CampaignType.COUPON))
        by_search = await handler.handle(ListCampaignsQuery(search="SPRING", sort_by="name", sort_order="asc"))
        by_window = await handler.handle(ListCampaignsQuery(start_date_from=now + timedelta(days=1)))

        assert [c["name"] for c in by_status["campaigns"]] == ["Spring Coupons"]
        assert [c["name"] for c in by_type["campaigns"]] == ["Spring Coupons"]
        assert [c["name"] for c in by_search["campaigns"]] == ["Loyalty Tiers", "Spring Coupons"]
        assert [c["name"] for c in by_window["campaigns"]] == ["Later"]

    @pytest.mark.asyncio
    async def test_empty_listing(self, service):
        result = await ListCampaignsHandler(service).handle(ListCampaignsQuery())
        assert result["campaigns"] == []
        assert result["pagination"]["total_pages"] == 0
        assert result["pagination"]["has_next"] is False


class TestGetCampaignMetricsHandler:
    """Test suite for metric reports."""

    @pytest.mark.asyncio
    async def test_report(self, service, create_campaign):
        campaign = await create_campaign()

        result = await GetCampaignMetricsHandler(service).handle(
            GetCampaignMetricsQuery(campaign_id=campaign.id.value)
        )

        assert result["campaign_name"] == "Summer Loyalty Push"
        assert result["performance_grade"] == "F"
        assert result["needs_attention"] is True
        assert result["budget"]["remaining"] == {"amount": "1000.00", "currency": "EUR"}
        assert len(result["recommendations"]) == 4

    @pytest.mark.asyncio
    async def test_optional_sections(self, service, create_campaign):
        campaign = await create_campaign()

        result = await GetCampaignMetricsHandler(service).handle(
            GetCampaignMetricsQuery(
                campaign_id=campaign.id.value, include_recommendations=False, include_budget=False
            )
        )

        assert "recommendations" not in result
        assert "budget" not in result

"""
Test suite for alert evaluation and performance reporting.
"""

from datetime import datetime, timezone

import pytest

from campaign_management.domain import (
    AlertSeverity,
    BudgetAlertType,
    Campaign,
    CampaignAlertService,
    CampaignID,
    CampaignMetrics,
    CampaignPerformanceService,
    CampaignType,
    CurrencyMismatchError,
    Money,
    PerformanceAlertType,
    RuleID,
    UserID,
    ValidationError,
)


def _campaign(metrics=None, budget=None, name="Retargeting Q3"):
    """Rehydrate a campaign holding the given metrics."""
    return Campaign(
        campaign_id=CampaignID.generate(),
        name=name,
        campaign_type=CampaignType.RETARGETING,
        targeting_rules=[RuleID.generate()],
        start_date=datetime(2024, 1, 1, tzinfo=timezone.utc),
        created_by=UserID.generate(),
        budget=budget,
        metrics=metrics or CampaignMetrics(currency="EUR"),
    )


class TestPerformanceAlerts:
    """Test suite for CampaignAlertService.performance_alerts."""

    def setup_method(self):
        self.alerts = CampaignAlertService()

    def test_healthy_campaign_has_no_alerts(self):
        metrics = CampaignMetrics(
            impressions=5000, clicks=250, conversions=25, revenue=Money(900, "EUR"), cost=Money(300, "EUR")
        )
        assert self.alerts.performance_alerts(_campaign(metrics)) == []

    def test_low_ctr_needs_enough_impressions(self):
        quiet = CampaignMetrics(impressions=1000, clicks=1)
        assert self.alerts.performance_alerts(_campaign(quiet)) == []

        busy = CampaignMetrics(impressions=2000, clicks=10)
        alerts = self.alerts.performance_alerts(_campaign(busy))

        assert [alert.type for alert in alerts] == [PerformanceAlertType.LOW_CTR]
        assert alerts[0].severity == AlertSeverity.MEDIUM
        assert alerts[0].current_value == 0.5
        assert alerts[0].threshold == 1.0

    def test_low_conversion_needs_enough_clicks(self):
        metrics = CampaignMetrics(impressions=1000, clicks=200, conversions=1)
        alerts = self.alerts.performance_alerts(_campaign(metrics))

        assert [alert.type for alert in alerts] == [PerformanceAlertType.LOW_CONVERSION]
        assert alerts[0].severity == AlertSeverity.HIGH

    def test_negative_roi_is_critical(self):
        metrics = CampaignMetrics(revenue=Money(10, "EUR"), cost=Money(100, "EUR"))
        alerts = self.alerts.performance_alerts(_campaign(metrics))

        assert [alert.type for alert in alerts] == [PerformanceAlertType.NEGATIVE_ROI]
        assert alerts[0].severity == AlertSeverity.CRITICAL
        assert alerts[0].to_dict()["type"] == "negative_roi"

    def test_thresholds_are_configurable(self):
        strict = CampaignAlertService(low_ctr_threshold=10.0, low_ctr_min_impressions=10)
        metrics = CampaignMetrics(impressions=100, clicks=5)
        alerts = strict.performance_alerts(_campaign(metrics))
        assert [alert.type for alert in alerts] == [PerformanceAlertType.LOW_CTR]


class TestBudgetAlerts:
    """Test suite for CampaignAlertService.budget_alerts."""

    def setup_method(self):
        self.alerts = CampaignAlertService()

    def test_no_budget_no_alert(self):
        metrics = CampaignMetrics(cost=Money(10_000, "EUR"))
        assert self.alerts.budget_alerts(_campaign(metrics)) == []

    def test_on_track(self):
        metrics = CampaignMetrics(cost=Money(100, "EUR"))
        assert self.alerts.budget_alerts(_campaign(metrics, budget=Money(1000, "EUR"))) == []

    def test_approaching_limit(self):
        metrics = CampaignMetrics(cost=Money(950, "EUR"))
        alerts = self.alerts.budget_alerts(_campaign(metrics, budget=Money(1000, "EUR")))

        assert len(alerts) == 1
        assert alerts[0].type == BudgetAlertType.APPROACHING_LIMIT
        assert alerts[0].threshold == 900.0
        assert alerts[0].current_value == 950.0

    def test_exceeded_also_reports_approaching(self):
        metrics = CampaignMetrics(cost=Money(1000, "EUR"))
        alerts = self.alerts.budget_alerts(_campaign(metrics, budget=Money(1000, "EUR")))

        assert [alert.type for alert in alerts] == [
            BudgetAlertType.APPROACHING_LIMIT,
            BudgetAlertType.EXCEEDED,
        ]
        assert alerts[1].severity == AlertSeverity.CRITICAL
        assert alerts[1].threshold == 1000.0

    def test_currency_mismatch_surfaces(self):
        metrics = CampaignMetrics(currency="USD", cost=Money(10, "USD"))
        with pytest.raises(CurrencyMismatchError):
            self.alerts.budget_alerts(_campaign(metrics, budget=Money(1000, "EUR")))


class TestPerformanceReports:
    """Test suite for CampaignPerformanceService."""

    def setup_method(self):
        self.service = CampaignPerformanceService()

    def test_report(self):
        metrics = CampaignMetrics(
            impressions=1000, clicks=50, conversions=5, revenue=Money(500, "EUR"), cost=Money(100, "EUR")
        )
        campaign = _campaign(metrics, budget=Money(1000, "EUR"))

        report = self.service.build_report(campaign).to_dict()

        assert report["campaign_id"] == str(campaign.id)
        assert report["status"] == "DRAFT"
        assert report["performance_score"] == 100.0
        assert report["performance_grade"] == "A+"
        assert report["is_performing_well"] is True
        assert report["recommendations"] == []
        assert report["budget"] == {
            "budget": {"amount": "1000.00", "currency": "EUR"},
            "spent": {"amount": "100.00", "currency": "EUR"},
            "remaining": {"amount": "900.00", "currency": "EUR"},
            "utilization": 10.0,
            "status": "on_track",
        }

    @pytest.mark.parametrize(
        "spent, status",
        [(899, "on_track"), (900, "approaching_limit"), (1200, "exceeded")],
    )
    def test_budget_status(self, spent, status):
        campaign = _campaign(CampaignMetrics(cost=Money(spent, "EUR")), budget=Money(1000, "EUR"))
        assert self.service.build_report(campaign).budget["status"] == status

    def test_report_without_budget(self):
        assert self.service.build_report(_campaign()).budget is None

    def test_compare_ranks_best_first(self):
        strong = _campaign(
            CampaignMetrics(
                impressions=1000, clicks=50, conversions=5, revenue=Money(500, "EUR"), cost=Money(100, "EUR")
            ),
            name="Strong",
        )
        weak = _campaign(CampaignMetrics(impressions=1000, clicks=5), name="Weak")

        comparison = self.service.compare([weak, strong])

        assert [entry["campaign_name"] for entry in comparison.rankings] == ["Strong", "Weak"]
        assert [entry["rank"] for entry in comparison.rankings] == [1, 2]
        assert comparison.best_performer["campaign_name"] == "Strong"
        assert comparison.worst_performer["campaign_name"] == "Weak"
        assert comparison.combined_metrics["impressions"] == 2000
        assert comparison.combined_metrics["clicks"] == 55
        assert comparison.average_score == 55.0

    def test_compare_needs_campaigns(self):
        with pytest.raises(ValidationError):
            self.service.compare([])

    def test_compare_rejects_mixed_currencies(self):
        eur = _campaign(CampaignMetrics(currency="EUR"))
        usd = _campaign(CampaignMetrics(currency="USD"))
        with pytest.raises(CurrencyMismatchError):
            self.service.compare([eur, usd])

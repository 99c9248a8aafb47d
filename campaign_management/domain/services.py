"""
Domain Services

Services that encapsulate business logic spanning a campaign and its metrics
without belonging to the aggregate itself: alert evaluation and performance
reporting. Both are pure; delivering alerts is the application layer's job.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from .entities import DEFAULT_BUDGET_ALERT_THRESHOLD, Campaign
from .exceptions import ValidationError
from .metrics import CampaignMetrics


class AlertSeverity(str, Enum):
    """How urgently an alert should be looked at."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class PerformanceAlertType(str, Enum):
    LOW_CTR = "low_ctr"
    LOW_CONVERSION = "low_conversion"
    NEGATIVE_ROI = "negative_roi"


class BudgetAlertType(str, Enum):
    APPROACHING_LIMIT = "approaching_limit"
    EXCEEDED = "exceeded"


@dataclass(frozen=True)
class PerformanceAlert:
    """Advisory raised when a KPI crosses its threshold."""

    campaign_id: str
    type: PerformanceAlertType
    threshold: float
    current_value: float
    message: str
    severity: AlertSeverity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaign_id": self.campaign_id,
            "type": self.type.value,
            "threshold": self.threshold,
            "current_value": self.current_value,
            "message": self.message,
            "severity": self.severity.value,
        }


@dataclass(frozen=True)
class BudgetAlert:
    """Advisory raised when spend nears or passes the campaign budget."""

    campaign_id: str
    type: BudgetAlertType
    threshold: float
    current_value: float
    message: str
    severity: AlertSeverity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaign_id": self.campaign_id,
            "type": self.type.value,
            "threshold": self.threshold,
            "current_value": self.current_value,
            "message": self.message,
            "severity": self.severity.value,
        }


class CampaignAlertService:
    """
    Evaluates performance and budget alerts for a campaign.

    Thresholds default to the standard rubric and can be overridden from
    configuration.
    """

    def __init__(
        self,
        low_ctr_threshold: float = 1.0,
        low_ctr_min_impressions: int = 1000,
        low_conversion_threshold: float = 2.0,
        low_conversion_min_clicks: int = 100,
        budget_alert_threshold: float = DEFAULT_BUDGET_ALERT_THRESHOLD,
    ):
        self.low_ctr_threshold = low_ctr_threshold
        self.low_ctr_min_impressions = low_ctr_min_impressions
        self.low_conversion_threshold = low_conversion_threshold
        self.low_conversion_min_clicks = low_conversion_min_clicks
        self.budget_alert_threshold = budget_alert_threshold

    def performance_alerts(self, campaign: Campaign) -> List[PerformanceAlert]:
        metrics = campaign.metrics
        campaign_id = str(campaign.id)
        alerts = []

        if (
            metrics.ctr < self.low_ctr_threshold
            and metrics.impressions > self.low_ctr_min_impressions
        ):
            alerts.append(
                PerformanceAlert(
                    campaign_id=campaign_id,
                    type=PerformanceAlertType.LOW_CTR,
                    threshold=self.low_ctr_threshold,
                    current_value=metrics.ctr,
                    message=f"Campaign {campaign.name} has low CTR: {metrics.ctr:.2f}%",
                    severity=AlertSeverity.MEDIUM,
                )
            )

        if (
            metrics.conversion_rate < self.low_conversion_threshold
            and metrics.clicks > self.low_conversion_min_clicks
        ):
            alerts.append(
                PerformanceAlert(
                    campaign_id=campaign_id,
                    type=PerformanceAlertType.LOW_CONVERSION,
                    threshold=self.low_conversion_threshold,
                    current_value=metrics.conversion_rate,
                    message=(
                        f"Campaign {campaign.name} has low conversion rate: "
                        f"{metrics.conversion_rate:.2f}%"
                    ),
                    severity=AlertSeverity.HIGH,
                )
            )

        if metrics.roi < 0:
            alerts.append(
                PerformanceAlert(
                    campaign_id=campaign_id,
                    type=PerformanceAlertType.NEGATIVE_ROI,
                    threshold=0.0,
                    current_value=metrics.roi,
                    message=f"Campaign {campaign.name} has negative ROI: {metrics.roi:.2f}%",
                    severity=AlertSeverity.CRITICAL,
                )
            )

        return alerts

    def budget_alerts(self, campaign: Campaign) -> List[BudgetAlert]:
        """Approaching and exceeded are checked independently, in that order."""
        budget = campaign.budget
        if budget is None:
            return []

        cost = float(campaign.metrics.cost.amount)
        limit = float(budget.amount)

        alerts = []

        if campaign.is_approaching_budget_limit(self.budget_alert_threshold):
            alerts.append(
                BudgetAlert(
                    campaign_id=str(campaign.id),
                    type=BudgetAlertType.APPROACHING_LIMIT,
                    threshold=limit * self.budget_alert_threshold,
                    current_value=cost,
                    message=(
                        f"Campaign {campaign.name} is approaching budget limit: "
                        f"{cost:.2f} of {limit:.2f}"
                    ),
                    severity=AlertSeverity.MEDIUM,
                )
            )

        if campaign.has_exceeded_budget():
            alerts.append(
                BudgetAlert(
                    campaign_id=str(campaign.id),
                    type=BudgetAlertType.EXCEEDED,
                    threshold=limit,
                    current_value=cost,
                    message=(
                        f"Campaign {campaign.name} has exceeded budget: "
                        f"{cost:.2f} of {limit:.2f}"
                    ),
                    severity=AlertSeverity.CRITICAL,
                )
            )

        return alerts


@dataclass
class PerformanceReport:
    campaign_id: str
    campaign_name: str
    status: str
    metrics: Dict[str, Any]
    performance_score: float
    performance_grade: str
    is_performing_well: bool
    needs_attention: bool
    recommendations: List[str]
    budget: Optional[Dict[str, Any]] = None
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaign_id": self.campaign_id,
            "campaign_name": self.campaign_name,
            "status": self.status,
            "metrics": self.metrics,
            "performance_score": self.performance_score,
            "performance_grade": self.performance_grade,
            "is_performing_well": self.is_performing_well,
            "needs_attention": self.needs_attention,
            "recommendations": list(self.recommendations),
            "budget": self.budget,
            "generated_at": self.generated_at.isoformat(),
        }


@dataclass
class PerformanceComparison:
    rankings: List[Dict[str, Any]]
    best_performer: Dict[str, Any]
    worst_performer: Dict[str, Any]
    combined_metrics: Dict[str, Any]
    average_score: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rankings": self.rankings,
            "best_performer": self.best_performer,
            "worst_performer": self.worst_performer,
            "combined_metrics": self.combined_metrics,
            "average_score": self.average_score,
        }


class CampaignPerformanceService:
    """Builds performance reports and cross-campaign comparisons."""

    def __init__(self, budget_alert_threshold: float = DEFAULT_BUDGET_ALERT_THRESHOLD):
        self.budget_alert_threshold = budget_alert_threshold

    def build_report(self, campaign: Campaign) -> PerformanceReport:
        metrics = campaign.metrics
        score = metrics.performance_score()

        return PerformanceReport(
            campaign_id=str(campaign.id),
            campaign_name=campaign.name,
            status=campaign.status.value,
            metrics=metrics.to_dict(),
            performance_score=score,
            performance_grade=metrics.performance_grade(),
            is_performing_well=metrics.is_performing_well(),
            needs_attention=metrics.needs_attention(),
            recommendations=metrics.optimization_recommendations(),
            budget=self._budget_summary(campaign),
        )

    def compare(self, campaigns: Sequence[Campaign]) -> PerformanceComparison:
        """
        Rank campaigns by performance score, best first.

        Combined KPIs are recomputed from the summed counters and totals, so
        all campaigns must report money in the same currency.
        """
        if not campaigns:
            raise ValidationError.for_field("campaigns", "at least one campaign is required")

        rankings = []
        combined: Optional[CampaignMetrics] = None
        for campaign in campaigns:
            metrics = campaign.metrics
            combined = metrics if combined is None else combined.add_metrics(metrics)
            rankings.append(
                {
                    "campaign_id": str(campaign.id),
                    "campaign_name": campaign.name,
                    "performance_score": metrics.performance_score(),
                    "performance_grade": metrics.performance_grade(),
                    "ctr": metrics.ctr,
                    "conversion_rate": metrics.conversion_rate,
                    "roi": metrics.roi,
                }
            )

        rankings.sort(key=lambda entry: entry["performance_score"], reverse=True)
        for position, entry in enumerate(rankings, start=1):
            entry["rank"] = position

        average_score = sum(entry["performance_score"] for entry in rankings) / len(rankings)

        return PerformanceComparison(
            rankings=rankings,
            best_performer=rankings[0],
            worst_performer=rankings[-1],
            combined_metrics=combined.to_dict(),
            average_score=round(average_score, 2),
        )

    def _budget_summary(self, campaign: Campaign) -> Optional[Dict[str, Any]]:
        if campaign.budget is None:
            return None

        if campaign.has_exceeded_budget():
            status = "exceeded"
        elif campaign.is_approaching_budget_limit(self.budget_alert_threshold):
            status = "approaching_limit"
        else:
            status = "on_track"

        return {
            "budget": campaign.budget.to_dict(),
            "spent": campaign.metrics.cost.to_dict(),
            "remaining": campaign.remaining_budget().to_dict(),
            "utilization": round(campaign.budget_utilization(), 2),
            "status": status,
        }

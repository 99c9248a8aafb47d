"""
Campaign Metrics

Folds tracked campaign events into raw counters and monetary totals and
recomputes the derived KPIs from them. Derived values are never assigned
directly; they are always a function of the counters at the last recompute.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from .exceptions import CurrencyMismatchError, ValidationError
from .performance import (
    calculate_performance_score,
    is_performing_well,
    needs_attention,
    optimization_recommendations,
    performance_grade,
)
from .value_objects import Currency, CustomerID, Money

_HUNDRED = Decimal("100")


class CampaignEventType(str, Enum):
    """Kinds of events tracked against a campaign."""

    IMPRESSION = "IMPRESSION"
    CLICK = "CLICK"
    CONVERSION = "CONVERSION"
    BOUNCE = "BOUNCE"
    UNSUBSCRIBE = "UNSUBSCRIBE"

    @classmethod
    def parse(cls, value: Union[str, "CampaignEventType"]) -> "CampaignEventType":
        """Parse an event type name, raising ValidationError for unknown kinds."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValidationError.for_field("event_type", f"invalid campaign event type: {value!r}")


@dataclass(frozen=True)
class TrackedEvent:
    """A single interaction tracked for a campaign, with optional money deltas."""

    event_type: CampaignEventType
    customer_id: Optional[CustomerID] = None
    revenue: Optional[Money] = None
    cost: Optional[Money] = None
    data: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid4()))
    occurred_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "event_type": self.event_type.value,
            "customer_id": str(self.customer_id) if self.customer_id else None,
            "revenue": self.revenue.to_dict() if self.revenue else None,
            "cost": self.cost.to_dict() if self.cost else None,
            "data": dict(self.data),
            "occurred_at": self.occurred_at.isoformat(),
        }


class CampaignMetrics:
    """
    Campaign performance metrics.

    Counters (impressions, clicks, conversions, bounces, unsubscribes) only
    grow through ``record_event`` and ``add_metrics``. Revenue and cost share a
    single currency. CTR, conversion rate, CPC, CPA, ROAS and ROI are read-only
    and are recomputed after every change; each is 0 when its denominator is 0.
    """

    def __init__(
        self,
        currency: Union[str, Currency] = Currency.EUR,
        impressions: int = 0,
        clicks: int = 0,
        conversions: int = 0,
        bounces: int = 0,
        unsubscribes: int = 0,
        revenue: Optional[Money] = None,
        cost: Optional[Money] = None,
        last_updated: Optional[datetime] = None,
    ):
        for name, value in (
            ("impressions", impressions),
            ("clicks", clicks),
            ("conversions", conversions),
            ("bounces", bounces),
            ("unsubscribes", unsubscribes),
        ):
            if value < 0:
                raise ValidationError.for_field(name, f"{name} cannot be negative")

        self._revenue = revenue if revenue is not None else Money.zero(currency)
        self._cost = cost if cost is not None else Money.zero(self._revenue.currency)
        if self._revenue.currency != self._cost.currency:
            raise CurrencyMismatchError(
                "Revenue and cost must share a currency",
                currency_a=self._revenue.currency,
                currency_b=self._cost.currency,
                operation="metrics",
            )

        self._impressions = impressions
        self._clicks = clicks
        self._conversions = conversions
        self._bounces = bounces
        self._unsubscribes = unsubscribes
        self.last_updated = last_updated or datetime.now(timezone.utc)
        self._recalculate()

    # Raw counters and totals

    @property
    def currency(self) -> str:
        return self._cost.currency

    @property
    def impressions(self) -> int:
        return self._impressions

    @property
    def clicks(self) -> int:
        return self._clicks

    @property
    def conversions(self) -> int:
        return self._conversions

    @property
    def bounces(self) -> int:
        return self._bounces

    @property
    def unsubscribes(self) -> int:
        return self._unsubscribes

    @property
    def revenue(self) -> Money:
        return self._revenue

    @property
    def cost(self) -> Money:
        return self._cost

    # Derived KPIs

    @property
    def ctr(self) -> float:
        """Click-through rate as a percentage."""
        return self._ctr

    @property
    def conversion_rate(self) -> float:
        """Conversions per click as a percentage."""
        return self._conversion_rate

    @property
    def cost_per_click(self) -> Money:
        """Cost per click, rounded to cents."""
        return Money(self._cpc_amount, self.currency)

    @property
    def cost_per_conversion(self) -> Money:
        """Cost per conversion, rounded to cents."""
        return Money(self._cpa_amount, self.currency)

    @property
    def cost_per_click_amount(self) -> Decimal:
        """Unrounded cost per click."""
        return self._cpc_amount

    @property
    def cost_per_conversion_amount(self) -> Decimal:
        """Unrounded cost per conversion."""
        return self._cpa_amount

    @property
    def roas(self) -> float:
        """Return on ad spend (revenue / cost)."""
        return self._roas

    @property
    def roi(self) -> float:
        """Return on investment as a percentage."""
        return self._roi

    def record_event(self, event: TrackedEvent, now: Optional[datetime] = None) -> None:
        """
        Fold a tracked event into the metrics.

        Money deltas are checked before anything changes, so a currency
        mismatch leaves the metrics untouched.
        """
        revenue = self._revenue
        cost = self._cost
        if event.revenue is not None:
            revenue = revenue.add(event.revenue)
        if event.cost is not None:
            cost = cost.add(event.cost)

        if event.event_type == CampaignEventType.IMPRESSION:
            self._impressions += 1
        elif event.event_type == CampaignEventType.CLICK:
            self._clicks += 1
        elif event.event_type == CampaignEventType.CONVERSION:
            self._conversions += 1
        elif event.event_type == CampaignEventType.BOUNCE:
            self._bounces += 1
        elif event.event_type == CampaignEventType.UNSUBSCRIBE:
            self._unsubscribes += 1

        self._revenue = revenue
        self._cost = cost
        self._recalculate()
        self.last_updated = now or datetime.now(timezone.utc)

    def add_metrics(self, other: "CampaignMetrics") -> "CampaignMetrics":
        """
        Merge two metric sets into a new instance.

        Counters and totals are summed and the KPIs recomputed from the merged
        totals. Both revenue and cost currencies must match.
        """
        if self._revenue.currency != other._revenue.currency:
            raise CurrencyMismatchError(
                "Cannot add metrics with different revenue currencies",
                currency_a=self._revenue.currency,
                currency_b=other._revenue.currency,
                operation="add_metrics",
            )
        if self._cost.currency != other._cost.currency:
            raise CurrencyMismatchError(
                "Cannot add metrics with different cost currencies",
                currency_a=self._cost.currency,
                currency_b=other._cost.currency,
                operation="add_metrics",
            )

        return CampaignMetrics(
            currency=self.currency,
            impressions=self._impressions + other._impressions,
            clicks=self._clicks + other._clicks,
            conversions=self._conversions + other._conversions,
            bounces=self._bounces + other._bounces,
            unsubscribes=self._unsubscribes + other._unsubscribes,
            revenue=self._revenue.add(other._revenue),
            cost=self._cost.add(other._cost),
        )

    def rebase_currency(self, currency: Union[str, Currency]) -> None:
        """Switch the currency of the money pair while no money has been recorded."""
        if not (self._revenue.is_zero() and self._cost.is_zero()):
            raise CurrencyMismatchError(
                "Cannot change metrics currency once revenue or cost has been recorded",
                currency_a=self.currency,
                currency_b=str(getattr(currency, "value", currency)),
                operation="rebase_currency",
            )
        self._revenue = Money.zero(currency)
        self._cost = Money.zero(currency)
        self._recalculate()

    def copy(self) -> "CampaignMetrics":
        return CampaignMetrics(
            currency=self.currency,
            impressions=self._impressions,
            clicks=self._clicks,
            conversions=self._conversions,
            bounces=self._bounces,
            unsubscribes=self._unsubscribes,
            revenue=self._revenue,
            cost=self._cost,
            last_updated=self.last_updated,
        )

    def _recalculate(self) -> None:
        """Recompute every derived KPI from the counters and totals."""
        cost = self._cost.amount
        revenue = self._revenue.amount

        if self._impressions > 0:
            self._ctr = self._clicks * 100 / self._impressions
        else:
            self._ctr = 0.0

        if self._clicks > 0:
            self._conversion_rate = self._conversions * 100 / self._clicks
        else:
            self._conversion_rate = 0.0

        # kept unrounded; Money only rounds when the value is rendered
        if self._clicks > 0 and not self._cost.is_zero():
            self._cpc_amount = cost / self._clicks
        else:
            self._cpc_amount = Decimal(0)

        if self._conversions > 0 and not self._cost.is_zero():
            self._cpa_amount = cost / self._conversions
        else:
            self._cpa_amount = Decimal(0)

        if not self._cost.is_zero():
            self._roas = float(revenue / cost)
            self._roi = float((revenue - cost) / cost * _HUNDRED)
        else:
            self._roas = 0.0
            self._roi = 0.0

    # Performance analysis

    def performance_score(self) -> float:
        return calculate_performance_score(self._ctr, self._conversion_rate, self._roi)

    def performance_grade(self) -> str:
        return performance_grade(self.performance_score())

    def is_performing_well(self) -> bool:
        return is_performing_well(self.performance_score())

    def needs_attention(self) -> bool:
        return needs_attention(self.performance_score())

    def optimization_recommendations(self) -> List[str]:
        return optimization_recommendations(
            ctr=self._ctr,
            conversion_rate=self._conversion_rate,
            roi=self._roi,
            impressions=self._impressions,
            cpc=float(self._cpc_amount),
            cost_is_zero=self._cost.is_zero(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "impressions": self._impressions,
            "clicks": self._clicks,
            "conversions": self._conversions,
            "bounces": self._bounces,
            "unsubscribes": self._unsubscribes,
            "revenue": self._revenue.to_dict(),
            "cost": self._cost.to_dict(),
            "ctr": self._ctr,
            "conversion_rate": self._conversion_rate,
            "cost_per_click": self.cost_per_click.to_dict(),
            "cost_per_conversion": self.cost_per_conversion.to_dict(),
            "roas": self._roas,
            "roi": self._roi,
            "last_updated": self.last_updated.isoformat(),
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, CampaignMetrics):
            return False
        return (
            self._impressions == other._impressions
            and self._clicks == other._clicks
            and self._conversions == other._conversions
            and self._bounces == other._bounces
            and self._unsubscribes == other._unsubscribes
            and self._revenue == other._revenue
            and self._cost == other._cost
        )

    def __repr__(self) -> str:
        return (
            f"CampaignMetrics(impressions={self._impressions}, clicks={self._clicks}, "
            f"conversions={self._conversions}, revenue={self._revenue}, cost={self._cost})"
        )

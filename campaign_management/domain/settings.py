"""
Campaign Settings

Validated composite configuration attached to a campaign: delivery channels,
frequency, A/B testing, scheduling rules and personalization.

Every settings type exposes ``validate(prefix)`` returning a list of
``FieldError`` so callers get every problem at once instead of the first one.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from .exceptions import FieldError, ValidationError
from .value_objects import Money

MIN_AB_VARIANTS = 2
MAX_AB_VARIANTS = 10
WEIGHT_TOLERANCE = 0.01
MAX_PERSONALIZATION_VARIANTS = 100

CONDITION_TYPES = ("time", "date", "event", "metric")
CONDITION_OPERATORS = ("equals", "greater_than", "less_than", "contains", "not_equals")
ACTION_TYPES = ("activate", "pause", "stop", "update_settings", "send_notification")


class Channel(str, Enum):
    """Communication channels a campaign can be delivered through."""

    EMAIL = "EMAIL"
    SMS = "SMS"
    PUSH = "PUSH"
    WEB = "WEB"
    SOCIAL = "SOCIAL"
    DISPLAY = "DISPLAY"


class Frequency(str, Enum):
    """How often a campaign is delivered to its audience."""

    ONCE = "ONCE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"


def _path(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


@dataclass(frozen=True)
class Variant:
    """A/B test variant with its share of traffic (0.0 to 1.0)."""

    id: str
    name: str
    weight: float
    description: str = ""
    settings: Dict[str, Any] = field(default_factory=dict)

    def validate(self, prefix: str = "variant") -> List[FieldError]:
        errors = []
        if not self.id:
            errors.append(FieldError(_path(prefix, "id"), "variant ID is required"))
        if not self.name:
            errors.append(FieldError(_path(prefix, "name"), "variant name is required"))
        if not 0.0 <= self.weight <= 1.0:
            errors.append(
                FieldError(_path(prefix, "weight"), "variant weight must be between 0.0 and 1.0")
            )
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "settings": dict(self.settings),
            "weight": self.weight,
        }


@dataclass(frozen=True)
class ABTestSettings:
    """A/B testing configuration; only validated when enabled."""

    enabled: bool
    variants: Tuple[Variant, ...] = ()
    traffic_split: float = 0.5
    success_metric: str = ""
    duration_days: int = 0

    def validate(self, prefix: str = "ab_test") -> List[FieldError]:
        if not self.enabled:
            return []

        errors = []
        if len(self.variants) < MIN_AB_VARIANTS:
            errors.append(
                FieldError(
                    _path(prefix, "variants"),
                    f"A/B test must have at least {MIN_AB_VARIANTS} variants",
                )
            )
        elif len(self.variants) > MAX_AB_VARIANTS:
            errors.append(
                FieldError(
                    _path(prefix, "variants"),
                    f"A/B test cannot have more than {MAX_AB_VARIANTS} variants",
                )
            )

        if not 0.0 <= self.traffic_split <= 1.0:
            errors.append(
                FieldError(
                    _path(prefix, "traffic_split"), "traffic split must be between 0.0 and 1.0"
                )
            )
        if not self.success_metric:
            errors.append(
                FieldError(
                    _path(prefix, "success_metric"), "success metric is required for A/B test"
                )
            )
        if self.duration_days <= 0:
            errors.append(
                FieldError(_path(prefix, "duration_days"), "A/B test duration must be positive")
            )

        total_weight = 0.0
        for index, variant in enumerate(self.variants):
            errors.extend(variant.validate(_path(prefix, f"variants[{index}]")))
            total_weight += variant.weight

        if self.variants and abs(total_weight - 1.0) > WEIGHT_TOLERANCE:
            errors.append(
                FieldError(_path(prefix, "variants"), "variant weights must sum to 1.0")
            )

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "variants": [variant.to_dict() for variant in self.variants],
            "traffic_split": self.traffic_split,
            "success_metric": self.success_metric,
            "duration_days": self.duration_days,
        }


@dataclass(frozen=True)
class SchedulingCondition:
    """Condition that must hold for a scheduling rule to fire."""

    type: str
    operator: str
    value: Any = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def validate(self, prefix: str = "condition") -> List[FieldError]:
        errors = []
        if not self.type:
            errors.append(FieldError(_path(prefix, "type"), "condition type is required"))
        elif self.type not in CONDITION_TYPES:
            errors.append(
                FieldError(_path(prefix, "type"), f"invalid condition type: {self.type}")
            )

        if not self.operator:
            errors.append(FieldError(_path(prefix, "operator"), "condition operator is required"))
        elif self.operator not in CONDITION_OPERATORS:
            errors.append(
                FieldError(
                    _path(prefix, "operator"), f"invalid condition operator: {self.operator}"
                )
            )
        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "operator": self.operator,
            "value": self.value,
            "metadata": dict(self.metadata),
        }


@dataclass(frozen=True)
class SchedulingAction:
    """Action taken when a scheduling rule's conditions are met."""

    type: str
    parameters: Dict[str, Any] = field(default_factory=dict)

    def validate(self, prefix: str = "action") -> List[FieldError]:
        if not self.type:
            return [FieldError(_path(prefix, "type"), "action type is required")]
        if self.type not in ACTION_TYPES:
            return [FieldError(_path(prefix, "type"), f"invalid action type: {self.type}")]
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "parameters": dict(self.parameters)}


@dataclass(frozen=True)
class SchedulingRule:
    """Named rule pairing conditions with the actions they trigger."""

    id: str
    name: str
    conditions: Tuple[SchedulingCondition, ...] = ()
    actions: Tuple[SchedulingAction, ...] = ()
    description: str = ""
    is_active: bool = True

    def validate(self, prefix: str = "scheduling_rule") -> List[FieldError]:
        errors = []
        if not self.id:
            errors.append(FieldError(_path(prefix, "id"), "scheduling rule ID is required"))
        if not self.name:
            errors.append(FieldError(_path(prefix, "name"), "scheduling rule name is required"))

        if not self.conditions:
            errors.append(
                FieldError(
                    _path(prefix, "conditions"),
                    "scheduling rule must have at least one condition",
                )
            )
        for index, condition in enumerate(self.conditions):
            errors.extend(condition.validate(_path(prefix, f"conditions[{index}]")))

        if not self.actions:
            errors.append(
                FieldError(
                    _path(prefix, "actions"), "scheduling rule must have at least one action"
                )
            )
        for index, action in enumerate(self.actions):
            errors.extend(action.validate(_path(prefix, f"actions[{index}]")))

        return errors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "conditions": [condition.to_dict() for condition in self.conditions],
            "actions": [action.to_dict() for action in self.actions],
            "is_active": self.is_active,
        }


@dataclass(frozen=True)
class PersonalizationConfig:
    """Personalization settings; max_variants only checked when enabled."""

    enabled: bool = False
    rules: Tuple[str, ...] = ()
    fallback: str = ""
    max_variants: int = 1

    def validate(self, prefix: str = "personalization") -> List[FieldError]:
        if not self.enabled:
            return []
        if not 1 <= self.max_variants <= MAX_PERSONALIZATION_VARIANTS:
            return [
                FieldError(
                    _path(prefix, "max_variants"),
                    f"max variants must be between 1 and {MAX_PERSONALIZATION_VARIANTS}",
                )
            ]
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "enabled": self.enabled,
            "rules": list(self.rules),
            "fallback": self.fallback,
            "max_variants": self.max_variants,
        }


@dataclass(frozen=True)
class CampaignSettings:
    """
    Campaign configuration and delivery settings.

    Construct freely, then call ``ensure_valid()``; the aggregate refuses
    settings for which ``validate()`` reports any error.
    """

    channels: FrozenSet[Channel]
    frequency: Frequency = Frequency.ONCE
    target_audience: FrozenSet[str] = frozenset()
    max_impressions: Optional[int] = None
    budget_limit: Optional[Money] = None
    ab_test: Optional[ABTestSettings] = None
    scheduling_rules: Tuple[SchedulingRule, ...] = ()
    personalization: PersonalizationConfig = field(default_factory=PersonalizationConfig)

    def validate(self) -> List[FieldError]:
        """Return every validation problem, with dotted field paths."""
        errors = []

        if not self.channels:
            errors.append(FieldError("channels", "at least one channel must be specified"))

        if self.max_impressions is not None and self.max_impressions <= 0:
            errors.append(FieldError("max_impressions", "max impressions must be positive"))

        if self.budget_limit is not None and not self.budget_limit.is_positive():
            errors.append(FieldError("budget_limit", "budget limit must be positive"))

        if self.ab_test is not None:
            errors.extend(self.ab_test.validate("ab_test"))

        for index, rule in enumerate(self.scheduling_rules):
            errors.extend(rule.validate(f"scheduling_rules[{index}]"))

        errors.extend(self.personalization.validate("personalization"))
        return errors

    def ensure_valid(self) -> "CampaignSettings":
        """Raise ValidationError listing every problem; return self otherwise."""
        errors = self.validate()
        if errors:
            raise ValidationError("invalid campaign settings", field_errors=errors)
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "target_audience": sorted(self.target_audience),
            "channels": sorted(channel.value for channel in self.channels),
            "frequency": self.frequency.value,
            "max_impressions": self.max_impressions,
            "budget_limit": self.budget_limit.to_dict() if self.budget_limit else None,
            "ab_test": self.ab_test.to_dict() if self.ab_test else None,
            "scheduling_rules": [rule.to_dict() for rule in self.scheduling_rules],
            "personalization": self.personalization.to_dict(),
        }

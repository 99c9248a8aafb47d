"""
Command DTOs for write operations in the campaign management service.

Data Transfer Objects that represent commands for state-changing operations
following CQRS pattern principles. ``parse_command`` turns pydantic failures
into the domain ValidationError so callers see a single error taxonomy.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional, Type, TypeVar
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from ...domain.exceptions import FieldError, ValidationError
from ...domain.metrics import CampaignEventType
from ...domain.settings import (
    ABTestSettings,
    CampaignSettings,
    Channel,
    Frequency,
    PersonalizationConfig,
    SchedulingAction,
    SchedulingCondition,
    SchedulingRule,
    Variant,
)
from ...domain.value_objects import CampaignType, Money

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_command(model: Type[ModelT], payload: Dict[str, Any]) -> ModelT:
    """Validate a raw payload into a command, raising the domain ValidationError."""
    try:
        return model.model_validate(payload)
    except PydanticValidationError as e:
        field_errors = [
            FieldError(
                ".".join(str(part) for part in error["loc"]) or "__root__",
                error["msg"],
            )
            for error in e.errors()
        ]
        raise ValidationError(f"invalid {model.__name__}", field_errors=field_errors) from e


def _validate_currency(v: str) -> str:
    """Validate currency code format."""
    if len(v) != 3 or not v.isalpha():
        raise ValueError("Currency must be a 3-letter code")
    return v.upper()


class VariantInput(BaseModel):
    id: str
    name: str
    weight: float
    description: str = ""
    settings: Dict[str, Any] = Field(default_factory=dict)

    def to_domain(self) -> Variant:
        return Variant(
            id=self.id,
            name=self.name,
            weight=self.weight,
            description=self.description,
            settings=dict(self.settings),
        )


class ABTestInput(BaseModel):
    enabled: bool = False
    variants: List[VariantInput] = Field(default_factory=list)
    traffic_split: float = 0.5
    success_metric: str = ""
    duration_days: int = 0

    def to_domain(self) -> ABTestSettings:
        return ABTestSettings(
            enabled=self.enabled,
            variants=tuple(variant.to_domain() for variant in self.variants),
            traffic_split=self.traffic_split,
            success_metric=self.success_metric,
            duration_days=self.duration_days,
        )


class SchedulingConditionInput(BaseModel):
    type: str
    operator: str
    value: Any = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class SchedulingActionInput(BaseModel):
    type: str
    parameters: Dict[str, Any] = Field(default_factory=dict)


class SchedulingRuleInput(BaseModel):
    id: str
    name: str
    description: str = ""
    conditions: List[SchedulingConditionInput] = Field(default_factory=list)
    actions: List[SchedulingActionInput] = Field(default_factory=list)
    is_active: bool = True

    def to_domain(self) -> SchedulingRule:
        return SchedulingRule(
            id=self.id,
            name=self.name,
            description=self.description,
            conditions=tuple(
                SchedulingCondition(
                    type=condition.type,
                    operator=condition.operator,
                    value=condition.value,
                    metadata=dict(condition.metadata),
                )
                for condition in self.conditions
            ),
            actions=tuple(
                SchedulingAction(type=action.type, parameters=dict(action.parameters))
                for action in self.actions
            ),
            is_active=self.is_active,
        )


class PersonalizationInput(BaseModel):
    enabled: bool = False
    rules: List[str] = Field(default_factory=list)
    fallback: str = ""
    max_variants: int = 1


class CampaignSettingsInput(BaseModel):
    """Campaign settings as received from callers."""

    target_audience: List[str] = Field(default_factory=list)
    channels: List[Channel] = Field(default_factory=lambda: [Channel.EMAIL])
    frequency: Frequency = Frequency.ONCE
    max_impressions: Optional[int] = None
    budget_limit_amount: Optional[Decimal] = None
    budget_limit_currency: str = "EUR"
    ab_test: Optional[ABTestInput] = None
    scheduling_rules: List[SchedulingRuleInput] = Field(default_factory=list)
    personalization: PersonalizationInput = Field(default_factory=PersonalizationInput)

    @field_validator("budget_limit_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return _validate_currency(v)

    def to_domain(self) -> CampaignSettings:
        budget_limit = None
        if self.budget_limit_amount is not None:
            budget_limit = Money(self.budget_limit_amount, self.budget_limit_currency)

        return CampaignSettings(
            channels=frozenset(self.channels),
            frequency=self.frequency,
            target_audience=frozenset(self.target_audience),
            max_impressions=self.max_impressions,
            budget_limit=budget_limit,
            ab_test=self.ab_test.to_domain() if self.ab_test else None,
            scheduling_rules=tuple(rule.to_domain() for rule in self.scheduling_rules),
            personalization=PersonalizationConfig(
                enabled=self.personalization.enabled,
                rules=tuple(self.personalization.rules),
                fallback=self.personalization.fallback,
                max_variants=self.personalization.max_variants,
            ),
        )


class CreateCampaignCommand(BaseModel):
    """Command to create a new campaign."""

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Summer Loyalty Push",
                "description": "Double points for returning customers",
                "campaign_type": "LOYALTY",
                "targeting_rules": ["123e4567-e89b-12d3-a456-426614174000"],
                "start_date": "2024-06-01T00:00:00Z",
                "end_date": "2024-08-31T23:59:59Z",
                "budget_amount": "50000.00",
                "budget_currency": "EUR",
                "created_by": "9b2d3c4e-1f2a-4b5c-8d9e-0a1b2c3d4e5f",
            }
        }
    )

    name: str = Field(..., min_length=1, max_length=255, description="Campaign name")
    description: str = Field(default="", max_length=1000, description="Campaign description")
    campaign_type: CampaignType = Field(..., description="Campaign type")
    targeting_rules: List[UUID] = Field(..., min_length=1, description="Targeting rule IDs")

    # Campaign timeline
    start_date: datetime = Field(..., description="Campaign start date")
    end_date: Optional[datetime] = Field(None, description="Campaign end date")

    # Budget information
    budget_amount: Optional[Decimal] = Field(None, gt=0, description="Total budget amount")
    budget_currency: str = Field(default="EUR", description="Budget currency code")

    settings: Optional[CampaignSettingsInput] = None
    created_by: UUID = Field(..., description="User who created the campaign")

    @field_validator("budget_currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return _validate_currency(v)

    @model_validator(mode="after")
    def end_date_after_start_date(self):
        """Ensure end date is after start date."""
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class UpdateCampaignCommand(BaseModel):
    """Command to update an existing campaign; omitted fields stay unchanged."""

    campaign_id: UUID = Field(..., description="Campaign ID to update")

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    targeting_rules: Optional[List[UUID]] = Field(None, min_length=1)
    budget_amount: Optional[Decimal] = Field(None, gt=0)
    budget_currency: Optional[str] = None
    clear_budget: bool = False
    settings: Optional[CampaignSettingsInput] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    updated_by: Optional[UUID] = Field(None, description="User who updated the campaign")

    @field_validator("budget_currency")
    @classmethod
    def validate_currency(cls, v):
        return _validate_currency(v) if v is not None else v

    @model_validator(mode="after")
    def check_consistency(self):
        """Validate end date if both dates are provided, and budget flags."""
        if self.start_date is not None and self.end_date is not None:
            if self.end_date <= self.start_date:
                raise ValueError("End date must be after start date")
        if self.clear_budget and self.budget_amount is not None:
            raise ValueError("Cannot set and clear the budget at the same time")
        return self


class ActivateCampaignCommand(BaseModel):
    """Command to activate a campaign."""

    campaign_id: UUID = Field(..., description="Campaign ID to activate")
    activated_by: Optional[UUID] = Field(None, description="User who activated the campaign")


class PauseCampaignCommand(BaseModel):
    """Command to pause a campaign."""

    campaign_id: UUID = Field(..., description="Campaign ID to pause")
    paused_by: Optional[UUID] = Field(None, description="User who paused the campaign")


class ResumeCampaignCommand(BaseModel):
    """Command to resume a paused campaign."""

    campaign_id: UUID = Field(..., description="Campaign ID to resume")
    resumed_by: Optional[UUID] = Field(None, description="User who resumed the campaign")


class CompleteCampaignCommand(BaseModel):
    """Command to complete a campaign."""

    campaign_id: UUID = Field(..., description="Campaign ID to complete")
    completed_by: Optional[UUID] = Field(None, description="User who completed the campaign")


class CancelCampaignCommand(BaseModel):
    """Command to cancel a campaign."""

    campaign_id: UUID = Field(..., description="Campaign ID to cancel")
    reason: str = Field(..., min_length=1, max_length=500, description="Reason for cancelling")
    cancelled_by: Optional[UUID] = Field(None, description="User who cancelled the campaign")

    @field_validator("reason")
    @classmethod
    def reason_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Cancellation reason is required")
        return v.strip()


class TrackCampaignEventCommand(BaseModel):
    """Command to record an interaction against a campaign."""

    campaign_id: UUID = Field(..., description="Campaign the event belongs to")
    event_type: CampaignEventType = Field(..., description="Kind of interaction")
    customer_id: Optional[UUID] = None
    revenue_amount: Optional[Decimal] = Field(None, ge=0)
    cost_amount: Optional[Decimal] = Field(None, ge=0)
    currency: str = Field(default="EUR", description="Currency of revenue and cost")
    event_data: Dict[str, Any] = Field(default_factory=dict)
    occurred_at: Optional[datetime] = None

    @field_validator("currency")
    @classmethod
    def validate_currency(cls, v: str) -> str:
        return _validate_currency(v)

    @field_validator("event_type", mode="before")
    @classmethod
    def normalize_event_type(cls, v):
        return v.upper() if isinstance(v, str) else v


class DeleteCampaignCommand(BaseModel):
    """Command to soft delete a campaign."""

    campaign_id: UUID = Field(..., description="Campaign ID to delete")
    deleted_by: Optional[UUID] = Field(None, description="User who deleted the campaign")

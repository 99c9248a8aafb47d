"""
Domain Layer

The domain layer contains the core campaign business logic and rules.
It is independent of external concerns like databases, frameworks, and transports.
"""

# Value Objects
from .value_objects import (
    CampaignID,
    CampaignStatus,
    CampaignType,
    Currency,
    CustomerID,
    Money,
    RuleID,
    UserID,
)

# Settings
from .settings import (
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

# Metrics
from .metrics import CampaignEventType, CampaignMetrics, TrackedEvent

# Entities
from .entities import AggregateEnvelope, Campaign

# Domain Services
from .services import (
    AlertSeverity,
    BudgetAlert,
    BudgetAlertType,
    CampaignAlertService,
    CampaignPerformanceService,
    PerformanceAlert,
    PerformanceAlertType,
    PerformanceComparison,
    PerformanceReport,
)

# Port Interfaces
from .interfaces import (
    CampaignEventRepositoryInterface,
    CampaignRepositoryInterface,
    EventPublisherInterface,
    ListCriteria,
    NotificationServiceInterface,
    TargetingServiceInterface,
)

# Domain Events
from .events import (
    CampaignActivatedEvent,
    CampaignBudgetUpdatedEvent,
    CampaignCancelledEvent,
    CampaignCompletedEvent,
    CampaignCreatedEvent,
    CampaignDetailsUpdatedEvent,
    CampaignEventTrackedEvent,
    CampaignPausedEvent,
    CampaignRescheduledEvent,
    CampaignResumedEvent,
    CampaignSettingsUpdatedEvent,
    CampaignTargetingRulesUpdatedEvent,
    DomainEvent,
)

# Domain Exceptions
from .exceptions import (
    BusinessRuleError,
    ConflictError,
    CurrencyMismatchError,
    DomainError,
    FieldError,
    InfrastructureError,
    InvalidStatusTransitionError,
    NotFoundError,
    ValidationError,
)

__all__ = [
    # Value Objects
    "CampaignID",
    "CampaignStatus",
    "CampaignType",
    "Currency",
    "CustomerID",
    "Money",
    "RuleID",
    "UserID",
    # Settings
    "ABTestSettings",
    "CampaignSettings",
    "Channel",
    "Frequency",
    "PersonalizationConfig",
    "SchedulingAction",
    "SchedulingCondition",
    "SchedulingRule",
    "Variant",
    # Metrics
    "CampaignEventType",
    "CampaignMetrics",
    "TrackedEvent",
    # Entities
    "AggregateEnvelope",
    "Campaign",
    # Domain Services
    "AlertSeverity",
    "BudgetAlert",
    "BudgetAlertType",
    "CampaignAlertService",
    "CampaignPerformanceService",
    "PerformanceAlert",
    "PerformanceAlertType",
    "PerformanceComparison",
    "PerformanceReport",
    # Port Interfaces
    "CampaignEventRepositoryInterface",
    "CampaignRepositoryInterface",
    "EventPublisherInterface",
    "ListCriteria",
    "NotificationServiceInterface",
    "TargetingServiceInterface",
    # Domain Events
    "DomainEvent",
    "CampaignActivatedEvent",
    "CampaignBudgetUpdatedEvent",
    "CampaignCancelledEvent",
    "CampaignCompletedEvent",
    "CampaignCreatedEvent",
    "CampaignDetailsUpdatedEvent",
    "CampaignEventTrackedEvent",
    "CampaignPausedEvent",
    "CampaignRescheduledEvent",
    "CampaignResumedEvent",
    "CampaignSettingsUpdatedEvent",
    "CampaignTargetingRulesUpdatedEvent",
    # Domain Exceptions
    "BusinessRuleError",
    "ConflictError",
    "CurrencyMismatchError",
    "DomainError",
    "FieldError",
    "InfrastructureError",
    "InvalidStatusTransitionError",
    "NotFoundError",
    "ValidationError",
]

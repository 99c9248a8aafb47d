"""
Query DTOs for read operations in the campaign management service.

Data Transfer Objects that represent queries for data retrieval operations
following CQRS pattern principles.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator, model_validator

from ...core.config import get_settings
from ...domain.interfaces import SORT_FIELDS
from ...domain.value_objects import CampaignStatus, CampaignType
from ..commands.dto import parse_command as parse_query

__all__ = [
    "GetCampaignQuery",
    "GetCampaignMetricsQuery",
    "ListCampaignsQuery",
    "parse_query",
]


class GetCampaignQuery(BaseModel):
    """Query to get a specific campaign by ID."""

    campaign_id: UUID = Field(..., description="Campaign ID to retrieve")
    include_metrics: bool = Field(default=True, description="Include performance metrics")
    include_settings: bool = Field(default=True, description="Include campaign settings")


class ListCampaignsQuery(BaseModel):
    """Query to list campaigns with filtering and pagination."""

    # Pagination
    page: int = Field(default=1, ge=1, description="Page number")
    page_size: int = Field(
        default_factory=lambda: get_settings().DEFAULT_PAGE_SIZE,
        ge=1,
        description="Items per page",
    )

    # Filtering
    status: Optional[CampaignStatus] = Field(None, description="Filter by campaign status")
    campaign_type: Optional[CampaignType] = Field(None, description="Filter by campaign type")
    created_by: Optional[UUID] = Field(None, description="Filter by creator")
    start_date_from: Optional[datetime] = Field(None, description="Filter campaigns starting from date")
    start_date_to: Optional[datetime] = Field(None, description="Filter campaigns starting to date")

    # Search
    search: Optional[str] = Field(None, max_length=100, description="Search in campaign name/description")

    # Sorting
    sort_by: str = Field(default="created_at", description="Sort field")
    sort_order: str = Field(default="desc", description="Sort order (asc/desc)")

    @field_validator("page_size")
    @classmethod
    def validate_page_size(cls, v):
        """Cap page size at the configured maximum."""
        max_page_size = get_settings().MAX_PAGE_SIZE
        if v > max_page_size:
            raise ValueError(f"Page size cannot exceed {max_page_size}")
        return v

    @field_validator("sort_by")
    @classmethod
    def validate_sort_by(cls, v):
        """Validate sort field."""
        if v not in SORT_FIELDS:
            raise ValueError(f'Sort field must be one of: {", ".join(SORT_FIELDS)}')
        return v

    @field_validator("sort_order")
    @classmethod
    def validate_sort_order(cls, v):
        """Validate sort order."""
        if v.lower() not in ["asc", "desc"]:
            raise ValueError('Sort order must be "asc" or "desc"')
        return v.lower()

    @model_validator(mode="after")
    def validate_date_window(self):
        if (
            self.start_date_from is not None
            and self.start_date_to is not None
            and self.start_date_from > self.start_date_to
        ):
            raise ValueError("start_date_from must not be after start_date_to")
        return self


class GetCampaignMetricsQuery(BaseModel):
    """Query to get campaign performance metrics."""

    campaign_id: UUID = Field(..., description="Campaign ID for metrics")
    include_recommendations: bool = Field(default=True, description="Include optimization tips")
    include_budget: bool = Field(default=True, description="Include budget utilisation")

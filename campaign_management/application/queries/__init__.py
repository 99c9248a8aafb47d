"""Read-side queries and their handlers."""

from .dto import GetCampaignMetricsQuery, GetCampaignQuery, ListCampaignsQuery, parse_query
from .handlers import GetCampaignHandler, GetCampaignMetricsHandler, ListCampaignsHandler

__all__ = [
    "GetCampaignQuery",
    "GetCampaignMetricsQuery",
    "ListCampaignsQuery",
    "parse_query",
    "GetCampaignHandler",
    "GetCampaignMetricsHandler",
    "ListCampaignsHandler",
]

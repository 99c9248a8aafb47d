"""Multi-step campaign workflows."""

from .campaign_use_cases import CampaignPerformanceAnalysisUseCase, LaunchCampaignUseCase

__all__ = ["CampaignPerformanceAnalysisUseCase", "LaunchCampaignUseCase"]

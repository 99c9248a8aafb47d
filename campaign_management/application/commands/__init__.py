"""Write-side commands and their handlers."""

from .dto import (
    ActivateCampaignCommand,
    CampaignSettingsInput,
    CancelCampaignCommand,
    CompleteCampaignCommand,
    CreateCampaignCommand,
    DeleteCampaignCommand,
    PauseCampaignCommand,
    ResumeCampaignCommand,
    TrackCampaignEventCommand,
    UpdateCampaignCommand,
    parse_command,
)
from .handlers import (
    ActivateCampaignHandler,
    CancelCampaignHandler,
    CompleteCampaignHandler,
    CreateCampaignHandler,
    DeleteCampaignHandler,
    PauseCampaignHandler,
    ResumeCampaignHandler,
    TrackCampaignEventHandler,
    UpdateCampaignHandler,
)

__all__ = [
    # Commands
    "ActivateCampaignCommand",
    "CampaignSettingsInput",
    "CancelCampaignCommand",
    "CompleteCampaignCommand",
    "CreateCampaignCommand",
    "DeleteCampaignCommand",
    "PauseCampaignCommand",
    "ResumeCampaignCommand",
    "TrackCampaignEventCommand",
    "UpdateCampaignCommand",
    "parse_command",
    # Handlers
    "ActivateCampaignHandler",
    "CancelCampaignHandler",
    "CompleteCampaignHandler",
    "CreateCampaignHandler",
    "DeleteCampaignHandler",
    "PauseCampaignHandler",
    "ResumeCampaignHandler",
    "TrackCampaignEventHandler",
    "UpdateCampaignHandler",
]

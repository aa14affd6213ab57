"""
Tool services.

Each service groups related Discord operations. Tool methods take a pydantic
params model and return the text shown to the caller.
"""

from beacon.services.base import DiscordService, parse_color
from beacon.services.embeds import EmbedService
from beacon.services.interactive import InteractiveService
from beacon.services.log_analysis import LogAnalysisService
from beacon.services.moderation import ModerationService
from beacon.services.permissions import PermissionService
from beacon.services.roles import RoleService
from beacon.services.threads import ThreadService
from beacon.services.voice import VoiceService

__all__ = [
    "DiscordService",
    "EmbedService",
    "InteractiveService",
    "LogAnalysisService",
    "ModerationService",
    "PermissionService",
    "RoleService",
    "ThreadService",
    "VoiceService",
    "parse_color",
]

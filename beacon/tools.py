"""
Tool registry.

Binds service methods to MCP tool names and descriptions. A tool's name is
the name of the service method implementing it, and its parameter model is
taken from that method's ``params`` annotation.
"""

from __future__ import annotations

import logging
import typing
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

import discord
from pydantic import BaseModel

from beacon.fetcher import DiscordLogSource
from beacon.patterns import PatternRegistry
from beacon.services import (
    EmbedService,
    InteractiveService,
    LogAnalysisService,
    ModerationService,
    PermissionService,
    RoleService,
    ThreadService,
    VoiceService,
)

logger = logging.getLogger("beacon.tools")


@dataclass(frozen=True)
class ToolSpec:
    """One MCP tool backed by a service method."""
    name: str
    description: str
    params_model: type[BaseModel]
    handler: Callable[[Any], Awaitable[str]]

    @classmethod
    def from_method(cls, method: Callable[[Any], Awaitable[str]], description: str) -> "ToolSpec":
        hints = typing.get_type_hints(method)
        return cls(
            name=method.__name__,
            description=description,
            params_model=hints["params"],
            handler=method,
        )

    def input_schema(self) -> dict:
        """JSON schema of the parameters, keyed by their camelCase names."""
        return self.params_model.model_json_schema(by_alias=True)

    async def invoke(self, arguments: Optional[dict]) -> str:
        """Validate raw arguments and run the handler."""
        params = self.params_model.model_validate(arguments or {})
        return await self.handler(params)


def create_tools(
    client: discord.Client,
    registry: PatternRegistry,
    default_guild_id: Optional[str] = None,
) -> list[ToolSpec]:
    """
    Create every tool exposed by the server.

    Args:
        client: The discord.py client the services operate through.
        registry: Cheat patterns used by the log analysis tools.
        default_guild_id: Server used when a call omits guildId.

    Returns:
        Tool specs in listing order.
    """
    logs = LogAnalysisService(DiscordLogSource(client), registry)
    moderation = ModerationService(client, default_guild_id)
    roles = RoleService(client, default_guild_id)
    permissions = PermissionService(client, default_guild_id)
    threads = ThreadService(client, default_guild_id)
    voice = VoiceService(client, default_guild_id)
    embeds = EmbedService(client, default_guild_id)
    interactive = InteractiveService(client, default_guild_id)

    definitions = [
        # Log analysis
        (logs.read_log_channel, "Read recent messages from a log channel"),
        (logs.scan_for_cheats, "Scan a log channel for suspicious activity and cheat patterns"),
        (logs.analyze_player_activity, "Analyze a specific player's activity in logs"),
        (logs.search_logs, "Search log messages for specific keywords or patterns"),
        (logs.get_log_stats, "Get statistics about log channel activity"),
        # Moderation
        (moderation.kick_member, "Kick a member from the server"),
        (moderation.ban_member, "Ban a user from the server"),
        (moderation.unban_member, "Unban a user from the server"),
        (moderation.timeout_member, "Timeout a member (prevent them from sending messages)"),
        (moderation.remove_timeout, "Remove timeout from a member"),
        (moderation.list_bans, "List all banned users in the server"),
        (moderation.get_member_info, "Get detailed information about a member"),
        # Roles
        (roles.create_role, "Create a new role in the server"),
        (roles.delete_role, "Delete a role from the server"),
        (roles.assign_role, "Assign a role to a member"),
        (roles.remove_role, "Remove a role from a member"),
        (roles.list_roles, "List all roles in the server"),
        (roles.find_role, "Find a role by name"),
        (roles.update_role, "Update a role's properties (name, color, hoisted, mentionable)"),
        (roles.get_members_by_role, "Get all members with a specific role"),
        # Permissions
        (permissions.set_channel_permissions,
         "Set channel permissions for a role (use presets or specific permissions)"),
        (permissions.set_member_channel_permissions, "Set channel permissions for a specific member"),
        (permissions.clear_role_permissions, "Remove all permission overrides for a role from a channel"),
        (permissions.get_channel_permissions, "Get current permission overrides for a channel"),
        (permissions.sync_channel_permissions, "Sync channel permissions with its parent category"),
        (permissions.list_permissions, "List all available Discord permission names"),
        (permissions.lock_channel, "Lock a channel (prevent @everyone from sending messages)"),
        (permissions.unlock_channel, "Unlock a channel (allow @everyone to send messages)"),
        # Threads
        (threads.create_thread, "Create a new thread in a text channel"),
        (threads.create_thread_from_message, "Create a thread attached to an existing message"),
        (threads.archive_thread, "Archive a thread (optionally lock it)"),
        (threads.unarchive_thread, "Unarchive a thread"),
        (threads.delete_thread, "Delete a thread"),
        (threads.list_threads, "List all active threads in the server"),
        (threads.add_thread_member, "Add a member to a thread"),
        (threads.remove_thread_member, "Remove a member from a thread"),
        (threads.send_thread_message, "Send a message to a thread"),
        # Voice
        (voice.create_voice_channel, "Create a new voice channel"),
        (voice.delete_voice_channel, "Delete a voice channel"),
        (voice.list_voice_channels, "List all voice channels in the server"),
        (voice.get_voice_members, "Get members currently in a voice channel"),
        (voice.move_member, "Move a member to a different voice channel"),
        (voice.disconnect_member, "Disconnect a member from voice"),
        (voice.server_mute_member, "Server mute/unmute a member in voice"),
        (voice.server_deafen_member, "Server deafen/undeafen a member in voice"),
        # Embeds
        (embeds.send_embed, "Send a rich embed message to a channel"),
        (embeds.send_embed_with_fields, "Send a rich embed with structured fields"),
        (embeds.send_announcement, "Send a standardized announcement embed (info/success/warning/error)"),
        (embeds.edit_embed, "Edit an existing embed message"),
        # Interactive components
        (interactive.send_buttons, "Send a message with interactive buttons"),
        (interactive.send_embed_with_buttons, "Send an embed message with interactive buttons"),
        (interactive.send_select_menu, "Send a message with a dropdown select menu"),
        (interactive.send_role_panel, "Send a role selection panel with buttons for self-assignable roles"),
        (interactive.send_ticket_panel, "Send a support ticket creation panel"),
        (interactive.remove_components, "Remove all buttons and menus from a message"),
        (interactive.disable_buttons, "Disable all buttons on a message (gray them out)"),
    ]

    tools = [ToolSpec.from_method(method, description) for method, description in definitions]
    logger.debug(f"Created {len(tools)} tools")
    return tools

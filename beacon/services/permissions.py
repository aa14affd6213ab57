"""
Channel permission tools.

Permission names are accepted as discord.py flag names in any case
(``send_messages``, ``SEND_MESSAGES``) or as the classic upper-case aliases
listed in ``PERMISSION_ALIASES`` (``MESSAGE_SEND``, ``VOICE_CONNECT``, ...).
Unknown names are skipped with a warning.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

import discord

from beacon.errors import InvalidInputError
from beacon.params import (
    ChannelParams,
    ChannelRoleParams,
    LockChannelParams,
    NoParams,
    SetChannelPermissionsParams,
    SetMemberChannelPermissionsParams,
    UnlockChannelParams,
)
from beacon.services.base import DiscordService

logger = logging.getLogger("beacon.services.permissions")

PERMISSION_ALIASES: dict[str, str] = {
    # Text
    "VIEW_CHANNEL": "view_channel",
    "MESSAGE_SEND": "send_messages",
    "MESSAGE_SEND_IN_THREADS": "send_messages_in_threads",
    "CREATE_PUBLIC_THREADS": "create_public_threads",
    "CREATE_PRIVATE_THREADS": "create_private_threads",
    "MESSAGE_EMBED_LINKS": "embed_links",
    "MESSAGE_ATTACH_FILES": "attach_files",
    "MESSAGE_ADD_REACTION": "add_reactions",
    "MESSAGE_EXT_EMOJI": "external_emojis",
    "MESSAGE_EXT_STICKER": "external_stickers",
    "MESSAGE_MENTION_EVERYONE": "mention_everyone",
    "MESSAGE_MANAGE": "manage_messages",
    "MESSAGE_HISTORY": "read_message_history",
    "MESSAGE_TTS": "send_tts_messages",
    "USE_APPLICATION_COMMANDS": "use_application_commands",
    # Voice
    "VOICE_CONNECT": "connect",
    "VOICE_SPEAK": "speak",
    "VOICE_STREAM": "stream",
    "VOICE_USE_VAD": "use_voice_activation",
    "PRIORITY_SPEAKER": "priority_speaker",
    "VOICE_MUTE_OTHERS": "mute_members",
    "VOICE_DEAF_OTHERS": "deafen_members",
    "VOICE_MOVE_OTHERS": "move_members",
    "VOICE_USE_SOUNDBOARD": "use_soundboard",
    "VOICE_USE_EXTERNAL_SOUNDS": "use_external_sounds",
    "VOICE_START_ACTIVITIES": "use_embedded_activities",
    # Management
    "MANAGE_CHANNEL": "manage_channels",
    "MANAGE_PERMISSIONS": "manage_roles",
    "MANAGE_WEBHOOKS": "manage_webhooks",
    "MANAGE_THREADS": "manage_threads",
    "MANAGE_EVENTS": "manage_events",
}

PERMISSION_PRESETS: dict[str, tuple[str, ...]] = {
    "staff_text": (
        "view_channel", "send_messages", "read_message_history", "attach_files",
        "embed_links", "manage_messages", "mention_everyone",
    ),
    "staff_voice": (
        "view_channel", "connect", "speak", "stream",
        "mute_members", "deafen_members", "move_members",
    ),
    "member_text": (
        "view_channel", "send_messages", "read_message_history", "attach_files",
        "embed_links", "add_reactions",
    ),
    "member_voice": ("view_channel", "connect", "speak", "stream"),
    "readonly": ("view_channel", "read_message_history"),
    "hidden": (),
}

# Alias groups shown by list_permissions
_ALIAS_GROUPS = {
    "Text Channels": [k for k in PERMISSION_ALIASES if k.startswith(("VIEW", "MESSAGE", "CREATE", "USE_APP"))],
    "Voice Channels": [k for k in PERMISSION_ALIASES if k.startswith(("VOICE", "PRIORITY"))],
    "Management": [k for k in PERMISSION_ALIASES if k.startswith("MANAGE")],
}

LOCKED_PERMISSIONS = ("send_messages", "add_reactions")


def resolve_permission(name: str) -> Optional[str]:
    """Map a user-supplied permission name to a discord.py flag name, or None."""
    name = name.strip()
    if not name:
        return None
    alias = PERMISSION_ALIASES.get(name.upper())
    if alias is not None:
        return alias
    if name.lower() in discord.Permissions.VALID_FLAGS:
        return name.lower()
    return None


def parse_permission_list(value: Optional[str]) -> list[str]:
    """Parse a comma separated list of permission names, skipping unknown ones."""
    if not value:
        return []

    resolved: list[str] = []
    for raw in value.split(","):
        flag = resolve_permission(raw)
        if flag is None:
            if raw.strip():
                logger.warning(f"Unknown permission: {raw.strip()}")
            continue
        if flag not in resolved:
            resolved.append(flag)
    return resolved


def build_overwrite(allow: Iterable[str], deny: Iterable[str]) -> discord.PermissionOverwrite:
    """Build an overwrite; a flag present in both lists ends up denied."""
    overwrite = discord.PermissionOverwrite()
    for flag in allow:
        setattr(overwrite, flag, True)
    for flag in deny:
        setattr(overwrite, flag, False)
    return overwrite


def _join(flags: Iterable[str]) -> str:
    flags = list(flags)
    return ", ".join(flags) if flags else "None"


class PermissionService(DiscordService):
    """Per-channel permission overrides for roles and members."""

    async def _get_guild_channel(self, channel_id: Optional[str]) -> discord.abc.GuildChannel:
        return await self._get_channel(channel_id, discord.abc.GuildChannel)

    async def set_channel_permissions(self, params: SetChannelPermissionsParams) -> str:
        """
        Replace a role's override on a channel.

        A preset supplies the base allow list; ``allow`` and ``deny`` add to
        it. The ``hidden`` preset denies viewing the channel.

        Args:
            params: Channel, role, optional preset and allow/deny lists.

        Returns:
            Confirmation listing the allowed and denied permissions.

        Raises:
            InvalidInputError: If the preset is unknown.
        """
        self._require(params.channel_id, "channelId")
        self._require(params.role_id, "roleId")

        allow: list[str] = []
        deny: list[str] = []
        if params.preset:
            preset = params.preset.strip().lower()
            if preset not in PERMISSION_PRESETS:
                raise InvalidInputError(
                    f"Unknown preset: {params.preset}. Available: {', '.join(PERMISSION_PRESETS)}"
                )
            allow.extend(PERMISSION_PRESETS[preset])
            if preset == "hidden":
                deny.append("view_channel")

        allow.extend(f for f in parse_permission_list(params.allow) if f not in allow)
        deny.extend(f for f in parse_permission_list(params.deny) if f not in deny)

        channel = await self._get_guild_channel(params.channel_id)
        role = self._get_role(channel.guild, params.role_id)

        with self._guard("manage channel permissions"):
            await channel.set_permissions(role, overwrite=build_overwrite(allow, deny))

        self._log_action(f"Set permissions for role '{role.name}' in #{channel.name}")
        return (
            f"Set permissions for role {role.name} in #{channel.name}"
            f"\nAllowed: {_join(f for f in allow if f not in deny)}"
            f"\nDenied: {_join(deny)}"
        )

    async def set_member_channel_permissions(self, params: SetMemberChannelPermissionsParams) -> str:
        self._require(params.channel_id, "channelId")
        self._require(params.user_id, "userId")

        channel = await self._get_guild_channel(params.channel_id)
        member = await self._fetch_member(channel.guild, params.user_id)
        overwrite = build_overwrite(parse_permission_list(params.allow), parse_permission_list(params.deny))

        with self._guard("manage channel permissions"):
            await channel.set_permissions(member, overwrite=overwrite)

        self._log_action(f"Set permissions for {member} in #{channel.name}")
        return f"Set permissions for {member.display_name} in #{channel.name}"

    async def clear_role_permissions(self, params: ChannelRoleParams) -> str:
        self._require(params.channel_id, "channelId")
        self._require(params.role_id, "roleId")

        channel = await self._get_guild_channel(params.channel_id)
        role = self._get_role(channel.guild, params.role_id)

        if role not in channel.overwrites:
            return f"No permission overrides found for role {role.name} in #{channel.name}"

        with self._guard("manage channel permissions"):
            await channel.set_permissions(role, overwrite=None)

        self._log_action(f"Cleared overrides for role '{role.name}' in #{channel.name}")
        return f"Cleared permission overrides for role {role.name} in #{channel.name}"

    async def get_channel_permissions(self, params: ChannelParams) -> str:
        channel = await self._get_guild_channel(params.channel_id)

        overwrites = channel.overwrites
        if not overwrites:
            return f"No permission overrides for #{channel.name}"

        lines = [f"**Permission Overrides for #{channel.name}:**", ""]
        for target, overwrite in overwrites.items():
            if isinstance(target, discord.Role):
                lines.append(f"**Role: {target.name}**")
            else:
                lines.append(f"**Member: {getattr(target, 'display_name', target.id)}**")

            allowed, denied = overwrite.pair()
            allowed_names = [name for name, value in allowed if value]
            denied_names = [name for name, value in denied if value]
            if allowed_names:
                lines.append(f"  ✅ Allowed: {', '.join(allowed_names)}")
            if denied_names:
                lines.append(f"  ❌ Denied: {', '.join(denied_names)}")
            lines.append("")

        return "\n".join(lines) + "\n"

    async def sync_channel_permissions(self, params: ChannelParams) -> str:
        """Replace a channel's overrides with those of its parent category."""
        channel = await self._get_guild_channel(params.channel_id)

        if isinstance(channel, discord.CategoryChannel):
            raise InvalidInputError("This channel type does not support categories")
        category = channel.category
        if category is None:
            raise InvalidInputError("Channel has no parent category to sync with")

        with self._guard("manage channel permissions"):
            await channel.edit(sync_permissions=True)

        self._log_action(f"Synced #{channel.name} with category '{category.name}'")
        return f"Synced #{channel.name} permissions with category: {category.name}"

    async def list_permissions(self, params: NoParams) -> str:
        lines = ["**Available Permissions:**", ""]
        for group, names in _ALIAS_GROUPS.items():
            lines.append(f"**{group}:**")
            lines.append(", ".join(names))
            lines.append("")

        lines.append("discord.py flag names (e.g. send_messages, manage_roles) are accepted too.")
        lines.append("")
        lines.append("**Available Presets:**")
        for preset, flags in PERMISSION_PRESETS.items():
            if preset == "hidden":
                lines.append(f"- **{preset}**: denies view_channel")
            else:
                lines.append(f"- **{preset}**: {', '.join(flags)}")

        return "\n".join(lines) + "\n"

    async def lock_channel(self, params: LockChannelParams) -> str:
        """Stop @everyone from sending messages or reacting in a channel."""
        channel = await self._get_guild_channel(params.channel_id)
        everyone = channel.guild.default_role

        overwrite = channel.overwrites_for(everyone)
        for flag in LOCKED_PERMISSIONS:
            setattr(overwrite, flag, False)

        with self._guard("manage channel permissions"):
            await channel.set_permissions(everyone, overwrite=overwrite, reason=params.reason)

        self._log_action(f"Locked #{channel.name}")
        suffix = f" - {params.reason}" if params.reason is not None else ""
        return f"🔒 Locked #{channel.name}{suffix}"

    async def unlock_channel(self, params: UnlockChannelParams) -> str:
        channel = await self._get_guild_channel(params.channel_id)
        everyone = channel.guild.default_role

        if everyone in channel.overwrites:
            overwrite = channel.overwrites_for(everyone)
            for flag in LOCKED_PERMISSIONS:
                setattr(overwrite, flag, None)
            with self._guard("manage channel permissions"):
                await channel.set_permissions(
                    everyone,
                    overwrite=None if overwrite.is_empty() else overwrite,
                )

        self._log_action(f"Unlocked #{channel.name}")
        return f"🔓 Unlocked #{channel.name}"

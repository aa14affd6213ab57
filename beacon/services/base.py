"""
Shared plumbing for the Discord services.

Resolution helpers turn the string IDs MCP clients send into discord.py
objects and raise ``InvalidInputError`` / ``NotFoundError`` when they cannot.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator, Optional

import discord
from discord import Forbidden, HTTPException

from beacon.errors import DiscordActionError, InvalidInputError, NotFoundError


def require_param(value: Optional[str], name: str) -> str:
    """Return a stripped required string parameter."""
    if value is None or not str(value).strip():
        raise InvalidInputError(f"{name} cannot be null")
    return str(value).strip()


def require_text(value: Optional[str], name: str) -> str:
    """Return a required free-text parameter exactly as given; only empty is rejected."""
    if value is None or value == "":
        raise InvalidInputError(f"{name} cannot be null")
    return value


def parse_color(color_hex: Optional[str]) -> Optional[discord.Color]:
    """
    Parse a hex color string to discord.Color.

    Accepts '#FF5733' or 'FF5733'. Returns None when no color was given.

    Raises:
        InvalidInputError: If the string is not a hex color.
    """
    if not color_hex or not color_hex.strip():
        return None

    value = color_hex.strip().lstrip("#")
    try:
        return discord.Color(int(value, 16))
    except ValueError:
        raise InvalidInputError(f"Invalid color: {color_hex}") from None


def format_color(color: Optional[discord.Color]) -> str:
    """Render a color as '#RRGGBB', or 'none' for the default color."""
    if color is None or color.value == 0:
        return "none"
    return f"#{color.value:06X}"


class DiscordService:
    """
    Base class for services operating on a connected discord.py client.

    Args:
        client: The bot client.
        default_guild_id: Server used when a tool call omits guildId.
    """

    def __init__(self, client: discord.Client, default_guild_id: Optional[str] = None):
        self.client = client
        self.default_guild_id = default_guild_id

    @property
    def logger(self) -> logging.Logger:
        """Logger named after the concrete service's module."""
        return logging.getLogger(type(self).__module__)

    def _log_action(self, message: str, success: bool = True) -> None:
        """Log an action for tracking."""
        self.logger.info(f"[{'SUCCESS' if success else 'FAILED'}] {message}")

    @contextmanager
    def _guard(self, action: str) -> Iterator[None]:
        """Translate discord.py failures inside the block into DiscordActionError."""
        try:
            yield
        except Forbidden as e:
            self._log_action(f"{action}: forbidden", False)
            raise DiscordActionError(f"Bot lacks permission to {action}") from e
        except HTTPException as e:
            self._log_action(f"{action}: {e.text}", False)
            raise DiscordActionError(f"Discord API error: {e.text}") from e

    # ========================================================================
    # Validation
    # ========================================================================

    _require = staticmethod(require_param)

    @classmethod
    def _parse_id(cls, value: Optional[str], name: str) -> int:
        """Parse a required Discord snowflake parameter."""
        text = cls._require(value, name)
        try:
            return int(text)
        except ValueError:
            raise InvalidInputError(f"{name} must be a numeric Discord ID, got '{text}'") from None

    # ========================================================================
    # Resolution
    # ========================================================================

    def _resolve_guild(self, guild_id: Optional[str]) -> discord.Guild:
        """Resolve a server, falling back to the configured default."""
        if guild_id is None or not str(guild_id).strip():
            guild_id = self.default_guild_id
        snowflake = self._parse_id(guild_id, "guildId")

        guild = self.client.get_guild(snowflake)
        if guild is None:
            raise NotFoundError("Discord server not found by guildId")
        return guild

    async def _get_channel(
        self,
        channel_id: Optional[str],
        kind: type | tuple[type, ...] = discord.TextChannel,
        label: str = "Channel",
        param: str = "channelId",
    ):
        """Resolve a channel by ID and check it is of the expected kind."""
        snowflake = self._parse_id(channel_id, param)

        channel = self.client.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(snowflake)
            except (discord.NotFound, discord.Forbidden):
                channel = None

        if not isinstance(channel, kind):
            raise NotFoundError(f"{label} not found by {param}")
        return channel

    async def _get_thread(self, thread_id: Optional[str]) -> discord.Thread:
        return await self._get_channel(thread_id, discord.Thread, "Thread", "threadId")

    async def _fetch_member(self, guild: discord.Guild, user_id: Optional[str]) -> discord.Member:
        snowflake = self._parse_id(user_id, "userId")

        member = guild.get_member(snowflake)
        if member is None:
            try:
                member = await guild.fetch_member(snowflake)
            except discord.NotFound:
                raise NotFoundError("Member not found by userId") from None
        return member

    def _get_role(self, guild: discord.Guild, role_id: Optional[str]) -> discord.Role:
        role = guild.get_role(self._parse_id(role_id, "roleId"))
        if role is None:
            raise NotFoundError("Role not found by roleId")
        return role

    async def _fetch_message(self, channel: discord.abc.Messageable, message_id: Optional[str]) -> discord.Message:
        snowflake = self._parse_id(message_id, "messageId")
        try:
            return await channel.fetch_message(snowflake)
        except discord.NotFound:
            raise NotFoundError("Message not found by messageId") from None

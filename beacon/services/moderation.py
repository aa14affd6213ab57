"""Member moderation tools: kicks, bans, timeouts and member lookups."""

from __future__ import annotations

from datetime import timedelta

import discord

from beacon.errors import InvalidInputError
from beacon.params import (
    BanMemberParams,
    GuildParams,
    KickMemberParams,
    MemberParams,
    TimeoutMemberParams,
)
from beacon.services.base import DiscordService

MAX_TIMEOUT_MINUTES = 40320  # 28 days, Discord's ceiling
MAX_BAN_DELETE_DAYS = 7
NO_REASON = "No reason provided"


def _reason_suffix(reason: str | None) -> str:
    return f". Reason: {reason}" if reason is not None else ""


class ModerationService(DiscordService):
    """Kick, ban and timeout members of a server."""

    async def kick_member(self, params: KickMemberParams) -> str:
        """
        Kick a member from the server.

        Args:
            params: Target member and optional reason.

        Returns:
            Confirmation message.
        """
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)

        with self._guard("kick members"):
            await member.kick(reason=params.reason or NO_REASON)

        self._log_action(f"Kicked {member} from {guild.name}")
        return f"Kicked {member.display_name} from the server{_reason_suffix(params.reason)}"

    async def ban_member(self, params: BanMemberParams) -> str:
        """
        Ban a user from the server, members and non-members alike.

        Args:
            params: Target user, optional reason and days of messages to delete (0-7).

        Returns:
            Confirmation message.
        """
        guild = self._resolve_guild(params.guild_id)
        user_id = self._parse_id(params.user_id, "userId")

        # The user may already have left; only the display name depends on it.
        user_name = f"User {user_id}"
        member = guild.get_member(user_id)
        if member is None:
            try:
                member = await guild.fetch_member(user_id)
            except discord.HTTPException:
                member = None
        if member is not None:
            user_name = member.display_name

        delete_days = min(max(params.delete_messages or 0, 0), MAX_BAN_DELETE_DAYS)
        with self._guard("ban members"):
            await guild.ban(
                discord.Object(id=user_id),
                reason=params.reason or NO_REASON,
                delete_message_seconds=delete_days * 86400,
            )

        self._log_action(f"Banned {user_name} ({user_id}) from {guild.name}")
        return f"Banned {user_name} from the server{_reason_suffix(params.reason)}"

    async def unban_member(self, params: MemberParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        user_id = self._parse_id(params.user_id, "userId")

        with self._guard("unban members"):
            await guild.unban(discord.Object(id=user_id))

        self._log_action(f"Unbanned {user_id} from {guild.name}")
        return f"Unbanned user {user_id} from the server"

    async def timeout_member(self, params: TimeoutMemberParams) -> str:
        """
        Time out a member for a number of minutes.

        Durations above 28 days are capped rather than rejected.

        Args:
            params: Target member, duration in minutes and optional reason.

        Returns:
            Confirmation message carrying the applied duration.
        """
        guild = self._resolve_guild(params.guild_id)
        self._require(params.user_id, "userId")
        if params.duration is None or params.duration <= 0:
            raise InvalidInputError("duration must be a positive number")
        member = await self._fetch_member(guild, params.user_id)

        minutes = min(params.duration, MAX_TIMEOUT_MINUTES)
        with self._guard("timeout members"):
            await member.timeout(timedelta(minutes=minutes), reason=params.reason or NO_REASON)

        self._log_action(f"Timed out {member} for {minutes} minutes")
        return f"Timed out {member.display_name} for {minutes} minutes{_reason_suffix(params.reason)}"

    async def remove_timeout(self, params: MemberParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)

        with self._guard("timeout members"):
            await member.timeout(None)

        self._log_action(f"Removed timeout from {member}")
        return f"Removed timeout from {member.display_name}"

    async def list_bans(self, params: GuildParams) -> str:
        """List every banned user with the recorded reason."""
        guild = self._resolve_guild(params.guild_id)

        with self._guard("view bans"):
            bans = [entry async for entry in guild.bans(limit=None)]

        if not bans:
            return "No banned users in server"

        lines = [
            f"- {entry.user.name} (ID: {entry.user.id}) - Reason: {entry.reason or 'No reason'}"
            for entry in bans
        ]
        return f"Retrieved {len(bans)} banned users:\n" + "\n".join(lines)

    async def get_member_info(self, params: MemberParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)

        roles = ", ".join(role.name for role in member.roles if not role.is_default())
        lines = [
            "**Member Info:**",
            f"- Display Name: {member.display_name}",
            f"- Username: {member.name}",
            f"- ID: {member.id}",
            f"- Bot: {'Yes' if member.bot else 'No'}",
            f"- Joined Server: {member.joined_at}",
            f"- Account Created: {member.created_at}",
            f"- Roles: {roles or 'None'}",
        ]
        if member.is_timed_out():
            lines.append(f"- Timeout Until: {member.timed_out_until}")
        return "\n".join(lines) + "\n"

"""Voice channel tools."""

from __future__ import annotations

import discord

from beacon.errors import InvalidInputError, NotFoundError
from beacon.params import (
    CreateVoiceChannelParams,
    GuildParams,
    MemberParams,
    MoveMemberParams,
    ServerDeafenParams,
    ServerMuteParams,
    VoiceChannelParams,
)
from beacon.services.base import DiscordService

MIN_BITRATE_KBPS = 8
MAX_BITRATE_KBPS = 384


class VoiceService(DiscordService):
    """Create voice channels and control members connected to them."""

    async def _get_voice_channel(self, channel_id) -> discord.VoiceChannel:
        return await self._get_channel(channel_id, discord.VoiceChannel, "Voice channel")

    async def create_voice_channel(self, params: CreateVoiceChannelParams) -> str:
        """
        Create a voice channel, optionally inside a category.

        A negative user limit and a bitrate under 8 kbps are ignored; the
        bitrate is capped at 384 kbps.

        Args:
            params: Name plus optional category, user limit and bitrate.

        Returns:
            Confirmation with the new channel's ID.
        """
        guild = self._resolve_guild(params.guild_id)
        name = self._require(params.name, "name")

        options: dict = {}
        if params.user_limit is not None and params.user_limit >= 0:
            options["user_limit"] = params.user_limit
        if params.bitrate is not None and params.bitrate >= MIN_BITRATE_KBPS:
            options["bitrate"] = min(params.bitrate, MAX_BITRATE_KBPS) * 1000

        category = None
        if params.category_id:
            category = guild.get_channel(self._parse_id(params.category_id, "categoryId"))
            if not isinstance(category, discord.CategoryChannel):
                raise NotFoundError("Category not found by categoryId")
            options["category"] = category

        with self._guard("create channels"):
            channel = await guild.create_voice_channel(name, **options)

        self._log_action(f"Created voice channel '{channel.name}' in {guild.name}")
        if category is not None:
            return f"Created voice channel: {channel.name} (ID: {channel.id}) in category: {category.name}"
        return f"Created voice channel: {channel.name} (ID: {channel.id})"

    async def delete_voice_channel(self, params: VoiceChannelParams) -> str:
        channel = await self._get_voice_channel(params.channel_id)
        channel_name = channel.name

        with self._guard("manage channels"):
            await channel.delete()

        self._log_action(f"Deleted voice channel '{channel_name}'")
        return f"Deleted voice channel: {channel_name}"

    async def list_voice_channels(self, params: GuildParams) -> str:
        guild = self._resolve_guild(params.guild_id)

        channels = guild.voice_channels
        if not channels:
            return "No voice channels found in server"

        lines = []
        for channel in channels:
            limit = "∞" if channel.user_limit == 0 else channel.user_limit
            lines.append(
                f"- {channel.name} (ID: {channel.id}) "
                f"[Users: {len(channel.members)}/{limit}, Bitrate: {channel.bitrate // 1000}kbps]"
            )
        return f"Retrieved {len(channels)} voice channels:\n" + "\n".join(lines)

    async def get_voice_members(self, params: VoiceChannelParams) -> str:
        channel = await self._get_voice_channel(params.channel_id)

        members = channel.members
        if not members:
            return f"No members in voice channel: {channel.name}"

        lines = []
        for member in members:
            voice = member.voice
            muted = " [Muted]" if voice is not None and (voice.mute or voice.self_mute) else ""
            deafened = " [Deafened]" if voice is not None and (voice.deaf or voice.self_deaf) else ""
            lines.append(f"- {member.display_name} (ID: {member.id}){muted}{deafened}")
        return f"Members in {channel.name} ({len(members)}):\n" + "\n".join(lines)

    async def move_member(self, params: MoveMemberParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)
        channel = await self._get_voice_channel(params.channel_id)

        with self._guard("move members"):
            await member.move_to(channel)

        self._log_action(f"Moved {member} to '{channel.name}'")
        return f"Moved {member.display_name} to {channel.name}"

    async def disconnect_member(self, params: MemberParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)

        with self._guard("move members"):
            await member.move_to(None)

        self._log_action(f"Disconnected {member} from voice")
        return f"Disconnected {member.display_name} from voice"

    async def server_mute_member(self, params: ServerMuteParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        self._require(params.user_id, "userId")
        if params.mute is None:
            raise InvalidInputError("mute cannot be null")
        member = await self._fetch_member(guild, params.user_id)

        with self._guard("mute members"):
            await member.edit(mute=params.mute)

        self._log_action(f"{'Muted' if params.mute else 'Unmuted'} {member}")
        return f"{'Server muted' if params.mute else 'Server unmuted'} {member.display_name}"

    async def server_deafen_member(self, params: ServerDeafenParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        self._require(params.user_id, "userId")
        if params.deafen is None:
            raise InvalidInputError("deafen cannot be null")
        member = await self._fetch_member(guild, params.user_id)

        with self._guard("deafen members"):
            await member.edit(deafen=params.deafen)

        self._log_action(f"{'Deafened' if params.deafen else 'Undeafened'} {member}")
        return f"{'Server deafened' if params.deafen else 'Server undeafened'} {member.display_name}"

"""Rich embed tools."""

from __future__ import annotations

from typing import Optional

import discord

from beacon.errors import InvalidInputError
from beacon.params import (
    EditEmbedParams,
    SendAnnouncementParams,
    SendEmbedParams,
    SendEmbedWithFieldsParams,
)
from beacon.services.base import DiscordService, parse_color

# type -> (color, emoji)
ANNOUNCEMENT_STYLES: dict[str, tuple[int, str]] = {
    "info": (0x3498DB, "ℹ️"),
    "success": (0x2ECC71, "✅"),
    "warning": (0xF39C12, "⚠️"),
    "error": (0xE74C3C, "❌"),
}


def parse_fields(definitions: str) -> list[tuple[str, str, bool]]:
    """
    Parse 'Name|Value|Inline' items separated by semicolons.

    Items with fewer than two parts are skipped. Inline defaults to False.
    """
    fields = []
    for item in definitions.split(";"):
        parts = [part.strip() for part in item.split("|")]
        if len(parts) < 2:
            continue
        inline = len(parts) >= 3 and parts[2].lower() == "true"
        fields.append((parts[0], parts[1], inline))
    return fields


def build_embed(
    title: Optional[str] = None,
    description: Optional[str] = None,
    color_hex: Optional[str] = None,
    timestamp: bool = False,
) -> discord.Embed:
    """Build an embed from the common optional properties."""
    embed = discord.Embed(
        title=title or None,
        description=description or None,
        color=parse_color(color_hex),
    )
    if timestamp:
        embed.timestamp = discord.utils.utcnow()
    return embed


class EmbedService(DiscordService):
    """Send and edit embed messages."""

    async def send_embed(self, params: SendEmbedParams) -> str:
        """
        Send a rich embed message to a channel.

        Args:
            params: Channel and the embed's optional parts.

        Returns:
            Confirmation with a link to the sent message.

        Raises:
            InvalidInputError: If the embed would have nothing visible in it.
        """
        self._require(params.channel_id, "channelId")
        if not any((
            params.title, params.description, params.author_name,
            params.thumbnail, params.image_url, params.footer_text,
        )):
            raise InvalidInputError(
                "Embed must have at least one of: title, description, author, image, or footer"
            )

        embed = build_embed(params.title, params.description, params.color_hex, bool(params.timestamp))
        if params.author_name:
            embed.set_author(name=params.author_name, icon_url=params.author_icon or None)
        if params.thumbnail:
            embed.set_thumbnail(url=params.thumbnail)
        if params.image_url:
            embed.set_image(url=params.image_url)
        if params.footer_text:
            embed.set_footer(text=params.footer_text, icon_url=params.footer_icon or None)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(embed=embed)

        self._log_action(f"Sent embed to #{channel.name}")
        return f"Embed sent successfully. Message link: {message.jump_url}"

    async def send_embed_with_fields(self, params: SendEmbedWithFieldsParams) -> str:
        self._require(params.channel_id, "channelId")
        fields = self._require(params.fields, "fields")

        embed = build_embed(params.title, params.description, params.color_hex, bool(params.timestamp))
        for name, value, inline in parse_fields(fields):
            embed.add_field(name=name, value=value, inline=inline)
        if params.footer_text:
            embed.set_footer(text=params.footer_text)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(embed=embed)

        self._log_action(f"Sent embed with {len(embed.fields)} fields to #{channel.name}")
        return f"Embed with fields sent successfully. Message link: {message.jump_url}"

    async def send_announcement(self, params: SendAnnouncementParams) -> str:
        """
        Send a standard announcement embed.

        Unknown types fall back to ``info``. ``pingRole`` mentions a role
        ahead of the embed.
        """
        self._require(params.channel_id, "channelId")
        title = self._require(params.title, "title")
        content = self._require(params.content, "content")

        color, emoji = ANNOUNCEMENT_STYLES.get((params.type or "info").lower(), ANNOUNCEMENT_STYLES["info"])
        embed = discord.Embed(
            title=f"{emoji} {title}",
            description=content,
            color=discord.Color(color),
            timestamp=discord.utils.utcnow(),
        )
        mention = f"<@&{params.ping_role}> " if params.ping_role else ""

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(
                content=mention or None,
                embed=embed,
                allowed_mentions=discord.AllowedMentions(roles=True),
            )

        self._log_action(f"Sent announcement '{title}' to #{channel.name}")
        return f"Announcement sent successfully. Message link: {message.jump_url}"

    async def edit_embed(self, params: EditEmbedParams) -> str:
        """
        Edit the first embed of an existing message.

        An empty title or description clears that part; omitted ones stay.
        """
        self._require(params.channel_id, "channelId")
        self._require(params.message_id, "messageId")

        channel = await self._get_channel(params.channel_id)
        message = await self._fetch_message(channel, params.message_id)
        if not message.embeds:
            raise InvalidInputError("Message does not contain an embed")

        embed = message.embeds[0].copy()
        if params.title is not None:
            embed.title = params.title or None
        if params.description is not None:
            embed.description = params.description or None
        if params.color_hex:
            embed.color = parse_color(params.color_hex)

        with self._guard("edit messages"):
            await message.edit(embed=embed)

        self._log_action(f"Edited embed on message {message.id} in #{channel.name}")
        return f"Embed edited successfully. Message link: {message.jump_url}"

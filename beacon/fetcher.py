"""
Log message retrieval.

``LogSource`` is the only seam between the scanner and discord.py: it
resolves a channel and returns its most recent entries, newest first.
"""

from __future__ import annotations

import logging
from typing import Protocol

import discord

from beacon.errors import InvalidInputError, NotFoundError
from beacon.models import EmbedContent, LogChannel, LogEntry

logger = logging.getLogger("beacon.fetcher")


class LogSource(Protocol):
    """Retrieval operations required by the log analysis tools."""

    async def resolve_channel(self, channel_id: str) -> LogChannel:
        ...

    async def fetch_recent(self, channel: LogChannel, limit: int) -> list[LogEntry]:
        ...


def embed_to_content(embed: discord.Embed) -> EmbedContent:
    """Extract the searchable text of a discord.py embed."""
    return EmbedContent(
        title=embed.title or None,
        description=embed.description or None,
        fields=tuple((f.name or "", f.value or "") for f in embed.fields),
    )


def message_to_entry(message: discord.Message) -> LogEntry:
    """Map a discord.py message to a LogEntry snapshot."""
    return LogEntry(
        timestamp=message.created_at,
        author=message.author.name,
        raw_text=message.content or "",
        permalink=message.jump_url,
        embeds=tuple(embed_to_content(e) for e in message.embeds),
        webhook=message.webhook_id is not None,
    )


class DiscordLogSource:
    """LogSource backed by a connected discord.py client."""

    def __init__(self, client: discord.Client):
        self.client = client

    async def resolve_channel(self, channel_id: str) -> LogChannel:
        """
        Resolve a text channel (or thread) by ID.

        Raises:
            InvalidInputError: If the ID is empty or not numeric.
            NotFoundError: If no readable text channel has this ID.
        """
        if not channel_id or not str(channel_id).strip():
            raise InvalidInputError("channelId cannot be null")
        try:
            snowflake = int(str(channel_id).strip())
        except ValueError:
            raise InvalidInputError(f"channelId must be a numeric Discord ID, got '{channel_id}'") from None

        channel = self.client.get_channel(snowflake)
        if channel is None:
            try:
                channel = await self.client.fetch_channel(snowflake)
            except (discord.NotFound, discord.Forbidden):
                channel = None

        if not isinstance(channel, (discord.TextChannel, discord.Thread)):
            raise NotFoundError("Channel not found by channelId")

        return LogChannel(id=channel.id, name=channel.name, handle=channel)

    async def fetch_recent(self, channel: LogChannel, limit: int) -> list[LogEntry]:
        """Fetch up to ``limit`` most recent messages, newest first."""
        entries = [message_to_entry(m) async for m in channel.handle.history(limit=limit)]
        logger.debug(f"Fetched {len(entries)} messages from #{channel.name} (limit={limit})")
        return entries

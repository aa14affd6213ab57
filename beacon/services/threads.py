"""Thread management tools."""

from __future__ import annotations

import discord

from beacon.params import (
    ArchiveThreadParams,
    CreateThreadFromMessageParams,
    CreateThreadParams,
    GuildParams,
    SendThreadMessageParams,
    ThreadMemberParams,
    ThreadParams,
)
from beacon.services.base import DiscordService


class ThreadService(DiscordService):
    """Create, archive and manage threads."""

    async def create_thread(self, params: CreateThreadParams) -> str:
        """
        Create a thread in a text channel.

        Args:
            params: Parent channel, thread name, private flag and an
                optional first message.

        Returns:
            Confirmation with the new thread's ID.
        """
        self._require(params.channel_id, "channelId")
        name = self._require(params.name, "name")
        channel = await self._get_channel(params.channel_id)

        thread_type = (
            discord.ChannelType.private_thread if params.is_private
            else discord.ChannelType.public_thread
        )
        with self._guard("create threads"):
            thread = await channel.create_thread(name=name, type=thread_type)
            if params.message:
                await thread.send(params.message)

        self._log_action(f"Created thread '{thread.name}' in #{channel.name}")
        return f"Created thread: {thread.name} (ID: {thread.id}) in #{channel.name}"

    async def create_thread_from_message(self, params: CreateThreadFromMessageParams) -> str:
        self._require(params.channel_id, "channelId")
        self._require(params.message_id, "messageId")
        name = self._require(params.name, "name")

        channel = await self._get_channel(params.channel_id)
        message = await self._fetch_message(channel, params.message_id)

        with self._guard("create threads"):
            thread = await message.create_thread(name=name)

        self._log_action(f"Created thread '{thread.name}' from message {message.id}")
        return f"Created thread: {thread.name} (ID: {thread.id}) from message"

    async def archive_thread(self, params: ArchiveThreadParams) -> str:
        thread = await self._get_thread(params.thread_id)

        changes = {"archived": True}
        if params.locked:
            changes["locked"] = True
        with self._guard("manage threads"):
            await thread.edit(**changes)

        self._log_action(f"Archived thread '{thread.name}'")
        return f"Archived thread: {thread.name}" + (" (locked)" if params.locked else "")

    async def unarchive_thread(self, params: ThreadParams) -> str:
        thread = await self._get_thread(params.thread_id)

        with self._guard("manage threads"):
            await thread.edit(archived=False)

        self._log_action(f"Unarchived thread '{thread.name}'")
        return f"Unarchived thread: {thread.name}"

    async def delete_thread(self, params: ThreadParams) -> str:
        thread = await self._get_thread(params.thread_id)
        thread_name = thread.name

        with self._guard("manage threads"):
            await thread.delete()

        self._log_action(f"Deleted thread '{thread_name}'")
        return f"Deleted thread: {thread_name}"

    async def list_threads(self, params: GuildParams) -> str:
        """List the active threads the bot can see in a server."""
        guild = self._resolve_guild(params.guild_id)

        threads = guild.threads
        if not threads:
            return "No active threads found in server"

        lines = []
        for thread in threads:
            parent = thread.parent.name if thread.parent is not None else "unknown"
            state = "Archived" if thread.archived else "Active"
            locked = ", Locked" if thread.locked else ""
            lines.append(f"- {thread.name} (ID: {thread.id}) in #{parent} [{state}{locked}]")
        return f"Retrieved {len(threads)} active threads:\n" + "\n".join(lines)

    async def add_thread_member(self, params: ThreadMemberParams) -> str:
        self._require(params.thread_id, "threadId")
        user_id = self._parse_id(params.user_id, "userId")
        thread = await self._get_thread(params.thread_id)

        with self._guard("manage threads"):
            await thread.add_user(discord.Object(id=user_id))

        self._log_action(f"Added {user_id} to thread '{thread.name}'")
        return f"Added user {user_id} to thread: {thread.name}"

    async def remove_thread_member(self, params: ThreadMemberParams) -> str:
        self._require(params.thread_id, "threadId")
        user_id = self._parse_id(params.user_id, "userId")
        thread = await self._get_thread(params.thread_id)

        with self._guard("manage threads"):
            await thread.remove_user(discord.Object(id=user_id))

        self._log_action(f"Removed {user_id} from thread '{thread.name}'")
        return f"Removed user {user_id} from thread: {thread.name}"

    async def send_thread_message(self, params: SendThreadMessageParams) -> str:
        self._require(params.thread_id, "threadId")
        content = self._require(params.content, "content")
        thread = await self._get_thread(params.thread_id)

        with self._guard("send messages in threads"):
            message = await thread.send(content)

        self._log_action(f"Sent message to thread '{thread.name}'")
        return f"Message sent to thread. Message link: {message.jump_url}"

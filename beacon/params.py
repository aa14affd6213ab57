"""
Pydantic models for tool parameters.

Field aliases are the camelCase names MCP clients send; they are part of the
public tool contract. Fields can also be populated by their Python names.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class ToolParams(BaseModel):
    """Base for every tool's parameters."""
    model_config = ConfigDict(
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


def _guild_field():
    return Field(default=None, alias="guildId", description="Discord server ID")


def _channel_field(description: str = "Discord channel ID"):
    return Field(alias="channelId", description=description)


def _user_field():
    return Field(alias="userId", description="Discord user ID")


def _role_field():
    return Field(alias="roleId", description="Discord role ID")


def _thread_field():
    return Field(alias="threadId", description="Discord thread ID")


def _message_field():
    return Field(alias="messageId", description="Discord message ID")


def _color_field(description: str = "Hex color code (e.g., #FF5733)"):
    return Field(default=None, alias="colorHex", description=description)


class NoParams(ToolParams):
    """Parameters for tools that take no input."""


class GuildParams(ToolParams):
    """Parameters for tools that only target a server."""
    guild_id: Optional[str] = _guild_field()


# ============================================================================
# Log Analysis
# ============================================================================


class ReadLogChannelParams(ToolParams):
    """Parameters for reading a log channel."""
    channel_id: str = _channel_field()
    limit: Optional[int] = Field(default=None, description="Number of messages (1-100)")


class ScanForCheatsParams(ToolParams):
    """Parameters for scanning a log channel for cheat patterns."""
    channel_id: str = _channel_field()
    limit: Optional[int] = Field(default=None, description="Number of messages to scan (1-100)")


class AnalyzePlayerActivityParams(ToolParams):
    """Parameters for analyzing one player's activity."""
    channel_id: str = _channel_field()
    player_search: str = Field(alias="playerSearch", description="Player ID, name, or identifier")
    limit: Optional[int] = Field(default=None, description="Number of messages to search (1-100)")


class SearchLogsParams(ToolParams):
    """Parameters for searching log messages."""
    channel_id: str = _channel_field()
    query: str = Field(description="Search query (supports regex)")
    limit: Optional[int] = Field(default=None, description="Number of messages to search (1-100)")


class GetLogStatsParams(ToolParams):
    """Parameters for log channel statistics."""
    channel_id: str = _channel_field()
    limit: Optional[int] = Field(default=None, description="Number of messages to analyze (1-100)")


# ============================================================================
# Moderation
# ============================================================================


class MemberParams(ToolParams):
    """Parameters identifying a member of a server."""
    guild_id: Optional[str] = _guild_field()
    user_id: str = _user_field()


class KickMemberParams(MemberParams):
    """Parameters for kicking a member."""
    reason: Optional[str] = Field(default=None, description="Reason for kick")


class BanMemberParams(MemberParams):
    """Parameters for banning a user."""
    reason: Optional[str] = Field(default=None, description="Reason for ban")
    delete_messages: Optional[int] = Field(
        default=None,
        alias="deleteMessages",
        description="Days of messages to delete (0-7)",
    )


class TimeoutMemberParams(MemberParams):
    """Parameters for timing out a member."""
    duration: Optional[int] = Field(
        default=None,
        description="Timeout duration in minutes (max 40320 = 28 days)",
    )
    reason: Optional[str] = Field(default=None, description="Reason for timeout")


# ============================================================================
# Roles
# ============================================================================


class CreateRoleParams(ToolParams):
    """Parameters for creating a role."""
    guild_id: Optional[str] = _guild_field()
    name: str = Field(description="Role name")
    color_hex: Optional[str] = _color_field()
    hoisted: Optional[bool] = Field(default=None, description="Display role separately in member list")
    mentionable: Optional[bool] = Field(default=None, description="Allow role to be mentioned")


class RoleParams(ToolParams):
    """Parameters identifying a role."""
    guild_id: Optional[str] = _guild_field()
    role_id: str = _role_field()


class MemberRoleParams(ToolParams):
    """Parameters for assigning or removing a member's role."""
    guild_id: Optional[str] = _guild_field()
    user_id: str = _user_field()
    role_id: str = _role_field()


class FindRoleParams(ToolParams):
    """Parameters for finding a role by name."""
    guild_id: Optional[str] = _guild_field()
    role_name: str = Field(alias="roleName", description="Role name to search for")


class UpdateRoleParams(ToolParams):
    """Parameters for updating a role's properties."""
    guild_id: Optional[str] = _guild_field()
    role_id: str = _role_field()
    name: Optional[str] = Field(default=None, description="New role name")
    color_hex: Optional[str] = _color_field("New hex color code (e.g., #FF5733)")
    hoisted: Optional[bool] = Field(default=None, description="Display role separately in member list")
    mentionable: Optional[bool] = Field(default=None, description="Allow role to be mentioned")


# ============================================================================
# Permissions
# ============================================================================


class SetChannelPermissionsParams(ToolParams):
    """Parameters for setting a role's channel permissions."""
    channel_id: str = _channel_field()
    role_id: str = _role_field()
    preset: Optional[str] = Field(
        default=None,
        description="Preset: staff_text, staff_voice, member_text, member_voice, readonly, hidden",
    )
    allow: Optional[str] = Field(
        default=None,
        description="Comma-separated permissions to ALLOW (e.g., VIEW_CHANNEL,SEND_MESSAGES)",
    )
    deny: Optional[str] = Field(default=None, description="Comma-separated permissions to DENY")


class SetMemberChannelPermissionsParams(ToolParams):
    """Parameters for setting a member's channel permissions."""
    channel_id: str = _channel_field()
    user_id: str = _user_field()
    allow: Optional[str] = Field(default=None, description="Comma-separated permissions to ALLOW")
    deny: Optional[str] = Field(default=None, description="Comma-separated permissions to DENY")


class ChannelRoleParams(ToolParams):
    """Parameters identifying a role's override on a channel."""
    channel_id: str = _channel_field()
    role_id: str = _role_field()


class ChannelParams(ToolParams):
    """Parameters identifying a single channel."""
    channel_id: str = _channel_field()


class LockChannelParams(ToolParams):
    """Parameters for locking a channel."""
    guild_id: Optional[str] = _guild_field()
    channel_id: str = _channel_field()
    reason: Optional[str] = Field(default=None, description="Reason for lock")


class UnlockChannelParams(ToolParams):
    """Parameters for unlocking a channel."""
    guild_id: Optional[str] = _guild_field()
    channel_id: str = _channel_field()


# ============================================================================
# Threads
# ============================================================================


class CreateThreadParams(ToolParams):
    """Parameters for creating a thread in a text channel."""
    channel_id: str = _channel_field()
    name: str = Field(description="Thread name")
    is_private: Optional[bool] = Field(default=None, alias="isPrivate", description="Create as private thread")
    message: Optional[str] = Field(default=None, description="Initial message content")


class CreateThreadFromMessageParams(ToolParams):
    """Parameters for creating a thread attached to a message."""
    channel_id: str = _channel_field()
    message_id: str = _message_field()
    name: str = Field(description="Thread name")


class ThreadParams(ToolParams):
    """Parameters identifying a thread."""
    thread_id: str = _thread_field()


class ArchiveThreadParams(ThreadParams):
    """Parameters for archiving a thread."""
    locked: Optional[bool] = Field(default=None, description="Lock thread to prevent unarchiving")


class ThreadMemberParams(ThreadParams):
    """Parameters for adding or removing a thread member."""
    user_id: str = _user_field()


class SendThreadMessageParams(ThreadParams):
    """Parameters for posting into a thread."""
    content: str = Field(description="Message content")


# ============================================================================
# Voice
# ============================================================================


class CreateVoiceChannelParams(ToolParams):
    """Parameters for creating a voice channel."""
    guild_id: Optional[str] = _guild_field()
    name: str = Field(description="Voice channel name")
    category_id: Optional[str] = Field(default=None, alias="categoryId", description="Category ID")
    user_limit: Optional[int] = Field(default=None, alias="userLimit", description="User limit (0 = unlimited)")
    bitrate: Optional[int] = Field(default=None, description="Audio bitrate in kbps (8-384)")


class VoiceChannelParams(ToolParams):
    """Parameters identifying a voice channel."""
    channel_id: str = _channel_field("Discord voice channel ID")


class MoveMemberParams(MemberParams):
    """Parameters for moving a member between voice channels."""
    channel_id: str = _channel_field("Target voice channel ID")


class ServerMuteParams(MemberParams):
    """Parameters for server muting a member."""
    mute: Optional[bool] = Field(default=None, description="Mute (true) or unmute (false)")


class ServerDeafenParams(MemberParams):
    """Parameters for server deafening a member."""
    deafen: Optional[bool] = Field(default=None, description="Deafen (true) or undeafen (false)")


# ============================================================================
# Embeds
# ============================================================================


class SendEmbedParams(ToolParams):
    """Parameters for sending a rich embed."""
    channel_id: str = _channel_field()
    title: Optional[str] = Field(default=None, description="Embed title")
    description: Optional[str] = Field(default=None, description="Embed description/body")
    color_hex: Optional[str] = _color_field()
    author_name: Optional[str] = Field(default=None, alias="authorName", description="Author name")
    author_icon: Optional[str] = Field(default=None, alias="authorIcon", description="Author icon URL")
    thumbnail: Optional[str] = Field(default=None, description="Thumbnail URL (small image on right)")
    image_url: Optional[str] = Field(default=None, alias="imageUrl", description="Large image URL")
    footer_text: Optional[str] = Field(default=None, alias="footerText", description="Footer text")
    footer_icon: Optional[str] = Field(default=None, alias="footerIcon", description="Footer icon URL")
    timestamp: Optional[bool] = Field(default=None, description="Add current timestamp")


class SendEmbedWithFieldsParams(ToolParams):
    """Parameters for sending an embed with structured fields."""
    channel_id: str = _channel_field()
    title: Optional[str] = Field(default=None, description="Embed title")
    description: Optional[str] = Field(default=None, description="Embed description/body")
    color_hex: Optional[str] = _color_field()
    fields: str = Field(
        description="Fields: 'Name|Value|Inline' separated by semicolons (e.g., 'Status|Online|true;Players|64|true')"
    )
    footer_text: Optional[str] = Field(default=None, alias="footerText", description="Footer text")
    timestamp: Optional[bool] = Field(default=None, description="Add current timestamp")


class SendAnnouncementParams(ToolParams):
    """Parameters for sending a standard announcement."""
    channel_id: str = _channel_field()
    title: str = Field(description="Announcement title")
    content: str = Field(description="Announcement content")
    type: Optional[str] = Field(default=None, description="Type: info, success, warning, or error")
    ping_role: Optional[str] = Field(default=None, alias="pingRole", description="Role ID to ping")


class EditEmbedParams(ToolParams):
    """Parameters for editing an existing embed."""
    channel_id: str = _channel_field()
    message_id: str = _message_field()
    title: Optional[str] = Field(default=None, description="New embed title")
    description: Optional[str] = Field(default=None, description="New embed description")
    color_hex: Optional[str] = _color_field("New hex color code")


# ============================================================================
# Interactive Components
# ============================================================================


class SendButtonsParams(ToolParams):
    """Parameters for sending a message with buttons."""
    channel_id: str = _channel_field()
    content: Optional[str] = Field(default=None, description="Message text content")
    buttons: str = Field(
        description="Buttons: 'Label|CustomId|Style' separated by semicolons "
                    "(styles: primary, secondary, success, danger, link)"
    )


class SendEmbedWithButtonsParams(ToolParams):
    """Parameters for sending an embed with buttons."""
    channel_id: str = _channel_field()
    title: str = Field(description="Embed title")
    description: str = Field(description="Embed description")
    color_hex: Optional[str] = _color_field()
    buttons: str = Field(description="Buttons: 'Label|CustomId|Style' separated by semicolons")


class SendSelectMenuParams(ToolParams):
    """Parameters for sending a dropdown select menu."""
    channel_id: str = _channel_field()
    content: Optional[str] = Field(default=None, description="Message text content")
    menu_id: str = Field(alias="menuId", description="Custom ID for the menu")
    placeholder: Optional[str] = Field(default=None, description="Placeholder text")
    options: str = Field(description="Options: 'Label|Value|Description' separated by semicolons")
    min_values: Optional[int] = Field(default=None, alias="minValues", description="Minimum selections")
    max_values: Optional[int] = Field(default=None, alias="maxValues", description="Maximum selections")


class SendRolePanelParams(ToolParams):
    """Parameters for sending a self-assignable role panel."""
    channel_id: str = _channel_field()
    title: Optional[str] = Field(default=None, description="Panel title")
    description: Optional[str] = Field(default=None, description="Panel description/instructions")
    roles: str = Field(description="Roles: 'RoleName|RoleId|Emoji' separated by semicolons")
    color_hex: Optional[str] = _color_field("Hex color code")


class SendTicketPanelParams(ToolParams):
    """Parameters for sending a support ticket panel."""
    channel_id: str = _channel_field()
    title: Optional[str] = Field(default=None, description="Panel title")
    description: Optional[str] = Field(default=None, description="Panel description/instructions")
    categories: Optional[str] = Field(
        default=None,
        description="Categories: 'Name|CustomId|Emoji' separated by semicolons",
    )
    color_hex: Optional[str] = _color_field("Hex color code")


class MessageParams(ToolParams):
    """Parameters identifying a message in a channel."""
    channel_id: str = _channel_field()
    message_id: str = _message_field()

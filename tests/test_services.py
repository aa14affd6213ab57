from __future__ import annotations

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from beacon.errors import DiscordActionError, InvalidInputError, NotFoundError
from beacon.params import (
    ArchiveThreadParams,
    BanMemberParams,
    CreateThreadParams,
    CreateVoiceChannelParams,
    GuildParams,
    KickMemberParams,
    SendButtonsParams,
    SendEmbedParams,
    SendEmbedWithButtonsParams,
    ServerMuteParams,
    SetChannelPermissionsParams,
    TimeoutMemberParams,
    UpdateRoleParams,
)
from beacon.services import (
    EmbedService,
    InteractiveService,
    ModerationService,
    PermissionService,
    RoleService,
    ThreadService,
    VoiceService,
)
from beacon.services.base import format_color, parse_color
from beacon.services.embeds import parse_fields
from beacon.services.interactive import build_view, parse_buttons
from beacon.services.permissions import build_overwrite, parse_permission_list, resolve_permission


def _member(display_name: str = "Bob") -> MagicMock:
    member = MagicMock(spec=discord.Member)
    member.display_name = display_name
    member.kick = AsyncMock()
    member.timeout = AsyncMock()
    return member


def _client_with_guild(member: MagicMock | None = None) -> tuple[MagicMock, MagicMock]:
    guild = MagicMock(spec=discord.Guild)
    guild.name = "FiveM RP"
    guild.get_member.return_value = member
    guild.ban = AsyncMock()

    client = MagicMock(spec=discord.Client)
    client.get_guild.return_value = guild
    return client, guild


def _forbidden() -> discord.Forbidden:
    response = MagicMock(status=403, reason="Forbidden")
    return discord.Forbidden(response, "Missing Permissions")


# ============================================================================
# Shared helpers
# ============================================================================


def test_parse_color() -> None:
    assert parse_color("#FF5733").value == 0xFF5733
    assert parse_color("00ff00").value == 0x00FF00
    assert parse_color(None) is None
    assert parse_color("  ") is None
    with pytest.raises(InvalidInputError):
        parse_color("not-a-color")


def test_format_color() -> None:
    assert format_color(discord.Color(0x3498DB)) == "#3498DB"
    assert format_color(discord.Color.default()) == "none"


def test_guild_falls_back_to_default() -> None:
    member = _member()
    client, _ = _client_with_guild(member)
    service = ModerationService(client, default_guild_id="555")

    asyncio.run(service.kick_member(KickMemberParams(userId="42")))

    client.get_guild.assert_called_once_with(555)


def test_missing_guild_id_without_default() -> None:
    client, _ = _client_with_guild()
    service = ModerationService(client)

    with pytest.raises(InvalidInputError, match="guildId cannot be null"):
        asyncio.run(service.list_bans(GuildParams()))


def test_unknown_guild_is_not_found() -> None:
    client, _ = _client_with_guild()
    client.get_guild.return_value = None
    service = ModerationService(client)

    with pytest.raises(NotFoundError, match="Discord server not found by guildId"):
        asyncio.run(service.list_bans(GuildParams(guildId="1")))


def test_non_numeric_id_is_invalid_input() -> None:
    client, _ = _client_with_guild()
    service = ModerationService(client)

    with pytest.raises(InvalidInputError, match="userId"):
        asyncio.run(service.kick_member(KickMemberParams(guildId="1", userId="bob")))


# ============================================================================
# Moderation
# ============================================================================


def test_kick_member_message_includes_reason() -> None:
    member = _member("Alice")
    client, _ = _client_with_guild(member)
    service = ModerationService(client)

    result = asyncio.run(service.kick_member(KickMemberParams(guildId="1", userId="42", reason="RDM")))

    assert result == "Kicked Alice from the server. Reason: RDM"
    member.kick.assert_awaited_once_with(reason="RDM")


def test_kick_member_forbidden_becomes_action_error() -> None:
    member = _member()
    member.kick.side_effect = _forbidden()
    client, _ = _client_with_guild(member)
    service = ModerationService(client)

    with pytest.raises(DiscordActionError, match="Bot lacks permission to kick members") as info:
        asyncio.run(service.kick_member(KickMemberParams(guildId="1", userId="42")))
    assert isinstance(info.value.__cause__, discord.Forbidden)


def test_timeout_is_capped_at_28_days() -> None:
    member = _member()
    client, _ = _client_with_guild(member)
    service = ModerationService(client)

    result = asyncio.run(service.timeout_member(
        TimeoutMemberParams(guildId="1", userId="42", duration=50000)
    ))

    assert result == "Timed out Bob for 40320 minutes"
    args, _ = member.timeout.await_args
    assert args[0] == timedelta(minutes=40320)


def test_timeout_rejects_non_positive_duration() -> None:
    member = _member()
    client, guild = _client_with_guild(member)
    service = ModerationService(client)

    with pytest.raises(InvalidInputError, match="duration must be a positive number"):
        asyncio.run(service.timeout_member(TimeoutMemberParams(guildId="1", userId="42", duration=0)))
    guild.get_member.assert_not_called()


def test_ban_clamps_message_deletion_days() -> None:
    client, guild = _client_with_guild(_member("Eve"))
    service = ModerationService(client)

    result = asyncio.run(service.ban_member(
        BanMemberParams(guildId="1", userId="42", deleteMessages=30)
    ))

    assert result == "Banned Eve from the server"
    _, kwargs = guild.ban.await_args
    assert kwargs["delete_message_seconds"] == 7 * 86400


def test_ban_non_member_uses_user_id_as_name() -> None:
    client, guild = _client_with_guild(None)
    guild.fetch_member = AsyncMock(side_effect=discord.NotFound(MagicMock(status=404, reason="Not Found"), "Unknown Member"))
    service = ModerationService(client)

    result = asyncio.run(service.ban_member(BanMemberParams(guildId="1", userId="42", reason="cheating")))

    assert result == "Banned User 42 from the server. Reason: cheating"


# ============================================================================
# Roles
# ============================================================================


def test_update_role_without_changes_is_a_noop() -> None:
    role = MagicMock(spec=discord.Role)
    role.name = "Staff"
    role.edit = AsyncMock()
    client, guild = _client_with_guild()
    guild.get_role.return_value = role
    service = RoleService(client)

    result = asyncio.run(service.update_role(UpdateRoleParams(guildId="1", roleId="7")))

    assert result == "No changes specified for role: Staff"
    role.edit.assert_not_awaited()


def test_update_role_describes_changes() -> None:
    role = MagicMock(spec=discord.Role)
    role.name = "Staff"
    role.edit = AsyncMock()
    client, guild = _client_with_guild()
    guild.get_role.return_value = role
    service = RoleService(client)

    result = asyncio.run(service.update_role(
        UpdateRoleParams(guildId="1", roleId="7", name="Admins", colorHex="#FF0000", hoisted=True)
    ))

    assert result == "Updated role Staff: name to 'Admins', color to #FF0000, hoisted to true"
    _, kwargs = role.edit.await_args
    assert kwargs["color"].value == 0xFF0000


# ============================================================================
# Permissions
# ============================================================================


def test_resolve_permission_names_and_aliases() -> None:
    assert resolve_permission("MESSAGE_SEND") == "send_messages"
    assert resolve_permission("Send_Messages") == "send_messages"
    assert resolve_permission(" voice_connect ") == "connect"
    assert resolve_permission("bogus") is None


def test_parse_permission_list_skips_unknown_names() -> None:
    assert parse_permission_list("VIEW_CHANNEL, bogus ,MESSAGE_HISTORY") == [
        "view_channel",
        "read_message_history",
    ]
    assert parse_permission_list(None) == []


def test_build_overwrite_deny_wins() -> None:
    overwrite = build_overwrite(["view_channel", "send_messages"], ["send_messages"])

    assert overwrite.view_channel is True
    assert overwrite.send_messages is False
    assert overwrite.speak is None


def test_unknown_preset_lists_available_presets() -> None:
    client = MagicMock(spec=discord.Client)
    service = PermissionService(client)

    with pytest.raises(InvalidInputError) as info:
        asyncio.run(service.set_channel_permissions(
            SetChannelPermissionsParams(channelId="1", roleId="2", preset="moderator")
        ))

    message = str(info.value)
    assert message.startswith("Unknown preset: moderator. Available: ")
    for preset in ("staff_text", "staff_voice", "member_text", "member_voice", "readonly", "hidden"):
        assert preset in message
    client.get_channel.assert_not_called()


def test_hidden_preset_denies_view_channel() -> None:
    role = MagicMock(spec=discord.Role)
    role.name = "Civilian"
    channel = MagicMock(spec=discord.TextChannel)
    channel.name = "staff-chat"
    channel.guild.get_role.return_value = role
    channel.set_permissions = AsyncMock()
    client = MagicMock(spec=discord.Client)
    client.get_channel.return_value = channel
    service = PermissionService(client)

    result = asyncio.run(service.set_channel_permissions(
        SetChannelPermissionsParams(channelId="1", roleId="2", preset="hidden")
    ))

    assert result == "Set permissions for role Civilian in #staff-chat\nAllowed: None\nDenied: view_channel"
    _, kwargs = channel.set_permissions.await_args
    assert kwargs["overwrite"].view_channel is False


# ============================================================================
# Embeds and components
# ============================================================================


def test_send_embed_requires_visible_content() -> None:
    client = MagicMock(spec=discord.Client)
    service = EmbedService(client)

    with pytest.raises(InvalidInputError, match="Embed must have at least one of"):
        asyncio.run(service.send_embed(SendEmbedParams(channelId="1", colorHex="#FFFFFF")))
    client.get_channel.assert_not_called()


def test_parse_fields() -> None:
    assert parse_fields("Status|Online|true;Players|64;broken") == [
        ("Status", "Online", True),
        ("Players", "64", False),
    ]


def test_parse_buttons_styles() -> None:
    buttons = parse_buttons("Rules|rules_btn|green;Site|https://example.com|link;Odd|odd_btn|sparkly")

    assert [b.style for b in buttons] == [
        discord.ButtonStyle.success,
        discord.ButtonStyle.link,
        discord.ButtonStyle.secondary,
    ]
    assert buttons[0].custom_id == "rules_btn"
    assert buttons[1].url == "https://example.com"


def test_build_view_puts_five_buttons_per_row() -> None:
    async def layout() -> list[int]:
        buttons = parse_buttons(";".join(f"B{i}|id_{i}|primary" for i in range(7)))
        return [item.row for item in build_view(buttons).children]

    assert asyncio.run(layout()) == [0, 0, 0, 0, 0, 1, 1]


def test_build_view_rejects_more_than_25_buttons() -> None:
    buttons = parse_buttons(";".join(f"B{i}|id_{i}|primary" for i in range(26)))

    with pytest.raises(InvalidInputError):
        build_view(buttons)


def test_send_buttons_rejects_unparseable_definitions() -> None:
    client = MagicMock(spec=discord.Client)
    service = InteractiveService(client)

    with pytest.raises(InvalidInputError, match="No valid buttons provided"):
        asyncio.run(service.send_buttons(SendButtonsParams(channelId="1", buttons="just a label")))


# ============================================================================
# Threads and voice
# ============================================================================


def _text_channel() -> MagicMock:
    thread = MagicMock(spec=discord.Thread)
    thread.name = "Appeal #12"
    thread.id = 900
    thread.send = AsyncMock()

    channel = MagicMock(spec=discord.TextChannel)
    channel.name = "appeals"
    channel.create_thread = AsyncMock(return_value=thread)
    return channel


def test_create_private_thread_with_first_message() -> None:
    channel = _text_channel()
    client = MagicMock(spec=discord.Client)
    client.get_channel.return_value = channel
    service = ThreadService(client)

    result = asyncio.run(service.create_thread(
        CreateThreadParams(channelId="5", name="Appeal #12", isPrivate=True, message="Welcome")
    ))

    assert result == "Created thread: Appeal #12 (ID: 900) in #appeals"
    channel.create_thread.assert_awaited_once_with(
        name="Appeal #12", type=discord.ChannelType.private_thread
    )
    channel.create_thread.return_value.send.assert_awaited_once_with("Welcome")


def test_archive_thread_requires_a_thread() -> None:
    client = MagicMock(spec=discord.Client)
    client.get_channel.return_value = MagicMock(spec=discord.TextChannel)
    service = ThreadService(client)

    with pytest.raises(NotFoundError, match="Thread not found by threadId"):
        asyncio.run(service.archive_thread(ArchiveThreadParams(threadId="5")))


def test_voice_channel_bitrate_is_capped() -> None:
    created = MagicMock(spec=discord.VoiceChannel)
    created.name = "Patrol 1"
    created.id = 77
    client, guild = _client_with_guild()
    guild.create_voice_channel = AsyncMock(return_value=created)
    service = VoiceService(client)

    result = asyncio.run(service.create_voice_channel(
        CreateVoiceChannelParams(guildId="1", name="Patrol 1", userLimit=4, bitrate=512)
    ))

    assert result == "Created voice channel: Patrol 1 (ID: 77)"
    guild.create_voice_channel.assert_awaited_once_with("Patrol 1", user_limit=4, bitrate=384000)


def test_voice_channel_low_bitrate_is_ignored() -> None:
    created = MagicMock(spec=discord.VoiceChannel)
    created.name = "Lobby"
    created.id = 78
    client, guild = _client_with_guild()
    guild.create_voice_channel = AsyncMock(return_value=created)
    service = VoiceService(client)

    asyncio.run(service.create_voice_channel(CreateVoiceChannelParams(guildId="1", name="Lobby", bitrate=4)))

    guild.create_voice_channel.assert_awaited_once_with("Lobby")


def test_voice_channel_unknown_category() -> None:
    client, guild = _client_with_guild()
    guild.get_channel.return_value = None
    service = VoiceService(client)

    with pytest.raises(NotFoundError, match="Category not found by categoryId"):
        asyncio.run(service.create_voice_channel(
            CreateVoiceChannelParams(guildId="1", name="Lobby", categoryId="3")
        ))


def test_server_mute_requires_flag() -> None:
    client, guild = _client_with_guild(_member())
    service = VoiceService(client)

    with pytest.raises(InvalidInputError, match="mute cannot be null"):
        asyncio.run(service.server_mute_member(ServerMuteParams(guildId="1", userId="42")))
    guild.get_member.assert_not_called()


def test_send_embed_with_buttons_rejects_unparseable_definitions() -> None:
    client = MagicMock(spec=discord.Client)
    service = InteractiveService(client)

    with pytest.raises(InvalidInputError, match="No valid buttons provided"):
        asyncio.run(service.send_embed_with_buttons(SendEmbedWithButtonsParams(
            channelId="1", title="Rules", description="Read them", buttons="Accept"
        )))
    client.get_channel.assert_not_called()


def test_unreachable_channel_is_not_found() -> None:
    client = MagicMock(spec=discord.Client)
    client.get_channel.return_value = None
    client.fetch_channel = AsyncMock(
        side_effect=discord.Forbidden(MagicMock(status=403, reason="Forbidden"), "Missing Access")
    )
    service = ThreadService(client)

    with pytest.raises(NotFoundError, match="Thread not found by threadId"):
        asyncio.run(service.archive_thread(ArchiveThreadParams(threadId="5")))

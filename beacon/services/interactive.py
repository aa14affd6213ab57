"""
Interactive component tools: buttons, select menus and panels.

Components are sent with ``discord.ui`` views. Handling the resulting
interactions is left to whatever bot owns the custom IDs.
"""

from __future__ import annotations

from typing import Optional

import discord

from beacon.errors import InvalidInputError
from beacon.params import (
    MessageParams,
    SendButtonsParams,
    SendEmbedWithButtonsParams,
    SendRolePanelParams,
    SendSelectMenuParams,
    SendTicketPanelParams,
)
from beacon.services.base import DiscordService, parse_color
from beacon.services.embeds import build_embed

BUTTONS_PER_ROW = 5
MAX_ROWS = 5
EMPTY_CONTENT = "\u200b"

BUTTON_STYLES: dict[str, discord.ButtonStyle] = {
    "primary": discord.ButtonStyle.primary,
    "blurple": discord.ButtonStyle.primary,
    "secondary": discord.ButtonStyle.secondary,
    "gray": discord.ButtonStyle.secondary,
    "grey": discord.ButtonStyle.secondary,
    "success": discord.ButtonStyle.success,
    "green": discord.ButtonStyle.success,
    "danger": discord.ButtonStyle.danger,
    "red": discord.ButtonStyle.danger,
    "link": discord.ButtonStyle.link,
    "url": discord.ButtonStyle.link,
}

ROLE_PANEL_COLOR = 0x5865F2
TICKET_PANEL_COLOR = 0x2ECC71
HANDLER_NOTE = "\n\nNote: You'll need a bot with interaction handlers to process {kind} button clicks."

DEFAULT_TICKET_DESCRIPTION = (
    "Need help? Click a button below to create a support ticket.\n\n"
    "**Please include:**\n"
    "• A clear description of your issue\n"
    "• Any relevant screenshots or evidence\n"
    "• Your in-game name if applicable"
)


def _split_items(definitions: str, min_parts: int) -> list[list[str]]:
    """Split 'a|b|c;d|e|f' into trimmed parts, skipping short items."""
    items = []
    for item in definitions.split(";"):
        parts = [part.strip() for part in item.split("|")]
        if len(parts) >= min_parts:
            items.append(parts)
    return items


def make_button(label: str, id_or_url: str, style: str) -> discord.ui.Button:
    """Build a button; unknown styles become secondary, link styles take a URL."""
    button_style = BUTTON_STYLES.get(style.lower(), discord.ButtonStyle.secondary)
    if button_style is discord.ButtonStyle.link:
        return discord.ui.Button(label=label, url=id_or_url, style=button_style)
    return discord.ui.Button(label=label, custom_id=id_or_url, style=button_style)


def parse_buttons(definitions: str) -> list[discord.ui.Button]:
    """Parse 'Label|CustomId|Style' items separated by semicolons."""
    return [make_button(label, id_or_url, style) for label, id_or_url, style, *_ in _split_items(definitions, 3)]


def build_view(buttons: list[discord.ui.Button]) -> discord.ui.View:
    """Lay buttons out five per row."""
    if len(buttons) > BUTTONS_PER_ROW * MAX_ROWS:
        raise InvalidInputError(f"At most {BUTTONS_PER_ROW * MAX_ROWS} buttons fit on one message")

    view = discord.ui.View(timeout=None)
    for index, button in enumerate(buttons):
        button.row = index // BUTTONS_PER_ROW
        view.add_item(button)
    return view


class InteractiveService(DiscordService):
    """Send messages carrying buttons, menus and ready-made panels."""

    async def send_buttons(self, params: SendButtonsParams) -> str:
        """
        Send a message with interactive buttons.

        Args:
            params: Channel, optional text and the button definitions.

        Returns:
            Confirmation with the button count and a message link.

        Raises:
            InvalidInputError: If no button definition could be parsed.
        """
        self._require(params.channel_id, "channelId")
        definitions = self._require(params.buttons, "buttons")

        buttons = parse_buttons(definitions)
        if not buttons:
            raise InvalidInputError("No valid buttons provided")
        view = build_view(buttons)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(content=params.content or EMPTY_CONTENT, view=view)

        self._log_action(f"Sent {len(buttons)} buttons to #{channel.name}")
        return f"Message with {len(buttons)} buttons sent. Message link: {message.jump_url}"

    async def send_embed_with_buttons(self, params: SendEmbedWithButtonsParams) -> str:
        self._require(params.channel_id, "channelId")
        definitions = self._require(params.buttons, "buttons")

        embed = build_embed(params.title, params.description, params.color_hex)
        buttons = parse_buttons(definitions)
        if not buttons:
            raise InvalidInputError("No valid buttons provided")
        view = build_view(buttons)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(embed=embed, view=view)

        self._log_action(f"Sent embed with {len(buttons)} buttons to #{channel.name}")
        return f"Embed with {len(buttons)} buttons sent. Message link: {message.jump_url}"

    async def send_select_menu(self, params: SendSelectMenuParams) -> str:
        """Send a message with a dropdown built from 'Label|Value|Description' items."""
        self._require(params.channel_id, "channelId")
        menu_id = self._require(params.menu_id, "menuId")
        definitions = self._require(params.options, "options")

        options = [
            discord.SelectOption(
                label=parts[0],
                value=parts[1],
                description=parts[2] if len(parts) >= 3 and parts[2] else None,
            )
            for parts in _split_items(definitions, 2)
        ]
        if not options:
            raise InvalidInputError("No valid options provided")

        select = discord.ui.Select(
            custom_id=menu_id,
            placeholder=params.placeholder or "Select an option",
            options=options,
        )
        if params.min_values is not None:
            select.min_values = params.min_values
        if params.max_values is not None:
            select.max_values = params.max_values

        view = discord.ui.View(timeout=None)
        view.add_item(select)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(content=params.content or EMPTY_CONTENT, view=view)

        self._log_action(f"Sent select menu '{menu_id}' to #{channel.name}")
        return f"Select menu sent. Message link: {message.jump_url}"

    async def send_role_panel(self, params: SendRolePanelParams) -> str:
        """
        Send a self-assignable role panel.

        Each 'RoleName|RoleId|Emoji' item becomes a secondary button with
        custom ID ``role_<RoleId>``.
        """
        self._require(params.channel_id, "channelId")
        definitions = self._require(params.roles, "roles")

        embed = discord.Embed(
            title=params.title if params.title is not None else "Role Selection",
            description=params.description if params.description is not None else "Click a button to toggle a role",
            color=parse_color(params.color_hex) or discord.Color(ROLE_PANEL_COLOR),
            timestamp=discord.utils.utcnow(),
        )

        buttons = []
        role_list = []
        for parts in _split_items(definitions, 2):
            role_name, role_id = parts[0], parts[1]
            emoji: Optional[str] = parts[2] if len(parts) >= 3 and parts[2] else None
            buttons.append(discord.ui.Button(
                label=role_name,
                custom_id=f"role_{role_id}",
                style=discord.ButtonStyle.secondary,
                emoji=emoji,
            ))
            role_list.append(f"{emoji} **{role_name}**" if emoji else f"**{role_name}**")

        if role_list:
            embed.add_field(name="Available Roles", value="\n".join(role_list), inline=False)
        view = build_view(buttons)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(embed=embed, view=view)

        self._log_action(f"Sent role panel with {len(buttons)} roles to #{channel.name}")
        return (
            f"Role panel with {len(buttons)} roles sent. Message link: {message.jump_url}"
            + HANDLER_NOTE.format(kind="role")
        )

    async def send_ticket_panel(self, params: SendTicketPanelParams) -> str:
        """
        Send a support ticket panel.

        'Name|CustomId|Emoji' categories become primary ``ticket_<CustomId>``
        buttons; without categories a single "Create Ticket" button is sent.
        """
        self._require(params.channel_id, "channelId")

        embed = discord.Embed(
            title=params.title if params.title is not None else "🎫 Support Tickets",
            description=params.description if params.description is not None else DEFAULT_TICKET_DESCRIPTION,
            color=parse_color(params.color_hex) or discord.Color(TICKET_PANEL_COLOR),
            timestamp=discord.utils.utcnow(),
        )
        embed.set_footer(text="Support Team")

        if params.categories:
            buttons = [
                discord.ui.Button(
                    label=parts[0],
                    custom_id=f"ticket_{parts[1]}",
                    style=discord.ButtonStyle.primary,
                    emoji=parts[2] if len(parts) >= 3 and parts[2] else None,
                )
                for parts in _split_items(params.categories, 2)
            ]
        else:
            buttons = [discord.ui.Button(
                label="Create Ticket",
                custom_id="ticket_create",
                style=discord.ButtonStyle.success,
                emoji="🎫",
            )]
        view = build_view(buttons)

        channel = await self._get_channel(params.channel_id)
        with self._guard("send messages"):
            message = await channel.send(embed=embed, view=view)

        self._log_action(f"Sent ticket panel to #{channel.name}")
        return f"Ticket panel sent. Message link: {message.jump_url}" + HANDLER_NOTE.format(kind="ticket")

    async def remove_components(self, params: MessageParams) -> str:
        self._require(params.channel_id, "channelId")
        self._require(params.message_id, "messageId")

        channel = await self._get_channel(params.channel_id)
        message = await self._fetch_message(channel, params.message_id)

        with self._guard("edit messages"):
            await message.edit(view=None)

        self._log_action(f"Removed components from message {message.id}")
        return f"Components removed from message. Message link: {message.jump_url}"

    async def disable_buttons(self, params: MessageParams) -> str:
        """Gray out every component on a message, keeping the layout."""
        self._require(params.channel_id, "channelId")
        self._require(params.message_id, "messageId")

        channel = await self._get_channel(params.channel_id)
        message = await self._fetch_message(channel, params.message_id)

        view = discord.ui.View.from_message(message, timeout=None)
        for item in view.children:
            item.disabled = True

        with self._guard("edit messages"):
            await message.edit(view=view)

        self._log_action(f"Disabled components on message {message.id}")
        return f"Buttons disabled on message. Message link: {message.jump_url}"

"""Role management tools."""

from __future__ import annotations

import discord

from beacon.errors import NotFoundError
from beacon.params import (
    CreateRoleParams,
    FindRoleParams,
    GuildParams,
    MemberRoleParams,
    RoleParams,
    UpdateRoleParams,
)
from beacon.services.base import DiscordService, format_color, parse_color


class RoleService(DiscordService):
    """Create, edit and assign server roles."""

    async def create_role(self, params: CreateRoleParams) -> str:
        """
        Create a new role in the server.

        Args:
            params: Role name and optional color, hoist and mentionable flags.

        Returns:
            Confirmation message with the new role's ID.
        """
        guild = self._resolve_guild(params.guild_id)
        name = self._require(params.name, "name")
        color = parse_color(params.color_hex) or discord.Color.default()

        with self._guard("create roles"):
            role = await guild.create_role(
                name=name,
                color=color,
                hoist=bool(params.hoisted),
                mentionable=bool(params.mentionable),
            )

        self._log_action(f"Created role '{role.name}' in {guild.name}")
        return f"Created role: {role.name} (ID: {role.id})"

    async def delete_role(self, params: RoleParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        role = self._get_role(guild, params.role_id)
        role_name = role.name

        with self._guard("delete roles"):
            await role.delete()

        self._log_action(f"Deleted role '{role_name}'")
        return f"Deleted role: {role_name}"

    async def assign_role(self, params: MemberRoleParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)
        role = self._get_role(guild, params.role_id)

        with self._guard("manage roles"):
            await member.add_roles(role)

        self._log_action(f"Assigned role '{role.name}' to {member}")
        return f"Assigned role {role.name} to {member.display_name}"

    async def remove_role(self, params: MemberRoleParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        member = await self._fetch_member(guild, params.user_id)
        role = self._get_role(guild, params.role_id)

        with self._guard("manage roles"):
            await member.remove_roles(role)

        self._log_action(f"Removed role '{role.name}' from {member}")
        return f"Removed role {role.name} from {member.display_name}"

    async def list_roles(self, params: GuildParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        # Highest role first, without @everyone
        roles = [role for role in reversed(guild.roles) if not role.is_default()]
        if not roles:
            return "No roles found in server"

        lines = [
            f"- {role.name} (ID: {role.id}) [Members: {len(role.members)}, Color: {format_color(role.color)}]"
            for role in roles
        ]
        return f"Retrieved {len(roles)} roles:\n" + "\n".join(lines)

    async def find_role(self, params: FindRoleParams) -> str:
        """
        Find roles by name, case-insensitively.

        Raises:
            NotFoundError: If no role has this name.
        """
        guild = self._resolve_guild(params.guild_id)
        role_name = self._require(params.role_name, "roleName")

        roles = [role for role in reversed(guild.roles) if role.name.lower() == role_name.lower()]
        if not roles:
            raise NotFoundError(f"No roles found with name: {role_name}")

        if len(roles) == 1:
            role = roles[0]
            return (
                f"Found role: {role.name} (ID: {role.id}) "
                f"[Members: {len(role.members)}, Color: {format_color(role.color)}, Position: {role.position}]"
            )

        lines = [f"- {role.name} (ID: {role.id})" for role in roles]
        return f"Found {len(roles)} roles matching '{role_name}':\n" + "\n".join(lines)

    async def update_role(self, params: UpdateRoleParams) -> str:
        """
        Update a role's name, color, hoist or mentionable settings.

        Only the supplied properties change; a call with none of them is a no-op.
        """
        guild = self._resolve_guild(params.guild_id)
        role = self._get_role(guild, params.role_id)

        changes: dict = {}
        described: list[str] = []
        if params.name:
            changes["name"] = params.name
            described.append(f"name to '{params.name}'")
        if params.color_hex:
            changes["color"] = parse_color(params.color_hex)
            described.append(f"color to {params.color_hex}")
        if params.hoisted is not None:
            changes["hoist"] = params.hoisted
            described.append(f"hoisted to {str(params.hoisted).lower()}")
        if params.mentionable is not None:
            changes["mentionable"] = params.mentionable
            described.append(f"mentionable to {str(params.mentionable).lower()}")

        if not changes:
            return f"No changes specified for role: {role.name}"

        role_name = role.name
        with self._guard("manage roles"):
            await role.edit(**changes)

        self._log_action(f"Updated role '{role_name}': {', '.join(described)}")
        return f"Updated role {role_name}: {', '.join(described)}"

    async def get_members_by_role(self, params: RoleParams) -> str:
        guild = self._resolve_guild(params.guild_id)
        role = self._get_role(guild, params.role_id)

        members = role.members
        if not members:
            return f"No members found with role: {role.name}"

        lines = [f"- {member.display_name} ({member.name}) [ID: {member.id}]" for member in members]
        return f"Found {len(members)} members with role {role.name}:\n" + "\n".join(lines)

"""Helpers shared by the slash command cogs."""

from __future__ import annotations

from typing import Optional

import discord

from raidplanner.errors import (
    ExternalUnavailableError,
    InvalidInputError,
    NotFoundError,
    RaidPlannerError,
)
from raidplanner.raids.notifications import RaidMessage
from raidplanner.utils.config import Config
from raidplanner.utils.discord_hub import build_embed


def has_admin_permission(interaction: discord.Interaction, config: Config) -> bool:
    permissions = getattr(interaction.user, "guild_permissions", None)
    if permissions is not None and permissions.administrator:
        return True
    if interaction.user.id in config.admin_users:
        return True
    if hasattr(interaction.user, "roles"):
        user_role_ids = [role.id for role in interaction.user.roles]
        return any(role_id in user_role_ids for role_id in config.admin_roles)
    return False


def user_error_message(error: Exception) -> Optional[str]:
    """Text shown to the user for a domain error, or None for unexpected errors."""
    if isinstance(error, NotFoundError):
        return f"❌ {error}"
    if isinstance(error, InvalidInputError):
        return f"❌ {error}"
    if isinstance(error, ExternalUnavailableError):
        return "⚠️ Discord is not reachable right now, please try again later."
    if isinstance(error, RaidPlannerError):
        return f"❌ {error}"
    return None


async def reply(
    interaction: discord.Interaction,
    content: Optional[str] = None,
    message: Optional[RaidMessage] = None,
    ephemeral: bool = True,
) -> None:
    """Answer an interaction whether or not it was already deferred."""
    kwargs = {"ephemeral": ephemeral}
    if content is not None:
        kwargs["content"] = content
    if message is not None:
        kwargs["embed"] = build_embed(message)

    if interaction.response.is_done():
        await interaction.followup.send(**kwargs)
    else:
        await interaction.response.send_message(**kwargs)

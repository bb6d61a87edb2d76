"""Character, job assignment and composition commands."""

from __future__ import annotations

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from raidplanner.raids.composition import CompositionManager
from raidplanner.raids.jobs import JobType, get_job_emoji, get_role, parse_job_list
from raidplanner.raids.lifecycle import RaidLifecycle
from raidplanner.utils.config import Config
from raidplanner.utils.interactions import has_admin_permission, reply
from raidplanner.utils.raid_utils import (
    build_character_list_message,
    build_composition_message,
)


logger = logging.getLogger("raidplanner.commands.character")

JOB_CHOICES = [app_commands.Choice(name=job.value, value=job.value) for job in JobType]


class CharacterCommand(commands.Cog):
    """Cog for characters, job slots and party validation."""

    character = app_commands.Group(name="character", description="Manage your characters")
    job = app_commands.Group(name="job", description="Assign jobs for a raid")
    composition = app_commands.Group(name="composition", description="Inspect raid compositions")

    def __init__(
        self,
        bot: commands.Bot,
        config: Config,
        manager: CompositionManager,
        lifecycle: RaidLifecycle,
    ):
        self.bot = bot
        self.config = config
        self.manager = manager
        self.lifecycle = lifecycle

    @character.command(name="register", description="Register a character")
    @app_commands.describe(
        name="Character name",
        world="Home world",
        preferred_job="Main job",
        secondary_jobs="Other jobs, comma separated (e.g. WAR, DRK)",
    )
    @app_commands.choices(preferred_job=JOB_CHOICES)
    async def character_register(
        self,
        interaction: discord.Interaction,
        name: str,
        world: str,
        preferred_job: app_commands.Choice[str],
        secondary_jobs: Optional[str] = None,
    ) -> None:
        character = await self.manager.register_character(
            interaction.user.id,
            name.strip(),
            world.strip(),
            JobType(preferred_job.value),
            parse_job_list(secondary_jobs) if secondary_jobs is not None else None,
        )
        await reply(
            interaction,
            f"✅ Registered **{character.name}** @ {character.world} (ID {character.id}).",
        )

    @character.command(name="update-jobs", description="Change a character's jobs")
    @app_commands.describe(
        character_id="Character ID",
        preferred_job="Main job",
        secondary_jobs="Other jobs, comma separated",
    )
    @app_commands.choices(preferred_job=JOB_CHOICES)
    async def character_update_jobs(
        self,
        interaction: discord.Interaction,
        character_id: int,
        preferred_job: app_commands.Choice[str],
        secondary_jobs: Optional[str] = None,
    ) -> None:
        character = await self.manager.update_character_jobs(
            interaction.user.id,
            character_id,
            JobType(preferred_job.value),
            parse_job_list(secondary_jobs) if secondary_jobs is not None else None,
        )
        await reply(interaction, f"✅ Jobs updated for **{character.name}**.")

    @character.command(name="list", description="List your characters")
    async def character_list(self, interaction: discord.Interaction) -> None:
        characters = await self.manager.list_user_characters(interaction.user.id)
        if not characters:
            await reply(interaction, "ℹ️ You have no characters yet. Use /character register.")
            return
        await reply(interaction, message=build_character_list_message(characters))

    @job.command(name="assign", description="Take a job slot in a raid")
    @app_commands.describe(
        raid_id="Raid ID",
        job="Job to play",
        sub_role="Optional sub role (e.g. MT, OT)",
        character_id="Character to play; defaults to your first",
        member="[Admin] Assign another member",
    )
    @app_commands.choices(job=JOB_CHOICES)
    async def job_assign(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        job: app_commands.Choice[str],
        sub_role: Optional[str] = None,
        character_id: Optional[int] = None,
        member: Optional[discord.Member] = None,
    ) -> None:
        target = member or interaction.user
        if target.id != interaction.user.id and not has_admin_permission(interaction, self.config):
            await reply(interaction, "❌ Only admins can assign other members.")
            return

        await interaction.response.defer(ephemeral=True)
        await self.lifecycle.require(raid_id)
        assignment = await self.manager.assign_role(
            raid_id,
            target.id,
            JobType(job.value),
            sub_role=sub_role,
            character_id=character_id,
            display_name=target.display_name,
        )
        if assignment is None:
            await reply(
                interaction,
                f"❌ {target.display_name} has no matching character. Use /character register first.",
            )
            return

        await reply(
            interaction,
            f"✅ {get_job_emoji(assignment.job)} {target.display_name} plays "
            f"**{assignment.job.value}** ({get_role(assignment.job)}) in raid {raid_id}.",
        )

    @job.command(name="remove", description="Leave your job slot in a raid")
    @app_commands.describe(raid_id="Raid ID", member="[Admin] Remove another member")
    async def job_remove(
        self,
        interaction: discord.Interaction,
        raid_id: int,
        member: Optional[discord.Member] = None,
    ) -> None:
        target = member or interaction.user
        if target.id != interaction.user.id and not has_admin_permission(interaction, self.config):
            await reply(interaction, "❌ Only admins can remove other members.")
            return

        await interaction.response.defer(ephemeral=True)
        if not await self.manager.remove_assignment(raid_id, target.id):
            await reply(interaction, f"ℹ️ {target.display_name} has no job in raid {raid_id}.")
            return
        await reply(interaction, f"✅ Removed {target.display_name} from raid {raid_id}.")

    @composition.command(name="show", description="Show the role breakdown of a raid")
    @app_commands.describe(raid_id="Raid ID")
    async def composition_show(self, interaction: discord.Interaction, raid_id: int) -> None:
        aggregate = await self.lifecycle.require(raid_id)
        counts = await self.manager.role_counts(raid_id)
        await reply(
            interaction,
            message=build_composition_message(aggregate.raid, aggregate.compositions, counts),
        )

    @composition.command(name="validate", description="Check a raid against the standard party")
    @app_commands.describe(raid_id="Raid ID")
    async def composition_validate(self, interaction: discord.Interaction, raid_id: int) -> None:
        await self.lifecycle.require(raid_id)
        if await self.manager.is_valid_composition(raid_id):
            await reply(interaction, "✅ The party is complete: 2 tanks, 2 healers, 4 DPS.")
            return

        missing = await self.manager.missing_roles(raid_id)
        parts = []
        for role, delta in missing.items():
            if delta > 0:
                parts.append(f"{delta} {role} missing")
            elif delta < 0:
                parts.append(f"{-delta} {role} too many")
        await reply(interaction, "⚠️ Not a standard party: " + ", ".join(parts))


async def setup(
    bot: commands.Bot,
    config: Config,
    manager: CompositionManager,
    lifecycle: RaidLifecycle,
) -> None:
    """Setup function for character commands."""
    await bot.add_cog(CharacterCommand(bot, config, manager, lifecycle))
    logger.info("CharacterCommand cog loaded")

"""Job slot assignments per raid and party validation."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional

from raidplanner.database.raid_store import (
    CharacterRecord,
    CompositionRecord,
    RaidStore,
)
from raidplanner.errors import CharacterNotFoundError
from raidplanner.raids.attendance import utcnow
from raidplanner.raids.jobs import (
    STANDARD_PARTY,
    JobType,
    count_roles,
    get_role,
    is_standard_party,
)
from raidplanner.raids.signals import RaidSignalBus


logger = logging.getLogger("raidplanner.composition")


class CompositionManager:
    """Owns (raid, member) job assignments and the characters behind them."""

    def __init__(
        self,
        raid_store: RaidStore,
        signals: RaidSignalBus,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.raid_store = raid_store
        self.signals = signals
        self.clock = clock

    async def register_character(
        self,
        user_id: int,
        name: str,
        world: str,
        preferred_job: JobType,
        secondary_jobs: Optional[List[JobType]] = None,
    ) -> CharacterRecord:
        """Register a character or update the jobs of an existing one with the same name."""
        character = await self.raid_store.upsert_character(
            user_id, name, world, preferred_job, secondary_jobs
        )
        logger.info("Character %s registered for user %s", character.id, user_id)
        return character

    async def update_character_jobs(
        self,
        user_id: int,
        character_id: int,
        preferred_job: JobType,
        secondary_jobs: Optional[List[JobType]] = None,
    ) -> CharacterRecord:
        character = await self.raid_store.get_character(character_id)
        if character is None or character.user_id != user_id:
            raise CharacterNotFoundError(character_id)
        return await self.raid_store.upsert_character(
            user_id, character.name, character.world, preferred_job, secondary_jobs
        )

    async def get_character(self, character_id: int) -> Optional[CharacterRecord]:
        return await self.raid_store.get_character(character_id)

    async def list_user_characters(self, user_id: int) -> List[CharacterRecord]:
        return await self.raid_store.list_user_characters(user_id)

    async def resolve_character(
        self, member_id: int, character_id: Optional[int] = None
    ) -> Optional[CharacterRecord]:
        """
        Find the character a member plays in a raid.

        With an explicit id the character must belong to the member;
        otherwise the member's first registered character is used.
        """
        if character_id is not None:
            character = await self.raid_store.get_character(character_id)
            if character is None or character.user_id != member_id:
                return None
            return character

        characters = await self.raid_store.list_user_characters(member_id)
        return characters[0] if characters else None

    async def assign_role(
        self,
        raid_id: int,
        member_id: int,
        job: JobType,
        sub_role: Optional[str] = None,
        character_id: Optional[int] = None,
        display_name: Optional[str] = None,
    ) -> Optional[CompositionRecord]:
        """
        Assign a job to a member for a raid and confirm their attendance.

        Returns None when the raid or the member's character does not exist.
        """
        if not await self.raid_store.raid_exists(raid_id):
            logger.info("Assignment rejected: raid %s not found", raid_id)
            return None

        character = await self.resolve_character(member_id, character_id)
        if character is None:
            logger.info(
                "Assignment rejected: no character for member %s in raid %s",
                member_id,
                raid_id,
            )
            return None

        assignment = await self.raid_store.assign_job(
            raid_id,
            member_id,
            character.id,
            JobType(job),
            sub_role,
            display_name or character.name,
            self.clock(),
        )
        logger.info(
            "Assigned %s (%s) to member %s in raid %s",
            assignment.job.value,
            get_role(assignment.job),
            member_id,
            raid_id,
        )
        await self.signals.publish(raid_id)
        return assignment

    async def remove_assignment(self, raid_id: int, member_id: int) -> bool:
        removed = await self.raid_store.remove_composition(raid_id, member_id)
        if not removed:
            return False
        logger.info("Removed assignment of member %s from raid %s", member_id, raid_id)
        await self.signals.publish(raid_id)
        return True

    async def list_assignments(self, raid_id: int) -> List[CompositionRecord]:
        return await self.raid_store.list_compositions(raid_id)

    async def role_counts(self, raid_id: int) -> Dict[str, int]:
        """Tally current assignments into tank/healer/dps counts."""
        assignments = await self.raid_store.list_compositions(raid_id)
        return count_roles(assignment.job for assignment in assignments)

    async def is_valid_composition(self, raid_id: int) -> bool:
        """True iff the raid matches the standard party exactly."""
        return is_standard_party(await self.role_counts(raid_id))

    async def missing_roles(self, raid_id: int) -> Dict[str, int]:
        """Return how far each role is from the standard party (negative means over)."""
        counts = await self.role_counts(raid_id)
        return {role: needed - counts.get(role, 0) for role, needed in STANDARD_PARTY.items()}

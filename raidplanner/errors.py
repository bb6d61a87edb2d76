"""Exception types shared by the raid engine and the command layer."""


class RaidPlannerError(Exception):
    """Base class for all RaidPlanner errors."""


class NotFoundError(RaidPlannerError):
    """A raid, member or character does not exist."""


class RaidNotFoundError(NotFoundError):
    def __init__(self, raid_id: int):
        super().__init__(f"Raid {raid_id} not found")
        self.raid_id = raid_id


class CharacterNotFoundError(NotFoundError):
    def __init__(self, character_id: int):
        super().__init__(f"Character {character_id} not found")
        self.character_id = character_id


class InvalidInputError(RaidPlannerError):
    """Input was rejected before any state was mutated."""


class UnknownZoneError(InvalidInputError):
    def __init__(self, zone_id: str):
        super().__init__(f"Unknown timezone: {zone_id}")
        self.zone_id = zone_id


class TimezoneRequiredError(InvalidInputError):
    """The acting member has not configured a timezone yet."""


class ExternalUnavailableError(RaidPlannerError):
    """The chat platform refused or failed a message operation."""

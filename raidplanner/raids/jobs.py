"""Job codes, their coarse roles and display helpers."""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional


ROLE_TANK = "tank"
ROLE_HEALER = "healer"
ROLE_DPS = "dps"

ROLE_ORDER = [ROLE_TANK, ROLE_HEALER, ROLE_DPS]

ROLE_LABELS = {
    ROLE_TANK: "Tanks",
    ROLE_HEALER: "Healers",
    ROLE_DPS: "DPS",
}

# Standard light/full party policy: not configurable per raid.
STANDARD_PARTY = {
    ROLE_TANK: 2,
    ROLE_HEALER: 2,
    ROLE_DPS: 4,
}

ICON_BASE_URL = (
    "https://raw.githubusercontent.com/aniachan/xivraidbot/refs/heads/main/"
    "XIVRaidBot/Resources/job_icons/"
)


class JobType(str, Enum):
    # Tanks
    PLD = "PLD"
    WAR = "WAR"
    DRK = "DRK"
    GNB = "GNB"
    # Healers
    WHM = "WHM"
    SCH = "SCH"
    AST = "AST"
    SGE = "SGE"
    # Melee DPS
    MNK = "MNK"
    DRG = "DRG"
    NIN = "NIN"
    SAM = "SAM"
    RPR = "RPR"
    # Physical ranged DPS
    BRD = "BRD"
    MCH = "MCH"
    DNC = "DNC"
    # Caster DPS
    BLM = "BLM"
    SMN = "SMN"
    RDM = "RDM"


# Every job needs an explicit entry; tests fail on a missing one.
JOB_ROLES: Dict[JobType, str] = {
    JobType.PLD: ROLE_TANK,
    JobType.WAR: ROLE_TANK,
    JobType.DRK: ROLE_TANK,
    JobType.GNB: ROLE_TANK,
    JobType.WHM: ROLE_HEALER,
    JobType.SCH: ROLE_HEALER,
    JobType.AST: ROLE_HEALER,
    JobType.SGE: ROLE_HEALER,
    JobType.MNK: ROLE_DPS,
    JobType.DRG: ROLE_DPS,
    JobType.NIN: ROLE_DPS,
    JobType.SAM: ROLE_DPS,
    JobType.RPR: ROLE_DPS,
    JobType.BRD: ROLE_DPS,
    JobType.MCH: ROLE_DPS,
    JobType.DNC: ROLE_DPS,
    JobType.BLM: ROLE_DPS,
    JobType.SMN: ROLE_DPS,
    JobType.RDM: ROLE_DPS,
}

JOB_ICON_FILES: Dict[JobType, str] = {
    JobType.PLD: "paladin.png",
    JobType.WAR: "warrior.png",
    JobType.DRK: "darkknight.png",
    JobType.GNB: "gunbreaker.png",
    JobType.WHM: "whitemage.png",
    JobType.SCH: "scholar.png",
    JobType.AST: "astrologian.png",
    JobType.SGE: "sage.png",
    JobType.MNK: "monk.png",
    JobType.DRG: "dragoon.png",
    JobType.NIN: "ninja.png",
    JobType.SAM: "samurai.png",
    JobType.RPR: "reaper.png",
    JobType.BRD: "bard.png",
    JobType.MCH: "machinist.png",
    JobType.DNC: "dancer.png",
    JobType.BLM: "blackmage.png",
    JobType.SMN: "summoner.png",
    JobType.RDM: "redmage.png",
}

ROLE_EMOJIS = {
    ROLE_TANK: "🛡️",
    ROLE_HEALER: "💚",
    ROLE_DPS: "⚔️",
}


def get_role(job: JobType) -> str:
    """Return the coarse role for a job code."""
    return JOB_ROLES[JobType(job)]


def get_job_emoji(job: JobType) -> str:
    return ROLE_EMOJIS[get_role(job)]


def get_job_icon_url(job: JobType) -> str:
    return ICON_BASE_URL + JOB_ICON_FILES.get(JobType(job), "default.png")


def parse_job(value: str) -> JobType:
    """Parse a job code case-insensitively."""
    try:
        return JobType(value.strip().upper())
    except ValueError:
        raise ValueError(f"Unknown job code: {value}") from None


def parse_job_list(value: Optional[str]) -> List[JobType]:
    """Parse a comma-separated job list, skipping unknown codes."""
    jobs: List[JobType] = []
    if not value:
        return jobs
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            jobs.append(parse_job(part))
        except ValueError:
            continue
    return jobs


def count_roles(jobs: Iterable[JobType]) -> Dict[str, int]:
    """Tally jobs into tank/healer/dps counts; all roles are always present."""
    counts = {role: 0 for role in ROLE_ORDER}
    for job in jobs:
        counts[get_role(job)] += 1
    return counts


def is_standard_party(counts: Dict[str, int]) -> bool:
    return all(counts.get(role, 0) == needed for role, needed in STANDARD_PARTY.items())

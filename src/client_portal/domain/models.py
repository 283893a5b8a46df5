"""Core enums and timestamp helpers for the client portal."""

from datetime import datetime
from enum import StrEnum


class StepId(StrEnum):
    """Portal step identifiers in canonical order."""

    WELCOME = "welcome"
    KEY_PEOPLE = "keyPeople"
    LOCATIONS = "locations"
    GROUP_SHOTS = "groupShots"
    PHOTO_REQUESTS = "photoRequests"
    TIMELINE = "timeline"
    THANK_YOU = "thankYou"


class SectionKind(StrEnum):
    """Editable sections backed by items and config documents."""

    KEY_PEOPLE = "keyPeople"
    LOCATIONS = "locations"
    GROUP_SHOTS = "groupShots"
    PHOTO_REQUESTS = "photoRequests"
    TIMELINE = "timeline"


class SectionStatus(StrEnum):
    """Lifecycle status mirrored on each portal step."""

    UNLOCKED = "unlocked"
    IN_PROGRESS = "inProgress"
    LOCKED = "locked"
    FINALIZED = "finalized"


class ActionOn(StrEnum):
    """Who is expected to act next on a section."""

    CLIENT = "client"
    PHOTOGRAPHER = "photographer"
    NONE = "none"


PSEUDO_STEPS = frozenset({StepId.WELCOME, StepId.THANK_YOU})
OPTIONAL_SECTIONS_BY_DEFAULT = frozenset(
    {SectionKind.KEY_PEOPLE, SectionKind.PHOTO_REQUESTS}
)
CLIENT_EDITABLE_STATUSES = frozenset({SectionStatus.UNLOCKED, SectionStatus.IN_PROGRESS})


def to_timestamp(value: datetime) -> str:
    """Serialize a datetime for storage."""
    return value.isoformat()


def parse_timestamp(value: object) -> datetime | None:
    """Parse a stored timestamp, returning None when absent."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        return datetime.fromisoformat(value)
    return None

"""Section items, config patches and per-section rules."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from client_portal.domain.models import (
    ActionOn,
    SectionKind,
    SectionStatus,
    parse_timestamp,
)


class PortalModel(BaseModel):
    """Base model for camelCase client payloads."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore"
    )

    def to_document(self) -> dict[str, object]:
        """Serialize to a JSON-safe camelCase map."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class KeyPersonRole(StrEnum):
    MAID_OF_HONOR = "Maid of Honor"
    MATRON_OF_HONOR = "Matron of Honor"
    BEST_MAN = "Best Man"
    BRIDESMAID = "Bridesmaid"
    GROOMSMAN = "Groomsman"
    JUNIOR_BRIDESMAID = "Junior Bridesmaid"
    JUNIOR_GROOMSMAN = "Junior Groomsman"
    FLOWER_GIRL = "Flower Girl"
    RING_BEARER = "Ring Bearer"
    USHER = "Usher"
    MOTHER_OF_BRIDE = "Mother of the Bride"
    FATHER_OF_BRIDE = "Father of the Bride"
    MOTHER_OF_GROOM = "Mother of the Groom"
    FATHER_OF_GROOM = "Father of the Groom"
    STEPMOTHER = "Stepmother"
    STEPFATHER = "Stepfather"
    GRANDMOTHER = "Grandmother"
    GRANDFATHER = "Grandfather"
    SISTER = "Sister"
    BROTHER = "Brother"
    OTHER = "Other"


class KeyPersonInvolvement(StrEnum):
    SPEECH = "Speech"
    READING = "Reading"
    TOAST = "Toast"
    WALK_DOWN_AISLE = "Walk Down Aisle"
    SPECIAL_DANCE = "Special Dance"
    OTHER = "Other"
    NONE = "None"


class LocationType(StrEnum):
    SINGLE_LOCATION = "Single Location"
    MAIN_VENUE = "Main Venue"
    CEREMONY = "Ceremony"
    GETTING_READY_1 = "Getting Ready 1"
    GETTING_READY_2 = "Getting Ready 2"
    RECEPTION = "Reception"
    PHOTO_LOCATION = "Photo Location"
    ACCOMMODATION = "Accommodation"
    OTHER = "Other"


class PhotoRequestType(StrEnum):
    GROUP_SHOT = "Group Shot"
    INDIVIDUAL_SHOT = "Individual Shot"
    COUPLE_SHOT = "Couple Shot"
    CANDID_SHOT = "Candid Shot"
    DETAIL_SHOT = "Detail Shot"
    OTHER = "Other"


class PhotoRequestPriority(StrEnum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TimelineEventType(StrEnum):
    BRIDAL_PREP = "Bridal Prep"
    GROOM_PREP = "Groom Prep"
    GUESTS_ARRIVE = "Guests Arrive"
    CEREMONY_BEGINS = "Ceremony Begins"
    CONFETTI_AND_MINGLING = "Confetti and Mingling"
    RECEPTION_DRINKS = "Reception Drinks"
    GROUP_PHOTOS = "Group Photos"
    COUPLE_PORTRAITS = "Couple Portraits"
    WEDDING_BREAKFAST = "Wedding Breakfast"
    SPEECHES = "Speeches"
    EVENING_GUESTS_ARRIVE = "Evening Guests Arrive"
    CAKE_CUTTING = "Cake Cutting"
    FIRST_DANCE = "First Dance"
    EVENING_ENTERTAINMENT = "Evening Entertainment"
    EVENING_BUFFET = "Evening Buffet"
    CARRIAGES = "Carriages"
    OTHER = "Other"


class KeyPerson(PortalModel):
    """An important person on the day."""

    id: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    role: KeyPersonRole
    involvement: KeyPersonInvolvement = KeyPersonInvolvement.NONE
    notes: str | None = None
    must_photograph: bool = False
    dont_photograph: bool = False
    is_vip: bool = Field(default=False, alias="isVIP")
    can_rally_people: bool = False


class Location(PortalModel):
    """A venue or stop on the day."""

    id: str = Field(min_length=1)
    location_name: str = Field(min_length=1)
    location_type: LocationType
    location_address1: str = Field(min_length=1)
    location_postcode: str = Field(min_length=1)
    location_notes: str | None = None
    arrive_time: datetime | None = None
    leave_time: datetime | None = None
    next_location_travel_time_estimate: int = Field(default=0, ge=0)
    next_location_travel_arrangements: str | None = None


class PhotoRequest(PortalModel):
    """A specific shot the couple asked for."""

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str | None = None
    priority: PhotoRequestPriority = PhotoRequestPriority.MEDIUM
    type: PhotoRequestType = PhotoRequestType.INDIVIDUAL_SHOT
    people_involved: list[str] | None = None
    notes: str | None = None
    image_url: str | None = None


class GroupShotItem(PortalModel):
    """A group photo from the catalog or added by the couple."""

    id: str = Field(min_length=1)
    name: str
    category_id: str
    is_predefined: bool = True
    notes: str | None = None
    checked: bool = False
    time: int = Field(default=3, ge=0)


class TimelineEvent(PortalModel):
    """A scheduled moment on the day."""

    id: str = Field(min_length=1)
    type: TimelineEventType = TimelineEventType.OTHER
    title: str = Field(min_length=1)
    start_time: datetime
    duration: int = Field(default=0, ge=0)
    location_id: str | None = None
    client_notes: str | None = None


class EmptyConfigPatch(PortalModel):
    """Sections whose config has no client-owned fields."""


class LocationsConfigPatch(PortalModel):
    multiple_locations: bool | None = None


class TimelineConfigPatch(PortalModel):
    event_date: datetime | None = None


@dataclass(frozen=True)
class SectionRule:
    """Validation rules for a section's draft saves."""

    kind: SectionKind
    item_model: type[PortalModel]
    patch_model: type[PortalModel]
    max_items: int
    too_many_message: str
    label: str
    max_raw_items: int | None = None
    too_many_raw_message: str = "Too many items provided."


SECTION_RULES: dict[SectionKind, SectionRule] = {
    SectionKind.LOCATIONS: SectionRule(
        kind=SectionKind.LOCATIONS,
        item_model=Location,
        patch_model=LocationsConfigPatch,
        max_items=6,
        too_many_message="Too many locations provided.",
        label="locations",
    ),
    SectionKind.KEY_PEOPLE: SectionRule(
        kind=SectionKind.KEY_PEOPLE,
        item_model=KeyPerson,
        patch_model=EmptyConfigPatch,
        max_items=10,
        too_many_message="Too many people provided.",
        label="key people",
    ),
    SectionKind.PHOTO_REQUESTS: SectionRule(
        kind=SectionKind.PHOTO_REQUESTS,
        item_model=PhotoRequest,
        patch_model=EmptyConfigPatch,
        max_items=5,
        too_many_message="Too many requests provided.",
        label="photo requests",
    ),
    SectionKind.GROUP_SHOTS: SectionRule(
        kind=SectionKind.GROUP_SHOTS,
        item_model=GroupShotItem,
        patch_model=EmptyConfigPatch,
        max_items=30,
        too_many_message="Too many group shots selected.",
        label="group shots",
        max_raw_items=100,
    ),
    SectionKind.TIMELINE: SectionRule(
        kind=SectionKind.TIMELINE,
        item_model=TimelineEvent,
        patch_model=TimelineConfigPatch,
        max_items=15,
        too_many_message="Too many events provided.",
        label="timeline",
    ),
}


@dataclass(frozen=True)
class SectionConfig:
    """Lifecycle flags of a section plus its section-specific fields."""

    finalized: bool = False
    locked: bool = False
    action_on: ActionOn = ActionOn.CLIENT
    skipped: bool = False
    revision_requested: bool = False
    revision_reason: str | None = None
    updated_at: datetime | None = None
    extra: dict[str, object] = field(default_factory=dict)

    @property
    def status(self) -> SectionStatus:
        """Return the step status these flags correspond to."""
        if self.finalized:
            return SectionStatus.FINALIZED
        if self.locked:
            return SectionStatus.LOCKED
        return SectionStatus.UNLOCKED

    @classmethod
    def from_document(cls, data: dict[str, object] | None) -> "SectionConfig":
        """Build config from a stored document, defaulting missing flags."""
        if not data:
            return cls()
        known = {
            "finalized",
            "locked",
            "actionOn",
            "skipped",
            "revisionRequested",
            "revisionReason",
            "updatedAt",
        }
        reason = data.get("revisionReason")
        return cls(
            finalized=bool(data.get("finalized", False)),
            locked=bool(data.get("locked", False)),
            action_on=ActionOn(str(data.get("actionOn", ActionOn.CLIENT))),
            skipped=bool(data.get("skipped", False)),
            revision_requested=bool(data.get("revisionRequested", False)),
            revision_reason=str(reason) if reason else None,
            updated_at=parse_timestamp(data.get("updatedAt")),
            extra={key: value for key, value in data.items() if key not in known},
        )


def initial_section_config() -> dict[str, object]:
    """Return the config document written when a section is first set up."""
    return {
        "finalized": False,
        "locked": False,
        "actionOn": ActionOn.CLIENT.value,
    }

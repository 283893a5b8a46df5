"""Domain models for the portal status document."""

import logging
import math
from dataclasses import dataclass, field, replace
from datetime import datetime

from client_portal.domain.models import (
    ActionOn,
    SectionStatus,
    StepId,
    parse_timestamp,
    to_timestamp,
)

logger = logging.getLogger(__name__)

DEFAULT_PORTAL_MESSAGE = (
    "Welcome to your planning portal! "
    "Please complete each step to help us make your day perfect."
)

STEP_TITLES: dict[StepId, str] = {
    StepId.WELCOME: "Welcome",
    StepId.KEY_PEOPLE: "Key People",
    StepId.LOCATIONS: "Locations",
    StepId.GROUP_SHOTS: "Group Shots",
    StepId.PHOTO_REQUESTS: "Photo Requests",
    StepId.TIMELINE: "Timeline",
    StepId.THANK_YOU: "Thank You",
}


@dataclass(frozen=True)
class PortalStep:
    """One entry of the portal's ordered step list."""

    step_id: StepId
    title: str
    status: SectionStatus
    action_on: ActionOn
    required: bool
    updated_at: datetime | None = None

    def to_entry(self) -> dict[str, object]:
        """Serialize to the stored list entry."""
        return {
            "stepId": self.step_id.value,
            "stepTitle": self.title,
            "stepStatus": self.status.value,
            "actionOn": self.action_on.value,
            "requiredStep": self.required,
            "updatedAt": to_timestamp(self.updated_at) if self.updated_at else None,
        }

    @classmethod
    def from_entry(cls, entry: dict[str, object]) -> "PortalStep":
        """Build a step from a stored list entry."""
        step_id = StepId(str(entry.get("stepId") or entry.get("portalStepID")))
        return cls(
            step_id=step_id,
            title=str(entry.get("stepTitle") or STEP_TITLES[step_id]),
            status=SectionStatus(str(entry.get("stepStatus", SectionStatus.LOCKED))),
            action_on=ActionOn(str(entry.get("actionOn", ActionOn.CLIENT))),
            required=bool(entry.get("requiredStep", True)),
            updated_at=parse_timestamp(entry.get("updatedAt")),
        )


@dataclass(frozen=True)
class PortalMetadata:
    """Usage and completion counters for a portal."""

    client_access_count: int = 0
    last_client_activity: datetime | None = None
    total_steps: int = 0
    completed_steps: int = 0
    completion_percentage: int = 0

    def with_completed_delta(self, delta: int) -> "PortalMetadata":
        """Return metadata with completed steps shifted and percentage recomputed."""
        completed = max(self.completed_steps + delta, 0)
        return replace(
            self,
            completed_steps=completed,
            completion_percentage=completion_percentage(completed, self.total_steps),
        )

    def to_document(self) -> dict[str, object]:
        """Serialize to the stored metadata map."""
        return {
            "clientAccessCount": self.client_access_count,
            "lastClientActivity": (
                to_timestamp(self.last_client_activity)
                if self.last_client_activity
                else None
            ),
            "totalSteps": self.total_steps,
            "completedSteps": self.completed_steps,
            "completionPercentage": self.completion_percentage,
        }

    @classmethod
    def from_document(cls, data: object) -> "PortalMetadata":
        """Build metadata from a stored map, tolerating missing keys."""
        if not isinstance(data, dict):
            return cls()
        return cls(
            client_access_count=int(data.get("clientAccessCount") or 0),
            last_client_activity=parse_timestamp(data.get("lastClientActivity")),
            total_steps=int(data.get("totalSteps") or 0),
            completed_steps=int(data.get("completedSteps") or 0),
            completion_percentage=int(data.get("completionPercentage") or 0),
        )


def completion_percentage(completed_steps: int, total_steps: int) -> int:
    """Return completed/total as a half-up rounded percentage."""
    total = total_steps or 1
    return math.floor(completed_steps / total * 100 + 0.5)


@dataclass
class PortalStatus:
    """Steps, navigation and counters of a project's portal.

    Steps are held keyed by id in list order and only flattened back into an
    ordered list when written. Stored entries that do not parse are kept in
    ``unparsed_steps`` and written back unchanged after the known steps.
    """

    steps: dict[StepId, PortalStep] = field(default_factory=dict)
    current_step_id: StepId = StepId.WELCOME
    metadata: PortalMetadata = field(default_factory=PortalMetadata)
    is_enabled: bool = True
    portal_message: str = DEFAULT_PORTAL_MESSAGE
    unparsed_steps: list[dict[str, object]] = field(default_factory=list)

    def step(self, step_id: StepId) -> PortalStep | None:
        """Return the step entry for ``step_id``, if present."""
        return self.steps.get(step_id)

    def replace_step(self, step: PortalStep) -> None:
        """Replace an existing step entry in place, keeping its position."""
        if step.step_id not in self.steps:
            raise KeyError(step.step_id)
        self.steps[step.step_id] = step

    def steps_document(self) -> list[dict[str, object]]:
        """Return the ordered step list for storage."""
        return [step.to_entry() for step in self.steps.values()] + [
            dict(entry) for entry in self.unparsed_steps
        ]

    @classmethod
    def from_document(cls, data: dict[str, object]) -> "PortalStatus":
        """Build portal status from the stored document."""
        steps: dict[StepId, PortalStep] = {}
        unparsed: list[dict[str, object]] = []
        raw_steps = data.get("steps")
        for entry in raw_steps if isinstance(raw_steps, list) else []:
            if not isinstance(entry, dict):
                continue
            try:
                step = PortalStep.from_entry(entry)
            except ValueError:
                logger.warning("Keeping unreadable portal step", extra={"entry": entry})
                unparsed.append(entry)
                continue
            steps.setdefault(step.step_id, step)
        raw_current = data.get("currentStepID")
        try:
            current = StepId(str(raw_current)) if raw_current else StepId.WELCOME
        except ValueError:
            current = StepId.WELCOME
        return cls(
            steps=steps,
            current_step_id=current,
            metadata=PortalMetadata.from_document(data.get("metadata")),
            is_enabled=bool(data.get("isEnabled", True)),
            portal_message=str(data.get("portalMessage") or DEFAULT_PORTAL_MESSAGE),
            unparsed_steps=unparsed,
        )

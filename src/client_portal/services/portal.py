"""Read-side portal operations for the couple and the photographer."""

from dataclasses import dataclass

from client_portal.domain.errors import NotFoundError
from client_portal.domain.models import SectionKind, StepId
from client_portal.domain.portal import (
    DEFAULT_PORTAL_MESSAGE,
    PortalMetadata,
    PortalStatus,
    PortalStep,
)
from client_portal.domain.sections import initial_section_config
from client_portal.services.boundary import (
    portal_operation,
    require_project_id,
    require_section,
    require_user,
)
from client_portal.services.lifecycle import SectionLifecycleService
from client_portal.services.paths import (
    portal_status_path,
    project_path,
    section_config_path,
    section_items_path,
)
from client_portal.services.store import DocumentStore
from client_portal.services.tokens import AccessTokenService


@dataclass(frozen=True)
class Person:
    first_name: str
    surname: str


@dataclass(frozen=True)
class ClientPortalView:
    """Everything the portal shell needs on first load. Never holds the token."""

    project_id: str
    project_name: str
    person_a: Person
    person_b: Person
    event_date: object
    photographer_name: str
    portal_message: str
    current_step_id: StepId
    steps: list[PortalStep]
    metadata: PortalMetadata


@dataclass(frozen=True)
class SectionData:
    """A section's items and config as stored."""

    section: SectionKind
    items: list[object]
    config: dict[str, object]


@dataclass
class PortalReadService:
    store: DocumentStore
    tokens: AccessTokenService
    lifecycle: SectionLifecycleService

    @portal_operation("open portal")
    def open_portal(self, project_id: str, token: str) -> ClientPortalView:
        """Validate the link, count the visit and return the portal view."""
        project_id = require_project_id(project_id)
        self.tokens.validate_token(project_id, token)
        project = self.store.get(project_path(project_id))
        if project.data is None:
            raise NotFoundError("Project not found.")
        portal = self.store.get(portal_status_path(project_id))
        if portal.data is None:
            raise NotFoundError("Portal not found.")

        self.tokens.record_access(project_id)
        status = PortalStatus.from_document(portal.data)
        status.metadata = self.lifecycle.record_portal_launch(project_id)
        info = project.data.get("projectInfo")
        info = info if isinstance(info, dict) else {}
        return ClientPortalView(
            project_id=project_id,
            project_name=str(info.get("projectName") or ""),
            person_a=_person(info.get("personA")),
            person_b=_person(info.get("personB")),
            event_date=info.get("eventDate"),
            photographer_name=str(info.get("photographerName") or ""),
            portal_message=status.portal_message or DEFAULT_PORTAL_MESSAGE,
            current_step_id=status.current_step_id,
            steps=list(status.steps.values()),
            metadata=status.metadata,
        )

    @portal_operation("get section")
    def get_section(self, project_id: str, token: str, section_id: str) -> SectionData:
        project_id = require_project_id(project_id)
        kind = require_section(section_id)
        self.tokens.validate_token(project_id, token)
        return self._read_section(project_id, kind)

    @portal_operation("get section for review")
    def photographer_get_section(
        self, project_id: str, section_id: str, user_id: str | None
    ) -> SectionData:
        require_user(user_id)
        project_id = require_project_id(project_id)
        kind = require_section(section_id)
        return self._read_section(project_id, kind)

    def _read_section(self, project_id: str, kind: SectionKind) -> SectionData:
        items = self.store.get(section_items_path(project_id, kind)).data or {}
        config = self.store.get(section_config_path(project_id, kind)).data
        stored = items.get("list")
        return SectionData(
            section=kind,
            items=list(stored) if isinstance(stored, list) else [],
            config=config if config is not None else initial_section_config(),
        )


def _person(value: object) -> Person:
    # Older projects store a bare first name instead of a map.
    if isinstance(value, dict):
        return Person(
            first_name=str(value.get("firstName") or ""),
            surname=str(value.get("surname") or ""),
        )
    return Person(first_name=str(value or ""), surname="")

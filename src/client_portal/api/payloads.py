"""Response payload builders."""

from client_portal.domain.models import to_timestamp
from client_portal.domain.portal import PortalStatus
from client_portal.domain.sections import SectionConfig
from client_portal.services.portal import ClientPortalView, Person, SectionData


def success(**payload: object) -> dict[str, object]:
    return {"success": True, **payload}


def person_payload(person: Person) -> dict[str, str]:
    return {"firstName": person.first_name, "surname": person.surname}


def view_payload(view: ClientPortalView) -> dict[str, object]:
    """Shape the portal view for the client shell."""
    return {
        "id": view.project_id,
        "projectName": view.project_name,
        "personA": person_payload(view.person_a),
        "personB": person_payload(view.person_b),
        "eventDate": view.event_date,
        "photographerName": view.photographer_name,
        "portalMessage": view.portal_message,
        "currentStepID": view.current_step_id.value,
        "portalSteps": [step.to_entry() for step in view.steps],
        "metadata": view.metadata.to_document(),
    }


def status_payload(status: PortalStatus) -> dict[str, object]:
    return {
        "currentStepID": status.current_step_id.value,
        "steps": [step.to_entry() for step in status.steps.values()],
        "metadata": status.metadata.to_document(),
    }


def config_payload(config: SectionConfig) -> dict[str, object]:
    """Return the lifecycle flags of a section config."""
    payload: dict[str, object] = {
        "finalized": config.finalized,
        "locked": config.locked,
        "actionOn": config.action_on.value,
        "skipped": config.skipped,
        "revisionRequested": config.revision_requested,
        "status": config.status.value,
    }
    if config.revision_reason:
        payload["revisionReason"] = config.revision_reason
    if config.updated_at:
        payload["updatedAt"] = to_timestamp(config.updated_at)
    return payload


def section_payload(section: SectionData) -> dict[str, object]:
    return {
        "sectionId": section.section.value,
        "items": section.items,
        "config": section.config,
    }

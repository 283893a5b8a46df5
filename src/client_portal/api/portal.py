"""Client portal endpoints, authenticated by the portal access token."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Request

from client_portal.api.payloads import (
    config_payload,
    section_payload,
    status_payload,
    success,
    view_payload,
)
from client_portal.api.portal_models import (
    ActivityRequest,
    ClientRequest,
    SaveDraftRequest,
    SectionRequest,
    StepRequest,
    StepStatusRequest,
)
from client_portal.domain.models import to_timestamp

if TYPE_CHECKING:
    from client_portal.containers import AppContainer

router = APIRouter(prefix="/portal", tags=["portal"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


@router.post("/validate")
async def validate_token(body: ClientRequest, request: Request) -> dict[str, object]:
    """Check a portal link without counting a visit."""
    token = _container(request).token_service.validate_token(
        body.project_id, body.access_token
    )
    return success(
        projectId=token.project_id,
        portalId=token.portal_id,
        expiresAt=to_timestamp(token.expires_at),
    )


@router.post("/open")
async def open_portal(body: ClientRequest, request: Request) -> dict[str, object]:
    """Return the portal view and count the visit."""
    view = _container(request).read_service.open_portal(
        body.project_id, body.access_token
    )
    return success(project=view_payload(view))


@router.post("/sections/get")
async def get_section(body: SectionRequest, request: Request) -> dict[str, object]:
    section = _container(request).read_service.get_section(
        body.project_id, body.access_token, body.section_id
    )
    return success(**section_payload(section))


@router.post("/sections/save")
async def save_draft(body: SaveDraftRequest, request: Request) -> dict[str, object]:
    """Replace a section's items with the client's draft."""
    result = _container(request).draft_service.save_draft(
        body.project_id, body.access_token, body.section_id, body.items, body.config
    )
    return success(
        sectionId=result.section.value,
        itemCount=len(result.items),
        config=result.config,
    )


@router.post("/sections/submit")
async def submit_section(body: SectionRequest, request: Request) -> dict[str, object]:
    """Lock a section and send it for review."""
    config = _container(request).lifecycle_service.submit_section(
        body.project_id, body.section_id, body.access_token
    )
    return success(config=config_payload(config))


@router.post("/steps/skip")
async def skip_step(body: StepRequest, request: Request) -> dict[str, object]:
    status = _container(request).lifecycle_service.skip_step(
        body.project_id, body.access_token, body.step_id
    )
    return success(**status_payload(status))


@router.post("/steps/current")
async def update_current_step(
    body: StepRequest, request: Request
) -> dict[str, object]:
    step = _container(request).lifecycle_service.update_current_step(
        body.project_id, body.access_token, body.step_id
    )
    return success(currentStepID=step.value)


@router.post("/steps/status")
async def update_step_status(
    body: StepStatusRequest, request: Request
) -> dict[str, object]:
    status = _container(request).lifecycle_service.update_section_item_status(
        body.project_id,
        body.access_token,
        body.step_id,
        body.status or "",
        body.action_on,
    )
    return success(**status_payload(status))


@router.post("/activity")
async def log_activity(body: ActivityRequest, request: Request) -> dict[str, object]:
    entry_id = _container(request).activity_service.log_portal_activity(
        body.project_id, body.access_token, body.activity_type, body.metadata
    )
    return success(activityId=entry_id)

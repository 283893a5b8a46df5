"""Photographer endpoints authenticated with a Supabase access token."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, Request

from client_portal.api.payloads import config_payload, section_payload, success
from client_portal.api.portal_models import (
    GeneratePortalLinkRequest,
    PhotographerSectionRequest,
    PortalRequest,
    RevisionRequest,
)
from client_portal.domain.models import to_timestamp

if TYPE_CHECKING:
    from client_portal.containers import AppContainer

router = APIRouter(prefix="/photographer", tags=["photographer"])


def _container(request: Request) -> AppContainer:
    return request.app.state.container


async def current_user_id(
    request: Request, authorization: str | None = Header(default=None)
) -> str | None:
    """Resolve the bearer token to a user id; services reject None."""
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return _container(request).authenticator.user_id_for(credentials.strip())


@router.post("/portal-link")
async def generate_portal_link(
    body: GeneratePortalLinkRequest,
    request: Request,
    user_id: str | None = Depends(current_user_id),
) -> dict[str, object]:
    """Issue a new portal link, replacing any previous one."""
    link = _container(request).link_service.generate_portal_link(
        body.project_id, body.selected_steps, user_id, body.optional_steps
    )
    return success(
        portalUrl=link.portal_url,
        accessToken=link.access_token,
        portalId=link.portal_id,
        expiresAt=to_timestamp(link.expires_at),
    )


@router.post("/portal-link/disable")
async def disable_portal_link(
    body: PortalRequest,
    request: Request,
    user_id: str | None = Depends(current_user_id),
) -> dict[str, object]:
    _container(request).link_service.disable_portal_link(body.project_id, user_id)
    return success()


@router.post("/sections/get")
async def get_section(
    body: PhotographerSectionRequest,
    request: Request,
    user_id: str | None = Depends(current_user_id),
) -> dict[str, object]:
    section = _container(request).read_service.photographer_get_section(
        body.project_id, body.section_id, user_id
    )
    return success(**section_payload(section))


@router.post("/sections/approve")
async def approve_section(
    body: PhotographerSectionRequest,
    request: Request,
    user_id: str | None = Depends(current_user_id),
) -> dict[str, object]:
    """Finalize a submitted section."""
    config = _container(request).lifecycle_service.approve_section(
        body.project_id, body.section_id, user_id
    )
    return success(config=config_payload(config))


@router.post("/sections/revision")
async def request_revision(
    body: RevisionRequest,
    request: Request,
    user_id: str | None = Depends(current_user_id),
) -> dict[str, object]:
    """Unlock a section so the couple can revise it."""
    config = _container(request).lifecycle_service.request_revision(
        body.project_id, body.section_id, user_id, body.reason
    )
    return success(config=config_payload(config))

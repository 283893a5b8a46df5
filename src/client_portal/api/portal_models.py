"""Pydantic models for portal request payloads.

Required ids are optional here so the services report missing input with
their own messages.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class PortalRequest(BaseModel):
    """Base payload with camelCase field names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    project_id: str | None = None


class ClientRequest(PortalRequest):
    """Payload authenticated by the portal access token."""

    access_token: str | None = None


class SectionRequest(ClientRequest):
    section_id: str | None = None


class SaveDraftRequest(SectionRequest):
    items: Any = None
    config: dict[str, Any] | None = None


class StepRequest(ClientRequest):
    step_id: str | None = None


class StepStatusRequest(StepRequest):
    status: str | None = None
    action_on: str = "client"


class ActivityRequest(ClientRequest):
    activity_type: str | None = None
    metadata: dict[str, Any] | None = None


class GeneratePortalLinkRequest(PortalRequest):
    selected_steps: list[str] | None = None
    optional_steps: list[str] | None = None


class PhotographerSectionRequest(PortalRequest):
    section_id: str | None = None


class RevisionRequest(PhotographerSectionRequest):
    reason: Any = None

"""Portal link issuance and disablement."""

import logging
import secrets
from collections.abc import Iterable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta
from urllib.parse import parse_qs, urlencode, urlsplit

from client_portal.domain.access import AccessToken
from client_portal.domain.errors import InvalidArgumentError, NotFoundError
from client_portal.domain.models import (
    OPTIONAL_SECTIONS_BY_DEFAULT,
    PSEUDO_STEPS,
    ActionOn,
    SectionKind,
    SectionStatus,
    StepId,
    to_timestamp,
)
from client_portal.domain.portal import (
    DEFAULT_PORTAL_MESSAGE,
    STEP_TITLES,
    PortalStatus,
    PortalStep,
    completion_percentage,
)
from client_portal.domain.sections import SectionConfig, initial_section_config
from client_portal.services.boundary import (
    portal_operation,
    require_project_id,
    require_step,
    require_user,
)
from client_portal.services.clock import Clock
from client_portal.services.paths import (
    access_token_path,
    portal_status_path,
    project_path,
    section_config_path,
    section_items_path,
)
from client_portal.services.store import (
    DEFAULT_MAX_ATTEMPTS,
    DocumentStore,
    Transaction,
    run_transaction,
)

logger = logging.getLogger(__name__)

TOKEN_BYTES = 32


@dataclass(frozen=True)
class PortalLink:
    """A freshly issued portal link."""

    portal_url: str
    access_token: str
    portal_id: str
    expires_at: datetime


def build_portal_url(base_url: str, project_id: str, access_token: str) -> str:
    """Return the client-facing portal URL."""
    query = urlencode({"project": project_id, "token": access_token})
    return f"{base_url.rstrip('/')}/?{query}"


def parse_portal_url(url: str) -> tuple[str, str]:
    """Extract ``(project_id, access_token)`` from a portal URL."""
    params = parse_qs(urlsplit(url).query)
    project = params.get("project", [""])[0]
    token = params.get("token", [""])[0]
    if not project or not token:
        raise InvalidArgumentError("Portal URL is missing project or token.")
    return project, token


@dataclass
class PortalLinkService:
    """Issues and disables the single access link of a project.

    Issuing a link replaces any previous token, so calling it again invalidates
    links already handed to the couple.
    """

    store: DocumentStore
    clock: Clock
    portal_base_url: str
    link_ttl_days: int = 30
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @portal_operation("generate portal link")
    def generate_portal_link(
        self,
        project_id: str,
        selected_step_ids: list[str] | None,
        user_id: str | None,
        optional_step_ids: list[str] | None = None,
    ) -> PortalLink:
        """Mint a token, set up the portal document and flag the project."""
        require_user(user_id)
        project_id = require_project_id(project_id)
        if not selected_step_ids:
            raise InvalidArgumentError("At least one step must be selected.")
        selected = _parse_sections(selected_step_ids)
        if not selected:
            raise InvalidArgumentError("At least one step must be selected.")
        optional = (
            set(_parse_sections(optional_step_ids))
            if optional_step_ids is not None
            else set(OPTIONAL_SECTIONS_BY_DEFAULT)
        )

        now = self.clock.now()
        access_token = secrets.token_hex(TOKEN_BYTES)
        portal_id = f"portal_{project_id}_{int(now.timestamp() * 1000)}"
        portal_url = build_portal_url(self.portal_base_url, project_id, access_token)
        token = AccessToken(
            project_id=project_id,
            token=access_token,
            portal_id=portal_id,
            enabled=True,
            created_at=now,
            expires_at=now + timedelta(days=self.link_ttl_days),
            selected_steps=tuple(kind.value for kind in selected),
        )

        def apply(transaction: Transaction) -> None:
            if not transaction.get(project_path(project_id)).exists:
                raise NotFoundError("Project not found.")
            portal_snapshot = transaction.get(portal_status_path(project_id))
            existing = (
                PortalStatus.from_document(portal_snapshot.data)
                if portal_snapshot.data is not None
                else PortalStatus()
            )
            configs = {
                kind: self._ensure_section(transaction, project_id, kind, now)
                for kind in selected
            }
            status = _build_status(existing, configs, optional, now)
            transaction.set(
                portal_status_path(project_id),
                {
                    "isSetup": True,
                    "portalSetupComplete": True,
                    "isEnabled": True,
                    "portalUrl": portal_url,
                    "portalId": portal_id,
                    "setupDate": to_timestamp(now),
                    "lastUpdated": to_timestamp(now),
                    "currentStepID": StepId.WELCOME.value,
                    "portalMessage": existing.portal_message,
                    "metadata": status.metadata.to_document(),
                    "steps": status.steps_document(),
                },
                merge=True,
            )
            transaction.set(access_token_path(project_id), token.to_document())
            transaction.update(
                project_path(project_id),
                {
                    "clientPortal": {
                        "isSetup": True,
                        "isEnabled": True,
                        "portalId": portal_id,
                        "portalUrl": portal_url,
                        "launchedAt": to_timestamp(now),
                    }
                },
            )

        run_transaction(self.store, apply, self.max_attempts)
        logger.info(
            "Portal link generated",
            extra={"project_id": project_id, "portal_id": portal_id},
        )
        return PortalLink(
            portal_url=portal_url,
            access_token=access_token,
            portal_id=portal_id,
            expires_at=token.expires_at,
        )

    @portal_operation("disable portal link")
    def disable_portal_link(self, project_id: str, user_id: str | None) -> None:
        """Disable the project's link and mirror the flag; safe to repeat."""
        require_user(user_id)
        project_id = require_project_id(project_id)
        now = to_timestamp(self.clock.now())

        def apply(transaction: Transaction) -> None:
            snapshot = transaction.get(access_token_path(project_id))
            if snapshot.data is None:
                raise NotFoundError("This portal link is invalid.")
            if snapshot.data.get("isEnabled", False):
                transaction.update(
                    access_token_path(project_id),
                    {"isEnabled": False, "disabledAt": now},
                )
            portal = transaction.get(portal_status_path(project_id))
            if portal.data is not None and portal.data.get("isEnabled", True):
                transaction.update(
                    portal_status_path(project_id),
                    {"isEnabled": False, "lastUpdated": now},
                )
            project = transaction.get(project_path(project_id))
            if project.data is not None:
                transaction.update(
                    project_path(project_id),
                    {"clientPortal": {"isEnabled": False, "updatedAt": now}},
                )

        run_transaction(self.store, apply, self.max_attempts)
        logger.info("Portal link disabled", extra={"project_id": project_id})

    def _ensure_section(
        self,
        transaction: Transaction,
        project_id: str,
        kind: SectionKind,
        now: datetime,
    ) -> SectionConfig | None:
        """Create empty section documents if missing; return existing config."""
        config_path = section_config_path(project_id, kind)
        items_path = section_items_path(project_id, kind)
        config = transaction.get(config_path)
        items = transaction.get(items_path)
        if items.data is None:
            transaction.set(items_path, {"list": []})
        if config.data is None:
            transaction.set(
                config_path,
                {**initial_section_config(), "updatedAt": to_timestamp(now)},
            )
            return None
        return SectionConfig.from_document(config.data)


def _parse_sections(step_ids: Iterable[str]) -> list[SectionKind]:
    """Return selected sections in canonical order, ignoring pseudo-steps."""
    chosen: set[SectionKind] = set()
    for raw in step_ids:
        step_id = require_step(raw)
        if step_id not in PSEUDO_STEPS:
            chosen.add(SectionKind(step_id.value))
    return [kind for kind in SectionKind if kind in chosen]


def _build_status(
    existing: PortalStatus,
    configs: dict[SectionKind, SectionConfig | None],
    optional: set[SectionKind],
    now: datetime,
) -> PortalStatus:
    """Lay out welcome, the selected sections and thank-you in order."""
    steps: dict[StepId, PortalStep] = {}
    steps[StepId.WELCOME] = existing.step(StepId.WELCOME) or _pseudo_step(
        StepId.WELCOME, now
    )
    for kind, config in configs.items():
        step_id = StepId(kind.value)
        required = kind not in optional
        current = existing.step(step_id)
        if current is not None:
            steps[step_id] = replace(current, required=required)
        elif config is not None:
            steps[step_id] = PortalStep(
                step_id=step_id,
                title=STEP_TITLES[step_id],
                status=config.status,
                action_on=config.action_on,
                required=required,
                updated_at=now,
            )
        else:
            steps[step_id] = PortalStep(
                step_id=step_id,
                title=STEP_TITLES[step_id],
                status=SectionStatus.UNLOCKED,
                action_on=ActionOn.CLIENT,
                required=required,
                updated_at=now,
            )
    steps[StepId.THANK_YOU] = existing.step(StepId.THANK_YOU) or _pseudo_step(
        StepId.THANK_YOU, now
    )
    total = len(configs)
    completed = sum(
        1
        for step_id, step in steps.items()
        if step_id not in PSEUDO_STEPS and step.status == SectionStatus.FINALIZED
    )
    metadata = replace(
        existing.metadata,
        total_steps=total,
        completed_steps=completed,
        completion_percentage=completion_percentage(completed, total),
    )
    return PortalStatus(
        steps=steps,
        current_step_id=StepId.WELCOME,
        metadata=metadata,
        portal_message=existing.portal_message or DEFAULT_PORTAL_MESSAGE,
    )


def _pseudo_step(step_id: StepId, now: datetime) -> PortalStep:
    return PortalStep(
        step_id=step_id,
        title=STEP_TITLES[step_id],
        status=SectionStatus.LOCKED,
        action_on=ActionOn.NONE,
        required=False,
        updated_at=now,
    )

"""Section lifecycle transitions.

Every transition reads the section config and the portal status document in
one transaction and writes both back, so a step entry never disagrees with
its section's ``locked``/``finalized`` flags.
"""

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from client_portal.domain.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
)
from client_portal.domain.models import (
    CLIENT_EDITABLE_STATUSES,
    PSEUDO_STEPS,
    ActionOn,
    SectionKind,
    SectionStatus,
    StepId,
    to_timestamp,
)
from client_portal.domain.portal import PortalMetadata, PortalStatus
from client_portal.domain.sections import SectionConfig
from client_portal.services.boundary import (
    portal_operation,
    require_project_id,
    require_section,
    require_step,
    require_user,
)
from client_portal.services.clock import Clock
from client_portal.services.paths import portal_status_path, section_config_path
from client_portal.services.store import (
    DEFAULT_MAX_ATTEMPTS,
    DELETE_FIELD,
    DocumentStore,
    Transaction,
    run_transaction,
)
from client_portal.services.tokens import AccessTokenService

logger = logging.getLogger(__name__)

MAX_REVISION_REASON_LENGTH = 1000


@dataclass
class SectionLifecycleService:
    """Moves sections between client editing, review and finalized states."""

    store: DocumentStore
    clock: Clock
    tokens: AccessTokenService
    session_debounce: timedelta = timedelta(minutes=30)
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @portal_operation("submit section")
    def submit_section(
        self, project_id: str, section_id: str, token: str
    ) -> SectionConfig:
        """Lock a section for photographer review."""
        project_id = require_project_id(project_id)
        kind = require_section(section_id)
        self.tokens.validate_token(project_id, token)
        now = self.clock.now()

        def apply(transaction: Transaction) -> SectionConfig:
            config = _read_config(transaction, project_id, kind, "Section not found.")
            if config.finalized:
                raise FailedPreconditionError(
                    "This section has already been finalized."
                )
            if config.locked:
                return config
            transaction.update(
                section_config_path(project_id, kind),
                {
                    "locked": True,
                    "actionOn": ActionOn.PHOTOGRAPHER.value,
                    "submittedAt": to_timestamp(now),
                    "updatedAt": to_timestamp(now),
                },
            )
            _mirror_step(
                transaction,
                project_id,
                StepId(kind.value),
                SectionStatus.LOCKED,
                ActionOn.PHOTOGRAPHER,
                now,
            )
            return replace(
                config, locked=True, action_on=ActionOn.PHOTOGRAPHER, updated_at=now
            )

        result = run_transaction(self.store, apply, self.max_attempts)
        logger.info(
            "Section submitted",
            extra={"project_id": project_id, "section": kind.value},
        )
        return result

    @portal_operation("approve section")
    def approve_section(
        self, project_id: str, section_id: str, user_id: str | None
    ) -> SectionConfig:
        """Finalize a section on behalf of the photographer."""
        user_id = require_user(user_id)
        project_id = require_project_id(project_id)
        kind = require_section(section_id)
        now = self.clock.now()

        def apply(transaction: Transaction) -> SectionConfig:
            config = _read_config(
                transaction, project_id, kind, "Section config not found."
            )
            transaction.update(
                section_config_path(project_id, kind),
                {
                    "finalized": True,
                    "locked": True,
                    "actionOn": ActionOn.NONE.value,
                    "approvedAt": to_timestamp(now),
                    "approvedBy": user_id,
                    "lastActionBy": user_id,
                    "lastActionAt": to_timestamp(now),
                    "updatedAt": to_timestamp(now),
                    "revisionRequested": False,
                    "revisionReason": DELETE_FIELD,
                    "revisionRequestedAt": DELETE_FIELD,
                    "revisionRequestedBy": DELETE_FIELD,
                },
            )
            _mirror_step(
                transaction,
                project_id,
                StepId(kind.value),
                SectionStatus.FINALIZED,
                ActionOn.NONE,
                now,
                completed_delta=0 if config.finalized else 1,
            )
            return replace(
                config,
                finalized=True,
                locked=True,
                action_on=ActionOn.NONE,
                revision_requested=False,
                revision_reason=None,
                updated_at=now,
            )

        result = run_transaction(self.store, apply, self.max_attempts)
        logger.info(
            "Section approved",
            extra={"project_id": project_id, "section": kind.value},
        )
        return result

    @portal_operation("request revision")
    def request_revision(
        self,
        project_id: str,
        section_id: str,
        user_id: str | None,
        reason: object,
    ) -> SectionConfig:
        """Hand a section back to the couple with the photographer's reason."""
        user_id = require_user(user_id)
        project_id = require_project_id(project_id)
        kind = require_section(section_id)
        if not isinstance(reason, str) or not reason.strip():
            raise InvalidArgumentError(
                "Revision reason is required and must be a non-empty string."
            )
        reason = reason.strip()
        if len(reason) > MAX_REVISION_REASON_LENGTH:
            raise InvalidArgumentError(
                "Revision reason is too long (max 1000 characters)."
            )
        now = self.clock.now()

        def apply(transaction: Transaction) -> SectionConfig:
            config = _read_config(
                transaction, project_id, kind, "Section config not found."
            )
            transaction.update(
                section_config_path(project_id, kind),
                {
                    "locked": False,
                    "finalized": False,
                    "skipped": False,
                    "actionOn": ActionOn.CLIENT.value,
                    "revisionRequested": True,
                    "revisionReason": reason,
                    "revisionRequestedAt": to_timestamp(now),
                    "revisionRequestedBy": user_id,
                    "lastActionBy": user_id,
                    "lastActionAt": to_timestamp(now),
                    "updatedAt": to_timestamp(now),
                },
            )
            _mirror_step(
                transaction,
                project_id,
                StepId(kind.value),
                SectionStatus.UNLOCKED,
                ActionOn.CLIENT,
                now,
                completed_delta=-1 if config.finalized else 0,
            )
            return replace(
                config,
                finalized=False,
                locked=False,
                skipped=False,
                action_on=ActionOn.CLIENT,
                revision_requested=True,
                revision_reason=reason,
                updated_at=now,
            )

        result = run_transaction(self.store, apply, self.max_attempts)
        logger.info(
            "Revision requested",
            extra={"project_id": project_id, "section": kind.value},
        )
        return result

    @portal_operation("skip step")
    def skip_step(self, project_id: str, token: str, step_id: str) -> PortalStatus:
        """Finalize an optional step without content and return to welcome."""
        project_id = require_project_id(project_id)
        step = require_step(step_id)
        if step in PSEUDO_STEPS:
            raise InvalidArgumentError("This step cannot be skipped.")
        self.tokens.validate_token(project_id, token)
        kind = SectionKind(step.value)
        now = self.clock.now()

        def apply(transaction: Transaction) -> PortalStatus:
            status = _read_portal(transaction, project_id)
            entry = status.step(step)
            if entry is None:
                raise NotFoundError("Step not found.")
            if entry.required:
                raise FailedPreconditionError(
                    "This step is required and cannot be skipped."
                )
            if entry.status not in CLIENT_EDITABLE_STATUSES:
                raise FailedPreconditionError(
                    "This step can no longer be skipped."
                )
            transaction.set(
                section_config_path(project_id, kind),
                {
                    "finalized": True,
                    "locked": True,
                    "skipped": True,
                    "actionOn": ActionOn.NONE.value,
                    "updatedAt": to_timestamp(now),
                },
                merge=True,
            )
            status.replace_step(
                replace(
                    entry,
                    status=SectionStatus.FINALIZED,
                    action_on=ActionOn.NONE,
                    updated_at=now,
                )
            )
            status.metadata = status.metadata.with_completed_delta(1)
            status.current_step_id = StepId.WELCOME
            transaction.update(
                portal_status_path(project_id),
                {
                    "steps": status.steps_document(),
                    "metadata": status.metadata.to_document(),
                    "currentStepID": StepId.WELCOME.value,
                    "lastUpdated": to_timestamp(now),
                },
            )
            return status

        result = run_transaction(self.store, apply, self.max_attempts)
        logger.info(
            "Step skipped", extra={"project_id": project_id, "step": step.value}
        )
        return result

    @portal_operation("update current step")
    def update_current_step(self, project_id: str, token: str, step_id: str) -> StepId:
        """Record where the couple is in the portal."""
        project_id = require_project_id(project_id)
        step = require_step(step_id)
        self.tokens.validate_token(project_id, token)
        now = self.clock.now()

        def apply(transaction: Transaction) -> StepId:
            _read_portal(transaction, project_id)
            transaction.update(
                portal_status_path(project_id),
                {"currentStepID": step.value, "lastUpdated": to_timestamp(now)},
            )
            return step

        return run_transaction(self.store, apply, self.max_attempts)

    @portal_operation("update section status")
    def update_section_item_status(
        self,
        project_id: str,
        token: str,
        step_id: str,
        status: str,
        action_on: str = ActionOn.CLIENT.value,
    ) -> PortalStatus:
        """Toggle a client-owned step between unlocked and in progress."""
        project_id = require_project_id(project_id)
        step = require_step(step_id)
        try:
            target = SectionStatus(status)
            owner = ActionOn(action_on)
        except ValueError as exc:
            raise InvalidArgumentError("Invalid step status.") from exc
        if target not in CLIENT_EDITABLE_STATUSES or owner != ActionOn.CLIENT:
            raise FailedPreconditionError(
                "Only unlocked or in-progress client steps can be set here."
            )
        self.tokens.validate_token(project_id, token)
        now = self.clock.now()

        def apply(transaction: Transaction) -> PortalStatus:
            portal = _read_portal(transaction, project_id)
            entry = portal.step(step)
            if entry is None:
                raise NotFoundError("Step not found.")
            if entry.status not in CLIENT_EDITABLE_STATUSES:
                raise FailedPreconditionError(
                    "This step can no longer be changed by the client."
                )
            portal.replace_step(
                replace(entry, status=target, action_on=owner, updated_at=now)
            )
            transaction.update(
                portal_status_path(project_id),
                {"steps": portal.steps_document(), "lastUpdated": to_timestamp(now)},
            )
            return portal

        return run_transaction(self.store, apply, self.max_attempts)

    @portal_operation("record portal launch")
    def record_portal_launch(self, project_id: str) -> PortalMetadata:
        """Count a new client session unless one was active recently."""
        project_id = require_project_id(project_id)
        now = self.clock.now()

        def apply(transaction: Transaction) -> PortalMetadata:
            metadata = _read_portal(transaction, project_id).metadata
            last = metadata.last_client_activity
            new_session = last is None or now - last > self.session_debounce
            updated = replace(
                metadata,
                client_access_count=metadata.client_access_count
                + (1 if new_session else 0),
                last_client_activity=now,
            )
            transaction.update(
                portal_status_path(project_id),
                {
                    "metadata": {
                        "clientAccessCount": updated.client_access_count,
                        "lastClientActivity": to_timestamp(now),
                    }
                },
            )
            return updated

        return run_transaction(self.store, apply, self.max_attempts)


def _read_config(
    transaction: Transaction, project_id: str, kind: SectionKind, missing: str
) -> SectionConfig:
    snapshot = transaction.get(section_config_path(project_id, kind))
    if snapshot.data is None:
        raise NotFoundError(missing)
    return SectionConfig.from_document(snapshot.data)


def _read_portal(transaction: Transaction, project_id: str) -> PortalStatus:
    snapshot = transaction.get(portal_status_path(project_id))
    if snapshot.data is None:
        raise NotFoundError("Portal not found.")
    return PortalStatus.from_document(snapshot.data)


def _mirror_step(
    transaction: Transaction,
    project_id: str,
    step_id: StepId,
    status: SectionStatus,
    action_on: ActionOn,
    now: datetime,
    completed_delta: int = 0,
) -> None:
    """Copy a section transition onto its step entry, if the portal has one."""
    snapshot = transaction.get(portal_status_path(project_id))
    if snapshot.data is None:
        return
    portal = PortalStatus.from_document(snapshot.data)
    entry = portal.step(step_id)
    if entry is None:
        return
    portal.replace_step(
        replace(entry, status=status, action_on=action_on, updated_at=now)
    )
    patch: dict[str, object] = {
        "steps": portal.steps_document(),
        "lastUpdated": to_timestamp(now),
    }
    if completed_delta:
        patch["metadata"] = portal.metadata.with_completed_delta(
            completed_delta
        ).to_document()
    transaction.update(portal_status_path(project_id), patch)

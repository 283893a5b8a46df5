"""Client draft saves for section items."""

import logging
from dataclasses import dataclass

from pydantic import ValidationError

from client_portal.domain.errors import (
    InvalidArgumentError,
    NotFoundError,
    SectionLockedError,
)
from client_portal.domain.models import SectionKind, to_timestamp
from client_portal.domain.sections import (
    SECTION_RULES,
    GroupShotItem,
    PortalModel,
    SectionConfig,
    SectionRule,
)
from client_portal.services.boundary import (
    portal_operation,
    require_project_id,
    require_section,
)
from client_portal.services.clock import Clock
from client_portal.services.paths import section_config_path, section_items_path
from client_portal.services.store import (
    DEFAULT_MAX_ATTEMPTS,
    DocumentStore,
    Transaction,
    run_transaction,
)
from client_portal.services.tokens import AccessTokenService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DraftResult:
    """What a draft save stored."""

    section: SectionKind
    items: list[dict[str, object]]
    config: dict[str, object]


@dataclass
class DraftService:
    """Replaces a section's items and merges client-owned config fields."""

    store: DocumentStore
    clock: Clock
    tokens: AccessTokenService
    enforce_section_lock: bool = True
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @portal_operation("save draft")
    def save_draft(
        self,
        project_id: str,
        token: str,
        section_id: str,
        items: object,
        config: dict[str, object] | None = None,
    ) -> DraftResult:
        project_id = require_project_id(project_id)
        kind = require_section(section_id)
        self.tokens.validate_token(project_id, token)
        rule = SECTION_RULES[kind]
        if not isinstance(items, list):
            raise InvalidArgumentError("Items must be a list.")
        if rule.max_raw_items is not None and len(items) > rule.max_raw_items:
            raise InvalidArgumentError(rule.too_many_raw_message)
        # The ceiling applies to what is stored, so group shots count the selection.
        if kind != SectionKind.GROUP_SHOTS and len(items) > rule.max_items:
            raise InvalidArgumentError(rule.too_many_message)
        parsed = _parse_items(rule, items)
        if kind == SectionKind.GROUP_SHOTS:
            parsed = [
                item
                for item in parsed
                if isinstance(item, GroupShotItem) and item.checked
            ]
            if len(parsed) > rule.max_items:
                raise InvalidArgumentError(rule.too_many_message)
        stored_items = [item.to_document() for item in parsed]
        config_patch = _parse_config(rule, config)

        now = self.clock.now()
        if kind == SectionKind.GROUP_SHOTS:
            config_patch["totalTimeEstimated"] = sum(
                item.time for item in parsed if isinstance(item, GroupShotItem)
            )
            config_patch["clientLastViewed"] = to_timestamp(now)

        def apply(transaction: Transaction) -> DraftResult:
            config_path = section_config_path(project_id, kind)
            snapshot = transaction.get(config_path)
            if snapshot.data is None:
                raise NotFoundError("Section not found.")
            if self.enforce_section_lock and SectionConfig.from_document(
                snapshot.data
            ).locked:
                raise SectionLockedError(
                    "This section is locked and can no longer be edited."
                )
            transaction.set(
                section_items_path(project_id, kind),
                {"list": stored_items},
                merge=True,
            )
            if config_patch:
                transaction.set(
                    config_path,
                    {**config_patch, "updatedAt": to_timestamp(now)},
                    merge=True,
                )
            return DraftResult(
                section=kind, items=stored_items, config=dict(config_patch)
            )

        result = run_transaction(self.store, apply, self.max_attempts)
        logger.info(
            "Draft saved",
            extra={
                "project_id": project_id,
                "section": kind.value,
                "items": len(stored_items),
            },
        )
        return result


def _parse_items(rule: SectionRule, items: list[object]) -> list[PortalModel]:
    parsed: list[PortalModel] = []
    seen: set[str] = set()
    for raw in items:
        try:
            item = rule.item_model.model_validate(raw)
        except ValidationError as exc:
            raise InvalidArgumentError(
                f"Invalid {rule.label} item: {exc.errors()[0]['msg']}."
            ) from exc
        item_id = item.id  # type: ignore[attr-defined]
        if item_id in seen:
            raise InvalidArgumentError(f"Duplicate {rule.label} item id: {item_id}.")
        seen.add(item_id)
        parsed.append(item)
    return parsed


def _parse_config(
    rule: SectionRule, config: dict[str, object] | None
) -> dict[str, object]:
    """Keep only the config fields the couple may set for this section."""
    if not config:
        return {}
    if not isinstance(config, dict):
        raise InvalidArgumentError("Config must be an object.")
    try:
        return rule.patch_model.model_validate(config).to_document()
    except ValidationError as exc:
        raise InvalidArgumentError(
            f"Invalid {rule.label} config: {exc.errors()[0]['msg']}."
        ) from exc

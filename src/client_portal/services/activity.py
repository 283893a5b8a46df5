"""Portal analytics events."""

import uuid
from dataclasses import dataclass

from client_portal.domain.errors import InvalidArgumentError
from client_portal.domain.models import to_timestamp
from client_portal.services.boundary import (
    portal_operation,
    require_project_id,
    require_text,
)
from client_portal.services.clock import Clock
from client_portal.services.paths import activity_log_path
from client_portal.services.store import (
    DEFAULT_MAX_ATTEMPTS,
    DocumentStore,
    Transaction,
    run_transaction,
)
from client_portal.services.tokens import AccessTokenService

MAX_ACTIVITY_TYPE_LENGTH = 100
MAX_METADATA_KEYS = 20


@dataclass
class ActivityLogService:
    """Appends client activity entries to the analytics collection."""

    store: DocumentStore
    clock: Clock
    tokens: AccessTokenService
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @portal_operation("log activity")
    def log_portal_activity(
        self,
        project_id: str,
        token: str,
        activity_type: str,
        metadata: dict[str, object] | None = None,
    ) -> str:
        """Store one activity entry and return its id."""
        project_id = require_project_id(project_id)
        activity_type = require_text(activity_type, "Activity type is required.")
        if len(activity_type) > MAX_ACTIVITY_TYPE_LENGTH:
            raise InvalidArgumentError("Activity type is too long.")
        metadata = metadata or {}
        if not isinstance(metadata, dict):
            raise InvalidArgumentError("Metadata must be an object.")
        if len(metadata) > MAX_METADATA_KEYS:
            raise InvalidArgumentError("Too many metadata fields.")
        self.tokens.validate_token(project_id, token)

        entry_id = uuid.uuid4().hex
        document = {
            "projectId": project_id,
            "activityType": activity_type,
            "metadata": metadata,
            "timestamp": to_timestamp(self.clock.now()),
            "sessionId": metadata.get("sessionId"),
            "userAgent": metadata.get("userAgent"),
        }

        def apply(transaction: Transaction) -> str:
            transaction.set(activity_log_path(entry_id), document)
            return entry_id

        return run_transaction(self.store, apply, self.max_attempts)

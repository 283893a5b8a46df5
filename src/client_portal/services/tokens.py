"""Portal access token validation and access tracking."""

import secrets
from dataclasses import dataclass, replace

from client_portal.domain.access import AccessToken
from client_portal.domain.errors import (
    NotFoundError,
    TokenDisabledError,
    TokenExpiredError,
)
from client_portal.domain.models import to_timestamp
from client_portal.services.boundary import (
    portal_operation,
    require_project_id,
    require_text,
)
from client_portal.services.clock import Clock
from client_portal.services.paths import access_token_path
from client_portal.services.store import (
    DEFAULT_MAX_ATTEMPTS,
    DocumentStore,
    Transaction,
    run_transaction,
)


@dataclass
class AccessTokenService:
    """Validates client access tokens and tracks their use."""

    store: DocumentStore
    clock: Clock
    max_attempts: int = DEFAULT_MAX_ATTEMPTS

    @portal_operation("validate portal token")
    def validate_token(self, project_id: str, presented_token: str) -> AccessToken:
        """Return the project's token if ``presented_token`` may use the portal.

        Has no side effects. A wrong token and a disabled link fail the same way.
        """
        project_id = require_project_id(project_id)
        require_text(presented_token, "Missing project ID or access token.")
        snapshot = self.store.get(access_token_path(project_id))
        if snapshot.data is None:
            raise NotFoundError("This portal link is invalid.")
        token = AccessToken.from_document(snapshot.data)
        matches = secrets.compare_digest(
            token.token.encode(), presented_token.encode()
        )
        if not matches or not token.enabled:
            raise TokenDisabledError(
                "This portal link is invalid or has been disabled."
            )
        if token.is_expired(self.clock.now()):
            raise TokenExpiredError("This portal link has expired.")
        return token

    @portal_operation("record portal access")
    def record_access(self, project_id: str) -> AccessToken:
        """Increment the access counter and stamp the last access time."""
        project_id = require_project_id(project_id)
        path = access_token_path(project_id)
        now = self.clock.now()

        def apply(transaction: Transaction) -> AccessToken:
            snapshot = transaction.get(path)
            if snapshot.data is None:
                raise NotFoundError("This portal link is invalid.")
            token = AccessToken.from_document(snapshot.data)
            updated = replace(
                token, access_count=token.access_count + 1, last_accessed_at=now
            )
            transaction.update(
                path,
                {
                    "accessCount": updated.access_count,
                    "lastAccessedAt": to_timestamp(now),
                },
            )
            return updated

        return run_transaction(self.store, apply, self.max_attempts)

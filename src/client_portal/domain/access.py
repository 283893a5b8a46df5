"""Domain model for portal access tokens."""

from dataclasses import dataclass
from datetime import datetime

from client_portal.domain.models import parse_timestamp, to_timestamp


@dataclass(frozen=True)
class AccessToken:
    """The single active access token of a project."""

    project_id: str
    token: str
    portal_id: str
    enabled: bool
    created_at: datetime
    expires_at: datetime
    access_count: int = 0
    last_accessed_at: datetime | None = None
    disabled_at: datetime | None = None
    selected_steps: tuple[str, ...] = ()

    def is_expired(self, now: datetime) -> bool:
        """Return True when the token expired before ``now``."""
        return self.expires_at < now

    def to_document(self) -> dict[str, object]:
        """Serialize to the stored document shape."""
        return {
            "projectId": self.project_id,
            "accessToken": self.token,
            "portalId": self.portal_id,
            "selectedSteps": list(self.selected_steps),
            "isEnabled": self.enabled,
            "createdAt": to_timestamp(self.created_at),
            "expiresAt": to_timestamp(self.expires_at),
            "accessCount": self.access_count,
            "lastAccessedAt": (
                to_timestamp(self.last_accessed_at) if self.last_accessed_at else None
            ),
        }

    @classmethod
    def from_document(cls, data: dict[str, object]) -> "AccessToken":
        """Build a token from a stored document."""
        created_at = parse_timestamp(data.get("createdAt"))
        expires_at = parse_timestamp(data.get("expiresAt"))
        if created_at is None or expires_at is None:
            raise ValueError("Access token document is missing timestamps")
        raw_steps = data.get("selectedSteps")
        return cls(
            project_id=str(data.get("projectId", "")),
            token=str(data.get("accessToken", "")),
            portal_id=str(data.get("portalId", "")),
            enabled=bool(data.get("isEnabled", False)),
            created_at=created_at,
            expires_at=expires_at,
            access_count=int(data.get("accessCount") or 0),
            last_accessed_at=parse_timestamp(data.get("lastAccessedAt")),
            disabled_at=parse_timestamp(data.get("disabledAt")),
            selected_steps=tuple(str(step) for step in raw_steps)
            if isinstance(raw_steps, list)
            else (),
        )

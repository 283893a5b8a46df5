"""Document paths (the storage layout lives here and nowhere else)."""

from client_portal.domain.models import SectionKind

COLLECTION_PORTAL_ACCESS = "portalAccess"
COLLECTION_PROJECTS = "projects"
COLLECTION_PORTAL_ANALYTICS = "portalAnalytics"
DEFAULT_PORTAL_DOCUMENT = "clientPortals/default-portal"


def access_token_path(project_id: str) -> str:
    return f"{COLLECTION_PORTAL_ACCESS}/{project_id}"


def project_path(project_id: str) -> str:
    return f"{COLLECTION_PROJECTS}/{project_id}"


def portal_status_path(project_id: str) -> str:
    return f"{project_path(project_id)}/{DEFAULT_PORTAL_DOCUMENT}"


def section_items_path(project_id: str, kind: SectionKind) -> str:
    return f"{project_path(project_id)}/{kind.value}/items"


def section_config_path(project_id: str, kind: SectionKind) -> str:
    return f"{project_path(project_id)}/{kind.value}/config"


def activity_log_path(entry_id: str) -> str:
    return f"{COLLECTION_PORTAL_ANALYTICS}/{entry_id}"

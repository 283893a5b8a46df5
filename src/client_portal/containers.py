"""Dependency container wiring for the application."""

from dataclasses import dataclass
from datetime import timedelta

from supabase import create_client

from client_portal.adapters.supabase_authenticator import SupabaseAuthenticator
from client_portal.adapters.supabase_document_store import SupabaseDocumentStore
from client_portal.config import Settings
from client_portal.services.activity import ActivityLogService
from client_portal.services.auth import Authenticator
from client_portal.services.clock import Clock, SystemClock
from client_portal.services.drafts import DraftService
from client_portal.services.lifecycle import SectionLifecycleService
from client_portal.services.links import PortalLinkService
from client_portal.services.portal import PortalReadService
from client_portal.services.store import DocumentStore
from client_portal.services.tokens import AccessTokenService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    authenticator: Authenticator
    token_service: AccessTokenService
    link_service: PortalLinkService
    lifecycle_service: SectionLifecycleService
    draft_service: DraftService
    read_service: PortalReadService
    activity_service: ActivityLogService


def build_services(
    settings: Settings,
    store: DocumentStore,
    authenticator: Authenticator,
    clock: Clock,
) -> AppContainer:
    """Wire services over the given store, authenticator and clock."""
    attempts = settings.transaction_max_attempts
    token_service = AccessTokenService(store, clock, max_attempts=attempts)
    lifecycle_service = SectionLifecycleService(
        store=store,
        clock=clock,
        tokens=token_service,
        session_debounce=timedelta(minutes=settings.client_session_debounce_minutes),
        max_attempts=attempts,
    )
    return AppContainer(
        settings=settings,
        authenticator=authenticator,
        token_service=token_service,
        link_service=PortalLinkService(
            store=store,
            clock=clock,
            portal_base_url=settings.portal_base_url,
            link_ttl_days=settings.portal_link_ttl_days,
            max_attempts=attempts,
        ),
        lifecycle_service=lifecycle_service,
        draft_service=DraftService(
            store=store,
            clock=clock,
            tokens=token_service,
            enforce_section_lock=settings.enforce_section_lock,
            max_attempts=attempts,
        ),
        read_service=PortalReadService(
            store=store, tokens=token_service, lifecycle=lifecycle_service
        ),
        activity_service=ActivityLogService(
            store=store, clock=clock, tokens=token_service, max_attempts=attempts
        ),
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    return build_services(
        settings=resolved_settings,
        store=SupabaseDocumentStore(supabase_client),
        authenticator=SupabaseAuthenticator(supabase_client),
        clock=SystemClock(),
    )

"""Tests for container wiring."""

from client_portal.adapters.supabase_document_store import SupabaseDocumentStore
from client_portal.config import parse_allowed_origins
from client_portal.containers import build_container


def test_build_container_creates_services(settings) -> None:
    container = build_container(settings)

    assert isinstance(container.link_service.store, SupabaseDocumentStore)
    assert container.draft_service.tokens is container.token_service
    assert container.link_service.portal_base_url == "https://portal.example.com"
    assert container.lifecycle_service.session_debounce.total_seconds() == 30 * 60


def test_parse_allowed_origins() -> None:
    assert parse_allowed_origins(None) is None
    assert parse_allowed_origins(" * ") is None
    assert parse_allowed_origins("https://a.example/, ,https://b.example") == [
        "https://a.example",
        "https://b.example",
    ]

"""ASGI entrypoint for the client portal API."""

from client_portal.api.app import create_app
from client_portal.containers import build_container

app = create_app(build_container())

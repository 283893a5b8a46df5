"""Photographer authentication interface."""

from typing import Protocol


class Authenticator(Protocol):
    def user_id_for(self, bearer_token: str) -> str | None:
        """Return the photographer's user id, or None if the token is not valid."""

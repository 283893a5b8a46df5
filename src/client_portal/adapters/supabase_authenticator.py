"""Photographer authentication through Supabase Auth."""

import logging
from dataclasses import dataclass

from supabase import AuthError, Client

from client_portal.services.auth import Authenticator

logger = logging.getLogger(__name__)


@dataclass
class SupabaseAuthenticator(Authenticator):
    """Resolves a Supabase access token (JWT) to a user id."""

    client: Client

    def user_id_for(self, bearer_token: str) -> str | None:
        try:
            response = self.client.auth.get_user(bearer_token)
        except AuthError as exc:
            logger.info("Rejected photographer token: %s", exc.message)
            return None
        if response is None or response.user is None:
            return None
        return response.user.id

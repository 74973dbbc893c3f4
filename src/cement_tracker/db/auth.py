"""Identity providers used for created_by / updated_by attribution."""

from __future__ import annotations

import logging
from typing import Optional, Protocol

from supabase import Client

from .supabase import get_supabase_client

logger = logging.getLogger(__name__)


class IdentityProvider(Protocol):
    def current_user_id(self) -> Optional[str]: ...


class StaticIdentity:
    """Fixed acting user (or anonymous when ``user_id`` is None)."""

    def __init__(self, user_id: Optional[str] = None) -> None:
        self.user_id = user_id

    def current_user_id(self) -> Optional[str]:
        return self.user_id


class SupabaseIdentity:
    """Resolves the acting user from a Supabase access token."""

    def __init__(self, access_token: Optional[str], client: Client | None = None) -> None:
        self.access_token = access_token
        self.client = client or get_supabase_client()
        self._resolved = False
        self._user_id: Optional[str] = None

    def current_user_id(self) -> Optional[str]:
        if self._resolved:
            return self._user_id
        self._resolved = True
        if not self.access_token or self.client is None:
            return None
        try:
            response = self.client.auth.get_user(self.access_token)
        except Exception as exc:
            # Invalid or expired tokens surface as auth API errors: treat as anonymous.
            logger.info(f"Access token rejected by Supabase auth: {exc}")
            return None
        user = getattr(response, "user", None)
        self._user_id = str(user.id) if user is not None else None
        return self._user_id

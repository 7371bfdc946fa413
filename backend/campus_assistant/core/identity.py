"""
Clerk Backend API client.

Only the calls this service needs: pushing a user's role into
``public_metadata`` so the frontend session reflects it.
Docs: https://clerk.com/docs/reference/backend-api
"""

import logging
import httpx

from campus_assistant.config import Settings
from campus_assistant.core.exceptions import IdentityProviderError

logger = logging.getLogger(__name__)


class ClerkClient:
    """Thin async wrapper over the Clerk Backend API."""

    def __init__(self, settings: Settings):
        self.api_url = settings.CLERK_API_URL.rstrip("/")
        self.secret_key = settings.CLERK_SECRET_KEY
        self.timeout = settings.IDENTITY_TIMEOUT

    async def update_user_role(self, user_id: str, role: str) -> None:
        """Set ``public_metadata.role`` on a Clerk user.

        Raises:
            IdentityProviderError: If Clerk is not configured, unreachable,
                or answers with a non-2xx status.
        """
        if not self.secret_key:
            raise IdentityProviderError("CLERK_SECRET_KEY not configured")

        url = f"{self.api_url}/users/{user_id}"
        headers = {"Authorization": f"Bearer {self.secret_key}"}
        payload = {"public_metadata": {"role": role}}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.patch(url, json=payload, headers=headers)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"❌ Clerk API error {e.response.status_code}: {e.response.text[:200]}")
            raise IdentityProviderError(f"Clerk rejected the update ({e.response.status_code})") from e
        except httpx.HTTPError as e:
            logger.error(f"❌ Failed to reach Clerk: {e}")
            raise IdentityProviderError("Clerk is unreachable") from e

        logger.info(f"✅ Clerk role set to '{role}' for user {user_id}")

"""
Auth feature: Role assignment and first-login profile sync.

Authentication itself is Clerk's job; this service mirrors the Clerk user
into the ``profiles`` table and keeps the role in both places.
"""

import logging

from supabase import Client

from campus_assistant.config import Settings
from campus_assistant.core.database import execute
from campus_assistant.core.exceptions import InvalidAccessCodeError
from campus_assistant.core.identity import ClerkClient
from campus_assistant.core.security import VALID_ROLES, verify_access_code
from campus_assistant.features.auth.schemas import ProfileUpdate, RoleUpdateRequest, SyncRequest

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "student"


class AuthService:
    """Handles role updates and profile synchronization."""

    def __init__(self, db: Client, identity: ClerkClient, settings: Settings):
        self.db = db
        self.identity = identity
        self.settings = settings

    async def update_role(self, user_id: str, data: RoleUpdateRequest) -> str:
        """Set the user's role in Clerk and in the profile.

        Every check runs before any external write.

        Raises:
            ValueError: If the role is not one of student/faculty/admin.
            InvalidAccessCodeError: If a privileged role's code does not match.
            IdentityProviderError: If Clerk rejects the update.
        """
        if data.role not in VALID_ROLES:
            raise ValueError("Invalid role")

        if not verify_access_code(data.role, data.code, self.settings):
            logger.warning(f"Rejected '{data.role}' access code for user {user_id}")
            raise InvalidAccessCodeError(data.role)

        await self.identity.update_user_role(user_id, data.role)

        changes = ProfileUpdate(
            role=data.role,
            department=data.department or None,
            year=data.year or None,
            section=data.section or None,
        )
        await execute(
            self.db.table("profiles")
            .update(changes.model_dump(exclude_none=True))
            .eq("id", user_id)
        )
        logger.info(f"✅ Role for {user_id} set to '{data.role}'")
        return data.role

    async def sync_user(self, user_id: str, data: SyncRequest) -> dict:
        """Return the stored profile, creating it on first login.

        The stored role is the source of truth; client input never sets it.
        """
        rows = await execute(
            self.db.table("profiles").select("*").eq("id", user_id).limit(1)
        )
        if rows:
            return rows[0]

        new_profile = {
            "id": user_id,
            "email": data.email,
            "full_name": data.full_name,
            "avatar_url": data.avatar_url,
            "role": DEFAULT_ROLE,
        }
        # a concurrent first login may have inserted the row already
        await execute(
            self.db.table("profiles").upsert(new_profile, on_conflict="id", ignore_duplicates=True)
        )
        rows = await execute(
            self.db.table("profiles").select("*").eq("id", user_id).limit(1)
        )
        logger.info(f"✅ Profile ready for {user_id}")
        return rows[0]

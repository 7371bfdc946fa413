"""
Auth feature: Pydantic schemas for request/response models.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field


# ── Requests ─────────────────────────────────────────────
class RoleUpdateRequest(BaseModel):
    role: str
    code: str | None = None  # access code, required for faculty/admin
    department: str | None = None
    year: str | int | None = None
    section: str | None = None


class SyncRequest(BaseModel):
    email: EmailStr | None = None
    full_name: str | None = Field(None, alias="fullName")
    avatar_url: str | None = Field(None, alias="avatarUrl")

    model_config = ConfigDict(populate_by_name=True)


class ProfileUpdate(BaseModel):
    """Partial profile update; unset fields keep their stored value."""
    role: str | None = None
    department: str | None = None
    year: str | int | None = None
    section: str | None = None


# ── Responses ────────────────────────────────────────────
class ProfileResponse(BaseModel):
    id: str
    email: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    role: str = "student"
    department: str | None = None
    year: str | int | None = None
    section: str | None = None


class RoleUpdateResponse(BaseModel):
    message: str
    role: str

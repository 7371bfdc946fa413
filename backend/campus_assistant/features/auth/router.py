"""
Auth feature: API routes.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from campus_assistant.core.dependencies import get_auth_service, get_current_user_id
from campus_assistant.core.exceptions import InvalidAccessCodeError
from campus_assistant.features.auth.schemas import (
    ProfileResponse,
    RoleUpdateRequest,
    RoleUpdateResponse,
    SyncRequest,
)
from campus_assistant.features.auth.service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/role", response_model=RoleUpdateResponse)
async def update_role(
    data: RoleUpdateRequest,
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    """Choose a role; faculty and admin need their access code."""
    try:
        role = await service.update_role(user_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except InvalidAccessCodeError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=e.message)
    except Exception as e:
        logger.error(f"Error updating role: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to update role")
    return RoleUpdateResponse(message="Role updated successfully", role=role)


@router.post("/sync", response_model=ProfileResponse)
async def sync_user(
    data: SyncRequest,
    user_id: str = Depends(get_current_user_id),
    service: AuthService = Depends(get_auth_service),
):
    """Mirror the signed-in user into ``profiles`` and return the stored profile."""
    try:
        return await service.sync_user(user_id, data)
    except Exception as e:
        logger.error(f"Error syncing user: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Failed to sync user")

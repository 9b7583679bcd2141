"""
User management routes — listing, profile, update, delete.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from auth.dependencies import get_current_user, get_lifecycle, require_admin
from auth.models import PublicUser, UserRecord
from core.user_lifecycle import UserLifecycleManager

router = APIRouter(tags=["users"])


class UpdateUserRequest(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: Optional[str] = Field(None, min_length=1, max_length=128)
    email: Optional[str] = Field(
        None, min_length=3, max_length=255, validation_alias=AliasChoices("email", "semail")
    )


class MessageResponse(BaseModel):
    message: str


@router.get("/users", response_model=List[PublicUser])
async def list_users(
    _admin: UserRecord = Depends(require_admin),
    lifecycle: UserLifecycleManager = Depends(get_lifecycle),
) -> List[PublicUser]:
    """All users, newest first (admin only)."""
    return await lifecycle.list_all()


@router.get("/profile", response_model=PublicUser)
async def get_profile(
    user: UserRecord = Depends(get_current_user),
    lifecycle: UserLifecycleManager = Depends(get_lifecycle),
) -> PublicUser:
    return await lifecycle.profile(user)


@router.put("/users/{user_id}", response_model=PublicUser)
async def update_user(
    user_id: str,
    req: UpdateUserRequest,
    user: UserRecord = Depends(get_current_user),
    lifecycle: UserLifecycleManager = Depends(get_lifecycle),
) -> PublicUser:
    """Admins can update anyone; students only themselves."""
    return await lifecycle.update_user(user, user_id, req.model_dump(exclude_unset=True))


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    user_id: str,
    admin: UserRecord = Depends(require_admin),
    lifecycle: UserLifecycleManager = Depends(get_lifecycle),
) -> Dict[str, Any]:
    await lifecycle.delete_user(admin, user_id)
    return {"message": "User deleted successfully"}

from __future__ import annotations
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...models.users import User
from ...services.profile_services import update_user_profile
from ..deps import get_current_user
from ..schemas import ProfileUpdate

router = APIRouter(prefix="/api/profile", tags=["profile"])


@router.get("")
@router.get("/", include_in_schema=False)
async def get_profile(user: User = Depends(get_current_user)):
    return {"success": True, "data": user.to_public_dict()}


@router.put("")
@router.put("/", include_in_schema=False)
async def put_profile(
    body: ProfileUpdate,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    updated = await update_user_profile(session, user, body.model_dump(exclude_unset=True))
    return {"success": True, "data": updated.to_public_dict(), "message": "Profile updated"}

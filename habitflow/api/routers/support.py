from __future__ import annotations
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...models.users import User
from ...services.support_service import SupportService
from ..deps import get_current_user
from ..schemas import SupportIn

router = APIRouter(prefix="/api/support", tags=["support"])


@router.post("", status_code=status.HTTP_201_CREATED)
@router.post("/", status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_message(
    body: SupportIn,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    msg = await SupportService.create_message(
        session,
        user.id,
        name=body.name or user.name,
        email=body.email or user.email,
        message=body.message or "",
        category=body.category,
    )
    return {"success": True, "data": msg.to_dict(), "message": "Message received"}


@router.get("")
@router.get("/", include_in_schema=False)
async def list_messages(user: User = Depends(get_current_user), session: AsyncSession = Depends(session_dependency)):
    messages = await SupportService.list_messages(session, user.id)
    return {"success": True, "data": [m.to_dict() for m in messages]}

from __future__ import annotations
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...db import session_dependency
from ...models.users import User
from ...notifications.email import EmailDispatcher
from ...services.account_service import AccountService
from ..deps import get_current_user, get_dispatcher
from ..schemas import ChangePasswordIn, ForgotPasswordIn, LoginIn, ResetPasswordIn, SignupIn

router = APIRouter(prefix="/api/auth", tags=["auth"])


def _auth_payload(user: User, token: str) -> dict:
    return {
        "success": True,
        "data": {
            "token": token,
            "user": {"id": user.id, "name": user.name, "email": user.email},
        },
    }


@router.post("/signup", status_code=status.HTTP_201_CREATED)
async def signup(body: SignupIn, session: AsyncSession = Depends(session_dependency)):
    user, token = await AccountService.signup(session, body.name, body.email, body.password)
    return _auth_payload(user, token)


@router.post("/login")
async def login(body: LoginIn, session: AsyncSession = Depends(session_dependency)):
    user, token = await AccountService.login(session, body.email, body.password)
    return _auth_payload(user, token)


@router.get("/me")
async def me(user: User = Depends(get_current_user)):
    return {"success": True, "data": user.to_public_dict()}


@router.post("/change-password")
async def change_password(
    body: ChangePasswordIn,
    user: User = Depends(get_current_user),
    session: AsyncSession = Depends(session_dependency),
):
    await AccountService.change_password(session, user, body.current_password, body.new_password)
    return {"success": True, "message": "Password updated successfully"}


@router.post("/forgot-password")
async def forgot_password(
    body: ForgotPasswordIn,
    session: AsyncSession = Depends(session_dependency),
    dispatcher: EmailDispatcher = Depends(get_dispatcher),
):
    await AccountService.request_password_reset(session, body.email or "", dispatcher)
    return {"success": True, "message": "If an account exists for that email, a reset link has been sent"}


@router.post("/reset-password")
async def reset_password(body: ResetPasswordIn, session: AsyncSession = Depends(session_dependency)):
    await AccountService.reset_password(session, body.token, body.new_password)
    return {"success": True, "message": "Password has been reset"}

from __future__ import annotations
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select
from loguru import logger

from ..models.support import SupportMessage, SUPPORT_CATEGORIES


class SupportService:
    @staticmethod
    async def create_message(
        session: AsyncSession,
        user_id: Optional[int],
        name: str,
        email: str,
        message: str,
        category: Optional[str] = None,
    ) -> SupportMessage:
        if not name or not email or not message or not message.strip():
            raise ValueError("Name, email and message are required")
        category = category or "Other"
        if category not in SUPPORT_CATEGORIES:
            raise ValueError(f"category must be one of: {', '.join(SUPPORT_CATEGORIES)}")

        msg = SupportMessage(
            user_id=user_id,
            name=name.strip(),
            email=email.strip(),
            category=category,
            message=message.strip(),
        )
        session.add(msg)
        await session.flush()
        logger.info("Stored support message {} ({}) from user {}", msg.id, category, user_id)
        return msg

    @staticmethod
    async def list_messages(session: AsyncSession, user_id: int) -> List[SupportMessage]:
        result = await session.execute(
            select(SupportMessage)
            .where(SupportMessage.user_id == user_id)
            .order_by(SupportMessage.created_at.desc(), SupportMessage.id.desc())
        )
        return list(result.scalars().all())

'''
Approval status for the pending-approval polling page.
'''
import time
from typing import Annotated, Callable
from uuid import UUID

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..common.config import settings
from ..common.logger import log
from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import profile as profile_models

DASHBOARD_PATH = "/dashboard"
PENDING_APPROVAL_PATH = "/pending-approval"


class ApprovalCache:
    """
    Remembers, per user id, that an account was seen approved. Only positive
    results are stored so an approval flip shows up on the next poll.
    """
    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._approved_until: dict[UUID, float] = {}

    def is_approved(self, user_id: UUID) -> bool:
        expires = self._approved_until.get(user_id)
        if expires is None:
            return False
        if self._clock() >= expires:
            del self._approved_until[user_id]
            return False
        return True

    def mark_approved(self, user_id: UUID) -> None:
        self._approved_until[user_id] = self._clock() + self.ttl_seconds

    def invalidate(self, user_id: UUID) -> None:
        self._approved_until.pop(user_id, None)

    def clear(self) -> None:
        self._approved_until.clear()


approval_cache = ApprovalCache(settings.APPROVAL_CACHE_TTL_SECONDS)


class ApprovalService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db
        self.cache = approval_cache

    async def is_approved(self, user_id: UUID) -> bool:
        if self.cache.is_approved(user_id):
            return True

        result = await self.db.execute(
            select(db_models.Profiles.is_approved).filter(db_models.Profiles.id == user_id)
        )
        approved = bool(result.scalar())
        if approved:
            self.cache.mark_approved(user_id)
        return approved

    async def get_status(self, user_id: UUID) -> profile_models.ApprovalStatusRead:
        approved = await self.is_approved(user_id)
        log.info(f"Approval status for {user_id}: {approved}")
        return profile_models.ApprovalStatusRead(
            is_approved=approved,
            redirect_to=DASHBOARD_PATH if approved else PENDING_APPROVAL_PATH,
            poll_interval_seconds=settings.APPROVAL_POLL_INTERVAL_SECONDS,
        )

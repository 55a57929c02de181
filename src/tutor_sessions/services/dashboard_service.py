'''

'''
from datetime import datetime
from typing import Annotated, Optional
from fastapi import Depends
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import SessionStatusEnum
from ..models import dashboard as dashboard_models
from ..models.sessions import as_utc
from ..common.logger import log


class DashboardService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def _count(self, stmt) -> int:
        result = await self.db.execute(stmt)
        return int(result.scalar() or 0)

    async def get_stats(self, now: Optional[datetime] = None) -> dashboard_models.DashboardStats:
        """Headline numbers for the dashboard page."""
        now = as_utc(now) if now else db_models.utcnow()
        month_start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)

        count_students = select(func.count(db_models.Students.id))
        count_sessions = select(func.count(db_models.Sessions.id))

        stats = dashboard_models.DashboardStats(
            total_students=await self._count(count_students),
            active_students=await self._count(
                count_students.filter(db_models.Students.is_active.is_(True))
            ),
            upcoming_sessions=await self._count(
                count_sessions.filter(
                    db_models.Sessions.status == SessionStatusEnum.SCHEDULED.value,
                    db_models.Sessions.scheduled_start_at >= now
                )
            ),
            completed_this_month=await self._count(
                count_sessions.filter(
                    db_models.Sessions.status == SessionStatusEnum.COMPLETED.value,
                    db_models.Sessions.scheduled_start_at >= month_start
                )
            ),
        )
        log.info(f"Dashboard stats: {stats.model_dump()}")
        return stats

import pytest
from datetime import datetime, timedelta, timezone

from tutor_sessions.database.db_enums import SessionStatusEnum
from tutor_sessions.services.dashboard_service import DashboardService

NOW = datetime(2030, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.mark.anyio
class TestDashboardService:

    async def test_empty_database(self, dashboard_service: DashboardService):
        stats = await dashboard_service.get_stats(now=NOW)
        assert stats.model_dump() == {
            "total_students": 0,
            "active_students": 0,
            "upcoming_sessions": 0,
            "completed_this_month": 0,
        }

    async def test_counts(self, dashboard_service: DashboardService, make_student, make_session):
        student = await make_student()
        await make_student(is_active=False)

        def at(delta: timedelta) -> dict:
            return {"scheduled_start_at": NOW + delta, "scheduled_end_at": NOW + delta + timedelta(hours=1)}

        await make_session(student, **at(timedelta(days=1)))
        await make_session(student, **at(timedelta(days=2)))
        # Scheduled but already in the past: not upcoming.
        await make_session(student, **at(-timedelta(days=1)))
        await make_session(student, status=SessionStatusEnum.CANCELED.value, **at(timedelta(days=3)))
        await make_session(student, status=SessionStatusEnum.COMPLETED.value, **at(-timedelta(days=2)))
        # Last month.
        await make_session(student, status=SessionStatusEnum.COMPLETED.value, **at(-timedelta(days=20)))

        stats = await dashboard_service.get_stats(now=NOW)

        print(stats)
        assert stats.total_students == 2
        assert stats.active_students == 1
        assert stats.upcoming_sessions == 2
        assert stats.completed_this_month == 1

import pytest
import datetime
from datetime import timedelta, timezone
from decimal import Decimal
from fastapi import HTTPException
from sqlalchemy import select

from tutor_sessions.database import models as db_models
from tutor_sessions.database.db_enums import (
    SessionStatusEnum, LedgerEntryTypeEnum, ReminderStatusEnum,
    WhatsAppNotificationStatusEnum, WhatsAppReminderOptionEnum
)
from tutor_sessions.models import sessions as session_models
from tutor_sessions.models import meetings as meeting_models
from tutor_sessions.models.sessions import as_utc
from tutor_sessions.services.session_service import SessionService, compute_session_charge
from tutor_sessions.common.exceptions import ZoomIntegrationError

START = datetime.datetime(2030, 3, 10, 15, 0, tzinfo=timezone.utc)


def session_request(student_id, **kwargs) -> session_models.SessionCreate:
    data = {
        "student_id": student_id,
        "scheduled_start_at": START,
        "scheduled_end_at": START + timedelta(hours=1, minutes=30),
    }
    data.update(kwargs)
    return session_models.SessionCreate(**data)


async def charges_for(db_session, session_id) -> list[db_models.LedgerEntries]:
    result = await db_session.execute(
        select(db_models.LedgerEntries).filter(db_models.LedgerEntries.session_id == session_id)
    )
    return list(result.scalars().all())


class TestComputeSessionCharge:

    def test_one_and_a_half_hours(self):
        assert compute_session_charge(START, START + timedelta(minutes=90), Decimal("25.00")) == Decimal("-37.50")

    def test_rounds_half_up_to_cents(self):
        # 6 minutes at 0.05/h = 0.005 -> 0.01
        assert compute_session_charge(START, START + timedelta(minutes=6), Decimal("0.05")) == Decimal("-0.01")

    def test_accepts_naive_database_datetimes(self):
        naive = START.replace(tzinfo=None)
        assert compute_session_charge(naive, naive + timedelta(hours=2), Decimal("30")) == Decimal("-60.00")

    def test_end_before_start_is_rejected(self):
        with pytest.raises(ValueError, match="must be after"):
            session_request("00000000-0000-0000-0000-000000000001", scheduled_end_at=START - timedelta(minutes=1))


@pytest.mark.anyio
class TestCreateSession:

    async def test_create_basic_session(self, session_service: SessionService, test_student, approved_user):
        session, warning = await session_service.create_session(session_request(test_student.id), approved_user)

        assert warning is None
        assert session.status == SessionStatusEnum.SCHEDULED.value
        assert session.created_by == approved_user.id
        assert session.reminder_jobs == []
        assert session.whatsapp_notification_status == WhatsAppNotificationStatusEnum.NONE.value

    async def test_reminders_are_scheduled_before_start(self, session_service: SessionService, test_student, approved_user):
        session, _ = await session_service.create_session(
            session_request(test_student.id, whatsapp_reminder_options=WhatsAppReminderOptionEnum.MINUTES_30_AND_5),
            approved_user
        )

        times = sorted(as_utc(job.scheduled_for) for job in session.reminder_jobs)
        assert times == [START - timedelta(minutes=30), START - timedelta(minutes=5)]
        assert all(job.status == ReminderStatusEnum.PENDING.value for job in session.reminder_jobs)
        assert session.whatsapp_notification_status == WhatsAppNotificationStatusEnum.PENDING.value

    async def test_inactive_student_is_rejected(self, session_service: SessionService, make_student, approved_user):
        student = await make_student(is_active=False)

        with pytest.raises(HTTPException) as e:
            await session_service.create_session(session_request(student.id), approved_user)

        assert e.value.status_code == 400

    async def test_zoom_meeting_is_attached(
        self, session_service: SessionService, mock_zoom_manager, test_student, approved_user
    ):
        mock_zoom_manager.create_meeting.return_value = meeting_models.ZoomMeetingRead(
            id="8123456789", join_url="https://zoom.us/j/8123456789", start_url="https://zoom.us/s/8123456789"
        )

        session, warning = await session_service.create_session(
            session_request(test_student.id, create_zoom_meeting=True), approved_user
        )

        assert warning is None
        assert session.zoom_join_url == "https://zoom.us/j/8123456789"
        meeting_request = mock_zoom_manager.create_meeting.await_args.args[1]
        assert meeting_request.duration == 90
        assert test_student.full_name in meeting_request.topic

    async def test_zoom_failure_still_creates_session(
        self, session_service: SessionService, mock_zoom_manager, test_student, approved_user, db_session
    ):
        mock_zoom_manager.create_meeting.side_effect = ZoomIntegrationError("Invalid client_id or client_secret", status_code=401)

        session, warning = await session_service.create_session(
            session_request(test_student.id, create_zoom_meeting=True), approved_user
        )

        assert "Invalid client_id" in warning
        assert session.zoom_meeting_id is None
        assert await db_session.get(db_models.Sessions, session.id) is not None


@pytest.mark.anyio
class TestCompleteSession:

    async def test_complete_books_one_charge(
        self, session_service: SessionService, ledger_service, test_student, make_session, approved_user, db_session
    ):
        session = await make_session(test_student, scheduled_start_at=START, scheduled_end_at=START + timedelta(minutes=90))

        completed = await session_service.complete_session(session.id, session_models.SessionComplete(), approved_user)

        assert completed.status == SessionStatusEnum.COMPLETED.value
        charges = await charges_for(db_session, session.id)
        assert len(charges) == 1
        assert charges[0].type == LedgerEntryTypeEnum.SESSION_CHARGE.value
        assert charges[0].amount == Decimal("-37.50")
        assert await ledger_service.get_student_balance(test_student.id) == Decimal("-37.50")

    async def test_completing_twice_is_409_and_charges_once(
        self, session_service: SessionService, test_student, make_session, approved_user, db_session
    ):
        session = await make_session(test_student)
        await session_service.complete_session(session.id, session_models.SessionComplete(), approved_user)

        with pytest.raises(HTTPException) as e:
            await session_service.complete_session(session.id, session_models.SessionComplete(), approved_user)

        assert e.value.status_code == 409
        assert len(await charges_for(db_session, session.id)) == 1

    async def test_actual_times_drive_the_charge(
        self, session_service: SessionService, test_student, make_session, approved_user, db_session
    ):
        session = await make_session(test_student, scheduled_start_at=START, scheduled_end_at=START + timedelta(hours=1))

        completed = await session_service.complete_session(
            session.id,
            session_models.SessionComplete(actual_start_at=START, actual_end_at=START + timedelta(hours=2)),
            approved_user
        )

        assert as_utc(completed.actual_end_at) == START + timedelta(hours=2)
        charges = await charges_for(db_session, session.id)
        assert charges[0].amount == Decimal("-50.00")

    async def test_free_student_books_no_entry(
        self, session_service: SessionService, make_student, make_session, approved_user, db_session
    ):
        student = await make_student(price_per_hour=Decimal("0.00"))
        session = await make_session(student)

        completed = await session_service.complete_session(session.id, session_models.SessionComplete(), approved_user)

        assert completed.status == SessionStatusEnum.COMPLETED.value
        assert await charges_for(db_session, session.id) == []

    async def test_cannot_complete_canceled_session(
        self, session_service: SessionService, test_student, make_session, approved_user
    ):
        session = await make_session(test_student, status=SessionStatusEnum.CANCELED.value)

        with pytest.raises(HTTPException) as e:
            await session_service.complete_session(session.id, session_models.SessionComplete(), approved_user)

        assert e.value.status_code == 409


@pytest.mark.anyio
class TestCloseSession:

    async def test_cancel_fails_pending_reminders(
        self, session_service: SessionService, test_student, make_session, make_job, db_session
    ):
        session = await make_session(
            test_student, whatsapp_notification_status=WhatsAppNotificationStatusEnum.PENDING.value
        )
        pending = await make_job(session)
        sent = await make_job(session, status=ReminderStatusEnum.SENT.value)

        canceled = await session_service.cancel_session(session.id)

        assert canceled.status == SessionStatusEnum.CANCELED.value
        await db_session.refresh(pending)
        await db_session.refresh(sent)
        assert pending.status == ReminderStatusEnum.FAILED.value
        assert pending.last_error == "Session canceled"
        assert sent.status == ReminderStatusEnum.SENT.value
        assert canceled.whatsapp_notification_status == WhatsAppNotificationStatusEnum.FAILED.value

    async def test_no_show_fails_pending_reminders(
        self, session_service: SessionService, test_student, make_session, make_job, db_session
    ):
        session = await make_session(test_student)
        job = await make_job(session)

        marked = await session_service.mark_no_show(session.id)

        assert marked.status == SessionStatusEnum.NO_SHOW.value
        await db_session.refresh(job)
        assert job.last_error == "Session marked as no-show"

    async def test_cannot_cancel_completed_session(self, session_service: SessionService, test_student, make_session):
        session = await make_session(test_student, status=SessionStatusEnum.COMPLETED.value)

        with pytest.raises(HTTPException) as e:
            await session_service.cancel_session(session.id)

        assert e.value.status_code == 409


@pytest.mark.anyio
class TestUpdateAndList:

    async def test_moving_start_moves_pending_reminders(
        self, session_service: SessionService, test_student, make_session, make_job
    ):
        session = await make_session(test_student, scheduled_start_at=START, scheduled_end_at=START + timedelta(hours=1))
        job = await make_job(session, scheduled_for=START - timedelta(minutes=15))

        updated = await session_service.update_session(
            session.id,
            session_models.SessionUpdate(
                scheduled_start_at=START + timedelta(days=1),
                scheduled_end_at=START + timedelta(days=1, hours=1),
            )
        )

        assert as_utc(updated.scheduled_start_at) == START + timedelta(days=1)
        assert as_utc(job.scheduled_for) == START + timedelta(days=1) - timedelta(minutes=15)

    async def test_update_rejects_inverted_window(self, session_service: SessionService, test_student, make_session):
        session = await make_session(test_student, scheduled_start_at=START, scheduled_end_at=START + timedelta(hours=1))

        with pytest.raises(HTTPException) as e:
            await session_service.update_session(
                session.id, session_models.SessionUpdate(scheduled_start_at=START + timedelta(hours=2))
            )

        assert e.value.status_code == 400

    async def test_list_filters_and_orders_newest_first(
        self, session_service: SessionService, make_student, make_session
    ):
        alice = await make_student()
        bob = await make_student()
        early = await make_session(alice, scheduled_start_at=START, scheduled_end_at=START + timedelta(hours=1))
        late = await make_session(alice, scheduled_start_at=START + timedelta(days=2), scheduled_end_at=START + timedelta(days=2, hours=1))
        await make_session(bob)
        await make_session(alice, status=SessionStatusEnum.CANCELED.value)

        sessions = await session_service.list_sessions(student_id=alice.id, status_filter=SessionStatusEnum.SCHEDULED)

        assert [s.id for s in sessions] == [late.id, early.id]

    async def test_delete_session(self, session_service: SessionService, test_student, make_session, db_session):
        session = await make_session(test_student)

        await session_service.delete_session(session.id)

        assert await db_session.get(db_models.Sessions, session.id) is None

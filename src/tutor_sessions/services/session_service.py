'''

'''
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import (
    SessionStatusEnum,
    LedgerEntryTypeEnum,
    ReminderStatusEnum,
    WhatsAppNotificationStatusEnum,
    WhatsAppReminderOptionEnum,
)
from ..models import sessions as session_models
from ..models import ledger as ledger_models
from ..models import meetings as meeting_models
from ..models.sessions import as_utc
from ..common.exceptions import ZoomIntegrationError
from ..common.logger import log
from .student_service import StudentService
from .ledger_service import LedgerService, CENTS
from .zoom_service import ZoomMeetingManager

SECONDS_PER_HOUR = Decimal(3600)


def compute_session_charge(
    start: datetime,
    end: datetime,
    price_per_hour: Decimal
) -> Decimal:
    """
    Negative charge for a session: duration in hours times the hourly price,
    rounded half-up to cents.
    """
    seconds = Decimal(str((as_utc(end) - as_utc(start)).total_seconds()))
    amount = (seconds / SECONDS_PER_HOUR) * Decimal(str(price_per_hour))
    return -amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class SessionService:
    """
    Scheduling and the session lifecycle. A session starts SCHEDULED and
    moves once to COMPLETED, CANCELED or NO_SHOW.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        student_service: Annotated[StudentService, Depends(StudentService)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ):
        self.db = db
        self.student_service = student_service
        self.ledger_service = ledger_service
        self.zoom_manager = ZoomMeetingManager()

    # --- Internal helpers ---

    async def get_session(self, session_id: UUID) -> db_models.Sessions:
        stmt = select(db_models.Sessions).options(
            selectinload(db_models.Sessions.student),
            selectinload(db_models.Sessions.reminder_jobs)
        ).filter(db_models.Sessions.id == session_id)
        result = await self.db.execute(stmt)
        session = result.scalars().first()
        if not session:
            log.warning(f"Tried to fetch non-existent session id: {session_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found.")
        return session

    def _require_scheduled(self, session: db_models.Sessions, action: str) -> None:
        if session.status == SessionStatusEnum.SCHEDULED.value:
            return
        log.warning(f"Refused to {action} session {session.id} in status {session.status}.")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Cannot {action} a session that is {session.status.lower().replace('_', '-')}."
        )

    def _schedule_reminders(
        self,
        session: db_models.Sessions,
        option: WhatsAppReminderOptionEnum
    ) -> list[db_models.ReminderJobs]:
        start = as_utc(session.scheduled_start_at)
        jobs = [
            db_models.ReminderJobs(session=session, scheduled_for=start - timedelta(minutes=offset))
            for offset in option.offsets_minutes
        ]
        self.db.add_all(jobs)
        session.whatsapp_notification_status = (
            WhatsAppNotificationStatusEnum.PENDING.value if jobs else WhatsAppNotificationStatusEnum.NONE.value
        )
        return jobs

    async def _fail_pending_reminders(self, session: db_models.Sessions, reason: str) -> None:
        """Pending jobs of a closed session must never send."""
        await self.db.execute(
            update(db_models.ReminderJobs)
            .where(
                db_models.ReminderJobs.session_id == session.id,
                db_models.ReminderJobs.status == ReminderStatusEnum.PENDING.value
            )
            .values(status=ReminderStatusEnum.FAILED.value, last_error=reason)
        )
        if session.whatsapp_notification_status == WhatsAppNotificationStatusEnum.PENDING.value:
            session.whatsapp_notification_status = WhatsAppNotificationStatusEnum.FAILED.value
            session.whatsapp_last_error = reason

    # --- Public API ---

    async def list_sessions(
        self,
        student_id: Optional[UUID] = None,
        status_filter: Optional[SessionStatusEnum] = None
    ) -> list[db_models.Sessions]:
        stmt = select(db_models.Sessions).options(
            selectinload(db_models.Sessions.student)
        ).order_by(db_models.Sessions.scheduled_start_at.desc())
        if student_id:
            stmt = stmt.filter(db_models.Sessions.student_id == student_id)
        if status_filter:
            stmt = stmt.filter(db_models.Sessions.status == status_filter.value)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_session(
        self,
        data: session_models.SessionCreate,
        current_user: db_models.Profiles
    ) -> tuple[db_models.Sessions, Optional[str]]:
        """
        Schedules a session. Returns the session and, when a requested Zoom
        meeting could not be created, a warning text. A Zoom failure never
        prevents the session from being saved.
        """
        student = await self.student_service.get_student_by_id(data.student_id)
        if not student.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot schedule a session for an inactive student."
            )

        session = db_models.Sessions(
            student=student,
            status=SessionStatusEnum.SCHEDULED.value,
            scheduled_start_at=data.scheduled_start_at,
            scheduled_end_at=data.scheduled_end_at,
            notes=data.notes,
            created_by=current_user.id,
            whatsapp_reminder_options=data.whatsapp_reminder_options.value,
            whatsapp_notification_status=WhatsAppNotificationStatusEnum.NONE.value,
            reminder_jobs=[],
        )

        zoom_warning = None
        if data.create_zoom_meeting:
            minutes = int((data.scheduled_end_at - data.scheduled_start_at).total_seconds() // 60)
            try:
                meeting = await self.zoom_manager.create_meeting(
                    current_user,
                    meeting_models.ZoomMeetingCreate(
                        start_time=data.scheduled_start_at,
                        duration=max(minutes, 1),
                        topic=f"Tutoring session with {student.full_name}",
                    )
                )
                session.zoom_meeting_id = meeting.id
                session.zoom_join_url = meeting.join_url
                session.zoom_start_url = meeting.start_url
            except ZoomIntegrationError as e:
                log.warning(f"Session for student {student.id} saved without Zoom meeting: {e.message}")
                zoom_warning = f"Session created, but the Zoom meeting could not be created: {e.message}"

        self.db.add(session)
        self._schedule_reminders(session, data.whatsapp_reminder_options)
        await self.db.flush()
        log.info(f"Created session {session.id} for student {student.id} with {len(session.reminder_jobs)} reminder(s).")
        return session, zoom_warning

    async def update_session(
        self,
        session_id: UUID,
        data: session_models.SessionUpdate
    ) -> db_models.Sessions:
        session = await self.get_session(session_id)
        self._require_scheduled(session, "edit")
        update_data = data.model_dump(exclude_unset=True)

        old_start = as_utc(session.scheduled_start_at)
        new_start = update_data.get("scheduled_start_at") or old_start
        new_end = update_data.get("scheduled_end_at") or as_utc(session.scheduled_end_at)
        if new_end <= new_start:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="scheduled_end_at must be after scheduled_start_at"
            )

        session.scheduled_start_at = new_start
        session.scheduled_end_at = new_end
        if "notes" in update_data:
            session.notes = update_data["notes"]

        # Pending reminders keep their offset from the (possibly moved) start.
        shift = new_start - old_start
        if shift:
            for job in session.reminder_jobs:
                if job.status == ReminderStatusEnum.PENDING.value:
                    job.scheduled_for = as_utc(job.scheduled_for) + shift

        await self.db.flush()
        log.info(f"Updated session {session_id}: {list(update_data)}")
        return session

    async def delete_session(self, session_id: UUID) -> None:
        session = await self.get_session(session_id)
        await self.db.delete(session)
        await self.db.flush()
        log.info(f"Deleted session {session_id}.")

    async def complete_session(
        self,
        session_id: UUID,
        data: session_models.SessionComplete,
        current_user: db_models.Profiles
    ) -> db_models.Sessions:
        """
        Marks a session COMPLETED and books its charge. Completing a session
        twice is refused, so each session is charged at most once.
        """
        session = await self.get_session(session_id)
        self._require_scheduled(session, "complete")

        session.status = SessionStatusEnum.COMPLETED.value
        if data.actual_start_at:
            session.actual_start_at = data.actual_start_at
        if data.actual_end_at:
            session.actual_end_at = data.actual_end_at

        if session.actual_start_at and session.actual_end_at:
            start, end = session.actual_start_at, session.actual_end_at
        else:
            start, end = session.scheduled_start_at, session.scheduled_end_at

        amount = compute_session_charge(start, end, session.student.price_per_hour)
        if amount:
            await self.ledger_service.create_entry(
                ledger_models.LedgerEntryCreate(
                    student_id=session.student_id,
                    type=LedgerEntryTypeEnum.SESSION_CHARGE,
                    amount=amount,
                    reference=f"Session on {as_utc(session.scheduled_start_at):%Y-%m-%d %H:%M} UTC",
                ),
                current_user=current_user,
                session_id=session.id,
            )
        else:
            log.info(f"Session {session_id} completed with a zero charge; no ledger entry booked.")

        await self._fail_pending_reminders(session, "Session completed")
        await self.db.flush()
        log.info(f"Completed session {session_id}, charge {amount}.")
        return session

    async def cancel_session(self, session_id: UUID) -> db_models.Sessions:
        session = await self.get_session(session_id)
        self._require_scheduled(session, "cancel")
        session.status = SessionStatusEnum.CANCELED.value
        await self._fail_pending_reminders(session, "Session canceled")
        await self.db.flush()
        log.info(f"Canceled session {session_id}.")
        return session

    async def mark_no_show(self, session_id: UUID) -> db_models.Sessions:
        session = await self.get_session(session_id)
        self._require_scheduled(session, "mark as no-show")
        session.status = SessionStatusEnum.NO_SHOW.value
        await self._fail_pending_reminders(session, "Session marked as no-show")
        await self.db.flush()
        log.info(f"Session {session_id} marked as no-show.")
        return session

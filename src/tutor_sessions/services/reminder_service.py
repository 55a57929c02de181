'''
WhatsApp reminder dispatch.

Due jobs are claimed one at a time with a conditional PENDING -> IN_PROGRESS
update that is committed before the message is sent, so two dispatchers
running at once never send the same reminder.
'''
import json
from datetime import datetime, timedelta
from typing import Optional, Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import (
    ReminderStatusEnum, ReminderChannelEnum, SessionStatusEnum, WhatsAppNotificationStatusEnum
)
from ..models import reminders as reminder_models
from ..models.sessions import as_utc
from ..common.config import settings
from ..common.exceptions import WhatsAppSendError
from ..common.logger import log
from .whatsapp_service import WhatsAppClient, resolve_credentials


def compose_reminder_message(session: db_models.Sessions, student: Optional[db_models.Students]) -> str:
    start = as_utc(session.scheduled_start_at)
    lines = [
        f"Reminder: Your tutoring session starts at {start:%Y-%m-%d %H:%M} UTC.",
        f"Student: {(student.full_name if student else '') or 'Student'}",
    ]
    if session.zoom_join_url:
        lines.append(f"Zoom: {session.zoom_join_url}")
    return "\n".join(lines)


class ReminderDispatchService:
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db
        self.whatsapp = WhatsAppClient()

    async def list_jobs(
        self,
        status_filter: Optional[ReminderStatusEnum] = None
    ) -> list[db_models.ReminderJobs]:
        stmt = select(db_models.ReminderJobs).order_by(db_models.ReminderJobs.scheduled_for.desc())
        if status_filter:
            stmt = stmt.filter(db_models.ReminderJobs.status == status_filter.value)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    def _is_stale_claim(self, job: db_models.ReminderJobs, now: datetime) -> bool:
        timeout = timedelta(minutes=settings.REMINDER_CLAIM_TIMEOUT_MINUTES)
        return (
            job.status == ReminderStatusEnum.IN_PROGRESS.value
            and job.updated_at is not None
            and as_utc(job.updated_at) <= now - timeout
        )

    async def requeue_job(self, job_id: UUID, now: Optional[datetime] = None) -> db_models.ReminderJobs:
        """
        Puts a job back in the queue for the next dispatch pass. Accepts FAILED
        jobs, and IN_PROGRESS jobs whose dispatcher died before finishing
        (claimed more than REMINDER_CLAIM_TIMEOUT_MINUTES ago). The session
        must still be scheduled.
        """
        now = as_utc(now) if now else db_models.utcnow()
        job = await self.db.get(
            db_models.ReminderJobs, job_id,
            options=[selectinload(db_models.ReminderJobs.session)],
            populate_existing=True,
        )
        if not job:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reminder job not found.")
        if job.status != ReminderStatusEnum.FAILED.value and not self._is_stale_claim(job, now):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Only failed or abandoned reminders can be requeued (this one is {job.status})."
            )
        session = job.session
        if session is None or session.status != SessionStatusEnum.SCHEDULED.value:
            state = session.status.lower().replace("_", "-") if session else "gone"
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Cannot requeue a reminder for a session that is {state}."
            )

        job.status = ReminderStatusEnum.PENDING.value
        job.last_error = None
        session.whatsapp_notification_status = WhatsAppNotificationStatusEnum.PENDING.value
        session.whatsapp_last_error = None
        await self.db.flush()
        log.info(f"Reminder job {job_id} requeued.")
        return job

    async def _claim(self, job_id: UUID) -> bool:
        result = await self.db.execute(
            update(db_models.ReminderJobs)
            .where(
                db_models.ReminderJobs.id == job_id,
                db_models.ReminderJobs.status == ReminderStatusEnum.PENDING.value
            )
            .values(status=ReminderStatusEnum.IN_PROGRESS.value, updated_at=db_models.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()
        return result.rowcount == 1

    async def _load_job(self, job_id: UUID) -> Optional[db_models.ReminderJobs]:
        return await self.db.get(
            db_models.ReminderJobs,
            job_id,
            options=[
                selectinload(db_models.ReminderJobs.session).options(
                    selectinload(db_models.Sessions.student),
                    selectinload(db_models.Sessions.creator)
                )
            ],
            populate_existing=True,
        )

    async def _deliver(self, job: db_models.ReminderJobs) -> Optional[str]:
        """Sends one reminder. Returns None on success or the error text."""
        session = job.session
        if session is None:
            return "Session not found"
        if session.status != SessionStatusEnum.SCHEDULED.value:
            return f"Session is {session.status.lower().replace('_', '-')}"
        student = session.student
        if student is None:
            return "Student not found"
        if not (student.phone_e164 or "").strip():
            return "Missing student phone"

        credentials = resolve_credentials(session.creator)
        if credentials is None:
            return "Missing WhatsApp credentials"

        try:
            await self.whatsapp.send_text(
                credentials,
                student.phone_e164,
                compose_reminder_message(session, student)
            )
        except WhatsAppSendError as e:
            return e.error_body
        return None

    async def _finish(self, job: db_models.ReminderJobs, error: Optional[str]) -> None:
        job.status = (ReminderStatusEnum.FAILED if error else ReminderStatusEnum.SENT).value
        job.last_error = error
        # A closed session keeps the notification status it was closed with.
        if job.session is not None and job.session.status == SessionStatusEnum.SCHEDULED.value:
            job.session.whatsapp_notification_status = (
                WhatsAppNotificationStatusEnum.FAILED if error else WhatsAppNotificationStatusEnum.SENT
            ).value
            job.session.whatsapp_last_error = error
        await self.db.commit()

    async def dispatch_due_reminders(self, now: Optional[datetime] = None) -> reminder_models.DispatchSummary:
        """
        One pass over due WhatsApp reminders. Every due job gets at most one
        send attempt; failures are recorded on the job and not retried.
        """
        now = as_utc(now) if now else db_models.utcnow()
        stmt = (
            select(db_models.ReminderJobs.id)
            .filter(
                db_models.ReminderJobs.channel == ReminderChannelEnum.WHATSAPP.value,
                db_models.ReminderJobs.status == ReminderStatusEnum.PENDING.value,
                db_models.ReminderJobs.scheduled_for <= now
            )
            .order_by(db_models.ReminderJobs.scheduled_for)
        )
        due_ids = list((await self.db.execute(stmt)).scalars().all())
        log.info(f"Reminder dispatch at {now.isoformat()}: {len(due_ids)} job(s) due.")

        summary = reminder_models.DispatchSummary()
        for job_id in due_ids:
            summary.processed += 1
            if not await self._claim(job_id):
                log.info(f"Reminder job {job_id} already claimed by another dispatcher, skipping.")
                summary.skipped += 1
                continue

            job = await self._load_job(job_id)
            if job is None:
                # Deleted along with its session after the claim.
                log.warning(f"Reminder job {job_id} disappeared after it was claimed, skipping.")
                summary.skipped += 1
                continue
            try:
                error = await self._deliver(job)
            except Exception as e:
                # A claimed job must not be left IN_PROGRESS.
                log.error(f"Unexpected error sending reminder {job_id}: {e}", exc_info=True)
                error = json.dumps({"message": str(e)})

            await self._finish(job, error)
            if error:
                summary.failed += 1
                log.warning(f"Reminder job {job_id} failed: {error}")
            else:
                summary.sent += 1
                log.info(f"Reminder job {job_id} sent.")

        log.info(f"Reminder dispatch finished: {summary.model_dump()}")
        return summary

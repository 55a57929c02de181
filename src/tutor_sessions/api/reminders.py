'''
API endpoints for WhatsApp reminder jobs.
'''
import secrets
from typing import Annotated, Any
from uuid import UUID
from fastapi import APIRouter, Depends, HTTPException, Header, Query, status

from ..database import models as db_models
from ..database.db_enums import ReminderStatusEnum
from ..models import reminders as reminder_models
from ..services.security import get_approved_user
from ..services.reminder_service import ReminderDispatchService
from ..common.config import settings
from ..common.logger import log


async def verify_dispatch_secret(
    x_dispatch_secret: Annotated[str | None, Header()] = None
) -> None:
    """Guards the dispatch trigger, which is called by a scheduler, not a user."""
    if not settings.REMINDER_DISPATCH_SECRET:
        log.error("Reminder dispatch called but REMINDER_DISPATCH_SECRET is not set.")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Reminder dispatch is not configured."
        )
    if not x_dispatch_secret or not secrets.compare_digest(x_dispatch_secret, settings.REMINDER_DISPATCH_SECRET):
        log.warning("Reminder dispatch called with a missing or wrong secret.")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid dispatch secret.")


class RemindersAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/reminders",
            tags=["Reminders"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/dispatch",
                self.dispatch,
                methods=["POST"],
                response_model=reminder_models.DispatchSummary,
                dependencies=[Depends(verify_dispatch_secret)])
        self.router.add_api_route(
                "/",
                self.list_jobs,
                methods=["GET"],
                response_model=list[reminder_models.ReminderJobRead])
        self.router.add_api_route(
                "/{job_id}/requeue",
                self.requeue_job,
                methods=["POST"],
                response_model=reminder_models.ReminderJobRead)

    async def dispatch(
        self,
        reminder_service: Annotated[ReminderDispatchService, Depends(ReminderDispatchService)]
    ) -> Any:
        """
        Sends every due reminder once. Meant to be called every minute by cron.
        """
        return await reminder_service.dispatch_due_reminders()

    async def list_jobs(
        self,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        reminder_service: Annotated[ReminderDispatchService, Depends(ReminderDispatchService)],
        status_filter: Annotated[ReminderStatusEnum | None, Query(alias="status")] = None
    ) -> list[Any]:
        return await reminder_service.list_jobs(status_filter=status_filter)

    async def requeue_job(
        self,
        job_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        reminder_service: Annotated[ReminderDispatchService, Depends(ReminderDispatchService)]
    ) -> Any:
        return await reminder_service.requeue_job(job_id)

# Instantiate the class and export its router
reminders_api = RemindersAPI()
router = reminders_api.router

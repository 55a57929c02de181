'''
API endpoints for scheduling tutoring sessions and moving them through
their lifecycle.
'''
from typing import Annotated, Any
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query, Response

from ..database import models as db_models
from ..database.db_enums import SessionStatusEnum
from ..models import sessions as session_models
from ..services.security import get_approved_user
from ..services.session_service import SessionService


class SessionsAPI:
    def __init__(self):
        self.router = APIRouter(
            prefix="/sessions",
            tags=["Sessions"]
        )
        self._register_routes()

    def _register_routes(self):
        self.router.add_api_route(
                "/",
                self.list_sessions,
                methods=["GET"],
                response_model=list[session_models.SessionRead])
        self.router.add_api_route(
                "/{session_id}",
                self.get_session,
                methods=["GET"],
                response_model=session_models.SessionRead)
        self.router.add_api_route(
                "/",
                self.create_session,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=session_models.SessionRead)
        self.router.add_api_route(
                "/{session_id}",
                self.update_session,
                methods=["PATCH"],
                response_model=session_models.SessionRead)
        self.router.add_api_route(
                "/{session_id}",
                self.delete_session,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)
        self.router.add_api_route(
                "/{session_id}/complete",
                self.complete_session,
                methods=["POST"],
                response_model=session_models.SessionRead)
        self.router.add_api_route(
                "/{session_id}/cancel",
                self.cancel_session,
                methods=["POST"],
                response_model=session_models.SessionRead)
        self.router.add_api_route(
                "/{session_id}/no-show",
                self.mark_no_show,
                methods=["POST"],
                response_model=session_models.SessionRead)

    async def list_sessions(
        self,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)],
        student_id: Annotated[UUID | None, Query(description="Optional filter for Student ID")] = None,
        status_filter: Annotated[SessionStatusEnum | None, Query(alias="status", description="Optional status filter")] = None
    ) -> list[Any]:
        """
        Lists sessions, newest start time first.
        """
        return await session_service.list_sessions(student_id=student_id, status_filter=status_filter)

    async def get_session(
        self,
        session_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)]
    ) -> Any:
        return await session_service.get_session(session_id)

    async def create_session(
        self,
        session_data: session_models.SessionCreate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)]
    ) -> Any:
        """
        Schedules a session, optionally with a Zoom meeting and WhatsApp
        reminders. If the Zoom meeting fails the session is still created
        and `zoom_warning` explains why.
        """
        session, zoom_warning = await session_service.create_session(session_data, current_user)
        read = session_models.SessionRead.model_validate(session)
        read.zoom_warning = zoom_warning
        return read

    async def update_session(
        self,
        session_id: UUID,
        update_data: session_models.SessionUpdate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)]
    ) -> Any:
        return await session_service.update_session(session_id, update_data)

    async def delete_session(
        self,
        session_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)]
    ):
        await session_service.delete_session(session_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def complete_session(
        self,
        session_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)],
        complete_data: session_models.SessionComplete | None = None
    ) -> Any:
        """
        Marks the session completed and books its charge on the ledger.
        Returns 409 if the session is not scheduled any more.
        """
        return await session_service.complete_session(
            session_id,
            complete_data or session_models.SessionComplete(),
            current_user
        )

    async def cancel_session(
        self,
        session_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)]
    ) -> Any:
        return await session_service.cancel_session(session_id)

    async def mark_no_show(
        self,
        session_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        session_service: Annotated[SessionService, Depends(SessionService)]
    ) -> Any:
        return await session_service.mark_no_show(session_id)

# Instantiate the class and export its router
sessions_api = SessionsAPI()
router = sessions_api.router

'''
API endpoints for managing Students.
'''
from typing import Annotated, Any
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query, Response

from ..models import student as student_models
from ..models import ledger as ledger_models
from ..services.security import get_approved_user
from ..services.student_service import StudentService
from ..services.ledger_service import LedgerService


class StudentsAPI:
    """
    A class to encapsulate endpoints for Students.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/students",
            tags=["Students"],
            dependencies=[Depends(get_approved_user)]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/",
                self.list_students,
                methods=["GET"],
                response_model=list[student_models.StudentRead])
        self.router.add_api_route(
                "/{student_id}",
                self.get_student,
                methods=["GET"],
                response_model=student_models.StudentRead)
        self.router.add_api_route(
                "/",
                self.create_student,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=student_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}",
                self.update_student,
                methods=["PATCH"],
                response_model=student_models.StudentRead)
        self.router.add_api_route(
                "/{student_id}",
                self.delete_student,
                methods=["DELETE"],
                status_code=status.HTTP_204_NO_CONTENT)
        self.router.add_api_route(
                "/{student_id}/balance",
                self.get_balance,
                methods=["GET"],
                response_model=ledger_models.StudentBalanceRead)

    async def list_students(
        self,
        student_service: Annotated[StudentService, Depends(StudentService)],
        active_only: Annotated[bool, Query(description="Only return active students")] = False
    ) -> list[Any]:
        return await student_service.list_students(active_only=active_only)

    async def get_student(
        self,
        student_id: UUID,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.get_student_by_id(student_id)

    async def create_student(
        self,
        student_data: student_models.StudentCreate,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.create_student(student_data)

    async def update_student(
        self,
        student_id: UUID,
        update_data: student_models.StudentUpdate,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ) -> Any:
        return await student_service.update_student(student_id, update_data)

    async def delete_student(
        self,
        student_id: UUID,
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        """
        Deletes a student together with their sessions and ledger entries.
        """
        await student_service.delete_student(student_id)
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    async def get_balance(
        self,
        student_id: UUID,
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> Any:
        """
        Current balance: the sum of the student's ledger entries. Negative
        means the student owes money. Unknown students report 0.00.
        """
        balance = await ledger_service.get_student_balance(student_id)
        return ledger_models.StudentBalanceRead(student_id=student_id, balance=balance)

# Instantiate the class and export its router
students_api = StudentsAPI()
router = students_api.router

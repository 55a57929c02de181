'''

'''
from typing import Annotated
from uuid import UUID
from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..database.engine import get_db_session
from ..database import models as db_models
from ..models import student as student_models
from ..common.logger import log


class StudentService:
    """
    CRUD for the student roster. Students are shared by every approved
    account, there is no per-user partitioning.
    """
    def __init__(self, db: Annotated[AsyncSession, Depends(get_db_session)]):
        self.db = db

    async def get_student_by_id(self, student_id: UUID) -> db_models.Students:
        """Fetches one student or raises 404."""
        log.info(f"Fetching student by ID: {student_id}")
        student = await self.db.get(db_models.Students, student_id)
        if not student:
            log.warning(f"Tried to fetch non-existent student id: {student_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Student not found.")
        return student

    async def list_students(self, active_only: bool = False) -> list[db_models.Students]:
        stmt = select(db_models.Students).order_by(
            db_models.Students.first_name, db_models.Students.last_name
        )
        if active_only:
            stmt = stmt.filter(db_models.Students.is_active.is_(True))
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_student(self, data: student_models.StudentCreate) -> db_models.Students:
        student = db_models.Students(**data.model_dump())
        self.db.add(student)
        await self.db.flush()
        log.info(f"Created student {student.id} ({student.full_name}).")
        return student

    async def update_student(self, student_id: UUID, data: student_models.StudentUpdate) -> db_models.Students:
        student = await self.get_student_by_id(student_id)
        update_data = data.model_dump(exclude_unset=True)
        for key, value in update_data.items():
            setattr(student, key, value)
        await self.db.flush()
        log.info(f"Updated student {student_id}: {list(update_data)}")
        return student

    async def delete_student(self, student_id: UUID) -> None:
        """Deleting a student also removes their sessions and ledger entries."""
        student = await self.get_student_by_id(student_id)
        await self.db.delete(student)
        await self.db.flush()
        log.info(f"Deleted student {student_id}.")

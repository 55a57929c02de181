'''

'''
from typing import Optional, Annotated
from uuid import UUID
from decimal import Decimal
from fastapi import Depends, HTTPException, UploadFile, status
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from ..database.engine import get_db_session
from ..database import models as db_models
from ..database.db_enums import LedgerEntryTypeEnum
from ..models import ledger as ledger_models
from ..common.logger import log
from ..common.exceptions import ReceiptValidationError, StorageUploadError
from .student_service import StudentService
from .storage_service import ReceiptStorage, read_receipt_upload

CENTS = Decimal("0.01")


def to_money(value) -> Decimal:
    """Normalizes a database numeric (or None) to a 2-place Decimal."""
    if value is None:
        return Decimal("0.00")
    return Decimal(str(value)).quantize(CENTS)


class LedgerService:
    """
    Ledger entries and the per-student balance, which is always the plain sum
    of a student's entry amounts, computed on read.
    """
    def __init__(
        self,
        db: Annotated[AsyncSession, Depends(get_db_session)],
        student_service: Annotated[StudentService, Depends(StudentService)]
    ):
        self.db = db
        self.student_service = student_service

    # --- Balances ---

    async def get_student_balance(self, student_id: UUID) -> Decimal:
        """
        Sum of all entry amounts for the student. A student with no entries,
        or an unknown id, has a balance of 0.00.
        """
        stmt = select(
            func.coalesce(func.sum(db_models.LedgerEntries.amount), 0)
        ).filter(db_models.LedgerEntries.student_id == student_id)
        result = await self.db.execute(stmt)
        balance = to_money(result.scalar())
        log.info(f"Balance for student {student_id}: {balance}")
        return balance

    async def get_all_balances(self) -> list[ledger_models.StudentBalanceRead]:
        """One balance per student, in a single grouped query."""
        stmt = (
            select(
                db_models.Students,
                func.coalesce(func.sum(db_models.LedgerEntries.amount), 0).label("balance")
            )
            .outerjoin(db_models.LedgerEntries, db_models.LedgerEntries.student_id == db_models.Students.id)
            .group_by(db_models.Students.id)
            .order_by(db_models.Students.first_name, db_models.Students.last_name)
        )
        result = await self.db.execute(stmt)
        return [
            ledger_models.StudentBalanceRead(
                student_id=student.id,
                student_name=student.full_name,
                balance=to_money(balance)
            )
            for student, balance in result.all()
        ]

    # --- Entries ---

    async def get_entry(self, entry_id: UUID) -> db_models.LedgerEntries:
        stmt = select(db_models.LedgerEntries).options(
            selectinload(db_models.LedgerEntries.student)
        ).filter(db_models.LedgerEntries.id == entry_id)
        result = await self.db.execute(stmt)
        entry = result.scalars().first()
        if not entry:
            log.warning(f"Tried to fetch non-existent ledger entry id: {entry_id}")
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Ledger entry not found.")
        return entry

    async def list_entries(self, student_id: Optional[UUID] = None) -> list[db_models.LedgerEntries]:
        stmt = select(db_models.LedgerEntries).options(
            selectinload(db_models.LedgerEntries.student)
        ).order_by(db_models.LedgerEntries.created_at.desc())
        if student_id:
            stmt = stmt.filter(db_models.LedgerEntries.student_id == student_id)
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def create_entry(
        self,
        data: ledger_models.LedgerEntryCreate,
        current_user: Optional[db_models.Profiles] = None,
        session_id: Optional[UUID] = None
    ) -> db_models.LedgerEntries:
        student = await self.student_service.get_student_by_id(data.student_id)

        entry = db_models.LedgerEntries(
            student=student,
            type=data.type.value,
            amount=data.amount.quantize(CENTS),
            reference=data.reference,
            receipt_url=data.receipt_url,
            session_id=session_id,
            created_by=current_user.id if current_user else None,
        )
        self.db.add(entry)
        await self.db.flush()
        log.info(f"Created {entry.type} ledger entry {entry.id} of {entry.amount} for student {student.id}.")
        return entry

    async def update_entry(self, entry_id: UUID, data: ledger_models.LedgerEntryUpdate) -> db_models.LedgerEntries:
        entry = await self.get_entry(entry_id)
        update_data = data.model_dump(exclude_unset=True)

        new_type = update_data.get("type") or LedgerEntryTypeEnum(entry.type)
        new_amount = update_data.get("amount")
        if new_amount is None:
            new_amount = to_money(entry.amount)
        try:
            ledger_models.check_amount_sign(new_type, new_amount)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

        entry.type = LedgerEntryTypeEnum(new_type).value
        entry.amount = new_amount.quantize(CENTS)
        for key in ("reference", "receipt_url"):
            if key in update_data:
                setattr(entry, key, update_data[key])

        await self.db.flush()
        log.info(f"Updated ledger entry {entry_id}: {list(update_data)}")
        return entry

    async def read_receipt(self, file: UploadFile) -> bytes:
        try:
            return await read_receipt_upload(file)
        except ReceiptValidationError as e:
            log.warning(f"Rejected receipt upload {file.filename}: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    async def attach_receipt(
        self,
        entry_id: UUID,
        content: bytes,
        content_type: Optional[str],
        storage: ReceiptStorage
    ) -> db_models.LedgerEntries:
        entry = await self.get_entry(entry_id)
        try:
            url = await storage.upload_receipt(entry.id, content, content_type)
        except ReceiptValidationError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except StorageUploadError as e:
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))

        entry.receipt_url = url
        await self.db.flush()
        log.info(f"Attached receipt {url} to ledger entry {entry_id}.")
        return entry

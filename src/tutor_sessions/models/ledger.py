'''

'''
from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..database.db_enums import LedgerEntryTypeEnum

def check_amount_sign(entry_type: LedgerEntryTypeEnum | str, amount: Decimal) -> None:
    """
    Charges are negative, payments positive, adjustments either way.
    Raises ValueError with a user-facing message on violation.
    """
    entry_type = LedgerEntryTypeEnum(entry_type)
    if amount == 0:
        raise ValueError("Amount must not be zero.")
    if entry_type is LedgerEntryTypeEnum.PAYMENT_CONFIRMATION and amount < 0:
        raise ValueError("Payment amount must be positive.")
    if entry_type is LedgerEntryTypeEnum.SESSION_CHARGE and amount > 0:
        raise ValueError("Session charge amount must be negative.")

# --- 1. API Input Models ---

class LedgerEntryCreate(BaseModel):
    """
    Validates the request body for creating a ledger entry.
    """
    student_id: UUID
    type: LedgerEntryTypeEnum
    amount: Decimal = Field(max_digits=10, decimal_places=2)
    reference: Optional[str] = None
    receipt_url: Optional[str] = None

    @model_validator(mode='after')
    def check_sign(self):
        check_amount_sign(self.type, self.amount)
        return self

class LedgerEntryUpdate(BaseModel):
    """
    Partial edit. The sign rule is re-checked by the service against the
    merged type/amount, since either may be omitted here.
    """
    type: Optional[LedgerEntryTypeEnum] = None
    amount: Optional[Decimal] = Field(default=None, max_digits=10, decimal_places=2)
    reference: Optional[str] = None
    receipt_url: Optional[str] = None

# --- 2. API Output Models ---

class LedgerEntryRead(BaseModel):
    id: UUID
    student_id: UUID
    student_name: str
    type: LedgerEntryTypeEnum
    amount: Decimal
    reference: Optional[str] = None
    receipt_url: Optional[str] = None
    session_id: Optional[UUID] = None
    created_by: Optional[UUID] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

class StudentBalanceRead(BaseModel):
    student_id: UUID
    student_name: Optional[str] = None
    balance: Decimal

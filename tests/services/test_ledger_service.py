import pytest
import uuid
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock
from fastapi import HTTPException
from pydantic import ValidationError

from tutor_sessions.database.db_enums import LedgerEntryTypeEnum
from tutor_sessions.models import ledger as ledger_models
from tutor_sessions.services.ledger_service import LedgerService
from tutor_sessions.services.storage_service import ReceiptStorage
from tutor_sessions.common.exceptions import ReceiptValidationError, StorageUploadError


@pytest.mark.anyio
class TestStudentBalance:

    async def test_balance_is_sum_of_entries(self, ledger_service: LedgerService, test_student, make_entry):
        await make_entry(test_student, type=LedgerEntryTypeEnum.SESSION_CHARGE.value, amount=Decimal("-37.50"))
        await make_entry(test_student, type=LedgerEntryTypeEnum.PAYMENT_CONFIRMATION.value, amount=Decimal("100.00"))
        await make_entry(test_student, type=LedgerEntryTypeEnum.ADJUSTMENT.value, amount=Decimal("-10.25"))

        balance = await ledger_service.get_student_balance(test_student.id)

        assert balance == Decimal("52.25")
        assert balance.as_tuple().exponent == -2

    async def test_balance_is_zero_without_entries(self, ledger_service: LedgerService, test_student):
        assert await ledger_service.get_student_balance(test_student.id) == Decimal("0.00")

    async def test_balance_for_unknown_student_is_zero(self, ledger_service: LedgerService):
        assert await ledger_service.get_student_balance(uuid.uuid4()) == Decimal("0.00")

    async def test_balance_ignores_other_students(self, ledger_service: LedgerService, make_student, make_entry):
        alice = await make_student()
        bob = await make_student()
        await make_entry(alice, amount=Decimal("20.00"))
        await make_entry(bob, amount=Decimal("999.00"))

        assert await ledger_service.get_student_balance(alice.id) == Decimal("20.00")

    async def test_all_balances_include_students_without_entries(
        self, ledger_service: LedgerService, make_student, make_entry
    ):
        owing = await make_student(first_name="Adam")
        clean = await make_student(first_name="Zaid")
        await make_entry(owing, type=LedgerEntryTypeEnum.SESSION_CHARGE.value, amount=Decimal("-40.00"))

        balances = {b.student_id: b for b in await ledger_service.get_all_balances()}

        assert balances[owing.id].balance == Decimal("-40.00")
        assert balances[clean.id].balance == Decimal("0.00")
        assert balances[owing.id].student_name == owing.full_name


class TestLedgerEntrySignRules:
    """The sign rules are enforced by the request model, before any database work."""

    def test_payment_must_be_positive(self):
        with pytest.raises(ValidationError, match="Payment amount must be positive"):
            ledger_models.LedgerEntryCreate(
                student_id=uuid.uuid4(), type=LedgerEntryTypeEnum.PAYMENT_CONFIRMATION, amount=Decimal("-5")
            )

    def test_charge_must_be_negative(self):
        with pytest.raises(ValidationError, match="Session charge amount must be negative"):
            ledger_models.LedgerEntryCreate(
                student_id=uuid.uuid4(), type=LedgerEntryTypeEnum.SESSION_CHARGE, amount=Decimal("5")
            )

    def test_zero_is_rejected(self):
        with pytest.raises(ValidationError, match="must not be zero"):
            ledger_models.LedgerEntryCreate(
                student_id=uuid.uuid4(), type=LedgerEntryTypeEnum.ADJUSTMENT, amount=Decimal("0")
            )

    @pytest.mark.parametrize("amount", [Decimal("-12.00"), Decimal("12.00")])
    def test_adjustment_accepts_either_sign(self, amount):
        entry = ledger_models.LedgerEntryCreate(
            student_id=uuid.uuid4(), type=LedgerEntryTypeEnum.ADJUSTMENT, amount=amount
        )
        assert entry.amount == amount


@pytest.mark.anyio
class TestLedgerEntryWrites:

    async def test_create_entry(self, ledger_service: LedgerService, test_student, approved_user):
        entry = await ledger_service.create_entry(
            ledger_models.LedgerEntryCreate(
                student_id=test_student.id,
                type=LedgerEntryTypeEnum.PAYMENT_CONFIRMATION,
                amount=Decimal("80"),
                reference="Bank transfer"
            ),
            current_user=approved_user
        )

        assert entry.amount == Decimal("80.00")
        assert entry.created_by == approved_user.id
        assert entry.student_name == test_student.full_name
        assert await ledger_service.get_student_balance(test_student.id) == Decimal("80.00")

    async def test_create_entry_for_unknown_student(self, ledger_service: LedgerService):
        with pytest.raises(HTTPException) as e:
            await ledger_service.create_entry(
                ledger_models.LedgerEntryCreate(
                    student_id=uuid.uuid4(), type=LedgerEntryTypeEnum.ADJUSTMENT, amount=Decimal("1")
                )
            )
        assert e.value.status_code == 404

    async def test_update_entry_changes_balance(self, ledger_service: LedgerService, test_student, make_entry):
        entry = await make_entry(test_student, amount=Decimal("50.00"))

        updated = await ledger_service.update_entry(
            entry.id, ledger_models.LedgerEntryUpdate(amount=Decimal("75.00"), reference="corrected")
        )

        assert updated.amount == Decimal("75.00")
        assert updated.reference == "corrected"
        assert await ledger_service.get_student_balance(test_student.id) == Decimal("75.00")

    async def test_update_checks_sign_against_existing_type(self, ledger_service: LedgerService, test_student, make_entry):
        entry = await make_entry(test_student, type=LedgerEntryTypeEnum.PAYMENT_CONFIRMATION.value, amount=Decimal("50.00"))

        with pytest.raises(HTTPException) as e:
            await ledger_service.update_entry(entry.id, ledger_models.LedgerEntryUpdate(amount=Decimal("-50.00")))

        assert e.value.status_code == 400
        assert "positive" in e.value.detail

    async def test_update_type_and_amount_together(self, ledger_service: LedgerService, test_student, make_entry):
        entry = await make_entry(test_student, amount=Decimal("50.00"))

        updated = await ledger_service.update_entry(
            entry.id,
            ledger_models.LedgerEntryUpdate(type=LedgerEntryTypeEnum.ADJUSTMENT, amount=Decimal("-5.00"))
        )

        assert updated.type == LedgerEntryTypeEnum.ADJUSTMENT.value
        assert updated.amount == Decimal("-5.00")

    async def test_list_entries_filters_by_student(self, ledger_service: LedgerService, make_student, make_entry):
        alice = await make_student()
        bob = await make_student()
        await make_entry(alice)
        await make_entry(alice)
        await make_entry(bob)

        entries = await ledger_service.list_entries(student_id=alice.id)

        assert len(entries) == 2
        assert {e.student_id for e in entries} == {alice.id}


@pytest.mark.anyio
class TestAttachReceipt:

    @pytest.fixture
    def mock_storage(self) -> ReceiptStorage:
        storage = MagicMock(spec=ReceiptStorage)
        storage.upload_receipt = AsyncMock(return_value="https://storage.googleapis.com/ledger-images/receipts/x.png")
        return storage

    async def test_attach_sets_receipt_url(self, ledger_service: LedgerService, test_student, make_entry, mock_storage):
        entry = await make_entry(test_student)

        updated = await ledger_service.attach_receipt(entry.id, b"\x89PNG...", "image/png", mock_storage)

        assert updated.receipt_url.endswith("/receipts/x.png")
        mock_storage.upload_receipt.assert_awaited_once_with(entry.id, b"\x89PNG...", "image/png")

    async def test_validation_error_is_400(self, ledger_service: LedgerService, test_student, make_entry, mock_storage):
        entry = await make_entry(test_student)
        mock_storage.upload_receipt.side_effect = ReceiptValidationError("File type not allowed: application/pdf")

        with pytest.raises(HTTPException) as e:
            await ledger_service.attach_receipt(entry.id, b"%PDF", "application/pdf", mock_storage)

        assert e.value.status_code == 400
        assert entry.receipt_url is None

    async def test_upload_failure_is_502(self, ledger_service: LedgerService, test_student, make_entry, mock_storage):
        entry = await make_entry(test_student)
        mock_storage.upload_receipt.side_effect = StorageUploadError("bucket missing")

        with pytest.raises(HTTPException) as e:
            await ledger_service.attach_receipt(entry.id, b"\xff\xd8", "image/jpeg", mock_storage)

        assert e.value.status_code == 502

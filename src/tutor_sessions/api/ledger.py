'''
API endpoints for the financial ledger.
'''
from typing import Annotated, Any
from uuid import UUID
from fastapi import APIRouter, Depends, status, Query, UploadFile, File

from ..database import models as db_models
from ..models import ledger as ledger_models
from ..services.security import get_approved_user
from ..services.ledger_service import LedgerService
from ..services.storage_service import ReceiptStorage, get_receipt_storage

class LedgerAPI:
    """
    A class to encapsulate endpoints for ledger entries and balances.
    """
    def __init__(self):
        self.router = APIRouter(
            prefix="/ledger",
            tags=["Ledger"]
        )
        self._register_routes()

    def _register_routes(self):
        """Registers all the API routes for this class."""
        self.router.add_api_route(
                "/entries",
                self.list_entries,
                methods=["GET"],
                response_model=list[ledger_models.LedgerEntryRead])
        self.router.add_api_route(
                "/entries/{entry_id}",
                self.get_entry,
                methods=["GET"],
                response_model=ledger_models.LedgerEntryRead)
        self.router.add_api_route(
                "/entries",
                self.create_entry,
                methods=["POST"],
                status_code=status.HTTP_201_CREATED,
                response_model=ledger_models.LedgerEntryRead)
        self.router.add_api_route(
                "/entries/{entry_id}",
                self.update_entry,
                methods=["PATCH"],
                response_model=ledger_models.LedgerEntryRead)
        self.router.add_api_route(
                "/entries/{entry_id}/receipt",
                self.upload_receipt,
                methods=["POST"],
                response_model=ledger_models.LedgerEntryRead)
        self.router.add_api_route(
                "/balances",
                self.list_balances,
                methods=["GET"],
                response_model=list[ledger_models.StudentBalanceRead])

    async def list_entries(
        self,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)],
        student_id: Annotated[UUID | None, Query(description="Optional filter for Student ID")] = None
    ) -> list[Any]:
        """
        Lists ledger entries, newest first.
        """
        return await ledger_service.list_entries(student_id=student_id)

    async def get_entry(
        self,
        entry_id: UUID,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> Any:
        return await ledger_service.get_entry(entry_id)

    async def create_entry(
        self,
        entry_data: ledger_models.LedgerEntryCreate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> Any:
        """
        Records a payment, a manual charge or an adjustment. Payments must be
        positive and charges negative.
        """
        return await ledger_service.create_entry(entry_data, current_user=current_user)

    async def update_entry(
        self,
        entry_id: UUID,
        update_data: ledger_models.LedgerEntryUpdate,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> Any:
        return await ledger_service.update_entry(entry_id, update_data)

    async def upload_receipt(
        self,
        entry_id: UUID,
        file: Annotated[UploadFile, File(description="Receipt image (JPEG, PNG, GIF or WebP, max 5MB)")],
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)],
        storage: Annotated[ReceiptStorage, Depends(get_receipt_storage)]
    ) -> Any:
        """
        Uploads a receipt image and links it to the entry.
        """
        content = await ledger_service.read_receipt(file)
        return await ledger_service.attach_receipt(entry_id, content, file.content_type, storage)

    async def list_balances(
        self,
        current_user: Annotated[db_models.Profiles, Depends(get_approved_user)],
        ledger_service: Annotated[LedgerService, Depends(LedgerService)]
    ) -> list[Any]:
        return await ledger_service.get_all_balances()

# Instantiate the class and export its router
ledger_api = LedgerAPI()
router = ledger_api.router

"""
Inbound/outbound transaction endpoints and the grouped ledger view.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from wms.core.config import settings
from wms.core.permissions import Action, Module, require_permission
from wms.gateway import PersistenceGateway, get_gateway
from wms.models.user import User
from wms.schemas.transaction import (
    Direction,
    InboundCreate,
    LedgerEntryResponse,
    OutboundCreate,
    TransactionGroupPage,
    TransactionResult,
)
from wms.services.inventory import InventoryService
from wms.services.ledger import aggregate_ledger, build_transaction_logs

router = APIRouter(prefix="/transactions", tags=["Transactions"])


@router.get("", response_model=TransactionGroupPage)
def list_transactions(
    direction: Direction = Query(Direction.OUT, description="IN for goods receipts, OUT for issues"),
    search: str = Query("", description="Item name, material number, document number or remark"),
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=100),
    current_user: User = Depends(require_permission(Module.TRANSACTIONS, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Transactions grouped by document, newest first.

    Pagination counts documents (issue or GR numbers), not line items.
    """
    logs = build_transaction_logs(gateway.list_material_in(), gateway.list_material_out())
    return aggregate_ledger(
        logs,
        direction,
        search=search,
        page=page,
        page_size=page_size or settings.transactions_page_size,
    )


@router.get("/ledger", response_model=list[LedgerEntryResponse])
def list_ledger(
    material_no: Optional[str] = None,
    limit: int = Query(100, ge=1, le=1000),
    current_user: User = Depends(require_permission(Module.TRANSACTIONS, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Raw ledger rows, newest first."""
    return gateway.list_ledger_entries(material_no=material_no, limit=limit)


@router.post("/outbound", response_model=TransactionResult, status_code=status.HTTP_201_CREATED)
def create_outbound(
    request: OutboundCreate,
    current_user: User = Depends(require_permission(Module.TRANSACTIONS, Action.CREATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Issue material out of a storage location.

    - **quantity**: Must not exceed the quantity on hand
    - **issue_number**: Generated as ISS-<timestamp> when blank
    - **receiver**: Defaults to "Unknown"
    """
    return InventoryService(gateway, current_user.name).create_outbound(request)


@router.post("/inbound", response_model=TransactionResult, status_code=status.HTTP_201_CREATED)
def create_inbound(
    request: InboundCreate,
    current_user: User = Depends(require_permission(Module.TRANSACTIONS, Action.CREATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Receive material into a storage location.

    - **gr_number**: Generated as GR-<timestamp> when blank
    - **po**: Purchase order being received
    - **receiver**: Defaults to "Warehouse"
    """
    return InventoryService(gateway, current_user.name).create_inbound(request)

"""
Purchase order endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from wms.core.permissions import Action, Module, require_permission
from wms.gateway import PersistenceGateway, get_gateway
from wms.models.user import User
from wms.schemas.purchase import (
    PurchaseOrderCreate,
    PurchaseOrderResponse,
    PurchaseOrderStatus,
    PurchaseOrderStatusUpdate,
)
from wms.services.purchase import PurchaseService

router = APIRouter(prefix="/purchases", tags=["Purchase Orders"])


@router.get("", response_model=list[PurchaseOrderResponse])
def list_purchase_orders(
    status_filter: Optional[PurchaseOrderStatus] = Query(None, alias="status"),
    current_user: User = Depends(require_permission(Module.PURCHASE, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """List purchase orders, newest order date first."""
    return PurchaseService(gateway).list_orders(status_filter)


@router.post("", response_model=PurchaseOrderResponse, status_code=status.HTTP_201_CREATED)
def create_purchase_order(
    order_data: PurchaseOrderCreate,
    current_user: User = Depends(require_permission(Module.PURCHASE, Action.CREATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Order more of an existing stock item.

    - **total_cost**: Defaults to quantity x the item's price
    """
    return PurchaseService(gateway).create_order(order_data)


@router.get("/{order_id}", response_model=PurchaseOrderResponse)
def get_purchase_order(
    order_id: int,
    current_user: User = Depends(require_permission(Module.PURCHASE, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return PurchaseService(gateway).get_order(order_id)


@router.patch("/{order_id}/status", response_model=PurchaseOrderResponse)
def update_purchase_order_status(
    order_id: int,
    update: PurchaseOrderStatusUpdate,
    current_user: User = Depends(require_permission(Module.PURCHASE, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Mark an ORDERED purchase order as RECEIVED or CANCELLED."""
    return PurchaseService(gateway).update_status(order_id, update.status)

"""
Dashboard API endpoints for summary statistics.
"""
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional
from fastapi import APIRouter, Depends, Query

from wms.core.config import settings
from wms.core.permissions import Action, Module, require_permission
from wms.gateway import PersistenceGateway, get_gateway
from wms.models.user import User
from wms.schemas.dashboard import DashboardSummary, LowStockItem
from wms.schemas.opname import OpnameStatus
from wms.schemas.purchase import PurchaseOrderStatus

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/summary", response_model=DashboardSummary)
def get_dashboard_summary(
    days: Optional[int] = Query(None, ge=1, le=365, description="Activity window in days"),
    current_user: User = Depends(require_permission(Module.DASHBOARD, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Stock totals plus inbound/outbound activity over the last few days.

    Stock value is the sum of quantity x price over all items.
    """
    days = days or settings.dashboard_activity_days
    totals = gateway.stock_totals()
    movements = gateway.movement_totals(since=date.today() - timedelta(days=days - 1))

    return DashboardSummary(
        total_items=totals["total_items"],
        total_quantity=totals["total_quantity"],
        total_stock_value=Decimal(str(totals["total_stock_value"])).quantize(Decimal("0.01")),
        low_stock_count=totals["low_stock_count"],
        out_of_stock_count=totals["out_of_stock_count"],
        inbound_count=movements["IN"]["count"],
        inbound_quantity=movements["IN"]["quantity"],
        outbound_count=movements["OUT"]["count"],
        outbound_quantity=movements["OUT"]["quantity"],
        activity_days=days,
        open_opname_sessions=gateway.count_opname_sessions(OpnameStatus.OPEN.value),
        open_purchase_orders=gateway.count_purchase_orders(PurchaseOrderStatus.ORDERED.value),
    )


@router.get("/low-stock", response_model=list[LowStockItem])
def get_low_stock(
    limit: int = Query(50, ge=1, le=500),
    current_user: User = Depends(require_permission(Module.DASHBOARD, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Items at or below their minimum stock, largest shortfall first."""
    return [
        LowStockItem(
            id=item.key,
            material_no=item.material_no,
            sloc=item.sloc,
            name=item.material_desc,
            quantity=item.quantity,
            min_stock=item.minimum_stock,
            max_stock=item.maximum_stock,
            shortfall=item.minimum_stock - item.quantity,
            uom=item.uom,
        )
        for item in gateway.list_low_stock_items(limit)
    ]

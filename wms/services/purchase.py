"""
Purchase orders for stock items.

Receiving an order only changes its status; the goods themselves are booked
through an inbound transaction that carries the PO number.
"""
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from wms.error_handlers import InvalidStateError, ResourceNotFoundError
from wms.gateway import PersistenceGateway
from wms.logging_config import get_logger
from wms.models import PurchaseOrder, format_quantity, item_key, to_quantity
from wms.schemas.purchase import PurchaseOrderCreate, PurchaseOrderStatus

logger = get_logger("purchase")

ALLOWED_TRANSITIONS = {
    PurchaseOrderStatus.ORDERED: {PurchaseOrderStatus.RECEIVED, PurchaseOrderStatus.CANCELLED},
}


class PurchaseService:

    def __init__(self, gateway: PersistenceGateway):
        self.gateway = gateway

    def list_orders(self, status: Optional[PurchaseOrderStatus] = None) -> Sequence[PurchaseOrder]:
        return self.gateway.list_purchase_orders(status.value if status else None)

    def get_order(self, order_id: int) -> PurchaseOrder:
        order = self.gateway.get_purchase_order(order_id)
        if order is None:
            raise ResourceNotFoundError("Purchase order", order_id)
        return order

    def create_order(self, data: PurchaseOrderCreate) -> PurchaseOrder:
        with self.gateway.atomic():
            item = self.gateway.get_stock_item(data.material_no, data.sloc)
            if item is None:
                raise ResourceNotFoundError("Stock item", item_key(data.material_no, data.sloc))

            total_cost = data.total_cost
            if total_cost is None:
                total_cost = (to_quantity(data.quantity) * Decimal(str(item.price or 0))).quantize(Decimal("0.01"))

            order = self.gateway.insert_purchase_order(
                item_id=item.key,
                material_no=item.material_no,
                sloc=item.sloc,
                item_name=item.material_desc,
                quantity=to_quantity(data.quantity),
                order_date=data.order_date or date.today(),
                status=PurchaseOrderStatus.ORDERED.value,
                supplier=data.supplier,
                total_cost=total_cost,
            )

        logger.info(f"Purchase order {order.id}: {format_quantity(data.quantity)} x {item.key}")
        return order

    def update_status(self, order_id: int, status: PurchaseOrderStatus) -> PurchaseOrder:
        with self.gateway.atomic():
            order = self.get_order(order_id)
            current = PurchaseOrderStatus(order.status)
            if status not in ALLOWED_TRANSITIONS.get(current, set()):
                raise InvalidStateError(
                    "Purchase order", order_id, current.value,
                    message=f"Purchase order {order_id} cannot move from {current.value} to {status.value}"
                )
            self.gateway.update(order, {"status": status.value})

        logger.info(f"Purchase order {order_id} is now {status.value}")
        return order

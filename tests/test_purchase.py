"""Tests for purchase orders."""
from datetime import date
from decimal import Decimal

import pytest

from wms.error_handlers import InvalidStateError, ResourceNotFoundError
from wms.schemas.purchase import PurchaseOrderCreate, PurchaseOrderStatus
from wms.services.purchase import PurchaseService


@pytest.fixture
def service(gateway):
    return PurchaseService(gateway)


class TestPurchaseOrders:

    def test_total_cost_defaults_to_quantity_times_price(self, service, sample_items):
        order = service.create_order(PurchaseOrderCreate(material_no="MAT-001", sloc="WH01", quantity=4))

        assert order.total_cost == Decimal("10.00")
        assert order.status == "ORDERED"
        assert order.item_id == "MAT-001:::WH01"
        assert order.item_name == "Hydraulic Oil 20L"
        assert order.order_date == date.today()

    def test_explicit_total_cost(self, service, sample_items):
        order = service.create_order(PurchaseOrderCreate(
            material_no="MAT-002", sloc="WH01", quantity=10, total_cost=Decimal("35.50"), supplier="SKF"
        ))

        assert order.total_cost == Decimal("35.50")
        assert order.supplier == "SKF"

    def test_item_must_exist(self, service, sample_items):
        with pytest.raises(ResourceNotFoundError):
            service.create_order(PurchaseOrderCreate(material_no="MAT-404", sloc="WH01", quantity=1))

    def test_receive_does_not_post_stock(self, service, gateway, sample_items):
        order = service.create_order(PurchaseOrderCreate(material_no="MAT-002", sloc="WH01", quantity=5))

        received = service.update_status(order.id, PurchaseOrderStatus.RECEIVED)

        assert received.status == "RECEIVED"
        assert gateway.get_stock_item("MAT-002", "WH01").quantity == 3

    def test_only_ordered_orders_can_change(self, service, sample_items):
        order = service.create_order(PurchaseOrderCreate(material_no="MAT-002", sloc="WH01", quantity=5))
        service.update_status(order.id, PurchaseOrderStatus.CANCELLED)

        with pytest.raises(InvalidStateError):
            service.update_status(order.id, PurchaseOrderStatus.RECEIVED)

    def test_cannot_reset_to_ordered(self, service, sample_items):
        order = service.create_order(PurchaseOrderCreate(material_no="MAT-002", sloc="WH01", quantity=5))

        with pytest.raises(InvalidStateError):
            service.update_status(order.id, PurchaseOrderStatus.ORDERED)

    def test_list_filters_by_status(self, service, sample_items):
        first = service.create_order(PurchaseOrderCreate(material_no="MAT-001", sloc="WH01", quantity=1))
        service.create_order(PurchaseOrderCreate(material_no="MAT-002", sloc="WH01", quantity=1))
        service.update_status(first.id, PurchaseOrderStatus.RECEIVED)

        assert [o.id for o in service.list_orders(PurchaseOrderStatus.RECEIVED)] == [first.id]
        assert len(service.list_orders()) == 2

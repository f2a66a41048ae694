"""Tests for stock postings and stock master maintenance."""
from datetime import date

import pytest
from freezegun import freeze_time
from sqlalchemy import func, select

from wms.error_handlers import (
    DuplicateResourceError,
    InsufficientStockError,
    InvalidStateError,
    PersistenceError,
    ResourceNotFoundError,
)
from wms.models import MaterialIn, MaterialOut, MaterialTransaction, StockHistory
from wms.schemas.inventory import StockItemCreate, StockItemUpdate
from wms.schemas.transaction import InboundCreate, OutboundCreate
from wms.services.inventory import DocumentNumberGenerator, InventoryService


def count(db, model):
    return db.scalar(select(func.count(model.id)))


@pytest.fixture
def service(gateway):
    return InventoryService(gateway, user_name="Sam Staff")


class TestDocumentNumberGenerator:

    def test_prefix_and_epoch_millis(self):
        numbers = DocumentNumberGenerator(clock=lambda: 1700000000.123)

        assert numbers.next("ISS") == "ISS-1700000000123"

    def test_same_millisecond_never_collides(self):
        numbers = DocumentNumberGenerator(clock=lambda: 1700000000.0)

        issued = [numbers.next("GR") for _ in range(3)]

        assert issued == ["GR-1700000000000", "GR-1700000000001", "GR-1700000000002"]


class TestOutbound:

    def test_rejects_more_than_on_hand(self, service, test_db, sample_items):
        """Quantity 10, outbound 15: rejected and nothing written."""
        with pytest.raises(InsufficientStockError) as exc_info:
            service.create_outbound(OutboundCreate(material_no="MAT-001", sloc="WH01", quantity=15))

        assert exc_info.value.available == 10
        assert exc_info.value.requested == 15
        assert exc_info.value.status_code == 400
        assert service.get_item("MAT-001", "WH01").quantity == 10
        assert count(test_db, MaterialOut) == 0
        assert count(test_db, MaterialTransaction) == 0

    def test_issues_stock_and_writes_ledger(self, service, test_db, sample_items):
        result = service.create_outbound(OutboundCreate(
            material_no="MAT-001", sloc="WH01", quantity=4, issue_number="ISS-1",
            receiver="Line 2", wbs="WBS-7", date=date(2025, 3, 1)
        ))

        assert result.quantity_before == 10
        assert result.quantity_after == 6
        assert result.item_id == "MAT-001:::WH01"
        assert result.transaction.type == "OUT"
        assert result.transaction.issue_number == "ISS-1"

        ledger = test_db.scalars(select(MaterialTransaction)).one()
        assert ledger.type == "OUT"
        assert ledger.quantity == 4
        assert ledger.reference_id == "ISS-1"
        assert ledger.remarks == "Outbound: Line 2"
        assert service.get_item("MAT-001", "WH01").quantity == 6

    def test_exact_quantity_empties_stock(self, service, sample_items):
        result = service.create_outbound(OutboundCreate(material_no="MAT-001", sloc="WH01", quantity=10))

        assert result.quantity_after == 0

    def test_fractional_quantities_issue_exactly(self, service, test_db):
        """0.3 on hand, issue 0.1 then 0.2: both succeed and nothing is left."""
        service.create_item(StockItemCreate(material_no="MAT-050", sloc="WH01", name="Solvent", quantity=0.3))

        first = service.create_outbound(OutboundCreate(material_no="MAT-050", sloc="WH01", quantity=0.1))
        second = service.create_outbound(OutboundCreate(material_no="MAT-050", sloc="WH01", quantity=0.2))

        assert first.quantity_after == 0.2
        assert second.quantity_before == 0.2
        assert second.quantity_after == 0
        assert service.get_item("MAT-050", "WH01").quantity == 0
        ledger = test_db.scalars(select(MaterialTransaction).order_by(MaterialTransaction.id)).all()
        assert [str(row.quantity) for row in ledger] == ["0.100", "0.200"]

    def test_fractional_history_text(self, service, test_db):
        service.create_item(StockItemCreate(material_no="MAT-050", sloc="WH01", name="Solvent", quantity=1))

        service.create_outbound(OutboundCreate(material_no="MAT-050", sloc="WH01", quantity=0.25))

        entry = test_db.scalars(select(StockHistory).where(StockHistory.action == "OUTBOUND")).one()
        assert entry.details.startswith("Issued 0.25 ")

    def test_ledger_date_is_posting_time(self, service, test_db, sample_items):
        """The detail row keeps the document date; the ledger row records when it was posted."""
        with freeze_time("2025-06-01 08:30:00"):
            service.create_outbound(OutboundCreate(
                material_no="MAT-001", sloc="WH01", quantity=1, date=date(2025, 5, 20)
            ))

        assert test_db.scalars(select(MaterialOut)).one().date == date(2025, 5, 20)
        posted = test_db.scalars(select(MaterialTransaction)).one().date
        assert (posted.year, posted.month, posted.day, posted.hour, posted.minute) == (2025, 6, 1, 8, 30)

    def test_notes_reach_detail_row_and_log(self, service, test_db, sample_items):
        result = service.create_outbound(OutboundCreate(
            material_no="MAT-001", sloc="WH01", quantity=1, notes="for shutdown"
        ))

        assert test_db.scalars(select(MaterialOut)).one().notes == "for shutdown"
        assert result.transaction.notes == "for shutdown"

    def test_defaults_for_blank_fields(self, service, test_db, sample_items):
        with freeze_time("2025-06-01 08:00:00"):
            result = service.create_outbound(OutboundCreate(
                material_no="MAT-002", sloc="WH01", quantity=1, issue_number="  ", receiver=""
            ))

        row = test_db.scalars(select(MaterialOut)).one()
        assert row.issue_number.startswith("ISS-")
        assert row.good_receipt == "Unknown"
        assert row.date == date(2025, 6, 1)
        assert result.transaction.receiver == "Unknown"

    def test_unknown_item(self, service, test_db, sample_items):
        with pytest.raises(ResourceNotFoundError):
            service.create_outbound(OutboundCreate(material_no="MAT-001", sloc="WH99", quantity=1))

        assert count(test_db, MaterialOut) == 0

    def test_appends_history(self, service, test_db, sample_items):
        service.create_outbound(OutboundCreate(material_no="MAT-001", sloc="WH01", quantity=2))

        entry = test_db.scalars(select(StockHistory).where(StockHistory.action == "OUTBOUND")).one()
        assert entry.user_name == "Sam Staff"
        assert entry.material_no == "MAT-001"


class TestInbound:

    def test_adds_exact_quantity(self, service, test_db, sample_items):
        """Quantity 10, inbound 5: 15 with one IN ledger entry of 5."""
        result = service.create_inbound(InboundCreate(material_no="MAT-001", sloc="WH01", quantity=5))

        assert result.quantity_after == 15
        assert count(test_db, MaterialIn) == 1
        ledger = test_db.scalars(select(MaterialTransaction)).all()
        assert len(ledger) == 1
        assert ledger[0].type == "IN"
        assert ledger[0].quantity == 5

    def test_generated_gr_number_and_receiver(self, service, test_db, sample_items):
        result = service.create_inbound(InboundCreate(material_no="MAT-003", sloc="WH02", quantity=2, po="PO-1"))

        row = test_db.scalars(select(MaterialIn)).one()
        assert row.gr_number.startswith("GR-")
        assert row.good_receipt == "Warehouse"
        assert row.po == "PO-1"
        ledger = test_db.scalars(select(MaterialTransaction)).one()
        assert ledger.remarks == f"Inbound GR: {row.gr_number}"
        assert result.transaction.id == f"IN-{row.id}"

    def test_maximum_stock_is_not_enforced(self, service, sample_items):
        """MAT-001 has a maximum of 12; receiving past it still succeeds."""
        result = service.create_inbound(InboundCreate(material_no="MAT-001", sloc="WH01", quantity=50))

        assert result.quantity_after == 60

    def test_unknown_item_writes_nothing(self, service, test_db, sample_items):
        with pytest.raises(ResourceNotFoundError):
            service.create_inbound(InboundCreate(material_no="NOPE", sloc="WH01", quantity=1))

        assert count(test_db, MaterialIn) == 0
        assert count(test_db, MaterialTransaction) == 0

    def test_failed_ledger_insert_rolls_back_everything(self, service, gateway, test_db, sample_items, monkeypatch):
        """A rejected ledger row leaves no detail row and no quantity change."""
        def broken_ledger_insert(**values):
            values["type"] = None  # violates NOT NULL
            return gateway._insert(MaterialTransaction, "material_transactions", values)

        monkeypatch.setattr(gateway, "insert_ledger_entry", broken_ledger_insert)

        with pytest.raises(PersistenceError):
            service.create_inbound(InboundCreate(material_no="MAT-001", sloc="WH01", quantity=5))

        assert count(test_db, MaterialIn) == 0
        assert count(test_db, MaterialTransaction) == 0
        assert service.get_item("MAT-001", "WH01").quantity == 10


class TestItemMaintenance:

    def test_create_item_writes_initial_history(self, service, test_db):
        item = service.create_item(StockItemCreate(
            material_no="MAT-100", sloc="WH01", name="Grease Cartridge", quantity=12
        ))

        assert item.key == "MAT-100:::WH01"
        assert item.uom == "PCS"
        assert item.operational_class == "General"
        entry = test_db.scalars(select(StockHistory)).one()
        assert entry.action == "CREATED"
        assert entry.details == "Initial Entry"

    def test_create_duplicate_key(self, service, sample_items):
        with pytest.raises(DuplicateResourceError):
            service.create_item(StockItemCreate(material_no="MAT-001", sloc="WH01", name="Again"))

    def test_same_material_other_location_is_allowed(self, service, sample_items):
        item = service.create_item(StockItemCreate(material_no="MAT-001", sloc="WH02", name="Oil"))

        assert item.key == "MAT-001:::WH02"

    def test_update_records_changed_fields(self, service, test_db, sample_items):
        item = service.update_item("MAT-002", "WH01", StockItemUpdate(rack_no="C-01", min_stock=8))

        assert item.rack_no == "C-01"
        assert item.minimum_stock == 8
        entry = test_db.scalars(select(StockHistory).where(StockHistory.action == "UPDATED")).one()
        assert "rack_no: B-07 -> C-01" in entry.details
        assert "min_stock" in entry.details

    def test_update_without_changes_writes_no_history(self, service, test_db, sample_items):
        service.update_item("MAT-002", "WH01", StockItemUpdate(rack_no="B-07"))

        assert count(test_db, StockHistory) == 0

    def test_delete_refused_while_referenced(self, service, sample_items):
        service.create_outbound(OutboundCreate(material_no="MAT-001", sloc="WH01", quantity=1))

        with pytest.raises(InvalidStateError) as exc_info:
            service.delete_item("MAT-001", "WH01")
        assert exc_info.value.status_code == 409

    def test_delete_unreferenced_item(self, service, sample_items):
        service.delete_item("MAT-003", "WH02")

        with pytest.raises(ResourceNotFoundError):
            service.get_item("MAT-003", "WH02")

    def test_list_items_attaches_history_per_item(self, service, sample_items):
        service.create_inbound(InboundCreate(material_no="MAT-001", sloc="WH01", quantity=1))
        service.create_inbound(InboundCreate(material_no="MAT-001", sloc="WH01", quantity=2))

        listed = dict((item.key, history) for item, history in service.list_items())

        assert len(listed) == 3
        assert [entry.action for entry in listed["MAT-001:::WH01"]] == ["INBOUND", "INBOUND"]
        assert listed["MAT-001:::WH01"][0].details.startswith("Received 2")
        assert listed["MAT-002:::WH01"] == []

    def test_list_items_search_and_filters(self, service, sample_items):
        assert [i.key for i, _ in service.list_items(search="bearing")] == ["MAT-002:::WH01"]
        assert [i.key for i, _ in service.list_items(sloc="WH02")] == ["MAT-003:::WH02"]
        assert [i.key for i, _ in service.list_items(category="CHEMICAL")] == ["MAT-001:::WH01"]

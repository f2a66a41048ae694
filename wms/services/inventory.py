"""
Stock master maintenance and inbound/outbound postings.

An inbound or outbound posting writes one detail row, one ledger row, one
stock quantity update and one audit entry inside a single transaction. The
stock row is locked while the quantity is checked and changed.
"""
import threading
import time
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from wms.core.config import settings
from wms.error_handlers import (
    DuplicateResourceError,
    InsufficientStockError,
    InvalidStateError,
    ResourceNotFoundError,
)
from wms.gateway import PersistenceGateway
from wms.logging_config import get_logger
from wms.models import StockHistory, StockItem, format_quantity, item_key, to_quantity
from wms.schemas.inventory import StockItemCreate, StockItemUpdate
from wms.schemas.transaction import InboundCreate, OutboundCreate, TransactionResult
from wms.services.ledger import inbound_log, outbound_log

logger = get_logger("inventory")

# API field name -> stock_items column
ITEM_FIELD_COLUMNS = {
    "name": "material_desc",
    "quantity": "quantity",
    "uom": "uom",
    "price": "price",
    "rack_no": "rack_no",
    "category": "operational_class",
    "min_stock": "minimum_stock",
    "max_stock": "maximum_stock",
    "pr_status": "pr_status",
    "pr_number": "pr_number",
    "wbs": "wbs",
    "is_consumable": "is_consumable",
}

QUANTITY_COLUMNS = ("quantity", "minimum_stock", "maximum_stock")


class DocumentNumberGenerator:
    """
    Issues ``<prefix>-<epoch ms>`` numbers that never repeat within a process.

    When two numbers are requested in the same millisecond the second one is
    bumped past the last issued value.
    """

    def __init__(self, clock=time.time):
        self._clock = clock
        self._last = 0
        self._lock = threading.Lock()

    def next(self, prefix: str) -> str:
        with self._lock:
            stamp = max(int(self._clock() * 1000), self._last + 1)
            self._last = stamp
        return f"{prefix}-{stamp}"


document_numbers = DocumentNumberGenerator()


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


class InventoryService:
    """Inventory operations for one request, over an injected gateway."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        user_name: str = "System",
        numbers: DocumentNumberGenerator = document_numbers,
    ):
        self.gateway = gateway
        self.user_name = user_name
        self.numbers = numbers

    # ------------------------------------------------------------------
    # Stock master
    # ------------------------------------------------------------------

    def get_item(self, material_no: str, sloc: str) -> StockItem:
        item = self.gateway.get_stock_item(material_no, sloc)
        if item is None:
            raise ResourceNotFoundError("Stock item", item_key(material_no, sloc))
        return item

    def list_items(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sloc: Optional[str] = None,
    ) -> list[tuple[StockItem, list[StockHistory]]]:
        """
        Items with their audit history attached.

        History is read once, newest first and capped at the configured
        limit, then distributed to the items it belongs to.
        """
        items = self.gateway.list_stock_items(search=search, category=category, sloc=sloc)
        history = self.gateway.list_history(limit=settings.history_limit)

        by_item: dict[str, list[StockHistory]] = {}
        for entry in history:
            by_item.setdefault(item_key(entry.material_no, entry.sloc), []).append(entry)

        return [(item, by_item.get(item.key, [])) for item in items]

    def item_history(self, material_no: str, sloc: str) -> Sequence[StockHistory]:
        self.get_item(material_no, sloc)
        return self.gateway.list_history(settings.history_limit, material_no=material_no, sloc=sloc)

    def create_item(self, data: StockItemCreate) -> StockItem:
        with self.gateway.atomic():
            if self.gateway.get_stock_item(data.material_no, data.sloc) is not None:
                raise DuplicateResourceError(
                    "Stock item", "id", item_key(data.material_no, data.sloc)
                )
            item = self.gateway.insert_stock_item(
                material_no=data.material_no,
                sloc=data.sloc,
                material_desc=data.name,
                quantity=to_quantity(data.quantity),
                uom=data.uom or settings.default_uom,
                price=data.price,
                price_per_unit=data.price,
                rack_no=data.rack_no,
                operational_class=data.category or settings.default_category,
                minimum_stock=to_quantity(data.min_stock),
                maximum_stock=None if data.max_stock is None else to_quantity(data.max_stock),
                pr_status=data.pr_status,
                pr_number=data.pr_number,
                wbs=data.wbs,
                is_consumable=data.is_consumable,
            )
            self.gateway.insert_history(
                data.material_no, data.sloc, "CREATED", "Initial Entry", self.user_name
            )

        logger.info(f"Created stock item {item.key}")
        return item

    def update_item(self, material_no: str, sloc: str, data: StockItemUpdate) -> StockItem:
        changes = data.model_dump(exclude_unset=True)
        with self.gateway.atomic():
            item = self.gateway.get_stock_item(material_no, sloc, for_update=True)
            if item is None:
                raise ResourceNotFoundError("Stock item", item_key(material_no, sloc))

            values = {}
            for field, value in changes.items():
                column = ITEM_FIELD_COLUMNS[field]
                if value is None and column in ("material_desc", "quantity", "uom", "price",
                                                "operational_class", "minimum_stock", "is_consumable"):
                    continue
                if value is not None and column in QUANTITY_COLUMNS:
                    value = to_quantity(value)
                if getattr(item, column) != value:
                    values[column] = value
            if "price" in values:
                values["price_per_unit"] = values["price"]

            if values:
                details = ", ".join(
                    f"{field}: {getattr(item, column)} -> {values[column]}"
                    for field, column in ITEM_FIELD_COLUMNS.items()
                    if column in values
                )
                self.gateway.update(item, values)
                self.gateway.insert_history(material_no, sloc, "UPDATED", details, self.user_name)

        return item

    def delete_item(self, material_no: str, sloc: str) -> None:
        with self.gateway.atomic():
            item = self.get_item(material_no, sloc)
            references = self.gateway.count_item_references(material_no, sloc)
            if references:
                raise InvalidStateError(
                    "Stock item", item.key, "referenced",
                    message=f"Stock item '{item.key}' is referenced by {references} transaction(s)"
                )
            self.gateway.delete(item)

        logger.info(f"Deleted stock item {item_key(material_no, sloc)}")

    def set_image(self, material_no: str, sloc: str, image_url: Optional[str]) -> Optional[str]:
        """Store a new image URL and return the one it replaced."""
        with self.gateway.atomic():
            item = self.get_item(material_no, sloc)
            previous = item.image_url
            self.gateway.update(item, {"image_url": image_url})
            self.gateway.insert_history(
                material_no, sloc, "IMAGE", "Image updated" if image_url else "Image removed", self.user_name
            )
        return previous

    # ------------------------------------------------------------------
    # Postings
    # ------------------------------------------------------------------

    def _locked_item(self, material_no: str, sloc: str) -> StockItem:
        item = self.gateway.get_stock_item(material_no, sloc, for_update=True)
        if item is None:
            raise ResourceNotFoundError("Stock item", item_key(material_no, sloc))
        return item

    def create_outbound(self, data: OutboundCreate) -> TransactionResult:
        """
        Issue material out of stock.

        Raises InsufficientStockError before writing anything when the
        requested quantity exceeds what is on hand.
        """
        issue_number = data.issue_number.strip() if not _blank(data.issue_number) else self.numbers.next("ISS")
        receiver = data.receiver if not _blank(data.receiver) else "Unknown"
        tx_date = data.date or date.today()
        quantity = to_quantity(data.quantity)

        with self.gateway.atomic():
            item = self._locked_item(data.material_no, data.sloc)
            before = to_quantity(item.quantity)
            if quantity > before:
                raise InsufficientStockError(item.key, available=float(before), requested=float(quantity))

            detail = self.gateway.insert_material_out(
                material_no=item.material_no,
                material_desc=item.material_desc,
                quantity=quantity,
                uom=item.uom,
                date=tx_date,
                sloc=item.sloc,
                good_receipt=receiver,
                remarks=data.remarks or "",
                issue_number=issue_number,
                wbs=data.wbs or "",
                gl_number=data.gl_number or "",
                gl_account=data.gl_account or "",
                notes=data.notes,
            )
            ledger = self.gateway.insert_ledger_entry(
                material_no=item.material_no,
                type="OUT",
                quantity=quantity,
                date=datetime.now(timezone.utc),
                reference_id=issue_number,
                remarks=f"Outbound: {receiver}",
            )
            self.gateway.update(item, {"quantity": before - quantity})
            self.gateway.insert_history(
                item.material_no, item.sloc, "OUTBOUND",
                f"Issued {format_quantity(quantity)} {item.uom} on {issue_number}", self.user_name
            )

        logger.info(f"Outbound {issue_number}: {format_quantity(quantity)} x {item.key} ({before} -> {item.quantity})")
        return TransactionResult(
            transaction=outbound_log(detail),
            ledger_id=ledger.id,
            item_id=item.key,
            quantity_before=before,
            quantity_after=item.quantity,
        )

    def create_inbound(self, data: InboundCreate) -> TransactionResult:
        """Receive material into stock. Maximum stock is advisory and not checked."""
        gr_number = data.gr_number.strip() if not _blank(data.gr_number) else self.numbers.next("GR")
        receiver = data.receiver if not _blank(data.receiver) else "Warehouse"
        tx_date = data.date or date.today()
        quantity = to_quantity(data.quantity)

        with self.gateway.atomic():
            item = self._locked_item(data.material_no, data.sloc)
            before = to_quantity(item.quantity)

            detail = self.gateway.insert_material_in(
                material_no=item.material_no,
                gr_number=gr_number,
                material_desc=item.material_desc,
                quantity=quantity,
                sloc=item.sloc,
                uom=item.uom,
                remarks=data.remarks or "",
                wbs=data.wbs or "",
                good_receipt=receiver,
                date=tx_date,
                po=data.po or "",
                reference=data.reference or "",
            )
            ledger = self.gateway.insert_ledger_entry(
                material_no=item.material_no,
                type="IN",
                quantity=quantity,
                date=datetime.now(timezone.utc),
                reference_id=gr_number,
                remarks=f"Inbound GR: {gr_number}",
            )
            self.gateway.update(item, {"quantity": before + quantity})
            self.gateway.insert_history(
                item.material_no, item.sloc, "INBOUND",
                f"Received {format_quantity(quantity)} {item.uom} on {gr_number}", self.user_name
            )

        if item.maximum_stock is not None and item.quantity > item.maximum_stock:
            logger.warning(f"{item.key} is above its maximum stock ({item.quantity} > {item.maximum_stock})")

        logger.info(f"Inbound {gr_number}: {format_quantity(quantity)} x {item.key} ({before} -> {item.quantity})")
        return TransactionResult(
            transaction=inbound_log(detail),
            ledger_id=ledger.id,
            item_id=item.key,
            quantity_before=before,
            quantity_after=item.quantity,
        )

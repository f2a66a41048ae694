"""
Stock master and audit history models.
"""
from typing import Optional
from decimal import Decimal
from sqlalchemy import String, Boolean, Numeric, Text, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from wms.core.database import Base

ITEM_KEY_SEPARATOR = ":::"

# Quantities are stored with three decimals
QUANTITY_SCALE = 3
_QUANTUM = Decimal(1).scaleb(-QUANTITY_SCALE)


def to_quantity(value) -> Decimal:
    """Exact quantity at the stored scale. Floats go through their shortest repr."""
    return Decimal(str(value)).quantize(_QUANTUM)


def format_quantity(value) -> str:
    """``Decimal("10.500")`` -> ``"10.5"``, ``Decimal("10.000")`` -> ``"10"``."""
    text = f"{to_quantity(value):f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def item_key(material_no: str, sloc: str) -> str:
    """Composite display identifier of a stock item."""
    return f"{material_no}{ITEM_KEY_SEPARATOR}{sloc}"


def split_item_key(key: str) -> tuple[str, str]:
    material_no, _, sloc = key.partition(ITEM_KEY_SEPARATOR)
    return material_no, sloc


class StockItem(Base):
    """A material held at one storage location."""

    __tablename__ = "stock_items"

    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    sloc: Mapped[str] = mapped_column(String(50), nullable=False)
    material_desc: Mapped[str] = mapped_column(String(500), nullable=False)

    # Stock levels
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), default=0, nullable=False)
    uom: Mapped[str] = mapped_column(String(20), default="PCS", nullable=False)
    minimum_stock: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), default=0, nullable=False)
    maximum_stock: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, QUANTITY_SCALE), nullable=True)

    # Pricing
    price: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)
    price_per_unit: Mapped[Optional[Decimal]] = mapped_column(Numeric(14, 2), nullable=True)

    # Classification and placement
    operational_class: Mapped[str] = mapped_column(String(100), default="General", nullable=False)
    rack_no: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_consumable: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Purchase requisition tracking
    pr_status: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    pr_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    wbs: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    image_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("material_no", "sloc", name="uq_stock_items_material_no_sloc"),
        Index("idx_stock_items_category", "operational_class"),
        Index("idx_stock_items_updated_at", "updated_at"),
    )

    @property
    def key(self) -> str:
        return item_key(self.material_no, self.sloc)

    def __repr__(self) -> str:
        return f"<StockItem(key={self.key}, qty={self.quantity})>"


class StockHistory(Base):
    """Audit entry for a stock item, keyed by material number and location."""

    __tablename__ = "stock_history"

    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    sloc: Mapped[str] = mapped_column(String(50), nullable=False)
    user_name: Mapped[str] = mapped_column(String(255), default="System", nullable=False)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    details: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_stock_history_item", "material_no", "sloc"),
        Index("idx_stock_history_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<StockHistory(item={self.material_no}:::{self.sloc}, action={self.action})>"

"""
Purchase order model.
"""
from typing import Optional
import datetime
from decimal import Decimal
from sqlalchemy import String, Date, Numeric, Index
from sqlalchemy.orm import Mapped, mapped_column

from wms.core.database import Base
from wms.models.stock_item import QUANTITY_SCALE


class PurchaseOrder(Base):
    """Order placed with a supplier for one stock item."""

    __tablename__ = "purchase_orders"

    item_id: Mapped[str] = mapped_column(String(160), nullable=False)  # material_no:::sloc
    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    sloc: Mapped[str] = mapped_column(String(50), nullable=False)
    item_name: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), nullable=False)
    order_date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="ORDERED", nullable=False)
    supplier: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    total_cost: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0, nullable=False)

    __table_args__ = (
        Index("idx_purchase_orders_status", "status"),
        Index("idx_purchase_orders_item", "material_no", "sloc"),
    )

    def __repr__(self) -> str:
        return f"<PurchaseOrder(id={self.id}, item={self.item_id}, status={self.status})>"

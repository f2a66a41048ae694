"""
Stock take (opname) session and count models.
"""
from typing import Optional
from decimal import Decimal
from datetime import datetime
from sqlalchemy import String, Numeric, Boolean, Integer, Text, DateTime, ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from wms.core.database import Base
from wms.models.stock_item import QUANTITY_SCALE


class StockOpnameSession(Base):
    """A physical counting session."""

    __tablename__ = "stock_opname_sessions"

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), default="OPEN", nullable=False)
    creator: Mapped[str] = mapped_column(String(255), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    total_items: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    closed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "StockOpnameItem",
        back_populates="session",
        cascade="all, delete-orphan",
        order_by="StockOpnameItem.id"
    )

    __table_args__ = (
        Index("idx_stock_opname_sessions_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<StockOpnameSession(id={self.id}, status={self.status})>"


class StockOpnameItem(Base):
    """System quantity versus counted quantity for one item in a session."""

    __tablename__ = "stock_opname_items"

    session_id: Mapped[int] = mapped_column(
        ForeignKey("stock_opname_sessions.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    sloc: Mapped[str] = mapped_column(String(50), nullable=False)
    material_desc: Mapped[str] = mapped_column(String(500), nullable=False)
    system_qty: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), default=0, nullable=False)
    physical_qty: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), default=0, nullable=False)
    variance: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), default=0, nullable=False)
    is_counted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    session = relationship("StockOpnameSession", back_populates="items")

    def __repr__(self) -> str:
        return f"<StockOpnameItem(session={self.session_id}, material={self.material_no}, variance={self.variance})>"

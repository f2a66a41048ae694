"""
Inbound/outbound detail records and the material ledger.
"""
from typing import Optional
from decimal import Decimal
import datetime
from sqlalchemy import String, Numeric, Date, DateTime, Text, Index
from sqlalchemy.orm import Mapped, mapped_column

from wms.core.database import Base
from wms.models.stock_item import QUANTITY_SCALE


class MaterialIn(Base):
    """Goods receipt line."""

    __tablename__ = "material_in"

    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    gr_number: Mapped[str] = mapped_column(String(100), nullable=False)
    material_desc: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), nullable=False)
    sloc: Mapped[str] = mapped_column(String(50), nullable=False)
    uom: Mapped[str] = mapped_column(String(20), nullable=False)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    wbs: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    good_receipt: Mapped[str] = mapped_column(String(255), nullable=False)  # receiver
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    po: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_material_in_item", "material_no", "sloc"),
        Index("idx_material_in_gr_number", "gr_number"),
        Index("idx_material_in_date", "date"),
    )

    def __repr__(self) -> str:
        return f"<MaterialIn(gr={self.gr_number}, material={self.material_no}, qty={self.quantity})>"


class MaterialOut(Base):
    """Material issue line."""

    __tablename__ = "material_out"

    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    material_desc: Mapped[str] = mapped_column(String(500), nullable=False)
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), nullable=False)
    uom: Mapped[str] = mapped_column(String(20), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    sloc: Mapped[str] = mapped_column(String(50), nullable=False)
    good_receipt: Mapped[str] = mapped_column(String(255), nullable=False)  # receiver
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    issue_number: Mapped[str] = mapped_column(String(100), nullable=False)
    wbs: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    gl_number: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    gl_account: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_material_out_item", "material_no", "sloc"),
        Index("idx_material_out_issue_number", "issue_number"),
        Index("idx_material_out_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<MaterialOut(issue={self.issue_number}, material={self.material_no}, qty={self.quantity})>"


class MaterialTransaction(Base):
    """Ledger row written alongside every inbound or outbound line."""

    __tablename__ = "material_transactions"

    material_no: Mapped[str] = mapped_column(String(100), nullable=False)
    type: Mapped[str] = mapped_column(String(3), nullable=False)  # 'IN' / 'OUT'
    quantity: Mapped[Decimal] = mapped_column(Numeric(14, QUANTITY_SCALE), nullable=False)
    date: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)  # posting time
    reference_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    remarks: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("idx_material_transactions_material", "material_no"),
        Index("idx_material_transactions_type", "type"),
        Index("idx_material_transactions_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<MaterialTransaction(type={self.type}, material={self.material_no}, qty={self.quantity})>"

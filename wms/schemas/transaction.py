"""
Pydantic schemas for inbound/outbound transactions and the grouped ledger view.
"""
from typing import Annotated, Literal, Optional, Union
import datetime
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class Direction(str, Enum):
    """Direction of a material movement."""
    IN = "IN"
    OUT = "OUT"


class TransactionLogBase(BaseModel):
    """Fields shared by both kinds of movement."""
    id: str
    material_no: str
    item_name: str
    quantity: float
    date: datetime.date
    status: str = "COMPLETED"
    receiver: Optional[str] = None
    remark: Optional[str] = None
    sloc: Optional[str] = None
    wbs: Optional[str] = None


class InboundLog(TransactionLogBase):
    """Goods receipt line as shown in the unified log."""
    type: Literal["IN"] = "IN"
    gr_number: Optional[str] = None
    po: Optional[str] = None
    reference: Optional[str] = None

    @property
    def document_number(self) -> Optional[str]:
        return self.gr_number

    @property
    def secondary_reference(self) -> Optional[str]:
        return self.po


class OutboundLog(TransactionLogBase):
    """Material issue line as shown in the unified log."""
    type: Literal["OUT"] = "OUT"
    issue_number: Optional[str] = None
    gl_account: Optional[str] = None
    gl_number: Optional[str] = None
    notes: Optional[str] = None

    @property
    def document_number(self) -> Optional[str]:
        return self.issue_number

    @property
    def secondary_reference(self) -> Optional[str]:
        return self.wbs


TransactionLog = Annotated[Union[InboundLog, OutboundLog], Field(discriminator="type")]


class TransactionGroup(BaseModel):
    """Transactions sharing one issue or GR number. Derived on every read."""
    group_key: str
    date: datetime.date
    receiver: str
    secondary_info: str  # WBS for OUT, purchase order for IN
    items: list[TransactionLog] = []
    total_qty: float = 0
    item_count: int = 0


class TransactionGroupPage(BaseModel):
    """One page of grouped documents."""
    direction: Direction
    search: str = ""
    items: list[TransactionGroup]
    total: int
    page: int
    page_size: int
    pages: int


class OutboundCreate(BaseModel):
    """Schema for issuing material out of a storage location."""
    material_no: str = Field(..., min_length=1)
    sloc: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    issue_number: Optional[str] = None
    wbs: Optional[str] = None
    gl_account: Optional[str] = None
    gl_number: Optional[str] = None
    receiver: Optional[str] = None
    remarks: Optional[str] = None
    notes: Optional[str] = None
    date: Optional[datetime.date] = None


class InboundCreate(BaseModel):
    """Schema for receiving material into a storage location."""
    material_no: str = Field(..., min_length=1)
    sloc: str = Field(..., min_length=1)
    quantity: float = Field(..., gt=0)
    gr_number: Optional[str] = None
    po: Optional[str] = None
    wbs: Optional[str] = None
    reference: Optional[str] = None
    receiver: Optional[str] = None
    remarks: Optional[str] = None
    date: Optional[datetime.date] = None


class TransactionResult(BaseModel):
    """Outcome of a committed inbound or outbound transaction."""
    transaction: TransactionLog
    ledger_id: int
    item_id: str
    quantity_before: float
    quantity_after: float


class LedgerEntryResponse(BaseModel):
    """Raw row of the material ledger."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    material_no: str
    type: Direction
    quantity: float
    date: datetime.datetime
    reference_id: Optional[str] = None
    remarks: Optional[str] = None

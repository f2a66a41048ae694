"""
Pydantic schemas for stock take (opname) sessions.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from enum import Enum


class OpnameStatus(str, Enum):
    """Session lifecycle: OPEN -> COMPLETED or CANCELLED."""
    OPEN = "OPEN"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class OpnameSessionCreate(BaseModel):
    """Schema for opening a counting session."""
    title: str = Field(..., min_length=1, max_length=255)
    notes: Optional[str] = None
    sloc: Optional[str] = Field(None, description="Limit the snapshot to one storage location")


class OpnameSessionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    status: OpnameStatus
    creator: str
    notes: Optional[str] = None
    total_items: int
    created_at: datetime
    closed_at: Optional[datetime] = None


class OpnameItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    session_id: int
    material_no: str
    sloc: str
    material_desc: str
    system_qty: float
    physical_qty: float
    variance: float
    is_counted: bool


class OpnameItemPage(BaseModel):
    items: list[OpnameItemResponse]
    total: int
    page: int
    page_size: int


class OpnameCountUpdate(BaseModel):
    """Physical quantity counted for one item."""
    physical_qty: float = Field(..., ge=0)


class OpnameStats(BaseModel):
    """Counting progress of a session."""
    total: int
    counted: int
    matched: int  # counted with zero variance
    variance: int  # counted with non-zero variance

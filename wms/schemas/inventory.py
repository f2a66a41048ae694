"""
Pydantic schemas for stock items and their audit history.
"""
from typing import Optional
from datetime import datetime
from decimal import Decimal
from pydantic import AliasChoices, BaseModel, Field, ConfigDict
from enum import Enum


class ItemCategory(str, Enum):
    """Categories offered when classifying an item; free text is also accepted."""
    CHEMICAL = "CHEMICAL"
    SPARE_PART = "SPARE PART"
    PACKAGING = "PACKAGING"
    OTHER = "OTHER"


class AuditEntry(BaseModel):
    """One entry of an item's audit history."""
    model_config = ConfigDict(from_attributes=True)

    date: datetime = Field(..., validation_alias=AliasChoices("created_at", "date"))
    user: str = Field(..., validation_alias=AliasChoices("user_name", "user"))
    action: str
    details: Optional[str] = None


class StockItemBase(BaseModel):
    """Editable item attributes."""
    name: str = Field(..., min_length=1, max_length=500)
    uom: Optional[str] = Field(None, max_length=20)
    price: Decimal = Field(default=Decimal("0"), ge=0)
    rack_no: Optional[str] = None
    category: Optional[str] = None
    min_stock: float = Field(default=0, ge=0)
    max_stock: Optional[float] = Field(None, ge=0)
    pr_status: Optional[str] = None
    pr_number: Optional[str] = None
    wbs: Optional[str] = None
    is_consumable: bool = False


class StockItemCreate(StockItemBase):
    """Schema for registering a material at a storage location."""
    material_no: str = Field(..., min_length=1, max_length=100)
    sloc: str = Field(..., min_length=1, max_length=50)
    quantity: float = Field(default=0, ge=0)


class StockItemUpdate(BaseModel):
    """Schema for a direct edit; only the fields sent are changed."""
    name: Optional[str] = Field(None, min_length=1, max_length=500)
    quantity: Optional[float] = Field(None, ge=0)
    uom: Optional[str] = Field(None, max_length=20)
    price: Optional[Decimal] = Field(None, ge=0)
    rack_no: Optional[str] = None
    category: Optional[str] = None
    min_stock: Optional[float] = Field(None, ge=0)
    max_stock: Optional[float] = Field(None, ge=0)
    pr_status: Optional[str] = None
    pr_number: Optional[str] = None
    wbs: Optional[str] = None
    is_consumable: Optional[bool] = None


class StockItemResponse(BaseModel):
    """Schema for stock item response."""
    id: str
    material_no: str
    sloc: str
    name: str
    description: Optional[str] = None
    quantity: float
    uom: str
    price: Decimal
    price_per_unit: Optional[Decimal] = None
    rack_no: Optional[str] = None
    category: str
    min_stock: float
    max_stock: Optional[float] = None
    pr_status: Optional[str] = None
    pr_number: Optional[str] = None
    wbs: Optional[str] = None
    is_consumable: bool
    image_url: Optional[str] = None
    last_updated: datetime
    history: list[AuditEntry] = []

    @classmethod
    def from_item(cls, item, history=()) -> "StockItemResponse":
        return cls(
            id=item.key,
            material_no=item.material_no,
            sloc=item.sloc,
            name=item.material_desc,
            description=item.material_desc,
            quantity=item.quantity,
            uom=item.uom,
            price=item.price,
            price_per_unit=item.price_per_unit,
            rack_no=item.rack_no,
            category=item.operational_class,
            min_stock=item.minimum_stock,
            max_stock=item.maximum_stock,
            pr_status=item.pr_status,
            pr_number=item.pr_number,
            wbs=item.wbs,
            is_consumable=item.is_consumable,
            image_url=item.image_url,
            last_updated=item.updated_at,
            history=[AuditEntry.model_validate(entry) for entry in history],
        )


class ImageUploadResponse(BaseModel):
    """Public URL of a stored item image."""
    item_id: str
    image_url: str

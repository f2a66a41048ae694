"""
Stock master API endpoints.

Items are addressed by their composite id ``<material_no>:::<sloc>``.
"""
from typing import Optional
from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from wms.core.permissions import Action, Module, require_permission
from wms.error_handlers import AppException
from wms.gateway import PersistenceGateway, get_gateway
from wms.models import split_item_key
from wms.models.user import User
from wms.schemas.inventory import (
    AuditEntry,
    ImageUploadResponse,
    StockItemCreate,
    StockItemResponse,
    StockItemUpdate,
)
from wms.services.inventory import InventoryService
from wms.storage import LocalObjectStorage, get_storage

router = APIRouter(prefix="/inventory", tags=["Inventory"])


@router.get("", response_model=list[StockItemResponse])
def list_items(
    search: Optional[str] = Query(None, description="Name, material number or rack"),
    category: Optional[str] = None,
    sloc: Optional[str] = None,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    List stock items with their audit history, most recently updated first.

    - **search**: Case-insensitive match on name, material number or rack
    - **category**: Exact category
    - **sloc**: Storage location
    """
    service = InventoryService(gateway, current_user.name)
    return [
        StockItemResponse.from_item(item, history)
        for item, history in service.list_items(search=search, category=category, sloc=sloc)
    ]


@router.post("", response_model=StockItemResponse, status_code=status.HTTP_201_CREATED)
def create_item(
    item_data: StockItemCreate,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.CREATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Register a material at a storage location."""
    service = InventoryService(gateway, current_user.name)
    item = service.create_item(item_data)
    return StockItemResponse.from_item(item, service.item_history(item.material_no, item.sloc))


@router.get("/{item_id}", response_model=StockItemResponse)
def get_item(
    item_id: str,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    service = InventoryService(gateway, current_user.name)
    material_no, sloc = split_item_key(item_id)
    item = service.get_item(material_no, sloc)
    return StockItemResponse.from_item(item, service.item_history(material_no, sloc))


@router.put("/{item_id}", response_model=StockItemResponse)
def update_item(
    item_id: str,
    item_update: StockItemUpdate,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Edit an item directly. Every change is recorded in its history."""
    service = InventoryService(gateway, current_user.name)
    material_no, sloc = split_item_key(item_id)
    item = service.update_item(material_no, sloc, item_update)
    return StockItemResponse.from_item(item, service.item_history(material_no, sloc))


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_item(
    item_id: str,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.DELETE)),
    gateway: PersistenceGateway = Depends(get_gateway),
    storage: LocalObjectStorage = Depends(get_storage)
):
    """Delete an item that no transaction refers to."""
    service = InventoryService(gateway, current_user.name)
    material_no, sloc = split_item_key(item_id)
    image_url = service.get_item(material_no, sloc).image_url
    service.delete_item(material_no, sloc)
    if image_url:
        storage.delete_image(image_url)


@router.get("/{item_id}/history", response_model=list[AuditEntry])
def get_item_history(
    item_id: str,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Audit entries of one item, newest first."""
    material_no, sloc = split_item_key(item_id)
    return InventoryService(gateway, current_user.name).item_history(material_no, sloc)


@router.post("/{item_id}/image", response_model=ImageUploadResponse)
def upload_item_image(
    item_id: str,
    file: UploadFile = File(...),
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway),
    storage: LocalObjectStorage = Depends(get_storage)
):
    """
    Upload an image for an item, replacing any previous one.

    JPEG, PNG or WebP up to 5MB. At most one byte past the limit is read
    from the upload.
    """
    service = InventoryService(gateway, current_user.name)
    material_no, sloc = split_item_key(item_id)
    service.get_item(material_no, sloc)

    content = storage.read_upload(file.file)
    image_url = storage.upload_image(content, file.filename, file.content_type, material_no)

    try:
        previous = service.set_image(material_no, sloc, image_url)
    except AppException:
        storage.delete_image(image_url)
        raise

    if previous and previous != image_url:
        storage.delete_image(previous)

    return ImageUploadResponse(item_id=item_id, image_url=image_url)


@router.delete("/{item_id}/image", status_code=status.HTTP_204_NO_CONTENT)
def delete_item_image(
    item_id: str,
    current_user: User = Depends(require_permission(Module.INVENTORY, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway),
    storage: LocalObjectStorage = Depends(get_storage)
):
    service = InventoryService(gateway, current_user.name)
    material_no, sloc = split_item_key(item_id)
    previous = service.set_image(material_no, sloc, None)
    if previous:
        storage.delete_image(previous)

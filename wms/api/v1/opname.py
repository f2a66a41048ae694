"""
Stock take (opname) endpoints.
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query, status

from wms.core.config import settings
from wms.core.permissions import Action, Module, require_permission
from wms.gateway import PersistenceGateway, get_gateway
from wms.models.user import User
from wms.schemas.opname import (
    OpnameCountUpdate,
    OpnameItemPage,
    OpnameItemResponse,
    OpnameSessionCreate,
    OpnameSessionResponse,
    OpnameStats,
)
from wms.services.opname import OpnameService

router = APIRouter(prefix="/opname", tags=["Stock Opname"])


@router.get("/sessions", response_model=list[OpnameSessionResponse])
def list_sessions(
    current_user: User = Depends(require_permission(Module.OPNAME, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return OpnameService(gateway, current_user.name).list_sessions()


@router.post("/sessions", response_model=OpnameSessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(
    session_data: OpnameSessionCreate,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.CREATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """
    Open a counting session with a snapshot of current stock.

    - **sloc**: Only snapshot one storage location
    """
    return OpnameService(gateway, current_user.name).create_session(
        title=session_data.title,
        notes=session_data.notes,
        creator=current_user.name,
        sloc=session_data.sloc,
    )


@router.get("/sessions/{session_id}", response_model=OpnameSessionResponse)
def get_session(
    session_id: int,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return OpnameService(gateway, current_user.name).get_session(session_id)


@router.get("/sessions/{session_id}/items", response_model=OpnameItemPage)
def list_session_items(
    session_id: int,
    page: int = Query(1, ge=1),
    page_size: Optional[int] = Query(None, ge=1, le=500),
    search: Optional[str] = None,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    page_size = page_size or settings.opname_page_size
    items, total = OpnameService(gateway, current_user.name).fetch_session_items(
        session_id, page=page, page_size=page_size, search=search
    )
    return OpnameItemPage(
        items=[OpnameItemResponse.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.get("/sessions/{session_id}/stats", response_model=OpnameStats)
def get_session_stats(
    session_id: int,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.READ)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Counting progress: total, counted, matched and with variance."""
    return OpnameService(gateway, current_user.name).session_stats(session_id)


@router.put("/items/{item_id}", response_model=OpnameItemResponse)
def update_count(
    item_id: int,
    count: OpnameCountUpdate,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Record the physical quantity of one item. The session must be OPEN."""
    return OpnameService(gateway, current_user.name).update_count(item_id, count.physical_qty)


@router.post("/sessions/{session_id}/finalize", response_model=OpnameSessionResponse)
def finalize_session(
    session_id: int,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    """Close the session and set stock of every counted item to its physical count."""
    return OpnameService(gateway, current_user.name).finalize_session(session_id)


@router.post("/sessions/{session_id}/cancel", response_model=OpnameSessionResponse)
def cancel_session(
    session_id: int,
    current_user: User = Depends(require_permission(Module.OPNAME, Action.UPDATE)),
    gateway: PersistenceGateway = Depends(get_gateway)
):
    return OpnameService(gateway, current_user.name).cancel_session(session_id)

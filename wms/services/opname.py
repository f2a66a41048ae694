"""
Stock take (opname) sessions.

Opening a session snapshots the current stock quantities. Counts are
recorded per item while the session is OPEN. Finalizing adds each counted
variance to the current stock quantity, floored at zero, so movements
posted after the snapshot are kept.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Sequence

from wms.error_handlers import InvalidStateError, ResourceNotFoundError
from wms.gateway import PersistenceGateway
from wms.logging_config import get_logger
from wms.models import StockOpnameItem, StockOpnameSession, format_quantity, to_quantity
from wms.schemas.opname import OpnameStats, OpnameStatus

logger = get_logger("opname")


class OpnameService:
    """Counting sessions over an injected gateway."""

    def __init__(self, gateway: PersistenceGateway, user_name: str = "System"):
        self.gateway = gateway
        self.user_name = user_name

    def create_session(
        self,
        title: str,
        notes: Optional[str] = None,
        creator: Optional[str] = None,
        sloc: Optional[str] = None,
    ) -> StockOpnameSession:
        """Open a session holding one uncounted line per stock item."""
        with self.gateway.atomic():
            stock = self.gateway.list_stock_items(sloc=sloc)
            session = self.gateway.insert_opname_session(
                title=title,
                notes=notes,
                creator=creator or self.user_name,
                status=OpnameStatus.OPEN.value,
                total_items=len(stock),
            )
            self.gateway.insert_opname_items(
                {
                    "session_id": session.id,
                    "material_no": item.material_no,
                    "sloc": item.sloc,
                    "material_desc": item.material_desc,
                    "system_qty": to_quantity(item.quantity),
                    "physical_qty": 0,
                    "variance": 0,
                    "is_counted": False,
                }
                for item in stock
            )

        logger.info(f"Opened opname session {session.id} '{title}' with {len(stock)} items")
        return session

    def list_sessions(self) -> Sequence[StockOpnameSession]:
        return self.gateway.list_opname_sessions()

    def get_session(self, session_id: int) -> StockOpnameSession:
        session = self.gateway.get_opname_session(session_id)
        if session is None:
            raise ResourceNotFoundError("Opname session", session_id)
        return session

    def fetch_session_items(
        self,
        session_id: int,
        page: int = 1,
        page_size: int = 50,
        search: Optional[str] = None,
    ) -> tuple[Sequence[StockOpnameItem], int]:
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be positive")
        self.get_session(session_id)
        return self.gateway.list_opname_items(
            session_id, search=search, offset=(page - 1) * page_size, limit=page_size
        )

    def fetch_all_session_items(self, session_id: int) -> Sequence[StockOpnameItem]:
        self.get_session(session_id)
        items, _ = self.gateway.list_opname_items(session_id)
        return items

    def session_stats(self, session_id: int) -> OpnameStats:
        items = self.fetch_all_session_items(session_id)
        counted = [item for item in items if item.is_counted]
        matched = sum(1 for item in counted if item.variance == 0)
        return OpnameStats(
            total=len(items),
            counted=len(counted),
            matched=matched,
            variance=len(counted) - matched,
        )

    def _require_open(self, session: StockOpnameSession) -> None:
        if session.status != OpnameStatus.OPEN.value:
            raise InvalidStateError(
                "Opname session", session.id, session.status,
                message=f"Opname session {session.id} is {session.status} and can no longer be changed"
            )

    def update_count(self, item_id: int, physical_qty: float) -> StockOpnameItem:
        if physical_qty < 0:
            raise ValueError("physical_qty must not be negative")

        with self.gateway.atomic():
            item = self.gateway.get_opname_item(item_id)
            if item is None:
                raise ResourceNotFoundError("Opname item", item_id)
            self._require_open(self.get_session(item.session_id))
            physical = to_quantity(physical_qty)
            self.gateway.update(item, {
                "physical_qty": physical,
                "variance": physical - to_quantity(item.system_qty),
                "is_counted": True,
            })
        return item

    def finalize_session(self, session_id: int) -> StockOpnameSession:
        """Apply every counted variance to stock and close the session."""
        adjusted = 0
        with self.gateway.atomic():
            session = self.get_session(session_id)
            self._require_open(session)

            for line in self.fetch_all_session_items(session_id):
                if not line.is_counted or line.variance == 0:
                    continue
                item = self.gateway.get_stock_item(line.material_no, line.sloc, for_update=True)
                if item is None:
                    logger.warning(
                        f"Opname session {session_id}: {line.material_no} at {line.sloc} no longer exists"
                    )
                    continue
                before = to_quantity(item.quantity)
                after = max(before + to_quantity(line.variance), Decimal(0))
                if before != to_quantity(line.system_qty):
                    logger.info(
                        f"Opname session {session_id}: {item.key} moved from {format_quantity(line.system_qty)} "
                        f"to {format_quantity(before)} since the snapshot"
                    )
                self.gateway.update(item, {"quantity": after})
                self.gateway.insert_history(
                    item.material_no, item.sloc, "OPNAME",
                    f"Stock take '{session.title}': {format_quantity(before)} -> {format_quantity(after)}",
                    self.user_name,
                )
                adjusted += 1

            self.gateway.update(session, {
                "status": OpnameStatus.COMPLETED.value,
                "closed_at": datetime.now(timezone.utc),
            })

        logger.info(f"Finalized opname session {session_id}, {adjusted} items adjusted")
        return session

    def cancel_session(self, session_id: int) -> StockOpnameSession:
        with self.gateway.atomic():
            session = self.get_session(session_id)
            self._require_open(session)
            self.gateway.update(session, {
                "status": OpnameStatus.CANCELLED.value,
                "closed_at": datetime.now(timezone.utc),
            })

        logger.info(f"Cancelled opname session {session_id}")
        return session

"""
Persistence gateway: row level access to the warehouse tables.

Every component receives a gateway instead of reaching for a global client,
so tests can hand in a gateway bound to an in-memory database. Each call
raises PersistenceError when the store rejects it; multi-step writes run
inside ``atomic()`` so they either all commit or all roll back.
"""
from contextlib import contextmanager
from datetime import date, datetime, time, timezone
from typing import Any, Iterable, Iterator, Optional, Sequence

from fastapi import Depends
from sqlalchemy import and_, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wms.core.database import get_db
from wms.error_handlers import PersistenceError
from wms.logging_config import get_logger
from wms.models import (
    MaterialIn,
    MaterialOut,
    MaterialTransaction,
    PurchaseOrder,
    StockHistory,
    StockItem,
    StockOpnameItem,
    StockOpnameSession,
    User,
)

logger = get_logger("gateway")

# In stock but at or below the minimum. Out-of-stock items are counted separately.
LOW_STOCK = and_(StockItem.quantity > 0, StockItem.quantity <= StockItem.minimum_stock)


class PersistenceGateway:
    """Data access for one unit of work, bound to a SQLAlchemy session."""

    def __init__(self, session: Session):
        self.session = session
        self._depth = 0

    # ------------------------------------------------------------------
    # Transaction scope
    # ------------------------------------------------------------------

    @contextmanager
    def atomic(self) -> Iterator["PersistenceGateway"]:
        """
        Commit everything written inside the block at once, or nothing.

        Nested blocks join the outermost one.
        """
        self._depth += 1
        try:
            yield self
            if self._depth == 1:
                self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.error(f"Transaction rolled back: {exc}", exc_info=True)
            raise PersistenceError("commit", "transaction", str(exc)) from exc
        except Exception:
            self.session.rollback()
            logger.warning("Transaction rolled back after an application error")
            raise
        finally:
            self._depth -= 1

    @contextmanager
    def _guard(self, operation: str, table: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            logger.error(f"Failed to {operation} {table}: {exc}")
            raise PersistenceError(operation, table, str(exc)) from exc

    def _insert(self, model, table: str, values: dict[str, Any]):
        with self._guard("insert into", table):
            row = model(**values)
            self.session.add(row)
            self.session.flush()
            return row

    def update(self, row, values: dict[str, Any]):
        """Apply column values to a loaded row."""
        with self._guard("update", row.__tablename__):
            for field, value in values.items():
                setattr(row, field, value)
            self.session.flush()
            return row

    def delete(self, row) -> None:
        with self._guard("delete from", row.__tablename__):
            self.session.delete(row)
            self.session.flush()

    # ------------------------------------------------------------------
    # stock_items
    # ------------------------------------------------------------------

    def list_stock_items(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        sloc: Optional[str] = None,
    ) -> Sequence[StockItem]:
        query = select(StockItem)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    StockItem.material_desc.ilike(pattern),
                    StockItem.material_no.ilike(pattern),
                    StockItem.rack_no.ilike(pattern),
                )
            )
        if category:
            query = query.where(StockItem.operational_class == category)
        if sloc:
            query = query.where(StockItem.sloc == sloc)
        query = query.order_by(StockItem.updated_at.desc(), StockItem.id.desc())

        with self._guard("select from", "stock_items"):
            return self.session.scalars(query).all()

    def get_stock_item(self, material_no: str, sloc: str, for_update: bool = False) -> Optional[StockItem]:
        query = select(StockItem).where(
            StockItem.material_no == material_no,
            StockItem.sloc == sloc,
        )
        if for_update:
            query = query.with_for_update()

        with self._guard("select from", "stock_items"):
            return self.session.scalars(query).one_or_none()

    def insert_stock_item(self, **values) -> StockItem:
        return self._insert(StockItem, "stock_items", values)

    def count_item_references(self, material_no: str, sloc: str) -> int:
        """Number of inbound and outbound detail rows that mention an item."""
        counts = []
        with self._guard("count", "material detail rows"):
            for model in (MaterialIn, MaterialOut):
                counts.append(self.session.scalar(
                    select(func.count(model.id)).where(
                        model.material_no == material_no,
                        model.sloc == sloc,
                    )
                ))
        return sum(counts)

    def stock_totals(self) -> dict[str, Any]:
        """Item count, total quantity, total value and low/out-of-stock counts."""
        with self._guard("aggregate", "stock_items"):
            row = self.session.execute(
                select(
                    func.count(StockItem.id),
                    func.coalesce(func.sum(StockItem.quantity), 0),
                    func.coalesce(func.sum(StockItem.quantity * StockItem.price), 0),
                )
            ).one()
            low_stock = self.session.scalar(select(func.count(StockItem.id)).where(LOW_STOCK))
            out_of_stock = self.session.scalar(
                select(func.count(StockItem.id)).where(StockItem.quantity <= 0)
            )

        return {
            "total_items": row[0],
            "total_quantity": float(row[1]),
            "total_stock_value": row[2],
            "low_stock_count": low_stock or 0,
            "out_of_stock_count": out_of_stock or 0,
        }

    def list_low_stock_items(self, limit: int = 50) -> Sequence[StockItem]:
        """Low stock items (see ``LOW_STOCK``), largest shortfall first."""
        query = (
            select(StockItem)
            .where(LOW_STOCK)
            .order_by((StockItem.minimum_stock - StockItem.quantity).desc(), StockItem.material_no)
            .limit(limit)
        )
        with self._guard("select from", "stock_items"):
            return self.session.scalars(query).all()

    # ------------------------------------------------------------------
    # stock_history
    # ------------------------------------------------------------------

    def list_history(
        self,
        limit: int,
        material_no: Optional[str] = None,
        sloc: Optional[str] = None,
    ) -> Sequence[StockHistory]:
        """Audit entries, newest first, capped at ``limit``."""
        query = select(StockHistory)
        if material_no is not None:
            query = query.where(StockHistory.material_no == material_no)
        if sloc is not None:
            query = query.where(StockHistory.sloc == sloc)
        query = query.order_by(StockHistory.created_at.desc(), StockHistory.id.desc()).limit(limit)

        with self._guard("select from", "stock_history"):
            return self.session.scalars(query).all()

    def insert_history(
        self,
        material_no: str,
        sloc: str,
        action: str,
        details: str,
        user_name: str = "System",
    ) -> StockHistory:
        return self._insert(StockHistory, "stock_history", {
            "material_no": material_no,
            "sloc": sloc,
            "action": action,
            "details": details,
            "user_name": user_name,
        })

    # ------------------------------------------------------------------
    # material_in / material_out / material_transactions
    # ------------------------------------------------------------------

    def insert_material_in(self, **values) -> MaterialIn:
        return self._insert(MaterialIn, "material_in", values)

    def insert_material_out(self, **values) -> MaterialOut:
        return self._insert(MaterialOut, "material_out", values)

    def insert_ledger_entry(self, **values) -> MaterialTransaction:
        return self._insert(MaterialTransaction, "material_transactions", values)

    def list_material_in(self) -> Sequence[MaterialIn]:
        query = select(MaterialIn).order_by(MaterialIn.date.desc(), MaterialIn.id.desc())
        with self._guard("select from", "material_in"):
            return self.session.scalars(query).all()

    def list_material_out(self) -> Sequence[MaterialOut]:
        query = select(MaterialOut).order_by(MaterialOut.created_at.desc(), MaterialOut.id.desc())
        with self._guard("select from", "material_out"):
            return self.session.scalars(query).all()

    def list_ledger_entries(
        self,
        material_no: Optional[str] = None,
        limit: int = 100,
    ) -> Sequence[MaterialTransaction]:
        query = select(MaterialTransaction)
        if material_no:
            query = query.where(MaterialTransaction.material_no == material_no)
        query = query.order_by(MaterialTransaction.created_at.desc(), MaterialTransaction.id.desc()).limit(limit)
        with self._guard("select from", "material_transactions"):
            return self.session.scalars(query).all()

    def movement_totals(self, since: date) -> dict[str, dict[str, float]]:
        """Ledger row count and quantity per direction posted from local midnight of ``since`` on."""
        start = datetime.combine(since, time.min).astimezone(timezone.utc)
        query = (
            select(
                MaterialTransaction.type,
                func.count(MaterialTransaction.id),
                func.coalesce(func.sum(MaterialTransaction.quantity), 0),
            )
            .where(MaterialTransaction.date >= start)
            .group_by(MaterialTransaction.type)
        )
        totals = {"IN": {"count": 0, "quantity": 0.0}, "OUT": {"count": 0, "quantity": 0.0}}
        with self._guard("aggregate", "material_transactions"):
            for direction, count, quantity in self.session.execute(query):
                totals[direction] = {"count": count, "quantity": float(quantity)}
        return totals

    # ------------------------------------------------------------------
    # purchase_orders
    # ------------------------------------------------------------------

    def list_purchase_orders(self, status: Optional[str] = None) -> Sequence[PurchaseOrder]:
        query = select(PurchaseOrder)
        if status:
            query = query.where(PurchaseOrder.status == status)
        query = query.order_by(PurchaseOrder.order_date.desc(), PurchaseOrder.id.desc())
        with self._guard("select from", "purchase_orders"):
            return self.session.scalars(query).all()

    def get_purchase_order(self, order_id: int) -> Optional[PurchaseOrder]:
        with self._guard("select from", "purchase_orders"):
            return self.session.get(PurchaseOrder, order_id)

    def insert_purchase_order(self, **values) -> PurchaseOrder:
        return self._insert(PurchaseOrder, "purchase_orders", values)

    def count_purchase_orders(self, status: str) -> int:
        with self._guard("count", "purchase_orders"):
            return self.session.scalar(
                select(func.count(PurchaseOrder.id)).where(PurchaseOrder.status == status)
            ) or 0

    # ------------------------------------------------------------------
    # stock_opname_sessions / stock_opname_items
    # ------------------------------------------------------------------

    def list_opname_sessions(self) -> Sequence[StockOpnameSession]:
        query = select(StockOpnameSession).order_by(
            StockOpnameSession.created_at.desc(), StockOpnameSession.id.desc()
        )
        with self._guard("select from", "stock_opname_sessions"):
            return self.session.scalars(query).all()

    def get_opname_session(self, session_id: int) -> Optional[StockOpnameSession]:
        with self._guard("select from", "stock_opname_sessions"):
            return self.session.get(StockOpnameSession, session_id)

    def insert_opname_session(self, **values) -> StockOpnameSession:
        return self._insert(StockOpnameSession, "stock_opname_sessions", values)

    def insert_opname_items(self, rows: Iterable[dict[str, Any]]) -> int:
        items = [StockOpnameItem(**values) for values in rows]
        with self._guard("insert into", "stock_opname_items"):
            self.session.add_all(items)
            self.session.flush()
        return len(items)

    def get_opname_item(self, item_id: int) -> Optional[StockOpnameItem]:
        with self._guard("select from", "stock_opname_items"):
            return self.session.get(StockOpnameItem, item_id)

    def list_opname_items(
        self,
        session_id: int,
        search: Optional[str] = None,
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> tuple[Sequence[StockOpnameItem], int]:
        """Items of a session and the total matching count."""
        query = select(StockOpnameItem).where(StockOpnameItem.session_id == session_id)
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    StockOpnameItem.material_desc.ilike(pattern),
                    StockOpnameItem.material_no.ilike(pattern),
                )
            )

        with self._guard("select from", "stock_opname_items"):
            total = self.session.scalar(select(func.count()).select_from(query.subquery())) or 0
            query = query.order_by(StockOpnameItem.id).offset(offset)
            if limit is not None:
                query = query.limit(limit)
            return self.session.scalars(query).all(), total

    def count_opname_sessions(self, status: str) -> int:
        with self._guard("count", "stock_opname_sessions"):
            return self.session.scalar(
                select(func.count(StockOpnameSession.id)).where(StockOpnameSession.status == status)
            ) or 0

    # ------------------------------------------------------------------
    # users
    # ------------------------------------------------------------------

    def list_users(self) -> Sequence[User]:
        with self._guard("select from", "users"):
            return self.session.scalars(select(User).order_by(User.name, User.id)).all()

    def get_user(self, user_id: int) -> Optional[User]:
        with self._guard("select from", "users"):
            return self.session.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        with self._guard("select from", "users"):
            return self.session.scalars(
                select(User).where(func.lower(User.email) == email.lower())
            ).one_or_none()

    def insert_user(self, **values) -> User:
        """Insert a user. Emails are stored lower-cased."""
        values["email"] = values["email"].strip().lower()
        return self._insert(User, "users", values)

    def count_users(self) -> int:
        with self._guard("count", "users"):
            return self.session.scalar(select(func.count(User.id))) or 0


def get_gateway(db: Session = Depends(get_db)) -> PersistenceGateway:
    """Dependency for FastAPI endpoints."""
    return PersistenceGateway(db)

"""
Document centric view over the line item ledger.

Inbound and outbound detail rows are merged into one log, filtered by
direction and search term, grouped by their GR or issue number and paged.
Groups are recomputed on every read and never stored.
"""
import math
from decimal import Decimal
from typing import Iterable, Optional, Sequence, Union

from wms.models.stock_item import to_quantity
from wms.schemas.transaction import (
    Direction,
    InboundLog,
    OutboundLog,
    TransactionGroup,
    TransactionGroupPage,
)

MISC_OUT = "MISC-OUT"
MISC_IN = "MISC-IN"

AnyLog = Union[InboundLog, OutboundLog]


def inbound_log(row) -> InboundLog:
    """Map a material_in row to its log entry."""
    return InboundLog(
        id=f"IN-{row.id}",
        material_no=row.material_no,
        item_name=row.material_desc,
        quantity=float(row.quantity),
        date=row.date,
        gr_number=row.gr_number,
        po=row.po,
        reference=row.reference,
        wbs=row.wbs,
        receiver=row.good_receipt,
        remark=row.remarks,
        sloc=row.sloc,
    )


def outbound_log(row) -> OutboundLog:
    """Map a material_out row to its log entry."""
    return OutboundLog(
        id=f"OUT-{row.id}",
        material_no=row.material_no,
        item_name=row.material_desc,
        quantity=float(row.quantity),
        date=row.date,
        issue_number=row.issue_number,
        wbs=row.wbs,
        gl_account=row.gl_account,
        gl_number=row.gl_number,
        notes=row.notes,
        receiver=row.good_receipt,
        remark=row.remarks,
        sloc=row.sloc,
    )


def build_transaction_logs(inbound_rows: Iterable, outbound_rows: Iterable) -> list[AnyLog]:
    """Unified log of both directions, newest date first."""
    logs: list[AnyLog] = [outbound_log(row) for row in outbound_rows]
    logs.extend(inbound_log(row) for row in inbound_rows)
    logs.sort(key=lambda log: log.date, reverse=True)
    return logs


def _contains(value: Optional[str], term: str) -> bool:
    return value is not None and term in value.lower()


def matches_search(log: AnyLog, search: str) -> bool:
    """Case-insensitive match on item name, material no, document no or remark."""
    term = (search or "").lower()
    if not term:
        return True
    return (
        _contains(log.item_name, term)
        or _contains(log.material_no, term)
        or _contains(log.document_number, term)
        or _contains(log.remark, term)
    )


def filter_transactions(logs: Iterable[AnyLog], direction: Direction, search: str = "") -> list[AnyLog]:
    direction = Direction(direction)
    return [
        log for log in logs
        if log.type == direction.value and matches_search(log, search)
    ]


def group_key(log: AnyLog, direction: Direction) -> str:
    sentinel = MISC_OUT if direction == Direction.OUT else MISC_IN
    return log.document_number or sentinel


def group_transactions(logs: Iterable[AnyLog], direction: Direction) -> list[TransactionGroup]:
    """
    Group logs by document number.

    The first log seen for a key supplies the group's date, receiver and
    secondary reference. Groups come back newest first; ties keep the order
    in which their keys were first seen.
    """
    direction = Direction(direction)
    groups: dict[str, TransactionGroup] = {}
    totals: dict[str, Decimal] = {}

    for log in logs:
        key = group_key(log, direction)
        group = groups.get(key)
        if group is None:
            group = groups[key] = TransactionGroup(
                group_key=key,
                date=log.date,
                receiver=log.receiver or "-",
                secondary_info=log.secondary_reference or "-",
            )
        group.items.append(log)
        totals[key] = totals.get(key, Decimal(0)) + to_quantity(log.quantity)
        group.total_qty = float(totals[key])
        group.item_count += 1

    return sorted(groups.values(), key=lambda group: group.date, reverse=True)


def page_count(total: int, page_size: int) -> int:
    return math.ceil(total / page_size) if total else 0


def paginate(groups: Sequence[TransactionGroup], page: int, page_size: int) -> list[TransactionGroup]:
    """Slice one page out of the already grouped and sorted documents."""
    if page < 1 or page_size < 1:
        raise ValueError("page and page_size must be positive")
    start = (page - 1) * page_size
    return list(groups[start:start + page_size])


def aggregate_ledger(
    logs: Iterable[AnyLog],
    direction: Direction,
    search: str = "",
    page: int = 1,
    page_size: int = 10,
) -> TransactionGroupPage:
    """Filter, group, then paginate over documents rather than raw rows."""
    direction = Direction(direction)
    groups = group_transactions(filter_transactions(logs, direction, search), direction)
    return TransactionGroupPage(
        direction=direction,
        search=search or "",
        items=paginate(groups, page, page_size),
        total=len(groups),
        page=page,
        page_size=page_size,
        pages=page_count(len(groups), page_size),
    )

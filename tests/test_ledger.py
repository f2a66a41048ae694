"""Tests for grouping, filtering and paging the transaction ledger."""
from datetime import date
from types import SimpleNamespace

import pytest

from wms.schemas.transaction import Direction, InboundLog, OutboundLog
from wms.services.ledger import (
    MISC_IN,
    MISC_OUT,
    aggregate_ledger,
    build_transaction_logs,
    filter_transactions,
    group_transactions,
    page_count,
    paginate,
)


def out_log(id, issue_number, quantity, day=1, name="Bearing 6204", **extra):
    return OutboundLog(
        id=f"OUT-{id}",
        material_no=extra.pop("material_no", "MAT-002"),
        item_name=name,
        quantity=quantity,
        date=date(2025, 3, day),
        issue_number=issue_number,
        **extra
    )


def in_log(id, gr_number, quantity, day=1, name="Hydraulic Oil 20L", **extra):
    return InboundLog(
        id=f"IN-{id}",
        material_no=extra.pop("material_no", "MAT-001"),
        item_name=name,
        quantity=quantity,
        date=date(2025, 3, day),
        gr_number=gr_number,
        **extra
    )


class TestBuildTransactionLogs:

    def test_maps_rows_and_sorts_newest_first(self):
        inbound = [SimpleNamespace(
            id=1, material_no="MAT-001", material_desc="Oil", quantity=5, date=date(2025, 3, 1),
            gr_number="GR-1", po="PO-9", reference=None, wbs=None, good_receipt="Warehouse",
            remarks=None, sloc="WH01"
        )]
        outbound = [SimpleNamespace(
            id=7, material_no="MAT-002", material_desc="Bearing", quantity=2, date=date(2025, 3, 4),
            issue_number="ISS-1", wbs="WBS-1", gl_account=None, gl_number=None, good_receipt="Line 2",
            remarks="urgent", sloc="WH01", notes="for shutdown"
        )]

        logs = build_transaction_logs(inbound, outbound)

        assert [log.id for log in logs] == ["OUT-7", "IN-1"]
        assert logs[0].type == "OUT"
        assert logs[0].receiver == "Line 2"
        assert logs[0].notes == "for shutdown"
        assert logs[1].type == "IN"
        assert logs[1].po == "PO-9"
        assert logs[1].status == "COMPLETED"


class TestFilterTransactions:

    def test_keeps_only_active_direction(self):
        logs = [out_log(1, "ISS-1", 3), in_log(2, "GR-1", 4)]

        assert [log.id for log in filter_transactions(logs, Direction.OUT)] == ["OUT-1"]
        assert [log.id for log in filter_transactions(logs, "IN")] == ["IN-2"]

    def test_search_is_case_insensitive(self):
        logs = [out_log(1, "ISS-1", 3, name="Bearing 6204"), out_log(2, "ISS-2", 1, name="V-Belt")]

        result = filter_transactions(logs, Direction.OUT, "bEaRiNg")

        assert [log.id for log in result] == ["OUT-1"]

    @pytest.mark.parametrize("term", ["mat-002", "iss-77", "for pump"])
    def test_search_matches_material_document_and_remark(self, term):
        logs = [out_log(1, "ISS-77", 3, remark="For pump P-101")]

        assert len(filter_transactions(logs, Direction.OUT, term)) == 1

    def test_search_uses_direction_specific_document_number(self):
        """An inbound log is matched by its GR number, not the issue number field."""
        logs = [in_log(1, "GR-555", 3)]

        assert len(filter_transactions(logs, Direction.IN, "gr-555")) == 1
        assert filter_transactions(logs, Direction.IN, "iss") == []

    def test_missing_fields_never_match(self):
        logs = [out_log(1, None, 3, remark=None)]

        assert filter_transactions(logs, Direction.OUT, "iss") == []

    def test_empty_search_matches_everything(self):
        logs = [out_log(1, "ISS-1", 3), out_log(2, "ISS-2", 4)]

        assert len(filter_transactions(logs, Direction.OUT, "")) == 2
        assert len(filter_transactions(logs, Direction.OUT, None)) == 2

    def test_surrounding_whitespace_is_part_of_the_term(self):
        logs = [out_log(1, "ISS-1", 3, name="Bearing 6204"), out_log(2, "ISS-2", 4, name="Seal kit")]

        assert [log.id for log in filter_transactions(logs, Direction.OUT, " 6204")] == ["OUT-1"]
        assert filter_transactions(logs, Direction.OUT, "6204 ") == []


class TestGroupTransactions:

    def test_two_lines_on_one_issue_number(self):
        """Two OUT rows on ISS-1 with 3 and 7 form one group of 10."""
        logs = [out_log(1, "ISS-1", 3), out_log(2, "ISS-1", 7)]

        groups = group_transactions(logs, Direction.OUT)

        assert len(groups) == 1
        assert groups[0].group_key == "ISS-1"
        assert groups[0].total_qty == 10
        assert groups[0].item_count == 2

    def test_fractional_lines_total_exactly(self):
        logs = [out_log(1, "ISS-1", 0.1), out_log(2, "ISS-1", 0.2)]

        assert group_transactions(logs, Direction.OUT)[0].total_qty == 0.3

    def test_blank_keys_go_to_misc_groups(self):
        out_groups = group_transactions([out_log(1, None, 1), out_log(2, "", 2)], Direction.OUT)
        in_groups = group_transactions([in_log(3, None, 5)], Direction.IN)

        assert [g.group_key for g in out_groups] == [MISC_OUT]
        assert out_groups[0].item_count == 2
        assert [g.group_key for g in in_groups] == [MISC_IN]

    def test_first_transaction_supplies_group_header(self):
        logs = [
            out_log(1, "ISS-1", 3, day=5, receiver="Line 2", wbs="WBS-A"),
            out_log(2, "ISS-1", 7, day=2, receiver="Line 9", wbs="WBS-B"),
        ]

        group = group_transactions(logs, Direction.OUT)[0]

        assert group.date == date(2025, 3, 5)
        assert group.receiver == "Line 2"
        assert group.secondary_info == "WBS-A"

    def test_missing_receiver_and_secondary_default_to_dash(self):
        group = group_transactions([in_log(1, "GR-1", 2)], Direction.IN)[0]

        assert group.receiver == "-"
        assert group.secondary_info == "-"

    def test_inbound_secondary_info_is_purchase_order(self):
        group = group_transactions([in_log(1, "GR-1", 2, po="PO-42")], Direction.IN)[0]

        assert group.secondary_info == "PO-42"

    def test_groups_sorted_newest_first_and_stable(self):
        logs = [
            out_log(1, "ISS-A", 1, day=1),
            out_log(2, "ISS-B", 1, day=9),
            out_log(3, "ISS-C", 1, day=1),
        ]

        groups = group_transactions(logs, Direction.OUT)

        assert [g.group_key for g in groups] == ["ISS-B", "ISS-A", "ISS-C"]


class TestPagination:

    def test_page_count_rounds_up(self):
        assert page_count(11, 10) == 2
        assert page_count(10, 10) == 1
        assert page_count(0, 10) == 0

    def test_empty_first_page(self):
        assert paginate([], 1, 10) == []

    def test_rejects_non_positive_values(self):
        with pytest.raises(ValueError):
            paginate([], 0, 10)
        with pytest.raises(ValueError):
            paginate([], 1, 0)

    def test_aggregate_pages_over_groups_not_rows(self):
        logs = [out_log(i, f"ISS-{i % 3}", 1, day=1 + i % 3) for i in range(9)]

        page = aggregate_ledger(logs, Direction.OUT, page=2, page_size=2)

        assert page.total == 3
        assert page.pages == 2
        assert len(page.items) == 1
        assert sum(g.item_count for g in aggregate_ledger(logs, "OUT", page_size=10).items) == 9

    def test_aggregate_empty_result(self):
        page = aggregate_ledger([out_log(1, "ISS-1", 3)], Direction.OUT, search="nothing matches")

        assert page.items == []
        assert page.total == 0
        assert page.pages == 0
        assert page.page == 1

"""Tests for database models and constraints."""
import pytest
from decimal import Decimal
from sqlalchemy.exc import IntegrityError

from wms.models import StockItem, User, item_key, split_item_key


class TestItemKey:

    def test_round_trip(self):
        assert item_key("MAT-001", "WH01") == "MAT-001:::WH01"
        assert split_item_key("MAT-001:::WH01") == ("MAT-001", "WH01")

    def test_missing_separator(self):
        assert split_item_key("MAT-001") == ("MAT-001", "")


class TestStockItemModel:

    def test_defaults(self, test_db):
        item = StockItem(material_no="MAT-010", sloc="WH01", material_desc="Gasket")
        test_db.add(item)
        test_db.commit()

        assert item.id is not None
        assert item.quantity == 0
        assert item.uom == "PCS"
        assert item.operational_class == "General"
        assert item.key == "MAT-010:::WH01"
        assert item.created_at is not None

    def test_same_material_in_two_locations(self, test_db):
        test_db.add_all([
            StockItem(material_no="MAT-010", sloc="WH01", material_desc="Gasket"),
            StockItem(material_no="MAT-010", sloc="WH02", material_desc="Gasket"),
        ])
        test_db.commit()

        assert test_db.query(StockItem).count() == 2

    def test_unique_material_and_location(self, test_db):
        test_db.add(StockItem(material_no="MAT-010", sloc="WH01", material_desc="Gasket"))
        test_db.commit()

        test_db.add(StockItem(material_no="MAT-010", sloc="WH01", material_desc="Gasket again", price=Decimal("1")))
        with pytest.raises(IntegrityError):
            test_db.commit()


class TestUserModel:

    def test_is_active(self, test_db):
        user = User(email="a@example.com", password_hash="x", name="A")
        test_db.add(user)
        test_db.commit()

        assert user.role == "USER"
        assert user.is_active is True

        user.status = "INACTIVE"
        assert user.is_active is False

    def test_unique_email(self, test_db):
        test_db.add(User(email="a@example.com", password_hash="x", name="A"))
        test_db.commit()

        test_db.add(User(email="a@example.com", password_hash="y", name="B"))
        with pytest.raises(IntegrityError):
            test_db.commit()

    def test_email_unique_regardless_of_case(self, test_db):
        test_db.add(User(email="a@example.com", password_hash="x", name="A"))
        test_db.commit()

        test_db.add(User(email="A@Example.com", password_hash="y", name="B"))
        with pytest.raises(IntegrityError):
            test_db.commit()

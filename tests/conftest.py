"""Shared test fixtures for all tests."""
import io
import os
import tempfile

# Settings are read on import, so the environment must be prepared first
_TMP_DIR = tempfile.mkdtemp(prefix="wms-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["STORAGE_DIR"] = os.path.join(_TMP_DIR, "storage")

import pytest
from decimal import Decimal
from PIL import Image
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from wms.core.database import Base, get_db
from wms.core.security import create_access_token, get_password_hash
from wms.gateway import PersistenceGateway
from wms.main import app
from wms.models import StockItem, User
from wms.storage import LocalObjectStorage, get_storage

TEST_PASSWORD = "secret123"


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh in-memory SQLite database for each test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def gateway(test_db):
    return PersistenceGateway(test_db)


@pytest.fixture
def storage(tmp_path):
    """Image storage rooted in a per-test directory."""
    return LocalObjectStorage(root=str(tmp_path / "storage"), public_url="/storage")


@pytest.fixture(scope="function")
def client(test_db, storage):
    """Create a test client with dependency override."""
    def override_get_db():
        try:
            yield test_db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def _make_user(db, email, name, role, status="ACTIVE"):
    user = User(
        email=email,
        password_hash=get_password_hash(TEST_PASSWORD),
        name=name,
        role=role,
        status=status
    )
    db.add(user)
    db.commit()
    return user


@pytest.fixture
def admin_user(test_db):
    return _make_user(test_db, "admin@example.com", "Ada Admin", "ADMIN")


@pytest.fixture
def staff_user(test_db):
    return _make_user(test_db, "staff@example.com", "Sam Staff", "STAFF")


@pytest.fixture
def basic_user(test_db):
    return _make_user(test_db, "user@example.com", "Uma User", "USER")


@pytest.fixture
def inactive_user(test_db):
    return _make_user(test_db, "gone@example.com", "Ian Inactive", "STAFF", status="INACTIVE")


def _headers(user):
    return {"Authorization": f"Bearer {create_access_token(subject=user.id)}"}


@pytest.fixture
def admin_headers(admin_user):
    return _headers(admin_user)


@pytest.fixture
def staff_headers(staff_user):
    return _headers(staff_user)


@pytest.fixture
def user_headers(basic_user):
    return _headers(basic_user)


@pytest.fixture
def sample_items(test_db):
    """Three stock items: one healthy, one low, one out of stock."""
    items = [
        StockItem(
            material_no="MAT-001",
            sloc="WH01",
            material_desc="Hydraulic Oil 20L",
            quantity=10,
            uom="PAIL",
            price=Decimal("2.50"),
            price_per_unit=Decimal("2.50"),
            operational_class="CHEMICAL",
            minimum_stock=5,
            maximum_stock=12,
            rack_no="A-01"
        ),
        StockItem(
            material_no="MAT-002",
            sloc="WH01",
            material_desc="Bearing 6204",
            quantity=3,
            uom="PCS",
            price=Decimal("4.00"),
            operational_class="SPARE PART",
            minimum_stock=5,
            rack_no="B-07"
        ),
        StockItem(
            material_no="MAT-003",
            sloc="WH02",
            material_desc="Carton Box Large",
            quantity=0,
            uom="PCS",
            price=Decimal("1.00"),
            operational_class="PACKAGING",
            minimum_stock=1
        ),
    ]
    test_db.add_all(items)
    test_db.commit()
    return items


@pytest.fixture
def png_bytes():
    """A small valid PNG image."""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "red").save(buffer, format="PNG")
    return buffer.getvalue()

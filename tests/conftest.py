import os
from pathlib import Path

# przed importem storefront.*, settings czytane sa przy imporcie
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOCK_BACKEND", "local")
os.environ.setdefault("NOTIFICATIONS_ENABLED", "false")
os.environ.setdefault("ENV", "test")

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from storefront.data.database import get_db, init_db, make_engine
from storefront.services.access_gate import ADMIN, CUSTOMER, Identity
from storefront.services.cart_service import CartService
from storefront.services.coupon_service import CouponService
from storefront.services.lock_service import LocalLockService
from storefront.services.notification_service import NotificationService
from storefront.services.order_service import OrderService
from storefront.services.product_client import ProductClient
from storefront.utils.settings import JWT_ALGORITHM, JWT_SECRET


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)


class FakeProductClient(ProductClient):
    """Catalog served from a dict instead of product-service; lookup() mapping stays real."""

    def __init__(self, products: dict):
        super().__init__(base_url="http://catalog.test")
        self.products = products
        self.calls = 0

    def fetch_product(self, product_id: int) -> dict | None:
        self.calls += 1
        product = self.products.get(product_id)
        return dict(product) if product else None


class RecordingNotificationService(NotificationService):
    def __init__(self):
        super().__init__(enabled=False)
        self.events = []

    def order_status_changed(self, order_id, user_id, old_status, new_status):
        self.events.append((order_id, user_id, old_status, new_status))


@pytest.fixture
def products():
    return {
        1: {"id": 1, "name": "Keyboard", "price": "50.00", "status": 1, "stock_quantity": 10},
        2: {"id": 2, "name": "Mouse", "price": "19.99", "status": 1, "stock_quantity": 10},
        3: {"id": 3, "name": "Monitor", "price": "899.00", "status": 1, "stock_quantity": 0},
        4: {"id": 4, "name": "Webcam", "price": "75.00", "status": 0, "stock_quantity": 5},
    }


@pytest.fixture
def catalog(products):
    return FakeProductClient(products)


@pytest.fixture
def engine(tmp_path):
    engine = make_engine(f"sqlite:///{tmp_path / 'storefront.db'}")
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def lock_service():
    return LocalLockService(wait=2)


@pytest.fixture
def notifications():
    return RecordingNotificationService()


@pytest.fixture
def cart_service(db, catalog, lock_service):
    return CartService(db=db, product_client=catalog, lock_service=lock_service)


@pytest.fixture
def order_service(db, cart_service, notifications):
    return OrderService(db=db, cart_service=cart_service, notification_service=notifications)


@pytest.fixture
def coupon_service(db):
    return CouponService(db)


@pytest.fixture
def customer():
    return Identity(user_id=7, role=CUSTOMER)


@pytest.fixture
def admin():
    return Identity(user_id=1, role=ADMIN)


def make_token(user_id: int, role: str) -> str:
    return jwt.encode({"sub": str(user_id), "role": role}, JWT_SECRET, algorithm=JWT_ALGORITHM)


def auth_headers(user_id: int, role: str = CUSTOMER) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def client(session_factory, catalog, lock_service, notifications):
    from storefront.api import deps
    from storefront.main import create_app

    app = create_app(create_tables=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_product_client] = lambda: catalog
    app.dependency_overrides[deps.get_lock_service] = lambda: lock_service
    app.dependency_overrides[deps.get_notification_service] = lambda: notifications

    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def auth():
    return auth_headers

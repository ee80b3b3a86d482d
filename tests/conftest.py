import os

# Settings are read at import time; pin a safe test configuration first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CELERY_TASK_ALWAYS_EAGER"] = "true"
os.environ.setdefault("SHOPIFY_API_KEY", "test-api-key")
os.environ.setdefault("SHOPIFY_API_SECRET", "test-api-secret")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import Base, get_db
from app.core.deps import get_admin_client, get_shopify_client_factory
from app.core.security import create_session_token
from app.services.shopify_client import ShopifyAPIError
from app import models  # noqa: F401

SHOP = "demo-store.myshopify.com"
OTHER_SHOP = "other-store.myshopify.com"


class FakeCatalog:
    """Stands in for ShopifyGraphQLClient in endpoint and workflow tests."""

    def __init__(self):
        self.variants = {}
        self.products = [{
            "id": "gid://shopify/Product/1",
            "title": "Linen Shirt",
            "handle": "linen-shirt",
            "variants": [{"id": "gid://shopify/ProductVariant/11", "title": "M", "price": "40.00",
                          "inventoryQuantity": 0, "sku": "LS-M"}],
        }]
        self.product_titles = {"gid://shopify/Product/1": "Linen Shirt"}
        self.variant_titles = {"gid://shopify/ProductVariant/11": "M"}
        self.active_subscriptions = []
        self.created_charges = []
        self.confirmation_url = "https://demo-store.myshopify.com/admin/charges/1/confirm"
        self.user_errors = []
        self.fail = False
        self.lookups = 0
        self.closed = 0

    def _maybe_fail(self):
        if self.fail:
            raise ShopifyAPIError("Shopify API returned 502")

    async def get_variant_by_inventory_item(self, inventory_item_id):
        self.lookups += 1
        self._maybe_fail()
        return self.variants.get(str(inventory_item_id))

    async def list_products(self, first=50):
        self._maybe_fail()
        return self.products[:first]

    async def get_product_title(self, product_id):
        self._maybe_fail()
        return self.product_titles.get(product_id)

    async def get_variant_title(self, variant_id):
        self._maybe_fail()
        return self.variant_titles.get(variant_id)

    async def create_app_subscription(self, name, price, return_url, test):
        self._maybe_fail()
        self.created_charges.append({"name": name, "price": price, "return_url": return_url, "test": test})
        if self.user_errors:
            return {"confirmationUrl": None, "userErrors": self.user_errors}
        return {"confirmationUrl": self.confirmation_url, "userErrors": []}

    async def get_active_subscriptions(self):
        self._maybe_fail()
        return self.active_subscriptions

    async def close(self):
        self.closed += 1


class RecordingTask:
    """Replaces the Celery notification task so tests can inspect dispatches."""

    def __init__(self):
        self.calls = []
        self.error = None

    def apply_async(self, args=None, kwargs=None, **options):
        if self.error is not None:
            raise self.error
        self.calls.append(tuple(args or ()))


@pytest.fixture
def db_engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_catalog():
    return FakeCatalog()


@pytest.fixture(autouse=True)
def notification_task(monkeypatch):
    task = RecordingTask()
    monkeypatch.setattr("app.services.stock_notification_service.send_back_in_stock_notification", task)
    return task


@pytest.fixture
def dispatched(notification_task):
    return notification_task.calls


@pytest.fixture
def app(db_session, fake_catalog):
    from main import app as fastapi_app

    fastapi_app.dependency_overrides[get_db] = lambda: db_session
    fastapi_app.dependency_overrides[get_shopify_client_factory] = lambda: (lambda shop_domain: fake_catalog)
    fastapi_app.dependency_overrides[get_admin_client] = lambda: fake_catalog
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()


def auth_headers(shop_domain: str = SHOP) -> dict:
    return {"Authorization": f"Bearer {create_session_token(shop_domain)}"}

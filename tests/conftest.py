import threading

import pytest

from qrlink import create_app
from qrlink.extensions import db
from qrlink.integrations.shopify.client import ProductSnapshot
from qrlink.modules.qrcodes.store import QRCodeStore
from qrlink.security import issue_shop_token

SECRET = "test-secret"
SHOP = "s.myshopify.com"
OTHER_SHOP = "other.myshopify.com"


class FakeCatalog:
    """In-memory stand-in for ShopifyCatalog."""

    def __init__(self, products=None, error=None):
        self.products = dict(products or {})
        self.error = error
        self.calls = []
        self._lock = threading.Lock()

    def fetch_product(self, product_id):
        with self._lock:
            self.calls.append(product_id)
        if self.error is not None:
            raise self.error
        return self.products.get(product_id)

    def list_products(self, first=25):
        if self.error is not None:
            raise self.error
        return []


@pytest.fixture
def app(tmp_path):
    app = create_app("testing", overrides={
        "SQLALCHEMY_DATABASE_URI": f"sqlite:///{tmp_path / 'qrlink.db'}",
        "SQLALCHEMY_ENGINE_OPTIONS": {"connect_args": {"check_same_thread": False, "timeout": 30}},
        "SECRET_KEY": SECRET,
        "SHOPIFY_ADMIN_ACCESS_TOKEN": "shpat_test",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return QRCodeStore(db.session)


@pytest.fixture
def catalog(monkeypatch):
    fake = FakeCatalog({
        "gid://shopify/Product/1": ProductSnapshot("Blue Mug", "https://cdn.example/mug.png", "A blue mug"),
    })
    monkeypatch.setattr("qrlink.modules.qrcodes.routes._catalog", lambda shop: fake)
    return fake


def auth_headers(shop=SHOP):
    return {"Authorization": f"Bearer {issue_shop_token(shop, secret=SECRET)}"}


def product_draft(**kw):
    data = {
        "title": "Mug code",
        "destination": "product",
        "product_id": "gid://shopify/Product/1",
        "product_handle": "blue-mug",
        "product_variant_id": "gid://shopify/ProductVariant/42",
    }
    data.update(kw)
    return data

from unittest import mock

import pytest
import requests

from qrlink.errors import CatalogUnavailable
from qrlink.integrations.shopify.client import ProductSnapshot, ShopifyCatalog


def _response(status=200, payload=None, text=None):
    resp = mock.Mock()
    resp.status_code = status
    resp.text = text if text is not None else ""
    if status >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status} error")
    else:
        resp.raise_for_status.return_value = None
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def catalog():
    return ShopifyCatalog("s.myshopify.com", "shpat_test", api_version="2024-10", timeout=3)


def test_fetch_product_returns_snapshot(catalog):
    payload = {"data": {"product": {
        "title": "Blue Mug",
        "images": {"nodes": [{"url": "https://cdn.example/mug.png", "altText": "mug"}]},
    }}}
    with mock.patch("qrlink.integrations.shopify.client.requests.post", return_value=_response(payload=payload)) as post:
        product = catalog.fetch_product("gid://shopify/Product/1")
    assert product == ProductSnapshot("Blue Mug", "https://cdn.example/mug.png", "mug")
    args, kwargs = post.call_args
    assert args[0] == "https://s.myshopify.com/admin/api/2024-10/graphql.json"
    assert kwargs["json"]["variables"] == {"id": "gid://shopify/Product/1"}
    assert kwargs["headers"]["X-Shopify-Access-Token"] == "shpat_test"
    assert kwargs["timeout"] == 3


def test_product_without_images(catalog):
    payload = {"data": {"product": {"title": "Bare", "images": {"nodes": []}}}}
    with mock.patch("qrlink.integrations.shopify.client.requests.post", return_value=_response(payload=payload)):
        assert catalog.fetch_product("p") == ProductSnapshot("Bare", None, None)


@pytest.mark.parametrize("product", [None, {"title": "", "images": {"nodes": []}}])
def test_missing_product_is_none(catalog, product):
    with mock.patch("qrlink.integrations.shopify.client.requests.post",
                    return_value=_response(payload={"data": {"product": product}})):
        assert catalog.fetch_product("p") is None


@pytest.mark.parametrize("resp", [
    _response(status=500, text="boom"),
    _response(payload=ValueError("not json")),
    _response(payload={"errors": [{"message": "Throttled"}]}),
    _response(payload={"data": None}),
    _response(payload=["unexpected"]),
])
def test_transport_failures_are_not_deleted_products(catalog, resp):
    with mock.patch("qrlink.integrations.shopify.client.requests.post", return_value=resp):
        with pytest.raises(CatalogUnavailable):
            catalog.fetch_product("p")


def test_timeout_raises_catalog_unavailable(catalog):
    with mock.patch("qrlink.integrations.shopify.client.requests.post", side_effect=requests.Timeout("slow")):
        with pytest.raises(CatalogUnavailable) as exc:
            catalog.fetch_product("p")
    assert exc.value.retryable


def test_missing_token_is_unavailable():
    with pytest.raises(CatalogUnavailable):
        ShopifyCatalog("s.myshopify.com", None).fetch_product("p")


def test_list_products(catalog):
    payload = {"data": {"products": {"nodes": [
        {
            "id": "gid://shopify/Product/1",
            "title": "Blue Mug",
            "handle": "blue-mug",
            "images": {"nodes": [{"url": "https://cdn.example/mug.png"}]},
            "variants": {"nodes": [{"id": "gid://shopify/ProductVariant/42"}]},
        },
        {"id": "gid://shopify/Product/2", "title": "Plain", "handle": "plain",
         "images": {"nodes": []}, "variants": {"nodes": []}},
    ]}}}
    with mock.patch("qrlink.integrations.shopify.client.requests.post", return_value=_response(payload=payload)) as post:
        products = catalog.list_products(10)
    assert post.call_args.kwargs["json"]["variables"] == {"first": 10}
    assert [p.handle for p in products] == ["blue-mug", "plain"]
    assert products[0].variant_id == "gid://shopify/ProductVariant/42"
    assert products[1].image_url is None


def test_from_config_prefers_the_shops_own_token():
    config = {
        "SHOPIFY_ADMIN_ACCESS_TOKEN": "shpat_default",
        "SHOPIFY_ACCESS_TOKENS": {"a.myshopify.com": "shpat_a"},
        "SHOPIFY_API_VERSION": "2024-10",
        "CATALOG_TIMEOUT": 5,
    }
    assert ShopifyCatalog.from_config(config, "A.myshopify.com").access_token == "shpat_a"
    assert ShopifyCatalog.from_config(config, "b.myshopify.com").access_token == "shpat_default"


def test_token_map_from_environment(monkeypatch):
    from qrlink.config import BaseConfig

    monkeypatch.setenv("SHOPIFY_ACCESS_TOKENS", "a.myshopify.com=shpat_a, B.myshopify.com = shpat_b,junk")
    assert BaseConfig().SHOPIFY_ACCESS_TOKENS == {"a.myshopify.com": "shpat_a", "b.myshopify.com": "shpat_b"}

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional

import requests

from ...errors import CatalogUnavailable

log = logging.getLogger(__name__)

PRODUCT_QUERY = """
query supplementQRCode($id: ID!) {
  product(id: $id) {
    title
    images(first: 1) {
      nodes {
        altText
        url
      }
    }
  }
}
"""

PRODUCTS_QUERY = """
query listProducts($first: Int!) {
  products(first: $first) {
    nodes {
      id
      title
      handle
      images(first: 1) {
        nodes {
          url
        }
      }
      variants(first: 1) {
        nodes {
          id
        }
      }
    }
  }
}
"""


@dataclass(frozen=True)
class ProductSnapshot:
    title: str
    image_url: Optional[str] = None
    image_alt: Optional[str] = None


@dataclass(frozen=True)
class CatalogProduct:
    id: str
    title: str
    handle: Optional[str] = None
    image_url: Optional[str] = None
    variant_id: Optional[str] = None


def _first_node(conn: Any) -> dict:
    nodes = (conn or {}).get("nodes") if isinstance(conn, dict) else None
    if isinstance(nodes, list) and nodes and isinstance(nodes[0], dict):
        return nodes[0]
    return {}


class ShopifyCatalog:
    """Product lookups against a shop's Admin GraphQL API.

    A product that no longer exists comes back as None; anything that goes wrong
    on the wire raises CatalogUnavailable so callers never mistake an outage for
    a deleted product.
    """

    def __init__(self, shop: str, access_token: str | None, *, api_version: str = "2024-10", timeout: float = 10.0):
        if not shop:
            raise ValueError("shop is required")
        self.shop = shop
        self.access_token = access_token
        self.api_version = api_version
        self.timeout = timeout

    @classmethod
    def from_config(cls, config, shop: str) -> "ShopifyCatalog":
        tokens = config.get("SHOPIFY_ACCESS_TOKENS") or {}
        return cls(
            shop,
            tokens.get(shop.lower()) or config.get("SHOPIFY_ADMIN_ACCESS_TOKEN"),
            api_version=config.get("SHOPIFY_API_VERSION", "2024-10"),
            timeout=float(config.get("CATALOG_TIMEOUT", 10)),
        )

    @property
    def endpoint(self) -> str:
        return f"https://{self.shop}/admin/api/{self.api_version}/graphql.json"

    def _graphql(self, query: str, variables: dict) -> dict:
        if not self.access_token:
            raise CatalogUnavailable("Shopify access token is not configured")
        headers = {
            "Content-Type": "application/json",
            "X-Shopify-Access-Token": self.access_token,
        }
        try:
            resp = requests.post(
                self.endpoint,
                json={"query": query, "variables": variables},
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            log.warning("catalog request to %s failed: %s", self.shop, e)
            raise CatalogUnavailable(f"Catalog request failed: {e}") from e
        try:
            resp.raise_for_status()
        except requests.HTTPError as e:  # Surface Shopify error details to caller
            details = f"HTTP {resp.status_code}: {resp.text[:500]}"
            log.warning("catalog error from %s: %s", self.shop, details)
            raise CatalogUnavailable(f"Catalog API error ({details})") from e
        try:
            payload = resp.json()
        except ValueError as e:
            raise CatalogUnavailable("Catalog returned a malformed response") from e
        if not isinstance(payload, dict):
            raise CatalogUnavailable("Catalog returned a malformed response")
        errors = payload.get("errors")
        if errors:
            first = errors[0] if isinstance(errors, list) and errors else errors
            msg = first.get("message") if isinstance(first, dict) else str(first)
            raise CatalogUnavailable(f"Catalog query error: {msg}")
        data = payload.get("data")
        if not isinstance(data, dict):
            raise CatalogUnavailable("Catalog response is missing data")
        return data

    def fetch_product(self, product_id: str) -> Optional[ProductSnapshot]:
        data = self._graphql(PRODUCT_QUERY, {"id": product_id})
        product = data.get("product")
        if not isinstance(product, dict) or not product.get("title"):
            return None
        image = _first_node(product.get("images"))
        return ProductSnapshot(
            title=product["title"],
            image_url=image.get("url") or None,
            image_alt=image.get("altText") or None,
        )

    def list_products(self, first: int = 25) -> List[CatalogProduct]:
        data = self._graphql(PRODUCTS_QUERY, {"first": int(first)})
        products = data.get("products")
        nodes = products.get("nodes") if isinstance(products, dict) else None
        if not isinstance(nodes, list):
            raise CatalogUnavailable("Catalog response is missing products")
        out: List[CatalogProduct] = []
        for node in nodes:
            if not isinstance(node, dict) or not node.get("id"):
                continue
            out.append(CatalogProduct(
                id=node["id"],
                title=node.get("title") or "",
                handle=node.get("handle"),
                image_url=_first_node(node.get("images")).get("url"),
                variant_id=_first_node(node.get("variants")).get("id"),
            ))
        return out

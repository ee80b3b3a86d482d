from typing import Any, Dict, List, Optional
from decimal import Decimal
import httpx
import logging

from app.core.config import settings
from app.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

INVENTORY_ITEM_VARIANT_QUERY = """
query getVariantByInventoryItem($inventoryItemId: ID!) {
  inventoryItem(id: $inventoryItemId) {
    id
    variant {
      id
      product {
        id
        title
      }
    }
  }
}
"""

PRODUCTS_QUERY = """
query getProducts($first: Int!) {
  products(first: $first) {
    edges {
      node {
        id
        title
        handle
        variants(first: 10) {
          edges {
            node {
              id
              title
              price
              inventoryQuantity
              sku
            }
          }
        }
      }
    }
  }
}
"""

PRODUCT_TITLE_QUERY = """
query getProduct($id: ID!) {
  product(id: $id) {
    id
    title
  }
}
"""

VARIANT_TITLE_QUERY = """
query getVariant($id: ID!) {
  productVariant(id: $id) {
    id
    title
  }
}
"""

APP_SUBSCRIPTION_CREATE = """
mutation appSubscriptionCreate($name: String!, $returnUrl: URL!, $test: Boolean, $lineItems: [AppSubscriptionLineItemInput!]!) {
  appSubscriptionCreate(name: $name, returnUrl: $returnUrl, test: $test, lineItems: $lineItems) {
    appSubscription {
      id
      status
    }
    confirmationUrl
    userErrors {
      field
      message
    }
  }
}
"""

ACTIVE_SUBSCRIPTIONS_QUERY = """
query getActiveSubscriptions {
  currentAppInstallation {
    activeSubscriptions {
      id
      name
      status
      currentPeriodEnd
    }
  }
}
"""


class ShopifyAPIError(ExternalServiceError):
    """Raised when the Admin API is unreachable or answers with errors"""
    pass


def inventory_item_gid(inventory_item_id) -> str:
    value = str(inventory_item_id)
    if value.startswith("gid://"):
        return value
    return f"gid://shopify/InventoryItem/{value}"


class ShopifyGraphQLClient:
    """Thin async client for one shop's Admin GraphQL API."""

    def __init__(self, shop_domain: str, access_token: str, api_version: Optional[str] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.shop_domain = shop_domain
        self.api_version = api_version or settings.SHOPIFY_API_VERSION
        self._client = httpx.AsyncClient(
            base_url=f"https://{shop_domain}/admin/api/{self.api_version}",
            headers={
                "X-Shopify-Access-Token": access_token,
                "Content-Type": "application/json",
            },
            timeout=settings.SHOPIFY_HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def graphql(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        payload = {"query": query, "variables": variables or {}}
        try:
            resp = await self._client.post("/graphql.json", json=payload)
            resp.raise_for_status()
            body = resp.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Shopify GraphQL error shop=%s status=%s response=%s",
                self.shop_domain, e.response.status_code, e.response.text[:500],
            )
            raise ShopifyAPIError(f"Shopify API returned {e.response.status_code}") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Shopify GraphQL request failed shop=%s: %s", self.shop_domain, e)
            raise ShopifyAPIError("Shopify API request failed") from e

        if body.get("errors"):
            logger.error("Shopify GraphQL errors shop=%s: %s", self.shop_domain, body["errors"])
            raise ShopifyAPIError("Shopify API returned errors", details=str(body["errors"]))
        return body.get("data") or {}

    async def get_variant_by_inventory_item(self, inventory_item_id) -> Optional[Dict[str, Optional[str]]]:
        """Resolve an inventory item to its variant, or None when Shopify knows no variant for it."""
        data = await self.graphql(
            INVENTORY_ITEM_VARIANT_QUERY,
            {"inventoryItemId": inventory_item_gid(inventory_item_id)},
        )
        variant = ((data.get("inventoryItem") or {}).get("variant")) or {}
        if not variant.get("id"):
            return None
        product = variant.get("product") or {}
        return {
            "variant_id": variant["id"],
            "product_id": product.get("id"),
            "product_title": product.get("title"),
        }

    async def list_products(self, first: int = 50) -> List[Dict[str, Any]]:
        data = await self.graphql(PRODUCTS_QUERY, {"first": first})
        products = []
        for edge in (data.get("products") or {}).get("edges", []):
            node = dict(edge["node"])
            node["variants"] = [v["node"] for v in (node.get("variants") or {}).get("edges", [])]
            products.append(node)
        return products

    async def get_product_title(self, product_id: str) -> Optional[str]:
        data = await self.graphql(PRODUCT_TITLE_QUERY, {"id": product_id})
        return (data.get("product") or {}).get("title")

    async def get_variant_title(self, variant_id: str) -> Optional[str]:
        data = await self.graphql(VARIANT_TITLE_QUERY, {"id": variant_id})
        return (data.get("productVariant") or {}).get("title")

    async def create_app_subscription(self, name: str, price: Decimal, return_url: str, test: bool) -> Dict[str, Any]:
        variables = {
            "name": name,
            "returnUrl": return_url,
            "test": test,
            "lineItems": [{
                "plan": {
                    "appRecurringPricingDetails": {
                        "price": {"amount": str(price), "currencyCode": "USD"},
                        "interval": "EVERY_30_DAYS",
                    }
                }
            }],
        }
        data = await self.graphql(APP_SUBSCRIPTION_CREATE, variables)
        return data.get("appSubscriptionCreate") or {}

    async def get_active_subscriptions(self) -> List[Dict[str, Any]]:
        data = await self.graphql(ACTIVE_SUBSCRIPTIONS_QUERY)
        return (data.get("currentAppInstallation") or {}).get("activeSubscriptions") or []

    async def close(self):
        await self._client.aclose()


async def exchange_session_token(shop_domain: str, session_token: str,
                                 transport: Optional[httpx.AsyncBaseTransport] = None) -> Dict[str, Any]:
    """Trade an App Bridge session token for an offline Admin API access token."""
    payload = {
        "client_id": settings.SHOPIFY_API_KEY,
        "client_secret": settings.SHOPIFY_API_SECRET,
        "grant_type": "urn:ietf:params:oauth:grant-type:token-exchange",
        "subject_token": session_token,
        "subject_token_type": "urn:ietf:params:oauth:token-type:id_token",
        "requested_token_type": "urn:shopify:params:oauth:token-type:offline-access-token",
    }
    async with httpx.AsyncClient(timeout=settings.SHOPIFY_HTTP_TIMEOUT_SECONDS, transport=transport) as client:
        try:
            resp = await client.post(f"https://{shop_domain}/admin/oauth/access_token", json=payload)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as e:
            logger.error("Token exchange failed shop=%s status=%s", shop_domain, e.response.status_code)
            raise ShopifyAPIError("Shopify token exchange failed") from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Token exchange request failed shop=%s: %s", shop_domain, e)
            raise ShopifyAPIError("Shopify token exchange failed") from e

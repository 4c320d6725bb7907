"""
Hosted Backend Client

HTTP client for the order tables of the hosted backend's REST interface.
Every failure is reported as OrderBackendError.
"""

import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Any

import httpx

from ..database.orders import (
    OrderBackendError,
    OrderNotFound,
    InvalidStatusTransition,
    can_transition,
)
from ..models.checkout import Order, OrderHeader, OrderLine, OrderStatus

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Order persistence against the backend's table API.

    Implements the same interface as the in-memory OrderDatabase.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize backend client.

        Args:
            base_url: Backend project URL
            api_key: Service API key sent with every request
            timeout: Request timeout in seconds
            transport: Optional transport override
        """
        self.base_url = base_url.rstrip("/")
        self._api_key = api_key
        self._http_client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    def _generate_headers(self, return_rows: bool = False) -> dict[str, str]:
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if return_rows:
            headers["Prefer"] = "return=representation"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        body: Optional[Any] = None,
        return_rows: bool = False,
    ) -> Any:
        """Make a table request, wrapping transport and HTTP errors"""
        url = f"{self.base_url}/rest/v1/{path}"
        body_str = json.dumps(body) if body is not None else None

        try:
            response = await self._http_client.request(
                method=method,
                url=url,
                params=params,
                headers=self._generate_headers(return_rows),
                content=body_str,
            )
        except httpx.HTTPError as e:
            logger.error(f"Request to {url} failed: {e}")
            raise OrderBackendError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            raise OrderBackendError(f"{method} {path} returned {response.status_code}: {response.text}")

        if not response.content:
            return None
        return response.json()

    # ==================== Checkout writes ====================

    async def create_order(self, header: OrderHeader) -> str:
        """Insert an order header and return its id"""
        body = header.model_dump(
            mode="json",
            exclude={"id", "created_at", "updated_at"},
            exclude_none=True,
        )
        rows = await self._request("POST", "orders", body=body, return_rows=True)
        if not rows:
            raise OrderBackendError("Order insert returned no rows")
        return str(rows[0]["id"])

    async def create_order_lines(self, lines: list[OrderLine]) -> None:
        """Insert order lines in one request"""
        body = [line.model_dump(mode="json") for line in lines]
        await self._request("POST", "order_items", body=body)

    async def delete_order(self, order_id: str) -> None:
        """Delete an order header"""
        await self._request("DELETE", "orders", params={"id": f"eq.{order_id}"})

    # ==================== Order management ====================

    async def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order with its lines"""
        rows = await self._request(
            "GET",
            "orders",
            params={"id": f"eq.{order_id}", "select": "*,order_items(*)"},
        )
        if not rows:
            return None
        return self._to_order(rows[0])

    async def list_orders(
        self,
        buyer_id: Optional[str] = None,
        status: Optional[OrderStatus] = None,
        limit: int = 50,
    ) -> list[Order]:
        """List recent orders, newest first"""
        params = {
            "select": "*,order_items(*)",
            "order": "created_at.desc",
            "limit": str(limit),
        }
        if buyer_id:
            params["buyer_id"] = f"eq.{buyer_id}"
        if status:
            params["status"] = f"eq.{status.value}"

        rows = await self._request("GET", "orders", params=params)
        return [self._to_order(row) for row in rows or []]

    async def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Move an order to a new status"""
        order = await self._require_order(order_id)
        if not can_transition(order.header.status, status):
            raise InvalidStatusTransition(order.header.status, status)

        return await self._patch(order_id, {"status": status.value})

    async def assign_delivery(self, order_id: str, delivery_id: str) -> Order:
        """Hand an order to a courier"""
        order = await self._require_order(order_id)
        if not can_transition(order.header.status, OrderStatus.ASSIGNED):
            raise InvalidStatusTransition(order.header.status, OrderStatus.ASSIGNED)

        return await self._patch(
            order_id,
            {"status": OrderStatus.ASSIGNED.value, "delivery_id": delivery_id},
        )

    async def sweep_orphaned_orders(self, max_age_seconds: int = 300) -> int:
        """Delete header-only orders older than max_age_seconds"""
        cutoff = datetime.now(timezone.utc) - timedelta(seconds=max_age_seconds)
        rows = await self._request(
            "GET",
            "orders",
            params={
                "select": "id,order_items(id)",
                "created_at": f"lt.{cutoff.isoformat()}",
            },
        )
        orphaned = [str(row["id"]) for row in rows or [] if not row.get("order_items")]
        if not orphaned:
            return 0

        await self._request(
            "DELETE",
            "orders",
            params={"id": f"in.({','.join(orphaned)})"},
        )
        logger.info(f"Removed {len(orphaned)} orphaned order headers")
        return len(orphaned)

    async def _require_order(self, order_id: str) -> Order:
        order = await self.get_order(order_id)
        if not order:
            raise OrderNotFound(f"Order {order_id} not found")
        return order

    async def _patch(self, order_id: str, changes: dict[str, Any]) -> Order:
        await self._request(
            "PATCH",
            "orders",
            params={"id": f"eq.{order_id}"},
            body=changes,
        )
        return await self._require_order(order_id)

    @staticmethod
    def _to_order(row: dict[str, Any]) -> Order:
        row = dict(row)
        lines = row.pop("order_items", None) or []
        return Order(
            header=OrderHeader.model_validate(row),
            lines=[OrderLine.model_validate(line) for line in lines],
        )

"""HTTP accessor for the remote order service.

The payment service only depends on the `OrderAccessor` protocol; `OrderClient`
is the concrete transport. Timeouts are enforced here, and no call is retried.
"""

from typing import Protocol

import httpx
from pydantic import ValidationError

from orderpay.common.config import settings
from orderpay.common.logging import logger
from orderpay.common.tracing import tracer
from orderpay.services.orders.schemas import Order


class OrderClientError(Exception):
    """Base class for remote order failures."""

    def __init__(self, order_id: int, message: str):
        super().__init__(message)
        self.order_id = order_id


class OrderNotFoundError(OrderClientError):
    """The order service has no order with this id."""

    def __init__(self, order_id: int):
        super().__init__(order_id, f"Order with ID {order_id} not found")


class OrderServiceError(OrderClientError):
    """Transport, timeout, HTTP or payload failure talking to the order service."""


class OrderAccessor(Protocol):
    """Capability the payment service needs from the order service."""

    def get_by_id(self, order_id: int) -> Order: ...

    def patch_status(self, order_id: int) -> None: ...


class OrderClient:
    """Synchronous `httpx` client for the order service REST API."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.order_service_url).rstrip("/")
        self._http = httpx.Client(
            timeout=timeout if timeout is not None else settings.order_timeout_seconds,
            transport=transport,
        )

    def close(self) -> None:
        self._http.close()

    def _send(self, method: str, order_id: int, path: str) -> httpx.Response:
        url = f"{self.base_url}/{order_id}{path}"
        with tracer.start_as_current_span(f"order_service {method}") as span:
            span.set_attribute("order.id", order_id)
            try:
                response = self._http.request(method, url)
            except httpx.HTTPError as exc:
                logger.warning("order service %s %s failed: %s", method, url, exc)
                raise OrderServiceError(order_id, f"{method} {url} failed: {exc}") from exc
            span.set_attribute("http.status_code", response.status_code)
        if response.status_code == 404:
            raise OrderNotFoundError(order_id)
        if response.status_code >= 400:
            raise OrderServiceError(
                order_id, f"{method} {url} returned {response.status_code}: {response.text}"
            )
        return response

    def get_by_id(self, order_id: int) -> Order:
        """Fetch one order; an empty or `null` body counts as not found."""

        response = self._send("GET", order_id, "")
        if not response.content.strip():
            raise OrderNotFoundError(order_id)
        try:
            payload = response.json()
        except ValueError as exc:
            raise OrderServiceError(order_id, f"invalid order payload: {exc}") from exc
        if payload is None:
            raise OrderNotFoundError(order_id)
        try:
            return Order.model_validate(payload)
        except ValidationError as exc:
            raise OrderServiceError(order_id, f"invalid order payload: {exc}") from exc

    def patch_status(self, order_id: int) -> None:
        """Ask the order service to move the order to its next status."""

        self._send("PATCH", order_id, "/status")
        logger.info("order status updated for order_id=%s", order_id)

"""Order service client behaviour over a mocked HTTP transport."""

import httpx
import pytest

from orderpay.services.orders.client import OrderClient, OrderNotFoundError, OrderServiceError

BASE_URL = "http://orders.test/api/orders"


def _client(handler) -> OrderClient:
    return OrderClient(base_url=BASE_URL, timeout=1.0, transport=httpx.MockTransport(handler))


def test_get_by_id_parses_camel_case_order():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        return httpx.Response(
            200,
            json={
                "orderId": 1,
                "orderStatus": "ORDERED",
                "orderDesc": "Test Order",
                "orderFee": 100.0,
                "cart": {"cartId": 4},
            },
        )

    order = _client(handler).get_by_id(1)

    assert seen == [("GET", f"{BASE_URL}/1")]
    assert order.order_id == 1
    assert order.order_status == "ORDERED"
    assert order.order_desc == "Test Order"
    assert order.model_dump()["cart"] == {"cartId": 4}


def test_get_by_id_404_is_not_found():
    client = _client(lambda request: httpx.Response(404))

    with pytest.raises(OrderNotFoundError):
        client.get_by_id(2)


@pytest.mark.parametrize("content", [b"", b"null"])
def test_get_by_id_empty_body_is_not_found(content):
    client = _client(lambda request: httpx.Response(200, content=content))

    with pytest.raises(OrderNotFoundError):
        client.get_by_id(2)


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(200, content=b"<html>"),
        httpx.Response(200, json={"orderId": "not-a-number"}),
    ],
)
def test_get_by_id_bad_responses_are_service_errors(response):
    client = _client(lambda request: response)

    with pytest.raises(OrderServiceError):
        client.get_by_id(3)


def test_transport_failure_is_service_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectTimeout("timed out", request=request)

    with pytest.raises(OrderServiceError) as exc_info:
        _client(handler).get_by_id(4)

    assert isinstance(exc_info.value.__cause__, httpx.ConnectTimeout)


def test_patch_status_sends_bodyless_patch():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url), request.content))
        return httpx.Response(200)

    _client(handler).patch_status(5)

    assert seen == [("PATCH", f"{BASE_URL}/5/status", b"")]


def test_patch_status_failure_raises():
    client = _client(lambda request: httpx.Response(503))

    with pytest.raises(OrderServiceError):
        client.patch_status(5)


def test_order_serializes_under_order_service_names():
    payload = {"orderId": 1, "orderStatus": "ORDERED", "orderFee": 10.0, "cart": {"cartId": 4}}
    client = _client(lambda request: httpx.Response(200, json=payload))

    dumped = client.get_by_id(1).model_dump(exclude_none=True)

    assert dumped == payload

"""Drive one payment through its lifecycle against a running service."""

import argparse
import sys
from uuid import uuid4

import httpx


def run(base_url: str, order_id: int) -> int:
    """Create a payment for `order_id`, advance it twice, print each step."""

    headers = {"x-trace-id": str(uuid4())}
    with httpx.Client(base_url=base_url, timeout=10.0, headers=headers) as client:
        resp = client.post("/api/payments", json={"order": {"orderId": order_id}})
        print(f"create status={resp.status_code} body={resp.text}")
        if resp.status_code >= 400:
            return 1
        payment_id = resp.json()["payment_id"]

        for _ in range(2):
            resp = client.patch(f"/api/payments/{payment_id}")
            print(f"advance status={resp.status_code} body={resp.text}")
            if resp.status_code >= 400:
                return 1

        resp = client.get(f"/api/payments/{payment_id}/timeline")
        print(f"timeline status={resp.status_code} body={resp.text}")
    return 0


if __name__ == "__main__":
    parser = argparse.ArgumentParser()
    parser.add_argument("--base-url", default="http://localhost:8400")
    parser.add_argument("--order-id", type=int, required=True)
    args = parser.parse_args()
    sys.exit(run(args.base_url, args.order_id))

"""Error kinds raised by the payment lifecycle.

Each kind carries the HTTP status the routing layer answers with; the service
itself never builds HTTP responses.
"""


class PaymentError(Exception):
    """Base class for all payment lifecycle errors."""

    http_status = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class InvalidArgumentError(PaymentError):
    """Malformed or ineligible input (400)."""

    http_status = 400


class PaymentNotFoundError(PaymentError):
    """No payment with the requested id (404)."""

    http_status = 404

    def __init__(self, payment_id: int):
        super().__init__(f"Payment with id: {payment_id} not found", {"payment_id": payment_id})


class IllegalStateError(PaymentError):
    """Forbidden status transition (400)."""

    http_status = 400


class ConcurrentUpdateError(IllegalStateError):
    """Another writer changed the payment between read and write (409)."""

    http_status = 409


class PaymentServiceError(PaymentError):
    """Remote order fetch or patch failed (502).

    `payment_persisted` is set when the local payment was committed but the
    remote order update did not take effect.
    """

    http_status = 502

    def __init__(
        self,
        message: str,
        payment_persisted: bool = False,
        payment_id: int | None = None,
    ):
        details = {"payment_persisted": payment_persisted}
        if payment_id is not None:
            details["payment_id"] = payment_id
        super().__init__(message, details)
        self.payment_persisted = payment_persisted
        self.payment_id = payment_id

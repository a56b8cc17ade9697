"""API request/response schemas for payment endpoints."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, Field

from orderpay.services.orders.schemas import Order
from orderpay.services.payments.models import Payment, PaymentTimeline


class OrderRef(BaseModel):
    """Reference to the order a new payment is for."""

    order_id: int | None = Field(default=None, validation_alias=AliasChoices("order_id", "orderId"))


class PaymentCreateRequest(BaseModel):
    """Payment creation payload; only the order reference is used."""

    order: OrderRef | None = None


class PaymentResponse(BaseModel):
    """Payment with the order projection attached."""

    payment_id: int
    is_payed: bool
    payment_status: str
    order: Order


class PaymentCollectionResponse(BaseModel):
    collection: list[PaymentResponse]


class TimelineEntryResponse(BaseModel):
    from_state: str | None
    to_state: str
    reason: str
    created_at: datetime | None


def to_response(payment: Payment, order: Order | None = None) -> PaymentResponse:
    """Map a stored payment, attaching `order` or a bare id projection."""

    return PaymentResponse(
        payment_id=payment.payment_id,
        is_payed=payment.is_payed,
        payment_status=payment.status,
        order=order if order is not None else Order(order_id=payment.order_id),
    )


def to_timeline_entry(row: PaymentTimeline) -> TimelineEntryResponse:
    return TimelineEntryResponse(
        from_state=row.from_state,
        to_state=row.to_state,
        reason=row.reason,
        created_at=row.created_at,
    )

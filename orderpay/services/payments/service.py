"""Payment lifecycle orchestration.

Enforces the payment state machine, cross-validates new payments against the
remote order, and enriches stored payments with live order state. The local
store and the order service are never written atomically: a payment committed
locally whose order patch then fails is reported to the caller, not rolled back.
"""

from dataclasses import dataclass

from orderpay.common.errors import (
    InvalidArgumentError,
    PaymentNotFoundError,
    PaymentServiceError,
)
from orderpay.common.logging import log_context, logger
from orderpay.common.metrics import (
    order_lookup_failures_total,
    payment_divergence_total,
    payment_transitions_total,
)
from orderpay.common.state_machine import CANCELED, COMPLETED, NOT_STARTED, next_status
from orderpay.services.orders.client import OrderAccessor, OrderClientError, OrderNotFoundError
from orderpay.services.orders.schemas import Order
from orderpay.services.payments.models import Payment
from orderpay.services.payments.repository import PaymentRepository
from orderpay.services.payments.schemas import (
    PaymentCreateRequest,
    PaymentResponse,
    TimelineEntryResponse,
    to_response,
    to_timeline_entry,
)


@dataclass(frozen=True)
class OrderLookup:
    """Outcome of fetching the order behind one payment."""

    payment: Payment
    order: Order | None = None
    error: OrderClientError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class PaymentService:
    """Owns payment state machine progression and order cross-validation."""

    def __init__(self, session_factory, orders: OrderAccessor, service_name: str = "payment-service") -> None:
        self.session_factory = session_factory
        self.orders = orders
        self.service_name = service_name

    def _lookup_order(self, payment: Payment) -> OrderLookup:
        try:
            return OrderLookup(payment=payment, order=self.orders.get_by_id(payment.order_id))
        except OrderClientError as exc:
            return OrderLookup(payment=payment, error=exc)

    def list_payments(self) -> list[PaymentResponse]:
        """Return payments whose order is currently `IN_PAYMENT`.

        Best effort: a payment whose order cannot be fetched is left out and
        the failure only logged, so an order service outage yields a short or
        empty list rather than an error.
        """

        with self.session_factory() as db:
            payments = PaymentRepository(db).find_all()

        results: list[PaymentResponse] = []
        for lookup in map(self._lookup_order, payments):
            if not lookup.ok:
                logger.warning(
                    "order lookup failed for payment_id=%s order_id=%s: %s",
                    lookup.payment.payment_id,
                    lookup.payment.order_id,
                    lookup.error,
                )
                order_lookup_failures_total.labels(service=self.service_name, operation="list").inc()
                continue
            if not lookup.order.is_in_payment():
                continue
            view = to_response(lookup.payment, lookup.order)
            if view not in results:
                results.append(view)
        return results

    def get_payment(self, payment_id: int) -> PaymentResponse:
        """Fetch one payment with its live order; any order failure fails the call."""

        with log_context(payment_id=payment_id):
            with self.session_factory() as db:
                payment = PaymentRepository(db).find_by_id(payment_id)
            if payment is None:
                raise PaymentNotFoundError(payment_id)

            lookup = self._lookup_order(payment)
            if not lookup.ok:
                logger.error("order lookup failed for payment_id=%s: %s", payment_id, lookup.error)
                order_lookup_failures_total.labels(service=self.service_name, operation="get").inc()
                raise PaymentServiceError(
                    f"Could not fetch order information for payment {payment_id}"
                ) from lookup.error
            return to_response(payment, lookup.order)

    def create_payment(self, req: PaymentCreateRequest) -> PaymentResponse:
        """Validate the order remotely, persist a payment, then patch the order.

        Order of steps is read, validate, write locally, propagate remotely.
        If the final propagation fails the payment stays persisted and the
        raised `PaymentServiceError` has `payment_persisted=True`.
        """

        if req.order is None or req.order.order_id is None:
            raise InvalidArgumentError("Order ID must not be null")
        order_id = req.order.order_id

        with log_context(order_id=order_id):
            order = self._fetch_startable_order(order_id)
            with self.session_factory() as db:
                payment = PaymentRepository(db).save(
                    Payment(
                        order_id=order.order_id if order.order_id is not None else order_id,
                        is_payed=False,
                        status=NOT_STARTED,
                        state_version=0,
                    )
                )
                db.commit()
            with log_context(payment_id=payment.payment_id):
                payment_transitions_total.labels(service=self.service_name, to_state=NOT_STARTED).inc()
                logger.info("payment created payment_id=%s order_id=%s", payment.payment_id, payment.order_id)
                self._propagate_to_order(payment)
            return to_response(payment, order)

    def _fetch_startable_order(self, order_id: int) -> Order:
        try:
            order = self.orders.get_by_id(order_id)
        except OrderNotFoundError as exc:
            order_lookup_failures_total.labels(service=self.service_name, operation="create").inc()
            raise PaymentServiceError(f"Order with ID {order_id} not found") from exc
        except OrderClientError as exc:
            order_lookup_failures_total.labels(service=self.service_name, operation="create").inc()
            raise PaymentServiceError(f"Error while processing payment: {exc}") from exc

        if not order.is_startable():
            raise InvalidArgumentError(
                "Cannot start the payment of an order that is not ordered or already in a payment process",
                {"order_id": order_id, "order_status": order.order_status},
            )
        return order

    def _propagate_to_order(self, payment: Payment) -> None:
        try:
            self.orders.patch_status(payment.order_id)
        except OrderClientError as exc:
            logger.error(
                "payment_id=%s saved but order status update failed for order_id=%s: %s",
                payment.payment_id,
                payment.order_id,
                exc,
            )
            payment_divergence_total.labels(service=self.service_name).inc()
            raise PaymentServiceError(
                f"Payment saved but failed to update order status: {exc}",
                payment_persisted=True,
                payment_id=payment.payment_id,
            ) from exc

    def advance_payment(self, payment_id: int) -> PaymentResponse:
        """Move a payment exactly one step forward; purely local."""

        with log_context(payment_id=payment_id):
            with self.session_factory() as db:
                repo = PaymentRepository(db)
                payment = repo.find_by_id(payment_id)
                if payment is None:
                    raise PaymentNotFoundError(payment_id)
                new_status = next_status(payment.status)
                repo.update_status(payment, new_status, reason="status_advanced")
                db.commit()
            payment_transitions_total.labels(service=self.service_name, to_state=new_status).inc()
            logger.info("payment_id=%s advanced to %s", payment_id, new_status)
            return to_response(payment)

    def cancel_payment(self, payment_id: int) -> None:
        """Soft-delete a payment by moving it to `CANCELED`; the order is untouched."""

        with log_context(payment_id=payment_id), self.session_factory() as db:
            repo = PaymentRepository(db)
            payment = repo.find_by_id(payment_id)
            if payment is None:
                raise InvalidArgumentError(f"Payment with id {payment_id} not found", {"payment_id": payment_id})
            if payment.status == COMPLETED:
                logger.info("payment_id=%s is COMPLETED and cannot be canceled", payment_id)
                raise InvalidArgumentError("Cannot cancel a completed payment", {"payment_id": payment_id})
            if payment.status == CANCELED:
                logger.info("payment_id=%s is already CANCELED", payment_id)
                raise InvalidArgumentError("Payment is already canceled", {"payment_id": payment_id})
            repo.update_status(payment, CANCELED, reason="payment_canceled")
            db.commit()
            payment_transitions_total.labels(service=self.service_name, to_state=CANCELED).inc()
            logger.info("payment_id=%s has been canceled", payment_id)

    def get_timeline(self, payment_id: int) -> list[TimelineEntryResponse]:
        """Return the audit trail of status changes for one payment."""

        with self.session_factory() as db:
            repo = PaymentRepository(db)
            if repo.find_by_id(payment_id) is None:
                raise PaymentNotFoundError(payment_id)
            return [to_timeline_entry(row) for row in repo.timeline(payment_id)]

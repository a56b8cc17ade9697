"""Payment store backed by one SQLAlchemy session."""

from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.orm import Session
from sqlalchemy.orm.attributes import set_committed_value

from orderpay.common.errors import ConcurrentUpdateError
from orderpay.common.state_machine import validate_transition
from orderpay.services.payments.models import Payment, PaymentTimeline


class PaymentRepository:
    """Lookup, insert and versioned status writes for payments.

    Callers own the transaction; nothing here commits.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_all(self) -> list[Payment]:
        return list(self.db.execute(select(Payment).order_by(Payment.payment_id)).scalars())

    def find_by_id(self, payment_id: int) -> Payment | None:
        return self.db.get(Payment, payment_id)

    def save(self, payment: Payment, reason: str = "payment_created") -> Payment:
        """Insert a new payment (assigning its id) and record its first timeline row."""

        self.db.add(payment)
        self.db.flush()
        self.db.add(
            PaymentTimeline(
                payment_id=payment.payment_id,
                from_state=None,
                to_state=payment.status,
                reason=reason,
            )
        )
        return payment

    def update_status(self, payment: Payment, new_status: str, reason: str) -> Payment:
        """Apply one validated state transition with optimistic concurrency.

        The write is guarded by `(payment_id, status, state_version)` so a
        concurrent writer that read the same prior state loses.
        """

        validate_transition(payment.status, new_status)
        from_status = payment.status
        current_version = payment.state_version

        result = self.db.execute(
            update(Payment)
            .where(
                Payment.payment_id == payment.payment_id,
                Payment.status == from_status,
                Payment.state_version == current_version,
            )
            .values(
                status=new_status,
                state_version=current_version + 1,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise ConcurrentUpdateError(
                f"Payment {payment.payment_id} was modified concurrently "
                f"(expected version {current_version})",
                {"payment_id": payment.payment_id, "expected_version": current_version},
            )

        # Row already written by the guarded UPDATE; mark in-memory state clean.
        set_committed_value(payment, "status", new_status)
        set_committed_value(payment, "state_version", current_version + 1)
        self.db.add(
            PaymentTimeline(
                payment_id=payment.payment_id,
                from_state=from_status,
                to_state=new_status,
                reason=reason,
            )
        )
        return payment

    def timeline(self, payment_id: int) -> list[PaymentTimeline]:
        return list(
            self.db.execute(
                select(PaymentTimeline)
                .where(PaymentTimeline.payment_id == payment_id)
                .order_by(PaymentTimeline.timeline_id)
            ).scalars()
        )

"""Shared fixtures: in-memory payment store and a scriptable order service."""

import os

os.environ.setdefault("TRACING_ENABLED", "false")
os.environ.setdefault("DATABASE_DSN", "sqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from orderpay.common.db import Base
from orderpay.services.orders.client import OrderNotFoundError
from orderpay.services.orders.schemas import Order
from orderpay.services.payments.models import Payment
from orderpay.services.payments.repository import PaymentRepository
from orderpay.services.payments.service import PaymentService


class FakeOrders:
    """Order accessor double that can succeed, report not-found, or fail."""

    def __init__(self) -> None:
        self.orders: dict[int, Order] = {}
        self.get_errors: dict[int, Exception] = {}
        self.patch_error: Exception | None = None
        self.get_calls: list[int] = []
        self.patch_calls: list[int] = []

    def add(self, order_id: int, status: str, **fields) -> Order:
        order = Order(order_id=order_id, order_status=status, **fields)
        self.orders[order_id] = order
        return order

    def get_by_id(self, order_id: int) -> Order:
        self.get_calls.append(order_id)
        if order_id in self.get_errors:
            raise self.get_errors[order_id]
        if order_id not in self.orders:
            raise OrderNotFoundError(order_id)
        return self.orders[order_id]

    def patch_status(self, order_id: int) -> None:
        self.patch_calls.append(order_id)
        if self.patch_error is not None:
            raise self.patch_error


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    engine.dispose()


@pytest.fixture
def orders() -> FakeOrders:
    return FakeOrders()


@pytest.fixture
def service(session_factory, orders) -> PaymentService:
    return PaymentService(session_factory, orders)


@pytest.fixture
def store_payment(session_factory):
    """Insert a payment directly into the store, bypassing the service."""

    def _store(order_id: int, status: str = "NOT_STARTED") -> int:
        with session_factory() as db:
            payment = PaymentRepository(db).save(
                Payment(order_id=order_id, is_payed=False, status=status, state_version=0)
            )
            db.commit()
            return payment.payment_id

    return _store


@pytest.fixture
def load_payment(session_factory):
    def _load(payment_id: int) -> Payment | None:
        with session_factory() as db:
            return db.get(Payment, payment_id)

    return _load


@pytest.fixture
def count_payments(session_factory):
    def _count() -> int:
        with session_factory() as db:
            return len(PaymentRepository(db).find_all())

    return _count

"""HTTP surface for payment records."""

from contextlib import asynccontextmanager
from time import perf_counter
from uuid import uuid4

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from orderpay.common.config import settings
from orderpay.common.db import SessionLocal
from orderpay.common.errors import PaymentError
from orderpay.common.logging import configure_logging, logger, trace_id_ctx
from orderpay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
    payment_latency_seconds,
    payment_requests_total,
)
from orderpay.common.startup import log_startup_config
from orderpay.common.tracing import instrument_app, setup_tracing
from orderpay.services.orders.client import OrderClient
from orderpay.services.payments.schemas import (
    PaymentCollectionResponse,
    PaymentCreateRequest,
    PaymentResponse,
    TimelineEntryResponse,
)
from orderpay.services.payments.service import PaymentService

configure_logging()
setup_tracing(settings.service_name)
log_startup_config(
    settings,
    ["database_dsn", "order_service_url", "order_timeout_seconds", "log_level", "tracing_enabled"],
)
order_client = OrderClient()
service = PaymentService(SessionLocal, order_client, service_name=settings.service_name)


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    order_client.close()


app = FastAPI(title="Payment Service", lifespan=lifespan)
instrument_app(app)


def get_payment_service() -> PaymentService:
    return service


@app.middleware("http")
async def request_context_middleware(request: Request, call_next):
    """Seed the trace id and record request count and latency."""

    trace_id_ctx.set(request.headers.get("x-trace-id") or str(uuid4()))
    start = perf_counter()
    route = request.url.path
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        route_obj = request.scope.get("route")
        if route_obj is not None and getattr(route_obj, "path", None):
            route = route_obj.path
        return response
    finally:
        http_request_duration_seconds.labels(
            service=settings.service_name, route=route, method=request.method
        ).observe(max(0.0, perf_counter() - start))
        http_requests_total.labels(
            service=settings.service_name,
            route=route,
            method=request.method,
            status_code=str(status_code),
        ).inc()


@app.exception_handler(PaymentError)
async def payment_error_handler(request: Request, exc: PaymentError):
    """Map payment error kinds to HTTP status codes with a uniform body."""

    if exc.http_status >= 500:
        logger.error("%s on %s: %s", exc.__class__.__name__, request.url.path, exc.message)
    else:
        logger.info("%s on %s: %s", exc.__class__.__name__, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content={
            "error": {
                "code": exc.__class__.__name__.removesuffix("Error"),
                "message": exc.message,
                "details": exc.details,
            }
        },
    )


def _observed(operation: str):
    payment_requests_total.labels(service=settings.service_name, operation=operation).inc()
    return payment_latency_seconds.labels(service=settings.service_name, operation=operation).time()


@app.get("/api/payments", response_model=PaymentCollectionResponse)
def list_payments(svc: PaymentService = Depends(get_payment_service)):
    """Payments whose order is currently in payment."""

    with _observed("list"):
        return PaymentCollectionResponse(collection=svc.list_payments())


@app.get("/api/payments/{payment_id}", response_model=PaymentResponse)
def get_payment(payment_id: int, svc: PaymentService = Depends(get_payment_service)):
    with _observed("get"):
        return svc.get_payment(payment_id)


@app.post("/api/payments", response_model=PaymentResponse)
def create_payment(req: PaymentCreateRequest, svc: PaymentService = Depends(get_payment_service)):
    """Start a payment for an `ORDERED` order and move the order forward."""

    with _observed("create"):
        return svc.create_payment(req)


@app.patch("/api/payments/{payment_id}", response_model=PaymentResponse)
def advance_payment(payment_id: int, svc: PaymentService = Depends(get_payment_service)):
    with _observed("advance"):
        return svc.advance_payment(payment_id)


@app.delete("/api/payments/{payment_id}")
def cancel_payment(payment_id: int, svc: PaymentService = Depends(get_payment_service)) -> bool:
    """Soft delete: the payment is kept with status `CANCELED`."""

    with _observed("cancel"):
        svc.cancel_payment(payment_id)
        return True


@app.get("/api/payments/{payment_id}/timeline", response_model=list[TimelineEntryResponse])
def payment_timeline(payment_id: int, svc: PaymentService = Depends(get_payment_service)):
    return svc.get_timeline(payment_id)


@app.get("/metrics")
def metrics():
    """Prometheus scrape endpoint."""

    return metrics_response()


@app.get("/health")
def health():
    """Container health probe endpoint."""

    return {"ok": True}

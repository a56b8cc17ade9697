"""Read-only projection of orders owned by the order service."""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

ORDERED = "ORDERED"
IN_PAYMENT = "IN_PAYMENT"


def _remote_field(remote_name: str, local_name: str):
    return Field(
        default=None,
        validation_alias=AliasChoices(local_name, remote_name),
        serialization_alias=remote_name,
    )


class Order(BaseModel):
    """Order as served by the order service.

    Accepts the order service's camelCase names or snake_case, and always
    serializes back under the order service's names so the order reaches
    callers with the field names it was fetched with. Fields this service does
    not know about are kept and passed through unmodified.
    """

    model_config = ConfigDict(extra="allow", serialize_by_alias=True)

    order_id: int | None = _remote_field("orderId", "order_id")
    order_status: str | None = _remote_field("orderStatus", "order_status")
    order_date: str | None = _remote_field("orderDate", "order_date")
    order_desc: str | None = _remote_field("orderDesc", "order_desc")
    order_fee: float | None = _remote_field("orderFee", "order_fee")

    def is_in_payment(self) -> bool:
        return (self.order_status or "").upper() == IN_PAYMENT

    def is_startable(self) -> bool:
        # Exact match: only a freshly ordered order can start a payment.
        return self.order_status == ORDERED

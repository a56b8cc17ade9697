"""Payment state machine transitions enforced by the payment service."""

from orderpay.common.errors import IllegalStateError

NOT_STARTED = "NOT_STARTED"
IN_PROGRESS = "IN_PROGRESS"
COMPLETED = "COMPLETED"
CANCELED = "CANCELED"

ALLOWED_TRANSITIONS: dict[str, set[str]] = {
    NOT_STARTED: {IN_PROGRESS, CANCELED},
    IN_PROGRESS: {COMPLETED, CANCELED},
    COMPLETED: set(),
    CANCELED: set(),
}

# One step forward per advance call.
ADVANCE_STEPS: dict[str, str] = {
    NOT_STARTED: IN_PROGRESS,
    IN_PROGRESS: COMPLETED,
}


def validate_transition(current: str, new: str) -> None:
    """Raise when a transition is not allowed by the state machine."""

    if new not in ALLOWED_TRANSITIONS.get(current, set()):
        raise IllegalStateError(f"Invalid transition: {current} -> {new}")


def next_status(current: str) -> str:
    """Return the status an advance moves `current` to."""

    if current == COMPLETED:
        raise IllegalStateError("Payment is already COMPLETED and cannot be updated further")
    if current == CANCELED:
        raise IllegalStateError("Payment is CANCELED and cannot be updated")
    if current not in ADVANCE_STEPS:
        raise IllegalStateError(f"Unknown payment status: {current}")
    return ADVANCE_STEPS[current]

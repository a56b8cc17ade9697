"""Startup-time helpers for safe config logging."""

from pydantic_settings import BaseSettings

from orderpay.common.logging import logger

_SECRET_MARKERS = ("key", "secret", "password", "token")


def _safe_value(name: str, value) -> str:
    """Render one setting, redacting secret-like names and DSN credentials."""

    if value is None:
        return "<unset>"
    if any(marker in name.lower() for marker in _SECRET_MARKERS):
        return "<redacted>"
    text = str(value)
    if name.endswith("_dsn") and "@" in text:
        scheme, _, rest = text.partition("://")
        return f"{scheme}://<redacted>@{rest.rsplit('@', 1)[1]}"
    return text


def log_startup_config(config: BaseSettings, fields: list[str]) -> dict[str, str]:
    """Log selected settings fields for quick troubleshooting."""

    values = config.model_dump()
    snapshot = {"service": str(values.get("service_name"))}
    for name in fields:
        snapshot[name] = _safe_value(name, values.get(name))
    logger.info("startup_config=%s", snapshot)
    return snapshot

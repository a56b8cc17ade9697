"""Startup config snapshot redaction."""

from orderpay.common.config import Settings
from orderpay.common.startup import _safe_value, log_startup_config


def test_snapshot_redacts_dsn_credentials():
    config = Settings(database_dsn="postgresql+psycopg://pay:hunter2@db:5432/payments")

    snapshot = log_startup_config(config, ["database_dsn", "order_service_url"])

    assert snapshot["database_dsn"] == "postgresql+psycopg://<redacted>@db:5432/payments"
    assert "hunter2" not in str(snapshot)
    assert snapshot["order_service_url"] == config.order_service_url


def test_snapshot_marks_missing_fields_unset():
    snapshot = log_startup_config(Settings(), ["api_token", "log_level"])

    assert snapshot["api_token"] == "<unset>"
    assert snapshot["log_level"] == Settings().log_level


def test_secret_like_names_are_redacted():
    assert _safe_value("order_api_key", "abc") == "<redacted>"
    assert _safe_value("order_service_url", "http://orders") == "http://orders"

"""Central environment-driven settings for the payment service.

Loaded once per process. Every field can be overridden by the matching
upper-case environment variable or a `.env` file.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-service"
    log_level: str = "INFO"
    database_dsn: str = "sqlite:///./payments.db"
    order_service_url: str = "http://order-service:8300/order-service/api/orders"
    order_timeout_seconds: float = 5.0
    otel_exporter_otlp_endpoint: str = "http://otel-collector:4318/v1/traces"
    tracing_enabled: bool = True
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()

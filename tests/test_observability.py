"""Test logging and tracing setup."""
import structlog
from opentelemetry.sdk.trace import TracerProvider

from core.observability.logging import configure_logging
from core.observability.otel_setup import setup_tracing


def test_configure_logging_binds_context(capsys):
    configure_logging("INFO", json=True)
    structlog.contextvars.bind_contextvars(request_id="req-1")
    try:
        structlog.get_logger("test").info("order.created", order_id=5)
    finally:
        structlog.contextvars.unbind_contextvars("request_id")
    out = capsys.readouterr().out
    assert '"event": "order.created"' in out
    assert '"request_id": "req-1"' in out
    assert '"order_id": 5' in out


def test_configure_logging_filters_below_level(capsys):
    configure_logging("WARNING")
    structlog.get_logger("test").info("quiet.event")
    assert "quiet.event" not in capsys.readouterr().out


def test_setup_tracing_names_service(monkeypatch):
    monkeypatch.delenv("OTEL_EXPORTER_OTLP_ENDPOINT", raising=False)
    provider = setup_tracing("bookstore-test")
    assert isinstance(provider, TracerProvider)
    assert provider.resource.attributes["service.name"] == "bookstore-test"

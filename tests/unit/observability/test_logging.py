"""Tests for structured logging."""

import json
from io import StringIO

import pytest
import structlog

from crmsync.config.models.observability import LoggingConfig
from crmsync.observability.logging import (
    PIIRedactor,
    get_logger,
    setup_logging,
    setup_logging_from_config,
)


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_json_format(self) -> None:
        """Should configure JSON format for production."""
        setup_logging(level="INFO", format="json", redact_pii=False)
        get_logger("test").info("test_message")

    def test_setup_console_format(self) -> None:
        """Should configure console format for development."""
        setup_logging(level="DEBUG", format="console", redact_pii=False)
        get_logger("test").debug("test_message")

    def test_setup_from_config(self) -> None:
        """Should accept the observability.logging settings section."""
        setup_logging_from_config(LoggingConfig(level="WARNING", format="console"))
        get_logger("test").warning("test_message", email="ada@example.com")


class TestPIIRedactor:
    """Tests for PII redaction of customer data."""

    @pytest.fixture
    def redactor(self) -> PIIRedactor:
        return PIIRedactor()

    @pytest.mark.parametrize("key", ["email", "phone", "cell", "password", "username"])
    def test_redacts_customer_fields_by_key(self, redactor: PIIRedactor, key: str) -> None:
        """Contact and credential fields of a customer never reach the log."""
        result = redactor(None, None, {key: "sensitive", "other": "value"})  # type: ignore
        assert result[key] == "[REDACTED]"
        assert result["other"] == "value"

    def test_redacts_email_typed_into_search(self, redactor: PIIRedactor) -> None:
        """Search terms often contain an email address."""
        result = redactor(None, None, {"search": "ada@example.com"})  # type: ignore
        assert result["search"] == "[EMAIL]"

    def test_redacts_phone_pattern_in_string_value(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"message": "Call 020 7946 0018 today"})  # type: ignore
        assert "7946" not in result["message"]
        assert "[PHONE]" in result["message"]

    def test_handles_nested_customer_payload(self, redactor: PIIRedactor) -> None:
        event_dict = {
            "payload": {"email": "ada@example.com", "name": {"first": "Ada"}},
            "location": {"city": "London", "street": {"number": 12}},
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result["payload"]["email"] == "[REDACTED]"
        assert result["payload"]["name"] == {"first": "Ada"}
        assert result["location"] == {"city": "London", "street": "[REDACTED]"}

    def test_handles_lists(self, redactor: PIIRedactor) -> None:
        result = redactor(None, None, {"fields": ["email", "ada@example.com", 3]})  # type: ignore
        assert result["fields"] == ["email", "[EMAIL]", 3]

    def test_preserves_non_pii_data(self, redactor: PIIRedactor) -> None:
        event_dict = {
            "event": "fetch_succeeded",
            "sequence": 3,
            "rows": 10,
            "total_count": 23,
        }
        result = redactor(None, None, event_dict)  # type: ignore
        assert result == event_dict


class TestJSONLogging:
    """Tests for JSON log output format."""

    def test_json_output_is_valid_json(self) -> None:
        """Should produce valid JSON output with redaction applied."""
        output = StringIO()
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.add_log_level,
                structlog.processors.TimeStamper(fmt="iso"),
                PIIRedactor(),
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(0),
            context_class=dict,
            logger_factory=structlog.PrintLoggerFactory(output),
            cache_logger_on_first_use=False,
        )

        structlog.get_logger("test").info("customer_mutated", email="ada@example.com", operation="update")

        parsed = json.loads(output.getvalue().strip())
        assert parsed["event"] == "customer_mutated"
        assert parsed["email"] == "[REDACTED]"
        assert parsed["operation"] == "update"
        assert "timestamp" in parsed
        assert parsed["level"] == "info"

"""Unit tests for src/core/exceptions.py."""

import pytest
import pytest_check

from src.core.exceptions import (
    ConfigurationError,
    ErrorCode,
    PacksendError,
    ResponseAlreadySentError,
    ResponseCancelledError,
    Severity,
    ValidationFailureError,
)


@pytest.mark.unit
class TestPacksendError:
    """Test suite for the base exception."""

    def test_accepts_enum_or_string_code(self) -> None:
        """Test error codes may be given as enum or string."""
        assert PacksendError(ErrorCode.NOT_FOUND, "missing").error_code == "NOT_FOUND"
        assert PacksendError("CUSTOM", "custom").error_code == "CUSTOM"

    def test_defaults(self) -> None:
        """Test severity defaults to MEDIUM with an empty context."""
        error = PacksendError("CUSTOM", "custom")

        with pytest_check.check:
            assert error.severity is Severity.MEDIUM
        with pytest_check.check:
            assert error.context == {}
        with pytest_check.check:
            assert error.cause is None
        with pytest_check.check:
            assert error.stack_trace
        with pytest_check.check:
            assert len(error.fingerprint) == 16

    def test_cause_is_chained(self) -> None:
        """Test the cause becomes __cause__."""
        cause = ValueError("root")
        error = PacksendError("CUSTOM", "custom", cause=cause)

        assert error.__cause__ is cause

    def test_str_and_repr(self) -> None:
        """Test string forms include code, message and context."""
        error = PacksendError("CUSTOM", "custom", Severity.LOW, {"key": "value"})

        assert str(error) == "[CUSTOM] custom"
        assert repr(error) == (
            "PacksendError(error_code='CUSTOM', message='custom', "
            "severity=LOW, context={'key': 'value'})"
        )

    @pytest.mark.parametrize(
        ("severity", "expected", "alert"),
        [
            (Severity.LOW, True, False),
            (Severity.MEDIUM, True, False),
            (Severity.HIGH, False, True),
            (Severity.CRITICAL, False, True),
        ],
    )
    def test_expected_and_alert(self, severity: Severity, expected: bool, alert: bool) -> None:
        """Test severity drives is_expected and should_alert."""
        error = PacksendError("CUSTOM", "custom", severity)

        assert error.is_expected is expected
        assert error.should_alert is alert

    def test_fingerprint_is_stable_for_same_site(self) -> None:
        """Test errors raised from the same place share a fingerprint."""
        fingerprints = {PacksendError("CUSTOM", "x").fingerprint for _ in range(3)}

        assert len(fingerprints) == 1


@pytest.mark.unit
class TestSpecializedErrors:
    """Test suite for the specialized exceptions."""

    def test_configuration_error(self) -> None:
        """Test configuration errors are critical."""
        error = ConfigurationError("missing", context={"route_name": "items"})

        assert error.error_code == "CONFIGURATION_ERROR"
        assert error.severity is Severity.CRITICAL
        assert error.context == {"route_name": "items"}
        assert error.should_alert is True

    def test_response_cancelled_error(self) -> None:
        """Test cancellation carries its reason."""
        error = ResponseCancelledError(reason="timeout", context={"token": "deadline"})

        assert error.error_code == "RESPONSE_CANCELLED"
        assert error.severity is Severity.LOW
        assert error.reason == "timeout"
        assert error.context == {"reason": "timeout", "token": "deadline"}
        assert error.message == "Response write was cancelled"

    def test_response_cancelled_without_reason(self) -> None:
        """Test an unknown reason leaves the context empty."""
        error = ResponseCancelledError()

        assert error.reason is None
        assert error.context == {}

    def test_response_already_sent_error(self) -> None:
        """Test double writes are high severity."""
        error = ResponseAlreadySentError()

        assert error.error_code == "RESPONSE_ALREADY_SENT"
        assert error.severity is Severity.HIGH

    def test_validation_failure_error(self) -> None:
        """Test validation failures are kept on the exception."""
        error = ValidationFailureError(("a", "b"))

        assert error.error_code == "VALIDATION_ERROR"
        assert error.severity is Severity.LOW
        assert error.failures == ["a", "b"]
        assert error.message == "One or more validation errors occurred"

    @pytest.mark.parametrize(
        "error",
        [
            ConfigurationError("x"),
            ResponseCancelledError(),
            ResponseAlreadySentError(),
            ValidationFailureError([]),
        ],
    )
    def test_all_derive_from_base(self, error: Exception) -> None:
        """Test every specialized error is a PacksendError."""
        assert isinstance(error, PacksendError)

"""Unit tests for the error taxonomy."""

import logging

import pytest

from coursereg.errors import (
    ConflictError,
    ConflictRule,
    EntityKind,
    InternalError,
    NotFoundError,
    UnknownError,
    classified,
)


@pytest.mark.unit
class TestNotFoundError:
    """Tests for NotFoundError messages."""

    def test_message_names_kind_and_key(self) -> None:
        error = NotFoundError(EntityKind.COURSE, 7)

        assert str(error) == "Course with ID 7 not found"
        assert error.kind == EntityKind.COURSE
        assert error.key == 7

    def test_message_with_custom_field(self) -> None:
        error = NotFoundError(EntityKind.INVOICE, "FAC-001", field="number")

        assert str(error) == "Invoice with number FAC-001 not found"


@pytest.mark.unit
class TestClassified:
    """Tests for the classified() wrapper."""

    def test_classified_errors_pass_through(self) -> None:
        """Already classified errors reach the caller unchanged."""
        original = ConflictError(ConflictRule.VOUCHER_IN_USE, "Voucher with ID 1 is in use")

        with pytest.raises(ConflictError) as exc_info, classified("creating the inscription"):
            raise original

        assert exc_info.value is original

    def test_unclassified_error_becomes_internal(self) -> None:
        with pytest.raises(InternalError) as exc_info, classified("creating the invoice"):
            raise RuntimeError("disk I/O error")

        assert str(exc_info.value) == "Error during creating the invoice: disk I/O error"
        assert exc_info.value.operation == "creating the invoice"
        assert isinstance(exc_info.value.__cause__, RuntimeError)

    def test_messageless_error_becomes_unknown(self) -> None:
        with pytest.raises(UnknownError) as exc_info, classified("verifying the payment"):
            raise RuntimeError()

        assert "unknown error" in str(exc_info.value)
        assert exc_info.value.operation == "verifying the payment"

    def test_blank_message_becomes_unknown(self) -> None:
        with pytest.raises(UnknownError), classified("listing courses"):
            raise ValueError("   ")

    def test_internal_failure_is_logged_sanitized(self, caplog: pytest.LogCaptureFixture) -> None:
        """Personal data in a driver message does not reach the log."""
        with (
            caplog.at_level(logging.ERROR, logger="coursereg.errors"),
            pytest.raises(InternalError),
            classified("creating the person"),
        ):
            raise RuntimeError("constraint on ana.torres@example.com")

        assert "ana.torres@example.com" not in caplog.text
        assert "creating the person" in caplog.text

    def test_no_error_no_effect(self) -> None:
        with classified("reading the course"):
            value = 1 + 1

        assert value == 2

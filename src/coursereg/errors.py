"""Error taxonomy shared by every coursereg component.

Callers act on ``NotFoundError`` and ``ConflictError`` (retry with different
input). ``InternalError`` and ``UnknownError`` are reported, never retried.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from enum import StrEnum

from coursereg.logging import sanitize_for_log

logger = logging.getLogger(__name__)


class EntityKind(StrEnum):
    """Entity kinds named in lookup failures."""

    COURSE = "Course"
    COURSE_INTEGRATION = "Course integration"
    PERSON = "Person"
    BILLING_PROFILE = "Billing profile"
    VOUCHER = "Voucher"
    DISCOUNT = "Discount"
    INSCRIPTION = "Inscription"
    INVOICE = "Invoice"


class ConflictRule(StrEnum):
    """Business rule that rejected a write."""

    DUPLICATE_INSCRIPTION = "duplicate_inscription"
    VOUCHER_IN_USE = "voucher_in_use"
    DUPLICATE_INVOICE = "duplicate_invoice"
    DUPLICATE_INVOICE_NUMBER = "duplicate_invoice_number"
    DUPLICATE_INCOME_NUMBER = "duplicate_income_number"
    DUPLICATE_IDENTIFICATION = "duplicate_identification"
    DUPLICATE_EMAIL = "duplicate_email"
    DUPLICATE_COURSE_CODE = "duplicate_course_code"
    DUPLICATE_INTEGRATION = "duplicate_integration"
    DUPLICATE_EXTERNAL_COURSE_ID = "duplicate_external_course_id"
    DUPLICATE_RECORD = "duplicate_record"
    ALREADY_VERIFIED = "already_verified"
    VERIFIED_INVOICE = "verified_invoice"
    NO_INVOICE = "no_invoice"
    PAYMENT_NOT_VERIFIED = "payment_not_verified"
    ALREADY_ENROLLED = "already_enrolled"
    INSCRIPTION_NOT_PENDING = "inscription_not_pending"
    HAS_DEPENDENTS = "has_dependents"


class CourseRegError(Exception):
    """Base exception for coursereg errors."""


class NotFoundError(CourseRegError):
    """A referenced entity does not exist."""

    def __init__(self, kind: EntityKind, key: object, field: str = "ID") -> None:
        self.kind = kind
        self.key = key
        self.field = field
        super().__init__(f"{kind.value} with {field} {key} not found")


class ConflictError(CourseRegError):
    """A write would break a uniqueness or state rule."""

    def __init__(self, rule: ConflictRule, message: str) -> None:
        self.rule = rule
        super().__init__(message)


class ValidationError(CourseRegError):
    """A field value is semantically invalid (dates, identification numbers)."""


class PermissionDeniedError(CourseRegError):
    """The actor lacks the capability required for the change."""


class InternalError(CourseRegError):
    """A lower-layer failure that could not be classified."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"Error during {operation}: {cause}")


class UnknownError(CourseRegError):
    """A failure with nothing usable to report."""

    def __init__(self, operation: str) -> None:
        self.operation = operation
        super().__init__(f"unknown error during {operation}")


@contextmanager
def classified(operation: str) -> Iterator[None]:
    """Wrap unclassified failures raised inside the block.

    Already-classified errors propagate unchanged so the precise cause
    reaches the caller.
    """
    try:
        yield
    except CourseRegError:
        raise
    except Exception as e:
        message = str(e).strip()
        if not message:
            logger.error("Unknown failure during %s (%s)", operation, type(e).__name__)
            raise UnknownError(operation) from e
        logger.error("Internal failure during %s: %s", operation, sanitize_for_log(message))
        raise InternalError(operation, message) from e

"""Custom exceptions for the entity store."""

from __future__ import annotations

import re

from sqlalchemy.exc import IntegrityError

_UNIQUE_PATTERN = re.compile(r"UNIQUE constraint failed: (?P<columns>[\w., ]+)")


class StoreError(Exception):
    """Base exception for entity store errors."""


class UniqueViolation(StoreError):
    """A write hit a unique constraint.

    Attributes:
        table: Table the constraint belongs to (empty if the driver omits it).
        fields: Column names covered by the violated constraint.
    """

    def __init__(self, table: str, fields: tuple[str, ...]) -> None:
        self.table = table
        self.fields = fields
        super().__init__(f"Unique constraint violated on {table}({', '.join(fields)})")

    def covers(self, field: str) -> bool:
        """Check whether the violated constraint includes a column."""
        return field in self.fields


class ForeignKeyViolation(StoreError):
    """A write or delete broke a foreign key."""


def translate_integrity_error(error: IntegrityError) -> StoreError:
    """Convert a driver integrity error into a typed store error.

    Args:
        error: The IntegrityError raised by SQLAlchemy.

    Returns:
        UniqueViolation or ForeignKeyViolation; a plain StoreError when the
        failure is neither.
    """
    message = str(error.orig) if error.orig is not None else str(error)

    match = _UNIQUE_PATTERN.search(message)
    if match:
        qualified = [c.strip() for c in match.group("columns").split(",")]
        table = qualified[0].split(".")[0] if "." in qualified[0] else ""
        fields = tuple(c.split(".")[-1] for c in qualified)
        return UniqueViolation(table, fields)

    if "foreign key" in message.lower():
        return ForeignKeyViolation(message)

    return StoreError(message)

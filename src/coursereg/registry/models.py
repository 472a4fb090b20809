"""Data models for the registry services.

Partial updates are dataclasses whose fields default to ``UNSET``. A field
left at ``UNSET`` is not touched; a field set to ``None`` clears the column
(allowed for nullable columns only).
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from datetime import date, datetime  # noqa: TC003 - used at runtime in dataclasses
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any

from coursereg.errors import ValidationError

CENTS = Decimal("0.01")


class Unset(Enum):
    UNSET = "UNSET"

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = Unset.UNSET


def supplied(update: Any) -> dict[str, Any]:
    """Fields of an update dataclass that were explicitly supplied."""
    return {
        f.name: getattr(update, f.name)
        for f in fields(update)
        if getattr(update, f.name) is not UNSET
    }


def reject_nulls(changes: dict[str, Any], nullable: frozenset[str] = frozenset()) -> None:
    """Raise ValidationError if a field outside ``nullable`` is set to None."""
    for name, value in changes.items():
        if value is None and name not in nullable:
            raise ValidationError(f"{name} cannot be cleared")


def apply_changes(entity: Any, changes: dict[str, Any], nullable: frozenset[str]) -> None:
    """Copy supplied changes onto an ORM entity.

    Raises:
        ValidationError: If a non-nullable field is set to None.
    """
    reject_nulls(changes, nullable)
    for name, value in changes.items():
        setattr(entity, name, value)


def to_money(value: Decimal | str | int | float, field: str = "amount") -> Decimal:
    """Convert to a non-negative Decimal with two decimal places.

    Floats go through their shortest repr so 0.1 becomes Decimal("0.10").

    Raises:
        ValidationError: If the value is not a number or is negative.
    """
    try:
        amount = Decimal(str(value)) if isinstance(value, float) else Decimal(value)
    except (InvalidOperation, TypeError, ValueError) as e:
        raise ValidationError(f"{field} must be a decimal number") from e
    if not amount.is_finite():
        raise ValidationError(f"{field} must be a finite number")
    if amount < 0:
        raise ValidationError(f"{field} cannot be negative")
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


def check_page(page: int, page_size: int) -> None:
    """Reject page numbers below 1 and empty pages."""
    if page < 1:
        raise ValidationError("page must be at least 1")
    if page_size < 1:
        raise ValidationError("page_size must be at least 1")


def ordering(model: Any, allowed: tuple[str, ...], order_by: str, order: str) -> Any:
    """Build an ORDER BY clause from a whitelisted field and a direction.

    Raises:
        ValidationError: If the field is not whitelisted or the direction is
            not "asc" or "desc".
    """
    if order_by not in allowed:
        raise ValidationError(f"Cannot order by {order_by!r}; expected one of {', '.join(allowed)}")
    direction = order.lower()
    if direction not in ("asc", "desc"):
        raise ValidationError(f"Order must be 'asc' or 'desc', got {order!r}")
    column = getattr(model, order_by)
    return column.desc() if direction == "desc" else column.asc()


# Partial updates


@dataclass
class CourseUpdate:
    """Partial update for a course."""

    name: str | Unset = UNSET
    short_code: str | Unset = UNSET
    description: str | Unset = UNSET
    modality: str | Unset = UNSET
    price: Decimal | Unset = UNSET
    payment_link: str | None | Unset = UNSET
    start_date: date | Unset = UNSET
    end_date: date | Unset = UNSET


@dataclass
class IntegrationUpdate:
    """Partial update for a course integration mapping."""

    external_course_id: int | Unset = UNSET
    external_short_name: str | Unset = UNSET
    active: bool | Unset = UNSET


@dataclass
class PersonUpdate:
    """Partial update for a person."""

    identification: str | Unset = UNSET
    first_names: str | Unset = UNSET
    last_names: str | Unset = UNSET
    phone: str | Unset = UNSET
    email: str | Unset = UNSET
    country: str | Unset = UNSET
    region: str | Unset = UNSET
    city: str | Unset = UNSET
    profession: str | None | Unset = UNSET
    institution: str | None | Unset = UNSET


@dataclass
class BillingProfileUpdate:
    """Partial update for a billing profile."""

    legal_name: str | Unset = UNSET
    tax_id: str | Unset = UNSET
    phone: str | Unset = UNSET
    email: str | Unset = UNSET
    address: str | Unset = UNSET


@dataclass
class DiscountUpdate:
    """Partial update for a discount."""

    kind: str | Unset = UNSET
    student_count: int | Unset = UNSET
    amount: Decimal | Unset = UNSET
    percentage: Decimal | Unset = UNSET
    description: str | Unset = UNSET


# Materialized views


@dataclass(frozen=True)
class CourseView:
    id: int
    name: str
    short_code: str
    description: str
    modality: str
    price: Decimal
    payment_link: str | None
    start_date: date
    end_date: date

    @classmethod
    def from_model(cls, course: Any) -> CourseView:
        return cls(
            id=course.id,
            name=course.name,
            short_code=course.short_code,
            description=course.description,
            modality=course.modality,
            price=course.price,
            payment_link=course.payment_link,
            start_date=course.start_date,
            end_date=course.end_date,
        )


@dataclass(frozen=True)
class CourseIntegrationView:
    id: int
    course_id: int
    external_course_id: int
    external_short_name: str
    active: bool

    @classmethod
    def from_model(cls, integration: Any) -> CourseIntegrationView:
        return cls(
            id=integration.id,
            course_id=integration.course_id,
            external_course_id=integration.external_course_id,
            external_short_name=integration.external_short_name,
            active=integration.active,
        )


@dataclass(frozen=True)
class PersonView:
    id: int
    identification: str
    first_names: str
    last_names: str
    phone: str
    email: str
    country: str
    region: str
    city: str
    profession: str | None
    institution: str | None

    @property
    def full_name(self) -> str:
        return f"{self.first_names} {self.last_names}"

    @classmethod
    def from_model(cls, person: Any) -> PersonView:
        return cls(
            id=person.id,
            identification=person.identification,
            first_names=person.first_names,
            last_names=person.last_names,
            phone=person.phone,
            email=person.email,
            country=person.country,
            region=person.region,
            city=person.city,
            profession=person.profession,
            institution=person.institution,
        )


@dataclass(frozen=True)
class BillingProfileView:
    id: int
    legal_name: str
    tax_id: str
    phone: str
    email: str
    address: str

    @classmethod
    def from_model(cls, profile: Any) -> BillingProfileView:
        return cls(
            id=profile.id,
            legal_name=profile.legal_name,
            tax_id=profile.tax_id,
            phone=profile.phone,
            email=profile.email,
            address=profile.address,
        )


@dataclass(frozen=True)
class VoucherView:
    id: int
    uploaded_at: datetime
    file_ref: str
    mime_type: str
    filename: str

    @classmethod
    def from_model(cls, voucher: Any) -> VoucherView:
        return cls(
            id=voucher.id,
            uploaded_at=voucher.uploaded_at,
            file_ref=voucher.file_ref,
            mime_type=voucher.mime_type,
            filename=voucher.filename,
        )


@dataclass(frozen=True)
class DiscountView:
    id: int
    kind: str
    student_count: int
    amount: Decimal
    percentage: Decimal
    description: str

    @classmethod
    def from_model(cls, discount: Any) -> DiscountView:
        return cls(
            id=discount.id,
            kind=discount.kind,
            student_count=discount.student_count,
            amount=discount.amount,
            percentage=discount.percentage,
            description=discount.description,
        )

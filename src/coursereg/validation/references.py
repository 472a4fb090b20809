"""Reference Validator - resolves every foreign key a request carries."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import select

from coursereg.errors import EntityKind, NotFoundError
from coursereg.store.models import (
    BillingProfile,
    Course,
    CourseIntegration,
    Discount,
    Inscription,
    Invoice,
    Person,
    Voucher,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

MODELS: dict[EntityKind, type[Any]] = {
    EntityKind.COURSE: Course,
    EntityKind.COURSE_INTEGRATION: CourseIntegration,
    EntityKind.PERSON: Person,
    EntityKind.BILLING_PROFILE: BillingProfile,
    EntityKind.VOUCHER: Voucher,
    EntityKind.DISCOUNT: Discount,
    EntityKind.INSCRIPTION: Inscription,
    EntityKind.INVOICE: Invoice,
}

# Fixed resolution order, so the reported failure does not depend on which
# fields a request happened to populate.
REFERENCE_ORDER: tuple[EntityKind, ...] = (
    EntityKind.INSCRIPTION,
    EntityKind.COURSE,
    EntityKind.PERSON,
    EntityKind.BILLING_PROFILE,
    EntityKind.VOUCHER,
    EntityKind.DISCOUNT,
)


@dataclass
class ResolvedReferences:
    """Entities resolved for one operation. Unrequested kinds stay None."""

    inscription: Inscription | None = None
    course: Course | None = None
    person: Person | None = None
    billing_profile: BillingProfile | None = None
    voucher: Voucher | None = None
    discount: Discount | None = None


_ATTRIBUTES: dict[EntityKind, str] = {
    EntityKind.INSCRIPTION: "inscription",
    EntityKind.COURSE: "course",
    EntityKind.PERSON: "person",
    EntityKind.BILLING_PROFILE: "billing_profile",
    EntityKind.VOUCHER: "voucher",
    EntityKind.DISCOUNT: "discount",
}


class ReferenceValidator:
    """Read-only existence checks bound to one session."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def require(self, kind: EntityKind, key: int) -> Any:
        """Fetch an entity by primary key.

        Raises:
            NotFoundError: If no row has that key.
        """
        entity = self._session.get(MODELS[kind], key)
        if entity is None:
            raise NotFoundError(kind, key)
        return entity

    def require_by(self, kind: EntityKind, column: str, value: object, field: str) -> Any:
        """Fetch an entity by a unique column.

        Args:
            kind: Entity kind to look up
            column: Mapped attribute name holding the unique value
            value: Value to match
            field: Human-readable name of the lookup key for the error

        Raises:
            NotFoundError: If no row matches.
        """
        model = MODELS[kind]
        stmt = select(model).where(getattr(model, column) == value)
        entity = self._session.execute(stmt).scalar_one_or_none()
        if entity is None:
            raise NotFoundError(kind, value, field=field)
        return entity

    def resolve(
        self,
        *,
        inscription_id: int | None = None,
        course_id: int | None = None,
        person_id: int | None = None,
        billing_id: int | None = None,
        voucher_id: int | None = None,
        discount_id: int | None = None,
    ) -> ResolvedReferences:
        """Resolve every supplied key in REFERENCE_ORDER.

        Keys passed as None are not required and are skipped.

        Raises:
            NotFoundError: For the first key, in order, that does not resolve.
        """
        keys: dict[EntityKind, int | None] = {
            EntityKind.INSCRIPTION: inscription_id,
            EntityKind.COURSE: course_id,
            EntityKind.PERSON: person_id,
            EntityKind.BILLING_PROFILE: billing_id,
            EntityKind.VOUCHER: voucher_id,
            EntityKind.DISCOUNT: discount_id,
        }
        resolved = ResolvedReferences()
        for kind in REFERENCE_ORDER:
            key = keys[kind]
            if key is None:
                continue
            setattr(resolved, _ATTRIBUTES[kind], self.require(kind, key))
        return resolved

"""DiscountRegistry - discounts that inscriptions may carry."""

from __future__ import annotations

import logging
from decimal import Decimal

from sqlalchemy import select

from coursereg.errors import EntityKind, ValidationError, classified
from coursereg.registry.models import (
    DiscountUpdate,
    DiscountView,
    apply_changes,
    reject_nulls,
    supplied,
    to_money,
)
from coursereg.store import Discount, EntityStore, Inscription
from coursereg.validation import ConflictGuard, ReferenceValidator

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def _check_percentage(value: Decimal | str | int) -> Decimal:
    percentage = to_money(value, "percentage")
    if percentage > HUNDRED:
        raise ValidationError("percentage cannot exceed 100")
    return percentage


def _check_student_count(value: int) -> int:
    if value < 1:
        raise ValidationError("student_count must be at least 1")
    return value


class DiscountRegistry:
    """Discount administration."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    def create_discount(
        self,
        kind: str,
        amount: Decimal | str | int,
        percentage: Decimal | str | int = 0,
        student_count: int = 1,
        description: str = "",
    ) -> DiscountView:
        """Create a discount.

        Raises:
            ValidationError: Negative amount, percentage outside 0-100 or no students
        """
        discount = Discount(
            kind=kind,
            amount=to_money(amount),
            percentage=_check_percentage(percentage),
            student_count=_check_student_count(student_count),
            description=description,
        )
        with classified("creating the discount"), self._store.unit_of_work() as session:
            session.add(discount)
            self._store.flush(session)
            view = DiscountView.from_model(discount)

        logger.info("Discount %s created (%s)", view.id, view.kind)
        return view

    def get_discount(self, discount_id: int) -> DiscountView:
        """Get discount by ID.

        Raises:
            NotFoundError: If the discount doesn't exist
        """
        with classified("reading the discount"), self._store.reading() as session:
            return DiscountView.from_model(
                ReferenceValidator(session).require(EntityKind.DISCOUNT, discount_id)
            )

    def list_discounts(self) -> list[DiscountView]:
        with classified("listing discounts"), self._store.reading() as session:
            rows = session.execute(select(Discount).order_by(Discount.id)).scalars()
            return [DiscountView.from_model(d) for d in rows]

    def update_discount(self, discount_id: int, update: DiscountUpdate) -> DiscountView:
        """Apply a partial update to a discount.

        Raises:
            NotFoundError: If the discount doesn't exist
            ValidationError: If a supplied value is out of range
        """
        changes = supplied(update)
        reject_nulls(changes)
        if "amount" in changes:
            changes["amount"] = to_money(changes["amount"])
        if "percentage" in changes:
            changes["percentage"] = _check_percentage(changes["percentage"])
        if "student_count" in changes:
            changes["student_count"] = _check_student_count(changes["student_count"])

        with classified("updating the discount"), self._store.unit_of_work() as session:
            discount = ReferenceValidator(session).require(EntityKind.DISCOUNT, discount_id)
            apply_changes(discount, changes, nullable=frozenset())
            self._store.flush(session)
            view = DiscountView.from_model(discount)

        logger.info("Discount %s updated", discount_id)
        return view

    def delete_discount(self, discount_id: int) -> None:
        """Delete a discount no inscription carries.

        Raises:
            NotFoundError: If the discount doesn't exist
            ConflictError: If an inscription carries it
        """
        with classified("deleting the discount"), self._store.unit_of_work() as session:
            discount = ReferenceValidator(session).require(EntityKind.DISCOUNT, discount_id)
            ConflictGuard(session).check_no_dependents(
                EntityKind.DISCOUNT, discount_id, Inscription, "discount_id", "inscriptions"
            )
            session.delete(discount)

        logger.info("Discount %s deleted", discount_id)

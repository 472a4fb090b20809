"""ParticipantRegistry - persons and billing profiles.

The ``*_in`` methods work on a caller's open session so the inscription
manager can apply person and billing edits inside its own transaction.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from sqlalchemy import select

from coursereg.errors import EntityKind, ValidationError, classified
from coursereg.logging import mask_identifier
from coursereg.registry.models import (
    BillingProfileUpdate,
    BillingProfileView,
    PersonUpdate,
    PersonView,
    apply_changes,
    check_page,
    supplied,
)
from coursereg.store import (
    BillingProfile,
    EntityStore,
    Inscription,
    Invoice,
    Page,
    Person,
    UniqueViolation,
)
from coursereg.validation import ConflictGuard, ReferenceValidator, conflict_from, normalize_identification

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

PERSON_NULLABLE = frozenset({"profession", "institution"})


def _normalize_email(email: str) -> str:
    cleaned = email.strip().lower()
    if "@" not in cleaned or cleaned.startswith("@") or cleaned.endswith("@"):
        raise ValidationError(f"Invalid email address: {email!r}")
    return cleaned


def _normalize_person_changes(changes: dict[str, object]) -> dict[str, object]:
    if isinstance(changes.get("identification"), str):
        changes["identification"] = normalize_identification(changes["identification"])
    if isinstance(changes.get("email"), str):
        changes["email"] = _normalize_email(changes["email"])
    return changes


class ParticipantRegistry:
    """Person and billing profile administration."""

    def __init__(self, store: EntityStore) -> None:
        self._store = store

    # --- Person Operations ---

    def create_person(
        self,
        identification: str,
        first_names: str,
        last_names: str,
        phone: str,
        email: str,
        country: str,
        region: str,
        city: str,
        profession: str | None = None,
        institution: str | None = None,
    ) -> PersonView:
        """Register a person.

        Raises:
            ValidationError: Invalid identification number or email
            ConflictError: If the identification number or email is taken
        """
        identification = normalize_identification(identification)
        email = _normalize_email(email)
        values = {"identification": identification, "email": email}

        with classified("creating the person"):
            try:
                with self._store.unit_of_work() as session:
                    ConflictGuard(session).check_person_unique(identification, email)
                    person = Person(
                        identification=identification,
                        first_names=first_names,
                        last_names=last_names,
                        phone=phone,
                        email=email,
                        country=country,
                        region=region,
                        city=city,
                        profession=profession,
                        institution=institution,
                    )
                    session.add(person)
                    self._store.flush(session)
                    view = PersonView.from_model(person)
            except UniqueViolation as e:
                raise conflict_from(e, values) from e

        logger.info("Person %s registered (%s)", view.id, mask_identifier(identification))
        return view

    def get_person(self, person_id: int) -> PersonView:
        """Get person by ID.

        Raises:
            NotFoundError: If person doesn't exist
        """
        with classified("reading the person"), self._store.reading() as session:
            return PersonView.from_model(
                ReferenceValidator(session).require(EntityKind.PERSON, person_id)
            )

    def get_person_by_identification(self, identification: str) -> PersonView:
        """Get person by identification number.

        Raises:
            NotFoundError: If no person has that number
        """
        with classified("reading the person"), self._store.reading() as session:
            person = ReferenceValidator(session).require_by(
                EntityKind.PERSON,
                "identification",
                identification.strip(),
                field="identification",
            )
            return PersonView.from_model(person)

    def list_persons(self, page: int = 1, page_size: int = 10) -> Page[PersonView]:
        check_page(page, page_size)
        with classified("listing persons"), self._store.reading() as session:
            stmt = select(Person).order_by(Person.last_names, Person.first_names, Person.id)
            rows, total = self._store.paginate(session, stmt, page, page_size)
            return Page(
                items=[PersonView.from_model(p) for p in rows],
                total=total,
                page=page,
                page_size=page_size,
            )

    def update_person_in(self, session: Session, person_id: int, update: PersonUpdate) -> Person:
        """Apply a partial person update inside an open transaction.

        Uniqueness checks ignore the person being updated, so resending the
        current identification number or email is not a conflict.

        Returns:
            The updated, flushed Person row.
        """
        changes = _normalize_person_changes(supplied(update))
        person = ReferenceValidator(session).require(EntityKind.PERSON, person_id)
        ConflictGuard(session).check_person_unique(
            identification=changes.get("identification"),
            email=changes.get("email"),
            exclude_person_id=person_id,
        )
        apply_changes(person, changes, nullable=PERSON_NULLABLE)
        try:
            self._store.flush(session)
        except UniqueViolation as e:
            raise conflict_from(e, changes) from e
        return person

    def update_person(self, person_id: int, update: PersonUpdate) -> PersonView:
        """Apply a partial update to a person.

        Raises:
            NotFoundError: If person doesn't exist
            ValidationError: Invalid identification number or email
            ConflictError: If the new identification number or email belongs to someone else
        """
        with classified("updating the person"):
            try:
                with self._store.unit_of_work() as session:
                    view = PersonView.from_model(self.update_person_in(session, person_id, update))
            except UniqueViolation as e:
                raise conflict_from(e, supplied(update)) from e

        logger.info("Person %s updated", person_id)
        return view

    def delete_person(self, person_id: int) -> None:
        """Delete a person that no inscription references.

        Raises:
            NotFoundError: If person doesn't exist
            ConflictError: If inscriptions still reference the person
        """
        with classified("deleting the person"), self._store.unit_of_work() as session:
            person = ReferenceValidator(session).require(EntityKind.PERSON, person_id)
            ConflictGuard(session).check_no_dependents(
                EntityKind.PERSON, person_id, Inscription, "person_id", "inscriptions"
            )
            session.delete(person)

        logger.info("Person %s deleted", person_id)

    # --- Billing Profile Operations ---

    def create_billing_profile(
        self,
        legal_name: str,
        tax_id: str,
        phone: str,
        email: str,
        address: str,
    ) -> BillingProfileView:
        """Create a billing profile. Profiles carry no uniqueness rule."""
        email = _normalize_email(email)
        with classified("creating the billing profile"), self._store.unit_of_work() as session:
            profile = BillingProfile(
                legal_name=legal_name,
                tax_id=tax_id.strip(),
                phone=phone,
                email=email,
                address=address,
            )
            session.add(profile)
            self._store.flush(session)
            view = BillingProfileView.from_model(profile)

        logger.info("Billing profile %s created", view.id)
        return view

    def get_billing_profile(self, billing_id: int) -> BillingProfileView:
        """Get billing profile by ID.

        Raises:
            NotFoundError: If the profile doesn't exist
        """
        with classified("reading the billing profile"), self._store.reading() as session:
            return BillingProfileView.from_model(
                ReferenceValidator(session).require(EntityKind.BILLING_PROFILE, billing_id)
            )

    def list_billing_profiles(self, page: int = 1, page_size: int = 10) -> Page[BillingProfileView]:
        check_page(page, page_size)
        with classified("listing billing profiles"), self._store.reading() as session:
            stmt = select(BillingProfile).order_by(BillingProfile.id)
            rows, total = self._store.paginate(session, stmt, page, page_size)
            return Page(
                items=[BillingProfileView.from_model(b) for b in rows],
                total=total,
                page=page,
                page_size=page_size,
            )

    def update_billing_in(
        self, session: Session, billing_id: int, update: BillingProfileUpdate
    ) -> BillingProfile:
        """Apply a partial billing update inside an open transaction."""
        changes = supplied(update)
        if isinstance(changes.get("email"), str):
            changes["email"] = _normalize_email(changes["email"])
        profile = ReferenceValidator(session).require(EntityKind.BILLING_PROFILE, billing_id)
        apply_changes(profile, changes, nullable=frozenset())
        self._store.flush(session)
        return profile

    def update_billing_profile(
        self, billing_id: int, update: BillingProfileUpdate
    ) -> BillingProfileView:
        """Apply a partial update to a billing profile.

        Raises:
            NotFoundError: If the profile doesn't exist
        """
        with classified("updating the billing profile"), self._store.unit_of_work() as session:
            view = BillingProfileView.from_model(self.update_billing_in(session, billing_id, update))

        logger.info("Billing profile %s updated", billing_id)
        return view

    def delete_billing_profile(self, billing_id: int) -> None:
        """Delete a billing profile no inscription or invoice references.

        Raises:
            NotFoundError: If the profile doesn't exist
            ConflictError: If inscriptions or invoices still reference it
        """
        with classified("deleting the billing profile"), self._store.unit_of_work() as session:
            profile = ReferenceValidator(session).require(EntityKind.BILLING_PROFILE, billing_id)
            guard = ConflictGuard(session)
            guard.check_no_dependents(
                EntityKind.BILLING_PROFILE, billing_id, Inscription, "billing_id", "inscriptions"
            )
            guard.check_no_dependents(
                EntityKind.BILLING_PROFILE, billing_id, Invoice, "billing_id", "invoices"
            )
            session.delete(profile)

        logger.info("Billing profile %s deleted", billing_id)

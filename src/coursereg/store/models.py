"""SQLAlchemy models for the entity store."""

from __future__ import annotations

from datetime import date, datetime  # noqa: TC003 - used at runtime for SQLAlchemy
from decimal import Decimal  # noqa: TC003 - used at runtime for SQLAlchemy
from enum import StrEnum
from typing import Any

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import (
    DeclarativeBase,
    Mapped,
    mapped_column,
    relationship,
)

MONEY = Numeric(10, 2, asdecimal=True)


class Modality(StrEnum):
    """Course delivery modality."""

    IN_PERSON = "in_person"
    ONLINE = "online"
    HYBRID = "hybrid"


class InscriptionStatus(StrEnum):
    """Derived inscription status."""

    PENDING = "PENDING"
    ENROLLED = "ENROLLED"


class Base(DeclarativeBase):
    """Base class for all models."""

    pass


class Course(Base):
    """Course offered for enrollment."""

    __tablename__ = "courses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    short_code: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    modality: Mapped[str] = mapped_column(String(20), nullable=False)
    price: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    payment_link: Mapped[str | None] = mapped_column(String(500), nullable=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    inscriptions: Mapped[list[Inscription]] = relationship("Inscription", back_populates="course")
    integration: Mapped[CourseIntegration | None] = relationship(
        "CourseIntegration", back_populates="course", uselist=False, cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Course(id={self.id!r}, short_code={self.short_code!r})>"


class CourseIntegration(Base):
    """Mapping of a course to its course in an external learning platform."""

    __tablename__ = "course_integrations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    external_course_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    external_short_name: Mapped[str] = mapped_column(String(100), nullable=False)
    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    course: Mapped[Course] = relationship("Course", back_populates="integration")

    def __repr__(self) -> str:
        return (
            f"<CourseIntegration(course_id={self.course_id!r}, "
            f"external_course_id={self.external_course_id!r})>"
        )


class Person(Base):
    """Participant personal data."""

    __tablename__ = "persons"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    identification: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    first_names: Mapped[str] = mapped_column(String(255), nullable=False)
    last_names: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    region: Mapped[str] = mapped_column(String(100), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    profession: Mapped[str | None] = mapped_column(String(255), nullable=True)
    institution: Mapped[str | None] = mapped_column(String(255), nullable=True)

    inscriptions: Mapped[list[Inscription]] = relationship("Inscription", back_populates="person")

    @property
    def full_name(self) -> str:
        return f"{self.first_names} {self.last_names}"

    def __repr__(self) -> str:
        return f"<Person(id={self.id!r})>"


class BillingProfile(Base):
    """Invoicing data supplied at registration."""

    __tablename__ = "billing_profiles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    legal_name: Mapped[str] = mapped_column(String(255), nullable=False)
    tax_id: Mapped[str] = mapped_column(String(20), nullable=False)
    phone: Mapped[str] = mapped_column(String(30), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)

    def __repr__(self) -> str:
        return f"<BillingProfile(id={self.id!r}, tax_id={self.tax_id!r})>"


class Voucher(Base):
    """Metadata of an uploaded payment voucher. The file itself lives elsewhere."""

    __tablename__ = "vouchers"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    uploaded_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )
    file_ref: Mapped[str] = mapped_column(String(500), nullable=False)
    mime_type: Mapped[str] = mapped_column(String(100), nullable=False)
    filename: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Voucher(id={self.id!r}, filename={self.filename!r})>"


class Discount(Base):
    """Discount that may be attached to an inscription."""

    __tablename__ = "discounts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    kind: Mapped[str] = mapped_column(String(100), nullable=False)
    student_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    amount: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2, asdecimal=True), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")

    def __repr__(self) -> str:
        return f"<Discount(id={self.id!r}, kind={self.kind!r})>"


class Inscription(Base):
    """Enrollment attempt tying a person to a course."""

    __tablename__ = "inscriptions"
    __table_args__ = (UniqueConstraint("course_id", "person_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    course_id: Mapped[int] = mapped_column(Integer, ForeignKey("courses.id"), nullable=False)
    person_id: Mapped[int] = mapped_column(Integer, ForeignKey("persons.id"), nullable=False)
    billing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("billing_profiles.id"), nullable=False
    )
    voucher_id: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    discount_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("discounts.id"), nullable=True
    )
    enrolled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now()
    )

    course: Mapped[Course] = relationship("Course", back_populates="inscriptions")
    person: Mapped[Person] = relationship("Person", back_populates="inscriptions")
    billing_profile: Mapped[BillingProfile] = relationship("BillingProfile")
    # No database-level foreign key: exclusivity is checked by the conflict guard.
    voucher: Mapped[Voucher] = relationship(
        "Voucher",
        primaryjoin="foreign(Inscription.voucher_id) == Voucher.id",
        viewonly=True,
    )
    discount: Mapped[Discount | None] = relationship("Discount")
    invoices: Mapped[list[Invoice]] = relationship(
        "Invoice", back_populates="inscription", cascade="all, delete-orphan"
    )

    def __init__(
        self,
        course_id: int,
        person_id: int,
        billing_id: int,
        voucher_id: int,
        discount_id: int | None = None,
        enrolled: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.course_id = course_id
        self.person_id = person_id
        self.billing_id = billing_id
        self.voucher_id = voucher_id
        self.discount_id = discount_id
        self.enrolled = enrolled

    @property
    def status(self) -> InscriptionStatus:
        """Get status derived from the enrolled flag."""
        return InscriptionStatus.ENROLLED if self.enrolled else InscriptionStatus.PENDING

    def __repr__(self) -> str:
        return f"<Inscription(id={self.id!r}, status={self.status.value!r})>"


class Invoice(Base):
    """Staff-issued invoice against one inscription."""

    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    inscription_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("inscriptions.id"), nullable=False, unique=True
    )
    billing_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("billing_profiles.id"), nullable=False
    )
    amount_paid: Mapped[Decimal] = mapped_column(MONEY, nullable=False)
    payment_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    income_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    invoice_number: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)

    inscription: Mapped[Inscription] = relationship("Inscription", back_populates="invoices")
    billing_profile: Mapped[BillingProfile] = relationship("BillingProfile")

    def __init__(
        self,
        inscription_id: int,
        billing_id: int,
        amount_paid: Decimal,
        income_number: str,
        invoice_number: str,
        payment_verified: bool = False,
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.inscription_id = inscription_id
        self.billing_id = billing_id
        self.amount_paid = amount_paid
        self.income_number = income_number
        self.invoice_number = invoice_number
        self.payment_verified = payment_verified

    def __repr__(self) -> str:
        return (
            f"<Invoice(id={self.id!r}, invoice_number={self.invoice_number!r}, "
            f"payment_verified={self.payment_verified!r})>"
        )

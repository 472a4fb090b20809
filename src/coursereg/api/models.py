"""Pydantic models for REST API."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from coursereg.enrollment import InscriptionUpdate
from coursereg.invoicing import InvoiceState
from coursereg.registry import (
    BillingProfileUpdate,
    CourseUpdate,
    DiscountUpdate,
    IntegrationUpdate,
    PersonUpdate,
)
from coursereg.reports import PaymentStatus
from coursereg.store import InscriptionStatus, Page

T = TypeVar("T")
U = TypeVar("U")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class PageResponse(BaseModel, Generic[T]):
    """One page of a listing."""

    items: list[T]
    total: int
    page: int
    page_size: int
    total_pages: int


def page_to_response(page: Page[Any], item_model: type[BaseModel]) -> dict[str, Any]:
    """Convert a store Page into PageResponse fields."""
    return {
        "items": [item_model.model_validate(item) for item in page.items],
        "total": page.total,
        "page": page.page,
        "page_size": page.page_size,
        "total_pages": page.total_pages,
    }


def to_update(request: BaseModel, update_cls: type[U]) -> U:
    """Build a partial-update dataclass from the fields a request actually sent.

    Fields absent from the JSON body stay UNSET; an explicit null is passed on.
    """
    return update_cls(**{name: getattr(request, name) for name in request.model_fields_set})


# Course models


class CourseCreate(BaseModel):
    """Request model for creating a course."""

    name: str = Field(..., min_length=1, max_length=255)
    short_code: str = Field(..., min_length=1, max_length=50)
    description: str = Field(default="", max_length=5000)
    modality: str
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    payment_link: str | None = Field(default=None, max_length=500)
    start_date: date
    end_date: date


class CourseUpdateRequest(BaseModel):
    """Request model for updating a course (partial update)."""

    name: str | None = Field(default=None, min_length=1, max_length=255)
    short_code: str | None = Field(default=None, min_length=1, max_length=50)
    description: str | None = Field(default=None, max_length=5000)
    modality: str | None = None
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    payment_link: str | None = Field(default=None, max_length=500)
    start_date: date | None = None
    end_date: date | None = None

    def to_update(self) -> CourseUpdate:
        return to_update(self, CourseUpdate)


class CourseResponse(BaseModel):
    """Response model for a course."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    short_code: str
    description: str
    modality: str
    price: Decimal
    payment_link: str | None
    start_date: date
    end_date: date


class IntegrationCreate(BaseModel):
    """Request model for mapping a course to an external platform course."""

    external_course_id: int = Field(..., ge=1)
    external_short_name: str = Field(..., min_length=1, max_length=100)
    active: bool = True


class IntegrationUpdateRequest(BaseModel):
    """Request model for updating a course mapping (partial update)."""

    external_course_id: int | None = Field(default=None, ge=1)
    external_short_name: str | None = Field(default=None, min_length=1, max_length=100)
    active: bool | None = None

    def to_update(self) -> IntegrationUpdate:
        return to_update(self, IntegrationUpdate)


class IntegrationResponse(BaseModel):
    """Response model for a course mapping."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    external_course_id: int
    external_short_name: str
    active: bool


# Person models


class PersonCreate(BaseModel):
    """Request model for registering a person."""

    identification: str = Field(..., min_length=6, max_length=20)
    first_names: str = Field(..., min_length=1, max_length=255)
    last_names: str = Field(..., min_length=1, max_length=255)
    phone: str = Field(..., min_length=1, max_length=30)
    email: str = Field(..., min_length=3, max_length=255)
    country: str = Field(..., min_length=1, max_length=100)
    region: str = Field(..., min_length=1, max_length=100)
    city: str = Field(..., min_length=1, max_length=100)
    profession: str | None = Field(default=None, max_length=255)
    institution: str | None = Field(default=None, max_length=255)


class PersonUpdateRequest(BaseModel):
    """Request model for updating a person (partial update)."""

    identification: str | None = Field(default=None, min_length=6, max_length=20)
    first_names: str | None = Field(default=None, min_length=1, max_length=255)
    last_names: str | None = Field(default=None, min_length=1, max_length=255)
    phone: str | None = Field(default=None, min_length=1, max_length=30)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    country: str | None = Field(default=None, min_length=1, max_length=100)
    region: str | None = Field(default=None, min_length=1, max_length=100)
    city: str | None = Field(default=None, min_length=1, max_length=100)
    profession: str | None = Field(default=None, max_length=255)
    institution: str | None = Field(default=None, max_length=255)

    def to_update(self) -> PersonUpdate:
        return to_update(self, PersonUpdate)


class PersonResponse(BaseModel):
    """Response model for a person."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    identification: str
    first_names: str
    last_names: str
    full_name: str
    phone: str
    email: str
    country: str
    region: str
    city: str
    profession: str | None
    institution: str | None


# Billing profile models


class BillingProfileCreate(BaseModel):
    """Request model for creating a billing profile."""

    legal_name: str = Field(..., min_length=1, max_length=255)
    tax_id: str = Field(..., min_length=1, max_length=20)
    phone: str = Field(..., min_length=1, max_length=30)
    email: str = Field(..., min_length=3, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)


class BillingProfileUpdateRequest(BaseModel):
    """Request model for updating a billing profile (partial update)."""

    legal_name: str | None = Field(default=None, min_length=1, max_length=255)
    tax_id: str | None = Field(default=None, min_length=1, max_length=20)
    phone: str | None = Field(default=None, min_length=1, max_length=30)
    email: str | None = Field(default=None, min_length=3, max_length=255)
    address: str | None = Field(default=None, min_length=1, max_length=500)

    def to_update(self) -> BillingProfileUpdate:
        return to_update(self, BillingProfileUpdate)


class BillingProfileResponse(BaseModel):
    """Response model for a billing profile."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    legal_name: str
    tax_id: str
    phone: str
    email: str
    address: str


# Voucher models


class VoucherCreate(BaseModel):
    """Request model for recording an uploaded voucher."""

    file_ref: str = Field(..., min_length=1, max_length=500)
    mime_type: str = Field(..., min_length=1, max_length=100)
    filename: str = Field(..., min_length=1, max_length=255)


class VoucherResponse(BaseModel):
    """Response model for a voucher."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    uploaded_at: datetime
    file_ref: str
    mime_type: str
    filename: str


# Discount models


class DiscountCreate(BaseModel):
    """Request model for creating a discount."""

    kind: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    percentage: Decimal = Field(default=Decimal("0"), ge=0, le=100, max_digits=5, decimal_places=2)
    student_count: int = Field(default=1, ge=1)
    description: str = Field(default="", max_length=5000)


class DiscountUpdateRequest(BaseModel):
    """Request model for updating a discount (partial update)."""

    kind: str | None = Field(default=None, min_length=1, max_length=100)
    amount: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    percentage: Decimal | None = Field(default=None, ge=0, le=100, max_digits=5, decimal_places=2)
    student_count: int | None = Field(default=None, ge=1)
    description: str | None = Field(default=None, max_length=5000)

    def to_update(self) -> DiscountUpdate:
        return to_update(self, DiscountUpdate)


class DiscountResponse(BaseModel):
    """Response model for a discount."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    kind: str
    student_count: int
    amount: Decimal
    percentage: Decimal
    description: str


# Inscription models


class InscriptionCreate(BaseModel):
    """Request model for creating an inscription."""

    course_id: int = Field(..., ge=1)
    person_id: int = Field(..., ge=1)
    billing_id: int = Field(..., ge=1)
    voucher_id: int = Field(..., ge=1)
    discount_id: int | None = Field(default=None, ge=1)


class InscriptionUpdateRequest(BaseModel):
    """Request model for updating an inscription (partial update)."""

    course_id: int | None = Field(default=None, ge=1)
    billing_id: int | None = Field(default=None, ge=1)
    discount_id: int | None = Field(default=None, ge=1)
    enrolled: bool | None = None
    person: PersonUpdateRequest | None = None
    billing: BillingProfileUpdateRequest | None = None

    def to_update(self) -> InscriptionUpdate:
        fields: dict[str, Any] = {}
        for name in self.model_fields_set:
            value = getattr(self, name)
            if value is None and name in ("person", "billing"):
                continue
            if isinstance(value, PersonUpdateRequest | BillingProfileUpdateRequest):
                value = value.to_update()
            fields[name] = value
        return InscriptionUpdate(**fields)


class InvoiceSummaryResponse(BaseModel):
    """Invoice fields embedded in an inscription."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    invoice_number: str
    income_number: str
    amount_paid: Decimal
    payment_verified: bool


class InscriptionResponse(BaseModel):
    """Response model for an inscription with its references."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    course_id: int
    person_id: int
    billing_id: int
    voucher_id: int
    discount_id: int | None
    enrolled: bool
    status: InscriptionStatus
    created_at: datetime
    course: CourseResponse
    person: PersonResponse
    billing_profile: BillingProfileResponse
    voucher: VoucherResponse | None
    discount: DiscountResponse | None
    invoices: list[InvoiceSummaryResponse]


# Invoice models


class InvoiceCreate(BaseModel):
    """Request model for creating an invoice."""

    inscription_id: int = Field(..., ge=1)
    billing_id: int = Field(..., ge=1)
    amount_paid: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    income_number: str = Field(..., min_length=1, max_length=100)
    invoice_number: str = Field(..., min_length=1, max_length=100)


class InvoiceRelationsResponse(BaseModel):
    """Relational detail attached to an invoice on request."""

    model_config = ConfigDict(from_attributes=True)

    inscription_enrolled: bool
    course: CourseResponse
    person: PersonResponse
    billing_profile: BillingProfileResponse


class InvoiceResponse(BaseModel):
    """Response model for an invoice."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    inscription_id: int
    billing_id: int
    amount_paid: Decimal
    payment_verified: bool
    state: InvoiceState
    income_number: str
    invoice_number: str
    relations: InvoiceRelationsResponse | None = None


# Report models


class ReportRowResponse(BaseModel):
    """Response model for one report row."""

    model_config = ConfigDict(from_attributes=True)

    inscription_id: int
    created_at: datetime
    enrolled: bool
    payment_verified: bool
    payment_status: PaymentStatus
    amount_paid: Decimal
    course: CourseResponse
    person: PersonResponse
    billing_profile: BillingProfileResponse
    voucher: VoucherResponse | None
    discount: DiscountResponse | None
    invoices: list[InvoiceSummaryResponse]


class ReportSummaryResponse(BaseModel):
    """Response model for report statistics."""

    model_config = ConfigDict(from_attributes=True)

    total: int
    enrolled: int
    not_enrolled: int
    verified_invoices: int
    pending_payments: int
    verified_income: Decimal
    count_by_course: dict[int, int]
    distinct_courses: int


class ReportResponse(BaseModel):
    """Response model for a full report."""

    kind: str
    filters: dict[str, Any]
    generated_at: datetime
    total_records: int
    summary: ReportSummaryResponse
    rows: list[ReportRowResponse]


def report_to_response(report: Any) -> ReportResponse:
    """Convert a Report into ReportResponse."""
    return ReportResponse(
        kind=report.kind.value,
        filters=report.filters.as_dict(),
        generated_at=report.generated_at,
        total_records=report.total_records,
        summary=ReportSummaryResponse.model_validate(report.summary),
        rows=[ReportRowResponse.model_validate(row) for row in report.rows],
    )

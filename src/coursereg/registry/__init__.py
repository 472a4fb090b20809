"""Registry - entity-level services for courses, participants, vouchers and discounts."""

from coursereg.registry.catalog import COURSE_ORDER_FIELDS, CourseCatalog
from coursereg.registry.discounts import DiscountRegistry
from coursereg.registry.models import (
    UNSET,
    Unset,
    BillingProfileUpdate,
    BillingProfileView,
    CourseIntegrationView,
    CourseUpdate,
    CourseView,
    DiscountUpdate,
    DiscountView,
    IntegrationUpdate,
    PersonUpdate,
    PersonView,
    VoucherView,
    apply_changes,
    check_page,
    ordering,
    reject_nulls,
    supplied,
    to_money,
)
from coursereg.registry.participants import ParticipantRegistry
from coursereg.registry.vouchers import VoucherRegistry

__all__ = [
    "COURSE_ORDER_FIELDS",
    "UNSET",
    "Unset",
    "BillingProfileUpdate",
    "BillingProfileView",
    "CourseCatalog",
    "CourseIntegrationView",
    "CourseUpdate",
    "CourseView",
    "DiscountRegistry",
    "DiscountUpdate",
    "DiscountView",
    "IntegrationUpdate",
    "ParticipantRegistry",
    "PersonUpdate",
    "PersonView",
    "VoucherRegistry",
    "VoucherView",
    "apply_changes",
    "check_page",
    "ordering",
    "reject_nulls",
    "supplied",
    "to_money",
]

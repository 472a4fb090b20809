"""Entity Store - Persistent records for courses, participants and invoices."""

from coursereg.store.database import Database
from coursereg.store.exceptions import (
    ForeignKeyViolation,
    StoreError,
    UniqueViolation,
)
from coursereg.store.models import (
    BillingProfile,
    Course,
    CourseIntegration,
    Discount,
    Inscription,
    InscriptionStatus,
    Invoice,
    Modality,
    Person,
    Voucher,
)
from coursereg.store.store import EntityStore, Page, page_offset

__all__ = [
    "BillingProfile",
    "Course",
    "CourseIntegration",
    "Database",
    "Discount",
    "EntityStore",
    "ForeignKeyViolation",
    "Inscription",
    "InscriptionStatus",
    "Invoice",
    "Modality",
    "Page",
    "Person",
    "StoreError",
    "UniqueViolation",
    "Voucher",
    "page_offset",
]

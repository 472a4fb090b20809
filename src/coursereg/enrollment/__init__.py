"""Enrollment - inscription lifecycle from registration to enrollment."""

from coursereg.enrollment.manager import INSCRIPTION_ORDER_FIELDS, InscriptionManager
from coursereg.enrollment.models import (
    Actor,
    InscriptionUpdate,
    InscriptionView,
    InvoiceSummary,
    Role,
)

__all__ = [
    "INSCRIPTION_ORDER_FIELDS",
    "Actor",
    "InscriptionManager",
    "InscriptionUpdate",
    "InscriptionView",
    "InvoiceSummary",
    "Role",
]

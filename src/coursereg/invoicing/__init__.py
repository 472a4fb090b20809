"""Invoicing - invoices and payment verification."""

from coursereg.invoicing.manager import INVOICE_ORDER_FIELDS, InvoiceManager
from coursereg.invoicing.models import InvoiceRelations, InvoiceState, InvoiceView

__all__ = [
    "INVOICE_ORDER_FIELDS",
    "InvoiceManager",
    "InvoiceRelations",
    "InvoiceState",
    "InvoiceView",
]

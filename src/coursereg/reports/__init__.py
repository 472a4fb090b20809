"""Reports - filtered inscription sets with exact summary statistics."""

from coursereg.reports.aggregator import ReportAggregator, summarize
from coursereg.reports.models import (
    PaymentStatus,
    Report,
    ReportFilter,
    ReportKind,
    ReportRow,
    ReportSummary,
)

__all__ = [
    "PaymentStatus",
    "Report",
    "ReportAggregator",
    "ReportFilter",
    "ReportKind",
    "ReportRow",
    "ReportSummary",
    "summarize",
]

"""Report endpoints."""

from datetime import date

from fastapi import APIRouter, Query

from coursereg.api.dependencies import ServicesDep
from coursereg.api.models import APIResponse, ReportResponse, report_to_response
from coursereg.reports import ReportFilter, ReportKind

router = APIRouter(prefix="/reports", tags=["reports"])


@router.get("", response_model=APIResponse[ReportResponse])
def get_report(
    services: ServicesDep,
    kind: ReportKind = Query(default=ReportKind.INSCRIPTIONS, description="Report preset"),
    course_id: int | None = Query(default=None, description="Filter by course ID"),
    start_date: date | None = Query(default=None, description="First inscription day"),
    end_date: date | None = Query(default=None, description="Last inscription day, inclusive"),
    verified: bool | None = Query(default=None, description="Filter by verified payment"),
    enrolled: bool | None = Query(default=None, description="Filter by enrolled flag"),
) -> APIResponse[ReportResponse]:
    """Build a report with summary statistics."""
    filters = ReportFilter(
        course_id=course_id,
        start_date=start_date,
        end_date=end_date,
        verified=verified,
        enrolled=enrolled,
    )
    report = services.reports.build(kind, filters)
    return APIResponse(data=report_to_response(report))

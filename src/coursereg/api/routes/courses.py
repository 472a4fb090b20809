"""Course and course integration endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import PaginationDep, ServicesDep
from coursereg.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdateRequest,
    IntegrationCreate,
    IntegrationResponse,
    IntegrationUpdateRequest,
    PageResponse,
    page_to_response,
)

router = APIRouter(prefix="/courses", tags=["courses"])


@router.get("", response_model=APIResponse[PageResponse[CourseResponse]])
def list_courses(
    services: ServicesDep,
    pagination: PaginationDep,
    order_by: str = Query(default="id", description="Field to order by"),
    order: str = Query(default="asc", description="asc or desc"),
) -> APIResponse[PageResponse[CourseResponse]]:
    """List courses, one page at a time."""
    page = services.catalog.list_courses(
        page=pagination.page,
        page_size=pagination.page_size,
        order_by=order_by,
        order=order,
    )
    return APIResponse(data=PageResponse[CourseResponse](**page_to_response(page, CourseResponse)))


@router.get("/available", response_model=APIResponse[list[CourseResponse]])
def list_available_courses(services: ServicesDep) -> APIResponse[list[CourseResponse]]:
    """List courses that have not started yet."""
    courses = services.catalog.list_available_courses()
    return APIResponse(data=[CourseResponse.model_validate(c) for c in courses])


@router.post(
    "",
    response_model=APIResponse[CourseResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_course(course: CourseCreate, services: ServicesDep) -> APIResponse[CourseResponse]:
    """Create a new course."""
    created = services.catalog.create_course(
        name=course.name,
        short_code=course.short_code,
        modality=course.modality,
        price=course.price,
        start_date=course.start_date,
        end_date=course.end_date,
        description=course.description,
        payment_link=course.payment_link,
    )
    return APIResponse(data=CourseResponse.model_validate(created))


@router.get("/{course_id}", response_model=APIResponse[CourseResponse])
def get_course(course_id: int, services: ServicesDep) -> APIResponse[CourseResponse]:
    """Get a course by ID."""
    return APIResponse(data=CourseResponse.model_validate(services.catalog.get_course(course_id)))


@router.patch("/{course_id}", response_model=APIResponse[CourseResponse])
def update_course(
    course_id: int, course: CourseUpdateRequest, services: ServicesDep
) -> APIResponse[CourseResponse]:
    """Update a course (partial update)."""
    updated = services.catalog.update_course(course_id, course.to_update())
    return APIResponse(data=CourseResponse.model_validate(updated))


@router.delete("/{course_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_course(course_id: int, services: ServicesDep) -> None:
    """Delete a course without inscriptions."""
    services.catalog.delete_course(course_id)


@router.post(
    "/{course_id}/integration",
    response_model=APIResponse[IntegrationResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_integration(
    course_id: int, integration: IntegrationCreate, services: ServicesDep
) -> APIResponse[IntegrationResponse]:
    """Map a course to an external platform course."""
    created = services.catalog.create_integration(
        course_id,
        external_course_id=integration.external_course_id,
        external_short_name=integration.external_short_name,
        active=integration.active,
    )
    return APIResponse(data=IntegrationResponse.model_validate(created))


@router.get("/{course_id}/integration", response_model=APIResponse[IntegrationResponse])
def get_integration(course_id: int, services: ServicesDep) -> APIResponse[IntegrationResponse]:
    """Get the external mapping of a course."""
    integration = services.catalog.get_integration(course_id)
    return APIResponse(data=IntegrationResponse.model_validate(integration))


@router.patch("/{course_id}/integration", response_model=APIResponse[IntegrationResponse])
def update_integration(
    course_id: int, integration: IntegrationUpdateRequest, services: ServicesDep
) -> APIResponse[IntegrationResponse]:
    """Update the external mapping of a course (partial update)."""
    updated = services.catalog.update_integration(course_id, integration.to_update())
    return APIResponse(data=IntegrationResponse.model_validate(updated))

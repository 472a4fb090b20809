"""Person endpoints."""

from fastapi import APIRouter, status

from coursereg.api.dependencies import PaginationDep, ServicesDep
from coursereg.api.models import (
    APIResponse,
    PageResponse,
    PersonCreate,
    PersonResponse,
    PersonUpdateRequest,
    page_to_response,
)

router = APIRouter(prefix="/persons", tags=["persons"])


@router.get("", response_model=APIResponse[PageResponse[PersonResponse]])
def list_persons(
    services: ServicesDep, pagination: PaginationDep
) -> APIResponse[PageResponse[PersonResponse]]:
    """List persons ordered by name."""
    page = services.participants.list_persons(pagination.page, pagination.page_size)
    return APIResponse(data=PageResponse[PersonResponse](**page_to_response(page, PersonResponse)))


@router.post(
    "",
    response_model=APIResponse[PersonResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_person(person: PersonCreate, services: ServicesDep) -> APIResponse[PersonResponse]:
    """Register a person."""
    created = services.participants.create_person(**person.model_dump())
    return APIResponse(data=PersonResponse.model_validate(created))


@router.get("/by-identification/{identification}", response_model=APIResponse[PersonResponse])
def get_person_by_identification(
    identification: str, services: ServicesDep
) -> APIResponse[PersonResponse]:
    """Get a person by identification number."""
    person = services.participants.get_person_by_identification(identification)
    return APIResponse(data=PersonResponse.model_validate(person))


@router.get("/{person_id}", response_model=APIResponse[PersonResponse])
def get_person(person_id: int, services: ServicesDep) -> APIResponse[PersonResponse]:
    """Get a person by ID."""
    return APIResponse(data=PersonResponse.model_validate(services.participants.get_person(person_id)))


@router.patch("/{person_id}", response_model=APIResponse[PersonResponse])
def update_person(
    person_id: int, person: PersonUpdateRequest, services: ServicesDep
) -> APIResponse[PersonResponse]:
    """Update a person (partial update)."""
    updated = services.participants.update_person(person_id, person.to_update())
    return APIResponse(data=PersonResponse.model_validate(updated))


@router.delete("/{person_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_person(person_id: int, services: ServicesDep) -> None:
    """Delete a person without inscriptions."""
    services.participants.delete_person(person_id)

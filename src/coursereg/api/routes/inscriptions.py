"""Inscription lifecycle endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import ActorDep, PaginationDep, ServicesDep
from coursereg.api.models import (
    APIResponse,
    InscriptionCreate,
    InscriptionResponse,
    InscriptionUpdateRequest,
    InvoiceResponse,
    PageResponse,
    page_to_response,
)

router = APIRouter(prefix="/inscriptions", tags=["inscriptions"])


@router.get("", response_model=APIResponse[PageResponse[InscriptionResponse]])
def list_inscriptions(
    services: ServicesDep,
    pagination: PaginationDep,
    order_by: str = Query(default="created_at", description="Field to order by"),
    order: str = Query(default="desc", description="asc or desc"),
    course_id: int | None = Query(default=None, description="Filter by course ID"),
    enrolled: bool | None = Query(default=None, description="Filter by enrolled flag"),
) -> APIResponse[PageResponse[InscriptionResponse]]:
    """List inscriptions with optional filters and pagination."""
    page = services.inscriptions.list_inscriptions(
        page=pagination.page,
        page_size=pagination.page_size,
        order_by=order_by,
        order=order,
        course_id=course_id,
        enrolled=enrolled,
    )
    return APIResponse(
        data=PageResponse[InscriptionResponse](**page_to_response(page, InscriptionResponse))
    )


@router.post(
    "",
    response_model=APIResponse[InscriptionResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_inscription(
    inscription: InscriptionCreate, services: ServicesDep
) -> APIResponse[InscriptionResponse]:
    """Register a person for a course."""
    created = services.inscriptions.create(
        course_id=inscription.course_id,
        person_id=inscription.person_id,
        billing_id=inscription.billing_id,
        voucher_id=inscription.voucher_id,
        discount_id=inscription.discount_id,
    )
    return APIResponse(data=InscriptionResponse.model_validate(created))


@router.get("/{inscription_id}", response_model=APIResponse[InscriptionResponse])
def get_inscription(inscription_id: int, services: ServicesDep) -> APIResponse[InscriptionResponse]:
    """Get an inscription by ID."""
    inscription = services.inscriptions.get(inscription_id)
    return APIResponse(data=InscriptionResponse.model_validate(inscription))


@router.patch("/{inscription_id}", response_model=APIResponse[InscriptionResponse])
def update_inscription(
    inscription_id: int,
    inscription: InscriptionUpdateRequest,
    services: ServicesDep,
    actor: ActorDep,
) -> APIResponse[InscriptionResponse]:
    """Update an inscription (partial update).

    Changing the course or the enrolled flag needs ``X-Role: admin``.
    """
    updated = services.inscriptions.update(inscription_id, inscription.to_update(), actor)
    return APIResponse(data=InscriptionResponse.model_validate(updated))


@router.delete("/{inscription_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_inscription(inscription_id: int, services: ServicesDep) -> None:
    """Delete a pending inscription."""
    services.inscriptions.delete(inscription_id)


@router.get("/{inscription_id}/invoices", response_model=APIResponse[list[InvoiceResponse]])
def list_inscription_invoices(
    inscription_id: int, services: ServicesDep
) -> APIResponse[list[InvoiceResponse]]:
    """List the invoices issued for an inscription."""
    invoices = services.invoices.get_by_inscription(inscription_id)
    return APIResponse(data=[InvoiceResponse.model_validate(i) for i in invoices])

"""Discount endpoints."""

from fastapi import APIRouter, status

from coursereg.api.dependencies import ServicesDep
from coursereg.api.models import (
    APIResponse,
    DiscountCreate,
    DiscountResponse,
    DiscountUpdateRequest,
)

router = APIRouter(prefix="/discounts", tags=["discounts"])


@router.get("", response_model=APIResponse[list[DiscountResponse]])
def list_discounts(services: ServicesDep) -> APIResponse[list[DiscountResponse]]:
    """List all discounts."""
    discounts = services.discounts.list_discounts()
    return APIResponse(data=[DiscountResponse.model_validate(d) for d in discounts])


@router.post(
    "",
    response_model=APIResponse[DiscountResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_discount(discount: DiscountCreate, services: ServicesDep) -> APIResponse[DiscountResponse]:
    """Create a discount."""
    created = services.discounts.create_discount(**discount.model_dump())
    return APIResponse(data=DiscountResponse.model_validate(created))


@router.get("/{discount_id}", response_model=APIResponse[DiscountResponse])
def get_discount(discount_id: int, services: ServicesDep) -> APIResponse[DiscountResponse]:
    """Get a discount by ID."""
    return APIResponse(
        data=DiscountResponse.model_validate(services.discounts.get_discount(discount_id))
    )


@router.patch("/{discount_id}", response_model=APIResponse[DiscountResponse])
def update_discount(
    discount_id: int, discount: DiscountUpdateRequest, services: ServicesDep
) -> APIResponse[DiscountResponse]:
    """Update a discount (partial update)."""
    updated = services.discounts.update_discount(discount_id, discount.to_update())
    return APIResponse(data=DiscountResponse.model_validate(updated))


@router.delete("/{discount_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_discount(discount_id: int, services: ServicesDep) -> None:
    """Delete a discount no inscription carries."""
    services.discounts.delete_discount(discount_id)

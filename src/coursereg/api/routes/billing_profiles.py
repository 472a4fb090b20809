"""Billing profile endpoints."""

from fastapi import APIRouter, status

from coursereg.api.dependencies import PaginationDep, ServicesDep
from coursereg.api.models import (
    APIResponse,
    BillingProfileCreate,
    BillingProfileResponse,
    BillingProfileUpdateRequest,
    PageResponse,
    page_to_response,
)

router = APIRouter(prefix="/billing-profiles", tags=["billing-profiles"])


@router.get("", response_model=APIResponse[PageResponse[BillingProfileResponse]])
def list_billing_profiles(
    services: ServicesDep, pagination: PaginationDep
) -> APIResponse[PageResponse[BillingProfileResponse]]:
    """List billing profiles."""
    page = services.participants.list_billing_profiles(pagination.page, pagination.page_size)
    return APIResponse(
        data=PageResponse[BillingProfileResponse](**page_to_response(page, BillingProfileResponse))
    )


@router.post(
    "",
    response_model=APIResponse[BillingProfileResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_billing_profile(
    profile: BillingProfileCreate, services: ServicesDep
) -> APIResponse[BillingProfileResponse]:
    """Create a billing profile."""
    created = services.participants.create_billing_profile(**profile.model_dump())
    return APIResponse(data=BillingProfileResponse.model_validate(created))


@router.get("/{billing_id}", response_model=APIResponse[BillingProfileResponse])
def get_billing_profile(billing_id: int, services: ServicesDep) -> APIResponse[BillingProfileResponse]:
    """Get a billing profile by ID."""
    profile = services.participants.get_billing_profile(billing_id)
    return APIResponse(data=BillingProfileResponse.model_validate(profile))


@router.patch("/{billing_id}", response_model=APIResponse[BillingProfileResponse])
def update_billing_profile(
    billing_id: int, profile: BillingProfileUpdateRequest, services: ServicesDep
) -> APIResponse[BillingProfileResponse]:
    """Update a billing profile (partial update)."""
    updated = services.participants.update_billing_profile(billing_id, profile.to_update())
    return APIResponse(data=BillingProfileResponse.model_validate(updated))


@router.delete("/{billing_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_billing_profile(billing_id: int, services: ServicesDep) -> None:
    """Delete an unreferenced billing profile."""
    services.participants.delete_billing_profile(billing_id)

"""Voucher endpoints. Only metadata; the file itself is stored elsewhere."""

from fastapi import APIRouter, status

from coursereg.api.dependencies import ServicesDep
from coursereg.api.models import APIResponse, VoucherCreate, VoucherResponse

router = APIRouter(prefix="/vouchers", tags=["vouchers"])


@router.post(
    "",
    response_model=APIResponse[VoucherResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_voucher(voucher: VoucherCreate, services: ServicesDep) -> APIResponse[VoucherResponse]:
    """Record an uploaded voucher."""
    created = services.vouchers.create_voucher(
        file_ref=voucher.file_ref,
        mime_type=voucher.mime_type,
        filename=voucher.filename,
    )
    return APIResponse(data=VoucherResponse.model_validate(created))


@router.get("/{voucher_id}", response_model=APIResponse[VoucherResponse])
def get_voucher(voucher_id: int, services: ServicesDep) -> APIResponse[VoucherResponse]:
    """Get a voucher by ID."""
    return APIResponse(data=VoucherResponse.model_validate(services.vouchers.get_voucher(voucher_id)))


@router.delete("/{voucher_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_voucher(voucher_id: int, services: ServicesDep) -> None:
    """Delete a voucher no inscription uses."""
    services.vouchers.delete_voucher(voucher_id)

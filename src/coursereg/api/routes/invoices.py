"""Invoice and payment verification endpoints."""

from fastapi import APIRouter, Query, status

from coursereg.api.dependencies import PaginationDep, ServicesDep
from coursereg.api.models import (
    APIResponse,
    InvoiceCreate,
    InvoiceResponse,
    PageResponse,
    page_to_response,
)

router = APIRouter(prefix="/invoices", tags=["invoices"])


@router.get("", response_model=APIResponse[PageResponse[InvoiceResponse]])
def list_invoices(
    services: ServicesDep,
    pagination: PaginationDep,
    order_by: str = Query(default="id", description="Field to order by"),
    order: str = Query(default="asc", description="asc or desc"),
    include_relations: bool = Query(default=False, description="Attach course, person, billing"),
) -> APIResponse[PageResponse[InvoiceResponse]]:
    """List invoices, one page at a time."""
    page = services.invoices.list_invoices(
        page=pagination.page,
        page_size=pagination.page_size,
        order_by=order_by,
        order=order,
        include_relations=include_relations,
    )
    return APIResponse(data=PageResponse[InvoiceResponse](**page_to_response(page, InvoiceResponse)))


@router.post(
    "",
    response_model=APIResponse[InvoiceResponse],
    status_code=status.HTTP_201_CREATED,
)
def create_invoice(invoice: InvoiceCreate, services: ServicesDep) -> APIResponse[InvoiceResponse]:
    """Issue an invoice for an inscription."""
    created = services.invoices.create(
        inscription_id=invoice.inscription_id,
        billing_id=invoice.billing_id,
        amount_paid=invoice.amount_paid,
        income_number=invoice.income_number,
        invoice_number=invoice.invoice_number,
    )
    return APIResponse(data=InvoiceResponse.model_validate(created))


@router.get("/by-number/{invoice_number}", response_model=APIResponse[InvoiceResponse])
def get_invoice_by_number(invoice_number: str, services: ServicesDep) -> APIResponse[InvoiceResponse]:
    """Get an invoice by invoice number."""
    invoice = services.invoices.get_by_invoice_number(invoice_number)
    return APIResponse(data=InvoiceResponse.model_validate(invoice))


@router.get("/by-income-number/{income_number}", response_model=APIResponse[InvoiceResponse])
def get_invoice_by_income_number(
    income_number: str, services: ServicesDep
) -> APIResponse[InvoiceResponse]:
    """Get an invoice by income number."""
    invoice = services.invoices.get_by_income_number(income_number)
    return APIResponse(data=InvoiceResponse.model_validate(invoice))


@router.get("/{invoice_id}", response_model=APIResponse[InvoiceResponse])
def get_invoice(
    invoice_id: int,
    services: ServicesDep,
    include_relations: bool = Query(default=False, description="Attach course, person, billing"),
) -> APIResponse[InvoiceResponse]:
    """Get an invoice by ID."""
    invoice = services.invoices.get(invoice_id, include_relations=include_relations)
    return APIResponse(data=InvoiceResponse.model_validate(invoice))


@router.post("/{invoice_id}/verify", response_model=APIResponse[InvoiceResponse])
def verify_payment(invoice_id: int, services: ServicesDep) -> APIResponse[InvoiceResponse]:
    """Verify the payment of an invoice. Cannot be undone or repeated."""
    invoice = services.invoices.verify_payment(invoice_id)
    return APIResponse(data=InvoiceResponse.model_validate(invoice))


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_invoice(invoice_id: int, services: ServicesDep) -> None:
    """Delete an unverified invoice."""
    services.invoices.delete(invoice_id)

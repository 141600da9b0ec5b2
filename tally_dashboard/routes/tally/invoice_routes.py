"""
Invoice Routes
==============

Routes untuk invoice (Sales voucher) + push ke Tally
"""

import datetime
from fastapi import APIRouter, Depends, Query, status
from typing import Dict, Any, Optional

from ...services import ServiceRegistry
from ...schemas import InvoiceCreateSchema
from ...models import User
from ...dependencies import get_service_registry, require_roles
from ...responses import APIResponse

router = APIRouter()


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_invoice(
    invoice_data: InvoiceCreateSchema,
    current_user: User = Depends(require_roles('admin', 'accountant')),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    result = await service_registry.invoice_service.create_invoice(
        invoice_data.model_dump(), user_id=current_user.id
    )
    return APIResponse.success(
        data=result['invoice'],
        message=result['message'],
        tallySync=result['tallySync']
    )


@router.get("", response_model=Dict[str, Any])
async def get_invoices(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    start_date: Optional[datetime.date] = Query(None),
    end_date: Optional[datetime.date] = Query(None),
    sync_status: Optional[str] = Query(None),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    """
    List invoices dengan filter dan totals

    **Query Parameters:**
    - start_date / end_date: rentang tanggal voucher
    - sync_status: pending / success / failed
    """
    result = await service_registry.invoice_service.list_invoices(
        page, per_page,
        filters={'start_date': start_date, 'end_date': end_date, 'sync_status': sync_status}
    )
    return APIResponse.paginated(
        data=result['items'],
        pagination=result['pagination'],
        message="Invoices retrieved successfully",
        totals=result['totals']
    )


@router.delete("/{invoice_id}", response_model=Dict[str, Any])
async def delete_invoice(
    invoice_id: int,
    current_user: User = Depends(require_roles('admin', 'accountant')),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    result = await service_registry.invoice_service.delete_invoice(invoice_id, user_id=current_user.id)
    extra = {'tallySync': result['tallySync']}
    if 'warning' in result:
        extra['warning'] = result['warning']
    return APIResponse.success(
        data={'deletedInvoice': result['deletedInvoice']},
        message=result['message'],
        **extra
    )

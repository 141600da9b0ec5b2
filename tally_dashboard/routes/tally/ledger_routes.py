"""
Ledger Routes
=============

Routes untuk ledger CRUD + push ke Tally
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Dict, Any, Optional

from ...services import ServiceRegistry
from ...schemas import LedgerCreateSchema
from ...models import User
from ...dependencies import get_service_registry, require_roles
from ...responses import APIResponse

router = APIRouter()


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_ledger(
    ledger_data: LedgerCreateSchema,
    current_user: User = Depends(require_roles('admin', 'accountant')),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    """
    Create ledger lokal lalu push ke Tally.

    Response selalu success selama write lokal berhasil; hasil Tally ada
    di `tallySync`.
    """
    result = await service_registry.ledger_service.create_ledger(
        ledger_data.model_dump(), user_id=current_user.id
    )
    return APIResponse.success(
        data=result['ledger'],
        message=result['message'],
        tallySync=result['tallySync']
    )


@router.get("", response_model=Dict[str, Any])
async def get_ledgers(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    parent_group: Optional[str] = Query(None),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    result = await service_registry.ledger_service.list_ledgers(page, per_page, search, parent_group)
    return APIResponse.paginated(
        data=result['items'],
        pagination=result['pagination'],
        message="Ledgers retrieved successfully"
    )


@router.get("/{ledger_id}", response_model=Dict[str, Any])
async def get_ledger(
    ledger_id: int,
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    ledger = await service_registry.ledger_service.get_ledger(ledger_id)
    return APIResponse.success(data=ledger, message="Ledger retrieved successfully")


@router.delete("/{ledger_id}", response_model=Dict[str, Any])
async def delete_ledger(
    ledger_id: int,
    current_user: User = Depends(require_roles('admin')),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    """Delete ledger lokal + best-effort delete di Tally"""
    result = await service_registry.ledger_service.delete_ledger(ledger_id, user_id=current_user.id)
    extra = {'tallySync': result['tallySync']}
    if 'warning' in result:
        extra['warning'] = result['warning']
    return APIResponse.success(
        data={'deletedLedger': result['deletedLedger']},
        message=result['message'],
        **extra
    )

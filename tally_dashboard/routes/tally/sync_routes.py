"""
Sync & Dashboard Routes
=======================
"""

import datetime
from fastapi import APIRouter, Depends, Query
from typing import Dict, Any, Optional

from ...services import ServiceRegistry
from ...models import User
from ...dependencies import get_service_registry, require_roles
from ...responses import APIResponse

router = APIRouter()


@router.post("/sync/ledgers", response_model=Dict[str, Any])
async def sync_ledgers(
    current_user: User = Depends(require_roles('admin', 'accountant')),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    """Pull semua ledger dari Tally ke database lokal"""
    result = await service_registry.ledger_service.sync_ledgers_to_database(user_id=current_user.id)
    return {
        'success': result['success'],
        'message': result['message'],
        'data': {'count': result['count']}
    }


@router.get("/sync-logs", response_model=Dict[str, Any])
async def get_sync_logs(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    sync_type: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    start_date: Optional[datetime.datetime] = Query(None),
    end_date: Optional[datetime.datetime] = Query(None),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    result = await service_registry.dashboard_service.list_sync_logs(
        page, per_page,
        filters={'sync_type': sync_type, 'status': status, 'start_date': start_date, 'end_date': end_date}
    )
    return APIResponse.paginated(
        data=result['items'],
        pagination=result['pagination'],
        message="Sync logs retrieved successfully"
    )


@router.get("/dashboard-stats", response_model=Dict[str, Any])
async def get_dashboard_stats(
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    stats = await service_registry.dashboard_service.get_dashboard_stats()
    return APIResponse.success(data=stats, message="Dashboard stats retrieved successfully")


@router.get("/connection", response_model=Dict[str, Any])
async def check_connection(
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    """Probe listener Tally"""
    result = await service_registry.tally_service.check_connection()
    return {
        'success': result['success'],
        'message': result['message'],
        'data': {'connected': result['connected'], 'host': result['host']}
    }

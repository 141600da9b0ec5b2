"""
Admin User Routes
=================

Routes untuk user CRUD (admin only)
"""

from fastapi import APIRouter, Depends, Query, status
from typing import Dict, Any, Optional

from ...services import ServiceRegistry
from ...schemas import UserCreateSchema, UserUpdateSchema
from ...models import User
from ...dependencies import get_service_registry, require_roles
from ...responses import APIResponse

router = APIRouter()
admin_only = require_roles('admin')


@router.get("", response_model=Dict[str, Any])
async def get_users(
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    search: Optional[str] = Query(None),
    role: Optional[str] = Query(None),
    _: User = Depends(admin_only),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    """
    Get users dengan pagination dan filtering

    **Query Parameters:**
    - search: Search dalam username, email
    - role: Filter by role
    """
    result = await service_registry.user_service.list_users(page, per_page, search, role)
    return APIResponse.paginated(
        data=result['items'],
        pagination=result['pagination'],
        message="Users retrieved successfully"
    )


@router.post("", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def create_user(
    user_data: UserCreateSchema,
    _: User = Depends(admin_only),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    user = await service_registry.user_service.create_user(user_data.model_dump())
    return APIResponse.success(data=user, message="User created successfully")


@router.put("/{user_id}", response_model=Dict[str, Any])
async def update_user(
    user_id: int,
    user_data: UserUpdateSchema,
    _: User = Depends(admin_only),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    user = await service_registry.user_service.update_user(user_id, user_data.model_dump(exclude_unset=True))
    return APIResponse.success(data=user, message="User updated successfully")


@router.delete("/{user_id}", response_model=Dict[str, Any])
async def delete_user(
    user_id: int,
    current_user: User = Depends(admin_only),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    await service_registry.user_service.delete_user(user_id, current_user_id=current_user.id)
    return APIResponse.success(message="User deleted successfully")

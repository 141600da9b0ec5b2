"""
Authentication Routes
=====================

Routes untuk register, login dan profile
"""

from fastapi import APIRouter, Depends, status
from typing import Dict, Any

from ...services import ServiceRegistry
from ...schemas import RegisterSchema, LoginSchema, ProfileUpdateSchema
from ...models import User
from ...dependencies import get_service_registry, get_service_registry_optional, get_current_user
from ...responses import APIResponse

router = APIRouter()


@router.post("/register", response_model=Dict[str, Any], status_code=status.HTTP_201_CREATED)
async def register(
    register_data: RegisterSchema,
    service_registry: ServiceRegistry = Depends(get_service_registry_optional)
):
    """
    Register user baru (role analyst)

    **Returns:**
    - token: JWT access token
    - user: User profile data
    """
    result = await service_registry.auth_service.register(register_data.model_dump())
    return APIResponse.success(data=result, message="User registered successfully")


@router.post("/login", response_model=Dict[str, Any])
async def login(
    login_data: LoginSchema,
    service_registry: ServiceRegistry = Depends(get_service_registry_optional)
):
    """Login dengan email dan password, return JWT token"""
    result = await service_registry.auth_service.authenticate_user(
        email=str(login_data.email),
        password=login_data.password
    )
    return APIResponse.success(data=result, message="Login successful")


@router.get("/profile", response_model=Dict[str, Any])
async def get_profile(
    current_user: User = Depends(get_current_user),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    profile = await service_registry.auth_service.get_profile(current_user.id)
    return APIResponse.success(data=profile, message="Profile retrieved successfully")


@router.put("/profile", response_model=Dict[str, Any])
async def update_profile(
    profile_data: ProfileUpdateSchema,
    current_user: User = Depends(get_current_user),
    service_registry: ServiceRegistry = Depends(get_service_registry)
):
    profile = await service_registry.auth_service.update_profile(
        current_user.id, profile_data.model_dump(exclude_unset=True)
    )
    return APIResponse.success(data=profile, message="Profile updated successfully")

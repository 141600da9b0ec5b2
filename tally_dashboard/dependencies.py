"""
API Dependencies
================

FastAPI dependencies untuk dashboard application.
"""

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import Optional

from .services import ServiceRegistry, BaseService, TallyService, create_service_registry
from .database import get_db_session, AsyncSessionLocal
from .config import settings
from .models import User
from .services.exceptions import AuthenticationError, AuthorizationError

# Security
security = HTTPBearer(auto_error=False)


def get_session_factory():
    """Session factory untuk sync log (session terpisah dari request)"""
    return AsyncSessionLocal


def get_tally_service(request: Request) -> Optional[TallyService]:
    """TallyService bersama yang dibuat di lifespan; None = registry membuat sendiri"""
    return getattr(request.app.state, 'tally_service', None)


async def get_service_registry_optional(
    db_session=Depends(get_db_session),
    session_factory=Depends(get_session_factory),
    tally_service: Optional[TallyService] = Depends(get_tally_service)
) -> ServiceRegistry:
    """Service registry tanpa authentication requirement"""
    return create_service_registry(
        db_session=db_session,
        config=settings.tally_config(),
        tally_service=tally_service,
        session_factory=session_factory
    )


# Dependency untuk get current user
async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    service_registry: ServiceRegistry = Depends(get_service_registry_optional)
) -> User:
    """Get current authenticated user"""
    if credentials is None:
        raise AuthenticationError("Access denied. No token provided.")
    return await service_registry.auth_service.verify_access_token(credentials.credentials)


# Dependency untuk get service registry
async def get_service_registry(
    service_registry: ServiceRegistry = Depends(get_service_registry_optional),
    current_user: User = Depends(get_current_user)
) -> ServiceRegistry:
    """Service registry dengan current user"""
    for service in service_registry.get_all_services().values():
        if isinstance(service, BaseService):
            service.current_user = current_user
    service_registry.current_user = current_user
    return service_registry


def require_roles(*roles: str):
    """Dependency factory: user harus punya salah satu role"""
    async def checker(current_user: User = Depends(get_current_user)) -> User:
        if not current_user.has_role(*roles):
            raise AuthorizationError(
                f"Insufficient permissions. Required role: {', '.join(roles)}",
                required_role=roles
            )
        return current_user
    return checker

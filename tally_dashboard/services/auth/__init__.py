"""
Auth Domain Services
====================

Services untuk Authentication dan User management
"""

from .auth_service import AuthService
from .user_service import UserService

__all__ = [
    'AuthService',
    'UserService',
]

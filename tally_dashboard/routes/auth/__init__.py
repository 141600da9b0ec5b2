"""
Authentication Routes
=====================
"""

from .auth_routes import router as auth_router

__all__ = ['auth_router']

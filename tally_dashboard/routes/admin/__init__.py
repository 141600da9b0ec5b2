from .user_routes import router as admin_user_router

__all__ = ['admin_user_router']

"""
User Service
============

Service untuk admin user management
"""

from typing import Dict, Any, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..base import BaseService, transactional
from ..exceptions import ValidationError
from ...models import User
from ...schemas import UserSchema, UserCreateSchema, UserUpdateSchema


class UserService(BaseService):
    """Service untuk User management (admin only)"""

    model_class = User
    response_schema = UserSchema
    search_fields = ['username', 'email']

    def __init__(self, db_session: AsyncSession, current_user=None):
        super().__init__(db_session, current_user)

    def _serialize(self, user: User) -> Dict[str, Any]:
        return self.response_schema.model_validate(user).model_dump(mode='json')

    async def list_users(self, page: int = 1, per_page: int = 20, search: str = None,
                         role: str = None) -> Dict[str, Any]:
        query = select(User)
        query = self._apply_filters(query, User, {'role': role})
        query = self._apply_search(query, User, search, self.search_fields)
        query = self._apply_sorting(query, User, 'created_at', 'desc')

        result = await self._paginate_query(query, page, per_page)
        return {
            'items': [self._serialize(user) for user in result['items']],
            'pagination': result['pagination']
        }

    async def get_user(self, user_id: int) -> Dict[str, Any]:
        return self._serialize(await self._get_or_404(User, user_id))

    @transactional
    async def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        validated = UserCreateSchema.model_validate(data)
        await self._validate_unique_field(
            User, 'email', str(validated.email),
            error_message='User already exists with this email'
        )
        await self._validate_unique_field(
            User, 'username', validated.username,
            error_message='User already exists with this username'
        )

        user = User(
            username=validated.username,
            email=str(validated.email),
            role=validated.role,
            is_active=validated.is_active
        )
        user.set_password(validated.password)
        self.db_session.add(user)
        await self.db_session.flush()

        self.logger.info(f"User '{user.username}' created with role {user.role}")
        return self._serialize(user)

    @transactional
    async def update_user(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        user = await self._get_or_404(User, user_id)
        validated = UserUpdateSchema.model_validate(data).model_dump(exclude_unset=True, exclude_none=True)

        if 'email' in validated:
            validated['email'] = str(validated['email'])
            await self._validate_unique_field(
                User, 'email', validated['email'], exclude_id=user_id,
                error_message='User already exists with this email'
            )
        if 'username' in validated:
            await self._validate_unique_field(
                User, 'username', validated['username'], exclude_id=user_id,
                error_message='User already exists with this username'
            )

        for key, value in validated.items():
            setattr(user, key, value)
        await self.db_session.flush()
        return self._serialize(user)

    @transactional
    async def delete_user(self, user_id: int, current_user_id: Optional[int] = None) -> bool:
        """Hard delete. Admin tidak boleh menghapus akunnya sendiri."""
        user = await self._get_or_404(User, user_id)
        if user.id == (current_user_id or self.current_user_id):
            raise ValidationError('Cannot delete your own account')

        await self.db_session.delete(user)
        self.logger.info(f"User '{user.username}' deleted")
        return True

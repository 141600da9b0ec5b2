"""
Authentication Service
======================

CRITICAL SERVICE untuk register, login dan JWT token
"""

import jwt
from datetime import datetime, timedelta, timezone
from typing import Dict, Any

from sqlalchemy.ext.asyncio import AsyncSession

from ..base import BaseService, transactional
from ..exceptions import AuthenticationError, AuthorizationError
from ...models import User, utcnow
from ...schemas import RegisterSchema, LoginSchema, ProfileUpdateSchema, UserSchema, LoginResponseSchema


class AuthService(BaseService):
    """CRITICAL SERVICE untuk Authentication"""

    def __init__(self, db_session: AsyncSession, secret_key: str, algorithm: str = 'HS256',
                 token_expiry_minutes: int = 60 * 24 * 7, current_user=None):
        super().__init__(db_session, current_user)
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.token_expiry_minutes = token_expiry_minutes

    # ==================== TOKENS ====================

    def generate_access_token(self, user: User) -> str:
        """JWT berisi id dan role user"""
        now = datetime.now(timezone.utc)
        payload = {
            'id': user.id,
            'role': user.role,
            'iat': now,
            'exp': now + timedelta(minutes=self.token_expiry_minutes)
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    async def verify_access_token(self, access_token: str) -> User:
        """Verify token dan return user yang masih aktif"""
        try:
            payload = jwt.decode(access_token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            raise AuthenticationError("Access token has expired")
        except jwt.InvalidTokenError:
            raise AuthenticationError("Invalid access token")

        user_id = payload.get('id')
        user = await self.db_session.get(User, user_id) if user_id is not None else None
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("Account is deactivated")
        return user

    def _login_response(self, user: User) -> Dict[str, Any]:
        response = LoginResponseSchema(
            user=UserSchema.model_validate(user),
            token=self.generate_access_token(user),
            expires_in=self.token_expiry_minutes * 60
        )
        return response.model_dump(mode='json')

    # ==================== REGISTER / LOGIN ====================

    @transactional
    async def register(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Self-registration, role selalu analyst"""
        validated = RegisterSchema.model_validate(data)
        await self._validate_unique_field(
            User, 'email', str(validated.email),
            error_message='User already exists with this email'
        )
        await self._validate_unique_field(
            User, 'username', validated.username,
            error_message='User already exists with this username'
        )

        user = User(username=validated.username, email=str(validated.email), role='analyst')
        user.set_password(validated.password)
        self.db_session.add(user)
        await self.db_session.flush()

        self.logger.info(f"User '{user.username}' registered")
        return self._login_response(user)

    @transactional
    async def authenticate_user(self, email: str, password: str) -> Dict[str, Any]:
        """Login dengan email + password"""
        validated = LoginSchema.model_validate({'email': email, 'password': password})
        user = await self._get_by_field(User, 'email', str(validated.email))

        if not user or not user.check_password(validated.password):
            self.logger.warning(f"Failed login attempt for {email}")
            raise AuthenticationError("Invalid credentials")

        if not user.is_active:
            raise AuthorizationError("Account is deactivated")

        user.last_login = utcnow()
        return self._login_response(user)

    # ==================== PROFILE ====================

    async def get_profile(self, user_id: int) -> Dict[str, Any]:
        user = await self._get_or_404(User, user_id)
        return UserSchema.model_validate(user).model_dump(mode='json')

    @transactional
    async def update_profile(self, user_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        user = await self._get_or_404(User, user_id)
        validated = ProfileUpdateSchema.model_validate(data).model_dump(exclude_unset=True, exclude_none=True)

        if 'email' in validated:
            validated['email'] = str(validated['email'])
            await self._validate_unique_field(
                User, 'email', validated['email'], exclude_id=user.id,
                error_message='User already exists with this email'
            )
        if 'username' in validated:
            await self._validate_unique_field(
                User, 'username', validated['username'], exclude_id=user.id,
                error_message='User already exists with this username'
            )

        password = validated.pop('password', None)
        for key, value in validated.items():
            setattr(user, key, value)
        if password:
            user.set_password(password)

        await self.db_session.flush()
        return UserSchema.model_validate(user).model_dump(mode='json')

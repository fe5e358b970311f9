# app/services/auth_service.py
from typing import Tuple
from datetime import timedelta
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.security import (
    get_password_hash,
    verify_password,
    create_access_token,
    create_refresh_token,
    decode_token
)
from app.repositories.user_repository import UserRepository
from app.services.achievement_service import AchievementService
from app.core.schemas.auth import UserCreate, Token
from app.core.config import settings
from app.core.exceptions import AuthenticationError, ValidationError
from app.models.user import User
import logging

logger = logging.getLogger(__name__)


class AuthService:
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)

    async def register_user(self, user_create: UserCreate) -> Tuple[User, Token]:
        """Регистрация нового пользователя и заведение его достижений"""
        existing_user = await self.user_repository.get_by_email(user_create.email)
        if existing_user:
            raise ValidationError("User with this email already exists")

        existing_username = await self.user_repository.get_by_username(user_create.username)
        if existing_username:
            raise ValidationError("User with this username already exists")

        password_hash = get_password_hash(user_create.password)
        user = await self.user_repository.create(user_create, password_hash)

        await AchievementService(self.session).initialize_achievements(user.id)
        await self.session.commit()

        token = self._generate_tokens(user.id)
        return user, token

    async def authenticate_user(self, email: str, password: str) -> Tuple[User, Token]:
        """Аутентификация по email и паролю"""
        user = await self.user_repository.get_by_email(email.lower())
        if not user or not verify_password(password, user.password_hash):
            raise AuthenticationError("Invalid email or password")

        token = self._generate_tokens(user.id)

        # Обновляем last_login_at
        await self.user_repository.update_last_login(user.id)
        await self.session.commit()

        return user, token

    async def refresh_tokens(self, refresh_token: str) -> Token:
        """Обновление access token с помощью refresh token"""
        try:
            payload = decode_token(refresh_token)
        except ValueError as e:
            raise AuthenticationError(str(e))

        if payload.get("type") != "refresh":
            raise AuthenticationError("Invalid token type")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token payload")

        user = await self.user_repository.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("User not found")

        return self._generate_tokens(user.id)

    async def get_current_user(self, token: str) -> User:
        """Получение текущего пользователя из access токена"""
        try:
            payload = decode_token(token)
        except ValueError as e:
            raise AuthenticationError(str(e))

        if payload.get("type") != "access":
            raise AuthenticationError("Invalid token type for this operation")

        user_id = payload.get("sub")
        if not user_id:
            raise AuthenticationError("Invalid token payload")

        user = await self.user_repository.get_by_id(int(user_id))
        if not user:
            raise AuthenticationError("User not found")

        return user

    def _generate_tokens(self, user_id: int) -> Token:
        """Генерация пары access/refresh токенов"""
        access_token_expires = timedelta(
            minutes=settings.security.JWT_ACCESS_TOKEN_EXPIRE_MINUTES
        )

        access_token = create_access_token(
            data={"sub": str(user_id)},
            expires_delta=access_token_expires
        )
        refresh_token = create_refresh_token(data={"sub": str(user_id)})

        return Token(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=int(access_token_expires.total_seconds())
        )

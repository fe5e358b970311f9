# app/repositories/user_repository.py
from typing import Optional, Dict, Iterable, List
from datetime import datetime, timezone
from sqlalchemy import select, update, func
from sqlalchemy.ext.asyncio import AsyncSession
from app.models.user import User, UserRole
from app.core.schemas.auth import UserCreate

class UserRepository:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_email(self, email: str) -> Optional[User]:
        """Получить пользователя по email"""
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        """Получить пользователя по username"""
        stmt = select(User).where(User.username == username)
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> Optional[User]:
        """Получить пользователя по ID"""
        return await self.session.get(User, user_id)

    async def get_usernames(self, user_ids: Iterable[int]) -> Dict[int, str]:
        """Словарь id -> username для списка пользователей"""
        ids = set(user_ids)
        if not ids:
            return {}
        stmt = select(User.id, User.username).where(User.id.in_(ids))
        result = await self.session.execute(stmt)
        return {row.id: row.username for row in result}

    async def create(self, user_create: UserCreate, password_hash: str) -> User:
        """Создать нового пользователя"""
        db_user = User(
            username=user_create.username,
            email=user_create.email.lower(),
            password_hash=password_hash,
            role=UserRole.USER.value,
            created_at=datetime.now(timezone.utc),
        )
        self.session.add(db_user)
        await self.session.flush()  # Получаем ID без коммита
        return db_user

    async def update_last_login(self, user_id: int) -> None:
        """Обновить время последнего входа"""
        stmt = update(User).where(User.id == user_id).values(
            last_login_at=datetime.now(timezone.utc),
            updated_at=datetime.now(timezone.utc)
        )
        await self.session.execute(stmt)

    async def list_by_ids(self, user_ids: Iterable[int]) -> List[User]:
        """Пользователи по списку ID, отсортированные по username"""
        ids = set(user_ids)
        if not ids:
            return []
        stmt = select(User).where(User.id.in_(ids)).order_by(User.username)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

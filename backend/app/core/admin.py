# app/core/admin.py
from sqladmin import Admin, ModelView
from sqladmin.authentication import AuthenticationBackend
from fastapi import Request
from app.core.security import verify_password, create_access_token, decode_token
from app.core.config import settings
from app.repositories.user_repository import UserRepository
from app.core.database import db_helper
from app.models.user import User, UserRole
from app.models.meditation import Meditation
from app.models.group import GroupSession
from app.models.engagement import Achievement

# 1. Авторизация в админке: только role == admin
class AdminAuth(AuthenticationBackend):
    async def login(self, request: Request) -> bool:
        form = await request.form()
        email, password = form["username"], form["password"]

        async with db_helper.session_factory() as session:
            user = await UserRepository(session).get_by_email(str(email))

        if user and verify_password(str(password), user.password_hash) and user.role == UserRole.ADMIN.value:
            request.session.update({"token": create_access_token({"sub": str(user.id), "role": user.role})})
            return True
        return False

    async def logout(self, request: Request) -> bool:
        request.session.clear()
        return True

    async def authenticate(self, request: Request) -> bool:
        token = request.session.get("token")
        if not token:
            return False
        try:
            payload = decode_token(token)
        except ValueError:
            return False
        return payload.get("role") == UserRole.ADMIN.value

authentication_backend = AdminAuth(secret_key=settings.security.JWT_SECRET_KEY.get_secret_value())

# 2. Представления моделей

class UserAdmin(ModelView, model=User):
    column_list = [User.id, User.username, User.email, User.role, User.created_at]
    column_searchable_list = [User.email, User.username]
    column_sortable_list = [User.id, User.created_at]
    form_excluded_columns = [User.password_hash]
    icon = "fa-solid fa-user"

class MeditationAdmin(ModelView, model=Meditation):
    column_list = [Meditation.id, Meditation.title, Meditation.type, Meditation.category, Meditation.duration, Meditation.is_active]
    column_searchable_list = [Meditation.title]
    icon = "fa-solid fa-spa"

class GroupSessionAdmin(ModelView, model=GroupSession):
    column_list = [GroupSession.id, GroupSession.title, GroupSession.host_id, GroupSession.status, GroupSession.scheduled_time, GroupSession.joined_count]
    column_sortable_list = [GroupSession.id, GroupSession.scheduled_time]
    # joined_count меняется только условным UPDATE
    form_excluded_columns = [GroupSession.joined_count]
    icon = "fa-solid fa-people-group"

class AchievementAdmin(ModelView, model=Achievement):
    column_list = [Achievement.id, Achievement.user_id, Achievement.type, Achievement.progress, Achievement.target, Achievement.completed]
    column_searchable_list = [Achievement.type]
    can_create = False
    icon = "fa-solid fa-trophy"

# 3. Функция инициализации
def setup_admin(app, engine):
    admin = Admin(app, engine, authentication_backend=authentication_backend, title="Serenity Admin")

    admin.add_view(UserAdmin)
    admin.add_view(MeditationAdmin)
    admin.add_view(GroupSessionAdmin)
    admin.add_view(AchievementAdmin)
    return admin

from fastapi import APIRouter
from app.api.v1.routes import auth
from .meditations import router as meditations_router
from .sessions import router as sessions_router
from .analytics import router as analytics_router
from .achievements import router as achievements_router
from .group_sessions import router as group_sessions_router
from .friends import router as friends_router


api_router = APIRouter()

api_router.include_router(auth.router, tags=["auth"])

api_router.include_router(meditations_router)
api_router.include_router(sessions_router)
api_router.include_router(analytics_router)
api_router.include_router(achievements_router)
api_router.include_router(group_sessions_router)
api_router.include_router(friends_router)

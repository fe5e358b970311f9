# app/core/config.py
from pydantic_settings import BaseSettings
from pydantic import BaseModel, Field, SecretStr
from typing import List
from functools import lru_cache

class DataBaseConfig(BaseModel):
    DB_HOST: str = Field(..., description="Database host")
    DB_PORT: int = Field(5432, description="Database port")
    DB_NAME: str = Field(..., description="Database name")
    DB_USER: str = Field(..., description="Database user")
    DB_PASSWORD: SecretStr = Field(..., description="Database password")  # SecretStr скрывает значение в логах
    DB_ECHO: bool = Field(False, description="Enable SQL echo")
    DB_POOL_SIZE: int = Field(5, description="Database pool size")
    DB_MAX_OVERFLOW: int = Field(10, description="Database max overflow")

    @property
    def DATABASE_URL(self) -> str:
        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD.get_secret_value()}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    naming_convention: dict[str, str] = {
        "ix": "ix_%(column_0_label)s",
        "uq": "uq_%(table_name)s_%(column_0_N_name)s",
        "ck": "ck_%(table_name)s_%(constraint_name)s",
        "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
        "pk": "pk_%(table_name)s",
    }

class SecurityConfig(BaseModel):
    JWT_SECRET_KEY: SecretStr = Field(..., description="JWT secret key")
    JWT_ALGORITHM: str = Field("HS256", description="JWT algorithm")
    JWT_ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(30, description="Access token expiration")
    JWT_REFRESH_TOKEN_EXPIRE_DAYS: int = Field(7, description="Refresh token expiration")

class AchievementConfig(BaseModel):
    # Часы в UTC, окно [start, end)
    EARLY_BIRD_START_HOUR: int = Field(5, ge=0, le=23)
    EARLY_BIRD_END_HOUR: int = Field(9, ge=0, le=23)
    NIGHT_OWL_START_HOUR: int = Field(22, ge=0, le=23)
    NIGHT_OWL_END_HOUR: int = Field(2, ge=0, le=23)
    MARATHON_MINUTES: int = Field(30, ge=1, description="Long session threshold in minutes")

class GroupSessionConfig(BaseModel):
    DEFAULT_MAX_PARTICIPANTS: int = Field(10, ge=1)
    CHAT_PAGE_SIZE: int = Field(50, ge=1, le=200)

class Settings(BaseSettings):
    app_name: str = Field("Serenity API", description="Application name")
    debug: bool = Field(False, description="Debug mode")
    cors_origins: List[str] = Field(
        default_factory=lambda: [
            "http://localhost:5137",
            "http://localhost:3000",
        ],
        description="CORS origins"
    )
    rate_limit_enabled: bool = Field(True, description="Enable slowapi rate limits")

    db: DataBaseConfig
    security: SecurityConfig
    achievements: AchievementConfig = AchievementConfig()
    group_sessions: GroupSessionConfig = GroupSessionConfig()

    class Config:
        env_file = ".env"
        env_file_encoding = 'utf-8'
        case_sensitive = False
        env_nested_delimiter = '__'  # Для вложенных объектов

@lru_cache()
def get_settings() -> Settings:
    """Кэшированный экземпляр настроек"""
    return Settings()

settings = get_settings()

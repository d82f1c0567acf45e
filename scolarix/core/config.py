from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")
    db_pool_size: int = Field(5, alias="DB_POOL_SIZE")
    db_max_overflow: int = Field(10, alias="DB_MAX_OVERFLOW")
    db_pool_timeout: int = Field(30, alias="DB_POOL_TIMEOUT")
    db_pool_recycle: int = Field(300, alias="DB_POOL_RECYCLE")

    # Missing secret is reported per request as JWT_CONFIG_ERROR, not at import.
    jwt_secret: Optional[str] = Field(None, alias="JWT_SECRET")
    jwt_issuer: str = Field("scolarix-api", alias="JWT_ISSUER")
    jwt_audience: str = Field("scolarix-client", alias="JWT_AUDIENCE")
    jwt_expires_minutes: int = Field(60 * 24, alias="JWT_EXPIRES_MINUTES")

    res_per_page: int = Field(10, alias="RES_PER_PAGE")
    api_prefix: str = Field("/scolarix-api/v1", alias="API_PREFIX")

    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    allowed_origins: str = Field("", alias="ALLOWED_ORIGINS")

    app_host: str = Field("0.0.0.0", alias="APP_HOST")
    app_port: int = Field(5000, alias="APP_PORT")
    web_concurrency: int = Field(1, alias="WEB_CONCURRENCY")

    admin_username: Optional[str] = Field(None, alias="ADMIN_USERNAME")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")
    admin_school_id: str = Field("EC001", alias="ADMIN_SCHOOL_ID")
    admin_school_name: str = Field("Main School", alias="ADMIN_SCHOOL_NAME")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cors_origins(self) -> List[str]:
        if self.is_development:
            return ["*"]
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


settings = Settings()

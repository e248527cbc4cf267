from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_days: int = Field(30, alias="ACCESS_TOKEN_EXPIRE_DAYS")

    client_url: Optional[str] = Field("http://localhost:5173", alias="CLIENT_URL")
    port: int = Field(5000, alias="PORT")
    environment: str = Field("development", alias="ENVIRONMENT")
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    admin_name: str = Field("School Admin", alias="ADMIN_NAME")
    admin_email: Optional[str] = Field(None, alias="ADMIN_EMAIL")
    admin_password: Optional[str] = Field(None, alias="ADMIN_PASSWORD")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def cookie_secure(self) -> bool:
        # Browsers drop Secure cookies over plain http, which is what local dev uses.
        return not self.is_development


settings = Settings()

from typing import List

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(15, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Attendance policy is site-local: hours and calendar days are evaluated in this zone.
    attendance_timezone: str = Field("Asia/Kolkata", alias="ATTENDANCE_TIMEZONE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    sql_echo: bool = Field(False, alias="SQL_ECHO")
    # Comma-separated, e.g. "https://portal.example.com,https://admin.example.com" or "*"
    cors_origins: str = Field("*", alias="CORS_ORIGINS")
    # Seconds a worker may serve cached attendance hours before re-reading them; 0 reads on every request
    attendance_settings_ttl_seconds: int = Field(30, ge=0, alias="ATTENDANCE_SETTINGS_TTL_SECONDS")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def cors_origin_list(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


settings = Settings()

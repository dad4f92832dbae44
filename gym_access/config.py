from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = Field(default="24Fit Gym Access", alias="APP_NAME")
    database_url: str = Field(alias="DATABASE_URL")
    jwt_secret: str = Field(alias="JWT_SECRET")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")
    token_ttl_hours: int = Field(default=24, alias="TOKEN_TTL_HOURS")
    membership_grace_days: int = Field(default=15, alias="MEMBERSHIP_GRACE_DAYS")
    trainer_grace_days: int = Field(default=5, alias="TRAINER_GRACE_DAYS")
    min_trainer_renewal_days: int = Field(default=30, alias="MIN_TRAINER_RENEWAL_DAYS")
    expiry_notification_days: int = Field(default=4, alias="EXPIRY_NOTIFICATION_DAYS")
    login_max_attempts: int = Field(default=5, alias="LOGIN_MAX_ATTEMPTS")
    login_window_seconds: int = Field(default=900, alias="LOGIN_WINDOW_SECONDS")
    login_ip_per_minute: int = Field(default=20, alias="LOGIN_IP_PER_MINUTE")
    allow_insecure_http: bool = Field(default=False, alias="ALLOW_INSECURE_HTTP")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()

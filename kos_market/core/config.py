import os
from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from sqlalchemy.engine import URL


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"
    STAGING = "staging"


RENDER_ENV = os.getenv("RENDER_ENV", Environment.DEVELOPMENT)


class Settings(BaseSettings):
    app_name: str = "KOS MARKET - ADMIN"
    render_env: str = RENDER_ENV
    # "1" swaps Firebase verification for dependency overrides
    testing: str | None = None

    # Postgres
    db_user: str
    db_password: str
    db_name: str
    db_host: str
    db_port: int
    sql_echo: bool = False

    firebase_credentials: str = "kos-market-service-account.json"
    log_level: str = "INFO"

    # False commits the content half of a transition before the listing half
    atomic_pair_writes: bool = True
    admin_page_size: int = Field(default=10, ge=1, le=100)

    model_config = SettingsConfigDict(
        env_file=".env" if RENDER_ENV != Environment.PRODUCTION else None,
        env_file_encoding="utf-8",
    )

    @property
    def is_production(self) -> bool:
        return self.render_env == Environment.PRODUCTION

    @property
    def database_url(self) -> URL:
        return URL.create(
            drivername="postgresql+asyncpg",
            username=self.db_user,
            password=self.db_password,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
        )


config = Settings()

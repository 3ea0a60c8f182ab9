"""Pool settings loaded from LINKPOOL_* environment variables (or .env)."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="LINKPOOL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
    )

    # Seconds; passed to each driver as its connect timeout unless options override it.
    CONNECT_TIMEOUT: int = 10
    # Open every handle in autocommit mode.
    AUTOCOMMIT: bool = True
    # Mandatory UTF-8 initialization for MySQL links.
    MYSQL_INIT_COMMAND: str = "SET NAMES utf8mb4"
    # Session sql_mode that turns MySQL warnings into errors.
    MYSQL_SQL_MODE: str = "TRADITIONAL"
    # Log statement text at DEBUG before execution.
    LOG_SQL: bool = False


settings = Settings()

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the starter MCP server.

    All values are loaded from environment variables with `STARTER_MCP_` prefix.
    Every field has a default, so the server runs without any environment set.
    """

    model_config = SettingsConfigDict(
        env_prefix="STARTER_MCP_",
        env_file=".env",
        extra="ignore",
    )

    # Server identity reported during `initialize`
    server_name: str = "starter-mcp-lite-server"
    server_version: str = "1.0.0"

    # HTTP
    server_host: str = "0.0.0.0"
    server_port: int = 8000
    log_level: str = "info"

    # Resolved against the working directory at call time
    package_json_path: Path = Path("package.json")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load and cache settings from environment."""
    return Settings()

"""
Infrastructure Layer: Configuration Adapter
"""
from pathlib import Path
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from garage_nft.domain import Environment, Network


class Settings(BaseSettings):
    """
    Global application settings loaded from .env file and environment variables.
    Follows 12-factor app methodology.
    """

    # Garage API
    environment: Environment = Field(Environment.PRODUCTION, alias="GARAGE_ENVIRONMENT")
    production_url: str = Field("https://garage-api.bako.global", alias="GARAGE_PRODUCTION_URL")
    development_url: str = Field("http://localhost:3000", alias="GARAGE_DEVELOPMENT_URL")
    request_timeout: float = Field(10.0, alias="REQUEST_TIMEOUT")

    # Known collections beyond the built-in table
    collections_file: Optional[Path] = Field(None, alias="COLLECTIONS_FILE")

    # Dashboard
    dashboard_network: Network = Field(Network.MAINNET, alias="DASHBOARD_NETWORK")
    dashboard_limit: int = Field(50, alias="DASHBOARD_LIMIT")
    refresh_interval: float = Field(300.0, alias="REFRESH_INTERVAL")

    # Web server
    host: str = Field("0.0.0.0", alias="HOST")
    port: int = Field(8080, alias="PORT")
    static_dir: Path = Field(Path(__file__).parent / "static", alias="STATIC_DIR")

    # System
    log_level: str = Field("INFO", alias="LOG_LEVEL")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def base_urls(self) -> Dict[Environment, str]:
        return {
            Environment.PRODUCTION: self.production_url.rstrip("/"),
            Environment.DEVELOPMENT: self.development_url.rstrip("/"),
        }


# Singleton instance
settings = Settings()  # type: ignore

"""
Lira Checker Configuration Management

Upstream credentials are read from the environment (or a local .env file),
never from the repository.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

DEFAULT_CURRENCIES_FILE = Path(__file__).parent / "data" / "supported_currencies.json"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    # === External Provider Configuration ===
    fastforex_api_key: str = Field(
        default="",
        description="FastForex API key (primary provider, required)"
    )
    fastforex_base_url: str = Field(
        default="https://api.fastforex.io",
        description="FastForex API base URL"
    )
    frankfurter_base_url: str = Field(
        default="https://api.frankfurter.dev",
        description="Frankfurter API base URL (secondary provider)"
    )
    enable_frankfurter: bool = Field(
        default=True,
        description="Use Frankfurter to fill currencies missing from the primary provider"
    )
    request_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Request and connect timeout for every upstream call"
    )
    
    # === Rate Cache Configuration ===
    anchor_currency: str = Field(
        default="USD",
        description="Currency all cached rates are expressed against"
    )
    cache_ttl_seconds: float = Field(
        default=300.0,
        gt=0,
        description="Maximum snapshot age before a refresh is triggered"
    )
    max_targets: int = Field(
        default=10,
        ge=1,
        description="Upper bound on targets accepted by a single conversion request"
    )
    currencies_file: Path = Field(
        default=DEFAULT_CURRENCIES_FILE,
        description="JSON file mapping currency codes to display names"
    )
    
    # === Status Endpoint ===
    status_base: str = Field(default="TRY")
    status_targets: str = Field(
        default="EUR,USD",
        description="Comma-separated currencies shown by the status endpoint"
    )
    status_refresh_seconds: int = Field(
        default=30,
        ge=0,
        description="Proactive refresh interval for the status currency (0 disables)"
    )
    
    # === API Configuration ===
    api_host: str = Field(default="0.0.0.0")
    api_port: int = Field(default=8000)
    
    # === Logging ===
    log_level: str = Field(default="INFO")
    
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }
    
    @field_validator("anchor_currency", "status_base")
    @classmethod
    def _upper_code(cls, value: str) -> str:
        return value.strip().upper()
    
    @property
    def status_target_list(self) -> list[str]:
        return [part.strip().upper() for part in self.status_targets.split(",") if part.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()

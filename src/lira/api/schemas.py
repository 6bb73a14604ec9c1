"""
Lira Checker API Response Schemas
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field


class RatesResponse(BaseModel):
    """Response schema for /convert/{base}"""
    base: str = Field(description="Requested base currency")
    results: dict[str, float] = Field(
        description="1 unit of base expressed in each known currency"
    )
    updated: str | None = Field(
        default=None,
        description="Update timestamp reported by the primary provider"
    )
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "base": "TRY",
                "results": {"EUR": 0.0285, "TRY": 1.0, "USD": 0.0311},
                "updated": "2026-01-15 10:21:07"
            }
        }
    }


class ConversionItem(BaseModel):
    """One entry of the /convert/{base}/{targets} response."""
    base_currency: str
    target_currency: str
    conversion_rate: float
    base_name: str = Field(description="Display name of the base currency")
    target_name: str = Field(description="Display name of the target currency")


class HealthResponse(BaseModel):
    """Health check response for /health"""
    status: str = Field(description="Service health status")
    version: str = Field(description="API version")
    providers: dict[str, bool] = Field(description="Reachability per upstream provider")
    cache_age_seconds: float | None = Field(
        default=None,
        description="Age of the cached snapshot (None when nothing is cached)"
    )
    cache_fetched_at: datetime | None = Field(
        default=None,
        description="Wall-clock time the cached snapshot was fetched"
    )
    cache_fresh: bool = Field(description="Whether the cached snapshot is within its TTL")
    cached_currencies: int = Field(default=0)
    unnamed_currencies: list[str] = Field(
        default_factory=list,
        description="Cached codes without an entry in the currency table"
    )
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "status": "healthy",
                "version": "1.0.0",
                "providers": {"fastforex": True, "frankfurter": True},
                "cache_age_seconds": 42.5,
                "cache_fetched_at": "2026-01-15T10:21:09Z",
                "cache_fresh": True,
                "cached_currencies": 161,
                "unnamed_currencies": []
            }
        }
    }


class ErrorDetail(BaseModel):
    """Error detail information."""
    code: str = Field(description="Error code")
    message: str = Field(description="Human-readable error message")
    details: dict[str, Any] | None = Field(
        default=None,
        description="Additional error details"
    )
    timestamp: datetime = Field(description="Error timestamp")


class ErrorResponse(BaseModel):
    """Error envelope shared by all endpoints."""
    error: ErrorDetail
    
    model_config = {
        "json_schema_extra": {
            "example": {
                "error": {
                    "code": "LIRA_UNKNOWN_CURRENCY",
                    "message": "Unknown currency: ZZZ",
                    "details": {"currency": "ZZZ"},
                    "timestamp": "2026-01-15T15:30:00Z"
                }
            }
        }
    }

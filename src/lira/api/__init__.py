"""
Lira Checker API Module
"""

from lira.api.routes import router
from lira.api.schemas import (
    ConversionItem,
    ErrorResponse,
    HealthResponse,
    RatesResponse,
)

__all__ = [
    "router",
    "ConversionItem",
    "ErrorResponse",
    "HealthResponse",
    "RatesResponse",
]

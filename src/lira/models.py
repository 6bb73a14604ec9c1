"""
Lira Checker Data Models

RateSnapshot is the unit the rate cache stores and publishes: it is never
mutated after construction, a refresh always builds a new one.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Mapping

from pydantic import BaseModel, Field


# === Errors ===

class ConversionError(Exception):
    """Base class for caller-input errors raised by the converter."""


class UnknownCurrency(ConversionError):
    """Currency code absent from the name table or from the merged snapshot."""

    def __init__(self, code: str, reason: str = "unsupported"):
        super().__init__(f"Unknown currency: {code}")
        self.code = code
        self.reason = reason


class NoTargets(ConversionError):
    """A conversion request named no target currency."""

    def __init__(self):
        super().__init__("At least one target currency is required")


class TooManyTargets(ConversionError):
    """More conversion targets were requested than allowed per call."""

    def __init__(self, requested: int, limit: int):
        super().__init__(f"Too many target currencies: {requested} (max {limit})")
        self.requested = requested
        self.limit = limit


class ConfigError(Exception):
    """Required startup configuration is missing or invalid."""


# === Snapshot ===

@dataclass(frozen=True)
class RateSnapshot:
    """
    One fetched-and-merged set of anchor-relative rates.

    `fetched_at` is a time.monotonic() reading and is only meaningful for
    freshness checks; `fetched_at_utc` is for display.
    """
    base: str
    rates: Mapping[str, float]
    fetched_at: float
    fetched_at_utc: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated: str | None = None
    sources: tuple[str, ...] = ()

    def __post_init__(self):
        # Freeze a private copy so callers can't reach the provider's dict
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    def rate_of(self, code: str) -> float | None:
        """Anchor-relative rate for `code`; the anchor itself is always 1.0."""
        if code == self.base:
            return 1.0
        return self.rates.get(code)

    def age(self, now: float) -> float:
        return now - self.fetched_at


# === Conversion ===

class ConversionResult(BaseModel):
    """`amount_in_target = amount_in_base * conversion_rate`"""
    base_currency: str = Field(description="Canonical (uppercase) base code")
    target_currency: str = Field(description="Canonical (uppercase) target code")
    conversion_rate: float = Field(gt=0)

    model_config = {"frozen": True}

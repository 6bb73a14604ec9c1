"""
Lira Checker Upstream Providers

Merge order: FastForex (primary) → Frankfurter (fills gaps)
"""

from lira.providers.base import BaseRateProvider, ProviderRates, RateProviderError
from lira.providers.fastforex import FastForexClient
from lira.providers.frankfurter import FrankfurterClient
from lira.providers.manager import RateFetcher

__all__ = [
    "BaseRateProvider",
    "ProviderRates",
    "RateProviderError",
    "FastForexClient",
    "FrankfurterClient",
    "RateFetcher",
]

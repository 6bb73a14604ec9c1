"""
Shared fixtures and fakes for the Lira Checker test suite.

Nothing here touches the network: upstream providers are replaced either by
a fake fetcher or by httpx.MockTransport.
"""

import asyncio
import time

import pytest

from lira.config import Settings
from lira.converter import CurrencyConverter
from lira.currencies import CurrencyTable
from lira.models import RateSnapshot
from lira.providers.base import BaseRateProvider, ProviderRates, RateProviderError

UPDATED = "2026-01-15 10:21:07"

# 1 USD = 28 TRY, 1 USD = 0.9 EUR
ANCHOR_RATES = {"TRY": 28.0, "EUR": 0.9}

CURRENCY_NAMES = {
    "USD": "US Dollar",
    "EUR": "Euro",
    "TRY": "Turkish Lira",
    "GBP": "British Pound Sterling",
}


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakePrimary:
    PROVIDER_NAME = "fake"


class FakeFetcher:
    """
    Counts fetches and returns snapshots stamped with the shared clock.

    `delay` yields to the event loop mid-fetch so concurrent callers pile up
    behind the refresh lock.
    """

    def __init__(self, clock: FakeClock, rates: dict[str, float] | None = None, delay: float = 0.0):
        self.clock = clock
        self.rates = dict(ANCHOR_RATES if rates is None else rates)
        self.delay = delay
        self.fail = False
        self.calls = 0
        self.anchor = "USD"
        self.primary = FakePrimary()

    async def fetch_snapshot(self) -> RateSnapshot:
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise RateProviderError("upstream down", provider="fake", error_type="REQUEST_ERROR")
        return RateSnapshot(
            base=self.anchor,
            rates=self.rates,
            fetched_at=self.clock(),
            updated=UPDATED,
            sources=("fake",),
        )

    async def health_check_all(self) -> dict[str, bool]:
        return {"fake": not self.fail}


class StaticProvider(BaseRateProvider):
    """
    Provider returning fixed rates, or failing when `rates` is None.

    With `delay` it sleeps before answering and records the monotonic time
    it returned at in `returned_at`.
    """

    def __init__(
        self,
        name: str,
        rates: dict[str, float] | None,
        updated: str | None = None,
        delay: float = 0.0
    ):
        super().__init__(base_url="http://static.invalid")
        self.PROVIDER_NAME = name
        self.rates = rates
        self.updated = updated
        self.delay = delay
        self.requested_bases: list[str] = []
        self.returned_at: float | None = None

    async def fetch_rates(self, base: str) -> ProviderRates:
        self.requested_bases.append(base)
        if self.delay:
            await asyncio.sleep(self.delay)
        self.returned_at = time.monotonic()
        if self.rates is None:
            raise RateProviderError("boom", provider=self.PROVIDER_NAME, error_type="HTTP_500")
        return ProviderRates(dict(self.rates), self.updated)

    async def health_check(self) -> bool:
        return self.rates is not None


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        fastforex_api_key="test-key",
        fastforex_base_url="https://fastforex.test",
        frankfurter_base_url="https://frankfurter.test",
        status_refresh_seconds=0,
        cache_ttl_seconds=300,
        max_targets=3,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def currencies():
    return CurrencyTable(CURRENCY_NAMES)


@pytest.fixture
def fetcher(clock):
    return FakeFetcher(clock)


@pytest.fixture
def converter(fetcher, currencies, clock):
    return CurrencyConverter(
        fetcher=fetcher,
        currencies=currencies,
        ttl_seconds=300,
        max_targets=3,
        clock=clock,
    )

"""
Rate Cache & Currency Converter

Holds a single RateSnapshot slot shared by every request handler and
refreshes it lazily once it is older than the TTL. Refreshing uses
double-checked locking so that concurrent readers of an expired slot
trigger exactly one upstream fetch:

    1. read the slot without locking; fresh → return it
    2. take the refresh lock
    3. re-check; another task may have refreshed meanwhile
    4. fetch, publish the new snapshot by reference swap, return it

A failed fetch leaves the slot as it was and propagates the error.

Conversions compose through the anchor currency:

    rate(base → target) = (1 / rate_of(base)) * rate_of(target)
"""

import asyncio
import logging
import time
from typing import Callable, Iterable

from lira.config import Settings, get_settings
from lira.currencies import CurrencyTable, canonical_code
from lira.models import (
    ConversionResult,
    NoTargets,
    RateSnapshot,
    TooManyTargets,
    UnknownCurrency,
)
from lira.providers.base import RateProviderError
from lira.providers.manager import RateFetcher

logger = logging.getLogger(__name__)

STATUS_RATE_FORMAT = "{:.10f}"


class CurrencyConverter:
    """
    Cached, anchor-relative currency conversion.

    Safe to share between any number of concurrent request handlers on
    one event loop.
    """

    def __init__(
        self,
        fetcher: RateFetcher,
        currencies: CurrencyTable,
        ttl_seconds: float | None = None,
        max_targets: int | None = None,
        clock: Callable[[], float] = time.monotonic,
        settings: Settings | None = None
    ):
        if ttl_seconds is None or max_targets is None:
            settings = settings or get_settings()
            ttl_seconds = settings.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
            max_targets = settings.max_targets if max_targets is None else max_targets

        self.fetcher = fetcher
        self.currencies = currencies
        self.ttl_seconds = ttl_seconds
        self.max_targets = max_targets
        self._clock = clock

        self._snapshot: RateSnapshot | None = None
        self._refresh_lock = asyncio.Lock()

    @property
    def anchor(self) -> str:
        return self.fetcher.anchor

    # === Cache ===

    @property
    def cached_snapshot(self) -> RateSnapshot | None:
        """Current slot content, fresh or not. Never fetches."""
        return self._snapshot

    def cache_age(self) -> float | None:
        snapshot = self._snapshot
        if snapshot is None:
            return None
        return snapshot.age(self._clock())

    def _is_fresh(self, snapshot: RateSnapshot | None) -> bool:
        return snapshot is not None and snapshot.age(self._clock()) <= self.ttl_seconds

    async def get_base_snapshot(self) -> RateSnapshot:
        """
        Return a fresh anchor-relative snapshot, fetching one if needed.

        Raises:
            RateProviderError: If a refresh was needed and failed
        """
        snapshot = self._snapshot
        if self._is_fresh(snapshot):
            return snapshot

        async with self._refresh_lock:
            snapshot = self._snapshot
            if self._is_fresh(snapshot):
                return snapshot

            start_time = time.monotonic()
            try:
                snapshot = await self.fetcher.fetch_snapshot()
            except RateProviderError as e:
                logger.warning(f"Rate refresh failed ({e.provider}/{e.error_type}): {e}")
                raise

            self._snapshot = snapshot
            latency_ms = int((time.monotonic() - start_time) * 1000)
            logger.info(
                f"🔄 Rate cache refreshed: {len(snapshot.rates)} rates "
                f"from {', '.join(snapshot.sources)} ({latency_ms}ms)"
            )
            return snapshot

    async def refresh(self) -> bool:
        """
        Proactively bring the cache up to date.

        Goes through get_base_snapshot, so a fresh slot is left alone and a
        concurrent reader-triggered refresh is never duplicated.
        """
        try:
            await self.get_base_snapshot()
        except RateProviderError:
            return False
        return True

    # === Currency table ===

    def is_supported(self, code: str) -> bool:
        return self.currencies.is_supported(code)

    def name_for(self, code: str) -> str:
        return self.currencies.name_for(code)

    def unknown_currency_codes(self) -> list[str]:
        """Codes in the cached snapshot that the name table doesn't know."""
        snapshot = self._snapshot
        if snapshot is None:
            return []
        return sorted(code for code in snapshot.rates if code not in self.currencies)

    def _validate(self, code: str) -> str:
        code = canonical_code(code)
        if not self.currencies.is_supported(code):
            raise UnknownCurrency(code)
        return code

    def _validate_targets(self, targets: Iterable[str]) -> list[str]:
        targets = list(targets)
        if not targets:
            raise NoTargets()
        if len(targets) > self.max_targets:
            raise TooManyTargets(len(targets), self.max_targets)
        return [self._validate(target) for target in targets]

    # === Conversion ===

    @staticmethod
    def _require_rate(snapshot: RateSnapshot, code: str) -> float:
        rate = snapshot.rate_of(code)
        if rate is None:
            raise UnknownCurrency(code, reason="no_rate")
        return rate

    def _convert_with(self, snapshot: RateSnapshot, base: str, target: str) -> ConversionResult:
        base_rate = self._require_rate(snapshot, base)
        target_rate = self._require_rate(snapshot, target)

        if base == target:
            rate = 1.0
        else:
            rate = (1.0 / base_rate) * target_rate

        return ConversionResult(
            base_currency=base,
            target_currency=target,
            conversion_rate=rate
        )

    async def convert(self, base: str, target: str) -> ConversionResult:
        """
        Rate such that amount_in_target = amount_in_base * rate.

        Raises:
            UnknownCurrency: If either code is unsupported or has no rate
            RateProviderError: If the cache needed a refresh and it failed
        """
        base = self._validate(base)
        target = self._validate(target)

        snapshot = await self.get_base_snapshot()
        return self._convert_with(snapshot, base, target)

    async def convert_many(self, base: str, targets: Iterable[str]) -> list[ConversionResult]:
        """
        Convert `base` into every target, all against the same snapshot.

        Fails as a whole on the first bad target; no partial results.
        """
        base = self._validate(base)
        targets = self._validate_targets(targets)

        snapshot = await self.get_base_snapshot()
        return [self._convert_with(snapshot, base, target) for target in targets]

    async def rates_for(self, base: str) -> tuple[RateSnapshot, dict[str, float]]:
        """
        Every cached currency re-expressed relative to `base`.

        Always requires a fresh snapshot.
        """
        base = self._validate(base)
        snapshot = await self.get_base_snapshot()

        base_rate = self._require_rate(snapshot, base)
        results = {code: rate / base_rate for code, rate in snapshot.rates.items()}
        results[self.anchor] = 1.0 / base_rate
        results[base] = 1.0
        return snapshot, dict(sorted(results.items()))

    # === Status ===

    async def _status_snapshot(self) -> RateSnapshot:
        try:
            return await self.get_base_snapshot()
        except RateProviderError as e:
            stale = self._snapshot
            if stale is None:
                raise
            logger.warning(
                f"Serving stale rates ({stale.age(self._clock()):.0f}s old) after refresh failure: {e}"
            )
            return stale

    async def status(self, base: str, targets: Iterable[str]) -> str:
        """
        "1 <baseName> is equal to <rate> <targetName>[, <rate> <targetName> ...]"

        Unlike the other operations this falls back to an expired snapshot
        when the refresh fails and one is still cached.
        """
        base = self._validate(base)
        targets = self._validate_targets(targets)

        snapshot = await self._status_snapshot()
        parts = [
            f"{STATUS_RATE_FORMAT.format(result.conversion_rate)} {self.name_for(result.target_currency)}"
            for result in (self._convert_with(snapshot, base, target) for target in targets)
        ]
        return f"1 {self.name_for(base)} is equal to {', '.join(parts)}"

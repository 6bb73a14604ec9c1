"""
Rate Fetcher with Ordered Merge

Providers are queried one after another in declared order. The first
provider to supply a currency wins; later providers only fill gaps.
The primary (first) provider is mandatory, the rest are best-effort.
"""

import logging
import time
from datetime import datetime, timezone

from lira.config import Settings, get_settings
from lira.models import RateSnapshot
from lira.providers.base import BaseRateProvider, RateProviderError
from lira.providers.fastforex import FastForexClient
from lira.providers.frankfurter import FrankfurterClient

logger = logging.getLogger(__name__)


class RateFetcher:
    """
    Produces merged anchor-relative RateSnapshots from an ordered provider list.
    """
    
    def __init__(
        self,
        providers: list[BaseRateProvider] | None = None,
        anchor: str | None = None,
        settings: Settings | None = None
    ):
        settings = settings or get_settings()
        if providers is None:
            providers = [FastForexClient(settings)]
            if settings.enable_frankfurter:
                providers.append(FrankfurterClient(settings))
        if not providers:
            raise ValueError("RateFetcher needs at least one provider")
        
        self.providers = providers
        self.anchor = (anchor or settings.anchor_currency).upper()
    
    @property
    def primary(self) -> BaseRateProvider:
        return self.providers[0]
    
    async def fetch_snapshot(self) -> RateSnapshot:
        """
        Fetch every provider in order and merge with first-wins precedence.
        
        Returns:
            A new RateSnapshot stamped when the last provider finished.
        
        Raises:
            RateProviderError: If the primary provider fails
        """
        merged: dict[str, float] = {}
        sources: list[str] = []
        updated: str | None = None
        
        for idx, client in enumerate(self.providers, start=1):
            name = client.PROVIDER_NAME
            start_time = time.monotonic()
            
            try:
                result = await client.fetch_rates(self.anchor)
            except RateProviderError as e:
                latency_ms = int((time.monotonic() - start_time) * 1000)
                if idx == 1:
                    logger.error(f"❌ {name} (primary) failed after {latency_ms}ms: {e}")
                    raise
                logger.warning(
                    f"❌ {name} failed after {latency_ms}ms, skipping its rates: {e}"
                )
                continue
            
            latency_ms = int((time.monotonic() - start_time) * 1000)
            if idx == 1:
                updated = result.updated
            added = 0
            for code, rate in result.rates.items():
                if code not in merged:
                    merged[code] = rate
                    added += 1
            sources.append(name)
            
            logger.info(
                f"✅ {name} ({idx}/{len(self.providers)}) {latency_ms}ms: "
                f"{len(result.rates)} rates, {added} new"
            )
        
        return RateSnapshot(
            base=self.anchor,
            rates=merged,
            fetched_at=time.monotonic(),
            fetched_at_utc=datetime.now(timezone.utc),
            updated=updated,
            sources=tuple(sources),
        )
    
    async def health_check_all(self) -> dict[str, bool]:
        """Check health status of all providers."""
        results: dict[str, bool] = {}
        
        for client in self.providers:
            results[client.PROVIDER_NAME] = await client.health_check()
        
        return results

"""
Base Rate Provider Interface

Every provider returns a plain `code -> rate` mapping relative to the
requested base currency. Anything that goes wrong upstream surfaces as
RateProviderError.
"""

import logging
import math
from abc import ABC, abstractmethod
from typing import Any, NamedTuple

import httpx

logger = logging.getLogger(__name__)


class RateProviderError(Exception):
    """Upstream unreachable, non-2xx, or undecodable payload."""
    
    def __init__(
        self,
        message: str,
        provider: str,
        error_type: str = "UNKNOWN",
        details: dict[str, Any] | None = None
    ):
        super().__init__(message)
        self.provider = provider
        self.error_type = error_type
        self.details = details or {}


class ProviderRates(NamedTuple):
    """One provider response: rates plus the upstream-reported update time."""
    rates: dict[str, float]
    updated: str | None = None


class BaseRateProvider(ABC):
    """
    Abstract base class for exchange rate providers.
    
    Subclasses implement `fetch_rates`; the HTTP plumbing and error
    translation live in `_get_json`.
    """
    
    PROVIDER_NAME: str = "base"
    
    def __init__(
        self,
        base_url: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
    
    @abstractmethod
    async def fetch_rates(self, base: str) -> ProviderRates:
        """
        Fetch the latest rates relative to `base`.
        
        Args:
            base: Uppercase currency code (e.g., "USD")
        
        Returns:
            ProviderRates mapping uppercase currency code to rate, where
            1 unit of base = rate units of code, and the update time
            the provider reported for them.
        
        Raises:
            RateProviderError: If fetching or decoding fails
        """
    
    @abstractmethod
    async def health_check(self) -> bool:
        """Check if provider is reachable and responding."""
    
    def _client(self, timeout: float | None = None) -> httpx.AsyncClient:
        seconds = timeout or self.timeout
        return httpx.AsyncClient(
            timeout=httpx.Timeout(seconds, connect=seconds),
            transport=self.transport
        )
    
    async def _get_json(self, path: str, params: dict[str, str]) -> dict[str, Any]:
        """GET `path` and decode a JSON object, translating every failure."""
        try:
            async with self._client() as client:
                response = await client.get(f"{self.base_url}{path}", params=params)
                response.raise_for_status()
                data = response.json()
        
        except httpx.HTTPStatusError as e:
            raise RateProviderError(
                message=f"HTTP error: {e.response.status_code}",
                provider=self.PROVIDER_NAME,
                error_type=f"HTTP_{e.response.status_code}",
                details={"path": path}
            ) from e
        
        except httpx.TimeoutException as e:
            raise RateProviderError(
                message="Request timeout",
                provider=self.PROVIDER_NAME,
                error_type="TIMEOUT",
                details={"timeout_seconds": self.timeout}
            ) from e
        
        except httpx.RequestError as e:
            raise RateProviderError(
                message=f"Request failed: {e}",
                provider=self.PROVIDER_NAME,
                error_type="REQUEST_ERROR",
                details={"error": str(e)}
            ) from e
        
        except ValueError as e:
            raise RateProviderError(
                message="Response is not valid JSON",
                provider=self.PROVIDER_NAME,
                error_type="PARSE_ERROR"
            ) from e
        
        if not isinstance(data, dict):
            raise RateProviderError(
                message="Invalid response: expected a JSON object",
                provider=self.PROVIDER_NAME,
                error_type="PARSE_ERROR",
                details={"response": data}
            )
        return data
    
    def _extract_rates(self, data: dict[str, Any], key: str) -> dict[str, float]:
        """
        Pull the `code -> rate` mapping nested under `key`.
        
        A missing or non-object `key` fails the whole provider. Individual
        entries that are not finite positive numbers are dropped.
        """
        raw = data.get(key)
        if not isinstance(raw, dict):
            raise RateProviderError(
                message=f"Invalid response: missing '{key}' field",
                provider=self.PROVIDER_NAME,
                error_type="PARSE_ERROR",
                details={"keys": sorted(data.keys())}
            )
        
        rates: dict[str, float] = {}
        rejected: list[str] = []
        for code, value in raw.items():
            rate = self._to_rate(value)
            if rate is None:
                rejected.append(str(code))
                continue
            rates[str(code).upper()] = rate
        
        if rejected:
            logger.warning(
                f"{self.PROVIDER_NAME} returned unusable rates for: {', '.join(sorted(rejected))}"
            )
        return rates
    
    @staticmethod
    def _to_rate(value: Any) -> float | None:
        """Finite, strictly positive float, or None."""
        if isinstance(value, bool):
            return None
        try:
            rate = float(value)
        except (TypeError, ValueError):
            return None
        if not math.isfinite(rate) or rate <= 0:
            return None
        return rate

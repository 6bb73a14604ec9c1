"""
Supported Currency Table

Loaded once at startup from a JSON file of the form
{"currencies": {"USD": "US Dollar", ...}}. Membership decides whether a
code is accepted at all; the display names feed the status text.
"""

import json
import logging
from pathlib import Path

from lira.models import ConfigError

logger = logging.getLogger(__name__)


def canonical_code(code: str) -> str:
    """Currency codes are case-insensitive at the boundary."""
    return code.strip().upper()


class CurrencyTable:
    """Read-only code → display name lookup."""
    
    def __init__(self, names: dict[str, str]):
        self._names = {canonical_code(code): name for code, name in names.items()}
    
    @classmethod
    def from_file(cls, path: Path | str) -> "CurrencyTable":
        """
        Load the table from `path`.
        
        Raises:
            ConfigError: If the file is missing or malformed
        """
        path = Path(path)
        try:
            with open(path, encoding="utf-8") as f:
                payload = json.load(f)
        except FileNotFoundError as e:
            raise ConfigError(f"Currency file not found: {path}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Currency file is not valid JSON: {path}: {e}") from e
        
        names = payload.get("currencies") if isinstance(payload, dict) else None
        if not isinstance(names, dict) or not names:
            raise ConfigError(f"Currency file has no 'currencies' mapping: {path}")
        
        table = cls({str(code): str(name) for code, name in names.items()})
        logger.info(f"Loaded {len(table)} supported currencies from {path}")
        return table
    
    def __len__(self) -> int:
        return len(self._names)
    
    def __contains__(self, code: str) -> bool:
        return self.is_supported(code)
    
    def is_supported(self, code: str) -> bool:
        return canonical_code(code) in self._names
    
    def name_for(self, code: str) -> str:
        """Display name, or the code itself when the table has none."""
        code = canonical_code(code)
        return self._names.get(code, code)

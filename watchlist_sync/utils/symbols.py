"""
Symbol normalization.

Storage symbols are upper-case and carry no default market suffix
("RELIANCE"); provider symbols carry the suffix the provider expects
("RELIANCE.NS"). Both conversions are idempotent.
"""
import re
from typing import Mapping, Optional

from watchlist_sync.errors import ValidationError

SYMBOL_PATTERN = re.compile(r"^[A-Z0-9^][A-Z0-9&.\-^=_]{0,31}$")


def to_storage_symbol(raw, default_suffix: str = "") -> str:
    """
    Validate caller input and return the storage form of a symbol.

    Raises:
        ValidationError: if the symbol is missing or malformed
    """
    if not isinstance(raw, str) or not raw.strip():
        raise ValidationError("Symbol is required")

    symbol = raw.strip().upper()
    suffix = (default_suffix or "").upper()
    while suffix and symbol.endswith(suffix) and len(symbol) > len(suffix):
        symbol = symbol[:-len(suffix)]

    if not SYMBOL_PATTERN.match(symbol):
        raise ValidationError(f"Invalid symbol: {raw!r}")
    return symbol


def to_provider_symbol(symbol: str, default_suffix: str = "") -> str:
    """Append the default market suffix unless the symbol already has one."""
    symbol = symbol.strip().upper()
    if not default_suffix or "." in symbol or symbol.startswith("^"):
        return symbol
    return f"{symbol}{default_suffix.upper()}"


def exchange_for(provider_symbol: str, exchange_suffixes: Mapping[str, str]) -> Optional[str]:
    """Map a provider symbol's suffix to an exchange code ('.NS' -> 'NSE')."""
    upper = provider_symbol.upper()
    for suffix, exchange in exchange_suffixes.items():
        if upper.endswith(suffix.upper()):
            return exchange
    return None


def strip_suffix(provider_symbol: str, exchange_suffixes: Mapping[str, str]) -> str:
    """Drop a known exchange suffix ('TCS.BO' -> 'TCS')."""
    upper = provider_symbol.upper()
    for suffix in exchange_suffixes:
        if upper.endswith(suffix.upper()):
            return upper[:-len(suffix)]
    return upper

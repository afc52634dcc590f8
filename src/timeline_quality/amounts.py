"""Currency amount extraction shared by missing-info and conflict detection."""

import math
from dataclasses import dataclass
from typing import Optional

from .heuristics import HeuristicsConfig, default_heuristics


@dataclass(frozen=True)
class ParsedAmount:
    currency: Optional[str]
    value: float
    raw: str


def parse_amount(text: str, heuristics: Optional[HeuristicsConfig] = None) -> Optional[ParsedAmount]:
    """
    Extract the first currency amount from ``text``.

    Symbols map to codes via the heuristics symbol table; an unmapped
    symbol leaves the currency unknown.
    """
    heuristics = heuristics or default_heuristics()
    match = heuristics.amount_pattern.search(text or "")
    if not match:
        return None

    symbol, symbol_value, code_value, code = match.groups()
    raw_number = symbol_value or code_value
    if not raw_number:
        return None
    try:
        value = float(raw_number.replace(",", ""))
    except ValueError:
        return None
    if not math.isfinite(value):
        return None

    if symbol:
        currency = heuristics.currency_symbols.get(symbol)
    else:
        currency = code.upper() if code else None
    return ParsedAmount(currency=currency, value=value, raw=match.group(0))


def has_amount_pattern(text: str, heuristics: Optional[HeuristicsConfig] = None) -> bool:
    heuristics = heuristics or default_heuristics()
    return heuristics.amount_pattern.search(text or "") is not None

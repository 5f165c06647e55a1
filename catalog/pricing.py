"""
Price arithmetic shared by the price projection and the price writer.

Prices are stored net. Customer groups flagged tax_input show and accept
gross prices, converted with the product's tax rate.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

CENT = Decimal("0.01")


def _decimal(value) -> Decimal:
    return Decimal(str(value))


def round_price(value: Optional[float]) -> Optional[float]:
    """Round half up to two decimals"""
    if value is None:
        return None
    return float(_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP))


def to_gross(net: Optional[float], tax_rate: Optional[float]) -> Optional[float]:
    """net * (100 + tax) / 100, rounded to cents"""
    if net is None:
        return None
    rate = _decimal(tax_rate or 0)
    gross = _decimal(net) * (Decimal(100) + rate) / Decimal(100)
    return float(gross.quantize(CENT, rounding=ROUND_HALF_UP))


def to_net(gross: Optional[float], tax_rate: Optional[float]) -> Optional[float]:
    """Inverse of to_gross, unrounded so gross values survive a round trip"""
    if gross is None:
        return None
    rate = _decimal(tax_rate or 0)
    return float(_decimal(gross) * Decimal(100) / (Decimal(100) + rate))

"""
Core math modules для auction-match

Точные десятичные примитивы: квантование цены в тики и обратно.
"""

# Tick Quantization
from src.core.math.tick_quantization import (
    TICK_ROUNDING,
    decimal_scale,
    format_price,
    parse_decimal,
    price_to_ticks,
    ticks_to_price,
    validate_tick,
)

__all__ = [
    # Tick Quantization: Constants
    "TICK_ROUNDING",
    # Tick Quantization: Parsing
    "parse_decimal",
    "decimal_scale",
    # Tick Quantization: Conversion
    "validate_tick",
    "price_to_ticks",
    "ticks_to_price",
    "format_price",
]

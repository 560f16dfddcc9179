"""
Domain models and value objects.

Contains the auction domain entities: Order, PriceLevel, InstrumentGroup,
EquilibriumResult.
"""

from src.core.domain.auction import EquilibriumResult, InstrumentGroup, PriceLevel
from src.core.domain.order import Order, Side

__all__ = [
    # Order model
    "Order",
    "Side",
    # Auction value objects
    "PriceLevel",
    "InstrumentGroup",
    "EquilibriumResult",
]

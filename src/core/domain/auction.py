"""
Auction — Value objects равновесной цены

- PriceLevel: агрегат объёмов на одном квантованном уровне цены
- InstrumentGroup: все заявки одного инструмента в порядке поступления
- EquilibriumResult: результат расчёта для одного инструмента
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Tuple

from .order import Order


@dataclass(frozen=True)
class PriceLevel:
    """Уровень цены (в тиках) с суммарными объёмами покупки и продажи."""

    price_ticks: int
    buy_volume: int = 0
    sell_volume: int = 0


@dataclass(frozen=True)
class InstrumentGroup:
    """
    Заявки одного инструмента.

    decimal_scale — число знаков после запятой в цене первой строки
    инструмента. Используется только для форматирования вывода.
    """

    instrument_id: str
    orders: Tuple[Order, ...]
    decimal_scale: int

    @property
    def order_count(self) -> int:
        return len(self.orders)


@dataclass(frozen=True)
class EquilibriumResult:
    """Равновесная цена инструмента (price=None — пересечения нет)."""

    instrument_id: str
    price: Optional[Decimal]
    decimal_scale: int = 1

    # Диагностика
    match_volume: int = 0
    residual_volume: int = 0

    @property
    def has_match(self) -> bool:
        return self.price is not None

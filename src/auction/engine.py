"""
Equilibrium Price Engine — равновесная цена call-аукциона

Чистая функция: заявки одного инструмента → цена или "нет сделки".
Без побочных эффектов и без зависимости от других инструментов.

Алгоритм:
1. Квантование цен в тики (round-to-nearest), агрегация в PriceLevel.
2. highest_bid / lowest_ask по исходным ценам. Нет покупок, нет продаж
   или highest_bid < lowest_ask → нет сделки.
3. Проход по уровням сверху вниз:
       accum_buy(p)  = Σ buy_volume на уровнях ≥ p
       accum_sell(p) = Σ sell_volume на уровнях ≤ p
                       (общий объём продаж минус пройденные уровни)
       match(p)    = min(accum_buy, accum_sell)
       residual(p) = |accum_buy − accum_sell|
4. Выбор: max match → min residual → max price (явный ключ сравнения,
   не зависит от порядка обхода).
5. match ≤ 0 → нет сделки, иначе цена = ticks × tick.

Плотная сетка тиков не строится. Между соседними наблюдаемыми уровнями
accum_buy и accum_sell постоянны, поэтому весь промежуток представлен
одним кандидатом: верхним незанятым тиком промежутка (accum_buy берётся
с уровня выше, accum_sell с уровня ниже). Это даёт тот же результат,
что и полный перебор тиков от lowest_ask до highest_bid.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from src.core.domain.auction import EquilibriumResult, InstrumentGroup, PriceLevel
from src.core.domain.order import Order
from src.core.math.tick_quantization import price_to_ticks, ticks_to_price

logger = logging.getLogger(__name__)


# =============================================================================
# DATA CLASSES
# =============================================================================


@dataclass(frozen=True)
class OrderBookSummary:
    """Агрегированная книга заявок одного инструмента."""

    # Уровни по убыванию цены
    levels: Tuple[PriceLevel, ...]
    highest_bid: Optional[Decimal]
    lowest_ask: Optional[Decimal]
    total_buy_volume: int
    total_sell_volume: int

    @property
    def crosses(self) -> bool:
        """Есть обе стороны и highest_bid >= lowest_ask."""
        if self.highest_bid is None or self.lowest_ask is None:
            return False
        return self.highest_bid >= self.lowest_ask


@dataclass(frozen=True)
class LevelEvaluation:
    """Накопленные объёмы в точке цены."""

    price_ticks: int
    accum_buy: int
    accum_sell: int

    @property
    def match_volume(self) -> int:
        return min(self.accum_buy, self.accum_sell)

    @property
    def residual_volume(self) -> int:
        return abs(self.accum_buy - self.accum_sell)

    def selection_key(self) -> Tuple[int, int, int]:
        """max match → min residual → max price"""
        return (self.match_volume, -self.residual_volume, self.price_ticks)


# =============================================================================
# AGGREGATION
# =============================================================================


def aggregate_orders(orders: Iterable[Order], tick: Decimal) -> OrderBookSummary:
    """
    Квантование и агрегация заявок по уровням цены.

    Args:
        orders: заявки одного инструмента
        tick: тик инструмента

    Returns:
        OrderBookSummary с уровнями по убыванию цены
    """
    buy_levels: Dict[int, int] = defaultdict(int)
    sell_levels: Dict[int, int] = defaultdict(int)
    highest_bid: Optional[Decimal] = None
    lowest_ask: Optional[Decimal] = None

    for order in orders:
        price_ticks = price_to_ticks(order.price, tick)
        if order.is_buy:
            buy_levels[price_ticks] += order.volume
            if highest_bid is None or order.price > highest_bid:
                highest_bid = order.price
        else:
            sell_levels[price_ticks] += order.volume
            if lowest_ask is None or order.price < lowest_ask:
                lowest_ask = order.price

    prices = sorted(buy_levels.keys() | sell_levels.keys(), reverse=True)
    levels = tuple(
        PriceLevel(
            price_ticks=p,
            buy_volume=buy_levels.get(p, 0),
            sell_volume=sell_levels.get(p, 0),
        )
        for p in prices
    )

    return OrderBookSummary(
        levels=levels,
        highest_bid=highest_bid,
        lowest_ask=lowest_ask,
        total_buy_volume=sum(buy_levels.values()),
        total_sell_volume=sum(sell_levels.values()),
    )


def evaluate_price_levels(levels: Sequence[PriceLevel]) -> List[LevelEvaluation]:
    """
    Накопленные объёмы для каждого уровня и каждого промежутка между уровнями.

    Args:
        levels: уровни по убыванию цены

    Returns:
        Оценки по убыванию цены
    """
    accum_buy = 0
    accum_sell = sum(level.sell_volume for level in levels)
    evaluations: List[LevelEvaluation] = []

    previous_ticks: Optional[int] = None
    for level in levels:
        if previous_ticks is not None and previous_ticks <= level.price_ticks:
            raise ValueError("price levels must be strictly descending")

        # Незанятые тики между уровнями
        if previous_ticks is not None and previous_ticks - 1 > level.price_ticks:
            evaluations.append(
                LevelEvaluation(
                    price_ticks=previous_ticks - 1,
                    accum_buy=accum_buy,
                    accum_sell=accum_sell,
                )
            )

        accum_buy += level.buy_volume
        evaluations.append(
            LevelEvaluation(
                price_ticks=level.price_ticks,
                accum_buy=accum_buy,
                accum_sell=accum_sell,
            )
        )
        accum_sell -= level.sell_volume
        previous_ticks = level.price_ticks

    return evaluations


def select_best_evaluation(
    evaluations: Iterable[LevelEvaluation],
) -> Optional[LevelEvaluation]:
    """Лучшая точка по ключу (match, -residual, price) или None."""
    return max(evaluations, key=LevelEvaluation.selection_key, default=None)


# =============================================================================
# EQUILIBRIUM PRICE
# =============================================================================


def find_equilibrium(
    orders: Sequence[Order], tick: Decimal
) -> Tuple[Optional[Decimal], Optional[LevelEvaluation]]:
    """
    Равновесная цена с диагностикой выбранной точки.

    Returns:
        (price, evaluation): price=None если сделки нет
    """
    if not orders:
        return None, None

    book = aggregate_orders(orders, tick)
    if not book.crosses:
        return None, None

    best = select_best_evaluation(evaluate_price_levels(book.levels))
    if best is None or best.match_volume <= 0:
        return None, best

    return ticks_to_price(best.price_ticks, tick), best


def compute_equilibrium_price(orders: Sequence[Order], tick: Decimal) -> Optional[Decimal]:
    """
    Равновесная цена call-аукциона.

    Args:
        orders: все заявки ровно одного инструмента
        tick: тик инструмента

    Returns:
        Цена или None (нет пересечения)

    Examples:
        >>> compute_equilibrium_price([
        ...     Order(instrument_id="IF2412", side="buy", price=Decimal("3973.4"), volume=3),
        ...     Order(instrument_id="IF2412", side="sell", price=Decimal("3973.2"), volume=2),
        ... ], Decimal("0.2"))
        Decimal('3973.4')
    """
    price, _ = find_equilibrium(orders, tick)
    return price


def compute_equilibrium(group: InstrumentGroup, tick: Decimal) -> EquilibriumResult:
    """
    Расчёт EquilibriumResult для группы инструмента.

    Raises:
        ValueError: Если в группе заявки другого инструмента
    """
    for order in group.orders:
        if order.instrument_id != group.instrument_id:
            raise ValueError(
                f"order for {order.instrument_id!r} in group {group.instrument_id!r}"
            )

    price, best = find_equilibrium(group.orders, tick)
    result = EquilibriumResult(
        instrument_id=group.instrument_id,
        price=price,
        decimal_scale=group.decimal_scale,
        match_volume=best.match_volume if price is not None else 0,
        residual_volume=best.residual_volume if price is not None else 0,
    )
    logger.debug(
        "%s: price=%s match=%d residual=%d (%d orders, tick %s)",
        group.instrument_id,
        price,
        result.match_volume,
        result.residual_volume,
        group.order_count,
        tick,
    )
    return result

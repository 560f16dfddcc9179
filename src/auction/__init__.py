"""Auction — расчёт равновесной цены call-аукциона по инструментам.

- Фаза 1: приём потока заявок и группировка по инструментам
- Фаза 2: параллельный расчёт цены по замороженным группам
- Сборка результатов в порядке первого появления
"""

from .config import AuctionConfig, ConfigError, load_auction_config
from .engine import compute_equilibrium, compute_equilibrium_price
from .errors import (
    AuctionRunError,
    FieldInvalid,
    OrderRowError,
    RowMalformed,
    SinkUnavailable,
    SourceUnavailable,
)
from .grouper import FrozenGrouping, InstrumentGrouper, SourceRow
from .pipeline import AuctionPipeline, AuctionRunReport, compute_equilibrium_prices
from .scheduler import FanOutScheduler
from .tick_resolver import TickResolver

__all__ = [
    "AuctionConfig",
    "ConfigError",
    "load_auction_config",
    "compute_equilibrium",
    "compute_equilibrium_price",
    "AuctionRunError",
    "OrderRowError",
    "RowMalformed",
    "FieldInvalid",
    "SourceUnavailable",
    "SinkUnavailable",
    "InstrumentGrouper",
    "FrozenGrouping",
    "SourceRow",
    "AuctionPipeline",
    "AuctionRunReport",
    "compute_equilibrium_prices",
    "FanOutScheduler",
    "TickResolver",
]

"""
Tick Resolver — минимальный шаг цены по идентификатору инструмента

Код продукта = ведущие латинские буквы идентификатора (не более 2,
до первого не-буквенного символа): "IF2306" → "IF", "T2412" → "T".
Таблица продукт → тик передаётся извне; при отсутствии кода
используется default_tick.

Тик инструмента определяется один раз и кэшируется: в рамках одного
запуска тик инструмента постоянен.
"""

import logging
import threading
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Final, Mapping, Optional

from src.core.math.tick_quantization import validate_tick

logger = logging.getLogger(__name__)


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Максимальная длина кода продукта
PRODUCT_CODE_MAX_LEN: Final[int] = 2

# Тик по умолчанию (индексные фьючерсы CFFEX)
DEFAULT_TICK: Final[Decimal] = Decimal("0.2")

# Таблица тиков продуктов CFFEX
CFFEX_PRODUCT_TICKS: Final[Mapping[str, Decimal]] = MappingProxyType(
    {
        "IF": Decimal("0.2"),
        "IH": Decimal("0.2"),
        "IC": Decimal("0.2"),
        "IM": Decimal("0.2"),
        "TS": Decimal("0.002"),
        "TF": Decimal("0.005"),
        "T": Decimal("0.005"),
        "TL": Decimal("0.01"),
    }
)


def extract_product_code(instrument_id: str) -> str:
    """
    Извлечение кода продукта из идентификатора контракта.

    Examples:
        >>> extract_product_code("IF2306")
        'IF'
        >>> extract_product_code("T2412")
        'T'
        >>> extract_product_code("2412")
        ''
    """
    code = []
    for ch in instrument_id[:PRODUCT_CODE_MAX_LEN]:
        if not ("A" <= ch <= "Z" or "a" <= ch <= "z"):
            break
        code.append(ch)
    return "".join(code)


class TickResolver:
    """
    Определение тика инструмента по таблице продуктов.

    Кэш заполняется при первом обращении к инструменту; повторные
    обращения возвращают то же значение. Потокобезопасен.
    """

    def __init__(
        self,
        product_ticks: Optional[Mapping[str, Decimal]] = None,
        default_tick: Decimal = DEFAULT_TICK,
    ):
        """
        Args:
            product_ticks: код продукта → тик (default: CFFEX_PRODUCT_TICKS)
            default_tick: тик для неизвестных продуктов
        """
        table = CFFEX_PRODUCT_TICKS if product_ticks is None else product_ticks
        for code, tick in table.items():
            try:
                validate_tick(tick)
            except ValueError as e:
                raise ValueError(f"product {code!r}: {e}") from None
        validate_tick(default_tick)

        self._product_ticks: Mapping[str, Decimal] = MappingProxyType(dict(table))
        self._default_tick = default_tick
        self._resolved: Dict[str, Decimal] = {}
        self._lock = threading.Lock()

    @property
    def product_ticks(self) -> Mapping[str, Decimal]:
        return self._product_ticks

    @property
    def default_tick(self) -> Decimal:
        return self._default_tick

    def lookup(self, instrument_id: str) -> Decimal:
        """Тик по таблице без кэширования."""
        code = extract_product_code(instrument_id)
        tick = self._product_ticks.get(code)
        if tick is None:
            logger.debug("No tick for product %r (%s), using default %s", code, instrument_id, self._default_tick)
            return self._default_tick
        return tick

    def resolve(self, instrument_id: str) -> Decimal:
        """
        Тик инструмента (один раз на инструмент).

        Args:
            instrument_id: идентификатор контракта

        Returns:
            Положительный тик
        """
        tick = self._resolved.get(instrument_id)
        if tick is not None:
            return tick

        with self._lock:
            tick = self._resolved.get(instrument_id)
            if tick is None:
                tick = self.lookup(instrument_id)
                self._resolved[instrument_id] = tick
        return tick


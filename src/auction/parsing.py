"""
Order Row Parsing — разбор и валидация строки заявки

Формат строки: instrumentID,direction,price,volume
- direction: "0" (покупка) или "1" (продажа)
- price: десятичное число (парсится напрямую в Decimal)
- volume: целое неотрицательное

Ошибочные строки не прерывают поток: вызывающий код получает
OrderRowError и учитывает его в RowErrorReport.
"""

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Final, List, NamedTuple, Optional, Sequence

from pydantic import ValidationError

from src.auction.errors import FieldInvalid, OrderRowError, RowMalformed
from src.core.domain.order import Order, Side
from src.core.math.tick_quantization import decimal_scale, parse_decimal

logger = logging.getLogger(__name__)


# =============================================================================
# КОНСТАНТЫ
# =============================================================================

ORDER_ROW_FIELDS: Final[int] = 4

# Сколько ошибок хранить в отчёте для диагностики
ROW_ERROR_SAMPLES_DEFAULT: Final[int] = 20


class ParsedOrderRow(NamedTuple):
    """Заявка + масштаб цены исходной строки."""

    order: Order
    decimal_scale: int


# =============================================================================
# PARSING
# =============================================================================


def _parse_volume(text: str) -> int:
    stripped = text.strip()
    try:
        volume = int(stripped)
    except ValueError:
        raise ValueError(f"volume must be an integer, got {text!r}") from None
    if volume < 0:
        raise ValueError(f"volume must be non-negative, got {volume}")
    return volume


def parse_order_row(
    fields: Sequence[str], line_number: Optional[int] = None
) -> ParsedOrderRow:
    """
    Разбор одной строки входного потока.

    Args:
        fields: поля строки (instrumentID, direction, price, volume)
        line_number: номер строки для диагностики

    Returns:
        ParsedOrderRow(order, decimal_scale)

    Raises:
        RowMalformed: Если число полей != 4
        FieldInvalid: Если direction/price/volume/instrumentID невалидны
    """
    if len(fields) != ORDER_ROW_FIELDS:
        raise RowMalformed(
            f"expected {ORDER_ROW_FIELDS} fields, got {len(fields)}",
            line_number=line_number,
            row=fields,
        )

    instrument_id, direction, price_text, volume_text = fields

    try:
        side = Side.from_direction_code(direction)
        price = parse_decimal(price_text)
        volume = _parse_volume(volume_text)
        order = Order(instrument_id=instrument_id, side=side, price=price, volume=volume)
    except ValidationError as e:
        reasons = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise FieldInvalid(reasons, line_number=line_number, row=fields) from e
    except ValueError as e:
        raise FieldInvalid(str(e), line_number=line_number, row=fields) from e

    return ParsedOrderRow(order=order, decimal_scale=decimal_scale(price))


# =============================================================================
# ROW ERROR REPORT
# =============================================================================


@dataclass
class RowErrorReport:
    """
    Агрегированный отчёт по отброшенным строкам.

    Первые `max_logged` ошибок логируются по одной (WARNING),
    остальные только считаются.
    """

    max_logged: int = ROW_ERROR_SAMPLES_DEFAULT
    counts: Counter = field(default_factory=Counter)
    samples: List[OrderRowError] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())

    def record(self, error: OrderRowError) -> None:
        """Учёт ошибки строки."""
        self.counts[error.kind] += 1
        if len(self.samples) < self.max_logged:
            self.samples.append(error)
            logger.warning("Dropped order row (%s): %s", error.kind, error)

    def log_summary(self) -> None:
        if not self.counts:
            return
        suppressed = self.total - len(self.samples)
        logger.warning(
            "Dropped %d order rows (%s)%s",
            self.total,
            ", ".join(f"{kind}={n}" for kind, n in sorted(self.counts.items())),
            f", {suppressed} not logged individually" if suppressed > 0 else "",
        )

"""
Instrument Grouper — фаза 1: приём потока и группировка по инструментам

Поток строк читается ровно один раз, последовательно. Заявки инструмента
могут быть разбросаны по всему потоку, поэтому группы считаются полными
только после окончания потока.

Для каждой валидной заявки:
- новый инструмент добавляется в конец упорядоченного индекса,
  фиксируется масштаб цены первой строки;
- заявка добавляется в группу инструмента.

По окончании потока индекс замораживается (FrozenGrouping) и дальше
только читается.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Sequence, Union

from src.auction.errors import OrderRowError
from src.auction.ordered_index import OrderedInstrumentIndex
from src.auction.parsing import ParsedOrderRow, RowErrorReport, parse_order_row
from src.core.domain.auction import InstrumentGroup
from src.core.domain.order import Order

logger = logging.getLogger(__name__)


class SourceRow(NamedTuple):
    """Строка источника с номером строки файла."""

    line_number: int
    fields: Sequence[str]


RawRow = Union[SourceRow, Sequence[str]]


@dataclass(frozen=True)
class FrozenGrouping:
    """Результат фазы 1 (read-only)."""

    index: OrderedInstrumentIndex[str, InstrumentGroup]
    row_errors: RowErrorReport
    order_count: int
    cancelled: bool = False

    @property
    def instrument_count(self) -> int:
        return len(self.index)


class _GroupBuilder:
    __slots__ = ("orders", "decimal_scale")

    def __init__(self, decimal_scale: int):
        self.orders: List[Order] = []
        self.decimal_scale = decimal_scale


class InstrumentGrouper:
    """
    Группировка заявок по инструментам с сохранением порядка появления.

    add_row() защищён мьютексом: несколько производителей могут подавать
    строки параллельно, записи в индекс сериализуются. consume() — обычный
    путь с одним писателем.
    """

    def __init__(self, row_errors: Optional[RowErrorReport] = None):
        self._builders: OrderedInstrumentIndex[str, _GroupBuilder] = OrderedInstrumentIndex()
        self._row_errors = row_errors if row_errors is not None else RowErrorReport()
        self._order_count = 0
        self._rows_seen = 0
        self._lock = threading.Lock()
        self._result: Optional[FrozenGrouping] = None

    @property
    def order_count(self) -> int:
        return self._order_count

    def add_row(self, row: RawRow) -> Optional[Order]:
        """
        Разбор и добавление одной строки.

        Returns:
            Order или None, если строка отброшена
        """
        with self._lock:
            if self._result is not None:
                raise RuntimeError("grouping already finished")

            self._rows_seen += 1
            if isinstance(row, SourceRow):
                line_number, fields = row.line_number, row.fields
            else:
                line_number, fields = self._rows_seen, row

            try:
                parsed = parse_order_row(fields, line_number=line_number)
            except OrderRowError as e:
                self._row_errors.record(e)
                return None

            self._append(parsed)
            return parsed.order

    def _append(self, parsed: ParsedOrderRow) -> None:
        instrument_id = parsed.order.instrument_id
        builder = self._builders.get(instrument_id)
        if builder is None:
            builder = _GroupBuilder(parsed.decimal_scale)
            self._builders.add(instrument_id, builder)
        builder.orders.append(parsed.order)
        self._order_count += 1

    def consume(
        self,
        rows: Iterable[RawRow],
        cancel_event: Optional[threading.Event] = None,
    ) -> FrozenGrouping:
        """
        Полное чтение потока и заморозка результата.

        Args:
            rows: строки источника
            cancel_event: при установке чтение прекращается, уже прочитанная
                часть замораживается как обычно

        Returns:
            FrozenGrouping
        """
        cancelled = False
        for row in rows:
            if cancel_event is not None and cancel_event.is_set():
                cancelled = True
                logger.info("Ingestion cancelled after %d rows", self._rows_seen)
                break
            self.add_row(row)

        return self.finish(cancelled=cancelled)

    def finish(self, cancelled: bool = False) -> FrozenGrouping:
        """Заморозка групп: дальнейшие записи запрещены."""
        with self._lock:
            if self._result is not None:
                return self._result

            self._builders.freeze()
            index: OrderedInstrumentIndex[str, InstrumentGroup] = OrderedInstrumentIndex()
            for instrument_id, builder in self._builders.items():
                index.add(
                    instrument_id,
                    InstrumentGroup(
                        instrument_id=instrument_id,
                        orders=tuple(builder.orders),
                        decimal_scale=builder.decimal_scale,
                    ),
                )

            self._row_errors.log_summary()
            logger.info(
                "Grouped %d orders into %d instruments (%d rows read)",
                self._order_count,
                len(index),
                self._rows_seen,
            )
            self._result = FrozenGrouping(
                index=index.freeze(),
                row_errors=self._row_errors,
                order_count=self._order_count,
                cancelled=cancelled,
            )
            return self._result

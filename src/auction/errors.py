"""
Errors — таксономия ошибок расчёта

Row-level (не фатальные, строка отбрасывается, поток продолжается):
- RowMalformed: неверное число полей
- FieldInvalid: direction/price/volume не парсятся или вне допустимых значений

Run-level (фатальные для всего запуска):
- SourceUnavailable: входной файл не открывается/не читается
- SinkUnavailable: результат не записывается
"""

from typing import Optional, Sequence


class OrderRowError(ValueError):
    """Ошибка одной строки входного потока."""

    kind = "row_error"

    def __init__(
        self,
        message: str,
        line_number: Optional[int] = None,
        row: Optional[Sequence[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.line_number = line_number
        self.row = tuple(row) if row is not None else None

    def __str__(self) -> str:
        if self.line_number is None:
            return self.message
        return f"line {self.line_number}: {self.message}"


class RowMalformed(OrderRowError):
    """Неверное число полей в строке."""

    kind = "row_malformed"


class FieldInvalid(OrderRowError):
    """Значение поля не парсится или вне допустимого диапазона."""

    kind = "field_invalid"


class AuctionRunError(Exception):
    """Фатальная ошибка запуска: частичный результат не выдаётся."""


class SourceUnavailable(AuctionRunError):
    """Источник заявок недоступен."""


class SinkUnavailable(AuctionRunError):
    """Приёмник результатов недоступен."""

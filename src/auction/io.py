"""
I/O boundary — источник строк заявок и приёмник результатов

Источник: CSV файл `instrumentID,direction,price,volume`, пустые строки
пропускаются, пробелы вокруг полей убираются.
Приёмник: одна строка на инструмент в порядке первого появления,
`instrumentID,price`; price пустой, если сделки нет, иначе с числом
знаков после запятой как в первой строке инструмента.
"""

import csv
import logging
import sys
from pathlib import Path
from typing import Iterable, Iterator, Optional, TextIO, Union

from src.auction.errors import SinkUnavailable, SourceUnavailable
from src.auction.grouper import SourceRow
from src.core.domain.auction import EquilibriumResult
from src.core.math.tick_quantization import format_price

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


# =============================================================================
# SOURCE
# =============================================================================


def _iter_csv_rows(stream: TextIO) -> Iterator[SourceRow]:
    reader = csv.reader(stream)
    for fields in reader:
        if not fields or all(not f.strip() for f in fields):
            continue
        yield SourceRow(line_number=reader.line_num, fields=[f.strip() for f in fields])


def iter_order_rows_from_stream(stream: TextIO) -> Iterator[SourceRow]:
    """Строки заявок из открытого текстового потока."""
    try:
        yield from _iter_csv_rows(stream)
    except (OSError, csv.Error, UnicodeDecodeError) as e:
        raise SourceUnavailable(f"failed to read order rows: {e}") from e


def open_order_source(path: PathLike) -> TextIO:
    """
    Открытие входного файла.

    Raises:
        SourceUnavailable: Если файл не открывается
    """
    try:
        return open(path, "r", encoding="utf-8-sig", newline="")
    except OSError as e:
        raise SourceUnavailable(f"cannot open input {path}: {e}") from e


def iter_order_rows(path: PathLike) -> Iterator[SourceRow]:
    """
    Потоковое чтение строк заявок из файла.

    Файл открывается сразу при вызове, поэтому недоступный источник
    обнаруживается до чтения первой строки.

    Raises:
        SourceUnavailable: Если файл не открывается или не читается
    """
    stream = open_order_source(path)
    return _closing_rows(stream, path)


def _closing_rows(stream: TextIO, path: PathLike) -> Iterator[SourceRow]:
    with stream:
        try:
            yield from _iter_csv_rows(stream)
        except (OSError, csv.Error, UnicodeDecodeError) as e:
            raise SourceUnavailable(f"failed to read input {path}: {e}") from e


# =============================================================================
# SINK
# =============================================================================


def format_result_line(result: EquilibriumResult) -> str:
    """
    Examples:
        IF2412,3973.4
        IF2306,
    """
    if result.price is None:
        return f"{result.instrument_id},"
    return f"{result.instrument_id},{format_price(result.price, result.decimal_scale)}"


def render_results(results: Iterable[EquilibriumResult], line_terminator: str = "\n") -> str:
    return "".join(format_result_line(r) + line_terminator for r in results)


def write_results(
    results: Iterable[EquilibriumResult],
    output_path: Optional[PathLike] = None,
    file_line_terminator: str = "\r\n",
    stdout: Optional[TextIO] = None,
) -> int:
    """
    Запись результатов.

    Текст формируется целиком до записи. Пустой список ничего не пишет
    (файл не создаётся).

    Args:
        results: результаты в порядке первого появления
        output_path: файл результата; None → stdout (строки через "\\n")
        file_line_terminator: разделитель строк для файла
        stdout: поток вместо sys.stdout

    Returns:
        Число записанных строк

    Raises:
        SinkUnavailable: Если приёмник не записывается
    """
    results = list(results)
    if not results:
        return 0

    if output_path is None:
        target = stdout if stdout is not None else sys.stdout
        try:
            target.write(render_results(results, "\n"))
            target.flush()
        except OSError as e:
            raise SinkUnavailable(f"cannot write results to stdout: {e}") from e
        return len(results)

    text = render_results(results, file_line_terminator)
    try:
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise SinkUnavailable(f"cannot write output {output_path}: {e}") from e

    logger.info("Wrote %d results to %s", len(results), output_path)
    return len(results)

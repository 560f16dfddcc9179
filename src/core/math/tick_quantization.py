"""
Tick Quantization — точная конверсия цена ↔ тики

Модуль обеспечивает детерминированное квантование цен:
- Парсинг десятичной строки напрямую в Decimal (без промежуточного float)
- Определение масштаба (число знаков после запятой) исходной строки
- price → целое число тиков: round(price / tick), округление к ближайшему
- тики → price: ticks × tick (точно)
- Форматирование цены с заданным числом знаков

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Цена, кратная тику, всегда квантуется в одно и то же целое число тиков
2. Никакой float-арифметики в цепочке price → ticks → price
3. Половина тика округляется от нуля (ROUND_HALF_UP)
4. Арифметика не зависит от точности контекста Decimal (28 знаков)
"""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Final, Tuple

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Правило округления к ближайшему тику
TICK_ROUNDING: Final[str] = ROUND_HALF_UP

_ONE: Final[Decimal] = Decimal(1)

# Допустимый порядок десятичной экспоненты цены и тика
MAX_DECIMAL_EXPONENT: Final[int] = 1000


# =============================================================================
# ПАРСИНГ
# =============================================================================


def parse_decimal(text: str) -> Decimal:
    """
    Парсинг десятичной строки в конечный Decimal.

    Args:
        text: Строка вида "3973.4", "-1.25", "100"

    Returns:
        Decimal с сохранением масштаба исходной строки

    Raises:
        ValueError: Если строка не число, значение NaN/Inf или
            экспонента по модулю больше MAX_DECIMAL_EXPONENT

    Examples:
        >>> parse_decimal("3973.40")
        Decimal('3973.40')
    """
    try:
        value = Decimal(text.strip())
    except (InvalidOperation, AttributeError):
        raise ValueError(f"not a decimal number: {text!r}") from None

    if not value.is_finite():
        raise ValueError(f"decimal must be finite: {text!r}")
    if abs(value.as_tuple().exponent) > MAX_DECIMAL_EXPONENT:
        raise ValueError(f"decimal exponent out of range: {text!r}")

    return value


def decimal_scale(value: Decimal) -> int:
    """
    Число знаков после запятой в десятичном значении.

    Завершающие нули учитываются ("3972.20" → 2).

    Examples:
        >>> decimal_scale(Decimal("3972.2"))
        1
        >>> decimal_scale(Decimal("3972"))
        0
    """
    exponent = value.as_tuple().exponent
    if not isinstance(exponent, int):
        raise ValueError(f"decimal must be finite: {value}")
    return max(0, -exponent)


# =============================================================================
# КВАНТОВАНИЕ
# =============================================================================


def validate_tick(tick: Decimal) -> None:
    """
    Проверка размера тика.

    Raises:
        ValueError: Если тик не конечный или не положительный
    """
    if not tick.is_finite() or tick <= 0:
        raise ValueError(f"tick must be positive, got {tick}")


def _integer_parts(value: Decimal) -> Tuple[int, int]:
    """value = coefficient × 10**exponent, без округления контекстом."""
    sign, digits, exponent = value.as_tuple()
    coefficient = int("".join(map(str, digits)) or "0")
    return (-coefficient if sign else coefficient), exponent


def price_to_ticks(price: Decimal, tick: Decimal) -> int:
    """
    Квантование цены в целое число тиков.

    q = round(price / tick), половина тика округляется от нуля.

    Цена и тик переводятся в общий целочисленный масштаб и делятся
    как целые числа Python, поэтому результат точен при любой длине
    мантиссы (контекст Decimal с его 28 знаками не участвует).

    Args:
        price: Цена заявки
        tick: Минимальный шаг цены (> 0)

    Returns:
        Цена в тиках

    Examples:
        >>> price_to_ticks(Decimal("3973.4"), Decimal("0.2"))
        19867
        >>> price_to_ticks(Decimal("3973.5"), Decimal("0.2"))
        19868
    """
    validate_tick(tick)

    price_units, price_exponent = _integer_parts(price)
    tick_units, tick_exponent = _integer_parts(tick)
    common = min(price_exponent, tick_exponent)
    numerator = price_units * 10 ** (price_exponent - common)
    denominator = tick_units * 10 ** (tick_exponent - common)

    quotient, remainder = divmod(abs(numerator), denominator)
    if 2 * remainder >= denominator:
        quotient += 1
    return -quotient if numerator < 0 else quotient


def ticks_to_price(price_ticks: int, tick: Decimal) -> Decimal:
    """
    Обратная конверсия: тики → цена (точно, без округления контекстом).

    Examples:
        >>> ticks_to_price(19867, Decimal("0.2"))
        Decimal('3973.4')
    """
    validate_tick(tick)
    tick_units, tick_exponent = _integer_parts(tick)
    return Decimal(f"{price_ticks * tick_units}E{tick_exponent}")


def format_price(price: Decimal, scale: int) -> str:
    """
    Форматирование цены ровно с `scale` знаками после запятой.

    Точность контекста расширяется под число знаков результата.

    Examples:
        >>> format_price(Decimal("3973.4"), 2)
        '3973.40'
        >>> format_price(Decimal("3973.4"), 0)
        '3973'
    """
    if scale < 0:
        raise ValueError(f"scale must be non-negative, got {scale}")

    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, price.adjusted() + scale + 2)
        ctx.Emax = max(ctx.Emax, MAX_DECIMAL_EXPONENT + 1)
        ctx.Emin = min(ctx.Emin, -MAX_DECIMAL_EXPONENT - scale - 1)
        quantum = _ONE.scaleb(-scale)
        return f"{price.quantize(quantum, rounding=TICK_ROUNDING):f}"

"""
Order — Модель заявки call-аукциона

Immutable Pydantic модель одной строки входного потока:
`instrumentID,direction,price,volume`.

Инварианты:
- price хранится как Decimal (без float), конечное значение
- volume — целое неотрицательное, объёмы аддитивны
- после создания модель не изменяется (frozen=True)
"""

from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# ENUMS
# =============================================================================


class Side(str, Enum):
    """Сторона заявки"""

    BUY = "buy"
    SELL = "sell"

    @classmethod
    def from_direction_code(cls, code: str) -> "Side":
        """
        Конверсия кода направления из входного файла.

        Args:
            code: "0" (покупка) или "1" (продажа)

        Returns:
            Side

        Raises:
            ValueError: Если код не 0/1
        """
        try:
            return _DIRECTION_CODES[code.strip()]
        except KeyError:
            raise ValueError(f"direction must be 0 or 1, got {code!r}") from None

    @property
    def direction_code(self) -> str:
        return "0" if self is Side.BUY else "1"


_DIRECTION_CODES = {"0": Side.BUY, "1": Side.SELL}


# =============================================================================
# ORDER MODEL
# =============================================================================


class Order(BaseModel):
    """
    Заявка на покупку/продажу одного инструмента.

    Используется движком равновесной цены только через price/volume/side;
    instrument_id нужен для группировки.
    """

    instrument_id: str = Field(..., min_length=1, description="Идентификатор контракта, например IF2412")
    side: Side = Field(..., description="Сторона заявки")
    price: Decimal = Field(..., description="Цена заявки (точное десятичное значение)")
    volume: int = Field(..., ge=0, description="Объём (контракты)")

    model_config = {"frozen": True}

    @field_validator("instrument_id")
    @classmethod
    def validate_instrument_id(cls, v: str) -> str:
        """Идентификатор без пробелов по краям и не пустой"""
        stripped = v.strip()
        if not stripped:
            raise ValueError("instrument_id must not be blank")
        return stripped

    @field_validator("price")
    @classmethod
    def validate_price_finite(cls, v: Decimal) -> Decimal:
        """NaN/Inf цены недопустимы"""
        if not v.is_finite():
            raise ValueError(f"price must be finite, got {v}")
        return v

    @property
    def is_buy(self) -> bool:
        return self.side is Side.BUY

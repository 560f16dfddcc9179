"""
Auction Config — конфигурация запуска

AuctionConfig — immutable dataclass со значениями по умолчанию.
load_auction_config() читает JSON файл, проверяет его по схеме
src/core/contracts/schema/auction_config.json и накладывает значения на defaults.
Тики в JSON — строки, чтобы попасть в Decimal без float-округления.
"""

import json
import os
from dataclasses import dataclass, field, replace
from decimal import Decimal
from pathlib import Path
from typing import Any, Dict, Final, Mapping, Optional, Union

from jsonschema import ValidationError

from src.auction.scheduler import EXECUTOR_KINDS, EXECUTOR_THREAD
from src.auction.tick_resolver import CFFEX_PRODUCT_TICKS, DEFAULT_TICK, TickResolver
from src.core.contracts import validate_auction_config

FILE_LINE_TERMINATOR_DEFAULT: Final[str] = "\r\n"
MAX_LOGGED_ROW_ERRORS_DEFAULT: Final[int] = 20


class ConfigError(ValueError):
    """Конфигурация не читается или не проходит валидацию."""


def default_worker_count() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class AuctionConfig:
    """Параметры одного запуска расчёта."""

    workers: int = field(default_factory=default_worker_count)
    executor: str = EXECUTOR_THREAD
    default_tick: Decimal = DEFAULT_TICK
    product_ticks: Mapping[str, Decimal] = field(default_factory=lambda: dict(CFFEX_PRODUCT_TICKS))
    max_logged_row_errors: int = MAX_LOGGED_ROW_ERRORS_DEFAULT
    file_line_terminator: str = FILE_LINE_TERMINATOR_DEFAULT

    def __post_init__(self):
        if self.workers < 1:
            raise ConfigError(f"workers must be >= 1, got {self.workers}")
        if self.executor not in EXECUTOR_KINDS:
            raise ConfigError(f"executor must be one of {EXECUTOR_KINDS}, got {self.executor!r}")
        if self.max_logged_row_errors < 0:
            raise ConfigError("max_logged_row_errors cannot be negative")
        if self.file_line_terminator not in ("\n", "\r\n"):
            raise ConfigError(f"unsupported line terminator {self.file_line_terminator!r}")

    def with_overrides(self, **changes: Any) -> "AuctionConfig":
        """Копия с заменой полей (None-значения игнорируются)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def tick_resolver(self) -> TickResolver:
        try:
            return TickResolver(product_ticks=self.product_ticks, default_tick=self.default_tick)
        except ValueError as e:
            raise ConfigError(str(e)) from e


def config_from_dict(data: Dict[str, Any], base: Optional[AuctionConfig] = None) -> AuctionConfig:
    """
    AuctionConfig из словаря, прошедшего схему auction_config.

    Raises:
        ConfigError: Если данные не соответствуют схеме
    """
    try:
        validate_auction_config(data)
    except ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise ConfigError(f"invalid auction config at {location}: {e.message}") from e

    changes: Dict[str, Any] = {k: v for k, v in data.items() if k not in ("default_tick", "product_ticks")}
    if "default_tick" in data:
        changes["default_tick"] = Decimal(data["default_tick"])
    if "product_ticks" in data:
        changes["product_ticks"] = {code: Decimal(tick) for code, tick in data["product_ticks"].items()}

    return replace(base or AuctionConfig(), **changes)


def load_auction_config(path: Union[str, Path]) -> AuctionConfig:
    """
    Чтение конфигурации из JSON файла.

    Raises:
        ConfigError: Если файл не читается, не JSON или не проходит схему
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"config {path} must be a JSON object")

    return config_from_dict(data)


def load_tick_table(path: Union[str, Path]) -> Dict[str, Decimal]:
    """
    Таблица тиков из JSON файла вида {"IF": "0.2", ...}.

    Raises:
        ConfigError: Если файл не читается или таблица невалидна
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            table = json.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read tick table {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"tick table {path} is not valid JSON: {e}") from e

    return dict(config_from_dict({"product_ticks": table}).product_ticks)

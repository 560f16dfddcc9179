"""
Tests for AuctionConfig and the auction_config JSON Schema contract

Покрывает:
- Валидность самой схемы
- Defaults
- Загрузку JSON файла и наложение на defaults
- Детекцию нарушений схемы (типы, enum, pattern, additionalProperties)
- Таблицу тиков из отдельного файла
"""

import json
from decimal import Decimal

import pytest
from jsonschema import Draft202012Validator, ValidationError

from src.auction.config import (
    AuctionConfig,
    ConfigError,
    config_from_dict,
    load_auction_config,
    load_tick_table,
)
from src.auction.tick_resolver import CFFEX_PRODUCT_TICKS, DEFAULT_TICK
from src.core.contracts import SchemaLoader, validate_auction_config
from src.core.contracts.validators import SCHEMA_DIR


@pytest.fixture
def valid_config_data():
    """Валидная конфигурация."""
    return {
        "workers": 4,
        "executor": "process",
        "default_tick": "0.5",
        "product_ticks": {"IF": "0.2", "TS": "0.002"},
        "max_logged_row_errors": 5,
        "file_line_terminator": "\n",
    }


class TestSchema:
    """Схема auction_config."""

    def test_schema_is_valid(self):
        schema = SchemaLoader().load_schema("auction_config")
        Draft202012Validator.check_schema(schema)

    def test_schema_ships_inside_package(self):
        """Схема лежит в пакете src.core.contracts, а не в корне checkout"""
        assert SCHEMA_DIR.parent.name == "contracts"
        assert (SCHEMA_DIR / "auction_config.json").is_file()

    def test_schema_cached(self):
        loader = SchemaLoader()
        assert loader.load_schema("auction_config") is loader.load_schema("auction_config")

    def test_missing_schema(self):
        with pytest.raises(FileNotFoundError):
            SchemaLoader().load_schema("no_such_schema")

    def test_valid_data(self, valid_config_data):
        validate_auction_config(valid_config_data)

    def test_empty_object_valid(self):
        validate_auction_config({})

    @pytest.mark.parametrize(
        "patch",
        [
            {"workers": 0},
            {"workers": "4"},
            {"executor": "gpu"},
            {"default_tick": 0.2},
            {"default_tick": "-0.2"},
            {"product_ticks": {"IFX": "0.2"}},
            {"product_ticks": {"IF": "abc"}},
            {"file_line_terminator": "\r"},
            {"unknown": 1},
        ],
    )
    def test_violations_detected(self, valid_config_data, patch):
        data = {**valid_config_data, **patch}
        with pytest.raises(ValidationError):
            validate_auction_config(data)


class TestAuctionConfig:
    """Тесты AuctionConfig."""

    def test_defaults(self):
        config = AuctionConfig()

        assert config.workers >= 1
        assert config.executor == "thread"
        assert config.default_tick == DEFAULT_TICK
        assert config.product_ticks == dict(CFFEX_PRODUCT_TICKS)
        assert config.file_line_terminator == "\r\n"

    @pytest.mark.parametrize(
        "kwargs",
        [{"workers": 0}, {"executor": "gpu"}, {"max_logged_row_errors": -1}, {"file_line_terminator": "\r"}],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(ConfigError):
            AuctionConfig(**kwargs)

    def test_with_overrides_ignores_none(self):
        config = AuctionConfig(workers=2).with_overrides(workers=None, executor="process")

        assert config.workers == 2
        assert config.executor == "process"

    def test_from_dict(self, valid_config_data):
        config = config_from_dict(valid_config_data)

        assert config.workers == 4
        assert config.executor == "process"
        assert config.default_tick == Decimal("0.5")
        assert config.product_ticks == {"IF": Decimal("0.2"), "TS": Decimal("0.002")}
        assert config.max_logged_row_errors == 5

    def test_from_dict_schema_violation(self):
        with pytest.raises(ConfigError, match="invalid auction config at workers"):
            config_from_dict({"workers": 0})

    def test_zero_tick_rejected_by_resolver(self):
        config = config_from_dict({"default_tick": "0"})
        with pytest.raises(ConfigError, match="tick must be positive"):
            config.tick_resolver()

    def test_injected_table_resolver(self):
        resolver = AuctionConfig(product_ticks={"AU": Decimal("0.02")}).tick_resolver()
        assert resolver.resolve("AU2412") == Decimal("0.02")
        assert resolver.resolve("IF2412") == DEFAULT_TICK


class TestLoadFiles:
    """Загрузка конфигурации из файлов."""

    def test_load_auction_config(self, tmp_path, valid_config_data):
        path = tmp_path / "auction.json"
        path.write_text(json.dumps(valid_config_data), encoding="utf-8")

        assert load_auction_config(path).workers == 4

    def test_load_missing_file(self, tmp_path):
        with pytest.raises(ConfigError, match="cannot read config"):
            load_auction_config(tmp_path / "missing.json")

    def test_load_invalid_json(self, tmp_path):
        path = tmp_path / "auction.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(ConfigError, match="not valid JSON"):
            load_auction_config(path)

    def test_load_non_object(self, tmp_path):
        path = tmp_path / "auction.json"
        path.write_text("[1, 2]", encoding="utf-8")

        with pytest.raises(ConfigError, match="must be a JSON object"):
            load_auction_config(path)

    def test_load_tick_table(self, tmp_path):
        path = tmp_path / "ticks.json"
        path.write_text(json.dumps({"AU": "0.02", "T": "0.005"}), encoding="utf-8")

        assert load_tick_table(path) == {"AU": Decimal("0.02"), "T": Decimal("0.005")}

    def test_load_tick_table_invalid(self, tmp_path):
        path = tmp_path / "ticks.json"
        path.write_text(json.dumps({"AU": 0.02}), encoding="utf-8")

        with pytest.raises(ConfigError, match="product_ticks/AU"):
            load_tick_table(path)

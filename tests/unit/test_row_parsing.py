"""Тесты разбора строк заявок и отчёта об ошибках строк."""

import logging
from decimal import Decimal

import pytest

from src.auction.errors import FieldInvalid, OrderRowError, RowMalformed
from src.auction.parsing import RowErrorReport, parse_order_row
from src.core.domain import Side


class TestParseOrderRow:
    """Тесты parse_order_row."""

    def test_buy_row(self):
        parsed = parse_order_row(["IF2412", "0", "3973.4", "3"])

        assert parsed.order.instrument_id == "IF2412"
        assert parsed.order.side is Side.BUY
        assert parsed.order.price == Decimal("3973.4")
        assert parsed.order.volume == 3
        assert parsed.decimal_scale == 1

    def test_sell_row_with_whitespace(self):
        parsed = parse_order_row([" IF2306", " 1 ", " 3972.00", " 1 "])

        assert parsed.order.instrument_id == "IF2306"
        assert parsed.order.side is Side.SELL
        assert parsed.decimal_scale == 2

    def test_integer_price_scale_zero(self):
        assert parse_order_row(["IF2412", "0", "3973", "1"]).decimal_scale == 0

    @pytest.mark.parametrize(
        "fields",
        [
            ["IF2412", "0", "3973.4"],
            ["IF2412", "0", "3973.4", "3", "extra"],
            [],
        ],
    )
    def test_wrong_field_count(self, fields):
        with pytest.raises(RowMalformed, match="expected 4 fields") as exc_info:
            parse_order_row(fields, line_number=7)

        assert exc_info.value.line_number == 7
        assert exc_info.value.kind == "row_malformed"
        assert "line 7" in str(exc_info.value)

    @pytest.mark.parametrize(
        "fields,reason",
        [
            (["IF2412", "2", "3973.4", "3"], "direction"),
            (["IF2412", "x", "3973.4", "3"], "direction"),
            (["IF2412", "0", "abc", "3"], "decimal"),
            (["IF2412", "0", "NaN", "3"], "finite"),
            (["IF2412", "0", "3973.4", "3.5"], "volume"),
            (["IF2412", "0", "3973.4", "-1"], "volume"),
            (["", "0", "3973.4", "3"], "instrument_id"),
        ],
    )
    def test_invalid_fields(self, fields, reason):
        with pytest.raises(FieldInvalid, match=reason) as exc_info:
            parse_order_row(fields, line_number=3)

        assert exc_info.value.kind == "field_invalid"
        assert exc_info.value.row == tuple(fields)

    def test_row_errors_are_value_errors(self):
        """Row-level ошибки — подклассы ValueError"""
        assert issubclass(RowMalformed, OrderRowError)
        assert issubclass(FieldInvalid, ValueError)


class TestRowErrorReport:
    """Тесты RowErrorReport."""

    def test_counts_by_kind(self):
        report = RowErrorReport()
        report.record(RowMalformed("bad", line_number=1))
        report.record(FieldInvalid("bad", line_number=2))
        report.record(FieldInvalid("bad", line_number=3))

        assert report.total == 3
        assert report.counts["row_malformed"] == 1
        assert report.counts["field_invalid"] == 2

    def test_logging_is_capped(self, caplog):
        report = RowErrorReport(max_logged=2)
        with caplog.at_level(logging.WARNING, logger="src.auction.parsing"):
            for i in range(5):
                report.record(FieldInvalid("bad", line_number=i))
            report.log_summary()

        assert len(report.samples) == 2
        assert report.total == 5
        dropped = [r for r in caplog.records if "Dropped order row" in r.getMessage()]
        assert len(dropped) == 2
        assert "3 not logged individually" in caplog.records[-1].getMessage()

    def test_empty_summary_logs_nothing(self, caplog):
        with caplog.at_level(logging.WARNING):
            RowErrorReport().log_summary()
        assert caplog.records == []

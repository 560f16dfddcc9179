"""Тесты ResultSlots: write-once, порядок по позиции."""

from decimal import Decimal

import pytest

from src.auction.assembler import ResultSlots, SlotWriteError
from src.core.domain import EquilibriumResult


def _result(instrument_id, price="1.0"):
    return EquilibriumResult(instrument_id=instrument_id, price=Decimal(price) if price else None)


class TestResultSlots:
    """Тесты ResultSlots."""

    def test_collect_in_position_order_regardless_of_write_order(self):
        slots = ResultSlots(["B", "A", "C"])
        slots.put(2, _result("C"))
        slots.put(0, _result("B"))
        slots.put(1, _result("A", None))

        assert [r.instrument_id for r in slots.collect()] == ["B", "A", "C"]
        assert len(slots) == 3

    def test_write_twice_rejected(self):
        slots = ResultSlots(["A"])
        slots.put(0, _result("A"))
        with pytest.raises(SlotWriteError, match="written twice"):
            slots.put(0, _result("A"))

    def test_wrong_instrument_rejected(self):
        slots = ResultSlots(["A", "B"])
        with pytest.raises(SlotWriteError, match="belongs to 'A'"):
            slots.put(0, _result("B"))

    def test_collect_before_all_written(self):
        slots = ResultSlots(["A", "B"])
        slots.put(1, _result("B"))

        assert slots.missing() == [0]
        with pytest.raises(RuntimeError, match="1 result slots not filled: 'A'"):
            slots.collect()

    def test_empty(self):
        assert ResultSlots([]).collect() == []

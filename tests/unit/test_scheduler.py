"""Тесты Fan-out Scheduler (фаза 2).

Coverage:
- W = min(workers, N), не меньше 1
- Round-robin разбиение без пересечений
- Порядок результатов = порядок первого появления
- Детерминизм при разном числе workers и типе executor
- Проброс ошибок workers
"""

from decimal import Decimal

import pytest

from src.auction import scheduler as scheduler_module
from src.auction.grouper import InstrumentGrouper
from src.auction.ordered_index import OrderedInstrumentIndex
from src.auction.scheduler import (
    FanOutScheduler,
    effective_worker_count,
    round_robin_partition,
)
from src.auction.tick_resolver import TickResolver


def _grouping(instrument_count=7):
    rows = []
    for i in range(instrument_count):
        instrument = f"IF{2400 + (instrument_count - i)}"
        rows.append([instrument, "0", f"{3973 + i}.4", "3"])
        rows.append([instrument, "1", f"{3973 + i}.2", "2"])
    return InstrumentGrouper().consume(rows)


class TestPartition:
    """Тесты разбиения."""

    @pytest.mark.parametrize(
        "configured,n,expected",
        [(4, 10, 4), (8, 3, 3), (1, 5, 1), (4, 0, 1), (4, 4, 4)],
    )
    def test_effective_worker_count(self, configured, n, expected):
        assert effective_worker_count(configured, n) == expected

    def test_invalid_worker_count(self):
        with pytest.raises(ValueError, match="workers must be >= 1"):
            effective_worker_count(0, 5)

    def test_round_robin(self):
        assert round_robin_partition(7, 3) == [[0, 3, 6], [1, 4], [2, 5]]

    @pytest.mark.parametrize("n,w", [(1, 1), (10, 3), (10, 10), (17, 4)])
    def test_partition_is_collision_free_and_complete(self, n, w):
        partitions = round_robin_partition(n, w)
        flat = [p for part in partitions for p in part]

        assert len(partitions) == w
        assert sorted(flat) == list(range(n))
        assert len(flat) == len(set(flat))


class TestFanOutScheduler:
    """Тесты FanOutScheduler."""

    def test_results_in_first_seen_order(self):
        grouping = _grouping()
        results = FanOutScheduler(workers=3, tick_resolver=TickResolver()).run(grouping.index)

        assert [r.instrument_id for r in results] == list(grouping.index.keys())
        assert results[0].price == Decimal("3973.4")

    @pytest.mark.parametrize("workers", [1, 2, 3, 7, 32])
    def test_deterministic_across_worker_counts(self, workers):
        grouping = _grouping()
        baseline = FanOutScheduler(workers=1, tick_resolver=TickResolver()).run(grouping.index)
        results = FanOutScheduler(workers=workers, tick_resolver=TickResolver()).run(grouping.index)

        assert results == baseline

    def test_process_executor_matches_thread_executor(self):
        grouping = _grouping(5)
        threaded = FanOutScheduler(workers=2, tick_resolver=TickResolver()).run(grouping.index)
        processed = FanOutScheduler(
            workers=2, tick_resolver=TickResolver(), executor="process"
        ).run(grouping.index)

        assert processed == threaded

    def test_worker_count_recorded(self):
        grouping = _grouping(3)
        scheduler = FanOutScheduler(workers=8, tick_resolver=TickResolver())
        scheduler.run(grouping.index)

        assert scheduler.last_worker_count == 3

    def test_empty_index(self):
        index = OrderedInstrumentIndex().freeze()
        scheduler = FanOutScheduler(workers=4, tick_resolver=TickResolver())

        assert scheduler.run(index) == []
        assert scheduler.last_worker_count == 0

    def test_unfrozen_index_rejected(self):
        with pytest.raises(ValueError, match="must be frozen"):
            FanOutScheduler(workers=2, tick_resolver=TickResolver()).run(OrderedInstrumentIndex())

    def test_worker_error_propagates(self, monkeypatch):
        def failing(group, tick):
            raise ArithmeticError("boom")

        monkeypatch.setattr(scheduler_module, "compute_equilibrium", failing)
        grouping = _grouping(3)

        with pytest.raises(ArithmeticError, match="boom"):
            FanOutScheduler(workers=2, tick_resolver=TickResolver()).run(grouping.index)

    def test_tick_resolved_per_instrument(self):
        rows = [["TS2306", "0", "101.234", "1"], ["TS2306", "1", "101.232", "1"]]
        grouping = InstrumentGrouper().consume(rows)
        results = FanOutScheduler(workers=1, tick_resolver=TickResolver()).run(grouping.index)

        assert results[0].price == Decimal("101.234")

    @pytest.mark.parametrize(
        "kwargs,match",
        [({"workers": 0}, "workers must be >= 1"), ({"workers": 1, "executor": "gpu"}, "executor")],
    )
    def test_invalid_construction(self, kwargs, match):
        with pytest.raises(ValueError, match=match):
            FanOutScheduler(tick_resolver=TickResolver(), **kwargs)

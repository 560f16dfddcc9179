"""
Auction Pipeline — двухфазный расчёт равновесных цен

Фаза 1 (последовательная): строки → InstrumentGrouper → замороженный индекс.
Фаза 2 (параллельная): FanOutScheduler → движок цены по инструментам →
ResultSlots (барьер) → результаты в порядке первого появления.

Фаза 2 стартует только после полного чтения потока.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Iterable, List, Optional

from src.auction.config import AuctionConfig
from src.auction.grouper import InstrumentGrouper, RawRow
from src.auction.parsing import RowErrorReport
from src.auction.scheduler import FanOutScheduler
from src.core.domain.auction import EquilibriumResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuctionRunReport:
    """Результат одного запуска."""

    results: List[EquilibriumResult]
    row_errors: RowErrorReport
    instrument_count: int
    order_count: int
    worker_count: int
    cancelled: bool = False

    @property
    def matched_count(self) -> int:
        return sum(1 for r in self.results if r.has_match)


class AuctionPipeline:
    """Приём строк заявок и расчёт равновесных цен."""

    def __init__(self, config: Optional[AuctionConfig] = None):
        self.config = config or AuctionConfig()
        self.tick_resolver = self.config.tick_resolver()

    def run(
        self,
        rows: Iterable[RawRow],
        cancel_event: Optional[threading.Event] = None,
    ) -> AuctionRunReport:
        """
        Полный расчёт по потоку строк.

        Args:
            rows: строки заявок (SourceRow или последовательности полей)
            cancel_event: отмена чтения (влияет только на фазу 1)

        Returns:
            AuctionRunReport
        """
        grouper = InstrumentGrouper(RowErrorReport(max_logged=self.config.max_logged_row_errors))
        grouping = grouper.consume(rows, cancel_event=cancel_event)

        scheduler = FanOutScheduler(
            workers=self.config.workers,
            tick_resolver=self.tick_resolver,
            executor=self.config.executor,
        )
        results = scheduler.run(grouping.index)

        report = AuctionRunReport(
            results=results,
            row_errors=grouping.row_errors,
            instrument_count=grouping.instrument_count,
            order_count=grouping.order_count,
            worker_count=scheduler.last_worker_count,
            cancelled=grouping.cancelled,
        )
        logger.info(
            "Computed %d instruments (%d matched, %d rows dropped)",
            report.instrument_count,
            report.matched_count,
            report.row_errors.total,
        )
        return report


def compute_equilibrium_prices(
    rows: Iterable[RawRow], config: Optional[AuctionConfig] = None
) -> List[EquilibriumResult]:
    """Упрощённый вызов: только результаты."""
    return AuctionPipeline(config).run(rows).results

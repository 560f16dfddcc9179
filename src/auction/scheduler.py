"""
Fan-out Scheduler — фаза 2: параллельный расчёт по инструментам

Вход: замороженный индекс инструментов. W = max(1, min(workers, N)).
Разбиение статическое, round-robin: worker i получает позиции
i, i+W, i+2W, ... Балансировки во время работы нет, пересечений нет.

Каждый worker вызывает движок равновесной цены для своих инструментов
и пишет результат в слот с позицией инструмента. Workers не общаются
между собой и читают только замороженные данные, блокировки не нужны.
Планировщик ждёт завершения всех workers (барьер) и возвращает
результаты в порядке первого появления.

Executors:
- "thread": workers пишут прямо в ResultSlots
- "process": worker возвращает пары (позиция, результат) своего
  разбиения, родитель записывает их в ResultSlots
"""

import logging
from concurrent.futures import Executor, ProcessPoolExecutor, ThreadPoolExecutor
from dataclasses import dataclass
from decimal import Decimal
from typing import Final, List, Sequence, Tuple

from src.auction.assembler import ResultSlots
from src.auction.engine import compute_equilibrium
from src.auction.ordered_index import OrderedInstrumentIndex
from src.auction.tick_resolver import TickResolver
from src.core.domain.auction import EquilibriumResult, InstrumentGroup

logger = logging.getLogger(__name__)


EXECUTOR_THREAD: Final[str] = "thread"
EXECUTOR_PROCESS: Final[str] = "process"
EXECUTOR_KINDS: Final[Tuple[str, ...]] = (EXECUTOR_THREAD, EXECUTOR_PROCESS)


@dataclass(frozen=True)
class PricingTask:
    """Инструмент на позиции `position` с заранее определённым тиком."""

    position: int
    group: InstrumentGroup
    tick: Decimal


def effective_worker_count(configured_workers: int, instrument_count: int) -> int:
    """W = min(configured_workers, N), не меньше 1."""
    if configured_workers < 1:
        raise ValueError(f"workers must be >= 1, got {configured_workers}")
    return max(1, min(configured_workers, instrument_count))


def round_robin_partition(item_count: int, worker_count: int) -> List[List[int]]:
    """
    Статическое разбиение позиций 0..item_count-1 между workers.

    Examples:
        >>> round_robin_partition(5, 2)
        [[0, 2, 4], [1, 3]]
    """
    if worker_count < 1:
        raise ValueError(f"worker_count must be >= 1, got {worker_count}")
    return [list(range(worker_id, item_count, worker_count)) for worker_id in range(worker_count)]


def price_partition(tasks: Sequence[PricingTask]) -> List[Tuple[int, EquilibriumResult]]:
    """Расчёт одного разбиения (выполняется в отдельном процессе)."""
    return [(task.position, compute_equilibrium(task.group, task.tick)) for task in tasks]


class FanOutScheduler:
    """Пул фиксированного размера для расчёта равновесных цен."""

    def __init__(
        self,
        workers: int,
        tick_resolver: TickResolver,
        executor: str = EXECUTOR_THREAD,
    ):
        """
        Args:
            workers: верхняя граница числа workers (>= 1)
            tick_resolver: таблица тиков
            executor: "thread" или "process"
        """
        if workers < 1:
            raise ValueError(f"workers must be >= 1, got {workers}")
        if executor not in EXECUTOR_KINDS:
            raise ValueError(f"executor must be one of {EXECUTOR_KINDS}, got {executor!r}")

        self.workers = workers
        self.tick_resolver = tick_resolver
        self.executor = executor
        self.last_worker_count = 0

    def _build_tasks(
        self, index: OrderedInstrumentIndex[str, InstrumentGroup]
    ) -> List[PricingTask]:
        # Тик определяется один раз на инструмент, до запуска workers
        return [
            PricingTask(position=position, group=group, tick=self.tick_resolver.resolve(instrument_id))
            for position, (instrument_id, group) in enumerate(index.items())
        ]

    def _make_executor(self, worker_count: int) -> Executor:
        if self.executor == EXECUTOR_PROCESS:
            return ProcessPoolExecutor(max_workers=worker_count)
        return ThreadPoolExecutor(max_workers=worker_count, thread_name_prefix="auction-worker")

    @staticmethod
    def _run_worker(tasks: Sequence[PricingTask], slots: ResultSlots) -> int:
        for task in tasks:
            slots.put(task.position, compute_equilibrium(task.group, task.tick))
        return len(tasks)

    def run(self, index: OrderedInstrumentIndex[str, InstrumentGroup]) -> List[EquilibriumResult]:
        """
        Расчёт всех инструментов индекса.

        Args:
            index: замороженный индекс инструментов

        Returns:
            EquilibriumResult в порядке первого появления

        Raises:
            ValueError: Если индекс не заморожен
            Exception: Ошибка любого worker пробрасывается вызывающему
        """
        if not index.frozen:
            raise ValueError("instrument index must be frozen before fan-out")

        instrument_count = len(index)
        if instrument_count == 0:
            self.last_worker_count = 0
            return []

        tasks = self._build_tasks(index)
        slots = ResultSlots(index.keys())
        worker_count = effective_worker_count(self.workers, instrument_count)
        partitions = [
            [tasks[position] for position in positions]
            for positions in round_robin_partition(instrument_count, worker_count)
        ]
        self.last_worker_count = worker_count

        logger.info(
            "Pricing %d instruments with %d %s workers",
            instrument_count,
            worker_count,
            self.executor,
        )
        for worker_id, partition in enumerate(partitions):
            logger.debug("worker %d: %d instruments", worker_id, len(partition))

        with self._make_executor(worker_count) as pool:
            if self.executor == EXECUTOR_PROCESS:
                futures = [pool.submit(price_partition, partition) for partition in partitions]
                # Барьер: result() ждёт каждого worker и пробрасывает его ошибку
                for future in futures:
                    for position, result in future.result():
                        slots.put(position, result)
            else:
                futures = [pool.submit(self._run_worker, partition, slots) for partition in partitions]
                for future in futures:
                    future.result()

        return slots.collect()

"""
Result Assembler — сборка результатов в порядке первого появления

Массив слотов заранее нужного размера; слот i принадлежит инструменту
с позицией первого появления i. Каждый слот записывается ровно один раз,
читается только после барьера (collect). Порядок вывода задаётся
индексами слотов, сортировка не выполняется.
"""

from typing import List, Optional, Sequence

from src.core.domain.auction import EquilibriumResult


class SlotWriteError(RuntimeError):
    """Повторная запись в слот или запись чужого инструмента."""


class ResultSlots:
    """Write-once массив результатов, адресуемый позицией инструмента."""

    def __init__(self, instrument_ids: Sequence[str]):
        self._instrument_ids = tuple(instrument_ids)
        self._slots: List[Optional[EquilibriumResult]] = [None] * len(self._instrument_ids)

    def __len__(self) -> int:
        return len(self._slots)

    def put(self, position: int, result: EquilibriumResult) -> None:
        """
        Запись результата в слот.

        Слоты разных позиций независимы: параллельные записи в разные
        слоты блокировок не требуют.

        Raises:
            SlotWriteError: Если слот уже заполнен или инструмент не совпадает
        """
        expected = self._instrument_ids[position]
        if result.instrument_id != expected:
            raise SlotWriteError(
                f"slot {position} belongs to {expected!r}, got {result.instrument_id!r}"
            )
        if self._slots[position] is not None:
            raise SlotWriteError(f"slot {position} ({expected!r}) written twice")
        self._slots[position] = result

    def missing(self) -> List[int]:
        return [i for i, slot in enumerate(self._slots) if slot is None]

    def collect(self) -> List[EquilibriumResult]:
        """
        Результаты в порядке первого появления.

        Raises:
            RuntimeError: Если какой-то слот не заполнен
        """
        missing = self.missing()
        if missing:
            names = ", ".join(repr(self._instrument_ids[i]) for i in missing[:5])
            raise RuntimeError(f"{len(missing)} result slots not filled: {names}")
        return list(self._slots)  # type: ignore[arg-type]

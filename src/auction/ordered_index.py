"""
Ordered Instrument Index — индекс инструментов в порядке первого появления

Один контейнер: уникальный ключ → значение + append-only список ключей.
Операции чтения: поиск по ключу и обход в порядке вставки.

После freeze() индекс доступен только на чтение: любые записи
вызывают RuntimeError. Замороженный индекс безопасно читается
из любого числа потоков без блокировок.
"""

from typing import Dict, Generic, Iterator, List, Optional, Tuple, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class FrozenIndexError(RuntimeError):
    """Запись в замороженный индекс."""


class OrderedInstrumentIndex(Generic[K, V]):
    """Insertion-ordered индекс с однократной заморозкой."""

    def __init__(self) -> None:
        self._values: Dict[K, V] = {}
        self._order: List[K] = []
        self._frozen = False

    # ------------------------------------------------------------------
    # Запись (только до freeze)
    # ------------------------------------------------------------------

    def _check_writable(self) -> None:
        if self._frozen:
            raise FrozenIndexError("index is frozen, no further writes allowed")

    def add(self, key: K, value: V) -> None:
        """
        Добавление нового ключа в конец порядка.

        Raises:
            KeyError: Если ключ уже есть
            FrozenIndexError: Если индекс заморожен
        """
        self._check_writable()
        if key in self._values:
            raise KeyError(f"duplicate key: {key!r}")
        self._values[key] = value
        self._order.append(key)

    def freeze(self) -> "OrderedInstrumentIndex[K, V]":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ------------------------------------------------------------------
    # Чтение
    # ------------------------------------------------------------------

    def get(self, key: K) -> Optional[V]:
        return self._values.get(key)

    def __getitem__(self, key: K) -> V:
        return self._values[key]

    def __contains__(self, key: object) -> bool:
        return key in self._values

    def __len__(self) -> int:
        return len(self._order)

    def __iter__(self) -> Iterator[K]:
        return iter(self._order)

    def keys(self) -> Tuple[K, ...]:
        return tuple(self._order)

    def items(self) -> Iterator[Tuple[K, V]]:
        for key in self._order:
            yield key, self._values[key]

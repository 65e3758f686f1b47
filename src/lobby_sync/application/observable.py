"""Observable containers bound to the presentation layer."""
from __future__ import annotations

import logging
from typing import Callable, Generic, Iterable, Iterator, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class _Observable(Generic[T]):
    def __init__(self) -> None:
        self._listeners: list[Callable[[T], None]] = []

    def observe(self, listener: Callable[[T], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def _remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _remove

    def _publish(self, value: T) -> None:
        for listener in list(self._listeners):
            try:
                listener(value)
            except Exception:
                logger.exception("Observer failed")


class ObservableList(_Observable[tuple[T, ...]]):
    """List whose observers always receive a complete snapshot."""

    def __init__(self) -> None:
        super().__init__()
        self._items: list[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        return iter(tuple(self._items))

    def __getitem__(self, index: int) -> T:
        return self._items[index]

    def snapshot(self) -> tuple[T, ...]:
        return tuple(self._items)

    def append(self, item: T) -> None:
        self._items.append(item)
        self._publish(self.snapshot())

    def remove(self, item: T) -> bool:
        try:
            self._items.remove(item)
        except ValueError:
            return False
        self._publish(self.snapshot())
        return True

    def replace_all(self, items: Iterable[T]) -> None:
        self._items = list(items)
        self._publish(self.snapshot())

    def clear(self) -> None:
        self.replace_all(())


class ObservableValue(_Observable[T]):
    def __init__(self, initial: T) -> None:
        super().__init__()
        self._value = initial

    @property
    def value(self) -> T:
        return self._value

    def set(self, value: T) -> None:
        if value == self._value:
            return
        self._value = value
        self._publish(value)

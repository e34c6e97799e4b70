"""A pair of values where one is read while the other is written."""

from __future__ import annotations

from typing import Callable, Generic, TypeVar

T = TypeVar("T")


class DoubleBuffer(Generic[T]):
    """Holds two values built by the same factory and flips their roles on swap.

    Initially the first value built is the read side and the second is the
    write side.
    """

    __slots__ = ("_front", "_back")

    def __init__(self, factory: Callable[[], T]) -> None:
        self._front: T = factory()
        self._back: T = factory()

    def swap(self) -> None:
        """Exchange the read and write sides."""
        self._front, self._back = self._back, self._front

    def read(self) -> T:
        """Return the value currently designated for reading."""
        return self._front

    def write(self) -> T:
        """Return the value currently designated for writing."""
        return self._back

    def __repr__(self) -> str:
        return f"{type(self).__name__}(read={self._front!r}, write={self._back!r})"
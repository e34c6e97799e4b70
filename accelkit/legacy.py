"""Fake pointers that carry a buffer id in their top bits and an offset below.

A pointer is a 64-bit integer laid out as::

    | buffer id (16 bits) | offset in buffer (48 bits) |

A pointer whose buffer id is zero is a null pointer.
"""

from __future__ import annotations

from typing import Any, Optional

__all__ = [
    "ADDRESS_BITS",
    "BUFFER_ID_BITSIZE",
    "MAX_NUMBER_BUFFERS",
    "MAX_OFFSET",
    "NULL_POINTER",
    "LegacyPointerMapper",
    "get_pointer_mapper",
    "malloc",
    "free",
    "clear",
]

ADDRESS_BITS = 64
BUFFER_ID_BITSIZE = 16
MAX_NUMBER_BUFFERS = (1 << BUFFER_ID_BITSIZE) - 1
MAX_OFFSET = (1 << (ADDRESS_BITS - BUFFER_ID_BITSIZE)) - 1
NULL_POINTER = 0

_ID_SHIFT = ADDRESS_BITS - BUFFER_ID_BITSIZE
_ID_MASK = (1 << BUFFER_ID_BITSIZE) - 1
_ADDRESS_MASK = (1 << ADDRESS_BITS) - 1


def _to_buffer_id(value: int) -> int:
    """Interpret the low 16 bits of ``value`` as a signed buffer id."""
    half = 1 << (BUFFER_ID_BITSIZE - 1)
    return ((value + half) & _ID_MASK) - half


class LegacyPointerMapper:
    """Associates fake pointers with buffers, one buffer id per allocation."""

    ADDRESS_BITS = ADDRESS_BITS
    BUFFER_ID_BITSIZE = BUFFER_ID_BITSIZE
    MAX_NUMBER_BUFFERS = MAX_NUMBER_BUFFERS
    MAX_OFFSET = MAX_OFFSET

    def __init__(self) -> None:
        self._buffers: dict[int, Any] = {}
        self._counter = 0

    @staticmethod
    def is_nullptr(ptr: Optional[int]) -> bool:
        """True when the buffer id bits of ``ptr`` are all zero."""
        value = 0 if ptr is None else ptr & _ADDRESS_MASK
        return (MAX_OFFSET & value) == value

    def get_buffer_id(self, ptr: int) -> int:
        """Buffer id stored in the top bits of ``ptr``."""
        return _to_buffer_id((ptr & _ADDRESS_MASK) >> _ID_SHIFT)

    def get_offset(self, ptr: int) -> int:
        """Offset within the buffer stored in the low bits of ``ptr``."""
        return ptr & MAX_OFFSET

    def _generate_id(self) -> int:
        self._counter = _to_buffer_id(self._counter + 1)
        return self._counter

    def add_pointer(self, buffer: Any) -> int:
        """Register ``buffer`` and return a pointer to its first byte.

        Returns the null pointer once more than ``MAX_NUMBER_BUFFERS``
        buffers are registered.
        """
        memoryview(buffer)  # must support the buffer protocol
        next_number = len(self._buffers)
        buffer_id = self._generate_id()
        self._buffers.setdefault(buffer_id, buffer)
        if next_number > MAX_NUMBER_BUFFERS:
            return NULL_POINTER
        return (buffer_id & _ID_MASK) << _ID_SHIFT

    def get_buffer(self, buffer_id: int) -> Any:
        """Buffer registered under ``buffer_id``."""
        try:
            return self._buffers[buffer_id]
        except KeyError:
            raise KeyError(
                "No buffer has been found. Make sure that you have allocated "
                "memory for your buffer by calling malloc."
            ) from None

    def remove_pointer(self, ptr: int) -> None:
        """Forget the buffer that ``ptr`` points into; unknown ids are ignored."""
        self._buffers.pop(self.get_buffer_id(ptr), None)

    def clear(self) -> None:
        """Forget every buffer."""
        self._buffers.clear()

    def count(self) -> int:
        """Number of buffers allocated and not yet freed."""
        return len(self._buffers)


_MAPPER = LegacyPointerMapper()


def get_pointer_mapper() -> LegacyPointerMapper:
    """The process-wide mapper used by :func:`malloc` and :func:`free`."""
    return _MAPPER


def malloc(size: int) -> int:
    """Create a zeroed byte buffer of ``size`` bytes and return a pointer to it."""
    if size < 0:
        raise ValueError("allocation size must be non-negative")
    return _MAPPER.add_pointer(bytearray(size))


def free(ptr: int) -> None:
    """Release the buffer created by :func:`malloc` for ``ptr``."""
    _MAPPER.remove_pointer(ptr)


def clear() -> None:
    """Release every buffer of the process-wide mapper."""
    _MAPPER.clear()
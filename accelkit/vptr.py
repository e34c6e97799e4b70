"""Virtual pointers: integer addresses that stand for byte buffers.

A :class:`PointerMapper` hands out addresses for buffers, laid out one after
another from a base address. Freed blocks are kept and reused for later
allocations. Neighbouring free blocks are fused, and a free block at the end
of the address space is dropped.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass
from typing import Any, Optional

__all__ = [
    "DEFAULT_BASE_ADDRESS",
    "PointerMapper",
    "allocate",
    "release",
    "release_all",
]

DEFAULT_BASE_ADDRESS = 4096


@dataclass
class _Node:
    buffer: memoryview
    size: int
    free: bool


def _byte_view(buffer: Any) -> memoryview:
    view = memoryview(buffer)
    if not view.contiguous:
        raise ValueError("buffer must be contiguous")
    return view.cast("B") if view.ndim != 1 or view.format != "B" else view


class PointerMapper:
    """Maps virtual addresses to the buffers they were issued for."""

    def __init__(self, base_address: int = DEFAULT_BASE_ADDRESS) -> None:
        if base_address == 0:
            raise ValueError("Base address cannot be zero")
        self._base_address = base_address
        self._addresses: list[int] = []
        self._nodes: dict[int, _Node] = {}
        self._free: set[int] = set()

    @staticmethod
    def is_nullptr(ptr: Optional[int]) -> bool:
        """True for the null pointer (``0`` or ``None``)."""
        return not ptr

    def _insert(self, address: int, node: _Node) -> None:
        if address in self._nodes:
            return
        bisect.insort(self._addresses, address)
        self._nodes[address] = node

    def _erase(self, address: int) -> None:
        del self._nodes[address]
        self._addresses.pop(bisect.bisect_left(self._addresses, address))

    def _node_address(self, ptr: int) -> int:
        """Address of the block holding ``ptr``."""
        if self.count() == 0:
            raise IndexError("There are no pointers allocated")
        if self.is_nullptr(ptr):
            raise IndexError("Cannot access null pointer")
        idx = bisect.bisect_left(self._addresses, ptr)
        if idx == len(self._addresses) or self._addresses[idx] != ptr:
            if idx == 0:
                raise IndexError("The pointer is not registered in the map")
            idx -= 1
        return self._addresses[idx]

    def _insertion_point(self, required: int) -> int:
        for address in sorted(self._free):
            if self._nodes[address].size >= required:
                self._free.discard(address)
                return address
        return self._addresses[-1]

    def add_pointer(self, buffer: Any) -> int:
        """Register ``buffer`` and return the virtual address issued for it."""
        view = _byte_view(buffer)
        size = view.nbytes

        if not self._nodes:
            self._insert(self._base_address, _Node(view, size, False))
            return self._base_address

        address = self._insertion_point(size)
        node = self._nodes[address]
        if node.free:
            node.buffer = view
            node.free = False
            if node.size > size:
                remaining = node.size - size
                node.size = size
                free_address = address + size
                self._insert(free_address, _Node(view, remaining, True))
                self._free.add(free_address)
            return address

        new_address = address + node.size
        self._insert(new_address, _Node(view, size, False))
        return new_address

    def get_buffer(self, ptr: int) -> memoryview:
        """Byte view of the buffer of the block holding ``ptr``."""
        node = self._nodes[self._node_address(ptr)]
        return node.buffer[: node.size]

    def get_offset(self, ptr: int) -> int:
        """Offset in bytes of ``ptr`` from the start of its block."""
        return ptr - self._node_address(ptr)

    def get_element_offset(self, ptr: int, item_size: int) -> int:
        """Offset of ``ptr`` from its block start, in items of ``item_size`` bytes."""
        return self.get_offset(ptr) // item_size

    def _fuse_forward(self, address: int) -> None:
        node = self._nodes[address]
        while address != self._addresses[-1]:
            idx = bisect.bisect_left(self._addresses, address)
            next_address = self._addresses[idx + 1]
            following = self._nodes[next_address]
            if not following.free:
                break
            self._free.discard(next_address)
            self._erase(next_address)
            node.size += following.size

    def _fuse_backward(self, address: int) -> int:
        while address != self._addresses[0]:
            idx = bisect.bisect_left(self._addresses, address)
            prev_address = self._addresses[idx - 1]
            previous = self._nodes[prev_address]
            if not previous.free:
                break
            previous.size += self._nodes[address].size
            self._free.discard(address)
            self._erase(address)
            address = prev_address
        return address

    def remove_pointer(self, ptr: int, reuse: bool = True) -> None:
        """Release the block holding ``ptr``.

        With ``reuse`` the block becomes free space for later allocations;
        without it the block is simply dropped from the map.
        """
        if self.is_nullptr(ptr):
            return
        address = self._node_address(ptr)
        if not reuse:
            self._erase(address)
            return

        self._nodes[address].free = True
        self._free.add(address)
        self._fuse_forward(address)
        address = self._fuse_backward(address)

        if address == self._addresses[-1]:
            self._free.discard(address)
            self._erase(address)

    def clear(self) -> None:
        """Forget every block."""
        self._free.clear()
        self._nodes.clear()
        self._addresses.clear()

    def count(self) -> int:
        """Number of blocks allocated and not yet freed."""
        return len(self._nodes) - len(self._free)


def allocate(size: int, mapper: PointerMapper) -> int:
    """Allocate a zeroed buffer of ``size`` bytes; returns 0 for a zero size."""
    if size < 0:
        raise ValueError("allocation size must be non-negative")
    if size == 0:
        return 0
    return mapper.add_pointer(bytearray(size))


def release(ptr: int, mapper: PointerMapper, reuse: bool = True) -> None:
    """Free a pointer returned by :func:`allocate`."""
    mapper.remove_pointer(ptr, reuse)


def release_all(mapper: PointerMapper) -> None:
    """Free every allocation of ``mapper``."""
    mapper.clear()
"""Tuple arithmetic and single-step ODE integrators (Euler and RK4).

State is passed as ``(y(N-1), ..., y1, y, t)``: the highest stored derivative
first and time last. ``func`` receives the state unpacked and returns the
N-th derivative. Elements may be plain numbers or numpy arrays.
"""

from __future__ import annotations

from typing import Any, Callable, Sequence

__all__ = [
    "add_tuples",
    "scale_tuple",
    "squash_tuple",
    "integrate_step_euler",
    "integrate_step_rk4",
]


def add_tuples(a: Sequence[Any], b: Sequence[Any]) -> tuple:
    """Add two sequences elementwise; they must have the same length."""
    if len(a) != len(b):
        raise ValueError(
            f"cannot add tuples of differing sizes ({len(a)} and {len(b)})"
        )
    return tuple(x + y for x, y in zip(a, b))


def scale_tuple(values: Sequence[Any], factor: Any) -> tuple:
    """Multiply every element of ``values`` by ``factor``."""
    return tuple(v * factor for v in values)


def squash_tuple(values: Sequence[Any], drop_front: int, drop_back: int) -> tuple:
    """Drop ``drop_front`` leading and ``drop_back`` trailing elements."""
    if drop_front < 0 or drop_back < 0:
        raise ValueError("drop counts must be non-negative")
    if drop_front + drop_back > len(values):
        raise ValueError(
            f"cannot drop {drop_front + drop_back} elements from a tuple of "
            f"size {len(values)}"
        )
    return tuple(values[drop_front : len(values) - drop_back])


def _check_state(args: Sequence[Any]) -> None:
    if len(args) < 2:
        raise ValueError("integration needs at least a value and a time")


def _derivatives(func: Callable[..., Any], state: tuple) -> tuple:
    """Derivative of every state element: (f(state), y(N-1), ..., y1, 1)."""
    return (func(*state),) + squash_tuple(state, 0, 2) + (1,)


def integrate_step_euler(func: Callable[..., Any], step: Any, *args: Any) -> tuple:
    """Advance the state ``args`` by ``step`` with the explicit Euler method."""
    _check_state(args)
    init = tuple(args)
    return add_tuples(init, scale_tuple(_derivatives(func, init), step))


def integrate_step_rk4(func: Callable[..., Any], step: Any, *args: Any) -> tuple:
    """Advance the state ``args`` by ``step`` with classical Runge-Kutta (RK4)."""
    _check_state(args)
    init = tuple(args)
    half = step / 2

    k0 = _derivatives(func, init)
    k1 = _derivatives(func, add_tuples(init, scale_tuple(k0, half)))
    k2 = _derivatives(func, add_tuples(init, scale_tuple(k1, half)))
    k3 = _derivatives(func, add_tuples(init, scale_tuple(k2, step)))

    total = add_tuples(k0, scale_tuple(k1, 2))
    total = add_tuples(total, scale_tuple(k2, 2))
    total = add_tuples(total, k3)
    return add_tuples(scale_tuple(total, step / 6), init)
"""Computed values: cached derivations invalidated once per render.

A Computed wraps a zero-argument function. The first read evaluates it and
caches the result; later reads return the cache until the cell is marked
dirty. There is no dependency tracking: the binder marks every computed of a
host dirty at the start of each pre-update pass, whatever the getter reads.

Unlike effects and watchers, a failing getter is not swallowed. The error is
reported, the cell stays dirty and the exception reaches the reader.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, Mapping, TypeVar

from compofx import _anchor
from compofx.errors import report

if TYPE_CHECKING:
    from compofx.binder import Binding

T = TypeVar("T")

_UNSET = object()


class Computed(Generic[T]):
    """A lazily evaluated, cached derived value. Read it through .value."""

    __slots__ = ("_getter", "_cache", "_dirty")

    def __init__(self, getter: Callable[[], T]) -> None:
        self._getter = getter
        self._cache: object = _UNSET
        self._dirty = True

    @property
    def value(self) -> T:
        """The cached result. Recomputes if dirty."""
        if self._dirty:
            try:
                self._cache = self._getter()
            except Exception as error:
                report("Error in computed getter", error)
                raise
            self._dirty = False
        return self._cache  # type: ignore[return-value]

    @property
    def dirty(self) -> bool:
        return self._dirty

    def mark_dirty(self) -> None:
        """Force the next read to call the getter again."""
        self._dirty = True

    def __repr__(self) -> str:
        name = getattr(self._getter, "__name__", repr(self._getter))
        state = "dirty" if self._dirty else f"cached={self._cache!r}"
        return f"Computed({name}, {state})"


def make_computed(binding: Binding, getter: Callable[[], T]) -> Computed[T]:
    """Register a Computed on binding's host.

    Usage:
        state = binding.reactive({"count": 2})
        doubled = make_computed(binding, lambda: state.count * 2)
        doubled.value  # 4, getter runs once
        doubled.value  # 4, from cache
    """
    cell = Computed(getter)
    binding.context.computed[_anchor.new_token()] = cell
    return cell


def make_computed_group(
    binding: Binding, getters: Mapping[str, Callable[[], object]]
) -> dict[str, Computed]:
    """One independently cached Computed per entry, keyed like getters."""
    return {name: make_computed(binding, getter) for name, getter in getters.items()}

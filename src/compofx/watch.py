"""Watchers: call back with (new, old) when a getter's result changes.

The getter runs once at registration to seed the previous value, then once
per pre-update pass. Values compare with same-value semantics, so a getter
returning a fresh but equal list counts as a change. Deep watching is not
implemented.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, Iterable, TypeVar

from compofx import _anchor
from compofx._same import is_same
from compofx.errors import report, warn

if TYPE_CHECKING:
    from compofx.binder import Binding

T = TypeVar("T")

WatchCallback = Callable[[T, T], object]


class Watcher(Generic[T]):
    """A registered getter/callback pair and the last value it observed."""

    __slots__ = ("_getter", "_callback", "value")

    def __init__(self, getter: Callable[[], T], callback: WatchCallback, value: T) -> None:
        self._getter = getter
        self._callback = callback
        self.value = value

    def check(self) -> bool:
        """Re-read the getter and fire the callback on change. Returns True if it fired."""
        try:
            new_value = self._getter()
        except Exception as error:
            report("Error in watch getter", error)
            return False
        if is_same(new_value, self.value):
            return False
        # Store first so a callback that writes state sees the new baseline.
        old_value, self.value = self.value, new_value
        try:
            self._callback(new_value, old_value)
        except Exception as error:
            report("Error in watch callback", error)
        return True

    def __repr__(self) -> str:
        name = getattr(self._getter, "__name__", repr(self._getter))
        return f"Watcher({name}, value={self.value!r})"


def register_watch(
    binding: Binding, getter: Callable[[], T], callback: WatchCallback
) -> Watcher[T] | None:
    """Watch getter's result on binding's host.

    Returns None, without registering anything, if the seeding call raises.

    Usage:
        register_watch(
            binding,
            lambda: state.count,
            lambda new, old: print(f"{old} -> {new}"),
        )
    """
    try:
        value = getter()
    except Exception as error:
        report("Error in watch getter", error)
        return None
    watcher = Watcher(getter, callback, value)
    binding.context.watchers[_anchor.new_token()] = watcher
    return watcher


def register_watch_multiple(
    binding: Binding, pairs: Iterable[tuple[Callable[[], object], WatchCallback]]
) -> list[Watcher | None]:
    """Register each (getter, callback) pair independently, in order."""
    return [register_watch(binding, getter, callback) for getter, callback in pairs]


def register_watch_object(
    binding: Binding,
    getter: Callable[[], T],
    callback: WatchCallback,
    *,
    deep: bool = False,
) -> Watcher[T] | None:
    """Watch an object-valued getter.

    Only identity changes of the returned object are seen. deep=True is
    accepted but behaves like a shallow watch and logs a warning.
    """
    if deep:
        warn("Deep watching is not yet implemented; falling back to a shallow watch")
    return register_watch(binding, getter, callback)

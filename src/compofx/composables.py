"""Composable helpers: thin forwards to the primitives.

Each helper takes a Binding, or a host carrying one as .binding, so reusable
composables can be written against either:

    def use_counter(host, start=0):
        state = use_reactive(host, {"count": start})
        is_zero = use_computed(host, lambda: state.count == 0)

        def increment():
            state.count += 1

        return state, is_zero, increment
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from compofx.binder import Binding
from compofx.computed import Computed
from compofx.effect import Cleanup, DepsGetter, Effect, EffectFn
from compofx.errors import BindingError
from compofx.watch import WatchCallback, Watcher

T = TypeVar("T")


def _binding_of(target: Any) -> Binding:
    if isinstance(target, Binding):
        return target
    binding = getattr(target, "binding", None)
    if isinstance(binding, Binding):
        return binding
    raise BindingError(f"{type(target).__name__} is not attached")


def use_reactive(target: Any, initial: T) -> T:
    return _binding_of(target).reactive(initial)


def use_effect(target: Any, fn: EffectFn, deps: DepsGetter | None = None) -> Effect:
    return _binding_of(target).effect(fn, deps)


def use_mount(target: Any, fn: EffectFn) -> Effect:
    """Run fn once at mount. A callable it returns runs at unmount."""
    return use_effect(target, fn, lambda: ())


def use_unmount(target: Any, cleanup: Cleanup) -> Effect:
    """Run cleanup once when the host unmounts."""
    return use_effect(target, lambda: cleanup, lambda: ())


def use_computed(target: Any, getter: Callable[[], T]) -> Computed[T]:
    return _binding_of(target).computed(getter)


def use_watch(target: Any, getter: Callable[[], T], callback: WatchCallback) -> Watcher[T] | None:
    return _binding_of(target).watch(getter, callback)

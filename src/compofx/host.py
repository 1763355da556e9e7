"""Host contract: lifecycle hook registry and a minimal reference host.

A host is anything with:
    update()     request a re-render; runs the before_update hooks first
    is_mounted   whether the mount hooks have fired
    hooks        a LifecycleHooks registry

Hosts expose ordered callback lists per hook name instead of single
overwritable slots, so the binder can put its callbacks in front of the
host's own without chaining function references by hand.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from compofx.errors import BindingError

if TYPE_CHECKING:
    from compofx.binder import Binding

MOUNT = "mount"
BEFORE_UPDATE = "before_update"
BEFORE_UNMOUNT = "before_unmount"
UNMOUNTED = "unmounted"

HOOK_NAMES = (MOUNT, BEFORE_UPDATE, BEFORE_UNMOUNT, UNMOUNTED)

Hook = Callable[..., Any]


class LifecycleHooks:
    """Ordered callback lists, one per lifecycle hook name."""

    __slots__ = ("_callbacks",)

    def __init__(self) -> None:
        self._callbacks: dict[str, list[Hook]] = {name: [] for name in HOOK_NAMES}

    def _list(self, name: str) -> list[Hook]:
        try:
            return self._callbacks[name]
        except KeyError:
            raise ValueError(f"Unknown lifecycle hook {name!r}") from None

    def add(self, name: str, callback: Hook, *, first: bool = False) -> None:
        """Register callback for name. first=True puts it ahead of existing ones."""
        callbacks = self._list(name)
        if first:
            callbacks.insert(0, callback)
        else:
            callbacks.append(callback)

    def remove(self, name: str, callback: Hook) -> None:
        """Unregister callback. Missing callbacks are ignored."""
        callbacks = self._list(name)
        try:
            callbacks.remove(callback)
        except ValueError:
            pass  # already removed

    def callbacks(self, name: str) -> tuple[Hook, ...]:
        return tuple(self._list(name))

    def run(self, name: str, *args: Any, **kwargs: Any) -> None:
        """Call every callback for name in order with the given arguments."""
        # Snapshot: callbacks may register or remove hooks while running.
        for callback in tuple(self._list(name)):
            callback(*args, **kwargs)


class Host:
    """A minimal host: drives its hooks and counts renders.

    Subclasses override render(). After attach(), the primitives are
    available as methods:

        class Counter(Host):
            def setup(self):
                self.state = self.reactive({"count": 0})
                self.doubled = self.computed(lambda: self.state.count * 2)

        counter = Counter()
        attach(counter)
        counter.setup()
        counter.mount()
        counter.state.count += 1  # render_count == 1
    """

    def __init__(self) -> None:
        self.hooks = LifecycleHooks()
        self.is_mounted = False
        self.render_count = 0
        self.binding: Binding | None = None

    # --- Binding ---

    def bind(self, binding: Binding) -> None:
        if self.binding is not None:
            raise BindingError(f"{type(self).__name__} is already attached")
        self.binding = binding

    def unbind(self) -> None:
        self.binding = None

    def _require_binding(self) -> Binding:
        if self.binding is None:
            raise BindingError(f"{type(self).__name__} is not attached")
        return self.binding

    # --- Lifecycle ---

    def mount(self, *args: Any, **kwargs: Any) -> None:
        self.is_mounted = True
        self.hooks.run(MOUNT, *args, **kwargs)

    def update(self, *args: Any, **kwargs: Any) -> None:
        self.hooks.run(BEFORE_UPDATE, *args, **kwargs)
        self.render_count += 1
        self.render()

    def unmount(self, *args: Any, **kwargs: Any) -> None:
        self.hooks.run(BEFORE_UNMOUNT, *args, **kwargs)
        self.is_mounted = False
        self.hooks.run(UNMOUNTED, *args, **kwargs)

    def render(self) -> None:
        """Re-render. No-op by default."""

    # --- Primitives ---

    def reactive(self, initial):
        return self._require_binding().reactive(initial)

    def effect(self, fn, deps=None):
        return self._require_binding().effect(fn, deps)

    def computed(self, getter):
        return self._require_binding().computed(getter)

    def computed_group(self, getters):
        return self._require_binding().computed_group(getters)

    def watch(self, getter, callback):
        return self._require_binding().watch(getter, callback)

    def watch_multiple(self, pairs):
        return self._require_binding().watch_multiple(pairs)

    def watch_object(self, getter, callback, *, deep=False):
        return self._require_binding().watch_object(getter, callback, deep=deep)

"""Textual integration for compofx. Opt-in, requires textual.

WidgetHost adapts a Textual widget to the host contract: update() runs the
pre-update pass and then widget.refresh(). The widget forwards its own
lifecycle by calling mounted() / unmounted() from on_mount / on_unmount:

    class CounterView(Static):
        def __init__(self):
            super().__init__()
            self.host = bind_widget(self)
            self.state = self.host.binding.reactive({"count": 0})
            effect(self.host, self._show, lambda: [self.state.count])

        def on_mount(self):
            self.host.mounted()

        def on_unmount(self):
            self.host.unmounted()

        def _show(self):
            self.query_one("#count", Label).update(str(self.state.count))

// [LAW:single-enforcer] Pause guard + NoMatches handling enforced here, not at callsites.
// [LAW:no-shared-mutable-globals] _paused_hosts has single owner (this module), explicit API
//   (pause/is_safe), documented invariant (id present ↔ inside pause context).
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Callable

from textual.css.query import NoMatches

from compofx.binder import Binding, attach
from compofx.effect import DepsGetter, Effect, EffectFn
from compofx.errors import BindingError
from compofx.host import BEFORE_UNMOUNT, BEFORE_UPDATE, MOUNT, UNMOUNTED, LifecycleHooks
from compofx.watch import WatchCallback, Watcher

# Module-owned pause state, keyed by id(host) so multiple widgets work in tests.
_paused_hosts: set[int] = set()


@contextmanager
def pause(host: WidgetHost):
    """Suspend update requests during widget replacement."""
    key = id(host)
    _paused_hosts.add(key)
    try:
        yield
    finally:
        _paused_hosts.discard(key)


def is_safe(host: WidgetHost) -> bool:
    """Is the widget mounted and not paused?"""
    return host.is_mounted and id(host) not in _paused_hosts


class WidgetHost:
    """Host contract over a Textual widget."""

    def __init__(self, widget: Any, *, layout: bool = False) -> None:
        self.widget = widget
        self.layout = layout
        self.hooks = LifecycleHooks()
        self.binding: Binding | None = None
        self._mounted = False

    @property
    def is_mounted(self) -> bool:
        return self._mounted

    def bind(self, binding: Binding) -> None:
        if self.binding is not None:
            raise BindingError(f"{type(self.widget).__name__} is already attached")
        self.binding = binding

    def unbind(self) -> None:
        self.binding = None

    def update(self) -> None:
        """Run the pre-update pass and refresh the widget. Skipped while paused."""
        if id(self) in _paused_hosts:
            return
        self.hooks.run(BEFORE_UPDATE)
        self.widget.refresh(layout=self.layout)

    def mounted(self) -> None:
        """Call from the widget's on_mount handler."""
        self._mounted = True
        self.hooks.run(MOUNT)

    def unmounted(self) -> None:
        """Call from the widget's on_unmount handler."""
        self.hooks.run(BEFORE_UNMOUNT)
        self._mounted = False
        self.hooks.run(UNMOUNTED)


def bind_widget(widget: Any, *, layout: bool = False) -> WidgetHost:
    """Wrap widget in a WidgetHost and attach it."""
    host = WidgetHost(widget, layout=layout)
    attach(host)
    return host


def _binding(host: WidgetHost) -> Binding:
    if host.binding is None:
        raise BindingError(f"{type(host.widget).__name__} is not attached")
    return host.binding


def effect(host: WidgetHost, fn: EffectFn, deps: DepsGetter | None = None) -> Effect:
    """effect() that tolerates widget replacement.

    Skips while the host is paused and swallows NoMatches from widget
    queries. Other exceptions are reported like any effect failure.
    """

    def _guarded():
        if id(host) in _paused_hosts:
            return None
        try:
            return fn()
        except NoMatches:
            return None

    return _binding(host).effect(_guarded, deps)


def watch(host: WidgetHost, getter: Callable[[], Any], callback: WatchCallback) -> Watcher | None:
    """watch() whose callback skips while unsafe and swallows NoMatches."""

    def _guarded(new_value, old_value):
        if not is_safe(host):
            return
        try:
            callback(new_value, old_value)
        except NoMatches:
            pass

    return _binding(host).watch(getter, _guarded)

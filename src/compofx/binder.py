"""Lifecycle binder: ties a Context to a host's lifecycle hooks.

attach(host) puts four callbacks at the front of the host's hook lists:

    mount            run effects registered before mount, in order
    before_update    mark every computed dirty, check watchers, check effects
    before_unmount   run the teardown list, one guarded call per entry
    unmounted        clear the context

The host's own callbacks for each hook still run, after the binder's. The
pre-update pass is the only invalidation mechanism: it is synchronous, runs
once per host update, and visits each collection in registration order.

install() returns a Plugin handle that attaches hosts and detaches them all
on uninstall(plugin). There is no process-wide install flag.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, TypeVar

from compofx.computed import Computed, make_computed, make_computed_group
from compofx.context import Context
from compofx.effect import DepsGetter, Effect, EffectFn, register_effect
from compofx.errors import BindingError, PluginError, report
from compofx.host import BEFORE_UNMOUNT, BEFORE_UPDATE, MOUNT, UNMOUNTED
from compofx.reactive import ReactiveStore, make_reactive
from compofx.watch import (
    WatchCallback,
    Watcher,
    register_watch,
    register_watch_multiple,
    register_watch_object,
)

logger = logging.getLogger("compofx.binder")

T = TypeVar("T")


class Binding:
    """Handle for one attached host. Its methods are the four primitives."""

    def __init__(self, host: Any) -> None:
        self.host = host
        self.context = Context()
        self.store = ReactiveStore(lambda: self.host.update())
        self.attached = False
        self._pass_depth = 0
        self._hooks = (
            (MOUNT, self._on_mount),
            (BEFORE_UPDATE, self._on_before_update),
            (BEFORE_UNMOUNT, self._on_before_unmount),
            (UNMOUNTED, self._on_unmounted),
        )

    @property
    def mounted(self) -> bool:
        return bool(getattr(self.host, "is_mounted", False))

    # --- Primitives ---

    def reactive(self, initial: T) -> T:
        return make_reactive(self, initial)

    def effect(self, fn: EffectFn, deps: DepsGetter | None = None) -> Effect:
        return register_effect(self, fn, deps)

    def computed(self, getter: Callable[[], T]) -> Computed[T]:
        return make_computed(self, getter)

    def computed_group(self, getters: Mapping[str, Callable[[], object]]) -> dict[str, Computed]:
        return make_computed_group(self, getters)

    def watch(self, getter: Callable[[], T], callback: WatchCallback) -> Watcher[T] | None:
        return register_watch(self, getter, callback)

    def watch_multiple(
        self, pairs: Iterable[tuple[Callable[[], object], WatchCallback]]
    ) -> list[Watcher | None]:
        return register_watch_multiple(self, pairs)

    def watch_object(
        self, getter: Callable[[], T], callback: WatchCallback, *, deep: bool = False
    ) -> Watcher[T] | None:
        return register_watch_object(self, getter, callback, deep=deep)

    # --- Hook registration ---

    def _register(self) -> None:
        for name, callback in self._hooks:
            self.host.hooks.add(name, callback, first=True)
        self.attached = True

    def _unregister(self) -> None:
        for name, callback in self._hooks:
            self.host.hooks.remove(name, callback)
        self.attached = False

    # --- Lifecycle ---

    def _on_mount(self, *args: Any, **kwargs: Any) -> None:
        pending = list(self.context.pending)
        self.context.pending.clear()
        for effect in pending:
            effect.pending = False
            effect.run()

    def _on_before_update(self, *args: Any, **kwargs: Any) -> None:
        self._pass_depth += 1
        try:
            if self._pass_depth > 1:
                logger.debug(
                    "Nested pre-update pass on %r (depth %d)", self.host, self._pass_depth
                )
            self.run_update_pass()
        finally:
            self._pass_depth -= 1

    def run_update_pass(self) -> None:
        """Invalidate computed cells, then check watchers, then check effects."""
        context = self.context
        for cell in list(context.computed.values()):
            cell.mark_dirty()
        for watcher in list(context.watchers.values()):
            watcher.check()
        for effect in list(context.effects.values()):
            if effect.pending:
                effect.sync_deps()  # runs at mount with current deps
                continue
            effect.check()

    def _on_before_unmount(self, *args: Any, **kwargs: Any) -> None:
        self.run_cleanups()

    def _on_unmounted(self, *args: Any, **kwargs: Any) -> None:
        self.context.clear()

    def run_cleanups(self) -> None:
        """Run every teardown entry in order; one failure does not stop the rest."""
        for cleanup in list(self.context.cleanups):
            try:
                cleanup()
            except Exception as error:
                report("Error in cleanup", error)

    def __repr__(self) -> str:
        state = "attached" if self.attached else "detached"
        return f"Binding({type(self.host).__name__}, {state}, {self.context!r})"


def attach(host: Any) -> Binding:
    """Bind a new Context to host and return its handle.

    host must provide update(), is_mounted and a LifecycleHooks as .hooks.
    Hosts with a bind() method (such as Host) receive the binding and raise
    BindingError if they are already attached.
    """
    if not callable(getattr(host, "update", None)) or not hasattr(host, "hooks"):
        raise TypeError(
            f"{type(host).__name__} does not implement the host contract "
            "(update() and hooks are required)"
        )
    binding = Binding(host)
    bind = getattr(host, "bind", None)
    if bind is not None:
        bind(binding)
    binding._register()
    logger.debug("Attached %r", host)
    return binding


def detach(binding: Binding) -> None:
    """Unhook binding from its host and release everything it registered.

    Cleanups still outstanding (the host never unmounted) run first. The
    host's own hook callbacks are left in place.
    """
    if not binding.attached:
        raise BindingError("Binding is already detached")
    binding._unregister()
    binding.run_cleanups()
    binding.context.clear()
    unbind = getattr(binding.host, "unbind", None)
    if unbind is not None:
        unbind()
    logger.debug("Detached %r", binding.host)


class Plugin:
    """Handle returned by install(). Attaches hosts and remembers them."""

    def __init__(self) -> None:
        self._bindings: list[Binding] = []
        self._installed = True

    @property
    def installed(self) -> bool:
        return self._installed

    @property
    def bindings(self) -> tuple[Binding, ...]:
        return tuple(b for b in self._bindings if b.attached)

    def enhance(self, host: Any) -> Binding:
        """Attach host through this plugin."""
        if not self._installed:
            raise PluginError("Plugin is not installed")
        self._bindings = [b for b in self._bindings if b.attached]
        if any(b.host is host for b in self._bindings):
            raise BindingError(f"{type(host).__name__} is already enhanced by this plugin")
        binding = attach(host)
        self._bindings.append(binding)
        return binding


def install() -> Plugin:
    """Create a plugin handle. Each call returns an independent handle."""
    plugin = Plugin()
    logger.info("Plugin installed")
    return plugin


def uninstall(plugin: Plugin) -> None:
    """Detach every host still attached through plugin and deactivate it."""
    if not plugin.installed:
        raise PluginError("Plugin is not installed")
    for binding in plugin.bindings:
        detach(binding)
    plugin._bindings.clear()
    plugin._installed = False
    logger.info("Plugin uninstalled")

"""Per-instance context: everything one host's primitives registered.

A Context is owned by exactly one Binding. The binder walks it on every
lifecycle hook and clears it when the host unmounts.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from compofx.computed import Computed
    from compofx.effect import Effect
    from compofx.watch import Watcher


class Context:
    """Keyed registries of states, computed cells, effects and watchers."""

    __slots__ = ("states", "computed", "effects", "watchers", "cleanups", "pending")

    def __init__(self) -> None:
        self.states: dict[int, Any] = {}
        self.computed: dict[int, Computed] = {}
        self.effects: dict[int, Effect] = {}
        self.watchers: dict[int, Watcher] = {}
        # Teardown callables, run once in registration order before unmount.
        self.cleanups: list[Callable[[], Any]] = []
        # Effects registered before mount, run in registration order at mount.
        self.pending: list[Effect] = []

    def clear(self) -> None:
        self.states.clear()
        self.computed.clear()
        self.effects.clear()
        self.watchers.clear()
        self.cleanups.clear()
        self.pending.clear()

    @property
    def is_empty(self) -> bool:
        return not (
            self.states or self.computed or self.effects or self.watchers or self.cleanups
        )

    def __repr__(self) -> str:
        return (
            f"Context(states={len(self.states)}, computed={len(self.computed)}, "
            f"effects={len(self.effects)}, watchers={len(self.watchers)}, "
            f"cleanups={len(self.cleanups)})"
        )

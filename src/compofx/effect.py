"""Effects: side effects run at mount and re-run when their deps change.

An effect with no deps getter runs exactly once: at mount, or immediately if
the host is already mounted. An effect with a deps getter also runs at mount,
then again on every pre-update pass whose dependency snapshot differs from
the previous one.

Each run first calls the cleanup returned by the previous run. Whatever
cleanup is current when the host unmounts is called from the teardown list.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Sequence

from compofx import _anchor
from compofx._same import deps_changed
from compofx.errors import report

if TYPE_CHECKING:
    from compofx.binder import Binding

Cleanup = Callable[[], Any]
EffectFn = Callable[[], "Cleanup | None"]
DepsGetter = Callable[[], Sequence[Any]]


class Effect:
    """A registered effect, its dependency snapshot and its live cleanup."""

    __slots__ = ("_fn", "_deps_getter", "deps", "cleanup", "run_count", "pending")

    def __init__(self, fn: EffectFn, deps_getter: DepsGetter | None = None) -> None:
        self._fn = fn
        self._deps_getter = deps_getter
        self.deps: tuple | None = None
        self.cleanup: Cleanup | None = None
        self.run_count = 0
        # Waiting for the host to mount.
        self.pending = False
        if deps_getter is not None:
            self.deps = self._read_deps()

    @property
    def has_deps(self) -> bool:
        return self._deps_getter is not None

    def _read_deps(self) -> tuple | None:
        try:
            return tuple(self._deps_getter())  # type: ignore[misc]
        except Exception as error:
            report("Error in effect dependency getter", error)
            return None

    def run(self) -> None:
        """Call the previous cleanup, then the effect. Errors are reported."""
        self._run_cleanup("Error in effect cleanup")
        self.run_count += 1
        try:
            result = self._fn()
        except Exception as error:
            report("Error in effect", error)
            return
        self.cleanup = result if callable(result) else None

    def check(self) -> bool:
        """Re-run if the dependency snapshot changed. Returns True if it ran."""
        if self._deps_getter is None:
            return False
        new_deps = self._read_deps()
        if new_deps is None:
            return False
        if not deps_changed(self.deps, new_deps):
            return False
        self.deps = new_deps
        self.run()
        return True

    def sync_deps(self) -> None:
        """Take a fresh snapshot without running. Used while mount is still pending."""
        if self._deps_getter is None:
            return
        new_deps = self._read_deps()
        if new_deps is not None:
            self.deps = new_deps

    def teardown(self) -> None:
        """Call whatever cleanup is current. Errors propagate to the caller."""
        cleanup, self.cleanup = self.cleanup, None
        if cleanup is not None:
            cleanup()

    def _run_cleanup(self, message: str) -> None:
        cleanup, self.cleanup = self.cleanup, None
        if cleanup is None:
            return
        try:
            cleanup()
        except Exception as error:
            report(message, error)

    def __repr__(self) -> str:
        name = getattr(self._fn, "__name__", repr(self._fn))
        return f"Effect({name}, deps={self.deps!r}, runs={self.run_count})"


def register_effect(
    binding: Binding, fn: EffectFn, deps: DepsGetter | None = None
) -> Effect:
    """Register fn as an effect of binding's host.

    Usage:
        def sync_title():
            window.title = f"Count: {state.count}"
            return lambda: setattr(window, "title", "")

        register_effect(binding, sync_title, lambda: [state.count])
    """
    effect = Effect(fn, deps)
    context = binding.context
    context.effects[_anchor.new_token()] = effect

    if binding.mounted:
        effect.run()
    else:
        effect.pending = True
        context.pending.append(effect)

    context.cleanups.append(effect.teardown)
    return effect

"""compofx: per-instance reactivity for host UI components."""

from importlib.metadata import version as _version

__version__ = _version("compofx")

from compofx._same import is_same
from compofx.errors import BindingError, CompofxError, PluginError, set_error_handler
from compofx.reactive import (
    ReactiveDict,
    ReactiveList,
    ReactiveObject,
    ReactiveStore,
    is_reactive,
    make_reactive,
    to_raw,
)
from compofx.computed import Computed, make_computed, make_computed_group
from compofx.effect import Effect, register_effect
from compofx.watch import Watcher, register_watch, register_watch_multiple, register_watch_object
from compofx.context import Context
from compofx.host import Host, LifecycleHooks
from compofx.binder import Binding, Plugin, attach, detach, install, uninstall
from compofx.composables import (
    use_computed,
    use_effect,
    use_mount,
    use_reactive,
    use_unmount,
    use_watch,
)
# textual NOT auto-imported, opt-in only

__all__ = [
    "Binding",
    "BindingError",
    "CompofxError",
    "Computed",
    "Context",
    "Effect",
    "Host",
    "LifecycleHooks",
    "Plugin",
    "PluginError",
    "ReactiveDict",
    "ReactiveList",
    "ReactiveObject",
    "ReactiveStore",
    "Watcher",
    "attach",
    "detach",
    "install",
    "is_reactive",
    "is_same",
    "make_computed",
    "make_computed_group",
    "make_reactive",
    "register_effect",
    "register_watch",
    "register_watch_multiple",
    "register_watch_object",
    "set_error_handler",
    "to_raw",
    "uninstall",
    "use_computed",
    "use_effect",
    "use_mount",
    "use_reactive",
    "use_unmount",
    "use_watch",
]

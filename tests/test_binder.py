"""Tests for the lifecycle binder, bindings and plugin handles."""

import logging
from types import SimpleNamespace

import pytest

from compofx import (
    BindingError,
    Host,
    LifecycleHooks,
    PluginError,
    attach,
    detach,
    install,
    uninstall,
)
from compofx.host import BEFORE_UNMOUNT, BEFORE_UPDATE, MOUNT, UNMOUNTED


class _Window:
    title = ""


class TestAttach:
    def test_binder_hooks_go_first(self):
        host = Host()
        own = lambda *args: None  # noqa: E731
        for name in (MOUNT, BEFORE_UPDATE, BEFORE_UNMOUNT, UNMOUNTED):
            host.hooks.add(name, own)
        attach(host)
        for name in (MOUNT, BEFORE_UPDATE, BEFORE_UNMOUNT, UNMOUNTED):
            callbacks = host.hooks.callbacks(name)
            assert len(callbacks) == 2
            assert callbacks[-1] is own

    def test_existing_hook_runs_after_pass(self):
        host = Host()
        seen = []
        host.hooks.add(BEFORE_UPDATE, lambda: seen.append(doubled.dirty))
        binding = attach(host)
        doubled = binding.computed(lambda: 2)
        doubled.value
        host.update()
        assert seen == [True]

    def test_host_receives_binding(self):
        host = Host()
        binding = attach(host)
        assert host.binding is binding
        assert binding.attached

    def test_attach_twice_raises(self):
        host = Host()
        attach(host)
        with pytest.raises(BindingError, match="already attached"):
            attach(host)

    def test_duck_typed_host(self):
        host = SimpleNamespace(hooks=LifecycleHooks(), is_mounted=True, renders=[])
        host.update = lambda: host.renders.append(1)
        binding = attach(host)
        state = binding.reactive({"n": 0})
        state.n = 1
        assert host.renders == [1]

    def test_rejects_non_host(self):
        with pytest.raises(TypeError, match="host contract"):
            attach(object())

    def test_primitives_need_binding(self):
        with pytest.raises(BindingError, match="not attached"):
            Host().reactive({})


class TestUpdatePass:
    def test_order_computed_watchers_effects(self):
        host = Host()
        binding = attach(host)
        state = binding.reactive({"n": 0})
        order = []
        doubled = binding.computed(lambda: state.n * 2)
        doubled.value

        def watch_cb(new, old):
            order.append(("watch", doubled.dirty))

        def effect():
            order.append(("effect", doubled.dirty))

        binding.effect(effect, lambda: [state.n])
        binding.watch(lambda: state.n, watch_cb)
        host.mount()
        order.clear()
        state.n = 1
        assert order == [("watch", True), ("effect", True)]

    def test_nested_pass_is_logged(self, caplog):
        host = Host()
        binding = attach(host)
        state = binding.reactive({"a": 0, "b": 0})
        binding.watch(lambda: state.a, lambda new, old: setattr(state, "b", new))
        with caplog.at_level(logging.DEBUG, logger="compofx.binder"):
            state.a = 1
        assert state.b == 1
        assert "Nested pre-update pass" in caplog.text
        assert host.render_count == 2


class TestTeardown:
    def test_cleanups_run_once_and_context_empties(self):
        host = Host()
        binding = attach(host)
        state = binding.reactive({"n": 0})
        calls = []
        binding.effect(lambda: (lambda: calls.append("a")))
        binding.effect(lambda: (lambda: calls.append("b")), lambda: [state.n])
        binding.effect(lambda: None)
        binding.computed(lambda: 1)
        binding.watch(lambda: state.n, lambda new, old: None)
        host.mount()

        host.unmount()
        assert calls == ["a", "b"]
        context = binding.context
        assert context.is_empty
        assert context.states == {}
        assert context.computed == {}
        assert context.effects == {}
        assert context.watchers == {}
        assert context.cleanups == []

    def test_failing_cleanup_does_not_stop_the_rest(self, caplog):
        host = Host()
        binding = attach(host)
        calls = []

        def bad_cleanup():
            raise RuntimeError("cleanup failed")

        binding.effect(lambda: bad_cleanup)
        binding.effect(lambda: (lambda: calls.append("second")))
        host.mount()
        with caplog.at_level(logging.ERROR, logger="compofx"):
            host.unmount()
        assert calls == ["second"]
        assert "[compofx] Error in cleanup" in caplog.text

    def test_host_unmount_hooks_still_run(self):
        host = Host()
        calls = []
        host.hooks.add(BEFORE_UNMOUNT, lambda: calls.append("before"))
        host.hooks.add(UNMOUNTED, lambda: calls.append("after"))
        binding = attach(host)
        binding.effect(lambda: (lambda: calls.append("cleanup")))
        host.mount()
        host.unmount()
        assert calls == ["cleanup", "before", "after"]


class TestDetach:
    def test_detach_releases_hooks_and_runs_cleanups(self):
        host = Host()
        own = lambda: None  # noqa: E731
        host.hooks.add(BEFORE_UPDATE, own)
        binding = attach(host)
        calls = []
        binding.effect(lambda: (lambda: calls.append("cleanup")))
        host.mount()

        detach(binding)
        assert calls == ["cleanup"]
        assert host.hooks.callbacks(BEFORE_UPDATE) == (own,)
        assert host.hooks.callbacks(MOUNT) == ()
        assert binding.context.is_empty
        assert not binding.attached
        assert host.binding is None

    def test_detach_after_unmount_runs_nothing_twice(self):
        host = Host()
        binding = attach(host)
        calls = []
        binding.effect(lambda: (lambda: calls.append("cleanup")))
        host.mount()
        host.unmount()
        detach(binding)
        assert calls == ["cleanup"]

    def test_detach_twice_raises(self):
        binding = attach(Host())
        detach(binding)
        with pytest.raises(BindingError):
            detach(binding)

    def test_reattach_after_detach(self):
        host = Host()
        detach(attach(host))
        binding = attach(host)
        assert host.binding is binding


class TestPlugin:
    def test_install_returns_independent_handles(self):
        first = install()
        second = install()
        assert first is not second
        assert first.installed and second.installed
        uninstall(first)
        assert not first.installed
        assert second.installed
        uninstall(second)

    def test_enhance_and_uninstall(self):
        plugin = install()
        hosts = [Host(), Host()]
        bindings = [plugin.enhance(h) for h in hosts]
        assert plugin.bindings == tuple(bindings)
        uninstall(plugin)
        assert all(not b.attached for b in bindings)
        assert all(h.binding is None for h in hosts)
        assert plugin.bindings == ()

    def test_enhance_same_host_twice(self):
        plugin = install()
        host = Host()
        plugin.enhance(host)
        with pytest.raises(BindingError):
            plugin.enhance(host)
        uninstall(plugin)

    def test_uninstalled_plugin_rejects_use(self):
        plugin = install()
        uninstall(plugin)
        with pytest.raises(PluginError):
            plugin.enhance(Host())
        with pytest.raises(PluginError):
            uninstall(plugin)

    def test_uninstall_skips_detached(self):
        plugin = install()
        binding = plugin.enhance(Host())
        detach(binding)
        uninstall(plugin)  # does not detach twice

    def test_install_logs(self, caplog):
        with caplog.at_level(logging.INFO, logger="compofx.binder"):
            plugin = install()
            uninstall(plugin)
        assert "Plugin installed" in caplog.text
        assert "Plugin uninstalled" in caplog.text


class TestCounterScenario:
    def test_counter(self):
        """count 0 -> 3: one update, doubled reads 6, watch (3, 0), title effect re-runs after cleanup."""
        host = Host()
        binding = attach(host)
        window = _Window()
        log = []

        state = binding.reactive({"count": 0})
        doubled = binding.computed(lambda: state.count * 2)
        binding.watch(lambda: state.count, lambda new, old: log.append(("watch", new, old)))

        def set_title():
            window.title = f"Count: {state.count}"
            log.append(("title", state.count))
            return lambda: log.append(("cleanup", state.count))

        binding.effect(set_title, lambda: [state.count])
        host.mount()
        assert window.title == "Count: 0"
        assert doubled.value == 0

        log.clear()
        state.count = 3
        assert host.render_count == 1
        assert doubled.dirty
        assert doubled.value == 6
        assert log == [("watch", 3, 0), ("cleanup", 3), ("title", 3)]
        assert window.title == "Count: 3"

"""Reactive containers: state that asks its host to re-render on change.

A ReactiveStore wraps plain containers (dict, list, dataclass or
SimpleNamespace instances) in proxies. Reads hand back proxies for nested
containers, created lazily and cached per raw object. Writes and deletes that
actually change something call the store's update callback, which is the
host's "request re-render" operation.

One store belongs to one host binding. Two bindings wrapping the same raw
object get two distinct proxies, each notifying only its own host.
"""

from __future__ import annotations

import dataclasses
import weakref
from collections.abc import MutableMapping, MutableSequence
from types import SimpleNamespace
from typing import TYPE_CHECKING, Any, Callable, Iterator, TypeVar

from compofx import _anchor
from compofx._same import is_same
from compofx.errors import report

if TYPE_CHECKING:
    from compofx.binder import Binding

T = TypeVar("T")

_MISSING = object()


def is_reactive(value: object) -> bool:
    """True if value is a proxy produced by a ReactiveStore."""
    return _anchor.is_proxy(value)


def to_raw(value: T) -> T:
    """Return the raw object behind a proxy. Anything else is returned as is."""
    if _anchor.is_proxy(value):
        return object.__getattribute__(value, "_raw")
    return value


def _proxy_type(raw: object) -> type[_Proxy] | None:
    if isinstance(raw, dict):
        return ReactiveDict
    if isinstance(raw, list):
        return ReactiveList
    if isinstance(raw, SimpleNamespace):
        return ReactiveObject
    if dataclasses.is_dataclass(raw) and not isinstance(raw, type):
        return ReactiveObject
    return None


class ReactiveStore:
    """Identity-stable proxy factory bound to one update callback."""

    __slots__ = ("_update", "_proxies", "__weakref__")

    def __init__(self, update: Callable[[], Any]) -> None:
        self._update = update
        # id(raw) -> proxy. The proxy keeps its raw object alive, never the reverse.
        self._proxies: weakref.WeakValueDictionary[int, _Proxy] = weakref.WeakValueDictionary()

    def lookup(self, raw: object) -> _Proxy | None:
        """The live proxy for raw in this store, if any."""
        return self._proxies.get(id(raw))

    def wrap(self, value: Any) -> Any:
        """Proxy for a wrappable value; other values pass through unchanged."""
        raw = to_raw(value)
        factory = _proxy_type(raw)
        if factory is None:
            return value
        proxy = self._proxies.get(id(raw))
        if proxy is None:
            proxy = factory(raw, self)
            self._proxies[id(raw)] = proxy
            _anchor.register_proxy(proxy)
        return proxy

    def notify(self) -> None:
        """Request a re-render. Failures are reported, never raised."""
        try:
            self._update()
        except Exception as error:
            report("Error during component update", error)


class _Proxy:
    __slots__ = ("_raw", "_store", "__weakref__")

    def __init__(self, raw: Any, store: ReactiveStore) -> None:
        object.__setattr__(self, "_raw", raw)
        object.__setattr__(self, "_store", store)

    def _wrap(self, value: Any) -> Any:
        return self._store.wrap(value)

    def _notify(self) -> None:
        self._store.notify()

    def __eq__(self, other: object) -> bool:
        return self._raw == to_raw(other)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._raw!r})"


class ReactiveDict(_Proxy, MutableMapping):
    """A dict proxy. String keys can also be used as attributes.

    Keys that collide with mapping methods (keys, items, get, ...) or with the
    proxy internals (_raw, _store) are only readable through item access.
    Attribute writes always go to the dict.
    """

    __slots__ = ()

    # --- Read operations ---

    def __getitem__(self, key: Any) -> Any:
        return self._wrap(self._raw[key])

    def __iter__(self) -> Iterator[Any]:
        return iter(self._raw)

    def __len__(self) -> int:
        return len(self._raw)

    def __contains__(self, key: object) -> bool:
        return key in self._raw

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    # --- Write operations (notify) ---

    def __setitem__(self, key: Any, value: Any) -> None:
        value = to_raw(value)
        if is_same(self._raw.get(key, _MISSING), value):
            return
        self._raw[key] = value
        self._notify()

    def __delitem__(self, key: Any) -> None:
        if key not in self._raw:
            return
        del self._raw[key]
        self._notify()

    def __setattr__(self, name: str, value: Any) -> None:
        self[name] = value

    def __delattr__(self, name: str) -> None:
        del self[name]

    def clear(self) -> None:
        if self._raw:
            self._raw.clear()
            self._notify()


class ReactiveList(_Proxy, MutableSequence):
    """A list proxy. Every mutating operation notifies once if it changed the list."""

    __slots__ = ()

    # --- Read operations ---

    def __getitem__(self, index: Any) -> Any:
        if isinstance(index, slice):
            return [self._wrap(v) for v in self._raw[index]]
        return self._wrap(self._raw[index])

    def __len__(self) -> int:
        return len(self._raw)

    def __iter__(self) -> Iterator[Any]:
        for value in self._raw:
            yield self._wrap(value)

    def __contains__(self, value: object) -> bool:
        return to_raw(value) in self._raw

    # --- Write operations (notify) ---

    def __setitem__(self, index: Any, value: Any) -> None:
        raw = self._raw
        if isinstance(index, slice):
            values = [to_raw(v) for v in value]
            old = raw[index]
            if len(old) == len(values) and all(is_same(a, b) for a, b in zip(old, values)):
                return
            raw[index] = values
        else:
            value = to_raw(value)
            if is_same(raw[index], value):
                return
            raw[index] = value
        self._notify()

    def __delitem__(self, index: Any) -> None:
        before = len(self._raw)
        del self._raw[index]
        if len(self._raw) != before:
            self._notify()

    def insert(self, index: int, value: Any) -> None:
        self._raw.insert(index, to_raw(value))
        self._notify()

    def append(self, value: Any) -> None:
        self._raw.append(to_raw(value))
        self._notify()

    def extend(self, values: Any) -> None:
        values = [to_raw(v) for v in values]
        if not values:
            return
        self._raw.extend(values)
        self._notify()

    def __iadd__(self, values: Any) -> ReactiveList:
        self.extend(values)
        return self

    def pop(self, index: int = -1) -> Any:
        value = self._raw.pop(index)
        self._notify()
        return self._wrap(value)

    def remove(self, value: Any) -> None:
        self._raw.remove(to_raw(value))
        self._notify()

    def clear(self) -> None:
        if self._raw:
            self._raw.clear()
            self._notify()

    def sort(self, *, key: Callable[[Any], Any] | None = None, reverse: bool = False) -> None:
        before = list(self._raw)
        self._raw.sort(key=key, reverse=reverse)
        if any(a is not b for a, b in zip(before, self._raw)):
            self._notify()

    def reverse(self) -> None:
        before = list(self._raw)
        self._raw.reverse()
        if any(a is not b for a, b in zip(before, self._raw)):
            self._notify()


class ReactiveObject(_Proxy):
    """An attribute proxy for dataclass and SimpleNamespace instances.

    Methods of the raw object are returned unbound from the proxy, so mutations
    they make internally bypass notification.
    Attributes named _raw or _store are written to the raw object but read
    back through to_raw().

    Instances of plain classes are not wrapped. Nested inside reactive state
    they come back as is, and writes to their attributes do not re-render.
    """

    __slots__ = ()

    def __getattr__(self, name: str) -> Any:
        return self._wrap(getattr(self._raw, name))

    def __setattr__(self, name: str, value: Any) -> None:
        value = to_raw(value)
        if is_same(getattr(self._raw, name, _MISSING), value):
            return
        setattr(self._raw, name, value)
        self._notify()

    def __delattr__(self, name: str) -> None:
        try:
            delattr(self._raw, name)
        except AttributeError:
            return
        self._notify()

    def __dir__(self) -> list[str]:
        return dir(self._raw)


def make_reactive(binding: Binding, initial: T) -> T:
    """Wrap initial so writes through the result re-render binding's host.

    Usage:
        state = make_reactive(binding, {"count": 0})
        state.count += 1   # host.update() is called once
        state["count"] = 1  # same value, nothing happens

    Only dict, list, dataclass and SimpleNamespace values are wrapped. Plain
    class instances are rejected here and pass through unwrapped when nested.
    """
    raw = to_raw(initial)
    if _proxy_type(raw) is None:
        raise TypeError(
            f"make_reactive() expects a dict, list, dataclass or SimpleNamespace, "
            f"got {type(initial).__name__}"
        )
    store = binding.store
    existing = store.lookup(raw)
    if existing is not None:
        return existing  # type: ignore[return-value]
    proxy = store.wrap(raw)
    binding.context.states[_anchor.new_token()] = proxy
    return proxy

"""Process-wide anchors: token generation and the proxy identity registry.

Everything else is owned by a per-instance Context. The registry only answers
"is this object a proxy we produced?" and holds proxies weakly, so it never
keeps a proxy (or the raw object behind it) alive.
"""

import itertools
import weakref

# id(proxy) -> proxy. An entry disappears when its proxy is collected.
proxies: weakref.WeakValueDictionary = weakref.WeakValueDictionary()

# itertools.count is thread-safe (C-level GIL atomic)
_token_counter = itertools.count(1)


def new_token() -> int:
    """Opaque identity for one registration call."""
    return next(_token_counter)


def register_proxy(proxy) -> None:
    proxies[id(proxy)] = proxy


def is_proxy(value) -> bool:
    proxy = proxies.get(id(value))
    return proxy is not None and proxy is value

"""Same-value comparison used for write gating, watchers and effect deps.

Mirrors strict identity for objects and value equality for immutable scalars.
"""

from __future__ import annotations

import math
from decimal import Decimal
from fractions import Fraction
from typing import Sequence

_SCALARS = (int, bool, str, bytes, complex, Decimal, Fraction)


def is_same(a: object, b: object) -> bool:
    """True if a and b are the same value.

    Identical objects are the same. Scalars of the exact same type compare by
    value; nan equals nan and 0.0 differs from -0.0. Tuples and frozensets
    compare element by element. Everything else compares by identity.
    """
    if a is b:
        return True
    if type(a) is not type(b):
        return False
    if isinstance(a, float):
        if math.isnan(a) and math.isnan(b):
            return True
        return a == b and math.copysign(1.0, a) == math.copysign(1.0, b)
    if isinstance(a, _SCALARS):
        return a == b
    if isinstance(a, tuple):
        return len(a) == len(b) and all(is_same(x, y) for x, y in zip(a, b))
    if isinstance(a, frozenset):
        return a == b
    return False


def deps_changed(old: Sequence | None, new: Sequence) -> bool:
    """Pairwise dependency comparison. A missing snapshot always counts as changed."""
    if old is None or len(old) != len(new):
        return True
    return any(not is_same(o, n) for o, n in zip(old, new))

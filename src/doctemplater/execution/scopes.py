"""
Scope chain for directive evaluation.

A ScopeChain wraps one level of caller supplied data. Repeated regions create
child scopes around each collection element; lookups that miss in a child fall
back to the enclosing scope, so shared fields stay reachable from inside loops.
"""

import weakref
from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()


def _is_false_scalar(value: Any) -> bool:
    """False, 0 and "" count as misses; empty collections do not."""
    if isinstance(value, (Mapping, Sequence)) and not isinstance(value, str):
        return False
    return not value


class ScopeChain:
    """One node of the hierarchical, memoized lookup chain."""

    def __init__(
        self,
        current: Any,
        parent: "ScopeChain | None" = None,
        *,
        falsy_as_missing: bool = True,
    ):
        """
        Initialize a scope.

        Params:
            current: Data of this level (mapping, sequence, object or scalar)
            parent: Enclosing scope used for fallback lookups, not owned
            falsy_as_missing: Whether falsy values count as lookup misses
        """
        self.current = current
        self.falsy_as_missing = falsy_as_missing
        self._parent_ref = weakref.ref(parent) if parent is not None else None
        self._cache: dict[str, Any] = {}

    @property
    def parent(self) -> "ScopeChain | None":
        """Enclosing scope, or None for the root (or a discarded parent)."""
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    def child(self, current: Any) -> "ScopeChain":
        """Create a scope for nested data that falls back to this one."""
        return ScopeChain(current, self, falsy_as_missing=self.falsy_as_missing)

    def find(self, path: str) -> Any:
        """
        Resolve a dotted path.

        Each segment descends into a mapping key, a sequence index or an
        object attribute. If any segment misses, the whole path is retried on
        the parent scope. Found values are cached on this scope.

        Params:
            path: Dotted path, e.g. "customer.address.city"

        Returns:
            The resolved value, or None when no scope in the chain has it
        """
        if not path:
            return None

        if path in self._cache:
            return self._cache[path]

        data = self._walk(path)
        if data is _MISSING:
            parent = self.parent
            if parent is None:
                return None
            data = parent.find(path)
            if data is None:
                return None

        self._cache[path] = data
        return data

    def _walk(self, path: str) -> Any:
        data = self.current
        for part in path.split("."):
            data = self._step(data, part)
            if data is _MISSING:
                return _MISSING
        return data

    def _step(self, data: Any, part: str) -> Any:
        """Descend one path segment, returning _MISSING on a miss."""
        if isinstance(data, Mapping):
            value = data.get(part, _MISSING)
        elif isinstance(data, Sequence) and not isinstance(data, (str, bytes)):
            if not part.isdigit() or int(part) >= len(data):
                return _MISSING
            value = data[int(part)]
        else:
            value = getattr(data, part, _MISSING) if not part.isdigit() else _MISSING

        if value is _MISSING or value is None:
            return _MISSING
        if self.falsy_as_missing and _is_false_scalar(value):
            return _MISSING
        return value

    def __repr__(self) -> str:
        return f"ScopeChain({self.current!r})"

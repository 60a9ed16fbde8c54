from __future__ import annotations

import inspect
import itertools
import threading
import weakref
from typing import TYPE_CHECKING, Any, Generic, TypeVar

from ._diagnostics import stringify
from ._errors import InvalidTokenError


if TYPE_CHECKING:
    from collections.abc import Callable

T = TypeVar("T")

# Tokens of these types are compared by value, everything else by identity.
_VALUE_TYPES = (str, bytes, int, float, complex)


class InjectionToken(Generic[T]):
    """A unique token for values that have no class of their own.

    Two tokens are never equal, even with the same description:

        CONFIG = InjectionToken[dict]("app config")
        injector = Injector.create([{"provide": CONFIG, "use_value": {...}}])
    """

    __slots__ = ("__weakref__", "description")

    def __init__(self, description: str) -> None:
        self.description = description

    def __repr__(self) -> str:
        return f"InjectionToken({self.description})"


class _ForwardRef:
    __slots__ = ("_fn",)

    def __init__(self, fn: Callable[[], Any]) -> None:
        self._fn = fn

    def __call__(self) -> Any:
        return self._fn()

    def __repr__(self) -> str:
        return f"forward_ref({stringify(self._fn)})"


def forward_ref(fn: Callable[[], Any]) -> Any:
    """Refer to a token that is not defined yet; it is looked up when a registry is built."""
    return _ForwardRef(fn)


def resolve_forward_ref(obj: Any) -> Any:
    if isinstance(obj, _ForwardRef):
        return obj()
    return obj


class TokenIdentity:
    """Assigns stable registry keys to tokens.

    Reference-like tokens get ``<kind>_<n>`` keys from a counter that starts at
    zero and is never reset. Entries are dropped when their token is garbage
    collected, so an ``id()`` is never reused while its key is still mapped;
    tokens that cannot be weakly referenced are kept alive instead. Value-like
    tokens derive their key from type and value, so equal values share a
    registry entry.
    """

    def __init__(self) -> None:
        self._keys: dict[int, str] = {}
        self._pinned: dict[int, Any] = {}
        self._counter = itertools.count()
        # Re-entrant: a finalizer may run during garbage collection inside key_of.
        self._lock = threading.RLock()

    def __len__(self) -> int:
        return len(self._keys)

    def key_of(self, token: Any) -> str:
        key = self.peek(token)
        if key is not None:
            return key

        with self._lock:
            key = self._keys.get(id(token))
            if key is None:
                key = self._keys[id(token)] = f"{_kind(token)}_{next(self._counter)}"
                try:
                    weakref.finalize(token, self._forget, id(token))
                except TypeError:
                    self._pinned[id(token)] = token
            return key

    def peek(self, token: Any) -> str | None:
        """Key of ``token`` if it has one, without assigning a new key."""
        if token is None or (isinstance(token, _VALUE_TYPES) and not token):
            raise InvalidTokenError(token)

        if isinstance(token, _VALUE_TYPES):
            return f"{type(token).__name__}_{token!r}"

        with self._lock:
            return self._keys.get(id(token))

    def _forget(self, token_id: int) -> None:
        with self._lock:
            self._keys.pop(token_id, None)


def _kind(token: Any) -> str:
    if inspect.isclass(token):
        return "class"
    if callable(token):
        return "function"
    return "object"


_IDENTITY = TokenIdentity()


def identity_of(token: Any) -> str:
    return _IDENTITY.key_of(token)


def peek_identity(token: Any) -> str | None:
    return _IDENTITY.peek(token)

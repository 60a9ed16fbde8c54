from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar, overload

from ._diagnostics import stringify
from ._errors import (
    CircularDependencyError,
    InjectorError,
    InstantiationError,
    NoProviderError,
    ResolutionError,
)
from ._providers import (
    IN_PROGRESS,
    UNRESOLVED,
    ClassRecipe,
    ExistingRecipe,
    FactoryRecipe,
    InjectFlags,
    InProgress,
    MultiRecipe,
    Record,
    Resolved,
    Unresolved,
    build_records,
)
from ._tokens import peek_identity


if TYPE_CHECKING:
    from ._tokens import InjectionToken


logger = logging.getLogger(__name__)

T = TypeVar("T")

THROW_IF_NOT_FOUND: Any = object()


class Injector(ABC):
    """Resolves tokens to values.

    ``get(token)`` raises :class:`NoProviderError` when nothing in the chain
    provides ``token``; ``get(token, default)`` returns ``default`` instead.
    An injector given :class:`Injector` as the token returns itself.
    """

    THROW_IF_NOT_FOUND: ClassVar[Any] = THROW_IF_NOT_FOUND
    NULL: ClassVar[Injector]

    @overload
    def get(self, token: type[T] | InjectionToken[T], not_found_value: T = ...) -> T: ...

    @overload
    def get(self, token: Any, not_found_value: Any = ...) -> Any: ...

    @abstractmethod
    def get(self, token: Any, not_found_value: Any = THROW_IF_NOT_FOUND) -> Any:
        raise NotImplementedError

    @staticmethod
    def create(providers: Any, parent: Injector | None = None, *, replace: bool = True) -> Injector:
        """Create an injector configured with static provider descriptions.

        Example:
          injector = Injector.create([
              {"provide": "url", "use_value": "sqlite://"},
              {"provide": Database, "deps": ["url"]},
          ])
          injector.get(Database)

        """
        return StaticInjector(providers, parent, replace=replace)


class NullInjector(Injector):
    """Terminal injector: knows no tokens."""

    def get(self, token: Any, not_found_value: Any = THROW_IF_NOT_FOUND) -> Any:
        if not_found_value is THROW_IF_NOT_FOUND:
            msg = f"No provider for {stringify(token)}!"
            raise NoProviderError(msg, (token,))
        return not_found_value

    def __repr__(self) -> str:
        return "NullInjector()"


Injector.NULL = NullInjector()


class StaticInjector(Injector):
    """Injector over a registry built once from provider descriptions.

    Tokens without a local provider are looked up in ``parent``. Values are
    created on first request and kept for the lifetime of the injector.
    """

    def __init__(self, providers: Any, parent: Injector | None = None, *, replace: bool = True) -> None:
        self.parent = parent if parent is not None else Injector.NULL
        self._lock = threading.RLock()
        self._records = build_records(providers, self_token=Injector, scope=self, replace=replace)
        logger.debug("Created %r", self)

    @overload
    def get(self, token: type[T] | InjectionToken[T], not_found_value: T = ...) -> T: ...

    @overload
    def get(self, token: Any, not_found_value: Any = ...) -> Any: ...

    def get(self, token: Any, not_found_value: Any = THROW_IF_NOT_FOUND) -> Any:
        key = peek_identity(token)
        # A token that never received a key cannot have a local record.
        record = self._records.get(key) if key is not None else None
        with self._lock:
            try:
                return _try_resolve_token(token, record, self._records, self.parent, not_found_value)
            except ResolutionError as exc:
                logger.debug("Failed to resolve %s: %s", stringify(token), exc)
                raise

    def __contains__(self, token: Any) -> bool:
        """Whether ``token`` has a provider in this injector (parents are not consulted)."""
        key = peek_identity(token)
        return key is not None and key in self._records

    def __repr__(self) -> str:
        tokens = ", ".join(stringify(record.token) for record in self._records.values())
        return f"StaticInjector[{tokens}]"


def _try_resolve_token(
    token: Any,
    record: Record | None,
    records: dict[str, Record],
    parent: Injector,
    not_found_value: Any,
) -> Any:
    try:
        return _resolve_token(token, record, records, parent, not_found_value)
    except BaseException as exc:
        if record is not None and isinstance(record.state, InProgress):
            # Only a live resolution may hold the marker; a later retry starts over.
            record.state = UNRESOLVED

        # A delegated lookup already carries the path reported by the parent.
        if record is None or not isinstance(exc, ResolutionError):
            raise
        raise exc.with_token(token) from exc.__cause__


def _resolve_token(
    token: Any,
    record: Record | None,
    records: dict[str, Record],
    parent: Injector,
    not_found_value: Any,
) -> Any:
    if record is None:
        return parent.get(token, not_found_value)

    match record.state:
        case Resolved(value):
            return value
        case InProgress():
            msg = "Circular dependency"
            raise CircularDependencyError(msg)
        case Unresolved():
            record.state = IN_PROGRESS
            args = []
            for dep in record.deps:
                child = records.get(dep.key) if InjectFlags.CHECK_SELF in dep.flags else None
                args.append(
                    _try_resolve_token(
                        dep.token,
                        child,
                        records,
                        # Missing locally and not allowed upwards: only the null injector is left.
                        Injector.NULL if child is None and InjectFlags.CHECK_PARENT not in dep.flags else parent,
                        None if InjectFlags.OPTIONAL in dep.flags else THROW_IF_NOT_FOUND,
                    )
                )
            value = _invoke(record, args)
            record.state = Resolved(value)
            return value


def _invoke(record: Record, args: list[Any]) -> Any:
    try:
        match record.recipe:
            case FactoryRecipe(factory):
                value = factory(*args)
            case ClassRecipe(cls):
                # A class call already returns the new instance whatever __init__ returns.
                value = cls(*args)
            case ExistingRecipe():
                return args[0]
            case MultiRecipe():
                return list(args)
    except InjectorError:
        raise
    except Exception as exc:
        msg = f"{type(exc).__name__}: {exc}"
        raise InstantiationError(msg) from exc

    logger.debug("Instantiated %s", stringify(record.token))
    return value

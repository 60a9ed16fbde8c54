from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Flag
from typing import TYPE_CHECKING, Any

from ._diagnostics import stringify
from ._errors import DuplicateProviderError, InvalidProviderError, MissingDepsError, MixedMultiProviderError
from ._tokens import identity_of, resolve_forward_ref


if TYPE_CHECKING:
    from collections.abc import Callable


logger = logging.getLogger(__name__)


class InjectFlags(Flag):
    OPTIONAL = 1
    CHECK_SELF = 2
    CHECK_PARENT = 4
    DEFAULT = CHECK_SELF | CHECK_PARENT


# Dependency annotations. A dependency given as a list, e.g. ``[Optional, SkipSelf, Logger]``,
# describes a single token; the markers may be used as classes or as instances.


class Optional:
    """Resolve the dependency to ``None`` when no provider is found."""


class Self:
    """Only look the dependency up in the injector that owns the provider."""


class SkipSelf:
    """Start looking the dependency up in the parent injector."""


class Inject:
    """Name the token explicitly inside an annotation list."""

    def __init__(self, token: Any) -> None:
        self.token = token

    def __repr__(self) -> str:
        return f"Inject({stringify(self.token)})"


@dataclass(frozen=True)
class ValueRecipe:
    value: Any


@dataclass(frozen=True)
class FactoryRecipe:
    factory: Callable[..., Any]


@dataclass(frozen=True)
class ClassRecipe:
    cls: Callable[..., Any]


@dataclass(frozen=True)
class ExistingRecipe:
    token: Any


@dataclass(frozen=True)
class MultiRecipe:
    """Placeholder collecting every ``multi`` contribution of a token, in registration order."""


Recipe = ValueRecipe | FactoryRecipe | ClassRecipe | ExistingRecipe | MultiRecipe


@dataclass(frozen=True)
class Unresolved:
    pass


@dataclass(frozen=True)
class InProgress:
    pass


@dataclass(frozen=True)
class Resolved:
    value: Any


UNRESOLVED = Unresolved()
IN_PROGRESS = InProgress()

SlotState = Unresolved | InProgress | Resolved


@dataclass(frozen=True)
class Dependency:
    token: Any
    key: str
    flags: InjectFlags = InjectFlags.DEFAULT


@dataclass(eq=False)
class Record:
    token: Any
    recipe: Recipe
    deps: list[Dependency] = field(default_factory=list)
    state: SlotState = UNRESOLVED

    @property
    def multi(self) -> bool:
        return isinstance(self.recipe, MultiRecipe)

    @property
    def use_new(self) -> bool:
        return isinstance(self.recipe, ClassRecipe)


def build_records(
    providers: Any,
    *,
    self_token: Any,
    scope: Any,
    replace: bool = True,
) -> dict[str, Record]:
    """Normalize (possibly nested) provider descriptions into a registry.

    The registry always contains ``self_token`` resolving to ``scope``.
    With ``replace=False`` a second regular provider for the same token raises
    :class:`DuplicateProviderError` instead of overriding the first one.
    """
    records = {
        identity_of(self_token): Record(token=self_token, recipe=ValueRecipe(scope), state=Resolved(scope)),
    }
    _process_providers(records, providers, replace)
    return records


def _process_providers(records: dict[str, Record], provider: Any, replace: bool) -> None:  # noqa: C901
    if provider is None:
        return

    provider = resolve_forward_ref(provider)

    if isinstance(provider, (list, tuple)):
        for item in provider:
            _process_providers(records, item, replace)
        return

    if callable(provider):
        # Bare classes/functions must be wrapped: {"provide": cls, "deps": [...]}
        msg = "Function/Class not supported"
        raise InvalidProviderError(msg, provider)

    if not isinstance(provider, Mapping) or "provide" not in provider:
        msg = "Unexpected provider"
        raise InvalidProviderError(msg, provider)

    token = resolve_forward_ref(provider["provide"])
    key = identity_of(token)
    record = _resolve_provider(provider, token)

    if provider.get("multi") is True:
        multi_record = records.get(key)
        if multi_record is None:
            multi_record = records[key] = Record(token=token, recipe=MultiRecipe())
        elif not multi_record.multi:
            raise MixedMultiProviderError(provider)

        # Every contribution lives under its own slot key, read back by the placeholder.
        key = f"_{len(multi_record.deps)}_{key}"
        multi_record.deps.append(Dependency(token=token, key=key))

    previous = records.get(key)
    if previous is not None:
        if previous.multi:
            raise MixedMultiProviderError(provider)
        if not replace:
            raise DuplicateProviderError(provider, token)
        logger.warning("Provider for %s overrides an earlier registration", stringify(token))

    records[key] = record


def _resolve_provider(provider: Mapping[str, Any], token: Any) -> Record:
    recipe: Recipe
    if "use_value" in provider:
        recipe = ValueRecipe(provider["use_value"])
    elif "use_factory" in provider:
        recipe = FactoryRecipe(_callable(provider["use_factory"], provider))
    elif "use_class" in provider:
        recipe = ClassRecipe(_callable(resolve_forward_ref(provider["use_class"]), provider))
    elif "use_existing" in provider:
        recipe = ExistingRecipe(resolve_forward_ref(provider["use_existing"]))
    elif callable(token):
        recipe = ClassRecipe(token)
    else:
        msg = "Provider does not have [use_value|use_factory|use_class|use_existing] or [provide] is not callable"
        raise InvalidProviderError(msg, provider)

    deps = _compute_deps(provider, recipe)
    state: SlotState = Resolved(recipe.value) if isinstance(recipe, ValueRecipe) else UNRESOLVED
    return Record(token=token, recipe=recipe, deps=deps, state=state)


def _callable(fn: Any, provider: Mapping[str, Any]) -> Callable[..., Any]:
    if not callable(fn):
        msg = f"{stringify(fn)} is not callable"
        raise InvalidProviderError(msg, provider)
    return fn


def _compute_deps(provider: Mapping[str, Any], recipe: Recipe) -> list[Dependency]:
    declared = provider.get("deps")
    if declared is not None and not isinstance(declared, (list, tuple)):
        msg = "'deps' must be a list"
        raise InvalidProviderError(msg, provider)

    if declared:
        return [_compute_dependency(entry, provider) for entry in declared]

    if isinstance(recipe, ExistingRecipe):
        return [Dependency(token=recipe.token, key=identity_of(recipe.token))]

    # Only value and alias providers may omit their dependencies.
    if declared is None and not isinstance(recipe, ValueRecipe):
        raise MissingDepsError(provider)

    return []


_NO_TOKEN = object()


def _compute_dependency(entry: Any, provider: Mapping[str, Any]) -> Dependency:
    flags = InjectFlags.DEFAULT
    token = resolve_forward_ref(entry)

    if isinstance(token, list):
        annotations, token = token, _NO_TOKEN
        for annotation in annotations:
            if annotation is Optional or isinstance(annotation, Optional):
                flags |= InjectFlags.OPTIONAL
            elif annotation is SkipSelf or isinstance(annotation, SkipSelf):
                flags &= ~InjectFlags.CHECK_SELF
            elif annotation is Self or isinstance(annotation, Self):
                flags &= ~InjectFlags.CHECK_PARENT
            elif isinstance(annotation, Inject):
                token = resolve_forward_ref(annotation.token)
            else:
                token = resolve_forward_ref(annotation)

        if token is _NO_TOKEN:
            msg = f"Dependency {stringify(annotations)} does not name a token"
            raise InvalidProviderError(msg, provider)

    return Dependency(token=token, key=identity_of(token), flags=flags)

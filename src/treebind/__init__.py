"""Hierarchical static dependency injection.

This package resolves tokens to values from declarative provider descriptions.
Nothing is inspected implicitly: every dependency is listed in its provider.
Values are created lazily on first request and cached per injector; injectors
can be chained so a child falls back to its parent for unknown tokens.

Exports:
- `Injector`: Abstract injector; `Injector.create(providers, parent)` builds a
  `StaticInjector`, `Injector.NULL` is the terminal injector.
- `InjectionToken`: Unique token for values that have no class of their own.
- `Optional`, `Self`, `SkipSelf`, `Inject`: Dependency annotations, used as
  `[Optional, SkipSelf, token]` inside a provider's `deps`.
- `forward_ref`: Refer to a token defined later.
- `InjectorError` and its subclasses: everything raised by the package.
"""

from ._container import THROW_IF_NOT_FOUND, Injector, NullInjector, StaticInjector
from ._errors import (
    CircularDependencyError,
    DuplicateProviderError,
    InjectorError,
    InstantiationError,
    InvalidProviderError,
    InvalidTokenError,
    MissingDepsError,
    MixedMultiProviderError,
    NoProviderError,
    ProviderError,
    ResolutionError,
)
from ._providers import Inject, InjectFlags, Optional, Self, SkipSelf
from ._tokens import InjectionToken, forward_ref, resolve_forward_ref


__all__ = [
    "THROW_IF_NOT_FOUND",
    "CircularDependencyError",
    "DuplicateProviderError",
    "Inject",
    "InjectFlags",
    "InjectionToken",
    "Injector",
    "InjectorError",
    "InstantiationError",
    "InvalidProviderError",
    "InvalidTokenError",
    "MissingDepsError",
    "MixedMultiProviderError",
    "NoProviderError",
    "NullInjector",
    "Optional",
    "ProviderError",
    "ResolutionError",
    "Self",
    "SkipSelf",
    "StaticInjector",
    "forward_ref",
    "resolve_forward_ref",
]

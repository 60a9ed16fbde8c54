from __future__ import annotations

from typing import Any

from ._diagnostics import error_message, stringify


class InjectorError(Exception):
    """Base class of every error raised by treebind."""


class InvalidTokenError(InjectorError, ValueError):
    def __init__(self, token: Any) -> None:
        super().__init__(token)
        self.token = token

    def __str__(self) -> str:
        return error_message("Token must be truthy", self.token)


class ProviderError(InjectorError):
    """A provider description was rejected while building a registry."""

    def __init__(self, reason: str, provider: Any) -> None:
        super().__init__(reason, provider)
        self.reason = reason
        self.provider = provider

    def __str__(self) -> str:
        return error_message(self.reason, self.provider)


class InvalidProviderError(ProviderError):
    pass


class MissingDepsError(ProviderError):
    def __init__(self, provider: Any) -> None:
        super().__init__("'deps' required", provider)


class MixedMultiProviderError(ProviderError):
    def __init__(self, provider: Any) -> None:
        super().__init__("Cannot mix multi providers and regular providers", provider)


class DuplicateProviderError(ProviderError):
    def __init__(self, provider: Any, token: Any) -> None:
        super().__init__(
            f"Provider for {stringify(token)} is already registered. Pass replace=True to overwrite.",
            provider,
        )
        self.token = token


class ResolutionError(InjectorError):
    """A token could not be resolved.

    ``token_path`` lists the tokens from the originating request down to the
    failing one. Errors are never mutated while they propagate: every frame
    re-raises a copy produced by :meth:`with_token`.
    """

    def __init__(self, reason: str, token_path: tuple[Any, ...] = ()) -> None:
        super().__init__(reason, tuple(token_path))
        self.reason = reason
        self.token_path = tuple(token_path)

    def with_token(self, token: Any) -> ResolutionError:
        return type(self)(self.reason, (token, *self.token_path))

    def __str__(self) -> str:
        return error_message(self.reason, self.token_path)


class NoProviderError(ResolutionError, LookupError):
    pass


class CircularDependencyError(ResolutionError):
    pass


class InstantiationError(ResolutionError):
    """A factory or constructor raised; the original exception is the ``__cause__``."""

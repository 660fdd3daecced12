"""
Error taxonomy for credential updates.

Library code raises these; only the CLI catches them. Errors raised while a
credential is being processed carry the issuer, credential name and search
key so an operator can tell which manifest entry or vault item to fix.
"""

from __future__ import annotations


class OpCredsError(Exception):
    """Base class for every failure this tool reports."""

    def __init__(self, message: str, *, cause: str | None = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.issuer: str | None = None
        self.credential: str | None = None
        self.search_key: str | None = None

    def with_context(self, *, issuer: str, credential: str, search_key: str) -> OpCredsError:
        """Attach the credential being processed. Returns self for re-raising."""
        self.issuer = issuer
        self.credential = credential
        self.search_key = search_key
        return self

    def __str__(self) -> str:
        text = self.message
        if self.cause:
            text = f"{text}: {self.cause}"
        if self.issuer is not None:
            text = (
                f"{text} (issuer={self.issuer!r}, credential={self.credential!r}, "
                f"search_key={self.search_key!r})"
            )
        return text


class ManifestParseError(OpCredsError):
    pass


class VaultNotFoundError(OpCredsError):
    pass


class ItemNotFoundError(OpCredsError):
    pass


class AmbiguousMatchError(OpCredsError):
    pass


class AuthenticationError(OpCredsError):
    pass


class NoUpdatableFieldError(OpCredsError):
    pass


class UpdateError(OpCredsError):
    pass


class OpCommandError(OpCredsError):
    """The op CLI failed in a way none of the other errors describe."""


class OpNotFoundError(OpCredsError):
    """The op binary could not be executed."""

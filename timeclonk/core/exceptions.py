"""Error taxonomy shared by the store, services and message dispatch."""

from __future__ import annotations


class TimeclonkError(Exception):
    """Base class for errors surfaced to message callers."""


class NotFoundError(TimeclonkError):
    """Referenced project or entry id does not exist."""


class AuthorizationError(TimeclonkError):
    """Caller's role does not permit the operation.

    ``tag`` is the response code the dispatcher answers with, e.g.
    ``saveprojectedit_denied``.
    """

    def __init__(self, tag: str, message: str = "operation denied") -> None:
        super().__init__(message)
        self.tag = tag


class AuthenticationError(TimeclonkError):
    """Missing, unknown or expired login token."""


class MalformedInputError(TimeclonkError):
    """Message data missing or not shaped like the operation expects."""


class StorageError(TimeclonkError):
    """Underlying SQL failure: constraint violation, disk error, etc."""


class StoreTimeoutError(StorageError):
    """Database stayed locked past the configured busy timeout."""


class MigrationError(TimeclonkError):
    """A schema migration step failed; startup must abort."""

    def __init__(self, level: int, cause: BaseException) -> None:
        super().__init__(f"migration {level} failed: {cause}")
        self.level = level
        self.cause = cause


class InvoiceRenderError(TimeclonkError):
    """The typesetting subprocess could not produce the invoice."""

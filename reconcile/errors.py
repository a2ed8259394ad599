"""Errors raised while reconciling entries."""

from typing import Optional


class ReconcileError(Exception):
    """Base class for reconciliation failures."""


class FatalReconcileError(ReconcileError):
    """A systemic failure that should abort the whole batch."""


class RateLimitExceeded(FatalReconcileError):
    """The remote API answered with HTTP 429."""

    def __init__(self, message: str = "The rate limit has been reached"):
        super().__init__(message)


class InvalidCredential(FatalReconcileError):
    """The remote API rejected a credential with HTTP 401."""

    def __init__(self, credential: Optional[str]):
        self.credential = credential
        super().__init__(f"API key {credential} is invalid")


class EntryError(ReconcileError):
    """A failure confined to a single entry or call."""


class EntryValidationError(EntryError):
    """The entry is missing the field needed to build a query."""


class RemoteClientError(EntryError):
    """A call failed in a way that only loses that call's results."""

    def __init__(self, message: str, status: Optional[int] = None):
        self.status = status
        super().__init__(message)


class NoMatchFound(EntryError):
    """No candidate survived matching for a module that treats that as an error."""

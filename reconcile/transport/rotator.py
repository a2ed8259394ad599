"""Round-robin credential rotation."""

import threading
from typing import Optional, Sequence


class CredentialRotator:
    """Hand out credentials in strict round-robin order.

    The cursor is advanced under a lock so that concurrent callers, for
    instance pagination fan-out from several entries, never skip or repeat
    a credential because of a lost update.
    """

    def __init__(self, credentials: Sequence[Optional[str]]):
        if not credentials:
            raise ValueError("At least one credential is required")
        self._credentials = list(credentials)
        self._next = 0
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._credentials)

    def next(self) -> Optional[str]:
        """Return the next credential, wrapping after the last."""
        with self._lock:
            credential = self._credentials[self._next]
            self._next = (self._next + 1) % len(self._credentials)
        return credential

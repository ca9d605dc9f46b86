"""
inkwell.errors — Exception Taxonomy
====================================

Every error the gamification core raises derives from :class:`InkwellError`.

* :class:`DataUnavailable` — the entry feed or grant store could not be
  read.  Aborts the whole evaluation before any writes.
* :class:`AlreadyAwarded` — benign outcome of a duplicate award race.
  Reported through :class:`~inkwell.services.award_committer.CommitResult`,
  never raised to API callers.
* :class:`CommitFailed` — one achievement's atomic commit failed for any
  other reason.  Logged and skipped; the evaluation continues.
* :class:`ConfigurationError` — malformed or duplicate catalog entries.
  Raised at startup only.
"""

from __future__ import annotations


class InkwellError(Exception):
    """Base exception for the Inkwell gamification core."""


class DataUnavailable(InkwellError):
    """Raised when an upstream store cannot be read."""

    def __init__(self, operation: str, user_id: int | None = None) -> None:
        self.operation = operation
        self.user_id = user_id
        target = f" for user {user_id}" if user_id is not None else ""
        super().__init__(f"Data unavailable during {operation}{target}")


class AlreadyAwarded(InkwellError):
    """The (user, achievement) grant record already exists."""

    def __init__(self, user_id: int, code: str) -> None:
        self.user_id = user_id
        self.code = code
        super().__init__(f"User {user_id} already holds achievement {code!r}")


class CommitFailed(InkwellError):
    """An award's grant + points unit was rolled back."""

    def __init__(self, user_id: int, code: str, reason: str) -> None:
        self.user_id = user_id
        self.code = code
        self.reason = reason
        super().__init__(
            f"Could not award {code!r} to user {user_id}: {reason}"
        )


class ConfigurationError(InkwellError):
    """Raised when the achievement catalog or config file is invalid."""


class UnknownUser(InkwellError):
    """Raised when an operation targets a user row that does not exist."""

    def __init__(self, user_id: int) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found")

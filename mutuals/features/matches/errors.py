"""Custom exceptions for the matches feature."""

from uuid import UUID


class MatchError(Exception):
    """Base class for match errors."""


class ConstraintViolationError(MatchError):
    """Raised when a match insert breaks a table constraint.

    Normally the duplicate pair guard in ``MatchedUsersService`` prevents
    this; seeing it means a concurrent writer won the race or the repository
    was used directly.
    """

    def __init__(self, user_id: UUID, matched_user_id: UUID):
        self.user_id = user_id
        self.matched_user_id = matched_user_id
        super().__init__(
            f"Match from '{user_id}' to '{matched_user_id}' violates a constraint"
        )


class AggregateQueryMalformedError(MatchError):
    """Raised when an aggregate is asked for over a non-user column."""

    def __init__(self, column: str):
        self.column = column
        super().__init__(
            f"Cannot aggregate over '{column}'; only user columns can be counted"
        )


class SelfMatchError(MatchError, ValueError):
    """Raised when a user is asked to match with itself."""

    def __init__(self, user_id: UUID):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' cannot be matched with itself")


class UserNotFoundError(MatchError, LookupError):
    """Raised when a referenced user does not exist."""

    def __init__(self, user_id: UUID):
        self.user_id = user_id
        super().__init__(f"User '{user_id}' not found")

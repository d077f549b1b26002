"""Protocol for matching services."""

from collections.abc import Iterable
from typing import Protocol
from uuid import UUID


class Matcher(Protocol):
    """Protocol for computing who a user should be matched with.

    Implementations own the matching algorithm and decide when a user's
    matches are stale; they never write matches themselves.
    """

    async def compute_matches(self, user_id: UUID) -> Iterable[UUID]:
        """Compute the desired matched-users set.

        Args:
            user_id: The user to compute matches for

        Returns:
            Ids of the users that should be matched with ``user_id``
        """
        ...

from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol

from .model import SiteMembership, User


class UserRepository(Protocol):
    """Repository interface for users.

    Note (DIP): services depend on this interface, never on a concrete DB.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def record_false_report(self, user_id: int, *, restricted_until: Optional[datetime]) -> bool:
        """Increment the false-report counter, optionally setting a restriction."""

        raise NotImplementedError


class MembershipRepository(Protocol):
    def get(self, *, user_id: int, site_id: int) -> Optional[SiteMembership]:
        raise NotImplementedError

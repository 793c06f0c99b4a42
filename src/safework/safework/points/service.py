from __future__ import annotations

from typing import Optional

from ..users.model import Actor
from ..users.service import SiteAccessService
from .repository import PointsRepository


class PointsService:
    """Use case: a worker checks the sum of their ledger entries."""

    def __init__(self, points: PointsRepository, site_access: SiteAccessService):
        self._points = points
        self._site_access = site_access

    def get_balance(self, *, actor: Actor | None, site_id: Optional[int] = None) -> int:
        actor = self._site_access.require_authenticated(actor)
        if site_id is not None:
            self._site_access.require_member(actor, site_id)
        return self._points.get_balance(user_id=actor.user_id, site_id=site_id)

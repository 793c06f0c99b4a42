from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ReviewEvent, TransitionCommit


class ReviewRepository(Protocol):
    def commit_transition(self, commit: TransitionCommit) -> Optional[ReviewEvent]:
        """Compare-and-swap the report status and append the event and ledger rows.

        Returns the stored event, or None when the report no longer has
        ``commit.expected`` (another writer won); in that case nothing is written.
        """

        raise NotImplementedError

    def list_for_report(self, report_id: int, *, limit: int = 200) -> Sequence[ReviewEvent]:
        raise NotImplementedError

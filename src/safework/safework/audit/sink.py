from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditRecord:
    action: str
    actor_id: int
    target_type: str
    target_id: int
    reason: Optional[str] = None


class AuditSink(Protocol):
    """Where audit records go. Persistence is owned outside this core."""

    def record(self, entry: AuditRecord) -> None:
        raise NotImplementedError


class LoggingAuditSink(AuditSink):
    def __init__(self, log: logging.Logger | None = None):
        self._log = log or logger

    def record(self, entry: AuditRecord) -> None:
        self._log.info(
            "audit action=%s actor=%s target=%s:%s reason=%s",
            entry.action,
            entry.actor_id,
            entry.target_type,
            entry.target_id,
            entry.reason or "",
        )

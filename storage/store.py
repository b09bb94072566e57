"""
Audit persistence.

`Store` is the repository interface the service layer is given; the audit core
never touches it. `InMemoryStore` is the default implementation, safe to share
between Streamlit sessions.
"""
from __future__ import annotations

import threading
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Optional

from logger import get_logger
from models import AuditReport

logger = get_logger(__name__)


class AuditStatus:
    RUNNING   = "running"
    COMPLETED = "completed"
    FAILED    = "failed"


@dataclass(frozen=True)
class AuditRecord:
    id: str
    url: str
    status: str
    started_at: datetime
    completed_at: Optional[datetime] = None
    report: Optional[AuditReport] = None
    error: Optional[str] = None

    @classmethod
    def start(cls, url: str) -> "AuditRecord":
        return cls(id=uuid.uuid4().hex, url=url, status=AuditStatus.RUNNING, started_at=_now())

    def complete(self, report: AuditReport) -> "AuditRecord":
        return replace(self, status=AuditStatus.COMPLETED, completed_at=_now(), report=report)

    def fail(self, error: str) -> "AuditRecord":
        return replace(self, status=AuditStatus.FAILED, completed_at=_now(), error=error)


class Store(ABC):

    @abstractmethod
    def save(self, record: AuditRecord) -> None:
        """Insert or replace the record with the same id."""
        ...

    @abstractmethod
    def get(self, record_id: str) -> Optional[AuditRecord]:
        ...

    @abstractmethod
    def list(self, limit: Optional[int] = None) -> list[AuditRecord]:
        """Records newest first."""
        ...


class InMemoryStore(Store):

    def __init__(self):
        self._records: dict[str, AuditRecord] = {}
        self._lock = threading.Lock()

    def save(self, record: AuditRecord) -> None:
        with self._lock:
            self._records[record.id] = record
        logger.info("Saved audit %s (%s) for %s", record.id, record.status, record.url)

    def get(self, record_id: str) -> Optional[AuditRecord]:
        with self._lock:
            return self._records.get(record_id)

    def list(self, limit: Optional[int] = None) -> list[AuditRecord]:
        with self._lock:
            records = sorted(self._records.values(), key=lambda r: r.started_at, reverse=True)
        return records[:limit] if limit is not None else records


def _now() -> datetime:
    return datetime.now(timezone.utc)

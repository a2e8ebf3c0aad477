from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Cancellation, Reassignment, Reschedule, ScheduleEvent


class ScheduleRepository(Protocol):
    # Stored sessions (manual one-offs and synced snapshots)
    def list_sessions(self, tenant_id: str) -> Sequence[ScheduleEvent]:
        raise NotImplementedError

    def get_session(self, tenant_id: str, session_id: str) -> Optional[ScheduleEvent]:
        raise NotImplementedError

    def upsert_sessions(self, tenant_id: str, events: Iterable[ScheduleEvent]) -> int:
        """Insert or replace by session_id; returns the number of rows written."""

        raise NotImplementedError

    def delete_session(self, tenant_id: str, session_id: str) -> bool:
        raise NotImplementedError

    # Modification records
    def list_reschedules(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Reschedule]:
        raise NotImplementedError

    def list_cancellations(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Cancellation]:
        raise NotImplementedError

    def list_reassignments(self, tenant_id: str, session_id: Optional[str] = None) -> Sequence[Reassignment]:
        raise NotImplementedError

    def add_reschedule(self, tenant_id: str, record: Reschedule) -> int:
        raise NotImplementedError

    def add_cancellation(self, tenant_id: str, record: Cancellation) -> int:
        raise NotImplementedError

    def add_reassignment(self, tenant_id: str, record: Reassignment) -> int:
        raise NotImplementedError

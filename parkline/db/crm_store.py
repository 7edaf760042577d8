from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping, Sequence
from typing import Any

import psycopg2
from psycopg2.extras import Json

from parkline.models.apartment import ApartmentRecord
from parkline.models.crm import (
    ActivityType,
    AnalyticsEvent,
    Lead,
    LeadActivity,
    LeadNote,
    LeadPriority,
    LeadStatus,
    LeadSubmission,
    NoteType,
)
from parkline.models.filter_criteria import FilterCriteria

from .batch_insert import BatchInsertError, BatchMetrics, InsertResult, batch_insert

"""Lead / CRM persistence and the analytics event logger.

Both operate on a caller-supplied psycopg2 cursor; transaction boundaries
(commit / rollback) belong to the caller. Database failures surface as
StoreError.
"""

__all__ = [
    "StoreError",
    "CrmStore",
    "EventLogger",
    "LEAD_COLUMNS",
    "EVENT_COLUMNS",
    "fetch_events",
]

logger = logging.getLogger(__name__)

LEAD_COLUMNS = (
    "id", "name", "email", "message", "phone", "apartment_id", "status",
    "priority", "source", "assigned_to", "follow_up_date", "tags",
    "created_at", "updated_at",
)
NOTE_COLUMNS = ("id", "lead_id", "user_id", "note_text", "note_type", "is_private", "created_at")
ACTIVITY_COLUMNS = (
    "id", "lead_id", "activity_type", "description", "user_id", "old_value", "new_value", "created_at",
)
EVENT_COLUMNS = ("event_type", "session_id", "visitor_id", "event_data")


class StoreError(Exception):
    pass


def _lead_from_row(row: Sequence[Any]) -> Lead:
    d = dict(zip(LEAD_COLUMNS, row))
    return Lead(
        id=str(d["id"]),
        name=d["name"],
        email=d["email"],
        message=d["message"],
        phone=d["phone"],
        apartment_id=d["apartment_id"],
        status=LeadStatus(d["status"]),
        priority=LeadPriority(d["priority"] or LeadPriority.MEDIUM.value),
        source=d["source"] or "website",
        assigned_to=str(d["assigned_to"]) if d["assigned_to"] else None,
        follow_up_date=d["follow_up_date"],
        tags=tuple(d["tags"] or ()),
        created_at=d["created_at"],
        updated_at=d["updated_at"],
    )


def _note_from_row(row: Sequence[Any]) -> LeadNote:
    d = dict(zip(NOTE_COLUMNS, row))
    return LeadNote(
        id=str(d["id"]),
        lead_id=str(d["lead_id"]),
        user_id=str(d["user_id"]),
        note_text=d["note_text"],
        note_type=NoteType(d["note_type"] or NoteType.GENERAL.value),
        is_private=bool(d["is_private"]),
        created_at=d["created_at"],
    )


def _activity_from_row(row: Sequence[Any]) -> LeadActivity:
    d = dict(zip(ACTIVITY_COLUMNS, row))
    return LeadActivity(
        id=str(d["id"]),
        lead_id=str(d["lead_id"]),
        activity_type=ActivityType(d["activity_type"]),
        description=d["description"],
        user_id=str(d["user_id"]) if d["user_id"] else None,
        old_value=d["old_value"],
        new_value=d["new_value"],
        created_at=d["created_at"],
    )


class CrmStore:
    """CRUD over ``leads``, ``lead_notes`` and ``lead_activities``."""

    def __init__(self, cursor: Any) -> None:
        self._cur = cursor

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> None:
        try:
            self._cur.execute(sql, params)
        except psycopg2.Error as e:
            raise StoreError(str(e)) from e

    def _fetchone(self, sql: str, params: Sequence[Any] = ()) -> Sequence[Any] | None:
        self._execute(sql, params)
        return self._cur.fetchone()

    def _fetchall(self, sql: str, params: Sequence[Any] = ()) -> list[Sequence[Any]]:
        self._execute(sql, params)
        return list(self._cur.fetchall())

    # -- leads ------------------------------------------------------------

    def create_lead(self, submission: LeadSubmission) -> Lead:
        """Insert a validated submission as a ``new`` lead and log ``created``."""
        row = self._fetchone(
            f"INSERT INTO leads (name, email, message, phone, apartment_id, status, source) "
            f"VALUES (%s, %s, %s, %s, %s, %s, %s) RETURNING {', '.join(LEAD_COLUMNS)}",
            (
                submission.name,
                submission.email,
                submission.message,
                submission.phone,
                submission.apartment_id,
                LeadStatus.NEW.value,
                submission.source,
            ),
        )
        if row is None:
            raise StoreError("insert into leads returned no row")
        lead = _lead_from_row(row)
        self.log_activity(lead.id, ActivityType.CREATED, f"Lead created from {lead.source}")
        logger.info("lead created: id=%s apartment=%s", lead.id, lead.apartment_id or "-")
        return lead

    def get_lead(self, lead_id: str) -> Lead | None:
        row = self._fetchone(f"SELECT {', '.join(LEAD_COLUMNS)} FROM leads WHERE id = %s", (lead_id,))
        return _lead_from_row(row) if row is not None else None

    def list_leads(self, status: LeadStatus | None = None, limit: int | None = None) -> list[Lead]:
        """Leads, newest first, optionally restricted to one status."""
        sql = f"SELECT {', '.join(LEAD_COLUMNS)} FROM leads"
        params: list[Any] = []
        if status is not None:
            sql += " WHERE status = %s"
            params.append(status.value)
        sql += " ORDER BY created_at DESC"
        if limit is not None:
            sql += " LIMIT %s"
            params.append(limit)
        return [_lead_from_row(r) for r in self._fetchall(sql, params)]

    def update_lead_status(self, lead_id: str, status: LeadStatus, user_id: str | None = None) -> Lead:
        current = self.get_lead(lead_id)
        if current is None:
            raise StoreError(f"lead not found: {lead_id}")
        row = self._fetchone(
            f"UPDATE leads SET status = %s, updated_at = now() WHERE id = %s "
            f"RETURNING {', '.join(LEAD_COLUMNS)}",
            (status.value, lead_id),
        )
        if row is None:
            raise StoreError(f"lead not found: {lead_id}")
        if current.status is not status:
            self.log_activity(
                lead_id,
                ActivityType.STATUS_CHANGED,
                f"Status changed from {current.status.value} to {status.value}",
                user_id=user_id,
                old_value=current.status.value,
                new_value=status.value,
            )
        return _lead_from_row(row)

    def assign_lead(self, lead_id: str, assignee_id: str, user_id: str | None = None) -> Lead:
        row = self._fetchone(
            f"UPDATE leads SET assigned_to = %s, updated_at = now() WHERE id = %s "
            f"RETURNING {', '.join(LEAD_COLUMNS)}",
            (assignee_id, lead_id),
        )
        if row is None:
            raise StoreError(f"lead not found: {lead_id}")
        self.log_activity(
            lead_id, ActivityType.ASSIGNED, "Lead assigned", user_id=user_id, new_value=assignee_id
        )
        return _lead_from_row(row)

    def delete_lead(self, lead_id: str) -> bool:
        """Delete a lead (notes and activities cascade); False if absent."""
        self._execute("DELETE FROM leads WHERE id = %s", (lead_id,))
        return bool(self._cur.rowcount)

    def pipeline_counts(self) -> dict[LeadStatus, int]:
        counts = {s: 0 for s in LeadStatus}
        for status, n in self._fetchall("SELECT status, count(*) FROM leads GROUP BY status"):
            counts[LeadStatus(status)] = int(n)
        return counts

    # -- notes / activities -------------------------------------------------

    def add_note(
        self,
        lead_id: str,
        user_id: str,
        text: str,
        note_type: NoteType = NoteType.GENERAL,
        is_private: bool = False,
    ) -> LeadNote:
        if not text.strip():
            raise StoreError("note text must not be empty")
        row = self._fetchone(
            f"INSERT INTO lead_notes (lead_id, user_id, note_text, note_type, is_private) "
            f"VALUES (%s, %s, %s, %s, %s) RETURNING {', '.join(NOTE_COLUMNS)}",
            (lead_id, user_id, text.strip(), note_type.value, is_private),
        )
        if row is None:
            raise StoreError("insert into lead_notes returned no row")
        self.log_activity(lead_id, ActivityType.NOTE_ADDED, f"{note_type.value} note added", user_id=user_id)
        return _note_from_row(row)

    def list_notes(self, lead_id: str) -> list[LeadNote]:
        rows = self._fetchall(
            f"SELECT {', '.join(NOTE_COLUMNS)} FROM lead_notes WHERE lead_id = %s ORDER BY created_at DESC",
            (lead_id,),
        )
        return [_note_from_row(r) for r in rows]

    def log_activity(
        self,
        lead_id: str,
        activity_type: ActivityType,
        description: str,
        *,
        user_id: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
    ) -> None:
        self._execute(
            "INSERT INTO lead_activities (lead_id, user_id, activity_type, description, old_value, new_value) "
            "VALUES (%s, %s, %s, %s, %s, %s)",
            (
                lead_id,
                user_id,
                activity_type.value,
                description,
                Json(old_value) if old_value is not None else None,
                Json(new_value) if new_value is not None else None,
            ),
        )

    def list_activities(self, lead_id: str) -> list[LeadActivity]:
        rows = self._fetchall(
            f"SELECT {', '.join(ACTIVITY_COLUMNS)} FROM lead_activities "
            f"WHERE lead_id = %s ORDER BY created_at DESC",
            (lead_id,),
        )
        return [_activity_from_row(r) for r in rows]


def _apartment_details(apartment: ApartmentRecord) -> dict[str, Any]:
    return {
        "status": apartment.status.value,
        "bedrooms": apartment.bedrooms,
        "floor": apartment.floor,
        "area": apartment.area,
        "is_office_space": apartment.is_office_space,
    }


class EventLogger:
    """Buffers visitor analytics events and writes them in one batch."""

    def __init__(self, session_id: str | None = None, visitor_id: str | None = None) -> None:
        self.session_id = session_id or f"session_{uuid.uuid4().hex[:16]}"
        self.visitor_id = visitor_id or f"visitor_{uuid.uuid4().hex[:16]}"
        self._pending: list[AnalyticsEvent] = []

    @property
    def pending(self) -> tuple[AnalyticsEvent, ...]:
        return tuple(self._pending)

    def track(self, event_type: str, event_data: Mapping[str, Any] | None = None) -> AnalyticsEvent:
        event = AnalyticsEvent(
            event_type=event_type,
            session_id=self.session_id,
            visitor_id=self.visitor_id,
            event_data=dict(event_data or {}),
        )
        self._pending.append(event)
        logger.debug("tracked event %s", event_type)
        return event

    def track_apartment_click(self, apartment_id: str, view: str, apartment: ApartmentRecord | None = None) -> AnalyticsEvent:
        data: dict[str, Any] = {"apartment_id": apartment_id, "view": view}
        if apartment is not None:
            data.update(_apartment_details(apartment))
        return self.track("apartment_click", data)

    def track_interested_click(self, apartment: ApartmentRecord) -> AnalyticsEvent:
        data = {"apartment_id": apartment.id}
        data.update({f"apartment_{k}" if k != "is_office_space" else k: v for k, v in _apartment_details(apartment).items()})
        return self.track("interested_button_click", data)

    def track_lead_submitted(self, submission: LeadSubmission) -> AnalyticsEvent:
        return self.track(
            "lead_submitted",
            {
                "apartment_id": submission.apartment_id,
                "has_phone": bool(submission.phone),
                "message_length": len(submission.message or ""),
            },
        )

    def track_filters_applied(self, criteria: FilterCriteria, view: str, visible_count: int) -> AnalyticsEvent:
        return self.track(
            "filters_applied",
            {
                "filters": {
                    "bedrooms": sorted(criteria.bedrooms),
                    "floors": list(criteria.floors),
                    "area": list(criteria.area),
                    "status": sorted(s.value for s in criteria.status),
                },
                "view": view,
                "visible_apartments_count": visible_count,
            },
        )

    def flush(self, cursor: Any) -> InsertResult:
        """Insert all pending events into ``analytics_events``.

        The buffer is only cleared after a successful insert.
        """
        def _log_metrics(m: BatchMetrics) -> None:
            logger.debug("analytics_events batch: rows=%d elapsed=%.4fs", m.batch_size, m.elapsed_seconds)

        rows = [
            (e.event_type, e.session_id, e.visitor_id, Json(e.event_data))
            for e in self._pending
        ]
        try:
            result = batch_insert(cursor, "analytics_events", EVENT_COLUMNS, rows, metrics_callback=_log_metrics)
        except BatchInsertError as e:
            raise StoreError(f"failed writing analytics events: {e}") from e
        self._pending.clear()
        return result


def fetch_events(cursor: Any, limit: int | None = None) -> list[AnalyticsEvent]:
    """Read ``analytics_events`` (newest first) for the dashboard summary."""
    sql = (
        "SELECT event_type, session_id, visitor_id, event_data, timestamp "
        "FROM analytics_events ORDER BY timestamp DESC"
    )
    params: list[Any] = []
    if limit is not None:
        sql += " LIMIT %s"
        params.append(limit)
    try:
        cursor.execute(sql, params)
        rows = cursor.fetchall()
    except psycopg2.Error as e:
        raise StoreError(str(e)) from e
    return [
        AnalyticsEvent(
            event_type=r[0], session_id=r[1], visitor_id=r[2], event_data=dict(r[3] or {}), timestamp=r[4]
        )
        for r in rows
    ]

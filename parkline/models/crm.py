from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

"""Lead / CRM / analytics-event models.

Mirror the Supabase tables ``leads``, ``lead_notes``, ``lead_activities`` and
``analytics_events``. Enum values are the CHECK-constraint values of those
tables.
"""


class LeadStatus(Enum):
    NEW = "new"
    CONTACTED = "contacted"
    QUALIFIED = "qualified"
    PROPOSAL = "proposal"
    NEGOTIATION = "negotiation"
    CLOSED_WON = "closed_won"
    CLOSED_LOST = "closed_lost"
    FOLLOW_UP = "follow_up"

    @property
    def is_closed(self) -> bool:
        return self in (LeadStatus.CLOSED_WON, LeadStatus.CLOSED_LOST)


class LeadPriority(Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class NoteType(Enum):
    GENERAL = "general"
    CALL = "call"
    EMAIL = "email"
    MEETING = "meeting"
    FOLLOW_UP = "follow_up"
    INTERNAL = "internal"


class ActivityType(Enum):
    CREATED = "created"
    UPDATED = "updated"
    ASSIGNED = "assigned"
    NOTE_ADDED = "note_added"
    STATUS_CHANGED = "status_changed"
    CONTACTED = "contacted"
    FOLLOW_UP_SCHEDULED = "follow_up_scheduled"


@dataclass(frozen=True)
class LeadSubmission:
    """Contact-form payload as submitted by a visitor (already trimmed)."""
    name: str
    email: str
    message: str
    phone: str | None = None
    apartment_id: str | None = None
    source: str = "website"

    @classmethod
    def from_form(cls, form: dict[str, Any]) -> LeadSubmission:
        def _clean(key: str) -> str:
            value = form.get(key)
            return str(value).strip() if value is not None else ""

        return cls(
            name=_clean("name"),
            email=_clean("email"),
            message=_clean("message"),
            phone=_clean("phone") or None,
            apartment_id=_clean("apartment_id") or None,
        )


@dataclass(frozen=True)
class Lead:
    id: str
    name: str
    email: str
    message: str
    phone: str | None
    apartment_id: str | None
    status: LeadStatus
    priority: LeadPriority = LeadPriority.MEDIUM
    source: str = "website"
    assigned_to: str | None = None
    follow_up_date: datetime | None = None
    tags: tuple[str, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass(frozen=True)
class LeadNote:
    id: str
    lead_id: str
    user_id: str
    note_text: str
    note_type: NoteType = NoteType.GENERAL
    is_private: bool = False
    created_at: datetime | None = None


@dataclass(frozen=True)
class LeadActivity:
    id: str
    lead_id: str
    activity_type: ActivityType
    description: str
    user_id: str | None = None
    old_value: Any = None
    new_value: Any = None
    created_at: datetime | None = None


@dataclass(frozen=True)
class AnalyticsEvent:
    """One row of ``analytics_events``."""
    event_type: str
    session_id: str
    visitor_id: str
    event_data: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime | None = None

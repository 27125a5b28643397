"""Pure calendar, visibility and due-date logic. No database or HTTP here."""

from iharu.core.dday import dday_label, days_until, is_overdue, is_urgent, local_today
from iharu.core.occurrences import (
    Occurrence,
    matches_date,
    occurrences_between,
    occurrences_on,
    upcoming,
)
from iharu.core.recurrence import (
    DAILY,
    WEEKLY,
    InvalidRecurrence,
    Recurrence,
    occurs_on,
    weekday_of,
)
from iharu.core.visibility import (
    CHILD,
    PARENT,
    FamilyMemberId,
    InvalidScope,
    Viewer,
    ViewerScope,
    filter_messages,
    filter_visible,
    is_message_visible,
    is_visible,
    scope_allows,
)

__all__ = [
    "CHILD",
    "DAILY",
    "PARENT",
    "WEEKLY",
    "FamilyMemberId",
    "InvalidRecurrence",
    "InvalidScope",
    "Occurrence",
    "Recurrence",
    "Viewer",
    "ViewerScope",
    "days_until",
    "dday_label",
    "filter_messages",
    "filter_visible",
    "is_message_visible",
    "is_overdue",
    "is_urgent",
    "is_visible",
    "local_today",
    "matches_date",
    "occurrences_between",
    "occurrences_on",
    "occurs_on",
    "scope_allows",
    "upcoming",
    "weekday_of",
]

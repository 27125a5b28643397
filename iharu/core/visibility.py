"""Who may see which family records.

Schedules and preparations share one ownership rule: a record is visible when
it is family-wide (``child_id is None``) or owned by the child the viewer is
scoped to. Messages use a separate, broader rule (broadcast, addressed to the
viewer, or sent by the viewer).

Owning-child ids are always ChildProfile ids (``FamilyMemberId``). Mapping a
child login to its profile happens before a Viewer is built; nothing here
looks at which kind of id it was given.
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, NewType, Optional, TypeVar

logger = logging.getLogger(__name__)

FamilyMemberId = NewType("FamilyMemberId", str)

PARENT = "parent"
CHILD = "child"
ROLES = (PARENT, CHILD)

T = TypeVar("T")


class InvalidScope(ValueError):
    """Viewer is missing the fields needed to decide visibility."""


@dataclass(frozen=True)
class ViewerScope:
    """Restriction applied to owned records.

    kind is one of ``all`` (no filtering), ``child`` (a parent looking at one
    child), ``owner_only`` (a child account looking at its own records) or
    ``none`` (fail closed: nothing is visible).
    """

    kind: str
    child_id: Optional[FamilyMemberId] = None

    @classmethod
    def all(cls) -> "ViewerScope":
        return cls("all")

    @classmethod
    def for_child(cls, child_id: str) -> "ViewerScope":
        return cls("child", FamilyMemberId(child_id))

    @classmethod
    def owner_only(cls, child_id: Optional[str]) -> "ViewerScope":
        return cls("owner_only", FamilyMemberId(child_id) if child_id else None)

    @classmethod
    def none(cls) -> "ViewerScope":
        return cls("none")


def scope_allows(scope: Any, child_id: Optional[str]) -> bool:
    """Apply a scope to a record's owning-child id."""
    kind = getattr(scope, "kind", None)
    if kind == "all":
        return True
    if kind in ("child", "owner_only"):
        return child_id is None or (scope.child_id is not None and child_id == scope.child_id)
    # "none" and anything unrecognised fail closed
    return False


@dataclass(frozen=True)
class Viewer:
    user_id: str
    role: str
    family_id: Optional[str]
    owner_id: Optional[FamilyMemberId] = None  # child accounts: linked profile id
    child_filter: Optional[FamilyMemberId] = None  # parents: selected child

    def validate(self) -> None:
        if not self.user_id:
            raise InvalidScope("viewer has no user id")
        if not self.family_id:
            raise InvalidScope("viewer has no family")
        if self.role not in ROLES:
            raise InvalidScope(f"unknown role {self.role!r}")

    def scope(self) -> ViewerScope:
        try:
            self.validate()
        except InvalidScope as e:
            logger.debug("Failing viewer scope closed: %s", e)
            return ViewerScope.none()

        if self.role == PARENT:
            if self.child_filter:
                return ViewerScope.for_child(self.child_filter)
            return ViewerScope.all()
        # A child without a linked profile only sees family-wide records
        return ViewerScope.owner_only(self.owner_id)


def _same_family(record: Any, viewer: Viewer) -> bool:
    family_id = getattr(record, "family_id", None)
    return family_id is None or family_id == viewer.family_id


def is_visible(record: Any, viewer: Viewer) -> bool:
    """Ownership rule for schedules and preparations."""
    if not _same_family(record, viewer):
        return False
    return scope_allows(viewer.scope(), getattr(record, "child_id", None))


def is_message_visible(message: Any, viewer: Viewer) -> bool:
    """Broadcasts, messages addressed to the viewer and the viewer's own sent
    messages are visible. Deliberately separate from ``is_visible``."""
    try:
        viewer.validate()
    except InvalidScope:
        return False
    if not _same_family(message, viewer):
        return False

    to_user_id = getattr(message, "to_user_id", None)
    return (
        to_user_id is None
        or to_user_id == viewer.user_id
        or getattr(message, "from_user_id", None) == viewer.user_id
    )


def filter_visible(records: Iterable[T], viewer: Viewer) -> list[T]:
    return [r for r in records if is_visible(r, viewer)]


def filter_messages(messages: Iterable[T], viewer: Viewer) -> list[T]:
    return [m for m in messages if is_message_visible(m, viewer)]

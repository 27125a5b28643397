"""Polling client for the i-Haru API.

``FamilyClient`` is a thin wrapper over ``httpx.Client``. ``SnapshotCache``
holds the last ``/sync`` snapshot, refetches it only when it is older than
the staleness window, and reports what changed between two snapshots so a
caller can redraw only that.
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

import httpx

from iharu.config import settings

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"

# Snapshot collections tracked by id
COLLECTIONS = ("schedules", "preparations", "messages", "children")


class ClientError(Exception):
    """Non-2xx answer from the server."""

    def __init__(self, status_code: int, detail):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


class FamilyClient:
    """Client for one signed-in account."""

    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        # Any httpx.Client works, including FastAPI's TestClient
        self._http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.token = token

    def close(self) -> None:
        self._http.close()

    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = kwargs.pop("headers", {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        response = self._http.request(method, API_PREFIX + path, headers=headers, **kwargs)
        if response.status_code >= 400:
            try:
                detail = response.json().get("detail")
            except ValueError:
                detail = response.text
            raise ClientError(response.status_code, detail)
        return response.json()

    # --- Account ---

    def login(self, email: str, password: str) -> dict:
        data = self._request("POST", "/auth/login", json={"email": email, "password": password})
        self.token = data["token"]
        return data["user"]

    def me(self) -> dict:
        return self._request("GET", "/auth/me")

    # --- Schedules ---

    def day_schedules(self, day: Optional[date] = None, child_id: Optional[str] = None) -> list[dict]:
        params = {}
        if day:
            params["date"] = day.isoformat()
        if child_id:
            params["child_id"] = child_id
        return self._request("GET", "/schedules/day", params=params)["schedules"]

    def range_schedules(self, start: date, end: date) -> list[dict]:
        params = {"start": start.isoformat(), "end": end.isoformat()}
        return self._request("GET", "/schedules/range", params=params)["occurrences"]

    def create_schedule(self, body: dict) -> dict:
        return self._request("POST", "/schedules", json=body)

    # --- Preparations ---

    def preparations(self, show_completed: bool = True) -> list[dict]:
        params = {"show_completed": str(show_completed).lower()}
        return self._request("GET", "/preparations", params=params)["preparations"]

    def create_preparation(self, body: dict) -> dict:
        return self._request("POST", "/preparations", json=body)

    def toggle_preparation(self, prep_id: str) -> dict:
        return self._request("PATCH", f"/preparations/{prep_id}/toggle")

    def delete_preparation(self, prep_id: str) -> dict:
        return self._request("DELETE", f"/preparations/{prep_id}")

    # --- Messages ---

    def messages(self, limit: Optional[int] = None) -> dict:
        params = {"limit": limit} if limit else {}
        return self._request("GET", "/messages", params=params)

    def send_message(self, content: str, to_user_id: Optional[str] = None) -> dict:
        return self._request("POST", "/messages", json={"content": content, "to_user_id": to_user_id})

    def mark_read(self) -> dict:
        return self._request("POST", "/messages/read")

    # --- Sync ---

    def snapshot(self, day: Optional[date] = None) -> dict:
        params = {"date": day.isoformat()} if day else {}
        return self._request("GET", "/sync", params=params)

    def server_version(self) -> str:
        return self._request("GET", "/version")["version"]


@dataclass
class ChangeSet:
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)
    changed: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.added or self.removed or self.changed)


@dataclass
class SnapshotDiff:
    collections: dict[str, ChangeSet] = field(default_factory=dict)
    app_version_changed: bool = False

    @property
    def is_empty(self) -> bool:
        return not self.app_version_changed and not any(self.collections.values())

    def __getitem__(self, name: str) -> ChangeSet:
        return self.collections.get(name, ChangeSet())


def _items(snapshot: Optional[dict], name: str) -> dict[str, dict]:
    if snapshot is None:
        return {}
    if name == "children":
        items = snapshot["family"]["children"]
    else:
        items = snapshot[name]
    return {item["id"]: item for item in items}


def diff_snapshots(old: Optional[dict], new: dict) -> SnapshotDiff:
    """Per-collection added / removed / changed ids between two snapshots."""
    if old is not None and old["version"] == new["version"]:
        return SnapshotDiff(app_version_changed=old["app_version"] != new["app_version"])

    diff = SnapshotDiff(
        app_version_changed=old is not None and old["app_version"] != new["app_version"],
    )
    for name in COLLECTIONS:
        before, after = _items(old, name), _items(new, name)
        diff.collections[name] = ChangeSet(
            added=[i for i in after if i not in before],
            removed=[i for i in before if i not in after],
            changed=[i for i in after if i in before and before[i] != after[i]],
        )
    return diff


class SnapshotCache:
    """Last known snapshot plus the time it was fetched."""

    def __init__(
        self,
        client: FamilyClient,
        stale_after: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.client = client
        self.stale_after = settings.sync_stale_after_seconds if stale_after is None else stale_after
        self._clock = clock
        self.snapshot: Optional[dict] = None
        self.fetched_at: Optional[float] = None
        self.day: Optional[date] = None

    @property
    def is_stale(self) -> bool:
        if self.snapshot is None or self.fetched_at is None:
            return True
        return self._clock() - self.fetched_at >= self.stale_after

    def invalidate(self) -> None:
        """Force the next refresh to hit the server (e.g. after a local write)."""
        self.fetched_at = None

    def set_day(self, day: Optional[date]) -> None:
        if day != self.day:
            self.day = day
            self.invalidate()

    def refresh(self, force: bool = False) -> tuple[dict, SnapshotDiff]:
        """Return ``(snapshot, diff)``. A fresh cache is returned as is with an empty diff."""
        if not force and not self.is_stale:
            return self.snapshot, SnapshotDiff()

        new = self.client.snapshot(self.day)
        diff = diff_snapshots(self.snapshot, new)
        if diff.app_version_changed:
            logger.info("Server app version changed to %s", new["app_version"])

        self.snapshot = new
        self.fetched_at = self._clock()
        return new, diff

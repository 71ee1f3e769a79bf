"""
The single in-memory snapshot of all training records.

Every write goes through StateStore.commit(): the engine builds a new AppState,
the store swaps it in, persists it and notifies subscribers. Snapshots handed
out by get() are never modified afterwards, they simply become stale.
"""
import json
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional

from fastapi import Request
from pydantic import ValidationError as SchemaValidationError

from training_app.core.config import settings
from training_app.core.exceptions import MalformedSnapshotError
from training_app.schemas.training_schema import AppState
from training_app.services.storage import KeyValueStorage
from training_app.utils.seed_data import seed_state

logger = logging.getLogger(__name__)

REQUIRED_SNAPSHOT_KEYS = ("employees", "courses", "registrations")

Subscriber = Callable[[], None]


def _backfill_employee_defaults(raw: dict) -> int:
    """Employees stored before isActive existed are treated as active."""
    employees = raw.get("employees")
    if not isinstance(employees, list):
        return 0
    filled = 0
    for emp in employees:
        if isinstance(emp, dict) and "isActive" not in emp and "is_active" not in emp:
            emp["isActive"] = True
            filled += 1
    return filled


def _parse_snapshot(blob: bytes) -> dict:
    raw = json.loads(blob)
    if not isinstance(raw, dict):
        raise ValueError("snapshot root must be a JSON object")
    return raw


class StateStore:
    def __init__(self, storage: KeyValueStorage, key: Optional[str] = None):
        self._storage = storage
        self._key = key or settings.STORAGE_KEY
        self._subscribers: List[Subscriber] = []
        self._lock = threading.RLock()
        self._state = self.load()

    # ---------- read side ----------
    def load(self) -> AppState:
        """
        Read the persisted snapshot. Falls back to the seed dataset when nothing
        is stored or the stored bytes cannot be parsed; never raises.
        """
        blob = self._storage.get(self._key)
        if blob is None:
            logger.info("No snapshot stored under %s, starting from seed data", self._key)
            return seed_state()

        try:
            raw = _parse_snapshot(blob)
            filled = _backfill_employee_defaults(raw)
            state = AppState.model_validate(raw)
        except ValueError as e:
            logger.warning("Stored snapshot %s is malformed (%s), falling back to seed data", self._key, e)
            return seed_state()

        if filled:
            logger.info("Backfilled isActive=true on %d employee(s)", filled)
        return state

    def get(self) -> AppState:
        return self._state

    # ---------- write side ----------
    def save(self) -> None:
        self._storage.put(self._key, self._serialize())
        for callback in list(self._subscribers):
            callback()

    @contextmanager
    def transaction(self) -> Iterator["StateStore"]:
        """
        Hold the write lock from get() to commit() so concurrent requests
        cannot build on the same snapshot. Re-entrant.
        """
        with self._lock:
            yield self

    def commit(self, state: AppState) -> None:
        """Swap in a fully built new snapshot, then save exactly once."""
        with self._lock:
            self._state = state
            self.save()

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a no-argument observer; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    # ---------- export / import ----------
    def _serialize(self, indent: Optional[int] = None) -> bytes:
        payload = self._state.model_dump(by_alias=True, mode="json")
        return json.dumps(payload, indent=indent, ensure_ascii=False).encode("utf-8")

    def export_snapshot(self) -> bytes:
        return self._serialize(indent=2)

    def import_snapshot(self, blob: bytes) -> None:
        """
        Replace the whole state with an exported snapshot.
        Rejects the blob (state untouched) unless it is a JSON object holding
        at least employees, courses and registrations.
        """
        try:
            raw = _parse_snapshot(blob)
        except ValueError as e:
            raise MalformedSnapshotError(f"Snapshot is not a valid JSON object: {e}") from e

        missing = [key for key in REQUIRED_SNAPSHOT_KEYS if key not in raw]
        if missing:
            raise MalformedSnapshotError(f"Snapshot is missing required collections: {', '.join(missing)}")

        _backfill_employee_defaults(raw)
        try:
            state = AppState.model_validate(raw)
        except SchemaValidationError as e:
            raise MalformedSnapshotError(f"Snapshot has invalid records: {e.error_count()} error(s)") from e

        self.commit(state)
        logger.info(
            "Imported snapshot: %d employees, %d courses, %d registrations",
            len(state.employees), len(state.courses), len(state.registrations),
        )


def snapshot_filename(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"training_backup_{now.astimezone(timezone.utc).strftime('%Y%m%dT%H%M%SZ')}.json"


def get_store(request: Request) -> StateStore:
    return request.app.state.store

import json
import logging
import os
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional, Tuple
from uuid import uuid4

from finpal.domain import Snapshot
from finpal.events import EventBus, OnChange, OnError, Unsubscribe
from finpal.functional import Either, Left, Right
from finpal.transforms import COLLECTIONS, snapshot_from_records

logger = logging.getLogger(__name__)

GUEST_SCOPE = "guest"

Record = Dict[str, Any]


class StoreError(Exception):
    """A storage read failed; subscribers receive it through on_error."""


class Store(ABC):
    """Where the four entity collections live.

    Every mutation returns ``Right(record)`` or ``Left({"error", "message"})``.
    Subscribers get the full collection on every change.
    """

    @abstractmethod
    def subscribe(self, scope: str, collection: str, on_change: OnChange, on_error: Optional[OnError] = None) -> Unsubscribe:
        pass

    @abstractmethod
    def create(self, scope: str, collection: str, record: Record) -> Either[dict, Record]:
        pass

    @abstractmethod
    def update(self, scope: str, collection: str, record_id: str, partial: Record) -> Either[dict, Record]:
        pass

    @abstractmethod
    def delete(self, scope: str, collection: str, record_id: str) -> Either[dict, Record]:
        pass

    @abstractmethod
    def records(self, scope: str, collection: str) -> Tuple[Record, ...]:
        pass

    def snapshot(self, scope: str) -> Snapshot:
        return snapshot_from_records({name: self.records(scope, name) for name in COLLECTIONS})


def _failure(error: str, message: str, **details) -> Left:
    return Left({"error": error, "message": message, **details})


class LocalStore(Store):
    """Device-local store for guest mode.

    Collections are kept under namespaced keys ("guest-expenses", ...) and,
    when ``path`` is given, written to a JSON file after every change.
    There is only one scope, ``GUEST_SCOPE``.
    """

    def __init__(
        self,
        path: Optional[str] = None,
        namespace: str = "guest-",
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ):
        self.path = path
        self.namespace = namespace
        self.clock = clock
        self.bus = EventBus()
        self._data: Dict[str, List[Record]] = {self._key(name): [] for name in COLLECTIONS}
        self.load_error: Optional[StoreError] = None
        self._load()

    def _key(self, collection: str) -> str:
        return f"{self.namespace}{collection}"

    def _load(self) -> None:
        if not self.path or not os.path.exists(self.path):
            return
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                stored = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.load_error = StoreError(f"Could not read {self.path}: {e}")
            logger.error("%s", self.load_error)
            return
        for name in COLLECTIONS:
            items = stored.get(self._key(name), []) if isinstance(stored, dict) else []
            self._data[self._key(name)] = [dict(r) for r in items if isinstance(r, dict)]

    def _persist(self) -> None:
        if not self.path:
            return
        tmp = f"{self.path}.tmp"
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, default=str)
        os.replace(tmp, self.path)

    def _check(self, scope: str, collection: str) -> Optional[Left]:
        if scope != GUEST_SCOPE:
            return _failure("unknown_scope", f"Local storage only serves the {GUEST_SCOPE} scope", scope=scope)
        if collection not in COLLECTIONS:
            return _failure("unknown_collection", f"Unknown collection {collection}", collection=collection)
        return None

    def _commit(self, collection: str, items: List[Record], result: Record, action: str) -> Either[dict, Record]:
        key = self._key(collection)
        previous = self._data[key]
        self._data[key] = items
        try:
            self._persist()
        except OSError as e:
            self._data[key] = previous
            logger.error("Could not %s %s record: %s", action, collection, e)
            return _failure("write_failed", f"Could not {action} record: {e}", collection=collection)
        self.bus.publish(key, self.records(GUEST_SCOPE, collection))
        return Right(dict(result))

    def records(self, scope: str, collection: str) -> Tuple[Record, ...]:
        if self._check(scope, collection) is not None:
            return ()
        return tuple(dict(r) for r in self._data[self._key(collection)])

    def subscribe(self, scope: str, collection: str, on_change: OnChange, on_error: Optional[OnError] = None) -> Unsubscribe:
        problem = self._check(scope, collection)
        if problem is not None:
            if on_error is not None:
                on_error(StoreError(problem.get_error()["message"]))
            return lambda: None

        unsubscribe = self.bus.subscribe(self._key(collection), on_change, on_error)
        if self.load_error is not None and on_error is not None:
            on_error(self.load_error)
        else:
            on_change(self.records(scope, collection))
        return unsubscribe

    def create(self, scope: str, collection: str, record: Record) -> Either[dict, Record]:
        problem = self._check(scope, collection)
        if problem is not None:
            return problem
        new = dict(record)
        new["id"] = str(new.get("id") or uuid4().hex)
        new.setdefault("createdAt", self.clock().isoformat())
        items = self._data[self._key(collection)]
        if any(r.get("id") == new["id"] for r in items):
            return _failure("duplicate_id", f"Record {new['id']} already exists", id=new["id"])
        return self._commit(collection, items + [new], new, "create")

    def update(self, scope: str, collection: str, record_id: str, partial: Record) -> Either[dict, Record]:
        problem = self._check(scope, collection)
        if problem is not None:
            return problem
        items = self._data[self._key(collection)]
        for index, existing in enumerate(items):
            if existing.get("id") == record_id:
                merged = {**existing, **partial, "id": record_id}
                return self._commit(collection, items[:index] + [merged] + items[index + 1:], merged, "update")
        return _failure("not_found", f"Record {record_id} does not exist", id=record_id)

    def delete(self, scope: str, collection: str, record_id: str) -> Either[dict, Record]:
        problem = self._check(scope, collection)
        if problem is not None:
            return problem
        items = self._data[self._key(collection)]
        removed = next((r for r in items if r.get("id") == record_id), None)
        if removed is None:
            return _failure("not_found", f"Record {record_id} does not exist", id=record_id)
        return self._commit(collection, [r for r in items if r is not removed], removed, "delete")

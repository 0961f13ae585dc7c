"""
Per-equipment serialization and all-or-nothing writes.

Mutations against one equipment item run while holding that item's lock from
``KeyedLocks``; items never share a lock. Inside the lock, the new state is
staged on a ``UnitOfWork`` and written in one ``commit`` under the store
guard, so readers see either the old pair of rows or the new pair.
"""

from __future__ import annotations
from contextlib import contextmanager
import logging
import threading
from typing import Dict, Iterator, List, MutableMapping, Optional
import weakref

from .domain import BorrowRequest, Equipment
from .errors import InternalError
from .repositories import BorrowRequestRepo, EquipmentRepo

logger = logging.getLogger(__name__)


class KeyedLocks:
    """One lock per key; an entry lives only while some caller holds its lock."""

    def __init__(self) -> None:
        self._locks: MutableMapping[str, threading.Lock] = weakref.WeakValueDictionary()
        self._registry = threading.Lock()

    def __len__(self) -> int:
        with self._registry:
            return len(self._locks)

    def lock_for(self, key: str) -> threading.Lock:
        with self._registry:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, key: str) -> Iterator[None]:
        with self.lock_for(key):
            yield


class UnitOfWork:
    def __init__(self, equipment: EquipmentRepo, requests: BorrowRequestRepo) -> None:
        self.equipment = equipment
        self.requests = requests
        self._equipment: List[Equipment] = []
        self._removed: List[str] = []
        self._requests: List[BorrowRequest] = []

    def save_equipment(self, item: Equipment) -> None:
        self._equipment.append(item)

    def remove_equipment(self, equipment_id: str) -> None:
        self._removed.append(equipment_id)

    def save_request(self, request: BorrowRequest) -> None:
        self._requests.append(request)

    def commit(self) -> None:
        with self.equipment.guard, self.requests.guard:
            prior_equipment: Dict[str, Optional[Equipment]] = {}
            for eid in [e.equipment_id for e in self._equipment] + self._removed:
                prior_equipment.setdefault(eid, self.equipment.get(eid))
            prior_requests: Dict[str, Optional[BorrowRequest]] = {
                r.request_id: self.requests.get(r.request_id) for r in self._requests
            }
            try:
                for item in self._equipment:
                    self.equipment.put(item)
                for eid in self._removed:
                    self.equipment.remove(eid)
                for request in self._requests:
                    self.requests.put(request)
            except Exception as exc:
                for eid, item in prior_equipment.items():
                    self.equipment.restore(eid, item)
                for rid, request in prior_requests.items():
                    self.requests.restore(rid, request)
                logger.exception("write failed, rolled back %d equipment and %d request rows",
                                 len(prior_equipment), len(prior_requests))
                raise InternalError("storage write failed; changes were rolled back") from exc
            finally:
                self._equipment.clear()
                self._removed.clear()
                self._requests.clear()

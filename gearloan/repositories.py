from __future__ import annotations
from dataclasses import replace
from datetime import date
import threading
from typing import Dict, List, Optional

from .domain import (
    User,
    Equipment,
    BorrowRequest,
    RequestStatus,
)


class UserRepo:
    def __init__(self) -> None:
        self._users: Dict[str, User] = {}

    def add(self, user: User) -> None:
        self._users[user.user_id] = user

    def get(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    def list_all(self) -> List[User]:
        return list(self._users.values())


class EquipmentRepo:
    """Catalog store. Hands out copies; writes go through ``put``."""

    def __init__(self, guard: Optional[threading.RLock] = None) -> None:
        self.guard = guard or threading.RLock()
        self._items: Dict[str, Equipment] = {}

    def put(self, item: Equipment) -> None:
        with self.guard:
            self._items[item.equipment_id] = replace(item)

    def remove(self, equipment_id: str) -> None:
        with self.guard:
            self._items.pop(equipment_id, None)

    def restore(self, equipment_id: str, item: Optional[Equipment]) -> None:
        # rollback path; bypasses put
        with self.guard:
            if item is None:
                self._items.pop(equipment_id, None)
            else:
                self._items[equipment_id] = replace(item)

    def get(self, equipment_id: str) -> Optional[Equipment]:
        with self.guard:
            item = self._items.get(equipment_id)
            return replace(item) if item else None

    def list_all(self) -> List[Equipment]:
        with self.guard:
            return [replace(e) for e in self._items.values()]


class BorrowRequestRepo:
    """Request ledger. Rows are never removed."""

    def __init__(self, guard: Optional[threading.RLock] = None) -> None:
        self.guard = guard or threading.RLock()
        self._requests: Dict[str, BorrowRequest] = {}

    def put(self, request: BorrowRequest) -> None:
        with self.guard:
            self._requests[request.request_id] = replace(request)

    def restore(self, request_id: str, request: Optional[BorrowRequest]) -> None:
        # rollback path; the only way a row disappears is undoing its insert
        with self.guard:
            if request is None:
                self._requests.pop(request_id, None)
            else:
                self._requests[request_id] = replace(request)

    def get(self, request_id: str) -> Optional[BorrowRequest]:
        with self.guard:
            r = self._requests.get(request_id)
            return replace(r) if r else None

    def find(
        self,
        requester_id: Optional[str] = None,
        status: Optional[RequestStatus] = None,
        equipment_id: Optional[str] = None,
    ) -> List[BorrowRequest]:
        with self.guard:
            items = [
                replace(r)
                for r in self._requests.values()
                if (requester_id is None or r.requester_id == requester_id)
                and (status is None or r.status == status)
                and (equipment_id is None or r.equipment_id == equipment_id)
            ]
        # newest first
        return sorted(items, key=lambda r: r.requested_at, reverse=True)

    def list_active_for_equipment(self, equipment_id: str) -> List[BorrowRequest]:
        return [r for r in self.find(equipment_id=equipment_id) if r.status.is_active]

    def approved_quantity(self, equipment_id: str) -> int:
        with self.guard:
            return sum(
                r.quantity
                for r in self._requests.values()
                if r.equipment_id == equipment_id and r.status == RequestStatus.APPROVED
            )

    def list_overdue(self, as_of: date, requester_id: Optional[str] = None) -> List[BorrowRequest]:
        return [
            r
            for r in self.find(requester_id=requester_id, status=RequestStatus.APPROVED)
            if r.is_overdue(as_of)
        ]

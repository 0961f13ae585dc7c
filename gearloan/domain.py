from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional


class Role(Enum):
    REQUESTER = "REQUESTER"
    STAFF = "STAFF"
    ADMIN = "ADMIN"

    @property
    def is_elevated(self) -> bool:
        return self in (Role.STAFF, Role.ADMIN)


@dataclass
class User:
    user_id: str
    name: str
    email: str
    role: Role = Role.REQUESTER
    active: bool = True


@dataclass(frozen=True)
class Actor:
    """The caller of an operation, as vouched for by the identity provider."""

    user_id: str
    role: Role


@dataclass
class Equipment:
    equipment_id: str
    name: str
    category: str
    total_quantity: int
    available_quantity: int
    description: str = ""
    condition: str = ""
    image_url: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def on_loan(self) -> int:
        return self.total_quantity - self.available_quantity


class RequestStatus(Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    RETURNED = "RETURNED"

    @property
    def is_active(self) -> bool:
        return self in (RequestStatus.PENDING, RequestStatus.APPROVED)


@dataclass
class BorrowRequest:
    request_id: str
    requester_id: str
    equipment_id: str
    quantity: int
    requested_at: datetime
    due_date: date
    notes: Optional[str] = None
    status: RequestStatus = RequestStatus.PENDING
    decided_by: Optional[str] = None
    decided_at: Optional[datetime] = None
    returned_at: Optional[datetime] = None

    def is_overdue(self, as_of: date) -> bool:
        return self.status == RequestStatus.APPROVED and self.due_date < as_of


@dataclass(frozen=True)
class InventoryMismatch:
    equipment_id: str
    total_quantity: int
    available_quantity: int
    approved_quantity: int

    @property
    def expected_available(self) -> int:
        return self.total_quantity - self.approved_quantity

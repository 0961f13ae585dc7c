from __future__ import annotations
from datetime import date, datetime
import threading
from typing import List, Optional, Tuple

from .config import Settings
from .domain import Actor, BorrowRequest, Equipment, InventoryMismatch, RequestStatus, Role, User
from .locking import KeyedLocks
from .repositories import BorrowRequestRepo, EquipmentRepo, UserRepo
from .services import (
    CatalogService,
    InventoryAuditor,
    OverdueScanner,
    ReservationService,
    UserService,
)


class LendingSystem:
    """
    A facade that wires repos + services and offers a compact API.

    Calls that act on behalf of someone take the caller's user id and resolve
    it to an ``Actor`` through the user registry first.
    """

    def __init__(self, settings: Optional[Settings] = None) -> None:
        self.settings = settings or Settings()

        # repos; the two tables share one commit guard
        guard = threading.RLock()
        self.users = UserRepo()
        self.equipment = EquipmentRepo(guard)
        self.requests = BorrowRequestRepo(guard)
        self.locks = KeyedLocks()

        # services
        self.user_service = UserService(self.users)
        self.catalog = CatalogService(self.equipment, self.requests, self.locks)
        self.reservations = ReservationService(
            self.equipment, self.requests, self.locks, self.settings
        )
        self.overdue = OverdueScanner(self.requests)
        self.auditor = InventoryAuditor(self.equipment, self.requests)

    def actor_for(self, user_id: str) -> Actor:
        return self.user_service.actor_for(user_id)

    # ---- users
    def create_user(self, name: str, email: str, role: Role = Role.REQUESTER) -> User:
        return self.user_service.register_user(name, email, role)

    # ---- catalog
    def add_equipment(
        self,
        user_id: str,
        name: str,
        category: str,
        total_quantity: int,
        description: str = "",
        condition: str = "",
        image_url: str = "",
    ) -> Equipment:
        return self.catalog.add_equipment(
            self.actor_for(user_id), name, category, total_quantity,
            description=description, condition=condition, image_url=image_url,
        )

    def update_equipment(self, user_id: str, equipment_id: str, **changes) -> Equipment:
        return self.catalog.update_equipment(self.actor_for(user_id), equipment_id, **changes)

    def delete_equipment(self, user_id: str, equipment_id: str) -> None:
        self.catalog.delete_equipment(self.actor_for(user_id), equipment_id)

    def get_equipment(self, equipment_id: str) -> Equipment:
        return self.catalog.get_equipment(equipment_id)

    def list_equipment(self) -> List[Equipment]:
        return self.catalog.list_equipment()

    # ---- borrow requests
    def request_equipment(
        self,
        user_id: str,
        equipment_id: str,
        quantity: int,
        due_date: date,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BorrowRequest:
        return self.reservations.create(
            self.actor_for(user_id), equipment_id, quantity, due_date, notes, now=now
        )

    def approve(self, user_id: str, request_id: str) -> BorrowRequest:
        return self.reservations.approve(self.actor_for(user_id), request_id)

    def reject(self, user_id: str, request_id: str) -> BorrowRequest:
        return self.reservations.reject(self.actor_for(user_id), request_id)

    def return_equipment(self, user_id: str, request_id: str) -> BorrowRequest:
        return self.reservations.return_request(self.actor_for(user_id), request_id)

    def get_request(self, user_id: str, request_id: str) -> BorrowRequest:
        return self.reservations.get(self.actor_for(user_id), request_id)

    def list_requests(
        self,
        user_id: str,
        status: Optional[RequestStatus] = None,
        requester_id: Optional[str] = None,
    ) -> List[BorrowRequest]:
        return self.reservations.list_requests(self.actor_for(user_id), status, requester_id)

    # ---- reporting
    def report_overdue(
        self, user_id: str, as_of: Optional[date] = None, requester_id: Optional[str] = None
    ) -> List[BorrowRequest]:
        return self.overdue.list_overdue(self.actor_for(user_id), as_of, requester_id)

    def report_inventory(self) -> List[Tuple[Equipment, int, int, int]]:
        return self.auditor.report_inventory()

    def audit_inventory(self) -> List[InventoryMismatch]:
        return self.auditor.audit()

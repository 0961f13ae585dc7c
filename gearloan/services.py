from __future__ import annotations
from datetime import date, datetime, timedelta, timezone
import logging
from typing import List, Optional, Tuple
import uuid

from .config import Settings
from .domain import (
    Actor,
    Role,
    User,
    Equipment,
    RequestStatus,
    BorrowRequest,
    InventoryMismatch,
)
from .errors import (
    ConstraintViolation,
    Conflict,
    InsufficientAvailability,
    InvalidTransition,
    NotFound,
    PermissionDenied,
)
from .locking import KeyedLocks, UnitOfWork
from .permissions import Operation, authorize, can
from .repositories import BorrowRequestRepo, EquipmentRepo, UserRepo

logger = logging.getLogger(__name__)


def _new_id(prefix: str) -> str:
    return f"{prefix}_{uuid.uuid4().hex[:8]}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserService:
    def __init__(self, users: UserRepo) -> None:
        self.users = users

    def register_user(self, name: str, email: str, role: Role = Role.REQUESTER) -> User:
        if not name.strip() or not email.strip():
            raise ConstraintViolation("name and email are required")
        u = User(user_id=_new_id("usr"), name=name, email=email, role=role)
        self.users.add(u)
        return u

    def get(self, user_id: str) -> Optional[User]:
        return self.users.get(user_id)

    def actor_for(self, user_id: str) -> Actor:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User", "id", user_id)
        if not user.active:
            raise PermissionDenied(f"user '{user_id}' is deactivated")
        return Actor(user_id=user.user_id, role=user.role)

    def deactivate(self, user_id: str) -> User:
        user = self.users.get(user_id)
        if user is None:
            raise NotFound("User", "id", user_id)
        user.active = False
        return user


class CatalogService:
    """Equipment metadata and total-quantity edits."""

    def __init__(self, equipment: EquipmentRepo, requests: BorrowRequestRepo, locks: KeyedLocks) -> None:
        self.equipment = equipment
        self.requests = requests
        self.locks = locks

    @staticmethod
    def _require_text(field: str, value: str) -> str:
        if value is None or not value.strip():
            raise ConstraintViolation(f"{field} must not be empty")
        return value.strip()

    @staticmethod
    def _require_total(value: int) -> int:
        if not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise ConstraintViolation(f"total quantity must be a non-negative integer, got {value!r}")
        return value

    def add_equipment(
        self,
        actor: Actor,
        name: str,
        category: str,
        total_quantity: int,
        description: str = "",
        condition: str = "",
        image_url: str = "",
        now: Optional[datetime] = None,
    ) -> Equipment:
        authorize(actor.user_id, actor.role, Operation.MANAGE_CATALOG)
        now = now or _utcnow()
        item = Equipment(
            equipment_id=_new_id("eq"),
            name=self._require_text("name", name),
            category=self._require_text("category", category),
            total_quantity=self._require_total(total_quantity),
            available_quantity=total_quantity,
            description=description or "",
            condition=condition or "",
            image_url=image_url or "",
            created_at=now,
            updated_at=now,
        )
        uow = UnitOfWork(self.equipment, self.requests)
        uow.save_equipment(item)
        uow.commit()
        logger.info("equipment %s added: %s x%d", item.equipment_id, item.name, item.total_quantity)
        return item

    def get_equipment(self, equipment_id: str) -> Equipment:
        item = self.equipment.get(equipment_id)
        if item is None:
            raise NotFound("Equipment", "id", equipment_id)
        return item

    def list_equipment(self) -> List[Equipment]:
        return sorted(self.equipment.list_all(), key=lambda e: e.name.lower())

    def update_equipment(
        self,
        actor: Actor,
        equipment_id: str,
        name: Optional[str] = None,
        category: Optional[str] = None,
        total_quantity: Optional[int] = None,
        description: Optional[str] = None,
        condition: Optional[str] = None,
        image_url: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Equipment:
        authorize(actor.user_id, actor.role, Operation.MANAGE_CATALOG)
        if total_quantity is not None:
            self._require_total(total_quantity)
        with self.locks.hold(equipment_id):
            item = self.get_equipment(equipment_id)
            if name is not None:
                item.name = self._require_text("name", name)
            if category is not None:
                item.category = self._require_text("category", category)
            if description is not None:
                item.description = description
            if condition is not None:
                item.condition = condition
            if image_url is not None:
                item.image_url = image_url

            if total_quantity is not None and total_quantity != item.total_quantity:
                borrowed = item.total_quantity - item.available_quantity
                if total_quantity < borrowed:
                    logger.warning(
                        "equipment %s total cut to %d while %d units are on loan",
                        equipment_id, total_quantity, borrowed,
                    )
                item.total_quantity = total_quantity
                item.available_quantity = max(0, total_quantity - borrowed)

            item.updated_at = now or _utcnow()
            uow = UnitOfWork(self.equipment, self.requests)
            uow.save_equipment(item)
            uow.commit()
        return item

    def delete_equipment(self, actor: Actor, equipment_id: str) -> None:
        authorize(actor.user_id, actor.role, Operation.MANAGE_CATALOG)
        with self.locks.hold(equipment_id):
            item = self.get_equipment(equipment_id)
            active = self.requests.list_active_for_equipment(equipment_id)
            if active:
                raise Conflict(
                    f"Equipment '{item.name}' has {len(active)} pending or approved request(s)"
                )
            uow = UnitOfWork(self.equipment, self.requests)
            uow.remove_equipment(equipment_id)
            uow.commit()
        logger.info("equipment %s deleted", equipment_id)


class ReservationService:
    """
    Moves borrow requests through PENDING -> APPROVED -> RETURNED and
    PENDING -> REJECTED, keeping each item's available count equal to its
    total minus the units held by APPROVED requests.

    Every transition runs under the lock of the request's equipment item and
    is written as one unit, so two approvals against the same item are
    linearized and the second sees the decremented count.
    """

    def __init__(
        self,
        equipment: EquipmentRepo,
        requests: BorrowRequestRepo,
        locks: KeyedLocks,
        settings: Optional[Settings] = None,
    ) -> None:
        self.equipment = equipment
        self.requests = requests
        self.locks = locks
        self.settings = settings or Settings()

    def _equipment_or_404(self, equipment_id: str) -> Equipment:
        item = self.equipment.get(equipment_id)
        if item is None:
            raise NotFound("Equipment", "id", equipment_id)
        return item

    def _request_or_404(self, request_id: str) -> BorrowRequest:
        r = self.requests.get(request_id)
        if r is None:
            raise NotFound("Request", "id", request_id)
        return r

    def _validate_new_request(self, quantity: int, due_date: date, today: date) -> None:
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity < 1:
            raise ConstraintViolation(f"quantity must be at least 1, got {quantity!r}")
        if not isinstance(due_date, date) or isinstance(due_date, datetime):
            raise ConstraintViolation("due date must be a calendar date")
        if due_date < today:
            raise ConstraintViolation(f"due date {due_date.isoformat()} is before the request date")
        limit = self.settings.max_loan_days
        if limit is not None and due_date > today + timedelta(days=limit):
            raise ConstraintViolation(f"due date may be at most {limit} day(s) after the request date")

    def create(
        self,
        actor: Actor,
        equipment_id: str,
        quantity: int,
        due_date: date,
        notes: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> BorrowRequest:
        authorize(actor.user_id, actor.role, Operation.CREATE_REQUEST)
        now = now or _utcnow()
        self._validate_new_request(quantity, due_date, now.date())
        self._equipment_or_404(equipment_id)

        with self.locks.hold(equipment_id):
            # re-read; the item may have been edited or deleted meanwhile
            item = self._equipment_or_404(equipment_id)
            if item.available_quantity < quantity:
                logger.info(
                    "[create] %s asked for %d of %s, only %d available",
                    actor.user_id, quantity, equipment_id, item.available_quantity,
                )
                raise InsufficientAvailability(item.available_quantity, quantity)

            r = BorrowRequest(
                request_id=_new_id("req"),
                requester_id=actor.user_id,
                equipment_id=equipment_id,
                quantity=quantity,
                requested_at=now,
                due_date=due_date,
                notes=notes,
            )
            uow = UnitOfWork(self.equipment, self.requests)
            uow.save_request(r)
            uow.commit()

        logger.info("[create] request %s: %s wants %d of %s", r.request_id, actor.user_id, quantity, equipment_id)
        return r

    def approve(self, actor: Actor, request_id: str, now: Optional[datetime] = None) -> BorrowRequest:
        authorize(actor.user_id, actor.role, Operation.APPROVE_REQUEST)
        equipment_id = self._request_or_404(request_id).equipment_id

        with self.locks.hold(equipment_id):
            # re-read under the lock; another caller may have decided it
            r = self._request_or_404(request_id)
            if r.status != RequestStatus.PENDING:
                raise InvalidTransition("Only pending requests can be approved")

            item = self._equipment_or_404(equipment_id)
            if item.available_quantity < r.quantity:
                logger.info(
                    "[approve] request %s needs %d of %s, only %d available",
                    request_id, r.quantity, equipment_id, item.available_quantity,
                )
                raise InsufficientAvailability(item.available_quantity, r.quantity)

            now = now or _utcnow()
            item.available_quantity -= r.quantity
            item.updated_at = now
            r.status = RequestStatus.APPROVED
            r.decided_by = actor.user_id
            r.decided_at = now

            uow = UnitOfWork(self.equipment, self.requests)
            uow.save_equipment(item)
            uow.save_request(r)
            uow.commit()

        logger.info("[approve] request %s approved by %s", request_id, actor.user_id)
        return r

    def reject(self, actor: Actor, request_id: str, now: Optional[datetime] = None) -> BorrowRequest:
        authorize(actor.user_id, actor.role, Operation.REJECT_REQUEST)
        equipment_id = self._request_or_404(request_id).equipment_id

        with self.locks.hold(equipment_id):
            r = self._request_or_404(request_id)
            if r.status != RequestStatus.PENDING:
                raise InvalidTransition("Only pending requests can be rejected")

            r.status = RequestStatus.REJECTED
            r.decided_by = actor.user_id
            r.decided_at = now or _utcnow()

            uow = UnitOfWork(self.equipment, self.requests)
            uow.save_request(r)
            uow.commit()

        logger.info("[reject] request %s rejected by %s", request_id, actor.user_id)
        return r

    def return_request(self, actor: Actor, request_id: str, now: Optional[datetime] = None) -> BorrowRequest:
        authorize(actor.user_id, actor.role, Operation.RETURN_REQUEST)
        equipment_id = self._request_or_404(request_id).equipment_id

        with self.locks.hold(equipment_id):
            r = self._request_or_404(request_id)
            if r.status != RequestStatus.APPROVED:
                raise InvalidTransition("Only approved requests can be returned")

            now = now or _utcnow()
            item = self._equipment_or_404(equipment_id)
            restored = item.available_quantity + r.quantity
            if restored > item.total_quantity:
                logger.warning(
                    "[return] %s would reach %d of %d units; clamping",
                    equipment_id, restored, item.total_quantity,
                )
            item.available_quantity = min(restored, item.total_quantity)
            item.updated_at = now
            r.status = RequestStatus.RETURNED
            r.returned_at = now

            uow = UnitOfWork(self.equipment, self.requests)
            uow.save_equipment(item)
            uow.save_request(r)
            uow.commit()

        logger.info("[return] request %s returned", request_id)
        return r

    def get(self, actor: Actor, request_id: str) -> BorrowRequest:
        r = self._request_or_404(request_id)
        authorize(actor.user_id, actor.role, Operation.VIEW_REQUEST, owner_id=r.requester_id)
        return r

    def list_requests(
        self,
        actor: Actor,
        status: Optional[RequestStatus] = None,
        requester_id: Optional[str] = None,
    ) -> List[BorrowRequest]:
        authorize(actor.user_id, actor.role, Operation.LIST_REQUESTS)
        return self.requests.find(requester_id=_scope(actor, requester_id), status=status)


class OverdueScanner:
    """Read-only: overdue is computed per call, never stored."""

    def __init__(self, requests: BorrowRequestRepo) -> None:
        self.requests = requests

    def list_overdue(
        self,
        actor: Actor,
        as_of: Optional[date] = None,
        requester_id: Optional[str] = None,
    ) -> List[BorrowRequest]:
        authorize(actor.user_id, actor.role, Operation.LIST_OVERDUE)
        as_of = as_of or _utcnow().date()
        return self.requests.list_overdue(as_of, requester_id=_scope(actor, requester_id))


class InventoryAuditor:
    def __init__(self, equipment: EquipmentRepo, requests: BorrowRequestRepo) -> None:
        self.equipment = equipment
        self.requests = requests

    def report_inventory(self) -> List[Tuple[Equipment, int, int, int]]:
        """
        Returns tuples of (Equipment, total, available, on_loan)
        """
        with self.equipment.guard:
            items = self.equipment.list_all()
        return [(e, e.total_quantity, e.available_quantity, e.on_loan) for e in items]

    def audit(self) -> List[InventoryMismatch]:
        # both tables read under one guard so the comparison is not torn
        with self.equipment.guard, self.requests.guard:
            mismatches = []
            for e in self.equipment.list_all():
                approved = self.requests.approved_quantity(e.equipment_id)
                if e.on_loan != approved or not 0 <= e.available_quantity <= e.total_quantity:
                    mismatches.append(
                        InventoryMismatch(
                            equipment_id=e.equipment_id,
                            total_quantity=e.total_quantity,
                            available_quantity=e.available_quantity,
                            approved_quantity=approved,
                        )
                    )
        for m in mismatches:
            logger.warning(
                "equipment %s: available=%d but expected %d",
                m.equipment_id, m.available_quantity, m.expected_available,
            )
        return mismatches


def _scope(actor: Actor, requester_id: Optional[str]) -> Optional[str]:
    """Requester filter to apply for ``actor``; non-elevated callers only see their own rows."""
    if can(actor.user_id, actor.role, Operation.VIEW_ALL_REQUESTS):
        return requester_id
    if requester_id is not None and requester_id != actor.user_id:
        raise PermissionDenied("You don't have permission to view another user's requests")
    return actor.user_id

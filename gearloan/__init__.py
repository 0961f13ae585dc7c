"""
GearLoan equipment lending package.

Exports key modules for convenient imports.
"""

from .domain import (
    Role,
    User,
    Actor,
    Equipment,
    RequestStatus,
    BorrowRequest,
    InventoryMismatch,
)

from .errors import (
    LendingError,
    ConstraintViolation,
    PermissionDenied,
    NotFound,
    InvalidTransition,
    InsufficientAvailability,
    Conflict,
    InternalError,
)

from .repositories import (
    UserRepo,
    EquipmentRepo,
    BorrowRequestRepo,
)

from .services import (
    UserService,
    CatalogService,
    ReservationService,
    OverdueScanner,
    InventoryAuditor,
)

from .permissions import Operation, authorize, can
from .config import Settings
from .api import LendingSystem
from .seed import seed_demo_data

__all__ = [
    # domain
    "Role",
    "User",
    "Actor",
    "Equipment",
    "RequestStatus",
    "BorrowRequest",
    "InventoryMismatch",
    # errors
    "LendingError",
    "ConstraintViolation",
    "PermissionDenied",
    "NotFound",
    "InvalidTransition",
    "InsufficientAvailability",
    "Conflict",
    "InternalError",
    # repos
    "UserRepo",
    "EquipmentRepo",
    "BorrowRequestRepo",
    # services
    "UserService",
    "CatalogService",
    "ReservationService",
    "OverdueScanner",
    "InventoryAuditor",
    # permissions
    "Operation",
    "authorize",
    "can",
    # config / api
    "Settings",
    "LendingSystem",
    # seed
    "seed_demo_data",
]

from __future__ import annotations
from enum import Enum, auto
from typing import Dict, FrozenSet, Optional

from .domain import Role
from .errors import PermissionDenied


class Operation(Enum):
    CREATE_REQUEST = auto()
    VIEW_REQUEST = auto()
    LIST_REQUESTS = auto()
    APPROVE_REQUEST = auto()
    REJECT_REQUEST = auto()
    RETURN_REQUEST = auto()
    LIST_OVERDUE = auto()
    MANAGE_CATALOG = auto()
    VIEW_ALL_REQUESTS = auto()


_EVERYONE = frozenset(Role)
_ELEVATED = frozenset({Role.STAFF, Role.ADMIN})

CAPABILITIES: Dict[Operation, FrozenSet[Role]] = {
    Operation.CREATE_REQUEST: _EVERYONE,
    Operation.VIEW_REQUEST: _EVERYONE,
    Operation.LIST_REQUESTS: _EVERYONE,
    Operation.LIST_OVERDUE: _EVERYONE,
    Operation.APPROVE_REQUEST: _ELEVATED,
    Operation.REJECT_REQUEST: _ELEVATED,
    Operation.RETURN_REQUEST: _ELEVATED,
    Operation.MANAGE_CATALOG: _ELEVATED,
    Operation.VIEW_ALL_REQUESTS: _ELEVATED,
}

# operations where a non-elevated caller is limited to its own records
_OWNER_SCOPED = frozenset({Operation.VIEW_REQUEST})


def can(identity: str, role: Role, operation: Operation, owner_id: Optional[str] = None) -> bool:
    if role not in CAPABILITIES[operation]:
        return False
    if operation in _OWNER_SCOPED and not role.is_elevated:
        return owner_id is not None and owner_id == identity
    return True


def authorize(
    identity: str, role: Role, operation: Operation, owner_id: Optional[str] = None
) -> None:
    """Raise PermissionDenied unless ``identity`` acting as ``role`` may run ``operation``.

    ``owner_id`` is the requester of the record being touched, for operations
    that non-elevated callers may only run against their own records.
    """
    if not can(identity, role, operation, owner_id):
        raise PermissionDenied(
            f"{role.value.lower()} '{identity}' is not allowed to {operation.name.lower().replace('_', ' ')}"
        )

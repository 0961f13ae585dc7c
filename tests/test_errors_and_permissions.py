from __future__ import annotations

import pytest

from gearloan import (
    Actor,
    Conflict,
    ConstraintViolation,
    InsufficientAvailability,
    InternalError,
    InvalidTransition,
    NotFound,
    Operation,
    PermissionDenied,
    Role,
    authorize,
    can,
)

ERROR_KINDS = [
    ConstraintViolation("bad"),
    PermissionDenied("nope"),
    NotFound("Request", "id", "req_1"),
    InvalidTransition("Only pending requests can be approved"),
    InsufficientAvailability(available=2, requested=3),
    Conflict("in use"),
    InternalError("boom"),
]


def test_every_error_kind_has_its_own_status_and_code():
    assert len({e.status_code for e in ERROR_KINDS}) == len(ERROR_KINDS)
    assert len({e.code for e in ERROR_KINDS}) == len(ERROR_KINDS)


def test_error_bodies():
    assert NotFound("Equipment", "id", "eq_9").to_dict() == {
        "error": "Resource Not Found",
        "code": "NOT_FOUND",
        "message": "Equipment not found with id: 'eq_9'",
        "status": 404,
    }
    body = InsufficientAvailability(available=2, requested=3).to_dict()
    assert body["status"] == 422
    assert (body["available"], body["requested"]) == (2, 3)


@pytest.mark.parametrize("operation", [
    Operation.APPROVE_REQUEST,
    Operation.REJECT_REQUEST,
    Operation.RETURN_REQUEST,
    Operation.MANAGE_CATALOG,
    Operation.VIEW_ALL_REQUESTS,
])
def test_elevated_only_operations(operation):
    assert not can("u1", Role.REQUESTER, operation)
    assert can("u2", Role.STAFF, operation)
    assert can("u3", Role.ADMIN, operation)
    with pytest.raises(PermissionDenied):
        authorize("u1", Role.REQUESTER, operation)


def test_viewing_a_request_is_owner_scoped_for_requesters():
    assert can("u1", Role.REQUESTER, Operation.VIEW_REQUEST, owner_id="u1")
    assert not can("u1", Role.REQUESTER, Operation.VIEW_REQUEST, owner_id="u2")
    assert not can("u1", Role.REQUESTER, Operation.VIEW_REQUEST)
    assert can("s1", Role.STAFF, Operation.VIEW_REQUEST, owner_id="u2")


def test_anyone_may_create_and_list():
    for role in Role:
        authorize("x", role, Operation.CREATE_REQUEST)
        authorize("x", role, Operation.LIST_REQUESTS)
        authorize("x", role, Operation.LIST_OVERDUE)


def test_actor_resolution(system):
    user = system.create_user("Kim", "kim@example.com", Role.STAFF)
    assert system.actor_for(user.user_id) == Actor(user.user_id, Role.STAFF)

    with pytest.raises(NotFound):
        system.actor_for("usr_ghost")

    system.user_service.deactivate(user.user_id)
    with pytest.raises(PermissionDenied):
        system.actor_for(user.user_id)


def test_user_registration_requires_name_and_email(system):
    with pytest.raises(ConstraintViolation):
        system.create_user("", "a@example.com")


def test_status_code_mapping():
    assert {type(e).__name__: e.status_code for e in ERROR_KINDS} == {
        "ConstraintViolation": 400,
        "PermissionDenied": 403,
        "NotFound": 404,
        "InvalidTransition": 409,
        "InsufficientAvailability": 422,
        "Conflict": 423,
        "InternalError": 500,
    }

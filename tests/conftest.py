from __future__ import annotations
from datetime import date, datetime, timezone

import pytest

from gearloan import LendingSystem, Role, Settings


# fixed clock for tests that need calendar control
T0 = datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc)
DUE = date(2024, 1, 10)


@pytest.fixture
def system() -> LendingSystem:
    return LendingSystem(Settings(log_level="DEBUG"))


@pytest.fixture
def student(system):
    return system.actor_for(system.create_user("Sam Student", "sam@example.com").user_id)


@pytest.fixture
def other_student(system):
    return system.actor_for(system.create_user("Olive Other", "olive@example.com").user_id)


@pytest.fixture
def staff(system):
    return system.actor_for(system.create_user("Stu Staff", "stu@example.com", Role.STAFF).user_id)


@pytest.fixture
def admin(system):
    return system.actor_for(system.create_user("Ada Admin", "ada@example.com", Role.ADMIN).user_id)


@pytest.fixture
def make_equipment(system, staff):
    def _make(total: int = 5, name: str = "Projector", category: str = "AV"):
        return system.catalog.add_equipment(staff, name, category, total, now=T0)

    return _make


@pytest.fixture
def engine(system):
    return system.reservations

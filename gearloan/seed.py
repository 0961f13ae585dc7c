from __future__ import annotations
from datetime import datetime, timedelta, timezone
import logging

from .api import LendingSystem
from .domain import Role

logger = logging.getLogger(__name__)


def seed_demo_data(sys: LendingSystem) -> None:
    # users
    alice = sys.create_user("Alice Student", "alice@example.com")
    bob = sys.create_user("Bob Staff", "bob@example.com", role=Role.STAFF)
    sys.create_user("Ava Admin", "admin@example.com", role=Role.ADMIN)

    # equipment
    cameras = sys.add_equipment(
        bob.user_id,
        "DSLR Camera",
        "Photography",
        total_quantity=4,
        description="24MP body with kit lens",
        condition="good",
    )
    sys.add_equipment(
        bob.user_id,
        "Microscope",
        "Lab",
        total_quantity=6,
        condition="excellent",
    )
    balls = sys.add_equipment(bob.user_id, "Basketball", "Sports", total_quantity=10)

    # an approved loan that went past its due date three days ago
    ten_days_ago = datetime.now(timezone.utc) - timedelta(days=10)
    late = sys.request_equipment(
        alice.user_id,
        cameras.equipment_id,
        quantity=1,
        due_date=(ten_days_ago + timedelta(days=7)).date(),
        notes="field trip",
        now=ten_days_ago,
    )
    sys.approve(bob.user_id, late.request_id)

    # one pending, one approved and on time
    today = datetime.now(timezone.utc).date()
    sys.request_equipment(alice.user_id, balls.equipment_id, 2, today + timedelta(days=3))
    on_time = sys.request_equipment(alice.user_id, cameras.equipment_id, 2, today + timedelta(days=14))
    sys.approve(bob.user_id, on_time.request_id)

    logger.info("[seed] users: %s", [u.name for u in sys.users.list_all()])

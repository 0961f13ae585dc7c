from __future__ import annotations
from datetime import datetime, timedelta, timezone

from gearloan import LendingSystem, seed_demo_data
from gearloan.config import configure_logging
from gearloan.domain import RequestStatus
from gearloan.errors import LendingError


def demo_flow() -> None:
    sys = LendingSystem()
    configure_logging(sys.settings.log_level)
    seed_demo_data(sys)

    alice = next(u for u in sys.users.list_all() if u.name == "Alice Student")
    bob = next(u for u in sys.users.list_all() if u.name == "Bob Staff")

    # Report inventory
    print("\n[demo] inventory:")
    for item, total, available, on_loan in sys.report_inventory():
        print(f"  - {item.name}: total={total}, available={available}, on loan={on_loan}")

    # Overdue report, staff view
    overdue = sys.report_overdue(bob.user_id)
    print("\n[demo] overdue requests:", [r.request_id for r in overdue])

    # Return the overdue loan
    for r in overdue:
        sys.return_equipment(bob.user_id, r.request_id)
        print(f"[demo] returned {r.request_id}")

    # Ask for more cameras than are left
    cameras = next(e for e in sys.list_equipment() if e.name == "DSLR Camera")
    try:
        due = datetime.now(timezone.utc).date() + timedelta(days=2)
        sys.request_equipment(alice.user_id, cameras.equipment_id, 10, due)
    except LendingError as exc:
        print("\n[demo] oversized request refused:", exc.to_dict())

    # Alice tries to approve her own pending request
    pending = sys.list_requests(alice.user_id, status=RequestStatus.PENDING)
    if pending:
        try:
            sys.approve(alice.user_id, pending[0].request_id)
        except LendingError as exc:
            print("[demo] student approval refused:", exc.status_code, exc.message)

    print("\n[demo] inventory audit mismatches:", sys.audit_inventory())


if __name__ == "__main__":
    demo_flow()

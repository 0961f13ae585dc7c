from __future__ import annotations
from datetime import date, timedelta

import pytest

from gearloan import LendingSystem, RequestStatus, Settings, seed_demo_data


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("GEARLOAN_LOG_LEVEL", "debug")
    monkeypatch.setenv("GEARLOAN_MAX_LOAN_DAYS", "21")

    settings = Settings()

    assert settings.log_level == "DEBUG"
    assert settings.max_loan_days == 21


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("GEARLOAN_LOG_LEVEL", raising=False)
    monkeypatch.delenv("GEARLOAN_MAX_LOAN_DAYS", raising=False)

    settings = Settings()

    assert settings.log_level == "INFO"
    assert settings.max_loan_days is None


def test_explicit_settings_win(monkeypatch):
    monkeypatch.setenv("GEARLOAN_MAX_LOAN_DAYS", "21")
    assert Settings(max_loan_days=3).max_loan_days == 3


def test_bad_max_loan_days(monkeypatch):
    monkeypatch.setenv("GEARLOAN_MAX_LOAN_DAYS", "0")
    with pytest.raises(ValueError):
        Settings()


def test_seeded_system_is_consistent(monkeypatch):
    monkeypatch.delenv("GEARLOAN_MAX_LOAN_DAYS", raising=False)
    sys = LendingSystem()
    seed_demo_data(sys)

    staff = next(u for u in sys.users.list_all() if u.name == "Bob Staff")
    alice = next(u for u in sys.users.list_all() if u.name == "Alice Student")

    assert sys.audit_inventory() == []
    overdue = sys.report_overdue(staff.user_id, as_of=date.today() + timedelta(days=1))
    assert len(overdue) == 1
    assert overdue[0].requester_id == alice.user_id
    assert len(sys.list_requests(alice.user_id, status=RequestStatus.PENDING)) == 1

    cameras = next(e for e in sys.list_equipment() if e.name == "DSLR Camera")
    assert cameras.available_quantity == 1

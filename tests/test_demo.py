from __future__ import annotations
from datetime import datetime, timezone

import demo
import gearloan.seed as seed
import gearloan.services as services


class _FarFuture(datetime):
    """A clock well away from the host's calendar."""

    @classmethod
    def now(cls, tz=None):
        return datetime(2030, 6, 2, 0, 30, tzinfo=timezone.utc)


def test_demo_due_dates_follow_the_utc_clock(monkeypatch, capsys):
    monkeypatch.setattr(demo, "datetime", _FarFuture)
    monkeypatch.setattr(seed, "datetime", _FarFuture)
    monkeypatch.setattr(services, "_utcnow", lambda: _FarFuture.now(timezone.utc))

    demo.demo_flow()

    out = capsys.readouterr().out
    # refused for stock, not for a due date behind the request date
    assert "INSUFFICIENT_AVAILABILITY" in out
    assert "CONSTRAINT_VIOLATION" not in out

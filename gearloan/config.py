from __future__ import annotations
import logging
import os
from typing import Optional

from dotenv import load_dotenv

# picks up a .env file in the working directory, if any
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    value = int(raw)
    if value < 1:
        raise ValueError(f"{name} must be a positive integer, got {raw!r}")
    return value


class Settings:
    """Runtime settings, read from the environment."""

    def __init__(
        self,
        log_level: Optional[str] = None,
        max_loan_days: Optional[int] = None,
    ) -> None:
        self.log_level = (log_level or os.environ.get("GEARLOAN_LOG_LEVEL") or "INFO").upper()
        self.max_loan_days = (
            max_loan_days if max_loan_days is not None else _optional_int("GEARLOAN_MAX_LOAN_DAYS")
        )

    def __repr__(self) -> str:
        return f"Settings(log_level={self.log_level!r}, max_loan_days={self.max_loan_days!r})"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

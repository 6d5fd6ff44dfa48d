"""Shared configuration helpers for HealthPulse."""

from __future__ import annotations

import os
from typing import Any

from . import EXPORT_DIR


def env_flag(name: str, default: bool = False) -> bool:
    """Parse a boolean-like environment variable.

    Accepts common truthy strings (``1``, ``true``, ``yes``, ``on``). Any other
    value falls back to ``False`` so the safer path is taken by default.
    """

    raw: Any = os.getenv(name)
    if raw is None:
        return bool(default)
    return str(raw).strip().lower() in {"1", "true", "yes", "on"}


def env_int(name: str, default: int) -> int:
    """Parse a positive integer environment variable.

    Blank, non-numeric or non-positive values fall back to ``default`` so a
    typo in a deployment script cannot switch a policy constant off.
    """

    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _clean_host(value: str | None, default: str) -> str:
    """Return a sanitized host string without leading/trailing whitespace."""

    if value is None:
        return default

    cleaned = value.strip()
    return cleaned or default


# Reports submitted within this many days of the period's month end are late.
LATE_WINDOW_DAYS: int = env_int("HEALTHPULSE_LATE_WINDOW_DAYS", 5)

# Number of most recent reporting periods the compliance table covers.
COMPLIANCE_PERIOD_COUNT: int = env_int("HEALTHPULSE_COMPLIANCE_PERIODS", 3)

# Data-quality ledger (skipped records, unrecognised ratings) on by default.
FEEDBACK_ENABLED: bool = env_flag("HEALTHPULSE_FEEDBACK_ENABLED", True)

HEALTHPULSE_HOST: str = _clean_host(os.getenv("HEALTHPULSE_HOST"), "127.0.0.1")
HEALTHPULSE_PORT: int = env_int("HEALTHPULSE_PORT", 8090)

EXPORT_PATH: str = os.getenv("HEALTHPULSE_EXPORT_DIR", str(EXPORT_DIR))

__all__ = [
    "env_flag",
    "env_int",
    "LATE_WINDOW_DAYS",
    "COMPLIANCE_PERIOD_COUNT",
    "FEEDBACK_ENABLED",
    "HEALTHPULSE_HOST",
    "HEALTHPULSE_PORT",
    "EXPORT_PATH",
]

"""Shared logging helpers to keep console output concise.

Dashboards and batch scripts should only surface single-line errors while
still preserving full diagnostics for post-mortem analysis. This module
configures loggers with a quiet console handler and a rotating file handler
for deep debugging. It also records data-quality events (skipped records,
unrecognised rating labels seen by the API) to an Excel ledger so report
owners can clean up upstream data without the engine rejecting incomplete
reports.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict

import pandas as pd

LOG_DIR = Path(os.environ.get("HEALTHPULSE_LOG_DIR", Path(__file__).parent / "logs"))

DEFAULT_FEEDBACK_PATH = LOG_DIR / "data_quality.xlsx"


def configure_quiet_logger(
    name: str,
    *,
    env_level_var: str = "HEALTHPULSE_LOG_LEVEL",
    default_console_level: str = "ERROR",
    file_name: str = "healthpulse.log",
    file_level: str | None = None,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Create a logger that only shows concise errors on the console.

    Console logs default to ``ERROR`` with a short format. A rotating file
    handler captures richer context for troubleshooting without spamming live
    terminals. The configuration is idempotent per logger name.
    """

    logger = logging.getLogger(name)
    if getattr(logger, "_healthpulse_configured", False):
        return logger

    logger.setLevel(logging.DEBUG)

    console_level_name = os.environ.get(env_level_var, default_console_level).upper()
    console_handler = logging.StreamHandler()
    console_handler.setLevel(getattr(logging, console_level_name, logging.ERROR))
    console_handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))

    target_dir = Path(log_dir or LOG_DIR)
    target_dir.mkdir(parents=True, exist_ok=True)
    file_level_name = (file_level or os.environ.get(f"{env_level_var}_FILE", "INFO")).upper()
    file_handler = RotatingFileHandler(target_dir / file_name, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(getattr(logging, file_level_name, logging.INFO))
    file_handler.setFormatter(
        logging.Formatter("%(asctime)s [%(levelname)s] %(name)s - %(message)s")
    )

    logger.addHandler(console_handler)
    logger.addHandler(file_handler)
    logger.propagate = False
    logger._healthpulse_configured = True  # type: ignore[attr-defined]
    return logger


LEDGER_COLUMNS = ("timestamp", "severity", "event", "message", "context")

# The ledger is rewritten whole on every entry; one writer at a time.
_ledger_lock = threading.Lock()

_ledger_logger = logging.getLogger("healthpulse.ledger")


def _load_ledger(target: Path) -> pd.DataFrame:
    if not target.exists():
        return pd.DataFrame(columns=list(LEDGER_COLUMNS))
    try:
        return pd.read_excel(target)
    except Exception as exc:
        _ledger_logger.warning("Unreadable ledger %s (%s); starting a new sheet", target, exc)
        return pd.DataFrame(columns=list(LEDGER_COLUMNS))


def record_feedback_tag(
    event: str,
    message: str,
    *,
    severity: str = "info",
    context: Dict[str, Any] | None = None,
    path: Path | None = None,
) -> bool:
    """Append one data-quality event to the Excel ledger.

    Entries are serialized through a process-wide lock so concurrent
    requests cannot overwrite each other. Returns ``False`` when the entry
    could not be written; the failure is logged and never raised, so the
    ledger cannot break a computation.
    """

    target = Path(path or DEFAULT_FEEDBACK_PATH)
    entry = {
        "timestamp": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        "severity": severity,
        "event": event,
        "message": message,
        "context": json.dumps(context or {}, default=str),
    }

    with _ledger_lock:
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            existing = _load_ledger(target)
            new_row = pd.DataFrame([entry], columns=list(LEDGER_COLUMNS))
            frame = new_row if existing.empty else pd.concat([existing, new_row], ignore_index=True)
            with pd.ExcelWriter(target, engine="openpyxl", mode="w") as writer:
                frame.to_excel(writer, index=False)
        except Exception as exc:
            _ledger_logger.warning("Could not record %s in ledger %s: %s", event, target, exc)
            return False
    return True


__all__ = ["LOG_DIR", "DEFAULT_FEEDBACK_PATH", "LEDGER_COLUMNS", "configure_quiet_logger", "record_feedback_tag"]

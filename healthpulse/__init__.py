"""HealthPulse: scoring engine for recurring project-health reports."""

from pathlib import Path

BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = BASE_DIR / "data"
EXPORT_DIR = DATA_DIR / "exports"

__version__ = "0.1.0"

__all__ = [
    "BASE_DIR",
    "DATA_DIR",
    "EXPORT_DIR",
    "__version__",
]

from __future__ import annotations
import logging
import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

_ROOT = Path(__file__).resolve().parent

def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("%s is not a valid integer: %r, using %d", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, got %d, using %d", name, value, default)
        return default
    return value

def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("%s is not a valid number: %r, using %s", name, raw, default)
        return default

# Path or http(s) URL of the reference dataset
DATASET_SOURCE = os.getenv("ELASTICITY_DATASET", str(_ROOT / "data" / "dataset.json"))

# Question count for points-based sessions; streak sessions run unbounded
SESSION_LENGTH = _int_env("ELASTICITY_SESSION_LENGTH", 10)

HTTP_TIMEOUT = _float_env("ELASTICITY_HTTP_TIMEOUT", 10.0)

LOG_LEVEL = os.getenv("ELASTICITY_LOG_LEVEL", "INFO").upper()

DEFAULT_BASE_URL = os.getenv("ELASTICITY_BOT_BASE_URL", "http://127.0.0.1:8000")

def setup_logging(level: str = LOG_LEVEL) -> None:
    """Root logger for our modules; a no-op when the host process already configured one."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

# ----------------------------------------------------------------
# Import configuration variables to be used throughout the project
# ----------------------------------------------------------------
import os
import logging
from dotenv import load_dotenv

# Load .env (process environment wins over file values)
load_dotenv()


def _rstrip_slash(s: str) -> str:
    return (s or "").rstrip("/")


def _get_bool(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on", "y"}


def _get_float(name: str, default: float) -> float:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _get_int(name: str, default: int) -> int:
    raw = os.getenv(name, "")
    if not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


class Settings:
    # ── SKU codes ────────────────────────────────────────────────────────────
    SKU_TEMPLATE: str = os.getenv("SKU_TEMPLATE", "{product}-{primary}-{secondary}")
    SKU_CODE_MAX_LENGTH: int = _get_int("SKU_CODE_MAX_LENGTH", 50)

    # ── Variant defaults ─────────────────────────────────────────────────────
    DEFAULT_INITIAL_STOCK: int = _get_int("DEFAULT_INITIAL_STOCK", 0)
    DEFAULT_IS_ACTIVE: bool = _get_bool("DEFAULT_IS_ACTIVE", True)

    # ── Color families ───────────────────────────────────────────────────────
    # Max CIE76 deltaE for a fuzzy family match. The admin UI historically passed 90.
    COLOR_DISTANCE_THRESHOLD: float = _get_float("COLOR_DISTANCE_THRESHOLD", 20.0)
    COLOR_FAMILIES_PATH: str = os.getenv("COLOR_FAMILIES_PATH", "data/color_families.json")

    # ── Sequence reservation service ─────────────────────────────────────────
    SEQUENCE_SERVICE_URL: str = _rstrip_slash(os.getenv("SEQUENCE_SERVICE_URL", ""))
    SEQUENCE_SERVICE_TOKEN: str = os.getenv("SEQUENCE_SERVICE_TOKEN", "")
    SEQUENCE_SERVICE_TIMEOUT: float = _get_float("SEQUENCE_SERVICE_TIMEOUT", 10.0)
    # the counter endpoint refuses more than 100 numbers per call
    SEQUENCE_BATCH_LIMIT: int = _get_int("SEQUENCE_BATCH_LIMIT", 100)

    # ── Logging ──────────────────────────────────────────────────────────────
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Console logging for scripts and notebooks embedding the engine."""
    logging.basicConfig(
        level=getattr(logging, (level or settings.LOG_LEVEL), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s | %(message)s"
    )
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

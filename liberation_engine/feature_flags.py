import os


def _env_bool(name: str, default: bool) -> bool:
    val = os.getenv(name)
    if val is None:
        return default
    return val.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    val = os.getenv(name)
    if val is None or not val.strip():
        return default
    try:
        return int(val)
    except ValueError:
        return default


def get_flags() -> dict:
    """
    Backend on/off switches.
    """
    return {
        "TRACE_ENABLED": _env_bool("TRACE_ENABLED", True),
        "HISTORY_BACKEND": os.getenv("HISTORY_BACKEND", "memory").strip().lower(),
        "REDIS_URL": os.getenv("REDIS_URL", "redis://localhost:6379"),
        "JOURNEY_HISTORY_TTL_SECONDS": _env_int("JOURNEY_HISTORY_TTL_SECONDS", 0),
    }

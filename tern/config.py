from __future__ import annotations
import logging
import os


_DEFAULT_MAX_CALL_DEPTH = 255
_DEFAULT_LOG_LEVEL = "WARNING"


def int_from_env(var: str, default: int) -> int:
    raw = os.environ.get(var)
    if not raw or not raw.strip():
        return default
    try:
        value = int(raw.strip())
    except ValueError:
        raise ValueError(f"{var} must be an integer, got {raw!r}")
    if value < 1:
        raise ValueError(f"{var} must be positive, got {value}")
    return value


def get_max_call_depth() -> int:
    return int_from_env('TERN_MAX_CALL_DEPTH', _DEFAULT_MAX_CALL_DEPTH)


def get_log_level() -> int:
    name = os.environ.get('TERN_LOG_LEVEL', _DEFAULT_LOG_LEVEL).strip().upper()
    level = logging.getLevelName(name)
    # getLevelName returns a string for unknown names
    return level if isinstance(level, int) else logging.WARNING

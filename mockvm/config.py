"""
mockvm.config — numeric caps and feature flags for the simulated host.

Configuration precedence:
  1) Environment variables (MOCKVM_*)
  2) Hardcoded defaults below

Env vars:
  - MOCKVM_MAX_KEY_BYTES    (int)   default: unset (no cap)
  - MOCKVM_MAX_VALUE_BYTES  (int)   default: unset (no cap)
  - MOCKVM_STRICT_DECODE    (bool)  default: true
  - MOCKVM_LOG_LEVEL        (str)   default: WARNING
  - MOCKVM_LOG_FORMAT       (str)   json | text, default: auto (see mockvm.logging)

Usage:
    from mockvm.config import load_config
    CFG = load_config()
    if CFG.strict_decode: ...

`load_config()` is cached; tests that tweak the environment call
`load_config.cache_clear()` afterwards.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

_LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "t", "yes", "y", "on")


def _env_int(name: str, default: Optional[int], *, min_v: int, max_v: int) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        v = int(raw, 0)
    except ValueError:
        return default
    return max(min_v, min(max_v, v))


def _env_choice(name: str, choices: tuple, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None:
        return default
    val = raw.strip().upper()
    for c in choices:
        if c.upper() == val:
            return c
    return default


@dataclass(frozen=True)
class MockVmConfig:
    max_key_bytes: Optional[int]
    max_value_bytes: Optional[int]
    strict_decode: bool
    log_level: str
    log_format: Optional[str]

    def as_dict(self) -> Dict[str, Any]:
        return {
            "max_key_bytes": self.max_key_bytes,
            "max_value_bytes": self.max_value_bytes,
            "strict_decode": self.strict_decode,
            "log_level": self.log_level,
            "log_format": self.log_format,
        }


@lru_cache(maxsize=1)
def load_config() -> MockVmConfig:
    """
    Build and cache a MockVmConfig from environment + defaults.
    """
    return MockVmConfig(
        max_key_bytes=_env_int("MOCKVM_MAX_KEY_BYTES", None, min_v=1, max_v=1 << 20),
        max_value_bytes=_env_int(
            "MOCKVM_MAX_VALUE_BYTES", None, min_v=1, max_v=1 << 32
        ),
        strict_decode=_env_bool("MOCKVM_STRICT_DECODE", True),
        log_level=_env_choice("MOCKVM_LOG_LEVEL", _LOG_LEVELS, "WARNING") or "WARNING",
        log_format=_env_choice("MOCKVM_LOG_FORMAT", ("json", "text"), None),
    )


__all__ = ["MockVmConfig", "load_config"]

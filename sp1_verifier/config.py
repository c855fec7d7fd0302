"""
sp1_verifier configuration.

This module centralizes the tunables of the verifier runtime:
- logging level / format
- which verifier version the CLI and default gateway pick
- optional wall-clock budget per verification
- optional memoization of verification outcomes
- the seed of the development trusted setup

Environment variables (examples):
  SP1V_LOG_LEVEL=INFO
  SP1V_LOG_JSON=true
  SP1V_VERIFIER_VERSION=v5.0.0-dev
  SP1V_VERIFY_TIMEOUT_S=30
  SP1V_CACHE_SIZE=1024
  SP1V_DEV_SEED=sp1-verifier/dev-setup/v1

Notes
- Unparseable numeric values fall back to defaults.
- None of these settings changes verification semantics; they only bound
  time, enable caching, or choose between registered verifier versions.
- This module has no external deps (no dotenv). Use your process manager to inject env.
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from .version import DEFAULT_VERIFIER_VERSION

DEFAULT_DEV_SEED = "sp1-verifier/dev-setup/v1"


def _env(name: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(name)
    return v if v is not None else default


def _env_bool(name: str, default: bool) -> bool:
    v = _env(name)
    if v is None:
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_int(name: str, default: int) -> int:
    v = _env(name)
    if v is None:
        return default
    try:
        return int(v.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float) -> float:
    v = _env(name)
    if v is None:
        return default
    try:
        return float(v.strip())
    except ValueError:
        return default


@dataclass(frozen=True)
class Config:
    log_level: str = "WARNING"
    log_json: bool = False
    verifier_version: str = DEFAULT_VERIFIER_VERSION
    # 0 disables the deadline wrapper.
    verify_timeout_s: float = 0.0
    # 0 disables memoization.
    cache_size: int = 0
    dev_seed: str = DEFAULT_DEV_SEED

    def __post_init__(self) -> None:
        if self.verify_timeout_s < 0:
            raise ValueError("verify_timeout_s must be >= 0")
        if self.cache_size < 0:
            raise ValueError("cache_size must be >= 0")


def load_config() -> Config:
    """Build a Config from the process environment."""
    return Config(
        log_level=(_env("SP1V_LOG_LEVEL", "WARNING") or "WARNING").upper(),
        log_json=_env_bool("SP1V_LOG_JSON", False),
        verifier_version=_env("SP1V_VERIFIER_VERSION", DEFAULT_VERIFIER_VERSION) or DEFAULT_VERIFIER_VERSION,
        verify_timeout_s=max(0.0, _env_float("SP1V_VERIFY_TIMEOUT_S", 0.0)),
        cache_size=max(0, _env_int("SP1V_CACHE_SIZE", 0)),
        dev_seed=_env("SP1V_DEV_SEED", DEFAULT_DEV_SEED) or DEFAULT_DEV_SEED,
    )


__all__ = ["Config", "load_config", "DEFAULT_DEV_SEED"]

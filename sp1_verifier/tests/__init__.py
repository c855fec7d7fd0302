"""
sp1_verifier.tests helpers

Lightweight utilities and environment defaults shared by sp1_verifier tests.

Exports:
- TEST_ROOT
- fixture_path(*parts) -> Path
- read_json(path_or_name) -> Any
- env_flag(name, default=False) -> bool
- is_ci() -> bool
- configure_test_logging() -> None
- st, given, settings (Hypothesis, with repo profiles registered)
- CONCRETE_VKEY, CONCRETE_VALUES: the fixed program key / 164-byte buffer
  also found in fixtures/sp1_plonk_proof.json

Environment toggles:
- SP1V_TEST_LOG=1             → enable INFO logging for sp1_verifier.*
- HYPOTHESIS_PROFILE=dev|ci|fast
- CI=true                     → pick the 'ci' profile if HYPOTHESIS_PROFILE is unset
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Union

from hypothesis import HealthCheck, Verbosity, given, settings
from hypothesis import strategies as st

from ..logging import configure as _configure_logging

# --- Paths --------------------------------------------------------------------

TEST_ROOT: Path = Path(__file__).resolve().parent


def fixture_path(*parts: Union[str, Path]) -> Path:
    """Return a path under sp1_verifier/tests/fixtures."""
    return (TEST_ROOT / "fixtures").joinpath(*map(Path, parts))


def read_json(path_or_name: Union[str, Path]) -> Any:
    """
    Read and parse JSON from a path. If a bare name is given, resolve under fixtures/.
    """
    p = Path(path_or_name)
    if not p.exists():
        p = fixture_path(str(path_or_name))
    if not p.exists():
        raise FileNotFoundError(f"JSON file not found: {p}")
    with p.open("r", encoding="utf-8") as fh:
        return json.load(fh)


# --- Env & logging -------------------------------------------------------------


def env_flag(name: str, default: bool = False) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return str(v).strip().lower() in {"1", "true", "yes", "on"}


def is_ci() -> bool:
    return any(env_flag(k) for k in ("CI", "GITHUB_ACTIONS"))


def configure_test_logging(level: str = "INFO") -> None:
    """Configure the sp1_verifier logger when SP1V_TEST_LOG is set."""
    if env_flag("SP1V_TEST_LOG", False):
        _configure_logging(level=level)


# --- Hypothesis profiles ---------------------------------------------------------

_SUPPRESS = (HealthCheck.too_slow, HealthCheck.filter_too_much)

settings.register_profile(
    "dev",
    settings(max_examples=100, deadline=None, suppress_health_check=_SUPPRESS, verbosity=Verbosity.normal),
)
settings.register_profile(
    "ci",
    settings(
        max_examples=200,
        deadline=None,
        suppress_health_check=_SUPPRESS,
        verbosity=Verbosity.verbose,
        derandomize=True,
    ),
)
settings.register_profile(
    "fast",
    settings(max_examples=25, deadline=None, suppress_health_check=_SUPPRESS),
)

settings.load_profile(os.getenv("HYPOTHESIS_PROFILE") or ("ci" if is_ci() else "dev"))


# --- Shared vectors --------------------------------------------------------------

CONCRETE_VKEY = bytes.fromhex("00265f3e1a8b4c7d92f0e6a5b3c1d8f7e2a4b6c8d0e1f2a3b4c5d6e7f83109b5")
CONCRETE_VALUES = bytes((i * 37 + 11) & 0xFF for i in range(164))

configure_test_logging()

__all__ = [
    "TEST_ROOT",
    "fixture_path",
    "read_json",
    "env_flag",
    "is_ci",
    "configure_test_logging",
    "st",
    "given",
    "settings",
    "CONCRETE_VKEY",
    "CONCRETE_VALUES",
]

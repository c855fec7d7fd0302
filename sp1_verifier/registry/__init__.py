"""
sp1_verifier.registry
=====================

A tiny, threadsafe registry of **verifier versions**. Each version names a
factory that builds a `Verifier` (primitive + identity hash + version
string), so several versions can coexist in one process and a proof can be
routed to the one it was produced for.

Design goals
------------
- Small surface: register, unregister, get, list, build, lookup by selector.
- Threadsafe updates (RLock).
- Lazy: factories are imported and called on first use, then cached.
- Helpful errors with explicit codes.

Versions (defaults)
-------------------
- "v5.0.0-dev" → sp1_verifier.registry:_dev_kzg_verifier
  reference KZG/BN254 primitive over the development setup seeded by
  SP1V_DEV_SEED.

License: MIT
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from importlib import import_module
from threading import RLock
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

from ..config import load_config
from ..dispatcher import Verifier
from ..verifiers.envelope import SELECTOR_LEN
from ..version import DEFAULT_VERIFIER_VERSION

log = logging.getLogger(__name__)


# =============================================================================
# Errors
# =============================================================================


class RegistryError(Exception):
    """Base error for registry operations."""

    code: str = "REGISTRY_ERROR"

    def __init__(self, message: str, *, code: Optional[str] = None):
        super().__init__(message)
        if code:
            self.code = code
        self.message = message


class AlreadyRegistered(RegistryError):
    code = "ALREADY_REGISTERED"


class NotRegistered(RegistryError):
    code = "NOT_REGISTERED"


class ImportFailure(RegistryError):
    code = "IMPORT_FAILURE"


class MissingField(RegistryError):
    code = "MISSING_FIELD"


# =============================================================================
# Spec & storage
# =============================================================================


@dataclass(frozen=True)
class VersionSpec:
    """Declarative binding of a verifier version → module:factory."""

    version: str
    module: str
    factory: str
    description: str = ""
    tags: Tuple[str, ...] = ()


_REGISTRY: Dict[str, VersionSpec] = {}
_BUILT: Dict[str, Verifier] = {}
_LOCK = RLock()


# =============================================================================
# Core API
# =============================================================================


def register(
    version: str,
    module: str,
    factory: str,
    *,
    description: str = "",
    tags: Iterable[str] = (),
    overwrite: bool = False,
) -> VersionSpec:
    """
    Register or replace a verifier version.

    The factory is a zero-argument callable `module:factory` returning a
    `Verifier` whose `version` equals the registered name.
    """
    if not version:
        raise MissingField("version must be a non-empty string")
    if not module:
        raise MissingField("module must be a non-empty string")
    if not factory:
        raise MissingField("factory must be a non-empty string")

    spec = VersionSpec(version=version, module=module, factory=factory, description=description, tags=tuple(tags))
    with _LOCK:
        if version in _REGISTRY and not overwrite:
            raise AlreadyRegistered(f"Version '{version}' already registered")
        _REGISTRY[version] = spec
        _BUILT.pop(version, None)
    return spec


def unregister(version: str, *, missing_ok: bool = False) -> None:
    """Remove a version from the registry."""
    with _LOCK:
        if version not in _REGISTRY:
            if missing_ok:
                return
            raise NotRegistered(f"Version '{version}' is not registered")
        _REGISTRY.pop(version, None)
        _BUILT.pop(version, None)


def get(version: str) -> VersionSpec:
    """Fetch the spec for a version or raise NotRegistered."""
    with _LOCK:
        try:
            return _REGISTRY[version]
        except KeyError:
            raise NotRegistered(f"Version '{version}' is not registered") from None


def list_versions() -> List[str]:
    """List registered versions (sorted)."""
    with _LOCK:
        return sorted(_REGISTRY.keys())


def resolve(version: str) -> Callable[[], Any]:
    """
    Import and return the factory for a version.
    Raises ImportFailure if import or attribute resolution fails.
    """
    spec = get(version)
    try:
        mod = import_module(spec.module)
    except ImportError as e:
        raise ImportFailure(
            f"Failed to import module '{spec.module}' for version '{version}': {e}"
        ) from e
    try:
        fn = getattr(mod, spec.factory)
    except AttributeError as e:
        raise ImportFailure(
            f"Factory '{spec.factory}' not found in module '{spec.module}' for version '{version}'"
        ) from e
    if not callable(fn):
        raise ImportFailure(f"Resolved attribute '{spec.factory}' in '{spec.module}' is not callable")
    return fn


def build_verifier(version: Optional[str] = None) -> Verifier:
    """Build (or return the cached) Verifier for `version` (default: configured)."""
    if version is None:
        version = load_config().verifier_version
    with _LOCK:
        cached = _BUILT.get(version)
        if cached is not None:
            return cached
        verifier = resolve(version)()
        if not isinstance(verifier, Verifier):
            raise ImportFailure(f"Factory for version '{version}' did not return a Verifier")
        if verifier.version != version:
            raise ImportFailure(
                f"Factory for version '{version}' returned a verifier for '{verifier.version}'"
            )
        _BUILT[version] = verifier
    log.debug("built verifier", extra={"version": version, "selector": verifier.selector})
    return verifier


def lookup_by_selector(selector: bytes) -> Optional[str]:
    """Return the registered version whose identity hash starts with `selector`."""
    sel = bytes(selector)
    if len(sel) != SELECTOR_LEN:
        raise ValueError(f"selector must be {SELECTOR_LEN} bytes")
    for version in list_versions():
        if build_verifier(version).selector == sel:
            return version
    return None


# =============================================================================
# Defaults
# =============================================================================


def _dev_kzg_verifier() -> Verifier:
    from ..verifiers.plonk_kzg_bn254 import dev_setup

    setup = dev_setup(load_config().dev_seed)
    return Verifier(setup.primitive, setup.identity_hash, DEFAULT_VERIFIER_VERSION)


def _register_defaults() -> None:
    defaults = [
        VersionSpec(
            version=DEFAULT_VERIFIER_VERSION,
            module=__name__,
            factory="_dev_kzg_verifier",
            description="PLONK-style KZG opening over BN254, development setup",
            tags=("plonk", "kzg", "bn254", "dev"),
        ),
    ]
    with _LOCK:
        for spec in defaults:
            _REGISTRY.setdefault(spec.version, spec)


_register_defaults()


__all__ = [
    # Spec & errors
    "VersionSpec",
    "RegistryError",
    "AlreadyRegistered",
    "NotRegistered",
    "ImportFailure",
    "MissingField",
    # Core ops
    "register",
    "unregister",
    "get",
    "list_versions",
    "resolve",
    "build_verifier",
    "lookup_by_selector",
]

"""
sp1_verifier — verify SP1 zkVM proofs in Python.

Quick use
---------
>>> from sp1_verifier import verify_proof
>>> verify_proof(program_vkey, public_values, proof_bytes)   # None, or raises

>>> from sp1_verifier import build_verifier
>>> v = build_verifier("v5.0.0-dev")
>>> v.check_proof(program_vkey, public_values, proof_bytes).ok
True

Errors (all subclasses of `VerifierError`):
  MalformedEnvelope, WrongVerifierSelector, InvalidProof, VerificationTimedOut

Heavier pieces (py_ecc, msgspec, typer) are only imported by the
submodules that need them.
"""

from __future__ import annotations

from typing import Optional

from . import registry
from .cache import CachingVerifier
from .config import Config, load_config
from .deadline import DeadlineVerifier, shared_executor
from .dispatcher import Verifier
from .errors import (ArtifactError, InvalidProof, MalformedEnvelope, RouteAlreadyExists, RouteFrozen,
                     RouteNotFound, VerificationTimedOut, VerifierError, VerifierErrorCode,
                     WrongVerifierSelector)
from .gateway import Gateway, default_gateway
from .verifiers import VerificationPrimitive, VerificationResult
from .verifiers.binder import PUBLIC_VALUES_MASK, PublicInputs, bind_public_inputs, hash_public_values
from .verifiers.envelope import SELECTOR_LEN, encode, selector_of, split
from .version import DEFAULT_VERIFIER_VERSION, __version__


def build_verifier(version: Optional[str] = None, *, config: Optional[Config] = None):
    """
    Verifier for `version` (default: configured), wrapped according to config:
    a result cache when `cache_size > 0`, then a deadline when
    `verify_timeout_s > 0`. Deadline wrappers built here share one
    process-wide thread pool, so dropping them leaks no threads.
    """
    cfg = config or load_config()
    verifier = registry.build_verifier(version or cfg.verifier_version)
    if cfg.cache_size > 0:
        verifier = CachingVerifier(verifier, maxsize=cfg.cache_size)
    if cfg.verify_timeout_s > 0:
        verifier = DeadlineVerifier(verifier, cfg.verify_timeout_s, executor=shared_executor())
    return verifier


def verify_proof(program_vkey, public_values, proof_bytes, *, version: Optional[str] = None) -> None:
    """One-shot verification against a registered verifier version."""
    cfg = load_config()
    verifier = registry.build_verifier(version or cfg.verifier_version)
    if cfg.verify_timeout_s > 0:
        with DeadlineVerifier(verifier, cfg.verify_timeout_s, executor=shared_executor()) as bounded:
            bounded.verify_proof(program_vkey, public_values, proof_bytes)
        return
    verifier.verify_proof(program_vkey, public_values, proof_bytes)


__all__ = [
    "__version__",
    "DEFAULT_VERIFIER_VERSION",
    # verification
    "Verifier",
    "VerificationPrimitive",
    "VerificationResult",
    "build_verifier",
    "verify_proof",
    "Gateway",
    "default_gateway",
    "CachingVerifier",
    "DeadlineVerifier",
    # codec & binding
    "SELECTOR_LEN",
    "split",
    "encode",
    "selector_of",
    "PUBLIC_VALUES_MASK",
    "PublicInputs",
    "bind_public_inputs",
    "hash_public_values",
    # config
    "Config",
    "load_config",
    # errors
    "VerifierError",
    "VerifierErrorCode",
    "MalformedEnvelope",
    "WrongVerifierSelector",
    "InvalidProof",
    "VerificationTimedOut",
    "ArtifactError",
    "RouteNotFound",
    "RouteFrozen",
    "RouteAlreadyExists",
]

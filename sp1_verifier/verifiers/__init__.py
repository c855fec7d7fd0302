"""
sp1_verifier.verifiers
======================

Verification primitives and the building blocks around them.

A *primitive* is the pairing-based (or, in tests, keyed-hash) check that
decides whether an envelope payload proves a statement about a public-input
vector. The dispatcher treats it as an opaque capability:

    class VerificationPrimitive(Protocol):
        def verify(self, payload: bytes, public_inputs: Sequence[int]) -> bool: ...

Contract
--------
- Pure and deterministic: same (payload, public_inputs) → same answer.
- Malformed payloads (wrong length, out-of-range coordinates, off-curve
  points) and public inputs outside the scalar field are rejected, by
  returning False or raising. They are never accepted.

Modules
-------
- `envelope`         → selector ‖ payload split / encode
- `binder`           → [program_vkey, masked sha256(public_values)]
- `plonk_kzg_bn254`  → reference KZG primitive over BN254 + dev setup
- `keyed_digest`     → HMAC-SHA256 test double (no curve arithmetic)
- `field`, `pairing_bn254`, `kzg_bn254`, `transcript_fs` → BN254 helpers

Concrete primitives are imported lazily so `import sp1_verifier` stays cheap;
py_ecc is only loaded when a curve-backed primitive is first used.
"""

from __future__ import annotations

from dataclasses import dataclass
from importlib import import_module
from typing import Any, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class VerificationPrimitive(Protocol):
    def verify(self, payload: bytes, public_inputs: Sequence[int]) -> bool:
        ...


@dataclass(slots=True, frozen=True)
class VerificationResult:
    """Non-raising outcome of a verification attempt."""

    ok: bool
    code: Optional[str] = None
    message: Optional[str] = None
    version: Optional[str] = None

    def __bool__(self) -> bool:  # allows: if result: ...
        return self.ok


_LAZY = {
    "KzgPlonkPrimitive": "plonk_kzg_bn254",
    "PlonkVerifyingKey": "plonk_kzg_bn254",
    "DevProver": "plonk_kzg_bn254",
    "DevSetup": "plonk_kzg_bn254",
    "dev_setup": "plonk_kzg_bn254",
    "KeyedDigestPrimitive": "keyed_digest",
}


def __getattr__(name: str) -> Any:
    modname = _LAZY.get(name)
    if modname is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(f".{modname}", __name__), name)


__all__ = ["VerificationPrimitive", "VerificationResult", *_LAZY]

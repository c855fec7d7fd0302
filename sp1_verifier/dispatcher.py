"""
sp1_verifier.dispatcher
=======================

`Verifier` — entry point of a single verifier version.

    verifier = Verifier(primitive, identity_hash, version="v5.0.0-dev")
    verifier.verify_proof(program_vkey, public_values, proof_bytes)  # None or raises

Algorithm (order matters):
  1. split proof bytes into selector ‖ payload       → MalformedEnvelope
  2. compare selector against identity_hash[:4]      → WrongVerifierSelector
     (before any hashing or pairing work)
  3. bind [program_vkey, masked sha256(public_values)]
  4. primitive.verify(payload, public_inputs)
  5. False, or a ValueError / ArithmeticError / TypeError
     from the primitive                             → InvalidProof
     (any other exception is a bug and propagates)
  6. success: return None

Instances are immutable and share nothing, so one verifier can serve any
number of threads.
"""

from __future__ import annotations

import logging
from typing import Optional, Union

from .errors import InvalidProof, VerifierError, WrongVerifierSelector
from .verifiers import VerificationPrimitive, VerificationResult
from .verifiers.binder import bind_public_inputs
from .verifiers.envelope import SELECTOR_LEN, selector_of, split

log = logging.getLogger(__name__)

BytesLike = Union[bytes, bytearray, memoryview]

# Exceptions a primitive may use to reject malformed input.
PRIMITIVE_REJECTIONS = (ValueError, ArithmeticError, TypeError)


class Verifier:
    __slots__ = ("_primitive", "_identity_hash", "_selector", "version")

    def __init__(self, primitive: VerificationPrimitive, identity_hash: BytesLike, version: str) -> None:
        if not callable(getattr(primitive, "verify", None)):
            raise TypeError("primitive must provide verify(payload, public_inputs)")
        if not version:
            raise ValueError("version must be a non-empty string")
        self._primitive = primitive
        self._identity_hash = bytes(identity_hash)
        self._selector = selector_of(self._identity_hash)
        self.version = str(version)

    def __repr__(self) -> str:
        return f"Verifier(version={self.version!r}, selector=0x{self._selector.hex()})"

    # -- identity -------------------------------------------------------------

    def identity_hash(self) -> bytes:
        return self._identity_hash

    @property
    def selector(self) -> bytes:
        return self._selector

    def accepts_selector(self, proof_bytes: BytesLike) -> bool:
        """Cheap routing pre-check; never raises."""
        data = bytes(proof_bytes)
        return len(data) >= SELECTOR_LEN and data[:SELECTOR_LEN] == self._selector

    # -- verification ---------------------------------------------------------

    def verify_proof(self, program_vkey: BytesLike, public_values: BytesLike, proof_bytes: BytesLike) -> None:
        """
        Verify `proof_bytes` for (program_vkey, public_values).

        Returns None on success. Raises MalformedEnvelope,
        WrongVerifierSelector or InvalidProof; never returns a falsy value
        to signal failure.
        """
        received, payload = split(proof_bytes)
        if received != self._selector:
            log.info(
                "proof rejected",
                extra={"code": "WRONG_VERIFIER_SELECTOR", "version": self.version, "received": received},
            )
            raise WrongVerifierSelector(received, self._selector)

        public_inputs = bind_public_inputs(program_vkey, public_values)

        try:
            ok = self._primitive.verify(payload, public_inputs)
        except PRIMITIVE_REJECTIONS as e:
            log.info("proof rejected", extra={"code": "INVALID_PROOF", "version": self.version, "reason": type(e).__name__})
            raise InvalidProof(version=self.version, reason="primitive raised", cause=e) from e

        if ok is not True:
            log.info("proof rejected", extra={"code": "INVALID_PROOF", "version": self.version})
            raise InvalidProof(version=self.version)

        log.debug("proof verified", extra={"version": self.version})

    def check_proof(
        self, program_vkey: BytesLike, public_values: BytesLike, proof_bytes: BytesLike
    ) -> VerificationResult:
        """Non-raising variant of verify_proof for batch tooling and the CLI."""
        try:
            self.verify_proof(program_vkey, public_values, proof_bytes)
        except VerifierError as e:
            code: Optional[str] = e.code.value if hasattr(e.code, "value") else str(e.code)
            return VerificationResult(ok=False, code=code, message=e.msg, version=self.version)
        return VerificationResult(ok=True, version=self.version)


__all__ = ["Verifier"]

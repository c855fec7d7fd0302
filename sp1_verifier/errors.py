"""
Typed exceptions for the SP1 verifier.

Design goals
- Structured: machine-readable code + human message + contextual fields.
- Distinct: every verification outcome a caller must act on differently has
  its own subtype (re-route vs. discard vs. fix the input).
- Stable across processes: to_dict()/from_dict() round-trip.

Verification taxonomy (all terminal, never retried automatically):
  - MalformedEnvelope       proof bytes shorter than the routing selector
  - WrongVerifierSelector   proof was encoded for another verifier version
  - InvalidProof            routed correctly, rejected by the primitive
  - VerificationTimedOut    caller-imposed wall-clock budget expired

Producer / gateway errors:
  - ArtifactError           JSON proof artifact cannot be converted
  - RouteNotFound, RouteFrozen, RouteAlreadyExists
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional


class VerifierErrorCode(str, Enum):
    """Canonical error codes for envelope parsing & verification."""

    UNKNOWN = "UNKNOWN"

    MALFORMED_ENVELOPE = "MALFORMED_ENVELOPE"
    WRONG_VERIFIER_SELECTOR = "WRONG_VERIFIER_SELECTOR"
    INVALID_PROOF = "INVALID_PROOF"
    TIMED_OUT = "VERIFICATION_TIMED_OUT"

    ARTIFACT = "ARTIFACT"

    ROUTE_NOT_FOUND = "ROUTE_NOT_FOUND"
    ROUTE_FROZEN = "ROUTE_FROZEN"
    ROUTE_EXISTS = "ROUTE_EXISTS"


@dataclass
class VerifierError(Exception):
    """
    Base structured error for sp1_verifier.

    Fields:
      code:  stable machine code (VerifierErrorCode | str)
      msg:   human-readable summary
      ctx:   small dict of contextual fields (hex strings, lengths, versions)
      cause: optional underlying exception (not serialized)
    """

    code: VerifierErrorCode | str = VerifierErrorCode.UNKNOWN
    msg: str = "verifier error"
    ctx: Dict[str, Any] = field(default_factory=dict)
    cause: Optional[BaseException] = None

    def __post_init__(self) -> None:
        if not isinstance(self.ctx, dict):
            self.ctx = {"_ctx_type_error": str(type(self.ctx)), "repr": repr(self.ctx)}

    def __str__(self) -> str:
        code = self.code.value if isinstance(self.code, VerifierErrorCode) else str(self.code)
        parts = [f"[{code}] {self.msg}"]
        if self.ctx:
            parts.append(f"ctx={self.ctx}")
        if self.cause:
            parts.append(f"cause={self.cause!r}")
        return " ".join(parts)

    # dataclass(eq=True) would make instances unhashable, which breaks
    # exception chaining and traceback handling.
    __hash__ = Exception.__hash__

    def to_dict(self) -> Dict[str, Any]:
        code = self.code.value if isinstance(self.code, VerifierErrorCode) else str(self.code)
        return {"code": code, "msg": self.msg, "ctx": dict(self.ctx)}

    @classmethod
    def from_dict(cls, d: Mapping[str, Any]) -> "VerifierError":
        code_raw = d.get("code", VerifierErrorCode.UNKNOWN)
        try:
            code: VerifierErrorCode | str = VerifierErrorCode(code_raw)
        except ValueError:
            code = str(code_raw)
        return VerifierError(
            code=code, msg=str(d.get("msg", "verifier error")), ctx=dict(d.get("ctx", {}))
        )


# ---------------------------------------------------------------------------
# Verification outcomes
# ---------------------------------------------------------------------------


class MalformedEnvelope(VerifierError):
    """Proof bytes are too short to carry a routing selector."""

    def __init__(self, length: int, *, minimum: int = 4) -> None:
        super().__init__(
            code=VerifierErrorCode.MALFORMED_ENVELOPE,
            msg=f"proof envelope must be at least {minimum} bytes",
            ctx={"length": int(length), "minimum": int(minimum)},
        )
        self.length = int(length)


class WrongVerifierSelector(VerifierError):
    """
    The envelope's routing selector does not match this verifier.

    Route the proof to the verifier version it was produced for; retrying
    against this verifier can never succeed.
    """

    def __init__(self, received: bytes, expected: bytes) -> None:
        super().__init__(
            code=VerifierErrorCode.WRONG_VERIFIER_SELECTOR,
            msg="proof selector does not match verifier",
            ctx={"received": "0x" + bytes(received).hex(), "expected": "0x" + bytes(expected).hex()},
        )
        self.received = bytes(received)
        self.expected = bytes(expected)


class InvalidProof(VerifierError):
    """The verification primitive rejected a correctly routed proof."""

    def __init__(
        self,
        msg: str = "proof rejected by verification primitive",
        *,
        version: Optional[str] = None,
        reason: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        ctx: Dict[str, Any] = {}
        if version is not None:
            ctx["version"] = version
        if reason is not None:
            ctx["reason"] = reason
        super().__init__(code=VerifierErrorCode.INVALID_PROOF, msg=msg, ctx=ctx, cause=cause)


class VerificationTimedOut(VerifierError):
    """A caller-imposed deadline expired before the primitive answered."""

    def __init__(self, timeout_s: float) -> None:
        super().__init__(
            code=VerifierErrorCode.TIMED_OUT,
            msg="verification did not finish within the deadline",
            ctx={"timeout_s": float(timeout_s)},
        )
        self.timeout_s = float(timeout_s)


# ---------------------------------------------------------------------------
# Producer & gateway
# ---------------------------------------------------------------------------


class ArtifactError(VerifierError):
    """A JSON proof artifact is malformed or inconsistent."""

    def __init__(
        self,
        msg: str,
        *,
        path: Optional[str] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        ctx: Dict[str, Any] = {}
        if path is not None:
            ctx["path"] = path
        super().__init__(code=VerifierErrorCode.ARTIFACT, msg=msg, ctx=ctx, cause=cause)


class RouteNotFound(VerifierError):
    def __init__(self, selector: bytes) -> None:
        super().__init__(
            code=VerifierErrorCode.ROUTE_NOT_FOUND,
            msg="no verifier registered for selector",
            ctx={"selector": "0x" + bytes(selector).hex()},
        )
        self.selector = bytes(selector)


class RouteFrozen(VerifierError):
    def __init__(self, selector: bytes) -> None:
        super().__init__(
            code=VerifierErrorCode.ROUTE_FROZEN,
            msg="verifier route is frozen",
            ctx={"selector": "0x" + bytes(selector).hex()},
        )
        self.selector = bytes(selector)


class RouteAlreadyExists(VerifierError):
    def __init__(self, selector: bytes) -> None:
        super().__init__(
            code=VerifierErrorCode.ROUTE_EXISTS,
            msg="a verifier is already routed for selector",
            ctx={"selector": "0x" + bytes(selector).hex()},
        )
        self.selector = bytes(selector)


__all__ = [
    "VerifierErrorCode",
    "VerifierError",
    "MalformedEnvelope",
    "WrongVerifierSelector",
    "InvalidProof",
    "VerificationTimedOut",
    "ArtifactError",
    "RouteNotFound",
    "RouteFrozen",
    "RouteAlreadyExists",
]

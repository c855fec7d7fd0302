"""
Keyed-digest verification primitive (test double).

Accepts a payload iff it equals

    HMAC-SHA256(key, domain || u256(public_inputs[0]) || u256(public_inputs[1]))

It has none of the zero-knowledge or succinctness properties of the real
primitive, but it honours the same contract: deterministic, rejects any
payload that is not exactly the 32-byte tag (truncated, padded, garbage),
and is bound to both public inputs in order. Dispatcher and gateway tests
use it to exercise routing without paying for pairings.
"""

from __future__ import annotations

import hashlib
import hmac
from typing import Sequence

from .envelope import encode

TAG_LEN = 32
_DOMAIN = b"sp1v/keyed-digest/v1"


def _u256(x: int) -> bytes:
    return int(x).to_bytes(32, "big")


class KeyedDigestPrimitive:
    def __init__(self, key: bytes = b"sp1v-test-key") -> None:
        if not key:
            raise ValueError("key must be non-empty")
        self._key = bytes(key)

    def _tag(self, public_inputs: Sequence[int]) -> bytes:
        a, b = public_inputs
        if not (0 <= a < 1 << 256 and 0 <= b < 1 << 256):
            raise ValueError("public input does not fit in 32 bytes")
        return hmac.new(self._key, _DOMAIN + _u256(a) + _u256(b), hashlib.sha256).digest()

    def verify(self, payload: bytes, public_inputs: Sequence[int]) -> bool:
        if len(public_inputs) != 2 or len(payload) != TAG_LEN:
            return False
        return hmac.compare_digest(bytes(payload), self._tag(public_inputs))

    def prove(self, public_inputs: Sequence[int]) -> bytes:
        if len(public_inputs) != 2:
            raise ValueError("expected exactly 2 public inputs")
        return self._tag(public_inputs)

    def identity_hash(self) -> bytes:
        """Distinct keys give distinct identities (and selectors)."""
        return hashlib.sha256(_DOMAIN + b"/identity/" + self._key).digest()

    def prove_envelope(self, public_inputs: Sequence[int]) -> bytes:
        return encode(self.identity_hash(), self.prove(public_inputs))


__all__ = ["KeyedDigestPrimitive", "TAG_LEN"]

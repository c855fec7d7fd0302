"""
sp1_verifier.verifiers.envelope
===============================

Canonical proof envelope:

    proof_bytes := selector(4 bytes) || payload(N bytes)

`selector` is the first 4 bytes of the verifier identity hash the proof was
produced for; `payload` is opaque here and belongs to the verification
primitive. There is no length prefix: the length is implicit from the
transport.

Public API
----------
- split(envelope) -> (selector, payload)      raises MalformedEnvelope
- encode(selector_or_identity_hash, payload) -> bytes
- selector_of(identity_hash) -> bytes
"""

from __future__ import annotations

from typing import Tuple, Union

from ..errors import MalformedEnvelope

SELECTOR_LEN = 4
IDENTITY_HASH_LEN = 32

BytesLike = Union[bytes, bytearray, memoryview]


def selector_of(identity_hash: BytesLike) -> bytes:
    """Routing selector for a verifier identity hash (its first 4 bytes)."""
    h = bytes(identity_hash)
    if len(h) != IDENTITY_HASH_LEN:
        raise ValueError(f"identity hash must be {IDENTITY_HASH_LEN} bytes, got {len(h)}")
    return h[:SELECTOR_LEN]


def split(envelope: BytesLike) -> Tuple[bytes, bytes]:
    """
    Split proof bytes into (selector, payload).

    Only the length floor is checked; payload structure is the primitive's
    concern and an empty payload is returned as b"".
    """
    data = bytes(envelope)
    if len(data) < SELECTOR_LEN:
        raise MalformedEnvelope(len(data), minimum=SELECTOR_LEN)
    return data[:SELECTOR_LEN], data[SELECTOR_LEN:]


def encode(selector_or_identity_hash: BytesLike, payload: BytesLike) -> bytes:
    """
    Build proof bytes from a 4-byte selector (or the full 32-byte identity
    hash it is taken from) and an opaque payload.
    """
    prefix = bytes(selector_or_identity_hash)
    if len(prefix) == IDENTITY_HASH_LEN:
        prefix = prefix[:SELECTOR_LEN]
    elif len(prefix) != SELECTOR_LEN:
        raise ValueError(
            f"expected a {SELECTOR_LEN}-byte selector or {IDENTITY_HASH_LEN}-byte identity hash, "
            f"got {len(prefix)} bytes"
        )
    return prefix + bytes(payload)


__all__ = ["SELECTOR_LEN", "IDENTITY_HASH_LEN", "selector_of", "split", "encode"]

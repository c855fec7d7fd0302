"""
sp1_verifier.verifiers.binder
=============================

Binds a (program verification key, public values) pair into the ordered
public-input vector consumed by the verification primitive:

    [program_vkey, sha256(public_values) & (2**253 - 1)]

Clearing the top 3 bits of the digest is a field-size reduction: every
result is < 2**253, strictly below the BN254 scalar modulus (< 2**254).
Other implementations of the protocol mask the same way; using a different
mask or order changes which statement a proof is checked against.

The program key is passed through unreduced. Keys >= r are not field
elements and are rejected by the primitive, not silently wrapped here.
"""

from __future__ import annotations

import hashlib
from typing import NamedTuple, Union

PUBLIC_VALUES_MASK = (1 << 253) - 1
PROGRAM_VKEY_LEN = 32

BytesLike = Union[bytes, bytearray, memoryview]


class PublicInputs(NamedTuple):
    """Ordered public-input vector; position 0 is always the program key."""

    program_vkey: int
    public_values_digest: int


def hash_public_values(public_values: BytesLike) -> int:
    """SHA-256 of the raw public values, masked to 253 bits."""
    digest = hashlib.sha256(bytes(public_values)).digest()
    return int.from_bytes(digest, "big") & PUBLIC_VALUES_MASK


def program_vkey_to_int(program_vkey: BytesLike) -> int:
    key = bytes(program_vkey)
    if len(key) != PROGRAM_VKEY_LEN:
        raise ValueError(f"program vkey must be {PROGRAM_VKEY_LEN} bytes, got {len(key)}")
    return int.from_bytes(key, "big")


def bind_public_inputs(program_vkey: BytesLike, public_values: BytesLike) -> PublicInputs:
    return PublicInputs(
        program_vkey=program_vkey_to_int(program_vkey),
        public_values_digest=hash_public_values(public_values),
    )


__all__ = [
    "PUBLIC_VALUES_MASK",
    "PROGRAM_VKEY_LEN",
    "PublicInputs",
    "hash_public_values",
    "program_vkey_to_int",
    "bind_public_inputs",
]

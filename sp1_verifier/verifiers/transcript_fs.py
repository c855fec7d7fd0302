"""
sp1_verifier.verifiers.transcript_fs
====================================

Fiat–Shamir transcript for BN254-based proofs, built on SHA-256 (the hash
gnark's PLONK verifier uses for its challenges).

Design goals
------------
- Deterministic, minimal dependencies (hashlib only).
- Strong domain separation: label- and type-tagged absorbs.
- Safe encoding for bytes & group elements (explicit lengths, explicit
  infinity tag), so distinct transcripts never serialize identically.

Encoding
--------
For each append:
    absorb(TAG(kind, label) || u64_be(len(data)) || data)
For a challenge:
    c = sha256(state_digest || TAG("challenge", label) || u64_be(i)) mod r
    and the digest of the challenge is absorbed back into the state.
TAG(kind, label) = sha256("sp1v.fs/{kind}/" || label).

Public API
----------
- Transcript(protocol_label: str)
- t.append_message(label, data)
- t.append_scalar(label, x)
- t.append_g1(label, P)
- t.append_g2(label, Q)
- t.challenge_scalar(label, n=1) -> int | list[int]
"""

from __future__ import annotations

import hashlib
from typing import List, Union

from .pairing_bn254 import curve_order, normalize_g1, normalize_g2

_FR = curve_order()


def _tag(kind: str, label: str) -> bytes:
    return hashlib.sha256(f"sp1v.fs/{kind}/{label}".encode("utf-8")).digest()


def _u64(x: int) -> bytes:
    return int(x).to_bytes(8, "big")


def _encode_g1_bytes(P) -> bytes:
    """
    Canonical uncompressed G1 encoding for the transcript:
      - infinity: b'\x01'
      - finite:   b'\x00' || x(32) || y(32)
    """
    aff = normalize_g1(P)
    if aff is None:
        return b"\x01"
    x, y = aff
    return b"\x00" + x.to_bytes(32, "big") + y.to_bytes(32, "big")


def _encode_g2_bytes(Q) -> bytes:
    aff = normalize_g2(Q)
    if aff is None:
        return b"\x01"
    (xc0, xc1), (yc0, yc1) = aff
    return b"\x00" + b"".join(v.to_bytes(32, "big") for v in (xc0, xc1, yc0, yc1))


class Transcript:
    """
    Fiat–Shamir transcript over Fr.

    Example:
        t = Transcript("sp1v:plonk-kzg-bn254")
        t.append_message("vk", vk_bytes)
        t.append_g1("C", C)
        zeta = t.challenge_scalar("zeta")
    """

    def __init__(self, protocol_label: str) -> None:
        self._h = hashlib.sha256()
        self._absorb("init", protocol_label, b"")

    def append_message(self, label: str, data: Union[bytes, bytearray, memoryview]) -> None:
        self._absorb("msg", label, bytes(data))

    def append_scalar(self, label: str, x: int) -> None:
        """Append a scalar in Fr (reduced modulo r)."""
        self._absorb("scalar", label, (int(x) % _FR).to_bytes(32, "big"))

    def append_g1(self, label: str, P) -> None:
        self._absorb("g1", label, _encode_g1_bytes(P))

    def append_g2(self, label: str, Q) -> None:
        self._absorb("g2", label, _encode_g2_bytes(Q))

    def challenge_scalar(self, label: str, n: int = 1) -> Union[int, List[int]]:
        """Derive one or more Fr challenges, domain-separated by `label`."""
        if n <= 0:
            raise ValueError("n must be >= 1")
        state = self._h.digest()
        tag = _tag("challenge", label)
        out: List[int] = []
        for i in range(n):
            d = hashlib.sha256(state + tag + _u64(i)).digest()
            out.append(int.from_bytes(d, "big") % _FR)
            self._absorb("challenge", label, d)
        return out[0] if n == 1 else out

    def _absorb(self, kind: str, label: str, data: bytes) -> None:
        self._h.update(_tag(kind, label))
        self._h.update(_u64(len(data)))
        self._h.update(data)


__all__ = ["Transcript"]

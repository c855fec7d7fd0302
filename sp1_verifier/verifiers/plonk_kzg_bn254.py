"""
sp1_verifier.verifiers.plonk_kzg_bn254
======================================

Reference pairing-based primitive: a PLONK-style statement check reduced to
a single KZG opening over BN254.

Payload layout (128 bytes)
--------------------------
    C  : G1, 64 bytes uncompressed (x || y, big-endian; infinity = zeros)
    π  : G1, 64 bytes uncompressed

Statement
---------
Given public inputs [vkey, digest] (both < r), the verifier

1. derives the evaluation point ζ from a SHA-256 Fiat–Shamir transcript
   over (verifying key bytes, vkey, digest, C),
2. evaluates the public-input polynomial  PI(ζ) = vkey + digest·ζ  (mod r),
3. checks the KZG opening  e(C − PI(ζ)·G1, G2) == e(π, s·G2 − ζ·G2).

Because ζ depends on C and on both public inputs, a payload proven for one
(vkey, digest) pair does not verify under any other pair.

Development setup
-----------------
`dev_setup(seed)` derives the trusted-setup scalar s from a seed. Whoever
knows s can open any commitment to any value, so the resulting verifier is
for tests, fixtures and local tooling only. `DevProver` uses s to produce
valid payloads.

License: MIT
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Sequence, Tuple, Union

from py_ecc.optimized_bn128 import multiply as _mul

from .envelope import encode
from .field import R, Fr, is_canonical
from .kzg_bn254 import VerifyingKey, kzg_verify, make_verifying_key
from .pairing_bn254 import (G1_ENCODED_LEN, decode_g1, encode_g1, g1_generator,
                            normalize_g1, normalize_g2)
from .transcript_fs import Transcript

log = logging.getLogger(__name__)

PAYLOAD_LEN = 2 * G1_ENCODED_LEN
TRANSCRIPT_LABEL = "sp1v:plonk-kzg-bn254"
_VK_DOMAIN = b"sp1v/plonk-kzg-bn254/vk/v1"


# ---------------------------------------------------------------------------
# Verifying key
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlonkVerifyingKey:
    kzg: VerifyingKey

    def to_bytes(self) -> bytes:
        """
        Canonical encoding: domain || G1 (x, y) || G2 (x.c0, x.c1, y.c0, y.c1)
        || sG2 (same layout). Every coordinate is 32 bytes big-endian.
        """
        out = [_VK_DOMAIN]
        g1 = normalize_g1(self.kzg.g1)
        if g1 is None:
            raise ValueError("verifying key G1 generator is the point at infinity")
        out.extend(v.to_bytes(32, "big") for v in g1)
        for Q in (self.kzg.g2, self.kzg.s_g2):
            aff = normalize_g2(Q)
            if aff is None:
                raise ValueError("verifying key G2 element is the point at infinity")
            (xc0, xc1), (yc0, yc1) = aff
            out.extend(v.to_bytes(32, "big") for v in (xc0, xc1, yc0, yc1))
        return b"".join(out)

    def identity_hash(self) -> bytes:
        return hashlib.sha256(self.to_bytes()).digest()


def _challenge(vk_bytes: bytes, public_inputs: Tuple[int, int], commitment) -> int:
    t = Transcript(TRANSCRIPT_LABEL)
    t.append_message("vk", vk_bytes)
    t.append_scalar("pub0", public_inputs[0])
    t.append_scalar("pub1", public_inputs[1])
    t.append_g1("C", commitment)
    return t.challenge_scalar("zeta")  # type: ignore[return-value]


def _pi_eval(public_inputs: Tuple[int, int], zeta: int) -> int:
    vkey, digest = public_inputs
    return (Fr.from_int(vkey) + Fr.from_int(digest) * zeta).n


def _canonical_inputs(public_inputs: Sequence[int]) -> Tuple[int, int] | None:
    if len(public_inputs) != 2:
        return None
    a, b = (int(x) for x in public_inputs)
    if not (is_canonical(a) and is_canonical(b)):
        return None
    return a, b


# ---------------------------------------------------------------------------
# Primitive
# ---------------------------------------------------------------------------


class KzgPlonkPrimitive:
    """BN254 KZG primitive. `verify` returns False for every malformed input."""

    def __init__(self, vk: PlonkVerifyingKey) -> None:
        self.vk = vk
        self._vk_bytes = vk.to_bytes()

    def identity_hash(self) -> bytes:
        return hashlib.sha256(self._vk_bytes).digest()

    def verify(self, payload: bytes, public_inputs: Sequence[int]) -> bool:
        pub = _canonical_inputs(public_inputs)
        if pub is None:
            log.debug("public inputs are not two canonical field elements")
            return False
        if len(payload) != PAYLOAD_LEN:
            log.debug("payload length %d != %d", len(payload), PAYLOAD_LEN)
            return False
        try:
            C = decode_g1(bytes(payload[:G1_ENCODED_LEN]))
            pi = decode_g1(bytes(payload[G1_ENCODED_LEN:]))
        except ValueError as e:
            log.debug("payload point rejected: %s", e)
            return False

        zeta = _challenge(self._vk_bytes, pub, C)
        y = _pi_eval(pub, zeta)
        return kzg_verify(C, zeta, y, pi, self.vk.kzg, validate=False)


# ---------------------------------------------------------------------------
# Development setup & prover
# ---------------------------------------------------------------------------


class DevProver:
    """Produces valid payloads for a development setup whose scalar is known."""

    def __init__(self, s: int, vk: PlonkVerifyingKey) -> None:
        self._s = Fr.from_int(s)
        self._vk_bytes = vk.to_bytes()

    def _blinding(self, pub: Tuple[int, int]) -> Fr:
        h = hashlib.sha256(
            b"sp1v/dev-prover/blind" + self._s.to_bytes() + pub[0].to_bytes(32, "big") + pub[1].to_bytes(32, "big")
        ).digest()
        c = Fr.from_int(int.from_bytes(h, "big"))
        return c if c else Fr.from_int(1)

    def prove(self, public_inputs: Sequence[int]) -> bytes:
        pub = _canonical_inputs(public_inputs)
        if pub is None:
            raise ValueError("public inputs must be two field elements < r")

        c = self._blinding(pub)
        C = _mul(g1_generator(), c.n)
        zeta = _challenge(self._vk_bytes, pub, C)
        y = _pi_eval(pub, zeta)
        if self._s == zeta:
            raise ValueError("challenge collides with the setup scalar")
        # Opening of the constant commitment C = c·G1 at ζ claiming value y.
        q = (c - y) / (self._s - zeta)
        return encode_g1(C) + encode_g1(_mul(g1_generator(), q.n))


@dataclass(frozen=True)
class DevSetup:
    primitive: KzgPlonkPrimitive
    prover: DevProver
    identity_hash: bytes

    def prove_envelope(self, public_inputs: Sequence[int]) -> bytes:
        return encode(self.identity_hash, self.prover.prove(public_inputs))


def _scalar_from_seed(seed: Union[str, bytes]) -> int:
    raw = seed.encode("utf-8") if isinstance(seed, str) else bytes(seed)
    s = int.from_bytes(hashlib.sha256(raw).digest(), "big") % R
    return s or 1


@lru_cache(maxsize=8)
def dev_setup(seed: Union[str, bytes]) -> DevSetup:
    """Deterministic development setup (cached per seed)."""
    s = _scalar_from_seed(seed)
    vk = PlonkVerifyingKey(make_verifying_key(s))
    primitive = KzgPlonkPrimitive(vk)
    setup = DevSetup(primitive=primitive, prover=DevProver(s, vk), identity_hash=primitive.identity_hash())
    log.debug("dev setup ready", extra={"identity_hash": setup.identity_hash})
    return setup


__all__ = [
    "PAYLOAD_LEN",
    "TRANSCRIPT_LABEL",
    "PlonkVerifyingKey",
    "KzgPlonkPrimitive",
    "DevProver",
    "DevSetup",
    "dev_setup",
]

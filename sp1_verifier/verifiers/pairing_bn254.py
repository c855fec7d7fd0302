"""
BN254 (alt_bn128) curve helpers over `py_ecc.optimized_bn128`.

Envelope payloads carry G1 points as 64 bytes, x || y, each coordinate
32-byte big-endian; the point at infinity is 64 zero bytes (the same
convention as the EVM precompiles and gnark's uncompressed encoding).
Decoding checks length, coordinate range (< p) and curve membership, so a
decoded point is always safe to feed into a pairing.

Pairing arguments are written e(P, Q) with P ∈ G1 and Q ∈ G2; py_ecc takes
them the other way round and `pair` swaps them.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional, Tuple

from py_ecc.optimized_bn128 import FQ, FQ12
from py_ecc.optimized_bn128 import G1 as _G1
from py_ecc.optimized_bn128 import G2 as _G2
from py_ecc.optimized_bn128 import b as _B
from py_ecc.optimized_bn128 import b2 as _B2
from py_ecc.optimized_bn128 import curve_order as _R
from py_ecc.optimized_bn128 import field_modulus as _P
from py_ecc.optimized_bn128 import is_inf as _is_inf
from py_ecc.optimized_bn128 import is_on_curve as _is_on_curve
from py_ecc.optimized_bn128 import normalize as _normalize
from py_ecc.optimized_bn128 import pairing as _pairing

G1Point = Any
G2Point = Any

BACKEND_NAME: str = "py_ecc.optimized_bn128"

G1_ENCODED_LEN = 64
_COORD_LEN = 32
_G1_INFINITY = (FQ.one(), FQ.one(), FQ.zero())


def curve_order() -> int:
    """Scalar field modulus r."""
    return int(_R)


def field_modulus() -> int:
    """Base field modulus p."""
    return int(_P)


def g1_generator() -> G1Point:
    return _G1


def g2_generator() -> G2Point:
    return _G2


def _limb(c: Any) -> int:
    return int(c.n) if hasattr(c, "n") else int(c)


def is_on_curve_g1(P: G1Point) -> bool:
    return _is_inf(P) or bool(_is_on_curve(P, _B))


def is_on_curve_g2(Q: G2Point) -> bool:
    return _is_inf(Q) or bool(_is_on_curve(Q, _B2))


def normalize_g1(P: G1Point) -> Optional[Tuple[int, int]]:
    """Affine (x, y) as ints, or None at infinity."""
    if _is_inf(P):
        return None
    x, y = _normalize(P)
    return _limb(x), _limb(y)


def normalize_g2(Q: G2Point) -> Optional[Tuple[Tuple[int, int], Tuple[int, int]]]:
    """Affine ((x.c0, x.c1), (y.c0, y.c1)) as ints, or None at infinity."""
    if _is_inf(Q):
        return None
    x, y = _normalize(Q)
    return (_limb(x.coeffs[0]), _limb(x.coeffs[1])), (_limb(y.coeffs[0]), _limb(y.coeffs[1]))


def g1_from_affine(x: int, y: int) -> G1Point:
    """(0, 0) maps to infinity; anything else must be a curve point with coordinates < p."""
    p = field_modulus()
    if not (0 <= x < p and 0 <= y < p):
        raise ValueError("G1 coordinate out of range")
    if x == 0 and y == 0:
        return _G1_INFINITY
    pt = (FQ(x), FQ(y), FQ.one())
    if not _is_on_curve(pt, _B):
        raise ValueError("G1 point is not on curve")
    return pt


def encode_g1(P: G1Point) -> bytes:
    aff = normalize_g1(P)
    if aff is None:
        return bytes(G1_ENCODED_LEN)
    return b"".join(v.to_bytes(_COORD_LEN, "big") for v in aff)


def decode_g1(data: bytes) -> G1Point:
    if len(data) != G1_ENCODED_LEN:
        raise ValueError(f"G1 encoding must be {G1_ENCODED_LEN} bytes, got {len(data)}")
    return g1_from_affine(int.from_bytes(data[:_COORD_LEN], "big"), int.from_bytes(data[_COORD_LEN:], "big"))


def pair(P: G1Point, Q: G2Point, *, validate: bool = True):
    """e(P, Q); the identity of GT when either side is at infinity."""
    if validate and not is_on_curve_g1(P):
        raise ValueError("G1 point is not on curve")
    if validate and not is_on_curve_g2(Q):
        raise ValueError("G2 point is not on curve")
    if _is_inf(P) or _is_inf(Q):
        return FQ12.one()
    return _pairing(Q, P)


def check_pairing_product(pairs: Iterable[Tuple[G1Point, G2Point]], *, validate: bool = True) -> bool:
    """True iff the product of e(P_i, Q_i) is the identity."""
    one = FQ12.one()
    acc = one
    for P, Q in pairs:
        acc = acc * pair(P, Q, validate=validate)
    return acc == one


__all__ = [
    "BACKEND_NAME",
    "G1_ENCODED_LEN",
    "curve_order",
    "field_modulus",
    "g1_generator",
    "g2_generator",
    "is_on_curve_g1",
    "is_on_curve_g2",
    "normalize_g1",
    "normalize_g2",
    "g1_from_affine",
    "encode_g1",
    "decode_g1",
    "pair",
    "check_pairing_product",
]

"""
Single-point KZG opening check on BN254.

For a commitment C to a polynomial f, an evaluation point x, a claimed
value y = f(x) and an opening π, the check is

    e(C - [y]G1, G2) · e(-π, [s]G2 - [x]G2) == 1

which is the product form of e(C - yG1, G2) == e(π, (s - x)G2). Only [s]G2
from the trusted setup is needed on the verifier side.

Points are native py_ecc projective tuples; byte encodings live in
`pairing_bn254` and callers decode before calling in.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from py_ecc.optimized_bn128 import add as _add
from py_ecc.optimized_bn128 import multiply as _mul
from py_ecc.optimized_bn128 import neg as _neg

from .pairing_bn254 import (check_pairing_product, curve_order, g1_generator, g2_generator, is_on_curve_g1,
                            is_on_curve_g2)

G1Point = Any
G2Point = Any


@dataclass(frozen=True)
class VerifyingKey:
    """Generators plus the setup element [s]G2."""

    g1: G1Point
    g2: G2Point
    s_g2: G2Point


def make_verifying_key(s: int) -> VerifyingKey:
    """Verifying key for a known scalar `s`. Anyone holding `s` can forge openings."""
    g2 = g2_generator()
    return VerifyingKey(g1=g1_generator(), g2=g2, s_g2=_mul(g2, int(s) % curve_order()))


def kzg_verify(
    commitment: G1Point,
    x: int,
    y: int,
    proof: G1Point,
    vk: VerifyingKey,
    *,
    validate: bool = True,
) -> bool:
    """True iff `proof` opens `commitment` to `y` at `x`. Off-curve inputs give False."""
    if validate and not all(map(is_on_curve_g1, (commitment, proof))):
        return False
    if validate and not all(map(is_on_curve_g2, (vk.g2, vk.s_g2))):
        return False

    r = curve_order()
    lhs_g1 = _add(commitment, _neg(_mul(vk.g1, int(y) % r)))
    rhs_g2 = _add(vk.s_g2, _neg(_mul(vk.g2, int(x) % r)))
    return check_pairing_product([(lhs_g1, vk.g2), (_neg(proof), rhs_g2)], validate=False)


__all__ = ["VerifyingKey", "make_verifying_key", "kzg_verify"]

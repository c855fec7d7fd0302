"""
BN254 scalar field (Fr) — minimal, pure-Python helpers.

Public inputs of the pairing-based primitive are elements of this field:
the 32-byte program verification key and the masked public-values digest
must both be strictly less than `R`.

It is **not** constant-time and is intended only for verification / testing
utilities, not for secret-bearing computations.

Features:
- Canonical modulus `R` and 32-byte big-endian (de)serialization.
- Basic ring ops: +, -, *, /, pow, neg, eq, int().
- Inversion via Fermat's little theorem.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

# BN254 / alt_bn128 scalar field (group order of G1/G2).
R: int = 21888242871839275222246405745257275088548364400416034343698204186575808495617
FR_BYTE_LEN = 32


def _to_int(x: Union[int, "Fr"]) -> int:
    return x.n if isinstance(x, Fr) else int(x)


@dataclass(frozen=True)
class Fr:
    """
    Small immutable wrapper for elements of F_r.

        a = Fr.from_int(5)
        b = a * 7 + 1
    """

    n: int  # canonical representative in [0, R)

    @staticmethod
    def from_int(x: int) -> "Fr":
        return Fr(int(x) % R)

    @staticmethod
    def from_bytes(b: bytes, *, strict: bool = True) -> "Fr":
        """
        Parse 32 big-endian bytes. With strict=True (default) the value must
        already be canonical (< R); otherwise it is reduced.
        """
        if len(b) != FR_BYTE_LEN:
            raise ValueError(f"Fr.from_bytes: expected {FR_BYTE_LEN} bytes, got {len(b)}")
        x = int.from_bytes(b, "big")
        if strict and x >= R:
            raise ValueError("Fr.from_bytes: value is not a canonical field element")
        return Fr.from_int(x)

    def to_bytes(self) -> bytes:
        return self.n.to_bytes(FR_BYTE_LEN, "big")

    def to_hex(self, prefix: bool = True) -> str:
        h = self.to_bytes().hex()
        return ("0x" + h) if prefix else h

    def __int__(self) -> int:
        return self.n

    def __bool__(self) -> bool:
        return self.n != 0

    def __repr__(self) -> str:
        return f"Fr({self.to_hex()})"

    def __hash__(self) -> int:
        return hash(self.n)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, (int, Fr)):
            return False
        return self.n == _to_int(other) % R

    def __neg__(self) -> "Fr":
        return Fr(0 if self.n == 0 else R - self.n)

    def __add__(self, other: Union[int, "Fr"]) -> "Fr":
        return Fr((self.n + _to_int(other)) % R)

    __radd__ = __add__

    def __sub__(self, other: Union[int, "Fr"]) -> "Fr":
        return Fr((self.n - _to_int(other)) % R)

    def __rsub__(self, other: Union[int, "Fr"]) -> "Fr":
        return Fr((_to_int(other) - self.n) % R)

    def __mul__(self, other: Union[int, "Fr"]) -> "Fr":
        return Fr((self.n * _to_int(other)) % R)

    __rmul__ = __mul__

    def __truediv__(self, other: Union[int, "Fr"]) -> "Fr":
        return self * Fr.from_int(_to_int(other)).inv()

    def __pow__(self, exponent: int) -> "Fr":
        return Fr(pow(self.n, exponent, R))

    def inv(self) -> "Fr":
        """Multiplicative inverse using Fermat's little theorem."""
        if self.n == 0:
            raise ZeroDivisionError("Fr inverse of zero")
        return Fr(pow(self.n, R - 2, R))


def is_canonical(x: int) -> bool:
    """True if 0 <= x < R."""
    return 0 <= x < R


def is_canonical_bytes(b: bytes) -> bool:
    """Check if bytes represent a canonical Fr element (0 <= x < R) and length == 32."""
    if len(b) != FR_BYTE_LEN:
        return False
    return is_canonical(int.from_bytes(b, "big"))


FR_ZERO = Fr(0)
FR_ONE = Fr(1)

__all__ = ["R", "FR_BYTE_LEN", "Fr", "is_canonical", "is_canonical_bytes", "FR_ZERO", "FR_ONE"]

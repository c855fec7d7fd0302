"""
Bounded memoization of verification outcomes.

Verification is a pure function of (program_vkey, public_values,
proof_bytes) for a fixed verifier, so outcomes can be reused. Both
successes and the three terminal rejections are cached; the cached
exception is re-raised as a fresh instance of the same type so callers
can still tell the outcomes apart. Caller misuse (ValueError/TypeError)
is never cached.

Keys are SHA-256 digests of the length-prefixed inputs, so memory use
is bounded by `maxsize` entries regardless of payload sizes.
"""

from __future__ import annotations

import hashlib
import logging
from collections import OrderedDict
from threading import RLock
from typing import Optional

from .errors import InvalidProof, MalformedEnvelope, VerifierError, WrongVerifierSelector
from .verifiers import VerificationResult

log = logging.getLogger(__name__)

_OK = object()


def cache_key(program_vkey: bytes, public_values: bytes, proof_bytes: bytes) -> bytes:
    h = hashlib.sha256()
    for part in (program_vkey, public_values, proof_bytes):
        b = bytes(part)
        h.update(len(b).to_bytes(8, "big"))
        h.update(b)
    return h.digest()


def _clone(err: VerifierError) -> VerifierError:
    if isinstance(err, MalformedEnvelope):
        return MalformedEnvelope(err.length, minimum=int(err.ctx.get("minimum", 4)))
    if isinstance(err, WrongVerifierSelector):
        return WrongVerifierSelector(err.received, err.expected)
    if isinstance(err, InvalidProof):
        return InvalidProof(err.msg, version=err.ctx.get("version"), reason=err.ctx.get("reason"))
    return VerifierError(code=err.code, msg=err.msg, ctx=dict(err.ctx))


class CachingVerifier:
    """LRU cache in front of a verifier (thread-safe)."""

    def __init__(self, inner, maxsize: int = 1024) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be > 0")
        self.inner = inner
        self.maxsize = int(maxsize)
        self._entries: "OrderedDict[bytes, object]" = OrderedDict()
        self._lock = RLock()
        self.hits = 0
        self.misses = 0

    @property
    def version(self) -> str:
        return self.inner.version

    @property
    def selector(self) -> bytes:
        return self.inner.selector

    def identity_hash(self) -> bytes:
        return self.inner.identity_hash()

    def accepts_selector(self, proof_bytes) -> bool:
        return self.inner.accepts_selector(proof_bytes)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self.hits = self.misses = 0

    def _lookup(self, key: bytes) -> Optional[object]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                self.misses += 1
                return None
            self._entries.move_to_end(key)
            self.hits += 1
            return entry

    def _store(self, key: bytes, entry: object) -> None:
        with self._lock:
            self._entries[key] = entry
            self._entries.move_to_end(key)
            while len(self._entries) > self.maxsize:
                self._entries.popitem(last=False)

    def verify_proof(self, program_vkey, public_values, proof_bytes) -> None:
        key = cache_key(program_vkey, public_values, proof_bytes)
        entry = self._lookup(key)
        if entry is _OK:
            return None
        if isinstance(entry, VerifierError):
            raise _clone(entry)

        # Computed outside the lock; concurrent misses on one key may both verify.
        try:
            self.inner.verify_proof(program_vkey, public_values, proof_bytes)
        except (MalformedEnvelope, WrongVerifierSelector, InvalidProof) as e:
            self._store(key, e)
            raise
        self._store(key, _OK)

    def check_proof(self, program_vkey, public_values, proof_bytes) -> VerificationResult:
        try:
            self.verify_proof(program_vkey, public_values, proof_bytes)
        except VerifierError as e:
            return VerificationResult(ok=False, code=str(getattr(e.code, "value", e.code)), message=e.msg, version=self.version)
        return VerificationResult(ok=True, version=self.version)


__all__ = ["CachingVerifier", "cache_key"]

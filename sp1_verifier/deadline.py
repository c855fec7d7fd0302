"""
Wall-clock budget around a verifier.

The core verify path has no timeouts: a pairing check always terminates.
Callers that must bound latency wrap a verifier here; when the budget
expires `VerificationTimedOut` is raised and the background computation is
abandoned (its result is discarded, it is not cancelled mid-pairing).
"""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as _FutureTimeout
from typing import Optional

from .errors import VerificationTimedOut, VerifierError
from .verifiers import VerificationResult

log = logging.getLogger(__name__)

SHARED_POOL_WORKERS = 4

_SHARED_POOL: Optional[ThreadPoolExecutor] = None
_SHARED_LOCK = threading.Lock()


def shared_executor() -> ThreadPoolExecutor:
    """Process-wide pool for deadline verifiers that do not bring their own."""
    global _SHARED_POOL
    with _SHARED_LOCK:
        if _SHARED_POOL is None:
            _SHARED_POOL = ThreadPoolExecutor(max_workers=SHARED_POOL_WORKERS, thread_name_prefix="sp1v-verify")
        return _SHARED_POOL


class DeadlineVerifier:
    """
    Delegates to `inner` but raises VerificationTimedOut after `timeout_s`.

    With `executor` the verifier borrows that pool and `close` leaves it
    running; otherwise it owns a private pool of `max_workers` threads.
    """

    def __init__(
        self, inner, timeout_s: float, *, max_workers: int = 4, executor: Optional[ThreadPoolExecutor] = None
    ) -> None:
        if timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        self.inner = inner
        self.timeout_s = float(timeout_s)
        self._owns_pool = executor is None
        self._pool: Optional[ThreadPoolExecutor] = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="sp1v-verify"
        )

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

    def verify_proof(self, program_vkey, public_values, proof_bytes) -> None:
        if self._pool is None:
            raise RuntimeError("DeadlineVerifier is closed")
        fut = self._pool.submit(self.inner.verify_proof, program_vkey, public_values, proof_bytes)
        try:
            fut.result(timeout=self.timeout_s)
        except _FutureTimeout:
            fut.cancel()
            log.warning("verification timed out", extra={"version": self.version, "timeout_s": self.timeout_s})
            raise VerificationTimedOut(self.timeout_s) from None

    def check_proof(self, program_vkey, public_values, proof_bytes):
        try:
            self.verify_proof(program_vkey, public_values, proof_bytes)
        except VerifierError as e:
            return VerificationResult(ok=False, code=str(getattr(e.code, "value", e.code)), message=e.msg, version=self.version)
        return VerificationResult(ok=True, version=self.version)

    def close(self) -> None:
        if self._pool is not None and self._owns_pool:
            self._pool.shutdown(wait=False, cancel_futures=True)
        self._pool = None

    def __enter__(self) -> "DeadlineVerifier":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


__all__ = ["DeadlineVerifier", "shared_executor", "SHARED_POOL_WORKERS"]

import threading

import pytest

import sp1_verifier
from sp1_verifier.cache import CachingVerifier, cache_key
from sp1_verifier.config import Config
from sp1_verifier.deadline import DeadlineVerifier, shared_executor
from sp1_verifier.dispatcher import Verifier
from sp1_verifier.errors import InvalidProof, MalformedEnvelope, VerificationTimedOut, WrongVerifierSelector
from sp1_verifier.tests import CONCRETE_VALUES, CONCRETE_VKEY
from sp1_verifier.verifiers.binder import bind_public_inputs
from sp1_verifier.verifiers.keyed_digest import KeyedDigestPrimitive
from sp1_verifier.version import DEFAULT_VERIFIER_VERSION


class _Counting(KeyedDigestPrimitive):
    def __init__(self):
        super().__init__(b"cache-tests")
        self.calls = 0

    def verify(self, payload, public_inputs):
        self.calls += 1
        return super().verify(payload, public_inputs)


class _Blocking:
    def __init__(self):
        self.release = threading.Event()

    def verify(self, payload, public_inputs):
        self.release.wait(5)
        return True


@pytest.fixture()
def counted():
    prim = _Counting()
    return prim, Verifier(prim, prim.identity_hash(), "counted")


def _proof(prim):
    return prim.prove_envelope(bind_public_inputs(CONCRETE_VKEY, CONCRETE_VALUES))


def test_cache_key_is_length_prefixed():
    assert cache_key(b"ab", b"c", b"") != cache_key(b"a", b"bc", b"")
    assert cache_key(b"a", b"b", b"c") == cache_key(b"a", b"b", b"c")


def test_cache_reuses_success(counted):
    prim, v = counted
    cv = CachingVerifier(v, maxsize=8)
    proof = _proof(prim)
    cv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, proof)
    cv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, proof)
    assert prim.calls == 1
    assert (cv.hits, cv.misses) == (1, 1)
    assert cv.version == "counted" and cv.selector == v.selector


def test_cache_reraises_same_error_type(counted):
    prim, v = counted
    cv = CachingVerifier(v, maxsize=8)
    bad = _proof(prim)[:19]
    for _ in range(2):
        with pytest.raises(InvalidProof):
            cv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, bad)
    assert prim.calls == 1

    for _ in range(2):
        with pytest.raises(WrongVerifierSelector) as ei:
            cv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x00\x00\x00\x00" + bad[4:])
        assert ei.value.received == b"\x00\x00\x00\x00"
    for _ in range(2):
        with pytest.raises(MalformedEnvelope):
            cv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x01")


def test_cache_does_not_store_caller_misuse(counted):
    prim, v = counted
    cv = CachingVerifier(v, maxsize=8)
    with pytest.raises(ValueError):
        cv.verify_proof(b"short", CONCRETE_VALUES, _proof(prim))
    assert len(cv) == 0


def test_cache_is_bounded(counted):
    prim, v = counted
    cv = CachingVerifier(v, maxsize=2)
    proof = _proof(prim)
    for extra in (b"1", b"2", b"3"):
        with pytest.raises(InvalidProof):
            cv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES + extra, proof)
    assert len(cv) == 2
    cv.clear()
    assert len(cv) == 0 and cv.hits == 0
    with pytest.raises(ValueError):
        CachingVerifier(v, maxsize=0)


def test_cached_check_proof(counted):
    prim, v = counted
    cv = CachingVerifier(v)
    assert cv.check_proof(CONCRETE_VKEY, CONCRETE_VALUES, _proof(prim)).ok
    assert cv.check_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"").code == "MALFORMED_ENVELOPE"


def test_deadline_passes_results_through(counted):
    prim, v = counted
    with DeadlineVerifier(v, timeout_s=5) as dv:
        dv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, _proof(prim))
        with pytest.raises(InvalidProof):
            dv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, _proof(prim)[:19])
        assert dv.accepts_selector(_proof(prim))
        assert dv.identity_hash() == v.identity_hash()


def test_deadline_times_out():
    prim = _Blocking()
    v = Verifier(prim, b"\x42" * 32, "blocking")
    dv = DeadlineVerifier(v, timeout_s=0.05)
    try:
        with pytest.raises(VerificationTimedOut) as ei:
            dv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x42" * 4 + b"p")
        assert ei.value.timeout_s == pytest.approx(0.05)
        assert dv.check_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x42" * 4 + b"p").code == "VERIFICATION_TIMED_OUT"
    finally:
        prim.release.set()
        dv.close()
    with pytest.raises(RuntimeError):
        dv.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x42" * 4 + b"p")
    with pytest.raises(ValueError):
        DeadlineVerifier(v, timeout_s=0)


def test_build_verifier_applies_config_wrappers():
    plain = sp1_verifier.build_verifier(DEFAULT_VERIFIER_VERSION, config=Config())
    assert isinstance(plain, Verifier)

    cached = sp1_verifier.build_verifier(DEFAULT_VERIFIER_VERSION, config=Config(cache_size=4))
    assert isinstance(cached, CachingVerifier)

    bounded = sp1_verifier.build_verifier(DEFAULT_VERIFIER_VERSION, config=Config(cache_size=4, verify_timeout_s=1.0))
    try:
        assert isinstance(bounded, DeadlineVerifier)
        assert isinstance(bounded.inner, CachingVerifier)
        assert bounded.version == DEFAULT_VERIFIER_VERSION
    finally:
        bounded.close()


def test_built_deadline_verifiers_share_one_pool():
    cfg = Config(verify_timeout_s=5.0)
    a = sp1_verifier.build_verifier(DEFAULT_VERIFIER_VERSION, config=cfg)
    b = sp1_verifier.build_verifier(DEFAULT_VERIFIER_VERSION, config=cfg)
    assert a._pool is b._pool is shared_executor()

    a.close()
    with pytest.raises(RuntimeError):
        a.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"")
    with pytest.raises(MalformedEnvelope):
        b.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"")
    assert not shared_executor()._shutdown


def test_owned_pool_is_shut_down_on_close(counted):
    _, v = counted
    dv = DeadlineVerifier(v, timeout_s=1.0, max_workers=1)
    pool = dv._pool
    dv.close()
    assert pool._shutdown

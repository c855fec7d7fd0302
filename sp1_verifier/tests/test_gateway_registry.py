import pytest

from sp1_verifier import registry
from sp1_verifier.dispatcher import Verifier
from sp1_verifier.errors import (InvalidProof, MalformedEnvelope, RouteAlreadyExists, RouteFrozen,
                                 RouteNotFound)
from sp1_verifier.gateway import Gateway, default_gateway
from sp1_verifier.tests import CONCRETE_VALUES, CONCRETE_VKEY
from sp1_verifier.verifiers.binder import bind_public_inputs
from sp1_verifier.verifiers.keyed_digest import KeyedDigestPrimitive
from sp1_verifier.version import DEFAULT_VERIFIER_VERSION

KEY_A = b"gateway-a"
KEY_B = b"gateway-b"


def keyed_verifier_a() -> Verifier:
    prim = KeyedDigestPrimitive(KEY_A)
    return Verifier(prim, prim.identity_hash(), "keyed-a")


def mislabelled_verifier() -> Verifier:
    prim = KeyedDigestPrimitive(KEY_B)
    return Verifier(prim, prim.identity_hash(), "not-what-was-registered")


def not_a_verifier():
    return object()


def _keyed(key, version):
    prim = KeyedDigestPrimitive(key)
    return prim, Verifier(prim, prim.identity_hash(), version)


def _proof(prim):
    return prim.prove_envelope(bind_public_inputs(CONCRETE_VKEY, CONCRETE_VALUES))


@pytest.fixture()
def clean_registry():
    before = set(registry.list_versions())
    yield
    for version in set(registry.list_versions()) - before:
        registry.unregister(version)


# --- registry --------------------------------------------------------------------


def test_default_version_is_registered():
    assert DEFAULT_VERIFIER_VERSION in registry.list_versions()
    spec = registry.get(DEFAULT_VERIFIER_VERSION)
    assert spec.module == "sp1_verifier.registry"
    assert "kzg" in spec.tags


def test_build_default_verifier_is_cached():
    v1 = registry.build_verifier(DEFAULT_VERIFIER_VERSION)
    v2 = registry.build_verifier(DEFAULT_VERIFIER_VERSION)
    assert v1 is v2
    assert v1.version == DEFAULT_VERIFIER_VERSION
    assert registry.lookup_by_selector(v1.selector) == DEFAULT_VERIFIER_VERSION


def test_build_verifier_uses_configured_version(monkeypatch):
    monkeypatch.setenv("SP1V_VERIFIER_VERSION", DEFAULT_VERIFIER_VERSION)
    assert registry.build_verifier().version == DEFAULT_VERIFIER_VERSION


def test_register_build_and_unregister(clean_registry):
    registry.register("keyed-a", __name__, "keyed_verifier_a", description="test double")
    assert "keyed-a" in registry.list_versions()
    v = registry.build_verifier("keyed-a")
    assert v.version == "keyed-a"
    assert registry.lookup_by_selector(v.selector) == "keyed-a"

    with pytest.raises(registry.AlreadyRegistered):
        registry.register("keyed-a", __name__, "keyed_verifier_a")
    registry.register("keyed-a", __name__, "keyed_verifier_a", overwrite=True)

    registry.unregister("keyed-a")
    with pytest.raises(registry.NotRegistered):
        registry.get("keyed-a")
    registry.unregister("keyed-a", missing_ok=True)


def test_lookup_unknown_selector(clean_registry):
    assert registry.lookup_by_selector(b"\x00\x00\x00\x00") is None
    with pytest.raises(ValueError):
        registry.lookup_by_selector(b"\x00")


def test_missing_fields_are_rejected():
    with pytest.raises(registry.MissingField):
        registry.register("", __name__, "keyed_verifier_a")
    with pytest.raises(registry.MissingField):
        registry.register("x", "", "keyed_verifier_a")


def test_bad_factories_fail_to_build(clean_registry):
    registry.register("no-module", "sp1_verifier.does_not_exist", "f")
    with pytest.raises(registry.ImportFailure):
        registry.build_verifier("no-module")

    registry.register("no-attr", __name__, "missing_factory")
    with pytest.raises(registry.ImportFailure):
        registry.build_verifier("no-attr")

    registry.register("wrong-type", __name__, "not_a_verifier")
    with pytest.raises(registry.ImportFailure):
        registry.build_verifier("wrong-type")

    registry.register("wrong-version", __name__, "mislabelled_verifier")
    with pytest.raises(registry.ImportFailure) as ei:
        registry.build_verifier("wrong-version")
    assert ei.value.code == "IMPORT_FAILURE"


# --- gateway ---------------------------------------------------------------------


def test_gateway_routes_by_selector():
    pa, va = _keyed(KEY_A, "a")
    pb, vb = _keyed(KEY_B, "b")
    gw = Gateway()
    gw.add_route(va)
    gw.add_route(vb)
    assert len(gw) == 2
    assert va.selector in gw and vb.selector in gw

    gw.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, _proof(pa))
    gw.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, _proof(pb))
    with pytest.raises(InvalidProof):
        gw.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES + b"!", _proof(pa))


def test_gateway_unknown_selector_and_short_envelope():
    _, va = _keyed(KEY_A, "a")
    gw = Gateway()
    gw.add_route(va)
    with pytest.raises(RouteNotFound) as ei:
        gw.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x00\x00\x00\x00payload")
    assert ei.value.selector == b"\x00\x00\x00\x00"
    with pytest.raises(MalformedEnvelope):
        gw.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, b"\x00")


def test_gateway_duplicate_route():
    _, va = _keyed(KEY_A, "a")
    _, va2 = _keyed(KEY_A, "a-again")
    gw = Gateway()
    gw.add_route(va)
    with pytest.raises(RouteAlreadyExists):
        gw.add_route(va2)


def test_gateway_frozen_route():
    pa, va = _keyed(KEY_A, "a")
    gw = Gateway()
    gw.add_route(va)
    gw.freeze_route(va.selector)
    with pytest.raises(RouteFrozen):
        gw.verify_proof(CONCRETE_VKEY, CONCRETE_VALUES, _proof(pa))
    with pytest.raises(RouteFrozen):
        gw.freeze_route(va.selector)
    with pytest.raises(RouteNotFound):
        gw.freeze_route(b"\x00\x00\x00\x00")
    (info,) = gw.routes()
    assert info.frozen and info.version == "a"
    assert info.to_dict()["selector"] == "0x" + va.selector.hex()


def test_default_gateway_contains_registered_versions():
    gw = default_gateway()
    versions = {r.version for r in gw.routes()}
    assert DEFAULT_VERIFIER_VERSION in versions
    assert len(gw) == len(registry.list_versions())

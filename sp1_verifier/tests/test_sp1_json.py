import json

import pytest

from sp1_verifier import InvalidProof, default_gateway
from sp1_verifier.adapters.sp1_json import (INVALID_PROOF_LEN, SP1ProofArtifact, convert_artifact, dump_artifact,
                                            load_artifact, make_artifact, render_constants, render_test_module)
from sp1_verifier.config import DEFAULT_DEV_SEED
from sp1_verifier.errors import ArtifactError
from sp1_verifier.tests import CONCRETE_VALUES, CONCRETE_VKEY, fixture_path, read_json
from sp1_verifier.verifiers.plonk_kzg_bn254 import dev_setup

VKEY_HASH_HEX = "69532e595b15d483d242196daeb362b300d9569b69218723209a28ad013679e5"


@pytest.fixture()
def artifact():
    return read_json("sp1_plonk_proof.json")


def test_fixture_converts_field_by_field():
    conv = convert_artifact(fixture_path("sp1_plonk_proof.json"))
    assert conv.program_vkey == CONCRETE_VKEY
    assert conv.program_vkey_hex() == "0x00265f3e1a8b4c7d92f0e6a5b3c1d8f7e2a4b6c8d0e1f2a3b4c5d6e7f83109b5"
    assert conv.public_values == CONCRETE_VALUES
    assert conv.verifier_hash == bytes.fromhex(VKEY_HASH_HEX)
    assert conv.verifier_selector == bytes.fromhex("69532e59")
    assert conv.sp1_version == "v5.0.0"
    assert len(conv.payload) == 128
    assert conv.proof[:4] == conv.verifier_selector
    assert conv.proof_hex().startswith("0x69532e59237f1b75")


def test_sources_are_interchangeable(artifact):
    path = fixture_path("sp1_plonk_proof.json")
    from_path = convert_artifact(path)
    assert convert_artifact(str(path)) == from_path
    assert convert_artifact(path.read_bytes()) == from_path
    assert convert_artifact(path.read_text()) == from_path
    assert convert_artifact(artifact) == from_path
    assert convert_artifact(load_artifact(artifact)) == from_path


def test_strict_mode_checks_committed_digest(artifact):
    convert_artifact(artifact, strict=True)
    artifact["public_values"]["buffer"]["data"][0] ^= 1
    convert_artifact(artifact)
    with pytest.raises(ArtifactError):
        convert_artifact(artifact, strict=True)


def test_invalid_proof_keeps_selector(artifact):
    conv = convert_artifact(artifact)
    bad = conv.invalid_proof()
    assert len(bad) == INVALID_PROOF_LEN
    assert bad[:4] == conv.verifier_selector
    assert conv.proof.startswith(bad)


def test_hex_public_input_and_unprefixed_proof(artifact):
    artifact["proof"]["Plonk"]["public_inputs"][0] = "0x" + CONCRETE_VKEY.hex()
    artifact["proof"]["Plonk"]["encoded_proof"] = artifact["proof"]["Plonk"]["encoded_proof"][2:]
    conv = convert_artifact(artifact)
    assert conv.program_vkey == CONCRETE_VKEY
    assert len(conv.payload) == 128


@pytest.mark.parametrize(
    "mutate",
    [
        lambda a: a["proof"]["Plonk"].__setitem__("public_inputs", ["1"]),
        lambda a: a["proof"]["Plonk"].__setitem__("plonk_vkey_hash", [1] * 31),
        lambda a: a["proof"]["Plonk"].__setitem__("plonk_vkey_hash", [256] * 32),
        lambda a: a["proof"]["Plonk"].__setitem__("encoded_proof", "0xzz"),
        lambda a: a["proof"]["Plonk"]["public_inputs"].__setitem__(0, str(2**256)),
        lambda a: a["proof"]["Plonk"]["public_inputs"].__setitem__(0, "not a number"),
        lambda a: a["proof"].pop("Plonk"),
        lambda a: a.pop("public_values"),
    ],
)
def test_malformed_artifacts_raise_artifact_error(artifact, mutate):
    mutate(artifact)
    with pytest.raises(ArtifactError):
        convert_artifact(artifact)


def test_unreadable_and_non_json_sources(tmp_path):
    with pytest.raises(ArtifactError) as ei:
        convert_artifact(tmp_path / "missing.json")
    assert ei.value.ctx["path"].endswith("missing.json")
    with pytest.raises(ArtifactError):
        convert_artifact(b"{not json")


def test_make_artifact_round_trips_through_json():
    art = make_artifact(CONCRETE_VKEY, CONCRETE_VALUES, b"\x01" * 128, bytes.fromhex(VKEY_HASH_HEX), sp1_version="dev")
    assert isinstance(art, SP1ProofArtifact)
    doc = json.loads(dump_artifact(art))
    assert "Plonk" in doc["proof"]
    conv = convert_artifact(doc, strict=True)
    assert conv.program_vkey == CONCRETE_VKEY
    assert conv.payload == b"\x01" * 128
    with pytest.raises(ValueError):
        make_artifact(CONCRETE_VKEY[:31], b"", b"", bytes(32))


def test_render_python_constants_executes(artifact):
    conv = convert_artifact(artifact)
    src = render_constants(conv)
    ns = {}
    exec(compile(src, "<constants>", "exec"), ns)
    assert ns["PROGRAM_VKEY"] == conv.program_vkey
    assert ns["PUBLIC_VALUES"] == conv.public_values
    assert ns["PROOF_VALID"] == conv.proof
    assert ns["VERIFIER_HASH"] == conv.verifier_hash
    assert ns["VERIFIER_SELECTOR"] == conv.verifier_selector


def test_render_json_constants(artifact):
    conv = convert_artifact(artifact)
    doc = json.loads(render_constants(conv, fmt="json"))
    assert doc["programVKey"] == conv.program_vkey_hex()
    assert doc["verifierSelector"] == "0x69532e59"
    with pytest.raises(ValueError):
        render_constants(conv, fmt="solidity")


def test_render_test_module(artifact):
    conv = convert_artifact(artifact)
    src = render_test_module(conv, "SP1VerifierTest")
    compile(src, "<generated>", "exec")
    assert "class TestSP1VerifierTest:" in src
    assert f'PROOF_INVALID = bytes.fromhex("{conv.invalid_proof().hex()}")' in src
    assert "def test_verify_proof_wrong_program_key" in src
    with pytest.raises(ValueError):
        render_test_module(conv, "not an identifier")


def test_fixture_is_bound_to_the_dev_setup():
    conv = convert_artifact(fixture_path("sp1_plonk_proof.json"), strict=True)
    assert conv.verifier_hash == dev_setup(DEFAULT_DEV_SEED).identity_hash


@pytest.mark.slow
def test_fixture_verifies_through_default_gateway():
    conv = convert_artifact(fixture_path("sp1_plonk_proof.json"), strict=True)
    gw = default_gateway()
    gw.verify_proof(conv.program_vkey, conv.public_values, conv.proof)
    with pytest.raises(InvalidProof):
        gw.verify_proof(conv.program_vkey, conv.public_values, conv.invalid_proof())
    with pytest.raises(InvalidProof):
        gw.verify_proof((1).to_bytes(32, "big"), conv.public_values, conv.proof)


@pytest.mark.slow
def test_generated_test_module_passes(tmp_path):
    conv = convert_artifact(fixture_path("sp1_plonk_proof.json"), strict=True)
    target = tmp_path / "test_generated_fixture.py"
    target.write_text(render_test_module(conv, "FixtureProof"), encoding="utf-8")
    rc = pytest.main(["-q", "-p", "no:cacheprovider", str(target)])
    assert rc == pytest.ExitCode.OK

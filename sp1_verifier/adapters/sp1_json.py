"""
SP1 JSON proof artifact → canonical verifier inputs.

SP1 saves a PLONK proof as JSON:

{
  "proof": {
    "Plonk": {
      "public_inputs": ["<program vkey, decimal>", "<public values digest, decimal>"],
      "encoded_proof": "<hex payload>",
      "plonk_vkey_hash": [32 byte values]
    }
  },
  "public_values": { "buffer": { "data": [byte values] } },
  "sp1_version": "v5.0.0"
}

Field mapping
-------------
- public_inputs[0]      → program_vkey (32-byte big-endian)
- public_values.buffer  → public_values (raw bytes)
- plonk_vkey_hash       → verifier identity hash; its first 4 bytes are the
                          selector prepended to the payload
- encoded_proof         → payload

The produced proof bytes are exactly `selector || payload`, byte-for-byte
what `Verifier.verify_proof` expects.

Public API
----------
- load_artifact(source) -> SP1ProofArtifact
- convert_artifact(source, *, strict=False) -> ConvertedProof
- make_artifact(program_vkey, public_values, payload, verifier_hash, ...) -> SP1ProofArtifact
- render_constants(converted, fmt="python"|"json") -> str
- render_test_module(converted, test_name="SP1VerifierTest") -> str
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Dict, List, Mapping, Optional, Union

import msgspec

from ..errors import ArtifactError
from ..verifiers.binder import PROGRAM_VKEY_LEN, hash_public_values
from ..verifiers.envelope import IDENTITY_HASH_LEN, SELECTOR_LEN, encode

log = logging.getLogger(__name__)

# Length of the truncated proof used for negative checks: the selector
# survives, the payload does not.
INVALID_PROOF_LEN = 19

Byte = Annotated[int, msgspec.Meta(ge=0, le=255)]


# ---------------------------------------------------------------------------
# Artifact schema
# ---------------------------------------------------------------------------


class PlonkProof(msgspec.Struct, frozen=True):
    public_inputs: List[str]
    encoded_proof: str
    plonk_vkey_hash: List[Byte]
    raw_proof: str = ""


class ProofVariant(msgspec.Struct, frozen=True):
    plonk: Optional[PlonkProof] = msgspec.field(default=None, name="Plonk")


class PublicValuesBuffer(msgspec.Struct, frozen=True):
    data: List[Byte]


class PublicValues(msgspec.Struct, frozen=True):
    buffer: PublicValuesBuffer


class SP1ProofArtifact(msgspec.Struct, frozen=True):
    proof: ProofVariant
    public_values: PublicValues
    sp1_version: str = "unknown"


# ---------------------------------------------------------------------------
# Converted form
# ---------------------------------------------------------------------------


def _hex(b: bytes) -> str:
    return "0x" + b.hex()


class ConvertedProof(msgspec.Struct, frozen=True):
    program_vkey: bytes
    public_values: bytes
    proof: bytes
    verifier_hash: bytes
    sp1_version: str = "unknown"

    @property
    def verifier_selector(self) -> bytes:
        return self.verifier_hash[:SELECTOR_LEN]

    @property
    def payload(self) -> bytes:
        return self.proof[SELECTOR_LEN:]

    def invalid_proof(self) -> bytes:
        """Truncated copy of the valid proof; selector intact, payload cut short."""
        return self.proof[:INVALID_PROOF_LEN]

    def program_vkey_hex(self) -> str:
        return _hex(self.program_vkey)

    def public_values_hex(self) -> str:
        return _hex(self.public_values)

    def proof_hex(self) -> str:
        return _hex(self.proof)

    def verifier_hash_hex(self) -> str:
        return _hex(self.verifier_hash)

    def verifier_selector_hex(self) -> str:
        return _hex(self.verifier_selector)

    def summary(self) -> Dict[str, Any]:
        return {
            "sp1_version": self.sp1_version,
            "program_vkey": self.program_vkey_hex(),
            "public_values_len": len(self.public_values),
            "proof_len": len(self.proof),
            "verifier_hash": self.verifier_hash_hex(),
            "verifier_selector": self.verifier_selector_hex(),
        }


# ---------------------------------------------------------------------------
# Load & convert
# ---------------------------------------------------------------------------

Source = Union[str, Path, bytes, bytearray, Mapping[str, Any], SP1ProofArtifact]


def load_artifact(source: Source) -> SP1ProofArtifact:
    """
    Decode an artifact from a path, raw JSON bytes / text, a mapping, or
    pass an already-decoded artifact through.
    """
    if isinstance(source, SP1ProofArtifact):
        return source
    path: Optional[str] = None
    try:
        if isinstance(source, Mapping):
            return msgspec.convert(source, type=SP1ProofArtifact)
        if isinstance(source, Path) or (isinstance(source, str) and not source.lstrip().startswith("{")):
            path = str(source)
            data = Path(source).read_bytes()
        elif isinstance(source, str):
            data = source.encode("utf-8")
        else:
            data = bytes(source)
        return msgspec.json.decode(data, type=SP1ProofArtifact)
    except OSError as e:
        raise ArtifactError(f"cannot read artifact: {e.strerror or e}", path=path, cause=e) from e
    except msgspec.MsgspecError as e:
        raise ArtifactError(f"malformed SP1 proof artifact: {e}", path=path, cause=e) from e


def _parse_uint(s: str, what: str) -> int:
    text = s.strip()
    try:
        v = int(text, 16) if text.lower().startswith("0x") else int(text, 10)
    except ValueError as e:
        raise ArtifactError(f"{what} is not an integer: {s!r}", cause=e) from e
    if v < 0:
        raise ArtifactError(f"{what} must be non-negative")
    return v


def _parse_hex(s: str, what: str) -> bytes:
    text = s.strip()
    if text[:2].lower() == "0x":
        text = text[2:]
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise ArtifactError(f"{what} is not valid hex", cause=e) from e


def convert_artifact(source: Source, *, strict: bool = False) -> ConvertedProof:
    """
    Map an SP1 JSON artifact onto (program_vkey, public_values, proof bytes).

    With strict=True, public_inputs[1] must also equal the masked SHA-256 of
    the public values, catching artifacts whose buffer was edited.
    """
    art = load_artifact(source)
    plonk = art.proof.plonk
    if plonk is None:
        raise ArtifactError("unsupported proof kind: expected a Plonk proof")

    if len(plonk.public_inputs) < 2:
        raise ArtifactError("invalid proof: expected at least 2 public inputs")

    vkey_int = _parse_uint(plonk.public_inputs[0], "public_inputs[0]")
    if vkey_int >> (8 * PROGRAM_VKEY_LEN):
        raise ArtifactError("public_inputs[0] does not fit in 32 bytes")
    program_vkey = vkey_int.to_bytes(PROGRAM_VKEY_LEN, "big")

    public_values = bytes(art.public_values.buffer.data)

    if len(plonk.plonk_vkey_hash) != IDENTITY_HASH_LEN:
        raise ArtifactError(
            f"plonk_vkey_hash must be {IDENTITY_HASH_LEN} bytes, got {len(plonk.plonk_vkey_hash)}"
        )
    verifier_hash = bytes(plonk.plonk_vkey_hash)

    payload = _parse_hex(plonk.encoded_proof, "encoded_proof")

    if strict:
        committed = _parse_uint(plonk.public_inputs[1], "public_inputs[1]")
        if committed != hash_public_values(public_values):
            raise ArtifactError("public_inputs[1] does not match the public values digest")

    converted = ConvertedProof(
        program_vkey=program_vkey,
        public_values=public_values,
        proof=encode(verifier_hash, payload),
        verifier_hash=verifier_hash,
        sp1_version=art.sp1_version,
    )
    log.debug("converted artifact", extra=converted.summary())
    return converted


def make_artifact(
    program_vkey: bytes,
    public_values: bytes,
    payload: bytes,
    verifier_hash: bytes,
    *,
    sp1_version: str = "unknown",
) -> SP1ProofArtifact:
    """Build an artifact in SP1's JSON shape (used by dev tooling and tests)."""
    if len(program_vkey) != PROGRAM_VKEY_LEN:
        raise ValueError(f"program vkey must be {PROGRAM_VKEY_LEN} bytes")
    if len(verifier_hash) != IDENTITY_HASH_LEN:
        raise ValueError(f"verifier hash must be {IDENTITY_HASH_LEN} bytes")
    return SP1ProofArtifact(
        proof=ProofVariant(
            plonk=PlonkProof(
                public_inputs=[
                    str(int.from_bytes(program_vkey, "big")),
                    str(hash_public_values(public_values)),
                ],
                encoded_proof=bytes(payload).hex(),
                plonk_vkey_hash=list(verifier_hash),
            )
        ),
        public_values=PublicValues(buffer=PublicValuesBuffer(data=list(public_values))),
        sp1_version=sp1_version,
    )


def dump_artifact(artifact: SP1ProofArtifact) -> bytes:
    return msgspec.json.format(msgspec.json.encode(artifact), indent=2)


# ---------------------------------------------------------------------------
# Rendering
# ---------------------------------------------------------------------------


def render_constants(converted: ConvertedProof, fmt: str = "python") -> str:
    """Constants block for embedding a converted proof in code or config."""
    if fmt == "json":
        doc = {
            "programVKey": converted.program_vkey_hex(),
            "publicValues": converted.public_values_hex(),
            "proofValid": converted.proof_hex(),
            "verifierHash": converted.verifier_hash_hex(),
            "verifierSelector": converted.verifier_selector_hex(),
            "sp1Version": converted.sp1_version,
        }
        return msgspec.json.format(msgspec.json.encode(doc), indent=2).decode("utf-8") + "\n"
    if fmt != "python":
        raise ValueError(f"unknown constants format: {fmt!r}")
    return f'''# Auto-generated SP1 proof constants (sp1 {converted.sp1_version})

# Program verification key from public_inputs[0]
PROGRAM_VKEY = bytes.fromhex("{converted.program_vkey.hex()}")

# Public values from public_values.buffer.data
PUBLIC_VALUES = bytes.fromhex("{converted.public_values.hex()}")

# Valid proof with verifier selector prefix
PROOF_VALID = bytes.fromhex("{converted.proof.hex()}")

# Verifier identity hash (plonk_vkey_hash)
VERIFIER_HASH = bytes.fromhex("{converted.verifier_hash.hex()}")

# Verifier selector (first 4 bytes of VERIFIER_HASH)
VERIFIER_SELECTOR = bytes.fromhex("{converted.verifier_selector.hex()}")
'''


def render_test_module(converted: ConvertedProof, test_name: str = "SP1VerifierTest") -> str:
    """
    pytest module checking the converted proof against the registered
    verifiers: valid proof accepted, truncated proof and a wrong program key
    rejected with InvalidProof.
    """
    if not test_name.isidentifier():
        raise ValueError(f"test name must be a Python identifier: {test_name!r}")
    cls = test_name if test_name.startswith("Test") else "Test" + test_name
    return f'''# Auto-generated from an SP1 {converted.sp1_version} JSON proof.
import pytest

from sp1_verifier import InvalidProof, default_gateway

PROGRAM_VKEY = bytes.fromhex("{converted.program_vkey.hex()}")
PUBLIC_VALUES = bytes.fromhex("{converted.public_values.hex()}")
PROOF_VALID = bytes.fromhex("{converted.proof.hex()}")
PROOF_INVALID = bytes.fromhex("{converted.invalid_proof().hex()}")
WRONG_PROGRAM_VKEY = (1).to_bytes(32, "big")


@pytest.fixture(scope="module")
def gateway():
    return default_gateway()


class {cls}:
    def test_verify_proof_valid(self, gateway):
        gateway.verify_proof(PROGRAM_VKEY, PUBLIC_VALUES, PROOF_VALID)

    def test_verify_proof_invalid(self, gateway):
        with pytest.raises(InvalidProof):
            gateway.verify_proof(PROGRAM_VKEY, PUBLIC_VALUES, PROOF_INVALID)

    def test_verify_proof_wrong_program_key(self, gateway):
        with pytest.raises(InvalidProof):
            gateway.verify_proof(WRONG_PROGRAM_VKEY, PUBLIC_VALUES, PROOF_VALID)
'''


__all__ = [
    "INVALID_PROOF_LEN",
    "PlonkProof",
    "ProofVariant",
    "PublicValuesBuffer",
    "PublicValues",
    "SP1ProofArtifact",
    "ConvertedProof",
    "load_artifact",
    "convert_artifact",
    "make_artifact",
    "dump_artifact",
    "render_constants",
    "render_test_module",
]

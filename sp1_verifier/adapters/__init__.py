"""
sp1_verifier.adapters
=====================

Adapters that turn external proof artifacts into canonical verifier inputs
(program_vkey, public_values, selector ‖ payload).

- `sp1_json` → SP1 JSON proof artifacts (`proof.Plonk`, `public_values.buffer`)
"""

from .sp1_json import ConvertedProof, SP1ProofArtifact, convert_artifact, load_artifact

__all__ = ["ConvertedProof", "SP1ProofArtifact", "convert_artifact", "load_artifact"]

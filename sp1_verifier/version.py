"""
Version utilities for sp1_verifier.

- __version__: version of this package (PEP 440 core); may be overridden at
  build time with SP1V_PACKAGE_VERSION.
- DEFAULT_VERIFIER_VERSION: the verifier build selected when nothing else is
  configured. Verifier versions are distinct from the package version: each
  one pins a verifying key and therefore an identity hash.
- runtime_banner(): short human-readable banner for logs and `sp1v info`.
"""

from __future__ import annotations

import os
import platform

__version__ = os.getenv("SP1V_PACKAGE_VERSION", "0.3.0")

DEFAULT_VERIFIER_VERSION = "v5.0.0-dev"


def runtime_banner(prefix: str = "sp1-verifier") -> str:
    from .verifiers.pairing_bn254 import BACKEND_NAME

    return " ".join(
        [
            prefix,
            __version__,
            f"python={platform.python_version()}",
            f"backend={BACKEND_NAME}",
        ]
    )


__all__ = ["__version__", "DEFAULT_VERIFIER_VERSION", "runtime_banner"]

"""
sp1_verifier.gateway
====================

Routes a proof to the verifier version it was produced for, using the
4-byte selector at the front of the envelope. Lets several verifier
versions serve side by side in one process.

    gw = Gateway()
    gw.add_route(verifier_a)
    gw.add_route(verifier_b)
    gw.verify_proof(program_vkey, public_values, proof_bytes)

Routes can be frozen: a frozen selector stays registered (so the failure is
explicit) but every proof routed to it raises RouteFrozen. Freezing is
permanent for the lifetime of the gateway.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Dict, List, Optional, Set

from . import registry
from .errors import RouteAlreadyExists, RouteFrozen, RouteNotFound
from .verifiers.envelope import SELECTOR_LEN, split

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RouteInfo:
    selector: bytes
    version: str
    identity_hash: bytes
    frozen: bool

    def to_dict(self) -> Dict[str, object]:
        return {
            "selector": "0x" + self.selector.hex(),
            "version": self.version,
            "identity_hash": "0x" + self.identity_hash.hex(),
            "frozen": self.frozen,
        }


class Gateway:
    def __init__(self) -> None:
        self._routes: Dict[bytes, object] = {}
        self._frozen: Set[bytes] = set()
        self._lock = RLock()

    def add_route(self, verifier) -> bytes:
        """Route proofs carrying `verifier.selector` to `verifier`."""
        selector = bytes(verifier.selector)
        with self._lock:
            if selector in self._routes:
                raise RouteAlreadyExists(selector)
            self._routes[selector] = verifier
        log.info("route added", extra={"selector": selector, "version": verifier.version})
        return selector

    def freeze_route(self, selector: bytes) -> None:
        sel = bytes(selector)
        with self._lock:
            if sel not in self._routes:
                raise RouteNotFound(sel)
            if sel in self._frozen:
                raise RouteFrozen(sel)
            self._frozen.add(sel)
        log.warning("route frozen", extra={"selector": sel})

    def get_verifier(self, selector: bytes):
        sel = bytes(selector)
        with self._lock:
            verifier = self._routes.get(sel)
            if verifier is None:
                raise RouteNotFound(sel)
            if sel in self._frozen:
                raise RouteFrozen(sel)
            return verifier

    def routes(self) -> List[RouteInfo]:
        with self._lock:
            return [
                RouteInfo(
                    selector=sel,
                    version=v.version,
                    identity_hash=v.identity_hash(),
                    frozen=sel in self._frozen,
                )
                for sel, v in sorted(self._routes.items())
            ]

    def verify_proof(self, program_vkey, public_values, proof_bytes) -> None:
        """
        Route by selector, then delegate. The chosen verifier re-checks the
        selector itself, so routing never weakens the dispatcher's checks.
        """
        selector, _ = split(proof_bytes)
        self.get_verifier(selector).verify_proof(program_vkey, public_values, proof_bytes)

    def __contains__(self, selector: object) -> bool:
        if not isinstance(selector, (bytes, bytearray)) or len(selector) != SELECTOR_LEN:
            return False
        with self._lock:
            return bytes(selector) in self._routes

    def __len__(self) -> int:
        with self._lock:
            return len(self._routes)


def default_gateway(versions: Optional[List[str]] = None) -> Gateway:
    """Gateway with a route for every registered version (or `versions`)."""
    gw = Gateway()
    for version in versions if versions is not None else registry.list_versions():
        gw.add_route(registry.build_verifier(version))
    return gw


__all__ = ["Gateway", "RouteInfo", "default_gateway"]

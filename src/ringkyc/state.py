"""
execution environment for the credential engine

CredentialEnvironment owns every piece of shared mutable state (issuer
registry, attribute rings, verification counter) and exposes the engine's
operations on it. there is no module-level singleton: callers create one
environment per deployment and pass it around, or load one from storage.
"""

import logging
from typing import Dict, List, Optional, Sequence

from ringkyc.config import EngineConfig
from ringkyc.counter import VerificationCounter
from ringkyc.crypto import MessageLike
from ringkyc.group import Point
from ringkyc.registry import IssuerRegistry
from ringkyc.rings import AttributeRingStore, Ring
from ringkyc.schnorr import IssuerAuthorization
from ringkyc.signer import RingSignature
from ringkyc.verifier import RingVerifier

logger = logging.getLogger(__name__)


class CredentialEnvironment:
    """registry + ring store + verifier + counter behind one handle"""

    def __init__(self, config: Optional[EngineConfig] = None, initial_count: int = 0) -> None:
        self.config = config or EngineConfig()
        self.registry = IssuerRegistry()
        self.rings = AttributeRingStore(self.registry, self.config)
        self.counter = VerificationCounter(initial_count)
        self.verifier = RingVerifier(self.rings, self.counter)

    # admin

    def initialize(self, admin: str) -> None:
        self.registry.initialize(admin)

    def get_admin(self) -> Optional[str]:
        return self.registry.get_admin()

    def register_issuer(self, pub_key: Point, caller: str) -> None:
        self.registry.register_issuer(pub_key, caller)

    def list_issuers(self) -> List[Point]:
        return self.registry.list_issuers()

    # issuers

    def create_ring_for_attribute(
        self,
        issuer: IssuerAuthorization,
        attribute: str,
        members: Sequence[Point],
    ) -> Ring:
        return self.rings.create_ring_for_attribute(issuer, attribute, members)

    def get_ring_for_attribute(self, attribute: str) -> Optional[Ring]:
        return self.rings.get_ring_for_attribute(attribute)

    def attributes(self) -> List[str]:
        return self.rings.attributes()

    # verifiers

    def verify_attribute(self, message: MessageLike, signature: RingSignature, attribute: str) -> bool:
        return self.verifier.verify_attribute(message, signature, attribute)

    @property
    def verification_count(self) -> int:
        return self.counter.value

    # persistence

    def snapshot(self) -> dict:
        """logical state layout; never contains secret material"""
        return {
            "admin": self.get_admin(),
            "issuers": self.list_issuers(),
            "rings": {attr: self.get_ring_for_attribute(attr) for attr in self.attributes()},
            "verification_count": self.verification_count,
        }

    @classmethod
    def from_snapshot(cls, snapshot: dict, config: Optional[EngineConfig] = None) -> "CredentialEnvironment":
        env = cls(config=config, initial_count=snapshot.get("verification_count", 0))
        env.registry.restore(snapshot.get("admin"), list(snapshot.get("issuers", [])))
        rings: Dict[str, Sequence[Point]] = snapshot.get("rings", {})
        env.rings.restore(rings)
        logger.info(
            "restored environment: %d issuers, %d rings, count=%d",
            len(env.list_issuers()), len(rings), env.verification_count,
        )
        return env

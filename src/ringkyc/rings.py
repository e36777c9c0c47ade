"""
attribute ring store

maps an attribute name (a short symbol such as "over_18") to the ordered
ring of public keys that backs it. rings are immutable tuples; a write
swaps the whole tuple under a lock, so readers always get a complete ring.

writes must carry an IssuerAuthorization from a registered issuer. the
configured ring_update policy decides whether a write replaces the ring
("replace", the default) or appends to it ("merge").
"""

import logging
import re
import threading
from typing import Dict, List, Optional, Sequence, Tuple

from ringkyc.config import EngineConfig
from ringkyc.errors import DuplicateMember, InvalidParameter, InvalidRingSize, Unauthorized
from ringkyc.group import Point
from ringkyc.registry import IssuerRegistry
from ringkyc.schnorr import IssuerAuthorization

logger = logging.getLogger(__name__)

Ring = Tuple[Point, ...]

_ATTRIBUTE_RE = re.compile(r"^[A-Za-z0-9_]{1,32}$")


def validate_attribute(attribute: str) -> str:
    """attribute names are symbols: 1-32 chars of [A-Za-z0-9_]"""
    if not isinstance(attribute, str) or not _ATTRIBUTE_RE.match(attribute):
        raise InvalidParameter(f"invalid attribute name: {attribute!r}")
    return attribute


def validate_ring(members: Sequence[Point], min_size: int = 2, max_size: Optional[int] = None) -> Ring:
    """check size and uniqueness; returns the members as a tuple"""
    if isinstance(members, (str, bytes)):
        raise InvalidParameter("ring must be a sequence of points")
    ring = tuple(members)
    if len(ring) < min_size or (max_size is not None and len(ring) > max_size):
        bound = f"{min_size}..{max_size}" if max_size is not None else f">= {min_size}"
        raise InvalidRingSize(f"ring has {len(ring)} members, need {bound}")
    seen = set()
    for member in ring:
        if not isinstance(member, Point) or member.is_infinity():
            raise InvalidParameter("ring members must be non-identity points")
        encoded = member.to_bytes()
        if encoded in seen:
            raise DuplicateMember(f"member {encoded.hex()[:16]}... appears more than once")
        seen.add(encoded)
    return ring


class AttributeRingStore:
    """attribute name -> ordered public-key ring"""

    def __init__(self, registry: IssuerRegistry, config: Optional[EngineConfig] = None) -> None:
        self._registry = registry
        self._config = config or EngineConfig()
        self._rings: Dict[str, Ring] = {}
        self._lock = threading.Lock()

    def create_ring_for_attribute(
        self,
        issuer: IssuerAuthorization,
        attribute: str,
        members: Sequence[Point],
    ) -> Ring:
        """
        write the ring for `attribute`.

        args:
            issuer: authorization signed by a registered issuer over exactly
                (attribute, members)
            attribute: attribute symbol
            members: ordered public keys; at least min_ring_size, unique

        returns:
            the ring now stored under `attribute`
        """
        validate_attribute(attribute)
        cfg = self._config
        merging = cfg.ring_update == "merge"
        # merged writes may add a single member; bounds apply to the result
        ring = validate_ring(members, 1 if merging else cfg.min_ring_size, cfg.max_ring_size)

        if not isinstance(issuer, IssuerAuthorization) or not self._registry.is_issuer(issuer.issuer):
            logger.warning("rejected ring write for %s: issuer not registered", attribute)
            raise Unauthorized("ring writes require a registered issuer")
        if not issuer.covers(attribute, ring):
            logger.warning("rejected ring write for %s: bad issuer authorization", attribute)
            raise Unauthorized("issuer authorization does not cover this ring write")

        with self._lock:
            previous = self._rings.get(attribute)
            if merging:
                combined = ring if previous is None else previous + ring
                ring = validate_ring(combined, cfg.min_ring_size, cfg.max_ring_size)
            self._rings[attribute] = ring

        if previous is not None and not merging:
            logger.info("replaced ring for %s (%d -> %d members)", attribute, len(previous), len(ring))
        else:
            logger.info("stored ring for %s (%d members)", attribute, len(ring))
        return ring

    def get_ring_for_attribute(self, attribute: str) -> Optional[Ring]:
        """current ring snapshot, or None"""
        return self._rings.get(attribute)

    def attributes(self) -> List[str]:
        """attribute names in creation order"""
        return list(self._rings)

    def restore(self, rings: Dict[str, Sequence[Point]]) -> None:
        """load persisted rings into an empty store"""
        with self._lock:
            if self._rings:
                raise InvalidParameter("cannot restore into a populated ring store")
            loaded = {}
            for attribute, members in rings.items():
                validate_attribute(attribute)
                loaded[attribute] = validate_ring(members, self._config.min_ring_size)
            self._rings = loaded

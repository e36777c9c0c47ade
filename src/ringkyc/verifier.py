"""
ring signature verification

recomputes the challenge chain from the signature's seed and responses:

    c[j+1] = H(base, r_j*G + c_j*P_j)    for j = 0 .. n-1

and accepts iff it closes back on c[0]. a well-formed signature that simply
does not verify (wrong ring, wrong message, forged) is a normal False;
structurally malformed input raises InvalidParameter.
"""

import logging
from typing import Sequence

from ringkyc.crypto import MessageLike, challenge_base, chain_challenge, encode_message, ring_digest
from ringkyc.errors import InvalidParameter, RingNotFound
from ringkyc.group import G, Point
from ringkyc.signer import RingSignature

logger = logging.getLogger(__name__)


def verify_ring(message: MessageLike, signature: RingSignature, ring: Sequence[Point]) -> bool:
    """
    Check `signature` over `message` against an explicit ring.

    Pure: no counter or other state is touched.

    Returns:
        True if some member of `ring` produced the signature
    """
    if not isinstance(signature, RingSignature):
        raise InvalidParameter("signature must be a RingSignature")
    signature.validate()
    msg = encode_message(message)
    ring = tuple(ring)

    if not ring or len(ring) != len(signature.responses):
        logger.debug("ring size %d does not match %d responses", len(ring), len(signature.responses))
        return False
    if bytes(signature.ring_digest) != ring_digest(ring):
        logger.debug("signature was produced for a different ring")
        return False

    base = challenge_base(ring, msg)
    c = signature.challenge
    for r_j, p_j in zip(signature.responses, ring):
        c = chain_challenge(base, G * r_j + p_j * c)

    return c == signature.challenge


class RingVerifier:
    """verifies against the stored ring for an attribute and counts successes"""

    def __init__(self, store, counter) -> None:
        self._store = store
        self._counter = counter

    def verify_attribute(self, message: MessageLike, signature: RingSignature, attribute: str) -> bool:
        """
        Verify `signature` against the ring currently stored for `attribute`.

        Raises RingNotFound when no ring exists. On success the verification
        counter goes up by exactly one; on failure it is left alone.
        """
        ring = self._store.get_ring_for_attribute(attribute)
        if ring is None:
            raise RingNotFound(f"no ring stored for attribute {attribute!r}")

        if not verify_ring(message, signature, ring):
            logger.info("verification rejected for %s", attribute)
            return False

        count = self._counter.increment()
        logger.info("verification accepted for %s (count=%d)", attribute, count)
        return True

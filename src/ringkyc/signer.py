"""
ring signature creation (AOS-style, over BLS12-381 G1)

a signature proves that the signer knows the secret key of *some* member of
the ring without saying which. the challenge chain runs once around the ring:

    base     = H_ring(ring) || message
    c[s+1]   = H(base, a*G)                      # signer's commitment
    c[i+1]   = H(base, r_i*G + c_i*P_i)          # every other member
    r_s      = a - c_s*sk                        # closes the loop

every r_i is uniformly distributed whether it was drawn at random or solved
for, so the output carries no information about s.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import List, Sequence

from ringkyc.crypto import MessageLike, challenge_base, chain_challenge, encode_message, ring_digest
from ringkyc.errors import InvalidParameter, KeyMismatch
from ringkyc.group import (
    CURVE_ORDER,
    SCALAR_SIZE,
    G,
    Point,
    SecretKey,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
)
from ringkyc.rings import validate_ring

logger = logging.getLogger(__name__)

DIGEST_SIZE = 32


@dataclass
class RingSignature:
    """ring snapshot binding, chain seed c[0] and one response per member"""

    ring_digest: bytes
    challenge: int
    responses: List[int] = field(default_factory=list)

    def __len__(self):
        return len(self.responses)

    def validate(self) -> None:
        """structural checks only; says nothing about cryptographic validity"""
        if not isinstance(self.ring_digest, (bytes, bytearray)) or len(self.ring_digest) != DIGEST_SIZE:
            raise InvalidParameter(f"ring digest must be {DIGEST_SIZE} bytes")
        if not isinstance(self.responses, (list, tuple)) or not self.responses:
            raise InvalidParameter("signature has no responses")
        for value in [self.challenge, *self.responses]:
            if not isinstance(value, int) or isinstance(value, bool) or not 0 <= value < CURVE_ORDER:
                raise InvalidParameter("signature scalars must be integers in [0, r)")

    def to_dict(self) -> dict:
        return {
            "ring_digest": bytes(self.ring_digest).hex(),
            "challenge": scalar_to_bytes(self.challenge).hex(),
            "responses": [scalar_to_bytes(r).hex() for r in self.responses],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "RingSignature":
        try:
            digest = bytes.fromhex(data["ring_digest"])
            challenge = scalar_from_bytes(bytes.fromhex(data["challenge"]))
            responses = [scalar_from_bytes(bytes.fromhex(r)) for r in data["responses"]]
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidParameter(f"malformed ring signature: {e}") from e
        sig = cls(ring_digest=digest, challenge=challenge, responses=responses)
        sig.validate()
        return sig

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_json(cls, text: str) -> "RingSignature":
        try:
            data = json.loads(text)
        except (TypeError, ValueError) as e:
            raise InvalidParameter(f"malformed ring signature json: {e}") from e
        if not isinstance(data, dict):
            raise InvalidParameter("ring signature json must be an object")
        return cls.from_dict(data)

    def to_bytes(self) -> bytes:
        """digest || c0 || r_0 .. r_{n-1}"""
        return (
            bytes(self.ring_digest)
            + scalar_to_bytes(self.challenge)
            + b"".join(scalar_to_bytes(r) for r in self.responses)
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> "RingSignature":
        head = DIGEST_SIZE + SCALAR_SIZE
        if len(data) <= head or (len(data) - head) % SCALAR_SIZE:
            raise InvalidParameter("Invalid ring signature data length")
        responses = [
            scalar_from_bytes(data[i:i + SCALAR_SIZE])
            for i in range(head, len(data), SCALAR_SIZE)
        ]
        return cls(
            ring_digest=bytes(data[:DIGEST_SIZE]),
            challenge=scalar_from_bytes(data[DIGEST_SIZE:head]),
            responses=responses,
        )


def sign(message: MessageLike, ring: Sequence[Point], signer_index: int, secret: SecretKey) -> RingSignature:
    """
    Produce a ring signature over `message` for `ring`.

    Args:
        message: challenge bytes (str is utf-8 encoded); should be fresh per attempt
        ring: ordered public keys, the exact ring the verifier will hold
        signer_index: position of the signer's public key in `ring`
        secret: the signer's secret key

    Returns:
        RingSignature
    """
    msg = encode_message(message)
    ring = validate_ring(ring)
    n = len(ring)
    if not isinstance(signer_index, int) or isinstance(signer_index, bool) or not 0 <= signer_index < n:
        raise InvalidParameter(f"signer_index {signer_index!r} outside ring of size {n}")
    if not isinstance(secret, SecretKey):
        raise InvalidParameter("secret must be a SecretKey")

    sk = secret.scalar
    if G * sk != ring[signer_index]:
        raise KeyMismatch(f"secret key does not match ring member {signer_index}")

    base = challenge_base(ring, msg)
    challenges = [0] * n
    responses = [0] * n

    a = random_scalar()
    idx = (signer_index + 1) % n
    challenges[idx] = chain_challenge(base, G * a)

    while idx != signer_index:
        responses[idx] = random_scalar()
        commitment = G * responses[idx] + ring[idx] * challenges[idx]
        idx = (idx + 1) % n
        challenges[idx] = chain_challenge(base, commitment)

    responses[signer_index] = (a - challenges[signer_index] * sk) % CURVE_ORDER
    logger.debug("produced ring signature over %d members", n)

    return RingSignature(
        ring_digest=ring_digest(ring),
        challenge=challenges[0],
        responses=responses,
    )

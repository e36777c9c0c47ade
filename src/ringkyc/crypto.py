#import blake2b
from hashlib import blake2b
from typing import Sequence, Union

from ringkyc.errors import InvalidParameter
from ringkyc.group import Point, hash_to_scalar

DOMAIN_RING = b"ringkyc/ring/v1"
DOMAIN_CHALLENGE = b"ringkyc/challenge/v1"
DOMAIN_RING_WRITE = b"ringkyc/ring-write/v1"

MessageLike = Union[bytes, bytearray, str]


def encode_message(message: MessageLike) -> bytes:
    """messages are opaque bytes; str is utf-8 encoded"""
    if isinstance(message, str):
        return message.encode("utf-8")
    if isinstance(message, (bytes, bytearray)):
        return bytes(message)
    raise InvalidParameter(f"message must be bytes or str, got {type(message).__name__}")


def ring_digest(ring: Sequence[Point]) -> bytes:
    """32-byte digest binding an ordered ring of public keys.

    Uses a domain separation prefix and the member count so rings that are
    prefixes of one another never collide.
    """
    hasher = blake2b(digest_size=32)
    hasher.update(DOMAIN_RING)
    hasher.update(len(ring).to_bytes(4, "big"))
    for member in ring:
        hasher.update(member.to_bytes())
    return hasher.digest()


def challenge_base(ring: Sequence[Point], message: bytes) -> bytes:
    """Prefix shared by every link of the challenge chain: H_ring(ring) || message."""
    return ring_digest(ring) + message


def chain_challenge(base: bytes, commitment: Point) -> int:
    """Next challenge in the ring: c = H(base, commitment)."""
    return hash_to_scalar(DOMAIN_CHALLENGE, base, commitment.to_bytes())


def ring_write_payload(attribute: str, members: Sequence[Point]) -> bytes:
    """canonical bytes an issuer signs to authorize a ring write"""
    hasher = blake2b(digest_size=32)
    hasher.update(DOMAIN_RING_WRITE)
    hasher.update(attribute.encode("utf-8"))
    hasher.update(b"\x00")
    hasher.update(ring_digest(members))
    return hasher.digest()

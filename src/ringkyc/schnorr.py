"""
Schnorr signatures over BLS12-381 G1, used for issuer authorization.

An issuer proves it holds the secret key behind a registered issuer public
key by signing the canonical ring-write payload. The attribute ring store
only accepts writes that carry such a signature, so knowing an issuer's
public key is not enough to overwrite rings.
"""

from dataclasses import dataclass
from typing import Sequence

from ringkyc.crypto import ring_write_payload
from ringkyc.errors import InvalidParameter
from ringkyc.group import (
    CURVE_ORDER,
    G,
    POINT_SIZE,
    SCALAR_SIZE,
    Point,
    hash_to_scalar,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
)
from ringkyc.keys import KeyPair

DOMAIN_SCHNORR = b"ringkyc/schnorr/v1"


@dataclass
class SchnorrSignature:
    """Schnorr signature (R, s)."""
    R: Point  # Commitment point
    s: int  # Response scalar


def _challenge(R: Point, pk: Point, message: bytes) -> int:
    # e = H(R || pk || m)
    return hash_to_scalar(DOMAIN_SCHNORR, R.to_bytes(), pk.to_bytes(), message)


def sign(keypair: KeyPair, message: bytes) -> SchnorrSignature:
    """
    Sign a message with a Schnorr signature.

    Args:
        keypair: signer key pair
        message: message to sign

    Returns:
        Schnorr signature (R, s)
    """
    k = random_scalar()
    R = G * k
    e = _challenge(R, keypair.pk, message)
    # s = k + e * sk
    s = (k + e * keypair.sk.scalar) % CURVE_ORDER
    return SchnorrSignature(R=R, s=s)


def verify(pk: Point, message: bytes, signature: SchnorrSignature) -> bool:
    """
    Verify a Schnorr signature.

    Returns:
        True if signature is valid, False otherwise
    """
    if signature.R.is_infinity():
        return False
    e = _challenge(signature.R, pk, message)
    # Check: s*G = R + e*pk
    return G * signature.s == signature.R + pk * e


def signature_to_bytes(sig: SchnorrSignature) -> bytes:
    """Serialize a signature to bytes."""
    return sig.R.to_bytes() + scalar_to_bytes(sig.s)


def bytes_to_signature(data: bytes) -> SchnorrSignature:
    """Deserialize a signature from bytes."""
    if len(data) != POINT_SIZE + SCALAR_SIZE:
        raise InvalidParameter("Invalid signature data length")
    R = Point.from_bytes(data[:POINT_SIZE])
    s = scalar_from_bytes(data[POINT_SIZE:])
    return SchnorrSignature(R=R, s=s)


# ============================================================================
# Issuer authorization for ring writes
# ============================================================================

@dataclass
class IssuerAuthorization:
    """issuer public key plus a signature over one specific ring write"""
    issuer: Point
    signature: SchnorrSignature

    def covers(self, attribute: str, members: Sequence[Point]) -> bool:
        """True if the signature authorizes exactly this attribute/members pair"""
        return verify(self.issuer, ring_write_payload(attribute, members), self.signature)

    def to_dict(self) -> dict:
        return {
            "issuer": self.issuer.to_hex(),
            "signature": signature_to_bytes(self.signature).hex(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "IssuerAuthorization":
        try:
            issuer = Point.from_hex(data["issuer"])
            signature = bytes_to_signature(bytes.fromhex(data["signature"]))
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidParameter(f"malformed issuer authorization: {e}") from e
        return cls(issuer=issuer, signature=signature)


def authorize_ring(keypair: KeyPair, attribute: str, members: Sequence[Point]) -> IssuerAuthorization:
    """Issuer side: sign a ring write for `attribute` with exactly `members`."""
    signature = sign(keypair, ring_write_payload(attribute, members))
    return IssuerAuthorization(issuer=keypair.pk, signature=signature)

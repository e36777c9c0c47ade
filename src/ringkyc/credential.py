"""
credential wallet: issuance helper and encrypted credential blobs

issuance mirrors the issuer workflow: for every approved attribute the
issuer mints one holder key plus a handful of decoy keys, writes the ring,
throws the decoy secrets away and hands the holder
{issuer, {attribute: secret}, {attribute: ring}}.

the holder keeps that blob encrypted under a password
(pbkdf2-hmac-sha256 -> aes-256-gcm). the engine itself never sees it.
"""

import base64
import json
import logging
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional, Tuple

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ringkyc.config import DEFAULT_KDF_ITERATIONS
from ringkyc.crypto import MessageLike
from ringkyc.errors import CredentialError, InvalidParameter, InvalidRingSize, Unauthorized
from ringkyc.group import Point, SecretKey
from ringkyc.keys import KeyPair, generate_keypair, generate_keys
from ringkyc.rings import Ring, validate_attribute
from ringkyc.schnorr import authorize_ring
from ringkyc.signer import RingSignature, sign
from ringkyc.state import CredentialEnvironment

logger = logging.getLogger(__name__)

SALT_SIZE = 16
NONCE_SIZE = 12


@dataclass
class Credential:
    """what a holder keeps after issuance; contains secrets"""

    issuer: Point
    holder_id: str
    secrets: Dict[str, SecretKey] = field(default_factory=dict)
    rings: Dict[str, Ring] = field(default_factory=dict)
    indices: Dict[str, int] = field(default_factory=dict)
    issued_at: str = ""

    def __repr__(self):
        return f"Credential(holder_id={self.holder_id!r}, attributes={sorted(self.rings)})"

    def attributes(self) -> List[str]:
        return list(self.rings)

    def prove(self, attribute: str, message: MessageLike) -> RingSignature:
        """sign a verifier's challenge with the key held for `attribute`"""
        if attribute not in self.secrets:
            raise InvalidParameter(f"credential holds no key for attribute {attribute!r}")
        return sign(message, self.rings[attribute], self.indices[attribute], self.secrets[attribute])

    def wipe(self) -> None:
        for sk in self.secrets.values():
            sk.wipe()
        self.secrets.clear()

    def to_dict(self) -> dict:
        """explicit serialization boundary: secrets leave as hex only here"""
        return {
            "issuer": self.issuer.to_hex(),
            "holder_id": self.holder_id,
            "secrets": {attr: sk.to_hex() for attr, sk in self.secrets.items()},
            "rings": {attr: [pk.to_hex() for pk in ring] for attr, ring in self.rings.items()},
            "indices": dict(self.indices),
            "issued_at": self.issued_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Credential":
        try:
            credential = cls(
                issuer=Point.from_hex(data["issuer"]),
                holder_id=data["holder_id"],
                secrets={attr: SecretKey.from_hex(v) for attr, v in data["secrets"].items()},
                rings={
                    attr: tuple(Point.from_hex(pk) for pk in ring)
                    for attr, ring in data["rings"].items()
                },
                indices={attr: int(i) for attr, i in data["indices"].items()},
                issued_at=data.get("issued_at", ""),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise CredentialError(f"malformed credential: {e}") from e

        for attr, sk in credential.secrets.items():
            ring = credential.rings.get(attr)
            idx = credential.indices.get(attr)
            if ring is None or idx is None or not 0 <= idx < len(ring) or ring[idx] != sk.public_key():
                raise CredentialError(f"credential key for {attr!r} does not match its ring")
        return credential


def issue_credential(
    env: CredentialEnvironment,
    issuer: KeyPair,
    holder_id: str,
    attributes: Iterable[str],
    decoys: Optional[int] = None,
) -> Credential:
    """
    issue a credential for `attributes`, writing one ring per attribute.

    args:
        env: environment holding the attribute rings
        issuer: key pair of a registered issuer
        holder_id: caller's label for the holder (never written to the env)
        attributes: approved attribute names, e.g. ["over_18"]
        decoys: decoy keys per ring; defaults to config.default_decoys

    returns:
        Credential with one secret per attribute

    every attribute is checked before the first ring write. a concurrent
    writer can still make a later write fail, in which case the rings
    already written keep a holder key nobody holds.
    """
    attributes = [validate_attribute(a) for a in attributes]
    if not attributes:
        raise InvalidParameter("at least one attribute is required")
    if len(set(attributes)) != len(attributes):
        raise InvalidParameter("attributes must not repeat")
    if decoys is None:
        decoys = env.config.default_decoys
    _check_issuance(env, issuer, attributes, decoys)

    credential = Credential(
        issuer=issuer.pk,
        holder_id=holder_id,
        issued_at=datetime.now(timezone.utc).isoformat(),
    )

    for attribute in attributes:
        holder = generate_keypair()
        decoy_batch = generate_keys(decoys)
        ring, index = _place_holder(holder.pk, decoy_batch.publics)
        decoy_batch.wipe()

        authorization = authorize_ring(issuer, attribute, ring)
        stored = env.create_ring_for_attribute(authorization, attribute, ring)
        # with the merge policy the stored ring can be longer than ours
        index = stored.index(holder.pk)

        credential.secrets[attribute] = holder.sk
        credential.rings[attribute] = stored
        credential.indices[attribute] = index
        logger.info("issued %s key in a ring of %d", attribute, len(stored))

    return credential


def _check_issuance(env: CredentialEnvironment, issuer: KeyPair, attributes: List[str], decoys: int) -> None:
    cfg = env.config
    if not isinstance(decoys, int) or decoys < cfg.min_ring_size - 1:
        raise InvalidParameter(f"need at least {cfg.min_ring_size - 1} decoys")
    if not env.registry.is_issuer(issuer.pk):
        raise Unauthorized("ring writes require a registered issuer")
    for attribute in attributes:
        size = decoys + 1
        existing = env.get_ring_for_attribute(attribute)
        if cfg.ring_update == "merge" and existing is not None:
            size += len(existing)
        if size > cfg.max_ring_size:
            raise InvalidRingSize(
                f"ring for {attribute} would have {size} members, max is {cfg.max_ring_size}"
            )


def _place_holder(holder: Point, decoys: List[Point]) -> Tuple[Tuple[Point, ...], int]:
    """put the holder key at a uniformly random ring position"""
    index = secrets.randbelow(len(decoys) + 1)
    ring = list(decoys)
    ring.insert(index, holder)
    return tuple(ring), index


def new_challenge(nonce_bytes: int = 16) -> str:
    """fresh per-attempt challenge: random nonce plus millisecond timestamp"""
    return f"{secrets.token_hex(nonce_bytes)}:{int(time.time() * 1000)}"


def _derive_key(password: str, salt: bytes, iterations: int) -> bytes:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=salt,
        iterations=iterations,
    )
    return kdf.derive(password.encode("utf-8"))


def encrypt_credential(credential: Credential, password: str,
                       iterations: int = DEFAULT_KDF_ITERATIONS) -> str:
    """base64(salt || nonce || aes-gcm ciphertext) of the credential json"""
    if not password:
        raise InvalidParameter("password must not be empty")
    salt = secrets.token_bytes(SALT_SIZE)
    nonce = secrets.token_bytes(NONCE_SIZE)
    key = _derive_key(password, salt, iterations)
    data = json.dumps(credential.to_dict()).encode("utf-8")
    encrypted = AESGCM(key).encrypt(nonce, data, None)
    return base64.b64encode(salt + nonce + encrypted).decode("ascii")


def decrypt_credential(blob: str, password: str,
                       iterations: int = DEFAULT_KDF_ITERATIONS) -> Credential:
    """inverse of encrypt_credential; wrong password -> CredentialError"""
    try:
        combined = base64.b64decode(blob, validate=True)
    except (TypeError, ValueError) as e:
        raise CredentialError(f"credential blob is not base64: {e}") from e
    if len(combined) <= SALT_SIZE + NONCE_SIZE:
        raise CredentialError("credential blob too short")

    salt = combined[:SALT_SIZE]
    nonce = combined[SALT_SIZE:SALT_SIZE + NONCE_SIZE]
    encrypted = combined[SALT_SIZE + NONCE_SIZE:]
    key = _derive_key(password, salt, iterations)
    try:
        data = AESGCM(key).decrypt(nonce, encrypted, None)
    except InvalidTag:
        raise CredentialError("wrong password or corrupted credential")
    try:
        payload = json.loads(data.decode("utf-8"))
    except ValueError as e:
        raise CredentialError(f"credential payload is not json: {e}") from e
    return Credential.from_dict(payload)

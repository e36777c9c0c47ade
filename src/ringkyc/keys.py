"""
key generation for ring members and credential identities

a key pair is a random non-zero scalar sk and its public point pk = sk*G.
secrets are handed back to the caller and never retained here.
"""

from dataclasses import dataclass
from typing import List

from ringkyc.errors import InvalidParameter
from ringkyc.group import Point, SecretKey


@dataclass
class KeyPair:
    """secret/public key pair."""
    sk: SecretKey  # Secret key (scalar)
    pk: Point  # Public key (point)

    @classmethod
    def from_secret(cls, sk: SecretKey) -> "KeyPair":
        """rebuild a key pair; the public point is derived from the secret"""
        return cls(sk=sk, pk=sk.public_key())

    def __repr__(self):
        return f"KeyPair(pk={self.pk!r})"


@dataclass
class KeyBatch:
    """parallel sequences of secrets and publics, in generation order"""
    secrets: List[SecretKey]
    publics: List[Point]

    def __len__(self):
        return len(self.publics)

    def pairs(self) -> List[KeyPair]:
        return [KeyPair(sk=sk, pk=pk) for sk, pk in zip(self.secrets, self.publics)]

    def wipe(self) -> None:
        """zero every secret in the batch (e.g. decoys nobody should hold)"""
        for sk in self.secrets:
            sk.wipe()
        self.secrets = []


def generate_keypair() -> KeyPair:
    """Generate a new key pair."""
    return KeyPair.from_secret(SecretKey.random())


def generate_keys(count: int) -> KeyBatch:
    """
    Generate `count` independent key pairs.

    Args:
        count: number of key pairs, at least 1

    Returns:
        KeyBatch with parallel secrets/publics lists
    """
    if not isinstance(count, int) or isinstance(count, bool) or count < 1:
        raise InvalidParameter(f"count must be a positive integer, got {count!r}")

    batch = KeyBatch(secrets=[], publics=[])
    for _ in range(count):
        pair = generate_keypair()
        batch.secrets.append(pair.sk)
        batch.publics.append(pair.pk)
    return batch

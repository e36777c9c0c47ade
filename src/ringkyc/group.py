"""
group arithmetic over the bls12-381 G1 subgroup

thin wrapper around py_ecc's optimized bls12-381 implementation. everything
above this module works with two types only:

- Point: a G1 element (public keys, commitments)
- SecretKey: an owned secret scalar that is never copied implicitly

points encode to 96 bytes (uncompressed affine x || y, big-endian), the
width used for on-chain key storage. scalars encode to 32 bytes big-endian.
"""

from __future__ import annotations

import secrets
from hashlib import blake2b

from py_ecc.optimized_bls12_381 import (
    FQ,
    G1 as _G1,
    Z1 as _Z1,
    add,
    b as _B,
    curve_order,
    eq,
    field_modulus,
    is_inf,
    is_on_curve,
    multiply,
    neg,
    normalize,
)

from ringkyc.errors import InvalidParameter


CURVE_ORDER = curve_order
POINT_SIZE = 96
SCALAR_SIZE = 32
_COORD_SIZE = POINT_SIZE // 2

DOMAIN_SCALAR = b"ringkyc/scalar/v1"


class Point:
    """element of the bls12-381 G1 group"""

    __slots__ = ("_pt",)

    def __init__(self, pt):
        self._pt = pt

    def __add__(self, other: "Point") -> "Point":
        return Point(add(self._pt, other._pt))

    def __sub__(self, other: "Point") -> "Point":
        return Point(add(self._pt, neg(other._pt)))

    def __neg__(self) -> "Point":
        return Point(neg(self._pt))

    def __mul__(self, k: int) -> "Point":
        if not isinstance(k, int):
            return NotImplemented
        k %= CURVE_ORDER
        if k == 0:
            return INFINITY
        return Point(multiply(self._pt, k))

    __rmul__ = __mul__

    def __eq__(self, other):
        if isinstance(other, Point):
            return eq(self._pt, other._pt)
        return False

    def __hash__(self):
        return hash(self.to_bytes())

    def __repr__(self):
        return f"Point({self.to_hex()[:16]}...)"

    def is_infinity(self) -> bool:
        return is_inf(self._pt)

    def to_bytes(self) -> bytes:
        """uncompressed affine encoding; the identity encodes as all zeros"""
        if self.is_infinity():
            return bytes(POINT_SIZE)
        x, y = normalize(self._pt)
        return x.n.to_bytes(_COORD_SIZE, "big") + y.n.to_bytes(_COORD_SIZE, "big")

    def to_hex(self) -> str:
        return self.to_bytes().hex()

    @classmethod
    def from_bytes(cls, data: bytes) -> "Point":
        """
        decode a 96-byte point.

        rejects the identity, coordinates outside the base field, points off
        the curve and points outside the prime-order subgroup, so every
        decoded point is usable as a public key.
        """
        if not isinstance(data, (bytes, bytearray)) or len(data) != POINT_SIZE:
            raise InvalidParameter(f"point must be {POINT_SIZE} bytes")
        x = int.from_bytes(data[:_COORD_SIZE], "big")
        y = int.from_bytes(data[_COORD_SIZE:], "big")
        if x == 0 and y == 0:
            raise InvalidParameter("identity point is not a valid key")
        if x >= field_modulus or y >= field_modulus:
            raise InvalidParameter("point coordinate outside base field")
        pt = (FQ(x), FQ(y), FQ.one())
        if not is_on_curve(pt, _B):
            raise InvalidParameter("point is not on the curve")
        if not is_inf(multiply(pt, CURVE_ORDER)):
            raise InvalidParameter("point is not in the G1 subgroup")
        return cls(pt)

    @classmethod
    def from_hex(cls, value: str) -> "Point":
        try:
            data = bytes.fromhex(value)
        except (TypeError, ValueError) as e:
            raise InvalidParameter(f"invalid point hex: {e}") from e
        return cls.from_bytes(data)


G = Point(_G1)
INFINITY = Point(_Z1)


class SecretKey:
    """
    secret scalar with explicit serialization boundaries.

    the scalar lives in a private bytearray that wipe() zeroes; repr never
    shows it and pickling is refused so it cannot leak through generic
    containers. python ints derived from it are immutable and cannot be
    scrubbed, so wiping is best effort.
    """

    __slots__ = ("_buf",)

    def __init__(self, value: int):
        if not isinstance(value, int) or not 0 < value < CURVE_ORDER:
            raise InvalidParameter("secret scalar must be in [1, r)")
        self._buf = bytearray(value.to_bytes(SCALAR_SIZE, "big"))

    @property
    def scalar(self) -> int:
        if not any(self._buf):
            raise InvalidParameter("secret key has been wiped")
        return int.from_bytes(self._buf, "big")

    def public_key(self) -> Point:
        return G * self.scalar

    def to_bytes(self) -> bytes:
        if not any(self._buf):
            raise InvalidParameter("secret key has been wiped")
        return bytes(self._buf)

    def to_hex(self) -> str:
        # hex() reads the buffer directly so no intermediate int is created
        if not any(self._buf):
            raise InvalidParameter("secret key has been wiped")
        return self._buf.hex()

    @classmethod
    def from_bytes(cls, data: bytes) -> "SecretKey":
        if not isinstance(data, (bytes, bytearray)) or len(data) != SCALAR_SIZE:
            raise InvalidParameter(f"secret key must be {SCALAR_SIZE} bytes")
        return cls(int.from_bytes(data, "big"))

    @classmethod
    def from_hex(cls, value: str) -> "SecretKey":
        try:
            data = bytes.fromhex(value)
        except (TypeError, ValueError) as e:
            raise InvalidParameter(f"invalid secret key hex: {e}") from e
        return cls.from_bytes(data)

    @classmethod
    def random(cls) -> "SecretKey":
        return cls(random_scalar())

    def wipe(self) -> None:
        buf = getattr(self, "_buf", None)
        if buf is None:
            return
        for i in range(len(buf)):
            buf[i] = 0

    def __del__(self):
        self.wipe()

    def __eq__(self, other):
        if isinstance(other, SecretKey):
            return secrets.compare_digest(bytes(self._buf), bytes(other._buf))
        return False

    __hash__ = None

    def __repr__(self):
        return "SecretKey(<redacted>)"

    def __reduce__(self):
        raise TypeError("SecretKey cannot be pickled; use to_hex() explicitly")

    def __copy__(self):
        raise TypeError("SecretKey cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("SecretKey cannot be copied")


def random_scalar() -> int:
    """uniform scalar in [1, r) from the os csprng"""
    return secrets.randbelow(CURVE_ORDER - 1) + 1


def hash_to_scalar(*parts: bytes) -> int:
    """
    hash byte strings to a scalar mod r.

    uses a 64-byte blake2b digest so the reduction bias is negligible. each
    part is length-prefixed to keep concatenations unambiguous.
    """
    hasher = blake2b(digest_size=64, person=b"ringkyc-h2s")
    hasher.update(DOMAIN_SCALAR)
    for part in parts:
        hasher.update(len(part).to_bytes(8, "big"))
        hasher.update(part)
    return int.from_bytes(hasher.digest(), "big") % CURVE_ORDER


def scalar_to_bytes(value: int) -> bytes:
    return (value % CURVE_ORDER).to_bytes(SCALAR_SIZE, "big")


def scalar_from_bytes(data: bytes) -> int:
    """decode a canonical scalar; values >= r are rejected, not reduced"""
    if not isinstance(data, (bytes, bytearray)) or len(data) != SCALAR_SIZE:
        raise InvalidParameter(f"scalar must be {SCALAR_SIZE} bytes")
    value = int.from_bytes(data, "big")
    if value >= CURVE_ORDER:
        raise InvalidParameter("scalar is not reduced mod r")
    return value

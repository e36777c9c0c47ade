"""
Tests for the BLS12-381 G1 wrapper and the SecretKey type
"""

import copy
import pickle

import pytest

from ringkyc.errors import InvalidParameter
from ringkyc.group import (
    CURVE_ORDER,
    G,
    INFINITY,
    POINT_SIZE,
    Point,
    SecretKey,
    hash_to_scalar,
    random_scalar,
    scalar_from_bytes,
    scalar_to_bytes,
)


class TestPoint:
    def test_generator_roundtrip(self):
        encoded = G.to_bytes()
        assert len(encoded) == POINT_SIZE
        assert Point.from_bytes(encoded) == G

    def test_hex_roundtrip(self):
        p = G * 12345
        assert Point.from_hex(p.to_hex()) == p

    def test_group_laws(self):
        assert G * 2 == G + G
        assert G * 5 - G * 2 == G * 3
        assert G + (-G) == INFINITY
        assert G * CURVE_ORDER == INFINITY
        assert 3 * G == G * 3

    def test_equal_points_hash_equal(self):
        assert hash(G * 7) == hash(G * 3 + G * 4)
        assert len({G * 7, G * 3 + G * 4}) == 1

    def test_identity_rejected(self):
        with pytest.raises(InvalidParameter):
            Point.from_bytes(bytes(POINT_SIZE))

    def test_wrong_length_rejected(self):
        with pytest.raises(InvalidParameter):
            Point.from_bytes(b"\x01" * 48)

    def test_off_curve_rejected(self):
        data = (1).to_bytes(48, "big") + (1).to_bytes(48, "big")
        with pytest.raises(InvalidParameter):
            Point.from_bytes(data)

    def test_bad_hex_rejected(self):
        with pytest.raises(InvalidParameter):
            Point.from_hex("zz")

    def test_mul_by_non_int(self):
        with pytest.raises(TypeError):
            G * 1.5


class TestScalars:
    def test_random_scalar_range(self):
        for _ in range(20):
            assert 0 < random_scalar() < CURVE_ORDER

    def test_hash_to_scalar_deterministic_and_separated(self):
        assert hash_to_scalar(b"a", b"b") == hash_to_scalar(b"a", b"b")
        # length prefixing keeps ("ab", "") and ("a", "b") apart
        assert hash_to_scalar(b"ab", b"") != hash_to_scalar(b"a", b"b")
        assert 0 <= hash_to_scalar(b"x") < CURVE_ORDER

    def test_scalar_encoding(self):
        assert scalar_from_bytes(scalar_to_bytes(42)) == 42

    def test_unreduced_scalar_rejected(self):
        with pytest.raises(InvalidParameter):
            scalar_from_bytes(CURVE_ORDER.to_bytes(32, "big"))


class TestSecretKey:
    def test_public_key_is_derived(self):
        sk = SecretKey(99)
        assert sk.public_key() == G * 99

    def test_range_enforced(self):
        with pytest.raises(InvalidParameter):
            SecretKey(0)
        with pytest.raises(InvalidParameter):
            SecretKey(CURVE_ORDER)

    def test_repr_is_redacted(self):
        sk = SecretKey(123456789)
        assert "123456789" not in repr(sk)
        assert sk.to_hex() not in repr(sk)

    def test_hex_roundtrip(self):
        sk = SecretKey.random()
        assert SecretKey.from_hex(sk.to_hex()) == sk
        assert SecretKey.from_bytes(sk.to_bytes()) == sk

    def test_pickle_refused(self):
        with pytest.raises(TypeError):
            pickle.dumps(SecretKey(5))

    def test_copy_refused(self):
        with pytest.raises(TypeError):
            copy.copy(SecretKey(5))
        with pytest.raises(TypeError):
            copy.deepcopy(SecretKey(5))

    def test_wipe(self):
        sk = SecretKey(77)
        sk.wipe()
        with pytest.raises(InvalidParameter):
            sk.scalar
        with pytest.raises(InvalidParameter):
            sk.to_hex()

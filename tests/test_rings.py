"""
Tests for the attribute ring store and issuer authorization
"""

import pytest

from ringkyc.config import EngineConfig
from ringkyc.errors import DuplicateMember, InvalidParameter, InvalidRingSize, Unauthorized
from ringkyc.keys import generate_keypair, generate_keys
from ringkyc.schnorr import IssuerAuthorization, authorize_ring
from ringkyc.state import CredentialEnvironment

from conftest import ADMIN


def test_create_and_get(write_ring, issuer_env):
    members = generate_keys(3).publics
    stored = write_ring("over_18", members)
    assert stored == tuple(members)
    assert issuer_env.get_ring_for_attribute("over_18") == tuple(members)


def test_missing_ring_is_none(issuer_env):
    assert issuer_env.get_ring_for_attribute("over_21") is None


def test_ring_too_small(write_ring):
    with pytest.raises(InvalidRingSize):
        write_ring("over_18", generate_keys(1).publics)
    with pytest.raises(InvalidRingSize):
        write_ring("over_18", [])


def test_ring_too_large():
    env = CredentialEnvironment(EngineConfig(max_ring_size=3))
    env.initialize(ADMIN)
    issuer = generate_keypair()
    env.register_issuer(issuer.pk, caller=ADMIN)
    members = generate_keys(4).publics
    with pytest.raises(InvalidRingSize):
        env.create_ring_for_attribute(authorize_ring(issuer, "big", members), "big", members)


def test_duplicate_member(write_ring):
    a, b = generate_keys(2).publics
    with pytest.raises(DuplicateMember):
        write_ring("over_18", [a, b, a])


def test_bad_attribute_name(write_ring):
    members = generate_keys(2).publics
    for name in ["", "has space", "x" * 33, "über"]:
        with pytest.raises(InvalidParameter):
            write_ring(name, members)


def test_unregistered_issuer_rejected(issuer_env):
    stranger = generate_keypair()
    members = generate_keys(2).publics
    auth = authorize_ring(stranger, "over_18", members)
    with pytest.raises(Unauthorized):
        issuer_env.create_ring_for_attribute(auth, "over_18", members)


def test_registered_key_without_secret_rejected(issuer_env, issuer):
    # presenting the registered public key with someone else's signature
    members = generate_keys(2).publics
    forged = authorize_ring(generate_keypair(), "over_18", members)
    auth = IssuerAuthorization(issuer=issuer.pk, signature=forged.signature)
    with pytest.raises(Unauthorized):
        issuer_env.create_ring_for_attribute(auth, "over_18", members)


def test_authorization_bound_to_members(issuer_env, issuer):
    members = generate_keys(3).publics
    auth = authorize_ring(issuer, "over_18", members[:2])
    with pytest.raises(Unauthorized):
        issuer_env.create_ring_for_attribute(auth, "over_18", members)


def test_authorization_bound_to_attribute(issuer_env, issuer):
    members = generate_keys(2).publics
    auth = authorize_ring(issuer, "over_18", members)
    with pytest.raises(Unauthorized):
        issuer_env.create_ring_for_attribute(auth, "over_21", members)


def test_overwrite_replaces_ring(write_ring, issuer_env):
    first = generate_keys(3).publics
    second = generate_keys(2).publics
    write_ring("over_18", first)
    write_ring("over_18", second)
    assert issuer_env.get_ring_for_attribute("over_18") == tuple(second)


def test_merge_policy_appends():
    env = CredentialEnvironment(EngineConfig(ring_update="merge"))
    env.initialize(ADMIN)
    issuer = generate_keypair()
    env.register_issuer(issuer.pk, caller=ADMIN)
    first = generate_keys(2).publics
    second = generate_keys(2).publics
    env.create_ring_for_attribute(authorize_ring(issuer, "over_18", first), "over_18", first)
    merged = env.create_ring_for_attribute(authorize_ring(issuer, "over_18", second), "over_18", second)
    assert merged == tuple(first + second)

    overlap = [first[0], generate_keys(1).publics[0]]
    with pytest.raises(DuplicateMember):
        env.create_ring_for_attribute(authorize_ring(issuer, "over_18", overlap), "over_18", overlap)
    assert env.get_ring_for_attribute("over_18") == tuple(first + second)


def test_merge_policy_appends_single_member():
    env = CredentialEnvironment(EngineConfig(ring_update="merge", max_ring_size=4))
    env.initialize(ADMIN)
    issuer = generate_keypair()
    env.register_issuer(issuer.pk, caller=ADMIN)
    first = generate_keys(3).publics
    env.create_ring_for_attribute(authorize_ring(issuer, "over_18", first), "over_18", first)

    holder = generate_keys(1).publics
    merged = env.create_ring_for_attribute(authorize_ring(issuer, "over_18", holder), "over_18", holder)
    assert merged == tuple(first + holder)

    # bounds apply to the merged ring
    extra = generate_keys(1).publics
    with pytest.raises(InvalidRingSize):
        env.create_ring_for_attribute(authorize_ring(issuer, "over_18", extra), "over_18", extra)
    assert env.get_ring_for_attribute("over_18") == tuple(first + holder)


def test_merge_policy_first_write_still_needs_min_size():
    env = CredentialEnvironment(EngineConfig(ring_update="merge"))
    env.initialize(ADMIN)
    issuer = generate_keypair()
    env.register_issuer(issuer.pk, caller=ADMIN)
    lone = generate_keys(1).publics
    with pytest.raises(InvalidRingSize):
        env.create_ring_for_attribute(authorize_ring(issuer, "over_18", lone), "over_18", lone)
    assert env.get_ring_for_attribute("over_18") is None


def test_idempotent_reads(write_ring, issuer_env):
    write_ring("over_18", generate_keys(3).publics)
    assert issuer_env.get_ring_for_attribute("over_18") == issuer_env.get_ring_for_attribute("over_18")
    assert issuer_env.list_issuers() == issuer_env.list_issuers()


def test_attributes_in_creation_order(write_ring, issuer_env):
    write_ring("over_18", generate_keys(2).publics)
    write_ring("resident", generate_keys(2).publics)
    assert issuer_env.attributes() == ["over_18", "resident"]


def test_authorization_dict_roundtrip(issuer):
    members = generate_keys(2).publics
    auth = authorize_ring(issuer, "over_18", members)
    restored = IssuerAuthorization.from_dict(auth.to_dict())
    assert restored.covers("over_18", members)


def test_authorization_from_bad_dict():
    with pytest.raises(InvalidParameter):
        IssuerAuthorization.from_dict({"issuer": "00"})

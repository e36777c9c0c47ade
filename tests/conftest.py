"""
ringkyc test fixtures
"""

import pytest

from ringkyc.keys import KeyPair, generate_keypair
from ringkyc.schnorr import authorize_ring
from ringkyc.state import CredentialEnvironment

ADMIN = "admin-A"


@pytest.fixture
def env() -> CredentialEnvironment:
    """An environment initialized with ADMIN and no issuers."""
    environment = CredentialEnvironment()
    environment.initialize(ADMIN)
    return environment


@pytest.fixture
def issuer() -> KeyPair:
    return generate_keypair()


@pytest.fixture
def issuer_env(env, issuer) -> CredentialEnvironment:
    """An environment with `issuer` registered."""
    env.register_issuer(issuer.pk, caller=ADMIN)
    return env


@pytest.fixture
def write_ring(issuer_env, issuer):
    """Write a ring through the environment with a valid issuer authorization."""

    def _write(attribute, members):
        auth = authorize_ring(issuer, attribute, members)
        return issuer_env.create_ring_for_attribute(auth, attribute, members)

    return _write

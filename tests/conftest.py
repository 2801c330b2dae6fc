import pytest
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from keystore.key_provider import KeyPair


@pytest.fixture(scope="session")
def rsa_key_pair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return KeyPair(private_key.public_key(), private_key)


@pytest.fixture(scope="session")
def other_rsa_key_pair():
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return KeyPair(private_key.public_key(), private_key)


@pytest.fixture(scope="session")
def ec_key_pair():
    private_key = ec.generate_private_key(ec.SECP256R1())
    return KeyPair(private_key.public_key(), private_key)

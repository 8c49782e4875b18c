"""
ConfTx Test Fixtures

Key generation is the expensive step, so the transfer keys are built
once per session for a narrow circuit (8-bit values, 8-bit scalars).
"""

import pytest

from conftx.crypto.elgamal import encrypt
from conftx.crypto.jubjub import Scalar
from conftx.keys import KeyPair
from conftx.transfer import CircuitParams, build_transfer, prove, setup

TEST_VALUE_BITS = 8
TEST_SCALAR_BITS = 8


@pytest.fixture(scope="session")
def params() -> CircuitParams:
    """Narrow circuit parameters for fast tests."""
    return CircuitParams(value_bits=TEST_VALUE_BITS, scalar_bits=TEST_SCALAR_BITS)


@pytest.fixture(scope="session")
def transfer_keys(params):
    """(ProvingKey, VerifyingKey) for the test circuit."""
    return setup(params, max_degree=1 << 12)


@pytest.fixture(scope="session")
def proving_key(transfer_keys):
    return transfer_keys[0]


@pytest.fixture(scope="session")
def verifying_key(transfer_keys):
    return transfer_keys[1]


@pytest.fixture(scope="session")
def prepared_vk(verifying_key):
    return verifying_key.prepare()


@pytest.fixture(scope="session")
def alice() -> KeyPair:
    return KeyPair.from_scalar(11, TEST_SCALAR_BITS)


@pytest.fixture(scope="session")
def bob() -> KeyPair:
    return KeyPair.from_scalar(23, TEST_SCALAR_BITS)


@pytest.fixture(scope="session")
def fee_collector() -> KeyPair:
    return KeyPair.from_scalar(37, TEST_SCALAR_BITS)


@pytest.fixture(scope="session")
def alice_balance(alice):
    """Alice's initial balance of 100, encrypted with fixed randomness."""
    return encrypt(alice.public, 100, Scalar.from_int(1))


@pytest.fixture(scope="session")
def signed_transfer(params, proving_key, alice, bob, fee_collector, alice_balance):
    """Alice sends 10 to Bob with fee 1 at nonce 1: (statement, witness, proof)."""
    statement, witness = build_transfer(
        sender=alice,
        balance=alice_balance,
        balance_value=100,
        recipient=bob.public,
        fee_collector=fee_collector.public,
        amount=10,
        fee=1,
        nonce=1,
        params=params,
    )
    proof = prove(witness, statement, proving_key)
    return statement, witness, proof

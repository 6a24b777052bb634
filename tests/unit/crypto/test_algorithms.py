"""Tests for signing algorithm selection."""

import pytest
from cryptography.hazmat.primitives.asymmetric import ec, ed448, ed25519, rsa, x25519

from seidan.core.errors import UnsupportedKeyTypeError
from seidan.crypto.algorithms import KeyFamily, key_family, select_algorithm


class TestSelectAlgorithm:
    """Tests for the key family to JWS algorithm mapping."""

    def test_rsa_uses_rs256(self) -> None:
        key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
        assert select_algorithm(key.public_key()) == "RS256"

    def test_p256_uses_es256(self) -> None:
        key = ec.generate_private_key(ec.SECP256R1())
        assert select_algorithm(key.public_key()) == "ES256"

    def test_ed25519_uses_eddsa(self) -> None:
        key = ed25519.Ed25519PrivateKey.generate()
        assert select_algorithm(key.public_key()) == "EdDSA"

    def test_family_of_p256(self) -> None:
        key = ec.generate_private_key(ec.SECP256R1())
        assert key_family(key.public_key()) is KeyFamily.EC_P256


class TestUnsupportedKeys:
    """Keys outside the closed set are rejected."""

    def test_p384_rejected(self) -> None:
        key = ec.generate_private_key(ec.SECP384R1())
        with pytest.raises(UnsupportedKeyTypeError, match="secp384r1"):
            select_algorithm(key.public_key())

    @pytest.mark.parametrize(
        "factory",
        [ed448.Ed448PrivateKey.generate, x25519.X25519PrivateKey.generate],
    )
    def test_other_families_rejected(self, factory) -> None:
        with pytest.raises(UnsupportedKeyTypeError, match="unsupported key type"):
            select_algorithm(factory().public_key())

"""Mapping from signing key family to JWS algorithm identifier."""

from enum import Enum

from cryptography.hazmat.primitives.asymmetric import ec, ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes

from seidan.core.errors import UnsupportedKeyTypeError


class KeyFamily(Enum):
    """Closed set of key families a cluster may sign with."""

    RSA = "RS256"
    EC_P256 = "ES256"
    ED25519 = "EdDSA"

    @property
    def algorithm(self) -> str:
        """JWS ``alg`` value used for tokens signed by this family."""
        return self.value


def key_family(public_key: PublicKeyTypes) -> KeyFamily:
    """Classify a public key, failing on anything outside the closed set."""
    if isinstance(public_key, rsa.RSAPublicKey):
        return KeyFamily.RSA
    if isinstance(public_key, ec.EllipticCurvePublicKey):
        if isinstance(public_key.curve, ec.SECP256R1):
            return KeyFamily.EC_P256
        raise UnsupportedKeyTypeError(
            f"unsupported key type: EC curve {public_key.curve.name}"
        )
    if isinstance(public_key, ed25519.Ed25519PublicKey):
        return KeyFamily.ED25519
    raise UnsupportedKeyTypeError(f"unsupported key type {type(public_key).__name__}")


def select_algorithm(public_key: PublicKeyTypes) -> str:
    """Return the JWS algorithm for the signing key's public half."""
    return key_family(public_key).algorithm

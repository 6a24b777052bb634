"""Key encodings: base64url transport, key identifiers, JWK, at-rest encryption."""

import base64
import binascii
import re

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.fernet import Fernet
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from jwt.algorithms import get_default_algorithms

from seidan.core.errors import InvalidHostKeyError, TokenSigningError

_RAW_URL_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


def b64url_encode(raw: bytes) -> str:
    """Encode bytes as base64url without padding."""
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def b64url_decode(value: str) -> bytes:
    """Strictly decode unpadded base64url, rejecting padding and stray bytes."""
    if not _RAW_URL_ALPHABET.fullmatch(value):
        raise ValueError("illegal base64url data: unexpected character")
    if len(value) % 4 == 1:
        raise ValueError("illegal base64url data: truncated input")
    padded = value + "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(padded)


def decode_host_key(encoded: str) -> PublicKeyTypes:
    """Parse a candidate host key from base64url-encoded DER SubjectPublicKeyInfo."""
    try:
        der = b64url_decode(encoded)
    except (ValueError, binascii.Error) as exc:
        raise InvalidHostKeyError(f"invalid host key encoding: {exc}") from exc
    try:
        return serialization.load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as exc:
        raise InvalidHostKeyError(f"invalid host key: {exc}") from exc


def encode_public_key(public_key: PublicKeyTypes) -> str:
    """Encode a public key the way host keys and key identifiers travel."""
    try:
        der = public_key.public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
        raise TokenSigningError(f"failed to encode signer key: {exc}") from exc
    return b64url_encode(der)


def public_key_to_jwk(
    public_key: PublicKeyTypes, kid: str, algorithm: str
) -> dict[str, str]:
    """Convert a signing public key to a JWK entry for verifiers."""
    alg_obj = get_default_algorithms()[algorithm]
    jwk = alg_obj.to_jwk(public_key, as_dict=True)
    jwk.update({"kid": kid, "alg": algorithm, "use": "sig"})
    return jwk


def encrypt_private_key(private_pem: str, fernet_key: str) -> str:
    """Encrypt a PEM private key with Fernet for keystore storage."""
    cipher = Fernet(fernet_key.encode())
    return cipher.encrypt(private_pem.encode()).decode()


def decrypt_private_key(encrypted: str, fernet_key: str) -> str:
    """Decrypt a Fernet-encrypted PEM private key."""
    cipher = Fernet(fernet_key.encode())
    return cipher.decrypt(encrypted.encode()).decode()

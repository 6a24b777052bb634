"""Directory-backed software security module.

Keys live under ``<root>/<quoted name>/<key id>.pem``; files ending in
``.pem.enc`` hold a Fernet-encrypted PEM and need the store's encryption key.
"""

import logging
from pathlib import Path
from urllib.parse import quote

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import ec, ed25519, padding, rsa
from cryptography.hazmat.primitives.asymmetric.types import (
    PrivateKeyTypes,
    PublicKeyTypes,
)

from seidan.core.errors import KeyLookupError, ModuleInitError, TokenSigningError
from seidan.crypto.keys import decrypt_private_key
from seidan.hsm.types import KeyHandle

logger = logging.getLogger(__name__)

PLAIN_SUFFIX = ".pem"
ENCRYPTED_SUFFIX = ".pem.enc"


class SoftwareKeyHandle:
    """Handle over a private key loaded from the software keystore."""

    def __init__(self, name: str, key_id: str, private_key: PrivateKeyTypes) -> None:
        self._name = name
        self._key_id = key_id
        self._private_key = private_key

    @property
    def display_name(self) -> str:
        return f"{self._name}/{self._key_id}"

    def public_key(self) -> PublicKeyTypes:
        return self._private_key.public_key()

    def sign(self, data: bytes) -> bytes:
        key = self._private_key
        if isinstance(key, rsa.RSAPrivateKey):
            return key.sign(data, padding.PKCS1v15(), hashes.SHA256())
        if isinstance(key, ec.EllipticCurvePrivateKey):
            return key.sign(data, ec.ECDSA(hashes.SHA256()))
        if isinstance(key, ed25519.Ed25519PrivateKey):
            return key.sign(data)
        raise TokenSigningError(
            f"software keystore cannot sign with {type(key).__name__}"
        )

    def __str__(self) -> str:
        return self.display_name


class SoftwareKeyStore:
    """Security module that reads PEM private keys from a directory."""

    def __init__(self, root: Path, encryption_key: str = "") -> None:
        if not root.is_dir():
            raise ModuleInitError(f"keystore directory {root} does not exist")
        if encryption_key:
            try:
                Fernet(encryption_key.encode())
            except ValueError as exc:
                raise ModuleInitError(f"invalid keystore encryption key: {exc}") from exc
        self._root = root
        self._encryption_key = encryption_key

    def list_keys_by_name(self, name: str) -> list[KeyHandle]:
        """Return every key stored under ``name``, ordered by file name."""
        key_dir = self._root / quote(name, safe="")
        if not key_dir.is_dir():
            return []
        handles: list[KeyHandle] = []
        for path in sorted(key_dir.iterdir()):
            if path.name.endswith(ENCRYPTED_SUFFIX):
                key_id = path.name.removesuffix(ENCRYPTED_SUFFIX)
            elif path.name.endswith(PLAIN_SUFFIX):
                key_id = path.name.removesuffix(PLAIN_SUFFIX)
            else:
                continue
            handles.append(SoftwareKeyHandle(name, key_id, self._load(path)))
        logger.debug("Found %d key(s) named %s", len(handles), name)
        return handles

    def close(self) -> None:
        """Nothing to release; keys are read per lookup."""

    def _load(self, path: Path) -> PrivateKeyTypes:
        try:
            pem = path.read_text()
        except OSError as exc:
            raise KeyLookupError(f"failed to read {path}: {exc}") from exc
        if path.name.endswith(ENCRYPTED_SUFFIX):
            if not self._encryption_key:
                raise KeyLookupError(f"{path} is encrypted but no encryption key is set")
            try:
                pem = decrypt_private_key(pem, self._encryption_key)
            except InvalidToken as exc:
                raise KeyLookupError(f"failed to decrypt {path}") from exc
        try:
            return serialization.load_pem_private_key(pem.encode(), password=None)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise KeyLookupError(f"failed to parse {path}: {exc}") from exc

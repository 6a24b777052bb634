"""Capability interfaces exposed by security module backends."""

from typing import Protocol

from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes


class KeyHandle(Protocol):
    """Reference to a private key held by a security module.

    The private key material never leaves the module. ``sign`` hashes and
    signs ``data`` with the key family's SHA-256 scheme: RSA PKCS#1 v1.5,
    ECDSA returning a DER signature, or pure Ed25519.
    """

    @property
    def display_name(self) -> str: ...

    def public_key(self) -> PublicKeyTypes: ...

    def sign(self, data: bytes) -> bytes: ...


class SecurityModule(Protocol):
    """A key store that can enumerate keys by name."""

    def list_keys_by_name(self, name: str) -> list[KeyHandle]: ...

    def close(self) -> None: ...

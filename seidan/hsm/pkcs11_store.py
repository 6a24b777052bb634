"""PKCS#11 security module backend built on python-pkcs11.

The backend holds one session for the process lifetime and works with key
objects only; private key material is never extracted.
"""

import logging
from typing import Any

import pkcs11
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa
from cryptography.hazmat.primitives.asymmetric.types import PublicKeyTypes
from pkcs11 import Attribute, KeyType, Mechanism, ObjectClass
from pkcs11.exceptions import AttributeTypeInvalid, PKCS11Error
from pkcs11.util.ec import encode_ec_public_key, encode_ecdsa_signature

from seidan.core.errors import (
    KeyLookupError,
    ModuleInitError,
    TokenSigningError,
    UnsupportedKeyTypeError,
)
from seidan.core.settings import ModuleSettings
from seidan.hsm.types import KeyHandle

logger = logging.getLogger(__name__)

_SIGN_MECHANISMS = {
    KeyType.RSA: Mechanism.SHA256_RSA_PKCS,
    KeyType.EC: Mechanism.ECDSA_SHA256,
    KeyType.EC_EDWARDS: Mechanism.EDDSA,
}

ED25519_KEY_SIZE = 32


def _format_exception(exc: Exception) -> str:
    details = str(exc).strip()
    if details:
        return f"{type(exc).__name__}: {details}"
    return type(exc).__name__


def _unwrap_ec_point(point: bytes) -> bytes:
    """Strip the DER OCTET STRING wrapper some tokens put around EC_POINT."""
    if len(point) == ED25519_KEY_SIZE + 2 and point[0] == 0x04:
        return point[2:]
    return point


def _to_public_key(key_type: KeyType, public: Any) -> PublicKeyTypes:
    if key_type == KeyType.RSA:
        return rsa.RSAPublicNumbers(
            e=int.from_bytes(public[Attribute.PUBLIC_EXPONENT], "big"),
            n=int.from_bytes(public[Attribute.MODULUS], "big"),
        ).public_key()
    if key_type == KeyType.EC:
        return serialization.load_der_public_key(encode_ec_public_key(public))
    if key_type == KeyType.EC_EDWARDS:
        raw = _unwrap_ec_point(public[Attribute.EC_POINT])
        return ed25519.Ed25519PublicKey.from_public_bytes(raw)
    raise UnsupportedKeyTypeError(f"unsupported key type {key_type}")


class Pkcs11KeyHandle:
    """Handle over a private key object on a PKCS#11 token."""

    def __init__(self, session: Any, private_key: Any) -> None:
        self._session = session
        self._private_key = private_key
        self._key_type = private_key[Attribute.KEY_TYPE]
        self._public_key: PublicKeyTypes | None = None

    @property
    def display_name(self) -> str:
        label = self._private_key[Attribute.LABEL]
        key_id = self._key_id()
        if key_id:
            return f"{label}/{key_id.hex()}"
        return label

    def public_key(self) -> PublicKeyTypes:
        if self._public_key is None:
            self._public_key = _to_public_key(self._key_type, self._find_public())
        return self._public_key

    def sign(self, data: bytes) -> bytes:
        mechanism = _SIGN_MECHANISMS.get(self._key_type)
        if mechanism is None:
            raise UnsupportedKeyTypeError(f"unsupported key type {self._key_type}")
        try:
            signature = self._private_key.sign(data, mechanism=mechanism)
        except PKCS11Error as exc:
            raise TokenSigningError(
                f"signing failed: {_format_exception(exc)}"
            ) from exc
        if self._key_type == KeyType.EC:
            return encode_ecdsa_signature(signature)
        return signature

    def _key_id(self) -> bytes:
        try:
            return self._private_key[Attribute.ID] or b""
        except AttributeTypeInvalid:
            return b""

    def _find_public(self) -> Any:
        key_id = self._key_id()
        try:
            if key_id:
                return self._session.get_key(
                    object_class=ObjectClass.PUBLIC_KEY, id=key_id
                )
            return self._session.get_key(
                object_class=ObjectClass.PUBLIC_KEY,
                label=self._private_key[Attribute.LABEL],
            )
        except PKCS11Error as exc:
            raise KeyLookupError(
                f"no public key for {self.display_name}: {_format_exception(exc)}"
            ) from exc

    def __str__(self) -> str:
        return self.display_name


class Pkcs11KeyStore:
    """Security module backed by a PKCS#11 token."""

    def __init__(self, settings: ModuleSettings) -> None:
        if not settings.pkcs11_module:
            raise ModuleInitError("SEIDAN_HSM_PKCS11_MODULE is not set")
        try:
            lib = pkcs11.lib(settings.pkcs11_module)
            if settings.pkcs11_slot is not None:
                logger.info("Opening HSM session using slot=%s", settings.pkcs11_slot)
                token = lib.get_slots(token_present=True)[settings.pkcs11_slot].get_token()
            else:
                logger.info(
                    "Opening HSM session using token_label=%s",
                    settings.pkcs11_token_label,
                )
                token = lib.get_token(token_label=settings.pkcs11_token_label or None)
            self._session = token.open(user_pin=settings.pkcs11_pin or None)
        except Exception as exc:
            raise ModuleInitError(
                f"failed to open HSM session: {_format_exception(exc)}"
            ) from exc

    def list_keys_by_name(self, name: str) -> list[KeyHandle]:
        """Return private key objects labelled ``name`` in token order."""
        try:
            objects = list(
                self._session.get_objects(
                    {
                        Attribute.CLASS: ObjectClass.PRIVATE_KEY,
                        Attribute.LABEL: name,
                    }
                )
            )
        except PKCS11Error as exc:
            raise KeyLookupError(
                f"failed to list keys {name}: {_format_exception(exc)}"
            ) from exc
        return [Pkcs11KeyHandle(self._session, obj) for obj in objects]

    def close(self) -> None:
        self._session.close()
        logger.info("HSM session closed.")

"""PyJWT algorithms that sign through a security module key handle.

PyJWT expects raw private keys; these adapters accept a ``KeyHandle``
instead so the private key never leaves the module.
"""

from typing import Any

from jwt.algorithms import Algorithm, get_default_algorithms
from jwt.api_jws import PyJWS
from jwt.utils import der_to_raw_signature

from seidan.core.errors import SeidanError, TokenSigningError
from seidan.crypto.algorithms import KeyFamily, key_family
from seidan.hsm.types import KeyHandle


class HandleAlgorithm(Algorithm):
    """JWS algorithm whose signing key is a module-held handle."""

    def __init__(self, family: KeyFamily) -> None:
        self._family = family
        self._verifier = get_default_algorithms()[family.algorithm]

    def prepare_key(self, key: Any) -> KeyHandle:
        if not hasattr(key, "sign") or not hasattr(key, "public_key"):
            raise TypeError("Expected a security module key handle")
        if key_family(key.public_key()) is not self._family:
            raise TypeError(
                f"Key handle does not match algorithm {self._family.algorithm}"
            )
        return key

    def sign(self, msg: bytes, key: KeyHandle) -> bytes:
        try:
            signature = key.sign(msg)
        except SeidanError:
            raise
        except Exception as exc:
            raise TokenSigningError(f"signing failed: {exc}") from exc
        if self._family is KeyFamily.EC_P256:
            return der_to_raw_signature(signature, key.public_key().curve)
        return signature

    def verify(self, msg: bytes, key: Any, sig: bytes) -> bool:
        if hasattr(key, "public_key") and hasattr(key, "sign"):
            key = key.public_key()
        return self._verifier.verify(msg, self._verifier.prepare_key(key), sig)

    @staticmethod
    def to_jwk(key_obj: Any, as_dict: bool = False) -> Any:
        raise NotImplementedError("Key handles cannot be exported as JWK")

    @staticmethod
    def from_jwk(jwk: str | dict[str, Any]) -> Any:
        raise NotImplementedError("Key handles cannot be imported from JWK")


def build_jws() -> PyJWS:
    """Return a JWS encoder that only knows the handle-backed algorithms."""
    jws = PyJWS(algorithms=[])
    for family in KeyFamily:
        jws.register_algorithm(family.algorithm, HandleAlgorithm(family))
    return jws

"""Security module initialization."""

from seidan.core.settings import ModuleSettings
from seidan.hsm.software import SoftwareKeyStore
from seidan.hsm.types import SecurityModule


def initialize(settings: ModuleSettings) -> SecurityModule:
    """Open the configured security module backend."""
    if settings.backend == "pkcs11":
        # python-pkcs11 is an optional extra; only import it when selected.
        from seidan.hsm.pkcs11_store import Pkcs11KeyStore

        return Pkcs11KeyStore(settings)
    return SoftwareKeyStore(settings.keystore_dir, settings.encryption_key)

"""Exception hierarchy for token issuance failures.

Every failure is terminal for a CLI invocation; the classes only exist so
callers and tests can tell the failure kinds apart.
"""


class SeidanError(Exception):
    """Base class for all issuance failures."""


class ModuleInitError(SeidanError):
    """The security module could not be initialized."""


class KeyLookupError(SeidanError):
    """Querying the security module for keys failed."""


class NoSigningKeyError(KeyLookupError):
    """The lookup succeeded but returned no key for the cluster."""


class InvalidExpirationError(SeidanError):
    """The expiration day count is not a non-negative integer."""


class InvalidHostKeyError(SeidanError):
    """The candidate host key is not a base64url-encoded public key."""


class UnsupportedKeyTypeError(SeidanError):
    """The signing key is outside the supported key families."""


class TokenSigningError(SeidanError):
    """Encoding the signer key or producing the signature failed."""

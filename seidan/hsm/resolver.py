"""Locate the cluster signing key in the security module."""

import logging

from seidan.core.errors import KeyLookupError, NoSigningKeyError
from seidan.hsm.types import KeyHandle, SecurityModule

logger = logging.getLogger(__name__)

KEY_NAMESPACE = "seidan:"


def cluster_key_name(cluster: str) -> str:
    """Namespaced key name the cluster's signing key is stored under."""
    return KEY_NAMESPACE + cluster


def resolve_signing_key(module: SecurityModule, cluster: str) -> KeyHandle:
    """Return the first key registered for ``cluster``.

    When several keys share the name, the first in the module's listing
    order wins.
    """
    name = cluster_key_name(cluster)
    try:
        keys = module.list_keys_by_name(name)
    except OSError as exc:
        raise KeyLookupError(f"failed to list HSM keys: {exc}") from exc
    if not keys:
        raise NoSigningKeyError(
            f"failed to list HSM keys: no keys named {name}. Please provision one."
        )
    key = keys[0]
    logger.info("found key: %s", key.display_name)
    return key

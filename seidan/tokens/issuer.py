"""Host membership token issuance."""

import json
import logging
import re
from datetime import UTC, datetime

from seidan.core.errors import InvalidExpirationError
from seidan.crypto.algorithms import select_algorithm
from seidan.crypto.jws import build_jws
from seidan.crypto.keys import decode_host_key, encode_public_key
from seidan.crypto.types import HostTokenClaims, HostTokenRequest
from seidan.hsm.types import KeyHandle

logger = logging.getLogger(__name__)

DIRECTORY_AUDIENCE = "directory.atonline.com"
SECONDS_PER_DAY = 86400

_DAY_COUNT = re.compile(r"\+?[0-9]+")


def parse_expiration_days(raw: str | None) -> int:
    """Parse the optional expiration argument; absent means no expiry."""
    if raw is None:
        return 0
    if not _DAY_COUNT.fullmatch(raw):
        raise InvalidExpirationError(f"invalid expiration {raw!r}: expected days >= 0")
    return int(raw)


class HostTokenIssuer:
    """Issues cluster membership tokens signed by a security module key."""

    def __init__(self, signing_key: KeyHandle, cluster: str) -> None:
        self._signing_key = signing_key
        self._cluster = cluster

    def build_claims(self, request: HostTokenRequest) -> HostTokenClaims:
        """Assemble the claim set, stamping ``iat`` with the current time."""
        issued_at = int(datetime.now(UTC).timestamp())
        expires_at = None
        if request.expiration_days > 0:
            expires_at = issued_at + request.expiration_days * SECONDS_PER_DAY
        return HostTokenClaims(
            iss=self._cluster,
            iat=issued_at,
            sub=request.key,
            nam=request.name,
            aud=DIRECTORY_AUDIENCE,
            exp=expires_at,
        )

    def issue(self, request: HostTokenRequest) -> str:
        """Validate the host key and return a signed compact token."""
        decode_host_key(request.key)
        public_key = self._signing_key.public_key()
        algorithm = select_algorithm(public_key)
        kid = encode_public_key(public_key)
        claims = self.build_claims(request)
        payload = json.dumps(
            claims.model_dump(exclude_none=True), separators=(",", ":")
        ).encode()
        token = build_jws().encode(
            payload,
            self._signing_key,
            algorithm=algorithm,
            headers={"kid": kid},
        )
        logger.debug("Issued %s token for %s", algorithm, request.name)
        return token

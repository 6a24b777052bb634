"""Command-line entry point for issuing cluster membership tokens."""

import json
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from pydantic import ValidationError

from seidan.core.errors import ModuleInitError, SeidanError
from seidan.core.settings import ClusterSettings, LogSettings, ModuleSettings
from seidan.crypto.algorithms import select_algorithm
from seidan.crypto.keys import encode_public_key, public_key_to_jwk
from seidan.crypto.types import HostTokenRequest
from seidan.hsm.module import initialize
from seidan.hsm.resolver import resolve_signing_key
from seidan.hsm.types import KeyHandle
from seidan.tokens.issuer import HostTokenIssuer, parse_expiration_days

logger = logging.getLogger("seidan")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _configure_logging(settings: LogSettings) -> None:
    logging.basicConfig(
        level=settings.level.upper(), format=LOG_FORMAT, stream=sys.stderr
    )


def _cmd_gen(prog: str, args: list[str], key: KeyHandle, cluster: str) -> int:
    """Issue a token: ``gen name key [expiration]``."""
    if len(args) < 2:
        print(f"Usage: {prog} gen name key [expiration]")
        return 1
    request = HostTokenRequest(
        name=args[0],
        key=args[1],
        expiration_days=parse_expiration_days(args[2] if len(args) > 2 else None),
    )
    token = HostTokenIssuer(key, cluster).issue(request)
    print(token)
    return 0


def _cmd_pubkey(prog: str, args: list[str], key: KeyHandle, cluster: str) -> int:
    """Print the cluster signing key as a JWK."""
    public_key = key.public_key()
    jwk = public_key_to_jwk(
        public_key, encode_public_key(public_key), select_algorithm(public_key)
    )
    print(json.dumps(jwk, sort_keys=True))
    return 0


COMMANDS: dict[str, Callable[[str, list[str], KeyHandle, str], int]] = {
    "gen": _cmd_gen,
    "pubkey": _cmd_pubkey,
}


def _run(prog: str, command: str, args: list[str]) -> int:
    cluster = ClusterSettings().cluster
    try:
        module_settings = ModuleSettings()
    except ValidationError as exc:
        raise ModuleInitError(f"failed to initialize HSM: {exc}") from exc
    module = initialize(module_settings)
    try:
        key = resolve_signing_key(module, cluster)
        handler = COMMANDS.get(command.lower())
        if handler is None:
            logger.error("no valid command provided")
            return 1
        return handler(prog, args, key, cluster)
    finally:
        module.close()


def main(argv: list[str] | None = None) -> int:
    """Run the CLI and return the process exit status."""
    argv = sys.argv if argv is None else argv
    prog = Path(argv[0]).name if argv else "seidan"
    if len(argv) <= 1:
        print(f"Usage: {prog} command")
        return 0
    _configure_logging(LogSettings())
    try:
        return _run(prog, argv[1], argv[2:])
    except SeidanError as exc:
        logger.error("error: %s", exc)
        return 1


def run() -> None:
    """Console script entry point."""
    sys.exit(main())


if __name__ == "__main__":
    run()

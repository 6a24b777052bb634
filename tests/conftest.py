"""Shared test fixtures for seidan."""

from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric.types import PrivateKeyTypes

from seidan.crypto.keys import b64url_encode, encrypt_private_key

Provisioner = Callable[..., Path]


@pytest.fixture
def keystore_dir(tmp_path: Path) -> Path:
    """Empty software keystore directory."""
    path = tmp_path / "keys"
    path.mkdir(exist_ok=True)
    return path


@pytest.fixture(autouse=True)
def _set_env(monkeypatch: pytest.MonkeyPatch, keystore_dir: Path) -> None:
    """Point the software backend at a per-test keystore."""
    monkeypatch.delenv("CLUSTER", raising=False)
    monkeypatch.delenv("SEIDAN_HSM_ENCRYPTION_KEY", raising=False)
    monkeypatch.setenv("SEIDAN_HSM_BACKEND", "software")
    monkeypatch.setenv("SEIDAN_HSM_KEYSTORE_DIR", str(keystore_dir))


def private_pem(private_key: PrivateKeyTypes) -> str:
    return private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def provision(keystore_dir: Path) -> Provisioner:
    """Write a private key into the keystore under a key name."""

    def _provision(
        name: str,
        private_key: PrivateKeyTypes,
        key_id: str = "0001",
        fernet_key: str | None = None,
    ) -> Path:
        key_dir = keystore_dir / quote(name, safe="")
        key_dir.mkdir(exist_ok=True)
        pem = private_pem(private_key)
        if fernet_key is None:
            path = key_dir / f"{key_id}.pem"
            path.write_text(pem)
        else:
            path = key_dir / f"{key_id}.pem.enc"
            path.write_text(encrypt_private_key(pem, fernet_key))
        return path

    return _provision


@pytest.fixture
def host_key_b64() -> str:
    """A candidate host key in its transport encoding."""
    der = (
        ec.generate_private_key(ec.SECP256R1())
        .public_key()
        .public_bytes(
            encoding=serialization.Encoding.DER,
            format=serialization.PublicFormat.SubjectPublicKeyInfo,
        )
    )
    return b64url_encode(der)

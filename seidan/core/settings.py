"""Process settings loaded from environment variables."""

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CLUSTER = "default"
DEFAULT_LOG_LEVEL = "INFO"


def _default_keystore_dir() -> Path:
    return Path.home() / ".config" / "seidan" / "keys"


class ClusterSettings(BaseSettings):
    """Cluster identity, read once at startup."""

    model_config = SettingsConfigDict(env_prefix="")

    cluster: str = DEFAULT_CLUSTER

    @field_validator("cluster")
    @classmethod
    def _blank_means_default(cls, value: str) -> str:
        return value or DEFAULT_CLUSTER


class ModuleSettings(BaseSettings):
    """Security module backend selection and connection settings."""

    model_config = SettingsConfigDict(env_prefix="SEIDAN_HSM_")

    backend: Literal["software", "pkcs11"] = "software"
    keystore_dir: Path = Field(default_factory=_default_keystore_dir)
    encryption_key: str = ""
    pkcs11_module: str = ""
    pkcs11_token_label: str = ""
    pkcs11_slot: int | None = None
    pkcs11_pin: str = ""


class LogSettings(BaseSettings):
    """Logging verbosity for the CLI."""

    model_config = SettingsConfigDict(env_prefix="SEIDAN_LOG_")

    level: str = DEFAULT_LOG_LEVEL

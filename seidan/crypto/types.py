"""Type definitions for host token issuance."""

from pydantic import BaseModel, Field


class HostTokenRequest(BaseModel):
    """Caller-supplied parameters for a host membership token."""

    name: str
    key: str
    expiration_days: int = Field(default=0, ge=0)


class HostTokenClaims(BaseModel):
    """Claim set carried in a host membership token."""

    iss: str
    iat: int
    sub: str
    nam: str
    aud: str
    exp: int | None = None

"""Authentication schemas."""

from pydantic import BaseModel, ConfigDict


class SessionUser(BaseModel):
    """Identity stored by the browser session and used by the poller."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    full_name: str
    role: str


class Token(BaseModel):
    access_token: str
    token_type: str
    user: SessionUser


__all__ = ["SessionUser", "Token"]

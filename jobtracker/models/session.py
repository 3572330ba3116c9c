"""Authenticated identity and session records."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict

DEMO_USER_ID = "demo"


class Identity(BaseModel):
    """User identity as reported by the identity provider."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: Optional[str] = None
    email_verified: bool = False
    provider: str = "email"

    @property
    def requires_verification(self) -> bool:
        """Password users must confirm their email before they may sign in."""
        return self.provider == "email" and not self.email_verified


class Session(BaseModel):
    """An active session. Passed explicitly to every tool handler."""

    model_config = ConfigDict(frozen=True)

    identity: Identity
    access_token: Optional[str] = None
    is_demo: bool = False

    @property
    def user_id(self) -> str:
        return self.identity.id

    @property
    def email(self) -> Optional[str]:
        return self.identity.email


def demo_session() -> Session:
    """Session used when browsing the demo dataset without signing in."""
    return Session(
        identity=Identity(id=DEMO_USER_ID, email=None, email_verified=True, provider="demo"),
        is_demo=True,
    )

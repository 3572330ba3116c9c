"""
Session handling on top of an external identity provider.

The identity provider owns credentials; this module only decides whether a
reported session may be used. Password (email provider) users whose email
is not verified are signed out immediately, and every subscriber is told
that there is no session.
"""

import hashlib
import hmac
import logging
import os
from typing import Callable, List, Optional, Protocol

from jobtracker.models.errors import create_unauthorized_error
from jobtracker.models.session import Identity, Session

logger = logging.getLogger(__name__)

SessionCallback = Callable[[Optional[Session]], None]

UNVERIFIED_EMAIL_MESSAGE = "Please verify your email address before logging in"

_PBKDF2_ROUNDS = 100_000


class IdentityProvider(Protocol):
    """Capability contract of the hosted authentication service."""

    def get_session(self) -> Optional[Session]:
        ...

    def sign_out(self, session: Session) -> None:
        ...

    def update_password(self, session: Session, new_password: str) -> None:
        ...


class ConfigIdentityProvider:
    """
    Identity provider for the local single-user deployment.

    The identity comes from configuration; signing out drops it for the
    rest of the process lifetime. Password changes are kept in memory as a
    salted PBKDF2 hash.
    """

    def __init__(
        self,
        user_id: Optional[str],
        email: Optional[str] = None,
        email_verified: bool = False,
        provider: str = "email",
    ):
        self._session: Optional[Session] = None
        self._password_hash: Optional[bytes] = None
        self._salt = os.urandom(16)
        if user_id:
            self._session = Session(
                identity=Identity(
                    id=user_id, email=email, email_verified=email_verified, provider=provider
                )
            )

    def get_session(self) -> Optional[Session]:
        return self._session

    def sign_out(self, session: Session) -> None:
        if self._session is not None and self._session.user_id == session.user_id:
            self._session = None

    def _hash(self, password: str) -> bytes:
        return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), self._salt, _PBKDF2_ROUNDS)

    def update_password(self, session: Session, new_password: str) -> None:
        """
        Raises:
            ToolError: UNAUTHORIZED if ``session`` is not the signed-in identity
        """
        if self._session is None or self._session.user_id != session.user_id:
            raise create_unauthorized_error()
        self._password_hash = self._hash(new_password)

    def check_password(self, password: str) -> bool:
        if self._password_hash is None:
            return False
        return hmac.compare_digest(self._password_hash, self._hash(password))


class SessionManager:
    """
    Tracks the current session and notifies subscribers of changes.

    Usage:
        manager = SessionManager(provider)
        unsubscribe = manager.subscribe(lambda session: ...)
        session = manager.require_session()
    """

    def __init__(self, provider: IdentityProvider):
        self._provider = provider
        self._subscribers: List[SessionCallback] = []
        self._current: Optional[Session] = None
        self._rejected_unverified = False

    def subscribe(self, callback: SessionCallback) -> Callable[[], None]:
        """Register ``callback`` for session changes; returns an unsubscribe function."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _notify(self, session: Optional[Session]) -> None:
        for callback in list(self._subscribers):
            callback(session)

    def _set_current(self, session: Optional[Session]) -> None:
        changed = session != self._current
        self._current = session
        if changed:
            self._notify(session)

    def get_current_session(self) -> Optional[Session]:
        """
        Fetch the session from the provider and apply the verification guard.

        Returns:
            The usable session, or None when signed out or forcibly cleared
        """
        session = self._provider.get_session()
        if session is not None and session.identity.requires_verification:
            logger.warning("Rejecting session for unverified email user %s", session.user_id)
            self._rejected_unverified = True
            self._provider.sign_out(session)
            self._set_current(None)
            return None

        if session is not None:
            self._rejected_unverified = False
        self._set_current(session)
        return session

    def require_session(self) -> Session:
        """
        Like :meth:`get_current_session` but raise when there is none.

        Raises:
            ToolError: UNAUTHORIZED, with the session already cleared
        """
        session = self.get_current_session()
        if session is None:
            if self._rejected_unverified:
                raise create_unauthorized_error(UNVERIFIED_EMAIL_MESSAGE)
            raise create_unauthorized_error()
        return session

    def sign_out(self) -> None:
        """End the current session (if any) and notify subscribers."""
        session = self._current or self._provider.get_session()
        if session is not None:
            self._provider.sign_out(session)
            logger.info("Signed out user %s", session.user_id)
        self._rejected_unverified = False
        self._set_current(None)

    def update_password(self, session: Session, new_password: str) -> None:
        """Change the password of ``session`` at the identity provider."""
        self._provider.update_password(session, new_password)
        logger.info("Password changed for user %s", session.user_id)

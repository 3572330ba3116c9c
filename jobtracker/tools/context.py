"""
Explicit dependencies handed to every tool handler.

Handlers never reach for module-level state: the session and every
collaborator arrive through a ``ToolContext`` built by the server (or by a
test).
"""

from datetime import date
from typing import Callable, Optional

from jobtracker.db.applications_store import RecordStore
from jobtracker.db.profiles_store import ProfileStore
from jobtracker.models.errors import create_unauthorized_error
from jobtracker.models.session import Session
from jobtracker.utils.blob_store import LocalBlobStore
from jobtracker.utils.notifier import EmailNotifier
from jobtracker.utils.session_manager import SessionManager


class ToolContext:
    """Session plus collaborators for one tool invocation."""

    def __init__(
        self,
        session: Optional[Session],
        applications: RecordStore,
        profiles: ProfileStore,
        blobs: LocalBlobStore,
        notifier: EmailNotifier,
        sessions: Optional[SessionManager] = None,
        public_base_url: str = "http://localhost:5173",
        today: Callable[[], date] = date.today,
    ):
        """
        Args:
            session: Current session, demo session, or None when signed out
            applications: Record store (SQLite, or the demo mirror in demo mode)
            profiles: Profile store
            blobs: Blob store for resumes and profile media
            notifier: Transactional email sender
            sessions: Session manager used to sign out; optional in tests
            public_base_url: Base URL of the public site (profile links)
            today: Clock used for default dates and the weekly agenda
        """
        self.session = session
        self.applications = applications
        self.profiles = profiles
        self.blobs = blobs
        self.notifier = notifier
        self.sessions = sessions
        self.public_base_url = public_base_url
        self.today = today

    @property
    def is_demo(self) -> bool:
        return self.session is not None and self.session.is_demo

    def require_session(self) -> Session:
        """
        Raises:
            ToolError: UNAUTHORIZED when nobody is signed in, with the
                verification message when the identity's email is unverified
        """
        if self.session is None:
            if self.sessions is not None:
                self.session = self.sessions.require_session()
                return self.session
            raise create_unauthorized_error()
        return self.session

    def require_account(self) -> Session:
        """Like :meth:`require_session`, but demo sessions are rejected too."""
        session = self.require_session()
        if session.is_demo:
            raise create_unauthorized_error("Sign in to manage your profile and account")
        return session

    def update_password(self, session: Session, new_password: str) -> None:
        """
        Raises:
            ToolError: UNAUTHORIZED when no identity provider is attached
        """
        if self.sessions is None:
            raise create_unauthorized_error("Password changes need a signed-in account")
        self.sessions.update_password(session, new_password)

    def sign_out(self) -> None:
        if self.sessions is not None:
            self.sessions.sign_out()
        self.session = None

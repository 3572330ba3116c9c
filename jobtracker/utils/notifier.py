"""
Transactional email for security-relevant account events.

Emails are sent through a Resend-compatible HTTP API. Sending is
fire-and-forget: a failure is logged and reported as ``False`` but never
interrupts the account operation that triggered it.
"""

import logging
from typing import Dict, Optional, Tuple

import requests

from jobtracker.models.status import NotificationKind

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.resend.com/emails"
DEFAULT_SENDER = "JobTracker Security <onboarding@resend.dev>"

TEMPLATES: Dict[NotificationKind, Tuple[str, str]] = {
    NotificationKind.PASSWORD_CHANGE: (
        "Security Alert: Password Changed",
        """
        <div style="font-family: sans-serif; color: #333;">
          <h1 style="color: #2563eb;">Password Updated</h1>
          <p>The password for your <strong>JobTracker</strong> account was just changed.</p>
          <p><strong>Was this you?</strong><br/>If yes, you can safely ignore this email.</p>
          <p style="color: #dc2626;"><strong>If this wasn't you, please reset your password immediately.</strong></p>
        </div>
        """,
    ),
    NotificationKind.HIBERNATE: (
        "Your Account is now Hidden",
        """
        <div style="font-family: sans-serif; color: #333;">
          <h1 style="color: #4b5563;">Account Hibernated</h1>
          <p>Your JobTracker profile is now <strong>hidden from the public</strong>.</p>
          <p>Your data is safe, but no one can see your portfolio URL.</p>
          <p>To reactivate, simply log in to your dashboard.</p>
        </div>
        """,
    ),
    NotificationKind.DELETE_ACCOUNT: (
        "Account Permanently Deleted",
        """
        <div style="font-family: sans-serif; color: #333;">
          <h1 style="color: #dc2626;">Account Deleted</h1>
          <p>As requested, your account and all associated data have been <strong>permanently wiped</strong>.</p>
          <p>We are sorry to see you go.</p>
          <p>- The JobTracker Team</p>
        </div>
        """,
    ),
}


def render_email(kind: NotificationKind) -> Tuple[str, str]:
    """Return ``(subject, html)`` for a notification kind."""
    return TEMPLATES[NotificationKind(kind)]


class EmailNotifier:
    """Sends templated emails over HTTP."""

    def __init__(
        self,
        api_key: Optional[str],
        sender: str = DEFAULT_SENDER,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.sender = sender
        self.api_url = api_url
        self.timeout = timeout

    def build_payload(self, address: str, kind: NotificationKind) -> dict:
        subject, html = render_email(kind)
        return {"from": self.sender, "to": [address], "subject": subject, "html": html}

    def send(self, address: Optional[str], kind: NotificationKind) -> bool:
        """
        Send the ``kind`` email to ``address``.

        Returns:
            True if the API accepted the message, False if it was skipped or failed
        """
        if not address:
            logger.warning("Skipping %s email: no address on session", NotificationKind(kind).value)
            return False
        if not self.api_key:
            logger.info("Skipping %s email: no email API key configured", NotificationKind(kind).value)
            return False

        try:
            response = requests.post(
                self.api_url,
                json=self.build_payload(address, kind),
                headers={"Authorization": f"Bearer {self.api_key}"},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            logger.warning("Failed to send %s email: %s", NotificationKind(kind).value, e)
            return False

        logger.info("Sent %s email", NotificationKind(kind).value)
        return True

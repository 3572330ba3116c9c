"""
Username normalization and alternative suggestions for public profile URLs.
"""

import random
import re
from typing import Callable, List, Optional

from jobtracker.utils.validation import MIN_USERNAME_LENGTH

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9_-]")


def normalize_username(raw: Optional[str]) -> str:
    """
    Lowercase, trim and drop every character outside ``[a-z0-9_-]``.

    Examples:
        >>> normalize_username("  Jane.Doe! ")
        'janedoe'
    """
    if not raw:
        return ""
    return _DISALLOWED_CHARS.sub("", raw.lower().strip())


def candidate_usernames(base: str, rng: Optional[random.Random] = None) -> List[str]:
    """Variations offered when ``base`` is taken."""
    rng = rng or random.Random()
    return [f"{base}pro", f"{base}dev", f"iam{base}", f"{base}{rng.randint(0, 98)}"]


def suggest_usernames(
    base: str,
    is_taken: Callable[[str], bool],
    rng: Optional[random.Random] = None,
) -> List[str]:
    """Return the candidate variations of ``base`` that are still free."""
    if len(base) < MIN_USERNAME_LENGTH:
        return []
    return [name for name in candidate_usernames(base, rng) if not is_taken(name)]


def profile_url(public_base_url: str, username: str) -> str:
    """Shareable URL of a public profile page."""
    return f"{public_base_url.rstrip('/')}/p/{username}"

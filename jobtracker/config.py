"""
Configuration module for the JobTracker MCP server.

Provides centralized configuration management with support for:
- Environment variables (prefix ``JOBTRACKER_``)
- A ``.env`` file at the repository root
- Path resolution relative to the repository root
- Logging configuration
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from jobtracker.db.connection import DEFAULT_DB_PATH

# config.py is in jobtracker/, so .env is in the parent directory
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=_env_path)


def _parse_bool(env_var: str, default: bool) -> bool:
    """Parse a boolean value from an environment variable."""
    value = os.getenv(env_var)
    if value is None:
        return default
    return value.lower() in ("true", "1", "t", "y", "yes")


class Config:
    """
    Configuration class for MCP server settings.

    Supports configuration via environment variables (and .env file) with sensible defaults.
    All paths are resolved relative to the repository root.
    """

    def __init__(self):
        """Initialize configuration from environment variables and defaults."""
        self._repo_root = self._find_repo_root()

        # Storage
        self.db_path = self._resolve_db_path()
        self.blob_dir = self._resolve_path(os.getenv("JOBTRACKER_BLOB_DIR", "data/storage"))
        self.public_base_url = os.getenv("JOBTRACKER_PUBLIC_BASE_URL", "http://localhost:5173")

        # Logging
        self.log_level = os.getenv("JOBTRACKER_LOG_LEVEL", "INFO").upper()
        self.log_file = self._resolve_log_path()

        # Server
        self.server_name = os.getenv("JOBTRACKER_SERVER_NAME", "jobtracker-mcp-server")
        self.demo_mode = _parse_bool("JOBTRACKER_DEMO_MODE", False)

        # Identity of the local user
        self.user_id = os.getenv("JOBTRACKER_USER_ID") or None
        self.user_email = os.getenv("JOBTRACKER_USER_EMAIL") or None
        self.user_email_verified = _parse_bool("JOBTRACKER_USER_EMAIL_VERIFIED", False)
        self.auth_provider = os.getenv("JOBTRACKER_AUTH_PROVIDER", "email")

        # Transactional email
        self.resend_api_key = os.getenv("JOBTRACKER_RESEND_API_KEY") or None
        self.email_from = os.getenv(
            "JOBTRACKER_EMAIL_FROM", "JobTracker Security <onboarding@resend.dev>"
        )
        self.email_api_url = os.getenv("JOBTRACKER_EMAIL_API_URL", "https://api.resend.com/emails")
        self.email_timeout_seconds = float(os.getenv("JOBTRACKER_EMAIL_TIMEOUT_SECONDS", "10"))

    def _find_repo_root(self) -> Path:
        """Repository root: config.py lives in jobtracker/, one level down."""
        return Path(__file__).resolve().parent.parent

    def _resolve_path(self, value: str) -> Path:
        path = Path(value)
        if path.is_absolute():
            return path
        return self._repo_root / path

    def _resolve_db_path(self) -> Path:
        """
        Resolve the database path from environment or default.

        Resolution order:
        1. JOBTRACKER_DB environment variable (absolute or relative to the repo root)
        2. JOBTRACKER_ROOT/data/jobtracker.db
        3. Default: <repo_root>/data/jobtracker.db
        """
        db_env = os.getenv("JOBTRACKER_DB")
        if db_env:
            return self._resolve_path(db_env)

        root_env = os.getenv("JOBTRACKER_ROOT")
        if root_env:
            return Path(root_env) / DEFAULT_DB_PATH

        return self._repo_root / DEFAULT_DB_PATH

    def _resolve_log_path(self) -> Optional[Path]:
        """
        Resolve the log file path from JOBTRACKER_LOG_FILE.

        Returns:
            Path to log file, or None for stderr-only logging
        """
        log_env = os.getenv("JOBTRACKER_LOG_FILE")
        if not log_env:
            return None
        return self._resolve_path(log_env)

    def setup_logging(self):
        """
        Configure logging based on configuration settings.

        Sets up logging to stderr and optionally to a file.
        Log level is controlled by JOBTRACKER_LOG_LEVEL.
        """
        numeric_level = getattr(logging, self.log_level, logging.INFO)

        formatter = logging.Formatter(
            fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
        )

        root_logger = logging.getLogger()
        root_logger.setLevel(numeric_level)

        # Remove existing handlers to avoid duplicates
        root_logger.handlers.clear()

        stderr_handler = logging.StreamHandler()
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(formatter)
        root_logger.addHandler(stderr_handler)

        if self.log_file:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.log_file)
            file_handler.setLevel(numeric_level)
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

            logging.info(f"Logging to file: {self.log_file}")

        logging.info(f"Log level set to: {self.log_level}")
        logging.info(f"Repository root: {self._repo_root}")
        logging.info(f"Database path: {self.db_path}")

    def validate(self) -> list[str]:
        """
        Validate configuration and return any warnings.

        Returns:
            List of warning messages (empty if all valid)
        """
        warnings = []

        if not self.user_id and not self.demo_mode:
            warnings.append(
                "No JOBTRACKER_USER_ID configured and demo mode is off. "
                "Every tool except get_public_profile and check_username will answer UNAUTHORIZED."
            )

        if self.user_id and self.auth_provider == "email" and not self.user_email_verified:
            warnings.append(
                f"Email of user {self.user_id} is not verified; the session will be rejected."
            )

        if not self.resend_api_key:
            warnings.append("JOBTRACKER_RESEND_API_KEY not set; account emails will be skipped.")

        if self.log_file:
            log_dir = self.log_file.parent
            if not log_dir.exists():
                try:
                    log_dir.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    warnings.append(f"Cannot create log directory {log_dir}: {e}")
            elif not os.access(log_dir, os.W_OK):
                warnings.append(f"Log directory not writable: {log_dir}")

        return warnings


# Global configuration instance
config = Config()


def get_config() -> Config:
    """
    Get the global configuration instance.

    Returns:
        Global Config instance
    """
    return config

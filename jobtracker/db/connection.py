"""
SQLite connection management and schema bootstrap.

Every store call runs inside one connection/transaction: committed when the
block succeeds, rolled back on any exception, always closed.
"""

import os
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional, Union

from jobtracker.models.errors import create_db_error

# Default database path relative to repository root
DEFAULT_DB_PATH = "data/jobtracker.db"


def resolve_db_path(db_path: Optional[Union[str, Path]] = None) -> Path:
    """
    Resolve the database path with support for overrides and defaults.

    Resolution order:
    1. Provided db_path parameter
    2. JOBTRACKER_DB environment variable
    3. JOBTRACKER_ROOT/data/jobtracker.db
    4. Default path: data/jobtracker.db

    Args:
        db_path: Optional database path override

    Returns:
        Resolved absolute Path to the database
    """
    if db_path is not None:
        path_str = str(db_path)
    else:
        db_env = os.getenv("JOBTRACKER_DB")
        if db_env:
            path_str = db_env
        else:
            root_env = os.getenv("JOBTRACKER_ROOT")
            if root_env:
                return Path(root_env) / "data" / "jobtracker.db"
            path_str = DEFAULT_DB_PATH

    path = Path(path_str)

    # If relative, resolve from repository root
    if not path.is_absolute():
        repo_root = Path(__file__).resolve().parents[2]  # db/ -> jobtracker/ -> repo/
        path = repo_root / path

    return path


def ensure_parent_dirs(db_path: Path) -> None:
    """
    Ensure parent directories exist for the database file.

    Raises:
        ToolError: If directory creation fails
    """
    try:
        db_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise create_db_error(
            f"Failed to create parent directories: {str(e)}", retryable=False, original_error=e
        ) from e


def bootstrap_schema(conn: sqlite3.Connection) -> None:
    """
    Create the applications and profiles tables if they don't exist.

    The timeline is embedded as JSON in the application row, so deleting a
    row removes its history in the same statement. This operation is
    idempotent.
    """
    conn.execute("""
        CREATE TABLE IF NOT EXISTS applications (
            id TEXT PRIMARY KEY,
            user_id TEXT NOT NULL,
            company TEXT NOT NULL,
            position TEXT NOT NULL,
            status TEXT NOT NULL DEFAULT 'Applied',
            date_applied TEXT NOT NULL,
            salary TEXT,
            location TEXT,
            notes TEXT,
            interview_date TEXT,
            resume_url TEXT,
            resume_name TEXT,
            current_round TEXT,
            timeline_json TEXT NOT NULL DEFAULT '[]',
            created_at TEXT NOT NULL,
            updated_at TEXT
        )
    """)
    conn.execute("""
        CREATE INDEX IF NOT EXISTS idx_applications_user_created
        ON applications (user_id, created_at)
    """)
    conn.execute("""
        CREATE TABLE IF NOT EXISTS profiles (
            id TEXT PRIMARY KEY,
            username TEXT UNIQUE,
            full_name TEXT,
            header_text TEXT,
            about TEXT,
            location TEXT,
            avatar_url TEXT,
            cover_url TEXT,
            status TEXT NOT NULL DEFAULT 'active',
            experience TEXT,
            education TEXT,
            certifications TEXT,
            skills TEXT,
            interests TEXT,
            social_links TEXT,
            updated_at TEXT
        )
    """)


@contextmanager
def open_database(db_path: Path) -> Iterator[sqlite3.Connection]:
    """
    Open a read-write connection, bootstrapping the schema on first use.

    Yields:
        sqlite3.Connection with ``sqlite3.Row`` rows

    Raises:
        ToolError: DB_ERROR for connection, schema or statement failures
            (operational errors such as a locked database are retryable)
    """
    ensure_parent_dirs(db_path)

    conn = None
    try:
        conn = sqlite3.connect(str(db_path))
        conn.row_factory = sqlite3.Row
        bootstrap_schema(conn)
    except sqlite3.Error as e:
        if conn is not None:
            conn.close()
        raise create_db_error(str(e), retryable=True, original_error=e) from e

    try:
        yield conn
        conn.commit()
    except sqlite3.OperationalError as e:
        conn.rollback()
        raise create_db_error(str(e), retryable=True, original_error=e) from e
    except sqlite3.Error as e:
        conn.rollback()
        raise create_db_error(str(e), retryable=False, original_error=e) from e
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()

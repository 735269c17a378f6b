"""Enforcer database CLI, entry-point for key state maintenance.

Usage:
    python cli/main.py --help

Sub-command groups:
    db         → schema initialisation
    key-state  → create / show / list / set-state / delete key states
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from enforcer.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import typer

from cli.commands.key_state import key_state_app
from enforcer.config import settings
from enforcer.db import get_connection, init_db
from enforcer.logging_utils import get_logger

logger = get_logger(__name__)

app = typer.Typer(
    name="enforcer-db",
    help="Enforcer key state database CLI.",
    no_args_is_help=True,
)

# ---------------------------------------------------------------------------
# DB commands
# ---------------------------------------------------------------------------
db_app = typer.Typer(help="Database operations.", no_args_is_help=True)
app.add_typer(db_app, name="db")
app.add_typer(key_state_app, name="key-state")


@db_app.command("init")
def db_init() -> None:
    """Initialise the database (create tables if they do not exist)."""
    conn = get_connection()
    init_db(conn)
    conn.close()
    logger.info("Database initialised (%s backend)", settings.storage_backend)
    typer.echo(f"[db init] Database ready at {settings.db_path}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()

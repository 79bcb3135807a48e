"""Entry point for the Table POS Textual app."""

from __future__ import annotations

import logging
from pathlib import Path

from tablepos.config import db_path, log_path
from tablepos.database import PosDatabase
from tablepos.persistence import SqliteKeyValueStore
from tablepos.pos_app import PosApp


def configure_logging() -> None:
    """Send log records to a file; the terminal belongs to the UI."""
    path = Path(log_path())
    path.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        filename=path,
        level=logging.DEBUG,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main() -> None:
    """Run the Textual application; the operator signs in on start."""
    configure_logging()
    database = PosDatabase(SqliteKeyValueStore(db_path()))
    logging.getLogger(__name__).info("Starting with database %s", db_path())
    PosApp(database).run()


if __name__ == "__main__":
    main()

"""Backup files: the exported database written to and read from JSON files."""

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

from tablepos.database import InvalidBackup, PosDatabase

logger = logging.getLogger(__name__)


def backup_filename(now: datetime) -> str:
    return f"tablepos-backup-{now:%Y%m%d-%H%M%S}.json"


def write_backup(database: PosDatabase, directory: str | Path, now: datetime | None = None) -> Path:
    """Export every collection into a new file under ``directory``."""
    folder = Path(directory)
    folder.mkdir(parents=True, exist_ok=True)
    path = folder / backup_filename(now or datetime.now())
    path.write_text(json.dumps(database.export_database(), indent=2), encoding="utf-8")
    logger.info("Wrote backup %s", path)
    return path


def read_backup(database: PosDatabase, path: str | Path) -> None:
    """Import a backup file, replacing the stored collections."""
    source = Path(path).expanduser()
    try:
        payload = json.loads(source.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidBackup(f"Cannot read {source}: {exc.strerror or exc}") from exc
    except ValueError as exc:
        raise InvalidBackup(f"{source} is not valid JSON") from exc
    if not isinstance(payload, dict):
        raise InvalidBackup(f"{source} does not contain a backup")
    database.import_database(payload)

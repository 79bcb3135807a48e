"""Runtime configuration defaults for storage, backups, logging and printing."""

from __future__ import annotations

import os

DB_PATH = "data/tablepos.db"
LOG_PATH = "data/tablepos.log"
BACKUP_DIR = "data/backups"

DB_PATH_ENV = "TABLEPOS_DB_PATH"
LOG_PATH_ENV = "TABLEPOS_LOG_PATH"
BACKUP_DIR_ENV = "TABLEPOS_BACKUP_DIR"

PRINTER_USB_VENDOR_ID = 0x28E9
PRINTER_USB_PRODUCT_ID = 0x0289
PRINTER_WIDTH_PX = 384
PRINTER_FONT_SIZE = 22
PRINTER_FONT_PATH = "/System/Library/Fonts/SFNSMono.ttf"
PRINTER_FONT_ENV = "TABLEPOS_PRINTER_FONT_PATH"
PRINTER_LEFT_INDENT_PX = 8
PRINTER_LINE_CHARS = 32


def _from_env(name: str, default: str) -> str:
    value = os.environ.get(name, "").strip()
    return value or default


def db_path() -> str:
    """Database file path, honouring TABLEPOS_DB_PATH."""
    return _from_env(DB_PATH_ENV, DB_PATH)


def log_path() -> str:
    return _from_env(LOG_PATH_ENV, LOG_PATH)


def backup_dir() -> str:
    return _from_env(BACKUP_DIR_ENV, BACKUP_DIR)

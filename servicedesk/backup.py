"""
backup.py — Timestamped snapshots of the catalog files
=======================================================
A backup is a directory next to the live files:

    data/backup_20261019_093000/users.txt
    data/backup_20261019_093000/requests.txt

Files are copied byte for byte; nothing is decoded. The newest backup is
the one whose name sorts last. That holds because the timestamp is fixed
width, and a second backup within the same second gets a fixed-width
counter (backup_20261019_093000_001, _002, ...), which sorts after the
bare name and before the next second. Directories whose names do not fit
that pattern (backup_manual, backup_old) are ignored.
"""

import logging
import re
import shutil
from collections.abc import Callable
from datetime import datetime
from pathlib import Path

from servicedesk.errors import NoBackupError, PersistenceError
from servicedesk.persistence import FileHandler

logger = logging.getLogger(__name__)

BACKUP_PREFIX = "backup_"
BACKUP_TIMESTAMP_FORMAT = "%Y%m%d_%H%M%S"
BACKUP_NAME_PATTERN = re.compile(r"^backup_\d{8}_\d{6}(_\d{3})?$")


class BackupManager:
    def __init__(self, files: FileHandler, clock: Callable[[], datetime] = datetime.now) -> None:
        self.files = files
        self._clock = clock

    def list_backups(self) -> list[Path]:
        data_dir = self.files.data_dir
        if not data_dir.is_dir():
            return []
        return sorted(
            (p for p in data_dir.iterdir() if p.is_dir() and BACKUP_NAME_PATTERN.match(p.name)),
            key=lambda p: p.name,
        )

    def _next_backup_dir(self) -> Path:
        base = BACKUP_PREFIX + self._clock().strftime(BACKUP_TIMESTAMP_FORMAT)
        candidate = self.files.data_dir / base
        counter = 0
        while candidate.exists():
            counter += 1
            candidate = self.files.data_dir / f"{base}_{counter:03d}"
        return candidate

    def create_backup(self) -> Path:
        self.files.ensure_dirs()
        target = self._next_backup_dir()
        try:
            target.mkdir()
            for source in (self.files.users_file, self.files.requests_file):
                if source.exists():
                    shutil.copyfile(source, target / source.name)
        except OSError as e:
            raise PersistenceError(f"Cannot create backup {target}: {e}") from e
        logger.info("Backup created at %s", target)
        return target

    def restore_latest_backup(self) -> Path:
        self.files.ensure_dirs()
        backups = self.list_backups()
        if not backups:
            raise NoBackupError(f"No backups found in {self.files.data_dir}")
        latest = backups[-1]
        try:
            for live in (self.files.users_file, self.files.requests_file):
                snapshot = latest / live.name
                if snapshot.exists():
                    shutil.copyfile(snapshot, live)
                else:
                    # absent from the snapshot means absent when it was taken
                    live.unlink(missing_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot restore backup {latest}: {e}") from e
        self.files.load_data()
        logger.info("Restored catalog from %s", latest)
        return latest

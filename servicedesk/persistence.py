"""
persistence.py — File gateway between RequestManager and the data directory
============================================================================
Two files live in the data directory:

    users.txt     one encoded User per line
    requests.txt  one encoded ServiceRequest per line

save_data() writes each file to a temporary sibling first and then moves
it into place, users before requests. A crash halfway through leaves
the previous copy of the file being written and never touches the other.

load_data() treats missing files as an empty catalog (first run) and
skips any line the codec cannot read. Only a fully read catalog reaches
RequestManager.replace_all, so a failed load leaves memory as it was.
"""

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import Optional, TypeVar

from servicedesk.codec import decode_request, decode_user, encode_request, encode_user
from servicedesk.errors import PersistenceError
from servicedesk.store import RequestManager

logger = logging.getLogger(__name__)

USERS_FILENAME = "users.txt"
REQUESTS_FILENAME = "requests.txt"

T = TypeVar("T")


class FileHandler:
    def __init__(self, store: RequestManager, data_dir: os.PathLike | str = "data") -> None:
        self.store = store
        self.data_dir = Path(data_dir)

    @property
    def users_file(self) -> Path:
        return self.data_dir / USERS_FILENAME

    @property
    def requests_file(self) -> Path:
        return self.data_dir / REQUESTS_FILENAME

    def ensure_dirs(self) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise PersistenceError(f"Cannot create data directory {self.data_dir}: {e}") from e

    # ── Save ──────────────────────────────────────────────────────────────────

    def save_data(self) -> None:
        self.ensure_dirs()
        users = self.store.list_users()
        requests = self.store.list_all()
        self._write_lines(self.users_file, (encode_user(u) for u in users))
        self._write_lines(self.requests_file, (encode_request(r) for r in requests))
        self.store.clear_changes()
        logger.info(
            "Saved %d users and %d requests to %s", len(users), len(requests), self.data_dir
        )

    @staticmethod
    def _write_lines(path: Path, lines: Iterable[str]) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8", newline="\n") as f:
                for line in lines:
                    f.write(line)
                    f.write("\n")
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"Cannot write {path}: {e}") from e

    # ── Load ──────────────────────────────────────────────────────────────────

    def load_data(self) -> None:
        self.ensure_dirs()
        users = self._read_records(self.users_file, decode_user)
        requests = self._read_records(self.requests_file, decode_request)
        self.store.replace_all(users, requests)
        logger.info(
            "Loaded %d users and %d requests from %s", len(users), len(requests), self.data_dir
        )

    @staticmethod
    def _read_records(path: Path, decode: Callable[[str], Optional[T]]) -> list[T]:
        if not path.exists():
            return []
        records = []
        try:
            with open(path, "rb") as f:
                for lineno, raw in enumerate(f, start=1):
                    try:
                        line = raw.decode("utf-8")
                    except UnicodeDecodeError:
                        logger.warning("%s:%d: skipped line that is not valid UTF-8", path.name, lineno)
                        continue
                    if not line.strip():
                        continue
                    record = decode(line)
                    if record is None:
                        logger.warning("%s:%d: skipped malformed line", path.name, lineno)
                        continue
                    records.append(record)
        except OSError as e:
            raise PersistenceError(f"Cannot read {path}: {e}") from e
        return records

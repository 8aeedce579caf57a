"""
config.py — Runtime settings
=============================
Settings come from the environment, optionally primed from a .env file in
the working directory (python-dotenv). Copy .env.example to .env to
change them.

    SERVICEDESK_DATA_DIR     catalog files and backups   (default: data)
    SERVICEDESK_EXPORT_DIR   CSV / text exports          (default: exports)
    SERVICEDESK_ADMIN_PIN    static admin gate           (default: 1234)
    SERVICEDESK_LOG_LEVEL    logging level name          (default: WARNING)
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel


class Settings(BaseModel):
    data_dir: Path = Path("data")
    export_dir: Path = Path("exports")
    admin_pin: str = "1234"
    log_level: str = "WARNING"


def load_settings(env_file: Optional[Path] = None) -> Settings:
    load_dotenv(env_file or Path.cwd() / ".env")
    return Settings(
        data_dir=Path(os.getenv("SERVICEDESK_DATA_DIR", "data")),
        export_dir=Path(os.getenv("SERVICEDESK_EXPORT_DIR", "exports")),
        admin_pin=os.getenv("SERVICEDESK_ADMIN_PIN", "1234"),
        log_level=os.getenv("SERVICEDESK_LOG_LEVEL", "WARNING").upper(),
    )

from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() not in {"0", "false", "no", "off", ""}


@dataclass(frozen=True)
class Settings:
    # Default catalog root used by the CLI and the web API.
    root: str = os.getenv("CATALOGVIEW_ROOT", ".")

    # Loading
    validate: bool = _flag("CATALOGVIEW_VALIDATE", "1")
    follow_links: bool = _flag("CATALOGVIEW_FOLLOW_LINKS", "1")

    # Logging
    log_level: str = os.getenv("CATALOGVIEW_LOG_LEVEL", "WARNING").upper()

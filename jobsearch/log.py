"""Centralized logging configuration with credential redaction."""
from __future__ import annotations

import logging
import os
import re
import sys
from datetime import datetime
from pathlib import Path

_LOG_DIR = Path(__file__).resolve().parent.parent / "logs"
_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_configured = False

# key=... in query strings and URLs
_KEY_PARAM = re.compile(r"([?&]key=)[^&\s'\"]+", re.IGNORECASE)
_SECRET_ENV_VARS: tuple[str, ...] = ("GOOGLE_API_KEY",)


def mask_secret(value: str | None) -> str:
    """Short, non-reversible label for a secret (never the secret itself)."""
    if not value:
        return "<missing>"
    return f"<set, {len(value)} chars>"


def redact(text: str) -> str:
    """Strip API keys from URLs and free text."""
    text = _KEY_PARAM.sub(r"\1***", text)
    for var in _SECRET_ENV_VARS:
        secret = os.environ.get(var, "").strip()
        if secret and len(secret) >= 8:
            text = text.replace(secret, "***")
    return text


class RedactingFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            return True
        cleaned = redact(message)
        if cleaned != message:
            record.msg = cleaned
            record.args = None
        return True


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _configure() -> None:
    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)

    if root.handlers:
        for handler in root.handlers:
            handler.addFilter(RedactingFilter())
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
    console.addFilter(RedactingFilter())
    root.addHandler(console)

    if os.environ.get("JOBSEARCH_LOG_TO_FILE", "1").lower() in ("0", "false", "no"):
        return
    try:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        log_file = _LOG_DIR / f"search_{datetime.now().strftime('%Y-%m-%d')}.log"
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FMT))
        fh.addFilter(RedactingFilter())
        root.addHandler(fh)
    except OSError:
        pass

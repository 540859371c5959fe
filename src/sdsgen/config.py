# src/sdsgen/config.py
from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

LOG_LEVELS: dict[str, int] = {
    "error": logging.ERROR,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

DEFAULT_TIMEOUT_MS = 30_000
DEFAULT_BATCH_SIZE = 3
DEFAULT_BATCH_DELAY_MS = 1_000
DEFAULT_RETRY_BACKOFF_MS = 1_000
DEFAULT_RETRIES = 1
DEFAULT_PREFERRED_PROVIDER = "claude"


def _positive_int(raw: object, default: int) -> int:
    """Parses a positive integer; anything else yields the default."""
    if raw is None:
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value > 0 else default


def _non_negative_int(raw: object, default: int) -> int:
    if raw is None or str(raw).strip() == "":
        return default
    try:
        value = int(str(raw).strip())
    except ValueError:
        return default
    return value if value >= 0 else default


@dataclass(frozen=True, slots=True)
class Settings:
    """Runtime settings derived from the process environment.

    Fields:
    - timeout_s: Per-request timeout for provider calls.
    - batch_size: Number of module-detail calls issued concurrently.
    - batch_delay_s: Pause between detail batches.
    - preferred_provider: Provider name that wins over scoring when available.
    - max_retries: Extra attempts after the first one (1 means two attempts in total).
    - retry_backoff_s: Fixed wait between attempts.
    - log_level: Name from LOG_LEVELS.
    - max_sessions: Optional bound on live RPC sessions (None = unbounded).
    - development: Adds diagnostics (tracebacks) to RPC error payloads.
    """

    timeout_s: float = DEFAULT_TIMEOUT_MS / 1000
    batch_size: int = DEFAULT_BATCH_SIZE
    batch_delay_s: float = DEFAULT_BATCH_DELAY_MS / 1000
    preferred_provider: str = DEFAULT_PREFERRED_PROVIDER
    max_retries: int = DEFAULT_RETRIES
    retry_backoff_s: float = DEFAULT_RETRY_BACKOFF_MS / 1000
    log_level: str = "info"
    max_sessions: int | None = None
    development: bool = False

    @staticmethod
    def from_env(environ: Mapping[str, str] | None = None) -> "Settings":
        env = os.environ if environ is None else environ

        level = str(env.get("LOG_LEVEL") or "info").strip().lower()
        if level not in LOG_LEVELS:
            level = "info"

        raw_max_sessions = env.get("SDS_MAX_SESSIONS")
        max_sessions = _positive_int(raw_max_sessions, 0) or None

        mode = str(env.get("SDS_ENV") or env.get("NODE_ENV") or "").strip().lower()

        return Settings(
            timeout_s=_positive_int(env.get("API_TIMEOUT"), DEFAULT_TIMEOUT_MS) / 1000,
            batch_size=_positive_int(env.get("BATCH_SIZE"), DEFAULT_BATCH_SIZE),
            batch_delay_s=_non_negative_int(env.get("BATCH_DELAY"), DEFAULT_BATCH_DELAY_MS) / 1000,
            preferred_provider=str(env.get("PREFERRED_API") or DEFAULT_PREFERRED_PROVIDER).strip().lower(),
            max_retries=_non_negative_int(env.get("API_RETRIES"), DEFAULT_RETRIES),
            retry_backoff_s=_non_negative_int(env.get("RETRY_BACKOFF"), DEFAULT_RETRY_BACKOFF_MS) / 1000,
            log_level=level,
            max_sessions=max_sessions,
            development=(mode == "development"),
        )


def load_env_file(path: str | Path | None = None) -> bool:
    """Loads a .env file into os.environ without overriding existing variables.

    Returns True if a file was found and read.
    """
    env_path = Path(path) if path is not None else Path.cwd() / ".env"
    if not env_path.is_file():
        logger.debug("No .env file found at %s, using process environment only", env_path)
        return False
    loaded = load_dotenv(dotenv_path=env_path, override=False)
    logger.debug("Loaded environment from %s", env_path)
    return bool(loaded)


def configure_logging(level: str = "info") -> None:
    """Routes log records to stderr; stdout stays reserved for RPC and CLI output."""
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_sdsgen", False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
    handler._sdsgen = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(LOG_LEVELS.get(level.lower(), logging.INFO))

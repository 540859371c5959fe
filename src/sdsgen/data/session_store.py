# session_store.py
from __future__ import annotations

import logging
import secrets
import string
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, replace
from datetime import datetime, timezone

from sdsgen.errors import ValidationError
from .spec_types import Specification

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def new_session_id() -> str:
    """Returns an opaque id of the form spec_<epoch-ms>_<9 random base36 chars>."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"spec_{int(time.time() * 1000)}_{suffix}"


@dataclass(frozen=True, slots=True)
class Session:
    """A server-held specification plus the metadata it was generated with."""

    specification: Specification
    platform: str
    complexity: str
    advanced_features: bool = True
    created_at: str = ""
    last_modified_at: str | None = None

    def to_dict(self) -> dict[str, object]:
        out: dict[str, object] = {
            "specification": self.specification.to_dict(),
            "platform": self.platform,
            "complexity": self.complexity,
            "advanced_features": bool(self.advanced_features),
            "created_at": self.created_at,
        }
        if self.last_modified_at is not None:
            out["last_modified_at"] = self.last_modified_at
        return out


class MemorySessionStore:
    """Process-lifetime mapping from session id to Session.

    Nothing is persisted. When max_sessions is set, creating a session beyond
    the bound evicts the oldest one. A lock guards every read-modify-write so
    the store stays consistent if handlers ever run on threads.
    """

    def __init__(self, *, max_sessions: int | None = None) -> None:
        self.max_sessions = max_sessions
        self._sessions: OrderedDict[str, Session] = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def create(
        self,
        spec: Specification,
        *,
        platform: str,
        complexity: str,
        advanced_features: bool = True,
    ) -> str:
        session_id = new_session_id()
        session = Session(
            specification=spec,
            platform=platform,
            complexity=complexity,
            advanced_features=advanced_features,
            created_at=_now_iso(),
        )
        with self._lock:
            while session_id in self._sessions:
                session_id = new_session_id()
            self._sessions[session_id] = session
            if self.max_sessions is not None:
                while len(self._sessions) > self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info("Evicted session %s (limit %d)", evicted, self.max_sessions)
        return session_id

    def get(self, session_id: str) -> Session | None:
        with self._lock:
            return self._sessions.get(session_id)

    def require(self, session_id: object) -> Session:
        """Returns the session or raises ValidationError naming the session_id field."""
        if not isinstance(session_id, str) or not session_id.strip():
            raise ValidationError(
                "Specification session not found. Please provide a valid session_id.", field="session_id"
            )
        session = self.get(session_id.strip())
        if session is None:
            raise ValidationError(
                "Specification session not found. Please provide a valid session_id.", field="session_id"
            )
        return session

    def update(self, session_id: str, spec: Specification) -> Session:
        """Replaces the session's specification (last write wins) and stamps last_modified_at."""
        with self._lock:
            current = self._sessions.get(session_id)
            if current is None:
                raise ValidationError(
                    "Specification session not found. Please provide a valid session_id.", field="session_id"
                )
            updated = replace(current, specification=spec, last_modified_at=_now_iso())
            self._sessions[session_id] = updated
            return updated

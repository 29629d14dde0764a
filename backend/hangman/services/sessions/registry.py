"""In-memory session registry.

One registry per Flask app (``app.extensions['hangman_registry']``). Besides
the code -> Session map it keeps a connection index (sid -> code) so a
disconnect or a rename can find its session without scanning every game.
"""

import logging
import threading
import time
from typing import Callable, Dict, List, Optional

from hangman.models import Session, Settings
from .codes import generate_code

logger = logging.getLogger(__name__)

DEFAULT_TTL_SEC = 60 * 60 * 2


class SessionRegistry:
    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SEC,
        settings_factory: Callable[[], Settings] = Settings,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = ttl_seconds
        self.settings_factory = settings_factory
        self.clock = clock
        # Held by every socket handler for its whole mutate-and-broadcast step
        self.lock = threading.RLock()
        self._sessions: Dict[str, Session] = {}
        self._connections: Dict[str, str] = {}

    @staticmethod
    def _key(code) -> str:
        return str(code or '').strip().upper()

    def _live(self, code: str) -> bool:
        return self.get(code) is not None

    def create(self, host_sid: Optional[str]) -> Session:
        with self.lock:
            code = generate_code(self._live)
            session = Session(
                code=code,
                host_sid=host_sid,
                created_at=self.clock(),
                settings=self.settings_factory(),
            )
            self._sessions[code] = session
            if host_sid:
                self._connections[host_sid] = code
        logger.info(f"[session-create] code={code} host={host_sid}")
        return session

    def get(self, code) -> Optional[Session]:
        key = self._key(code)
        session = self._sessions.get(key)
        if session is None:
            return None
        if session.is_expired(self.ttl_seconds, self.clock()):
            logger.info(f"[session-expire] code={key}")
            self.delete(key)
            return None
        return session

    def delete(self, code) -> Optional[Session]:
        key = self._key(code)
        with self.lock:
            session = self._sessions.pop(key, None)
            for sid in [s for s, c in self._connections.items() if c == key]:
                self._connections.pop(sid, None)
        return session

    def sessions(self) -> List[Session]:
        self.purge_expired()
        return list(self._sessions.values())

    def purge_expired(self) -> List[str]:
        now = self.clock()
        expired = [code for code, s in list(self._sessions.items()) if s.is_expired(self.ttl_seconds, now)]
        for code in expired:
            self.delete(code)
        if expired:
            logger.info(f"[session-purge] expired={','.join(expired)}")
        return expired

    def clear(self) -> None:
        with self.lock:
            self._sessions.clear()
            self._connections.clear()

    def __len__(self):
        return len(self._sessions)

    # ---- connection index ----

    def bind(self, sid: str, code: str) -> None:
        self._connections[sid] = self._key(code)

    def unbind(self, sid: str) -> Optional[str]:
        return self._connections.pop(sid, None)

    def code_for(self, sid: str) -> Optional[str]:
        return self._connections.get(sid)

    def session_for(self, sid: str) -> Optional[Session]:
        code = self.code_for(sid)
        if not code:
            return None
        session = self.get(code)
        if session is None:
            self._connections.pop(sid, None)
        return session

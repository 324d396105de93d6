"""Session registry for the Arena Copilot runtime.

A process-wide, in-memory table of key -> ChatSession ("interview",
"mentor", ...). The design is intentionally simple:

- sessions are created explicitly or lazily on first lookup
- exactly one session exists per key; concurrent creators of the same
  key observe and reuse the first one
- nothing is garbage-collected in the background; the owning caller
  terminates sessions it no longer needs
- nothing is persisted; history lives only as long as the process
"""

import asyncio
import logging
from typing import Callable, Dict, List, Optional

from ..session.chat_session import ChatSession


logger = logging.getLogger(__name__)

SessionFactory = Callable[[], ChatSession]


class SessionRegistry:
    """Named, independently-lived chat sessions.

    Only the key -> session mapping is shared state; it is guarded by an
    asyncio.Lock. Each session serializes its own turns.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, ChatSession] = {}
        self._lock = asyncio.Lock()

    async def get_or_create(self, key: str, factory: SessionFactory) -> ChatSession:
        """Return the session stored under ``key``, creating it if absent.

        ``factory`` must return a started session. It is only called when
        no session exists yet; the first writer wins.
        """
        async with self._lock:
            session = self._sessions.get(key)
            if session is None:
                session = factory()
                self._sessions[key] = session
                logger.info("[REGISTRY] created session key=%s id=%s", key, session.session_id)
            return session

    async def create(self, key: str, factory: SessionFactory) -> ChatSession:
        """Create a session under ``key``, replacing (and terminating) any existing one.

        The old session's history is not carried over.
        """
        async with self._lock:
            previous = self._sessions.get(key)
            session = factory()
            self._sessions[key] = session
        if previous is not None and previous is not session:
            previous.terminate()
            logger.info(
                "[REGISTRY] replaced session key=%s old=%s new=%s",
                key,
                previous.session_id,
                session.session_id,
            )
        else:
            logger.info("[REGISTRY] created session key=%s id=%s", key, session.session_id)
        return session

    def get(self, key: str) -> Optional[ChatSession]:
        """Return the session stored under ``key``, or None."""
        return self._sessions.get(key)

    async def terminate(self, key: str) -> bool:
        """Terminate and drop the session under ``key``.

        Returns True if a session was removed.
        """
        async with self._lock:
            session = self._sessions.pop(key, None)
        if session is None:
            return False
        session.terminate()
        return True

    def keys(self) -> List[str]:
        return list(self._sessions)

"""ChatSession: one named, stateful, ordered conversation.

Responsible for:
- holding the session configuration (model, system instruction,
  reasoning budget) and the turn history
- enforcing the lifecycle UNINITIALIZED -> ACTIVE -> TERMINATED
- serializing turns: each send queues behind the previous one, so a
  reply is always computed against the full, in-order history

Current behavior:
- every turn runs through the streaming transport path; buffered sends
  simply drain the stream
- a producer task pumps the provider stream into a TurnStream and holds
  the session lock for the duration of the turn
- the user message and whatever reply text was received are recorded,
  even if the consumer stopped reading early or the stream broke
"""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Set
from uuid import uuid4

from core.api.openai_client import ModelTransport
from exceptions.exceptions import SessionStateError
from ..models.session_models import SessionConfig, SessionState, Turn
from .turn_stream import TurnStream


logger = logging.getLogger(__name__)


class ChatSession:
    """Conversation bound to one model configuration.

    Parameters
    ----------
    transport:
        Provider used to stream chat turns.
    session_id:
        Identifier used in logs and errors. A random UUID if omitted.
    """

    def __init__(self, transport: ModelTransport, session_id: Optional[str] = None) -> None:
        self.session_id = session_id or str(uuid4())
        self._transport = transport
        self._config: Optional[SessionConfig] = None
        self._state = SessionState.UNINITIALIZED
        self._history: List[Turn] = []
        self._lock = asyncio.Lock()
        self._pending: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def config(self) -> Optional[SessionConfig]:
        return self._config

    @property
    def history(self) -> List[Turn]:
        """Snapshot of the recorded turns."""
        return list(self._history)

    def start(
        self,
        model: str,
        system_instruction: str,
        reasoning_budget: int = 0,
    ) -> "ChatSession":
        """Bind the configuration and move a fresh session to ACTIVE."""
        if self._state is not SessionState.UNINITIALIZED:
            raise SessionStateError(self.session_id, self._state, "start")
        self._config = SessionConfig(
            model=model,
            system_instruction=system_instruction,
            reasoning_budget=reasoning_budget,
        )
        self._state = SessionState.ACTIVE
        logger.info("[SESSION] %s started model=%s", self.session_id, model)
        return self

    def terminate(self) -> None:
        """Mark the session TERMINATED and cancel any queued or running turn."""
        if self._state is SessionState.TERMINATED:
            return
        self._state = SessionState.TERMINATED
        for task in list(self._pending):
            task.cancel()
        logger.info("[SESSION] %s terminated", self.session_id)

    # ------------------------------------------------------------------
    # Turns
    # ------------------------------------------------------------------

    def send_streamed(self, message: str) -> TurnStream:
        """Queue a turn and return its lazy reply stream.

        Must be called from a running event loop.
        """
        if self._state is not SessionState.ACTIVE:
            raise SessionStateError(self.session_id, self._state, "send")

        stream = TurnStream()
        task = asyncio.get_running_loop().create_task(self._run_turn(message, stream))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        stream._attach(task)
        return stream

    async def send_buffered(self, message: str) -> str:
        """Send a turn and return the complete reply text."""
        return await self.send_streamed(message).collect()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _run_turn(self, message: str, stream: TurnStream) -> None:
        """Producer: run one turn under the session lock.

        Tasks are created in send order and asyncio.Lock wakes waiters
        first-in first-out, so turns execute in issuance order.
        """
        received: List[str] = []
        completed = False
        error: Optional[BaseException] = None
        try:
            async with self._lock:
                if self._state is not SessionState.ACTIVE:
                    stream._fail(SessionStateError(self.session_id, self._state, "send"))
                    return

                config = self._config
                messages = [turn.to_message() for turn in self._history]
                messages.append({"role": "user", "content": message})

                try:
                    async for chunk in self._transport.stream_chat(
                        model=config.model,
                        system_instruction=config.system_instruction,
                        messages=messages,
                        reasoning_budget=config.reasoning_budget,
                    ):
                        if chunk.text:
                            received.append(chunk.text)
                        stream._push(chunk)
                    completed = True
                except Exception as e:
                    logger.warning(
                        "[SESSION] %s turn failed after %d chunk(s): %s",
                        self.session_id,
                        len(received),
                        e,
                    )
                    error = e
                finally:
                    self._record(message, received, completed)
        except asyncio.CancelledError:
            # Cancelled by aclose() or terminate(), queued or mid-stream.
            if self._state is SessionState.TERMINATED:
                stream._fail(SessionStateError(self.session_id, self._state, "send"))
            else:
                stream._finish()
            raise

        if error is not None:
            stream._fail(error)
        else:
            stream._finish()

    def _record(self, message: str, received: List[str], completed: bool) -> None:
        reply = "".join(received)
        # A turn that died before any text leaves no trace in the history.
        if not reply and not completed:
            return
        self._history.append(Turn(role="user", message=message))
        if reply:
            self._history.append(Turn(role="model", message=reply))

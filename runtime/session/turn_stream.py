"""TurnStream: consumer side of one streamed chat turn.

A producer task (owned by ChatSession) pushes StreamChunk values into an
unbounded queue until end-of-stream or error. The consumer iterates over
the non-empty chunk texts in arrival order and may stop at any time:

- stopping without closing lets the producer drain the provider stream
  to completion in the background
- ``aclose()`` (or leaving an ``async with`` block) cancels the producer,
  which closes the provider stream

Once exhausted, ``final_text`` is the ordered concatenation of every
non-empty chunk. Empty chunks carry no content and are skipped.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from core.api.openai_client import StreamChunk


_END = object()


class _Failure:
    __slots__ = ("exc",)

    def __init__(self, exc: BaseException) -> None:
        self.exc = exc


class TurnStream:
    """Finite, non-restartable async sequence of reply fragments."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue = asyncio.Queue()
        self._parts: List[str] = []
        self._producer: Optional[asyncio.Task] = None
        self._exhausted = False
        self._closed = False

    # ------------------------------------------------------------------
    # Producer side (called by ChatSession)
    # ------------------------------------------------------------------

    def _attach(self, producer: asyncio.Task) -> None:
        self._producer = producer

    def _push(self, chunk: StreamChunk) -> None:
        self._queue.put_nowait(chunk)

    def _finish(self) -> None:
        self._queue.put_nowait(_END)

    def _fail(self, exc: BaseException) -> None:
        self._queue.put_nowait(_Failure(exc))

    # ------------------------------------------------------------------
    # Consumer side
    # ------------------------------------------------------------------

    def __aiter__(self) -> "TurnStream":
        return self

    async def __anext__(self) -> str:
        if self._closed:
            raise StopAsyncIteration

        while True:
            item = await self._queue.get()
            if item is _END:
                self._exhausted = True
                self._closed = True
                raise StopAsyncIteration
            if isinstance(item, _Failure):
                self._closed = True
                raise item.exc
            if not item.text:
                continue
            self._parts.append(item.text)
            return item.text

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    @property
    def delivered_text(self) -> str:
        """Everything handed to the consumer so far."""
        return "".join(self._parts)

    @property
    def final_text(self) -> str:
        if not self._exhausted:
            raise RuntimeError("final_text is only available once the stream is exhausted")
        return "".join(self._parts)

    async def collect(self) -> str:
        """Drain the remaining fragments and return the full reply text."""
        async for _ in self:
            pass
        return self.final_text

    async def aclose(self) -> None:
        """Stop consuming and release the provider stream now."""
        if self._closed:
            return
        self._closed = True
        producer = self._producer
        if producer is not None and not producer.done():
            producer.cancel()
            await asyncio.wait([producer])

    async def __aenter__(self) -> "TurnStream":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

"""CopilotOrchestrator: the single entry point for the copilot features.

Responsible for:
- building one-shot requests (text, inline media, structured schemas)
- decoding schema-constrained replies into typed results
- owning the "interview" and "mentor" chat sessions through the
  SessionRegistry
- recording high-level events through an optional log store

Operations:
- analyze_resume   -> ResumeAnalysis       (one-shot, structured)
- start_interview  -> ChatSession          (creates "interview")
- interview_reply  -> str                  (buffered turn on "interview")
- mentor_reply     -> TurnStream           (streamed turn on "mentor")
- evaluate_code    -> str                  (one-shot)
- generate_image   -> GeneratedImage       (one-shot, image model)
- analyze_video    -> VideoAnalysisResult  (one-shot, structured)

One-shot operations keep no state between calls. Every operation either
returns a fully-valid result or raises SessionStateError, TransportError
or SchemaViolationError.
"""

from __future__ import annotations

import logging
from typing import Optional
from uuid import uuid4

from configs.settings import settings
from core import prompts
from core.api.openai_client import ModelTransport
from core.request.builder import MediaPart, build_request, text
from core.schema.decoder import decode
from exceptions.exceptions import SessionStateError, TransportError
from ..models.result_models import (
    RESUME_ANALYSIS_SCHEMA,
    VIDEO_ANALYSIS_SCHEMA,
    GeneratedImage,
    JobContext,
    ResumeAnalysis,
    VideoAnalysisResult,
)
from ..models.session_models import SessionState
from ..session.chat_session import ChatSession
from ..session.turn_stream import TurnStream
from ..store.session_store import SessionRegistry


logger = logging.getLogger(__name__)

INTERVIEW_KEY = "interview"
MENTOR_KEY = "mentor"


class CopilotOrchestrator:
    """Facade over the request builder, sessions and decoder.

    Parameters
    ----------
    transport:
        Provider used for every call.
    registry:
        Session registry; a private one is created if omitted. Pass a
        shared instance to let several facades see the same sessions.
    log_store:
        Optional event sink exposing ``log_event(event_type, payload)``.
    analysis_model, chat_model, image_model:
        Static model choice per use case. Default to the central settings.
    interview_budget, mentor_budget, review_budget:
        Reasoning budgets per use case. Default to the central settings.
    """

    def __init__(
        self,
        transport: ModelTransport,
        registry: Optional[SessionRegistry] = None,
        log_store=None,
        *,
        analysis_model: Optional[str] = None,
        chat_model: Optional[str] = None,
        image_model: Optional[str] = None,
        interview_budget: Optional[int] = None,
        mentor_budget: Optional[int] = None,
        review_budget: Optional[int] = None,
    ) -> None:
        self.transport = transport
        self.registry = registry if registry is not None else SessionRegistry()
        self.log_store = log_store

        self.analysis_model = analysis_model or settings.analysis_model
        self.chat_model = chat_model or settings.chat_model
        self.image_model = image_model or settings.image_model
        self.interview_budget = (
            settings.interview_budget if interview_budget is None else interview_budget
        )
        self.mentor_budget = settings.mentor_budget if mentor_budget is None else mentor_budget
        self.review_budget = settings.review_budget if review_budget is None else review_budget

    # ------------------------------------------------------------------
    # Resume screening + interview
    # ------------------------------------------------------------------

    async def analyze_resume(self, context: JobContext) -> ResumeAnalysis:
        """Score the resume against the target role."""
        prompt = prompts.PROMPT_ANALYZE_RESUME.format(
            company=context.company,
            role=context.role,
        )
        request = build_request(
            [context.resume, text(prompt)],
            schema=RESUME_ANALYSIS_SCHEMA,
        )
        raw = await self.transport.generate(request, model=self.analysis_model)
        analysis = decode(raw, RESUME_ANALYSIS_SCHEMA, ResumeAnalysis)

        self._log_event(
            "resume_analyzed",
            {
                "role": context.role,
                "company": context.company,
                "score": analysis.score,
                "pass_probability": analysis.pass_probability,
            },
        )
        return analysis

    async def start_interview(self, context: JobContext, analysis: ResumeAnalysis) -> ChatSession:
        """(Re)create the "interview" session seeded with the resume analysis.

        Any previous interview is terminated and its history discarded.
        """
        instruction = prompts.INTERVIEWER_INSTRUCTION.format(
            company=context.company,
            role=context.role,
            summary=analysis.summary,
            red_flags=", ".join(analysis.red_flags),
            focus=", ".join(analysis.interview_focus),
        )

        def factory() -> ChatSession:
            return ChatSession(self.transport, session_id=self._session_id(INTERVIEW_KEY)).start(
                model=self.chat_model,
                system_instruction=instruction,
                reasoning_budget=self.interview_budget,
            )

        session = await self.registry.create(INTERVIEW_KEY, factory)
        self._log_event(
            "interview_started",
            {"session_id": session.session_id, "role": context.role, "company": context.company},
        )
        return session

    async def interview_reply(self, message: str) -> str:
        """Send the candidate's answer and return the interviewer's full reply."""
        session = self.registry.get(INTERVIEW_KEY)
        if session is None:
            raise SessionStateError(INTERVIEW_KEY, SessionState.UNINITIALIZED, "send")
        reply = await session.send_buffered(message)
        self._log_event(
            "interview_turn",
            {"session_id": session.session_id, "reply_chars": len(reply)},
        )
        return reply

    async def end_interview(self) -> bool:
        """Terminate the "interview" session. Returns False if none existed."""
        ended = await self.registry.terminate(INTERVIEW_KEY)
        if ended:
            self._log_event("interview_ended", {})
        return ended

    # ------------------------------------------------------------------
    # Mentor chat
    # ------------------------------------------------------------------

    async def mentor_reply(self, message: str) -> TurnStream:
        """Send a message to the mentor and return the streamed reply.

        The "mentor" session is created on first use.
        """
        session = await self.registry.get_or_create(MENTOR_KEY, self._new_mentor_session)
        stream = session.send_streamed(message)
        self._log_event("mentor_turn", {"session_id": session.session_id})
        return stream

    async def reset_mentor(self) -> bool:
        """Drop the mentor conversation; the next message starts a new one."""
        return await self.registry.terminate(MENTOR_KEY)

    def _new_mentor_session(self) -> ChatSession:
        return ChatSession(self.transport, session_id=self._session_id(MENTOR_KEY)).start(
            model=self.chat_model,
            system_instruction=prompts.MENTOR_INSTRUCTION,
            reasoning_budget=self.mentor_budget,
        )

    # ------------------------------------------------------------------
    # Stateless one-shots
    # ------------------------------------------------------------------

    async def evaluate_code(self, code: str, problem: str) -> str:
        """Return a technical review of a python submission."""
        request = build_request(
            [text(prompts.PROMPT_EVALUATE_CODE.format(problem=problem, code=code))],
            reasoning_budget=self.review_budget,
        )
        review = await self.transport.generate(request, model=self.chat_model)
        if not review.strip():
            raise TransportError("evaluate_code", "provider returned an empty review")
        self._log_event("code_evaluated", {"review_chars": len(review)})
        return review

    async def generate_image(self, prompt: str) -> GeneratedImage:
        """Generate a synthetic image. Structured output is not supported for this model."""
        media_type, data = await self.transport.generate_image(prompt, model=self.image_model)
        self._log_event("image_generated", {"prompt": prompt, "media_type": media_type})
        return GeneratedImage(prompt=prompt, media_type=media_type, data=data)

    async def analyze_video(self, video: MediaPart) -> VideoAnalysisResult:
        """Summarize a video and list its objects, actions and transcript."""
        request = build_request(
            [video, text(prompts.PROMPT_ANALYZE_VIDEO)],
            schema=VIDEO_ANALYSIS_SCHEMA,
        )
        raw = await self.transport.generate(request, model=self.analysis_model)
        result = decode(raw, VIDEO_ANALYSIS_SCHEMA, VideoAnalysisResult)
        self._log_event(
            "video_analyzed",
            {"media_type": video.media_type, "objects": len(result.objects)},
        )
        return result

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _session_id(key: str) -> str:
        return f"{key}-{uuid4().hex[:8]}"

    def _log_event(self, event_type: str, payload: dict) -> None:
        if self.log_store is None:
            return
        try:
            self.log_store.log_event(event_type=event_type, payload=payload)
        except Exception:
            # Logging failures should not affect main flow.
            logger.warning("[ORCH] could not record event %s", event_type, exc_info=True)

"""HTTP routes for the Arena Copilot orchestrator.

Exposes endpoints like:

- POST /copilot/resume/analyze   -> ResumeAnalysis JSON
- POST /copilot/interview/start  -> starts (or restarts) the interview
- POST /copilot/interview/reply  -> buffered interviewer reply
- POST /copilot/interview/end    -> terminates the interview session
- POST /copilot/mentor/reply     -> streamed mentor reply (text/plain)
- POST /copilot/mentor/reset     -> drops the mentor session
- POST /copilot/code/evaluate    -> code review text
- POST /copilot/image/generate   -> generated image as a data URL
- POST /copilot/video/analyze    -> VideoAnalysisResult JSON
"""

import logging
from typing import AsyncIterator, Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import StreamingResponse

from exceptions.exceptions import (
    InvalidRequestError,
    SchemaViolationError,
    SessionStateError,
    TransportError,
)
from ..agents.orchestrator import CopilotOrchestrator
from ..models.api_models import (
    EvaluateCodeRequest,
    EvaluateCodeResponse,
    ImageRequest,
    ImageResponse,
    MessageRequest,
    MessageResponse,
    ResetResponse,
    ResumeRequest,
    StartInterviewRequest,
    StartInterviewResponse,
    VideoRequest,
)
from ..models.result_models import JobContext, ResumeAnalysis, VideoAnalysisResult
from ..session.turn_stream import TurnStream


logger = logging.getLogger(__name__)

# Router for all copilot endpoints
router = APIRouter()


# Module-level reference, to be initialized by the server.
_ORCHESTRATOR: Optional[CopilotOrchestrator] = None


def init_routes(orchestrator: CopilotOrchestrator) -> None:
    """Initialize the module-level reference used by the route handlers."""
    global _ORCHESTRATOR
    _ORCHESTRATOR = orchestrator


def _require_orchestrator() -> CopilotOrchestrator:
    if _ORCHESTRATOR is None:
        raise HTTPException(
            status_code=500,
            detail="CopilotOrchestrator is not configured on the server.",
        )
    return _ORCHESTRATOR


def _to_http_error(operation: str, exc: Exception) -> HTTPException:
    """Map the orchestrator's error taxonomy onto HTTP status codes."""
    if isinstance(exc, SessionStateError):
        status = 409
    elif isinstance(exc, InvalidRequestError):
        status = 422
    else:
        status = 502
    logger.warning("[COPILOT] HTTP %s for %s reason=%r", status, operation, str(exc))
    return HTTPException(status_code=status, detail=str(exc))


_HANDLED = (SessionStateError, TransportError, SchemaViolationError, InvalidRequestError)


@router.post("/resume/analyze", response_model=ResumeAnalysis)
async def analyze_resume(request: ResumeRequest) -> ResumeAnalysis:
    orchestrator = _require_orchestrator()
    context = JobContext(role=request.role, company=request.company, resume=request.resume)
    try:
        return await orchestrator.analyze_resume(context)
    except _HANDLED as e:
        raise _to_http_error("analyze_resume", e) from e


@router.post("/interview/start", response_model=StartInterviewResponse)
async def start_interview(request: StartInterviewRequest) -> StartInterviewResponse:
    orchestrator = _require_orchestrator()
    context = JobContext(role=request.role, company=request.company, resume=request.resume)
    session = await orchestrator.start_interview(context, request.analysis)
    return StartInterviewResponse(session_id=session.session_id)


@router.post("/interview/reply", response_model=MessageResponse)
async def interview_reply(request: MessageRequest) -> MessageResponse:
    orchestrator = _require_orchestrator()
    try:
        reply = await orchestrator.interview_reply(request.message)
    except _HANDLED as e:
        raise _to_http_error("interview_reply", e) from e
    return MessageResponse(reply=reply)


@router.post("/interview/end", response_model=ResetResponse)
async def end_interview() -> ResetResponse:
    orchestrator = _require_orchestrator()
    return ResetResponse(ended=await orchestrator.end_interview())


@router.post("/mentor/reply")
async def mentor_reply(request: MessageRequest) -> StreamingResponse:
    """Stream the mentor's reply as plain text fragments.

    If the client disconnects, the turn stream is closed so the provider
    stream is released.
    """
    orchestrator = _require_orchestrator()
    try:
        stream = await orchestrator.mentor_reply(request.message)
    except _HANDLED as e:
        raise _to_http_error("mentor_reply", e) from e

    async def relay(turn: TurnStream) -> AsyncIterator[str]:
        async with turn:
            try:
                async for fragment in turn:
                    yield fragment
            except TransportError:
                # Headers are already sent; the client sees a truncated body.
                logger.exception("[COPILOT] mentor stream broke mid-reply")
                raise

    return StreamingResponse(relay(stream), media_type="text/plain; charset=utf-8")


@router.post("/mentor/reset", response_model=ResetResponse)
async def reset_mentor() -> ResetResponse:
    orchestrator = _require_orchestrator()
    return ResetResponse(ended=await orchestrator.reset_mentor())


@router.post("/code/evaluate", response_model=EvaluateCodeResponse)
async def evaluate_code(request: EvaluateCodeRequest) -> EvaluateCodeResponse:
    orchestrator = _require_orchestrator()
    try:
        review = await orchestrator.evaluate_code(request.code, request.problem)
    except _HANDLED as e:
        raise _to_http_error("evaluate_code", e) from e
    return EvaluateCodeResponse(review=review)


@router.post("/image/generate", response_model=ImageResponse)
async def generate_image(request: ImageRequest) -> ImageResponse:
    orchestrator = _require_orchestrator()
    try:
        image = await orchestrator.generate_image(request.prompt)
    except _HANDLED as e:
        raise _to_http_error("generate_image", e) from e
    return ImageResponse(prompt=image.prompt, media_type=image.media_type, data_url=image.data_url)


@router.post("/video/analyze", response_model=VideoAnalysisResult)
async def analyze_video(request: VideoRequest) -> VideoAnalysisResult:
    orchestrator = _require_orchestrator()
    try:
        return await orchestrator.analyze_video(request.video)
    except _HANDLED as e:
        raise _to_http_error("analyze_video", e) from e


# --------------------------------------------------------
# Endpoint: GET /healthz
# --------------------------------------------------------
@router.get("/healthz")
def health_check():
    """
    Simple health check endpoint for uptime monitoring.
    """
    return {"status": "ok"}

"""
HTTP request/response models for the Arena Copilot runtime API.
"""

from pydantic import BaseModel, Field

from core.request.builder import MediaPart
from .result_models import ResumeAnalysis


class ResumeRequest(BaseModel):
    role: str
    company: str
    resume: MediaPart


class StartInterviewRequest(ResumeRequest):
    analysis: ResumeAnalysis


class StartInterviewResponse(BaseModel):
    session_id: str


class MessageRequest(BaseModel):
    message: str = Field(min_length=1)


class MessageResponse(BaseModel):
    reply: str


class EvaluateCodeRequest(BaseModel):
    code: str
    problem: str


class EvaluateCodeResponse(BaseModel):
    review: str


class ImageRequest(BaseModel):
    prompt: str = Field(min_length=1)


class ImageResponse(BaseModel):
    prompt: str
    media_type: str
    data_url: str


class VideoRequest(BaseModel):
    video: MediaPart


class ResetResponse(BaseModel):
    ended: bool

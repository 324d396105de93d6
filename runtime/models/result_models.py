"""
Structured results produced by the orchestrator, and the schema
descriptors that constrain them.

Field aliases follow the provider's JSON contract (camelCase); Python
code uses the snake_case attribute names. All records are frozen.
"""

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field

from core.request.builder import MediaPart
from core.schema.descriptor import array_of, enum, number, object_of, string


PASS_PROBABILITIES = ("Low", "Medium", "High")


RESUME_ANALYSIS_SCHEMA = object_of(
    "resume_analysis",
    score=number("Match score for the target role", minimum=0, maximum=100),
    passProbability=enum(*PASS_PROBABILITIES),
    strengths=array_of(min_items=1),
    redFlags=array_of(min_items=1),
    summary=string(),
    interviewFocus=array_of(min_items=1),
)


VIDEO_ANALYSIS_SCHEMA = object_of(
    "video_analysis",
    summary=string(),
    objects=array_of(),
    actions=array_of(),
    transcript=string(),
)


class ResumeAnalysis(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: float
    pass_probability: Literal["Low", "Medium", "High"] = Field(alias="passProbability")
    strengths: Tuple[str, ...]
    red_flags: Tuple[str, ...] = Field(alias="redFlags")
    summary: str
    interview_focus: Tuple[str, ...] = Field(alias="interviewFocus")


class VideoAnalysisResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    summary: str
    objects: Tuple[str, ...]
    actions: Tuple[str, ...]
    transcript: str


class JobContext(BaseModel):
    """Target role plus the candidate's resume, as loaded by the caller."""

    model_config = ConfigDict(frozen=True)

    role: str
    company: str
    resume: MediaPart


class GeneratedImage(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"

# backend/tubemaster/models.py

import base64
import binascii
import re
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

Label = Literal["A", "B"]

_DATA_URL = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<data>.*)$", re.S)


# ---------- Images ----------


class ImageAsset(BaseModel):
    """Base64-encoded raster plus its MIME type and (when known) pixel size."""

    model_config = ConfigDict(frozen=True)

    mime_type: str = "image/jpeg"
    data: str
    width: Optional[int] = None
    height: Optional[int] = None

    @classmethod
    def from_bytes(cls, raw: bytes, mime_type: str = "image/jpeg") -> "ImageAsset":
        return cls(mime_type=mime_type, data=base64.b64encode(raw).decode("ascii"))

    @classmethod
    def from_data_url(cls, url: str) -> "ImageAsset":
        match = _DATA_URL.match(url.strip())
        if not match:
            raise ValueError("Not a base64 data URL")
        return cls(mime_type=match.group("mime") or "image/jpeg", data=match.group("data"))

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

    def raw_bytes(self) -> bytes:
        try:
            return base64.b64decode(self.data, validate=True)
        except binascii.Error as e:
            raise ValueError(f"Image payload is not valid base64: {e}") from e


class ComparisonRequest(BaseModel):
    """Two images labeled from the caller's point of view."""

    image_a: ImageAsset
    image_b: ImageAsset


# ---------- Thumbnail verdicts ----------


def _coerce_score(v) -> float:
    if v is None or v == "":
        return 0.0
    score = float(v)
    return max(0.0, min(score, 10.0))


class RawCriterion(BaseModel):
    criterion: str = ""
    winner: str = ""
    explanation: str = ""

    @field_validator("criterion", "winner", "explanation", mode="before")
    @classmethod
    def _stringify(cls, v):
        return "" if v is None else str(v)


class RawVerdict(BaseModel):
    """Positional verdict exactly as the vision model reports it."""

    winner: str
    score1: float = 0.0
    score2: float = 0.0
    reasoning: str = ""
    breakdown: List[RawCriterion] = Field(default_factory=list)

    @field_validator("winner", "reasoning", mode="before")
    @classmethod
    def _stringify(cls, v):
        return "" if v is None else str(v)

    @field_validator("score1", "score2", mode="before")
    @classmethod
    def _clamp(cls, v):
        return _coerce_score(v)

    @field_validator("breakdown", mode="before")
    @classmethod
    def _null_breakdown(cls, v):
        return [] if v is None else v


class CriterionResult(BaseModel):
    criterion: str
    winner: Label
    explanation: str


class ComparisonResult(BaseModel):
    """Caller-facing verdict, always keyed to the caller's A/B labels."""

    model_config = ConfigDict(populate_by_name=True)

    winner: Label
    score_a: float = Field(alias="scoreA")
    score_b: float = Field(alias="scoreB")
    reasoning: str
    breakdown: List[CriterionResult] = Field(default_factory=list)


# ---------- Content tools ----------


class KeywordIdea(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    keyword: str
    search_volume: Optional[Union[int, float, str]] = Field(None, alias="searchVolume")
    difficulty: Optional[Union[float, str]] = None
    opportunity_score: Optional[Union[float, str]] = Field(None, alias="opportunityScore")
    trend: Optional[str] = None
    intent: Optional[str] = None
    cpc: Optional[Union[float, str]] = None
    competition_density: Optional[str] = Field(None, alias="competitionDensity")
    top_competitor: Optional[str] = Field(None, alias="topCompetitor")
    video_age_avg: Optional[str] = Field(None, alias="videoAgeAvg")
    ctr_potential: Optional[str] = Field(None, alias="ctrPotential")


class CompetitorReport(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    channel_name: str = Field("Unknown", alias="channelName")
    subscriber_estimate: Optional[str] = Field(None, alias="subscriberEstimate")
    strengths: List[str] = Field(default_factory=list)
    weaknesses: List[str] = Field(default_factory=list)
    content_gaps: List[str] = Field(default_factory=list, alias="contentGaps")
    action_plan: Union[List[str], str] = Field(default_factory=list, alias="actionPlan")

    @field_validator("subscriber_estimate", mode="before")
    @classmethod
    def _stringify(cls, v):
        return None if v is None else str(v)


class ScriptSection(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str
    logic_step: Optional[str] = Field(None, alias="logicStep")
    content: str = ""
    visual_cue: Optional[str] = Field(None, alias="visualCue")
    psychological_trigger: Optional[str] = Field(None, alias="psychologicalTrigger")


class VideoScript(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    title: str
    estimated_duration: Optional[str] = Field(None, alias="estimatedDuration")
    target_audience: Optional[str] = Field(None, alias="targetAudience")
    sections: List[ScriptSection] = Field(default_factory=list)

    @field_validator("estimated_duration", mode="before")
    @classmethod
    def _stringify(cls, v):
        return None if v is None else str(v)


class GeneratedThumbnail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    image_url: str = Field(alias="imageUrl")
    original_prompt: str = Field(alias="originalPrompt")
    optimized_prompt: str = Field(alias="optimizedPrompt")
    style: str
    created_at: int = Field(alias="createdAt")


# ---------- HTTP request bodies ----------


class TopicRequest(BaseModel):
    topic: str


class ScriptRequest(BaseModel):
    title: str
    audience: str


class CompetitorRequest(BaseModel):
    channel_url: str


class BestTimeRequest(BaseModel):
    title: str
    audience: str
    tags: str = ""


class ThumbnailGenerateRequest(BaseModel):
    prompt: str
    style: str = "Cinematic"
    mood: str = "Dramatic"
    optimize: bool = False

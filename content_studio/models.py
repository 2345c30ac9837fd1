"""
Workflow Models
===============

Data structures for the content package: research, script and scenes,
metadata, thumbnail, and the workflow state that ties them together.

Snapshot form (``to_dict`` / ``from_dict``) uses snake_case keys.
Wire form (``to_payload`` / ``from_payload``) mirrors the structured
response schemas sent to the generative service (camelCase keys).
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, List, Dict, Any, Union

from .core.exceptions import SchemaParseError, ValidationError

logger = logging.getLogger(__name__)


class LengthTier(Enum):
    """Coarse script length selector."""

    SHORT = "SHORT"
    MEDIUM = "MEDIUM"
    LONG = "LONG"

    @property
    def target_chars(self) -> int:
        """Target character count passed to script generation."""
        return _TARGET_CHARS[self]

    @classmethod
    def parse(cls, value: Union[str, "LengthTier"]) -> "LengthTier":
        """Accept a member or a member name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            raise ValidationError(
                f"Unknown length tier: {value}",
                field="length_tier",
                value=value,
                constraint="one of SHORT, MEDIUM, LONG",
            )


_TARGET_CHARS = {
    LengthTier.SHORT: 4000,
    LengthTier.MEDIUM: 8000,
    LengthTier.LONG: 12000,
}


class Stage(Enum):
    """Workflow stages, in navigation order."""

    INPUT = "input"
    RESEARCH = "research"
    SCRIPT = "script"
    IMAGES = "images"
    METADATA = "metadata"
    THUMBNAIL = "thumbnail"


# Execution order of a run. Metadata and thumbnail come from the script text
# and are produced before the per-scene image loop.
RUN_ORDER = (
    Stage.RESEARCH,
    Stage.SCRIPT,
    Stage.METADATA,
    Stage.THUMBNAIL,
    Stage.IMAGES,
)


# =============================================================================
# Wire helpers
# =============================================================================


def _require(data: Dict[str, Any], key: str, expected: type, context: str) -> Any:
    if not isinstance(data, dict):
        raise SchemaParseError(f"{context}: expected an object, got {type(data).__name__}")
    if key not in data:
        raise SchemaParseError(f"{context}: missing field '{key}'")
    value = data[key]
    # bool is an int subclass; never accept it where an integer id is expected
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise SchemaParseError(
            f"{context}: field '{key}' should be {expected.__name__}, got {type(value).__name__}"
        )
    return value


def _require_strings(data: Dict[str, Any], key: str, context: str) -> List[str]:
    values = _require(data, key, list, context)
    if not all(isinstance(v, str) for v in values):
        raise SchemaParseError(f"{context}: field '{key}' should contain only strings")
    return list(values)


# =============================================================================
# Research
# =============================================================================


@dataclass
class GroundingSource:
    """A citation returned alongside a research report."""

    title: str
    uri: str

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "uri": self.uri}


@dataclass(frozen=True)
class ResearchResult:
    """Fact-checked report with its grounding sources."""

    report: str
    sources: List[GroundingSource] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.report.strip()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report": self.report,
            "sources": [s.to_dict() for s in self.sources],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ResearchResult":
        return cls(
            report=data.get("report", ""),
            sources=[GroundingSource(**s) for s in data.get("sources", [])],
        )


# =============================================================================
# Script
# =============================================================================


@dataclass
class Scene:
    """
    One narrative segment of the script.

    ``image_url`` and ``is_generating`` are updated in place by the image
    loop and by single-scene retries.
    """

    id: int
    content: str
    image_prompt: str
    image_url: Optional[str] = None
    is_generating: bool = False

    @property
    def has_image(self) -> bool:
        return bool(self.image_url)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "image_prompt": self.image_prompt,
            "image_url": self.image_url,
            "is_generating": self.is_generating,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Scene":
        return cls(
            id=data["id"],
            content=data["content"],
            image_prompt=data["image_prompt"],
            image_url=data.get("image_url"),
            is_generating=data.get("is_generating", False),
        )

    def to_payload(self) -> Dict[str, Any]:
        payload = {
            "id": self.id,
            "content": self.content,
            "imagePrompt": self.image_prompt,
        }
        if self.image_url is not None:
            payload["imageUrl"] = self.image_url
        if self.is_generating:
            payload["isGenerating"] = True
        return payload

    @classmethod
    def from_payload(cls, data: Dict[str, Any], position: int = 0) -> "Scene":
        context = f"scenes[{position}]"
        image_url = data.get("imageUrl") if isinstance(data, dict) else None
        if image_url is not None and not isinstance(image_url, str):
            raise SchemaParseError(f"{context}: field 'imageUrl' should be str")
        return cls(
            id=_require(data, "id", int, context),
            content=_require(data, "content", str, context),
            image_prompt=_require(data, "imagePrompt", str, context),
            image_url=image_url,
            is_generating=bool(data.get("isGenerating", False)),
        )


@dataclass
class ScriptResult:
    """Narration script, its TTS variant, and the scene breakdown."""

    raw_script: str
    tts_script: str
    scenes: List[Scene] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "raw_script": self.raw_script,
            "tts_script": self.tts_script,
            "scenes": [s.to_dict() for s in self.scenes],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ScriptResult":
        return cls(
            raw_script=data.get("raw_script", ""),
            tts_script=data.get("tts_script", ""),
            scenes=[Scene.from_dict(s) for s in data.get("scenes", [])],
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "rawScript": self.raw_script,
            "ttsScript": self.tts_script,
            "scenes": [s.to_payload() for s in self.scenes],
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ScriptResult":
        """Parse a structured script response; raises SchemaParseError on shape mismatch."""
        raw_script = _require(data, "rawScript", str, "script")
        tts_script = _require(data, "ttsScript", str, "script")
        scenes = _require(data, "scenes", list, "script")
        return cls(
            raw_script=raw_script,
            tts_script=tts_script,
            scenes=[Scene.from_payload(s, i) for i, s in enumerate(scenes)],
        )


# =============================================================================
# Metadata & Thumbnail
# =============================================================================


@dataclass(frozen=True)
class MetadataResult:
    """SEO metadata for the video."""

    description: str
    summary: str
    hashtags: List[str] = field(default_factory=list)
    seo_keywords: List[str] = field(default_factory=list)
    pinned_comment: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "summary": self.summary,
            "hashtags": list(self.hashtags),
            "seo_keywords": list(self.seo_keywords),
            "pinned_comment": self.pinned_comment,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MetadataResult":
        return cls(
            description=data.get("description", ""),
            summary=data.get("summary", ""),
            hashtags=list(data.get("hashtags", [])),
            seo_keywords=list(data.get("seo_keywords", [])),
            pinned_comment=data.get("pinned_comment", ""),
        )

    def to_payload(self) -> Dict[str, Any]:
        return {
            "youtubeDescription": self.description,
            "summary4Lines": self.summary,
            "hashtags": list(self.hashtags),
            "seoKeywords": list(self.seo_keywords),
            "pinnedComment": self.pinned_comment,
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "MetadataResult":
        hashtags = _require_strings(data, "hashtags", "metadata")
        return cls(
            description=_require(data, "youtubeDescription", str, "metadata"),
            summary=_require(data, "summary4Lines", str, "metadata"),
            # Set-like: drop repeats, keep first occurrence order
            hashtags=list(dict.fromkeys(hashtags)),
            seo_keywords=_require_strings(data, "seoKeywords", "metadata"),
            pinned_comment=_require(data, "pinnedComment", str, "metadata"),
        )


@dataclass(frozen=True)
class ThumbnailCopy:
    """First thumbnail call: copy variants plus a background description."""

    copy_variants_a: List[str]
    copy_variants_b: List[str]
    image_prompt: str

    def to_payload(self) -> Dict[str, Any]:
        return {
            "copySuggestions": {
                "type1": list(self.copy_variants_a),
                "type2": list(self.copy_variants_b),
            },
            "imagePrompt": self.image_prompt,
        }

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ThumbnailCopy":
        suggestions = _require(data, "copySuggestions", dict, "thumbnail")
        return cls(
            copy_variants_a=_require_strings(suggestions, "type1", "thumbnail.copySuggestions"),
            copy_variants_b=_require_strings(suggestions, "type2", "thumbnail.copySuggestions"),
            image_prompt=_require(data, "imagePrompt", str, "thumbnail"),
        )


@dataclass(frozen=True)
class ThumbnailResult:
    """Thumbnail copy variants and optional background art."""

    background_image_url: Optional[str] = None
    copy_variants_a: List[str] = field(default_factory=list)
    copy_variants_b: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "background_image_url": self.background_image_url,
            "copy_variants_a": list(self.copy_variants_a),
            "copy_variants_b": list(self.copy_variants_b),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ThumbnailResult":
        return cls(
            background_image_url=data.get("background_image_url"),
            copy_variants_a=list(data.get("copy_variants_a", [])),
            copy_variants_b=list(data.get("copy_variants_b", [])),
        )


# =============================================================================
# Workflow State
# =============================================================================


@dataclass
class SceneImageOutcome:
    """Per-scene result of one image generation attempt."""

    index: int
    image_url: Optional[str] = None
    error: Optional[str] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None and bool(self.image_url)


@dataclass
class WorkflowState:
    """The single workflow state read by the presentation layer."""

    current_stage: Stage = Stage.INPUT
    topic: str = ""
    length_tier: LengthTier = LengthTier.MEDIUM
    research: Optional[ResearchResult] = None
    script: Optional[ScriptResult] = None
    metadata: Optional[MetadataResult] = None
    thumbnail: Optional[ThumbnailResult] = None
    is_processing: bool = False
    error_notice: Optional[str] = None

    @property
    def images_ready(self) -> int:
        """Number of scenes that currently have an image."""
        if not self.script:
            return 0
        return sum(1 for s in self.script.scenes if s.has_image)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_stage": self.current_stage.value,
            "topic": self.topic,
            "length_tier": self.length_tier.value,
            "target_chars": self.length_tier.target_chars,
            "research": self.research.to_dict() if self.research else None,
            "script": self.script.to_dict() if self.script else None,
            "metadata": self.metadata.to_dict() if self.metadata else None,
            "thumbnail": self.thumbnail.to_dict() if self.thumbnail else None,
            "is_processing": self.is_processing,
            "error_notice": self.error_notice,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WorkflowState":
        return cls(
            current_stage=Stage(data.get("current_stage", Stage.INPUT.value)),
            topic=data.get("topic", ""),
            length_tier=LengthTier.parse(data.get("length_tier", LengthTier.MEDIUM.value)),
            research=ResearchResult.from_dict(data["research"]) if data.get("research") else None,
            script=ScriptResult.from_dict(data["script"]) if data.get("script") else None,
            metadata=MetadataResult.from_dict(data["metadata"]) if data.get("metadata") else None,
            thumbnail=ThumbnailResult.from_dict(data["thumbnail"]) if data.get("thumbnail") else None,
            is_processing=data.get("is_processing", False),
            error_notice=data.get("error_notice"),
        )

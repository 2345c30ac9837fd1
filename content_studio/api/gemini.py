"""
Gemini Client
=============

Direct integration with Google's Gemini ``generateContent`` REST API.

Operations:
- Research with Google Search grounding
- Script, metadata and thumbnail copy as schema-constrained JSON
- Image generation returned as inline base64 data
"""

import asyncio
import os
import json
import logging
from typing import Optional, List, Dict, Any, Callable, TypeVar

import httpx

from ..core.config import Config, get_config
from ..core.exceptions import (
    GenerationError,
    ProviderError,
    SchemaParseError,
    ImageGenerationError,
)
from ..core.security import redact_api_key
from ..models import (
    GroundingSource,
    LengthTier,
    ResearchResult,
    ScriptResult,
    MetadataResult,
    ThumbnailCopy,
    ThumbnailResult,
)
from . import prompts
from .base import BaseGenerationClient
from .factory import register_client

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_SOURCE_TITLE = "Source"
DEFAULT_SOURCE_URI = "#"
DEFAULT_IMAGE_MIME = "image/png"


@register_client("gemini")
class GeminiClient(BaseGenerationClient):
    """
    Gemini generation client.

    Uses one model per operation (see ``models`` in the configuration) and
    a lazily created ``httpx.AsyncClient``.
    """

    env_key_name = "GEMINI_API_KEY"

    def __init__(
        self,
        api_key: Optional[str] = None,
        config: Optional[Config] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: API key (or read from config / environment)
            config: Configuration (defaults to the global config)
            transport: Optional httpx transport, mainly for tests
        """
        self.config = config or get_config()
        self.api_key = api_key or self.config.service.api_key or os.getenv(self.env_key_name)
        self.base_url = self.config.service.base_url.rstrip("/")
        self.timeout = self.config.service.timeout
        self.models = self.config.models
        self.settings = self.config.generation

        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._client_lock = asyncio.Lock()

        if not self.api_key:
            logger.warning(
                f"No API key found for {self.provider_name}. "
                f"Set {self.env_key_name} environment variable or pass api_key parameter."
            )

    @property
    def provider_name(self) -> str:
        return "Gemini"

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    async def research(self, topic: str) -> ResearchResult:
        prompt = prompts.build_research_prompt(topic, self.settings)
        data = await self._generate_content(
            "research",
            self.models.research,
            prompt,
            tools=[{"googleSearch": {}}],
        )

        report = self._extract_text(data)
        if not report:
            logger.warning("Research response contained no text")

        sources = self._extract_sources(data)
        logger.info(f"Research report: {len(report)} characters, {len(sources)} sources")
        return ResearchResult(report=report, sources=sources)

    async def script(self, research_report: str, length_tier: LengthTier) -> ScriptResult:
        prompt = prompts.build_script_prompt(research_report, length_tier.target_chars, self.settings)
        result = await self._generate_structured(
            "script",
            self.models.script,
            prompt,
            prompts.SCRIPT_SCHEMA,
            ScriptResult.from_payload,
        )
        logger.info(
            f"Script: {len(result.raw_script)} characters, {len(result.scenes)} scenes "
            f"(target {length_tier.target_chars})"
        )
        return result

    async def image(self, prompt: str) -> str:
        return await self._generate_image(prompt, stage="images")

    async def _generate_image(self, prompt: str, stage: str) -> str:
        """Image call shared by scene images and the thumbnail background."""
        enhanced_prompt = prompts.build_image_prompt(prompt, self.settings)
        try:
            data = await self._generate_content(
                "image",
                self.models.image,
                enhanced_prompt,
                generation_config={"imageConfig": {"aspectRatio": self.settings.aspect_ratio}},
            )
        except GenerationError as e:
            raise ImageGenerationError(
                f"Image generation failed: {e.message}",
                prompt=prompt,
                stage=stage,
            ) from e

        image_url = self._extract_image_url(data)
        if not image_url:
            logger.warning("Image response contained no inline image data")
        return image_url

    async def metadata(self, script_text: str) -> MetadataResult:
        prompt = prompts.build_metadata_prompt(script_text, self.settings)
        return await self._generate_structured(
            "metadata",
            self.models.metadata,
            prompt,
            prompts.METADATA_SCHEMA,
            MetadataResult.from_payload,
        )

    async def thumbnail(self, script_text: str) -> ThumbnailResult:
        # Copy must succeed before any image request is made
        copy = await self._generate_structured(
            "thumbnail",
            self.models.thumbnail,
            prompts.build_thumbnail_prompt(script_text, self.settings),
            prompts.THUMBNAIL_SCHEMA,
            ThumbnailCopy.from_payload,
        )

        background_url: Optional[str] = None
        try:
            background_url = await self._generate_image(
                prompts.build_thumbnail_image_prompt(copy.image_prompt, self.settings),
                stage="thumbnail",
            ) or None
        except GenerationError as e:
            logger.error(f"Thumbnail background generation failed ({e.details.get('stage')}): {e}")

        if background_url is None:
            logger.warning("Thumbnail background unavailable, keeping copy variants only")

        return ThumbnailResult(
            background_image_url=background_url,
            copy_variants_a=copy.copy_variants_a,
            copy_variants_b=copy.copy_variants_b,
        )

    # -------------------------------------------------------------------------
    # Request Helpers
    # -------------------------------------------------------------------------

    async def _generate_content(
        self,
        operation: str,
        model: str,
        prompt: str,
        generation_config: Optional[Dict[str, Any]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> Dict[str, Any]:
        """Call ``models/{model}:generateContent`` and return the decoded body."""
        payload: Dict[str, Any] = {
            "contents": [{"parts": [{"text": prompt}]}],
        }
        if generation_config:
            payload["generationConfig"] = generation_config
        if tools:
            payload["tools"] = tools

        endpoint = f"{self.base_url}/models/{model}:generateContent"
        params = {"key": self.api_key} if self.api_key else None

        logger.info(f"Calling {self.provider_name} for {operation}: {model}")
        client = await self._get_client()

        try:
            response = await client.post(endpoint, params=params, json=payload)
        except httpx.TimeoutException as e:
            raise ProviderError(
                f"{operation} request timed out after {self.timeout}s",
                provider=self.provider_name,
                stage=operation,
            ) from e
        except httpx.HTTPError as e:
            raise ProviderError(
                f"{operation} request failed: {redact_api_key(str(e))}",
                provider=self.provider_name,
                stage=operation,
            ) from e

        if response.status_code != 200:
            raise ProviderError(
                f"API error {response.status_code} during {operation}",
                provider=self.provider_name,
                status_code=response.status_code,
                response_body=redact_api_key(response.text),
                stage=operation,
            )

        try:
            return response.json()
        except ValueError as e:
            raise GenerationError(
                f"{operation} response body is not JSON",
                stage=operation,
            ) from e

    async def _generate_structured(
        self,
        operation: str,
        model: str,
        prompt: str,
        schema: Dict[str, Any],
        parser: Callable[[Dict[str, Any]], T],
    ) -> T:
        """Request schema-constrained JSON and parse it with ``parser``."""
        data = await self._generate_content(
            operation,
            model,
            prompt,
            generation_config={
                "responseMimeType": "application/json",
                "responseSchema": schema,
            },
        )
        text = self._extract_text(data)
        payload = self._parse_json_response(text, operation)
        try:
            return parser(payload)
        except SchemaParseError as e:
            e.details.setdefault("stage", operation)
            raise

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        async with self._client_lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    timeout=httpx.Timeout(self.timeout),
                    headers={"Content-Type": "application/json"},
                    transport=self._transport,
                )
            return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        async with self._client_lock:
            if self._client:
                await self._client.aclose()
                self._client = None

    # -------------------------------------------------------------------------
    # Response Parsing
    # -------------------------------------------------------------------------

    @staticmethod
    def _first_candidate(data: Dict[str, Any]) -> Dict[str, Any]:
        candidates = data.get("candidates") or []
        return candidates[0] if candidates else {}

    @classmethod
    def _extract_text(cls, data: Dict[str, Any]) -> str:
        """Concatenate the text parts of the first candidate."""
        parts = (cls._first_candidate(data).get("content") or {}).get("parts") or []
        return "".join(
            part.get("text", "")
            for part in parts
            if isinstance(part, dict) and not part.get("thought")
        )

    @classmethod
    def _extract_sources(cls, data: Dict[str, Any]) -> List[GroundingSource]:
        """Grounding citations; missing title/uri fall back to placeholders."""
        metadata = cls._first_candidate(data).get("groundingMetadata") or {}
        sources = []
        for chunk in metadata.get("groundingChunks") or []:
            web = chunk.get("web") or {}
            sources.append(GroundingSource(
                title=web.get("title") or DEFAULT_SOURCE_TITLE,
                uri=web.get("uri") or DEFAULT_SOURCE_URI,
            ))
        return sources

    @classmethod
    def _extract_image_url(cls, data: Dict[str, Any]) -> str:
        """First inline image as a data URL, or an empty string."""
        parts = (cls._first_candidate(data).get("content") or {}).get("parts") or []
        for part in parts:
            inline = part.get("inlineData") if isinstance(part, dict) else None
            if inline and inline.get("data"):
                mime_type = inline.get("mimeType") or DEFAULT_IMAGE_MIME
                return f"data:{mime_type};base64,{inline['data']}"
        return ""

    @staticmethod
    def _parse_json_response(text: str, operation: str) -> Dict[str, Any]:
        """Parse JSON from a response, unwrapping a markdown code block if present."""
        text = (text or "").strip()
        if not text:
            raise SchemaParseError(f"Empty {operation} response", stage=operation)

        try:
            return json.loads(text)
        except json.JSONDecodeError:
            if "```" in text:
                json_block = text.split("```")[1]
                if json_block.startswith("json"):
                    json_block = json_block[4:]
                try:
                    return json.loads(json_block.strip())
                except json.JSONDecodeError:
                    pass
            raise SchemaParseError(
                f"{operation} response is not valid JSON",
                raw_text=text,
                stage=operation,
            )

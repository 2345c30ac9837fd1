"""
Prompts & Response Schemas
==========================

Prompt templates for the five generation operations and the structured
response schemas sent alongside them.
"""

from ..core.config import GenerationConfig

HASHTAG_COUNT = 7
SEO_KEYWORD_COUNT = 20
SUMMARY_LINES = 4
COPY_VARIANT_COUNT = 3


RESEARCH_PROMPT_TEMPLATE = (
    "Topic: {topic}. Write a detailed report on this topic based on the latest "
    "information, including fact checks. Write it in {language}, built on "
    "verified facts with nothing fabricated."
)

SCRIPT_PROMPT_TEMPLATE = """
Write a YouTube narration script based on the research report below.
Research report: {research}

[Guidelines]
1. Length: about {target_chars} characters including spaces (very important, write richly)
2. Point of view: first person, natural monologue-style narration
3. Structure: opening (30-second hook) - development - climax - turn - resolution
4. Content: concrete examples, descriptions that spark the viewer's imagination, a natural call to action
5. Style: fact-based storytelling that earns empathy
6. Language: {language}

[Output format]
- Write the full script, then split it into exactly {scene_count} meaningful scenes.
- For each scene, also produce the narration converted to spoken style optimized for a TTS program (never include special characters such as ## or **).
- For each scene, write an English image generation prompt for a photorealistic, surreal image set in {locale} with {people}.
"""

METADATA_PROMPT_TEMPLATE = """
Analyze the script below and write YouTube metadata in {language}.
Script: {script}

Requirements:
1. A full summary for the YouTube description box
2. A {summary_lines}-line core summary
3. {hashtag_count} representative hashtags (shown on one line)
4. {keyword_count} SEO keywords
5. A greeting and explanation for the pinned comment
"""

THUMBNAIL_PROMPT_TEMPLATE = """
Generate YouTube thumbnail copy in {language} that fits the script below.
Script: {script}

[Type 1: topic, curiosity/hook, value] {variant_count} variants
[Type 2: topic, hook, value] {variant_count} variants
Also recommend one English description prompt for the thumbnail image.
"""

IMAGE_PROMPT_TEMPLATE = (
    "Photorealistic, surreal high-quality image, set in {locale} with {people}, "
    "high resolution, cinematic lighting, no text: {prompt}"
)

THUMBNAIL_IMAGE_PROMPT_TEMPLATE = (
    "Hyper-realistic cinematic YouTube thumbnail background, {locale} context, "
    "emotionally grabbing, no text: {prompt}"
)


# =============================================================================
# Response Schemas
# =============================================================================


SCRIPT_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "rawScript": {"type": "STRING"},
        "ttsScript": {"type": "STRING"},
        "scenes": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "id": {"type": "INTEGER"},
                    "content": {"type": "STRING"},
                    "imagePrompt": {"type": "STRING"},
                },
                "required": ["id", "content", "imagePrompt"],
            },
        },
    },
    "required": ["rawScript", "ttsScript", "scenes"],
}

METADATA_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "youtubeDescription": {"type": "STRING"},
        "summary4Lines": {"type": "STRING"},
        "hashtags": {"type": "ARRAY", "items": {"type": "STRING"}},
        "seoKeywords": {"type": "ARRAY", "items": {"type": "STRING"}},
        "pinnedComment": {"type": "STRING"},
    },
    "required": ["youtubeDescription", "summary4Lines", "hashtags", "seoKeywords", "pinnedComment"],
}

THUMBNAIL_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "copySuggestions": {
            "type": "OBJECT",
            "properties": {
                "type1": {"type": "ARRAY", "items": {"type": "STRING"}},
                "type2": {"type": "ARRAY", "items": {"type": "STRING"}},
            },
            "required": ["type1", "type2"],
        },
        "imagePrompt": {"type": "STRING"},
    },
    "required": ["copySuggestions", "imagePrompt"],
}


# =============================================================================
# Builders
# =============================================================================


def build_research_prompt(topic: str, settings: GenerationConfig) -> str:
    return RESEARCH_PROMPT_TEMPLATE.format(topic=topic, language=settings.language)


def build_script_prompt(research: str, target_chars: int, settings: GenerationConfig) -> str:
    return SCRIPT_PROMPT_TEMPLATE.format(
        research=research,
        target_chars=target_chars,
        language=settings.language,
        scene_count=settings.scene_count,
        locale=settings.locale,
        people=settings.people,
    )


def build_metadata_prompt(script_text: str, settings: GenerationConfig) -> str:
    """Only the first ``metadata_max_chars`` characters of the script are sent."""
    return METADATA_PROMPT_TEMPLATE.format(
        script=script_text[: settings.metadata_max_chars],
        language=settings.language,
        summary_lines=SUMMARY_LINES,
        hashtag_count=HASHTAG_COUNT,
        keyword_count=SEO_KEYWORD_COUNT,
    )


def build_thumbnail_prompt(script_text: str, settings: GenerationConfig) -> str:
    """Only the first ``thumbnail_max_chars`` characters of the script are sent."""
    return THUMBNAIL_PROMPT_TEMPLATE.format(
        script=script_text[: settings.thumbnail_max_chars],
        language=settings.language,
        variant_count=COPY_VARIANT_COUNT,
    )


def build_image_prompt(prompt: str, settings: GenerationConfig) -> str:
    return IMAGE_PROMPT_TEMPLATE.format(
        prompt=prompt,
        locale=settings.locale,
        people=settings.people,
    )


def build_thumbnail_image_prompt(prompt: str, settings: GenerationConfig) -> str:
    return THUMBNAIL_IMAGE_PROMPT_TEMPLATE.format(prompt=prompt, locale=settings.locale)

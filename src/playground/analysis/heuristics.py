"""Local heuristic analysis.

Offline, deterministic stand-in for the AI providers. Used when the caller asks
for `local` or when the requested provider is unavailable or fails.

Images are NOT inspected: the description is a template chosen from the
payload size alone. It exists so the caller always receives a well-formed
result, and it says so in its own text. Documents get a real (if simple)
extractive summary and keyword ranking.

Nothing in this module performs I/O.
"""

from __future__ import annotations

import math
import re
from collections import Counter

from playground.analysis.types import (
    MAX_KEY_POINTS,
    AnalysisRequest,
    AnalysisResult,
    ContentKind,
    ImageTags,
    ProviderChoice,
)

MIN_SENTENCE_LENGTH = 20
DEFAULT_SUMMARY_SENTENCES = 3
FALLBACK_SUMMARY_CHARS = 200

SMALL_IMAGE_MAX_KB = 50
MEDIUM_IMAGE_MAX_KB = 500

LOCAL_IMAGE_CATEGORY = "Unclassified (local estimate)"

STOP_WORDS = frozenset(
    """
    a about above after again against all also am an and any are as at be
    because been before being below between both but by can could did do does
    doing down during each few for from further had has have having he her here
    hers herself him himself his how i if in into is it its itself just me more
    most my myself no nor not now of off on once only or other our ours
    ourselves out over own same she should so some such than that the their
    theirs them themselves then there these they this those through to too
    under until up very was we were what when where which while who whom why
    will with would you your yours yourself yourselves said says like many much
    upon within without across among along around however therefore thus onto
    every either neither another whose
    """.split()
)

_SENTENCE_BOUNDARY = re.compile(r"[.!?]+")
_TOKEN = re.compile(r"[a-z0-9]+")

_TIER_TEMPLATES = {
    "small": (
        "This appears to be a small or low-resolution {fmt} image "
        "(about {kb} KB). Files of this size are usually icons, thumbnails, "
        "simple graphics or screenshots, so the scene is likely simple with "
        "few distinct elements.",
        "icons, logos, thumbnails or simple graphics",
    ),
    "medium": (
        "This appears to be a medium-resolution {fmt} image (about {kb} KB). "
        "Files of this size commonly hold everyday photographs or documents "
        "with moderate detail, such as a few objects, a person or a room.",
        "everyday photographs, portraits, products or scanned pages",
    ),
    "high": (
        "This appears to be a high-resolution {fmt} image (about {kb} KB). "
        "Files of this size usually carry rich detail, such as landscapes, "
        "busy street scenes or groups of people, so the scene is likely "
        "complex with many elements.",
        "landscapes, detailed photographs or complex multi-subject scenes",
    ),
}
_TIER_CONFIDENCE = {"small": 35, "medium": 45, "high": 55}

PROVIDER_FOOTER = (
    "For real image analysis, configure one of: "
    "OpenAI GPT-4o vision (OPENAI_API_KEY), "
    "Hugging Face image captioning (HUGGINGFACE_API_KEY), "
    "Google Cloud Vision (GOOGLE_VISION_API_KEY)."
)

HEURISTIC_NOTICE = (
    "Note: this is a size-based estimate made without computer vision; "
    "it does not describe what the image actually shows."
)


# =============================================================================
# Images
# =============================================================================


def encoded_length(data: bytes) -> int:
    """Length of `data` once base64-encoded, without encoding it."""
    return 4 * math.ceil(len(data) / 3)


def estimate_image_bytes(encoded_len: int) -> int:
    """Approximate payload size from its base64-encoded length."""
    return encoded_len * 3 // 4


def size_tier(approx_bytes: int) -> str:
    """Bucket an approximate byte size into small / medium / high."""
    kb = approx_bytes / 1024
    if kb < SMALL_IMAGE_MAX_KB:
        return "small"
    if kb < MEDIUM_IMAGE_MAX_KB:
        return "medium"
    return "high"


def image_format(mime_type: str) -> str:
    """'image/svg+xml' -> 'SVG'."""
    _, _, subtype = mime_type.partition("/")
    subtype = subtype.split("+", 1)[0].strip()
    return subtype.upper() if subtype else "unknown"


def describe_image_locally(
    data: bytes, mime_type: str, focus: str | None = None
) -> tuple[str, list[str], str]:
    """Build the templated description for an image.

    Returns:
        Tuple of (description, key_points, tier).
    """
    approx = estimate_image_bytes(encoded_length(data))
    tier = size_tier(approx)
    kb = f"{approx / 1024:.1f}"
    fmt = image_format(mime_type)

    template, likely = _TIER_TEMPLATES[tier]
    key_points = [
        f"Format: {fmt}",
        f"Estimated size: {kb} KB",
        f"Detail tier: {tier}",
        f"Likely content: {likely}",
    ]

    paragraphs = [template.format(fmt=fmt, kb=kb)]
    if focus and focus.strip():
        paragraphs.append(
            f'Requested focus: "{focus.strip()}". Local analysis cannot look at '
            "specific regions of an image."
        )
    paragraphs.append("\n".join(f"- {point}" for point in key_points))
    paragraphs.append(HEURISTIC_NOTICE)
    paragraphs.append(PROVIDER_FOOTER)
    return "\n\n".join(paragraphs), key_points, tier


# =============================================================================
# Documents
# =============================================================================


def split_sentences(text: str, min_length: int = MIN_SENTENCE_LENGTH) -> list[str]:
    """Split on terminal punctuation and drop units of `min_length` chars or fewer."""
    sentences = []
    for unit in _SENTENCE_BOUNDARY.split(text):
        unit = unit.strip()
        if len(unit) > min_length:
            sentences.append(unit)
    return sentences


def summarize_text(
    text: str, max_sentences: int = DEFAULT_SUMMARY_SENTENCES
) -> tuple[str, int]:
    """Extractive summary: the first `max_sentences` qualifying sentences.

    Returns:
        Tuple of (summary, number of qualifying sentences in the text).
    """
    sentences = split_sentences(text)
    if sentences:
        return ". ".join(sentences[:max_sentences]) + ".", len(sentences)

    collapsed = " ".join(text.split())
    if len(collapsed) > FALLBACK_SUMMARY_CHARS:
        collapsed = collapsed[:FALLBACK_SUMMARY_CHARS].rstrip() + "..."
    return collapsed, 0


def extract_keywords(text: str, limit: int = MAX_KEY_POINTS) -> list[tuple[str, int]]:
    """Most frequent non-stop-word tokens longer than 3 characters.

    Ties keep first-occurrence order.
    """
    tokens = [
        token
        for token in _TOKEN.findall(text.lower())
        if len(token) > 3 and token not in STOP_WORDS
    ]
    # Counter preserves insertion order and most_common() sorts stably.
    return Counter(tokens).most_common(limit)


def keyword_key_points(text: str, limit: int = MAX_KEY_POINTS) -> list[str]:
    """Render extracted keywords as key point strings."""
    points = []
    for word, count in extract_keywords(text, limit):
        times = "time" if count == 1 else "times"
        points.append(f"{word.capitalize()} (mentioned {count} {times})")
    return points


def count_words(text: str) -> int:
    return len(text.split())


# =============================================================================
# Analyzer
# =============================================================================


class LocalAnalyzer:
    """Deterministic offline analyzer; the last link of every fallback chain."""

    name = ProviderChoice.LOCAL.value

    def __init__(self, summary_sentences: int = DEFAULT_SUMMARY_SENTENCES) -> None:
        self._summary_sentences = summary_sentences

    def analyze(self, request: AnalysisRequest) -> AnalysisResult:
        if request.kind is ContentKind.IMAGE:
            return self._analyze_image(request)
        return self._analyze_document(request)

    def _analyze_image(self, request: AnalysisRequest) -> AnalysisResult:
        description, key_points, tier = describe_image_locally(
            request.data, request.effective_mime_type, request.focus
        )
        return AnalysisResult(
            description=description,
            provider=self.name,
            requested_provider=request.provider.value,
            key_points=key_points[:MAX_KEY_POINTS],
            category=LOCAL_IMAGE_CATEGORY,
            confidence=_TIER_CONFIDENCE[tier],
            tags=ImageTags(),
            metadata={
                "size_tier": tier,
                "estimated_bytes": estimate_image_bytes(encoded_length(request.data)),
                "method": "size-heuristic",
            },
        )

    def _analyze_document(self, request: AnalysisRequest) -> AnalysisResult:
        text = request.text
        summary, sentence_count = summarize_text(text, self._summary_sentences)
        if not summary:
            summary = "The document contains no readable text."
        return AnalysisResult(
            description=summary,
            provider=self.name,
            requested_provider=request.provider.value,
            key_points=keyword_key_points(text),
            category=request.document_type or "text",
            confidence=50 if sentence_count >= self._summary_sentences else 30,
            word_count=count_words(text),
            metadata={"sentences": sentence_count, "method": "extractive"},
        )

"""Turn provider output into the canonical AnalysisResult shape.

Keyword extraction over image descriptions uses fixed vocabularies and
word-boundary matching; it is a pure function of the description text.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from functools import lru_cache
from typing import Any

from playground.analysis.errors import ProviderResponseError
from playground.analysis.heuristics import count_words, keyword_key_points
from playground.analysis.types import (
    MAX_KEY_POINTS,
    AnalysisRequest,
    AnalysisResult,
    ContentKind,
    ImageTags,
)

PROVIDER_CONFIDENCE = 90

BULLET_MARKERS = ("-", "*", "•")

OBJECT_TERMS: tuple[str, ...] = (
    # Vehicles
    "car", "truck", "bus", "motorcycle", "bicycle", "van", "suv", "sedan",
    "vehicle", "automobile",
    # Buildings and structures
    "building", "house", "skyscraper", "tower", "bridge", "fence", "wall",
    "roof", "window", "door", "chimney", "garage", "shed", "barn",
    # Natural elements
    "mountain", "hill", "tree", "forest", "lake", "river", "ocean", "sea",
    "water", "sky", "cloud", "sun", "moon", "star", "grass", "flower", "plant",
    "rock", "stone", "sand", "snow", "ice",
    # Roads and infrastructure
    "road", "street", "highway", "path", "sidewalk", "traffic light",
    "stop sign", "sign", "billboard", "lamp post", "telephone pole",
    # Furniture and household objects
    "chair", "table", "desk", "bed", "sofa", "couch", "lamp", "mirror",
    "picture", "painting", "clock", "book", "newspaper", "magazine",
    # Clothing and accessories
    "shirt", "pants", "dress", "hat", "shoes", "bag", "backpack", "purse",
    "watch", "glasses", "sunglasses",
    # Animals
    "dog", "cat", "bird", "fish", "horse", "cow", "sheep", "pig", "chicken",
    "duck", "animal",
    # Food and drinks
    "food", "pizza", "burger", "sandwich", "apple", "banana", "coffee",
    "water bottle", "cup", "plate", "bowl",
    # Technology
    "phone", "smartphone", "computer", "laptop", "tablet", "television", "tv",
    "camera", "headphones", "speaker", "printer", "keyboard", "mouse",
)  # fmt: skip

PEOPLE_TERMS: tuple[str, ...] = (
    "person", "people", "man", "woman", "men", "women", "child", "children",
    "boy", "girl", "baby", "adult", "teenager", "elderly", "crowd", "group",
)  # fmt: skip

EMOTION_TERMS: tuple[str, ...] = (
    "happy", "sad", "angry", "surprised", "fearful", "disgusted", "neutral",
    "smiling", "frowning", "laughing", "crying", "serious", "cheerful",
    "melancholic", "excited", "calm", "anxious", "relaxed", "tense", "joyful",
    "worried", "confident",
)  # fmt: skip

COLOR_TERMS: tuple[str, ...] = (
    "red", "blue", "green", "yellow", "orange", "purple", "pink", "brown",
    "black", "white", "gray", "grey", "cyan", "magenta", "gold", "silver",
    "beige", "navy", "maroon", "olive", "teal", "violet", "crimson", "azure",
    "emerald", "amber",
)  # fmt: skip

# Checked in order; the first family with a hit decides the scene.
SCENE_FAMILIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Indoor scene", ("indoor", "indoors", "room", "inside", "interior")),
    (
        "Outdoor scene",
        (
            "outdoor", "outdoors", "outside", "nature", "landscape",
            "exterior", "street", "park",
        ),
    ),
    ("Urban scene", ("urban", "city", "downtown")),
)  # fmt: skip
UNCLEAR_SCENE = "Mixed or unclear scene"


@lru_cache(maxsize=512)
def _term_pattern(term: str) -> re.Pattern[str]:
    words = r"\s+".join(re.escape(part) for part in term.split())
    return re.compile(rf"\b{words}(?:s|es)?\b", re.IGNORECASE)


def find_terms(text: str, vocabulary: Iterable[str]) -> list[str]:
    """Vocabulary terms present in `text`, in vocabulary order, de-duplicated."""
    found: list[str] = []
    for term in vocabulary:
        if term not in found and _term_pattern(term).search(text):
            found.append(term)
    return found


def extract_image_tags(description: str) -> ImageTags:
    """Keyword tags for an image description.

    Emotions are only scanned when the description mentions people.
    """
    people = find_terms(description, PEOPLE_TERMS)
    return ImageTags(
        objects=find_terms(description, OBJECT_TERMS),
        people=people,
        emotions=find_terms(description, EMOTION_TERMS) if people else [],
        colors=find_terms(description, COLOR_TERMS),
    )


def classify_scene(description: str) -> str:
    for label, keywords in SCENE_FAMILIES:
        if find_terms(description, keywords):
            return label
    return UNCLEAR_SCENE


def _strip_bullet(line: str) -> str | None:
    stripped = line.strip()
    for marker in BULLET_MARKERS:
        if stripped.startswith(marker):
            item = stripped[len(marker) :].strip()
            return item or None
    return None


def extract_bullets(text: str, limit: int = MAX_KEY_POINTS) -> list[str]:
    """Lines of `text` that start with a bullet marker, marker removed."""
    points: list[str] = []
    for line in text.splitlines():
        item = _strip_bullet(line)
        if item:
            points.append(item)
            if len(points) >= limit:
                break
    return points


def _clean_points(points: Sequence[str]) -> list[str]:
    cleaned = []
    for point in points:
        point = str(point).strip()
        if point and point not in cleaned:
            cleaned.append(point)
    return cleaned[:MAX_KEY_POINTS]


def normalize(
    provider_used: str,
    raw_text: str | None,
    structured: dict[str, Any] | None = None,
    *,
    request: AnalysisRequest,
) -> AnalysisResult:
    """Build an AnalysisResult from provider output.

    Args:
        provider_used: Provider that produced the text.
        raw_text: Description or summary text from the provider.
        structured: Optional provider-native fields. `key_points` (list of str)
            is used directly; everything else is kept as metadata.
        request: The request being answered.

    Raises:
        ProviderResponseError: If the text is empty after trimming.
    """
    description = (raw_text or "").strip()
    if not description:
        raise ProviderResponseError(provider_used, "empty description")

    fields = dict(structured or {})
    native_points = fields.pop("key_points", None)
    if native_points:
        key_points = _clean_points(native_points)
    else:
        key_points = extract_bullets(description)

    result = AnalysisResult(
        description=description,
        provider=provider_used,
        requested_provider=request.provider.value,
        key_points=key_points,
        confidence=PROVIDER_CONFIDENCE,
        metadata=fields,
    )

    if request.kind is ContentKind.IMAGE:
        result.tags = extract_image_tags(description)
        result.category = classify_scene(description)
    else:
        source = request.text
        result.category = request.document_type or "text"
        result.word_count = count_words(source)
        if not result.key_points:
            result.key_points = keyword_key_points(source)

    return result

"""Vector similarity and score calibration helpers."""

import math
from collections.abc import Sequence


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors, in [-1, 1].

    Returns 0.0 for vectors of different length (e.g. an item embedded with an
    older model) and when either vector has zero norm.
    """
    if len(a) != len(b):
        return 0.0

    dot = 0.0
    norm_a = 0.0
    norm_b = 0.0
    for x, y in zip(a, b, strict=True):
        dot += x * y
        norm_a += x * x
        norm_b += y * y

    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))


def clamp_score(score: float) -> float:
    """Clamp a raw score into the normalized [0, 1] range; NaN and infinities become 0.0."""
    if not math.isfinite(score):
        return 0.0
    return max(0.0, min(1.0, score))

"""Keyword heuristic sentiment scoring for complaint text."""

from __future__ import annotations

import math
import re

NEGATIVE_KEYWORDS = frozenset(
    {
        "terrible", "horrible", "awful", "bad", "poor", "worst", "unacceptable",
        "disappointing", "failed", "broken", "defective", "dangerous", "unsafe",
        "unprofessional", "incompetent", "negligent", "delayed", "late", "slow",
        "expensive", "overpriced", "waste", "fraud", "scam", "cheated", "lied",
        "never", "hate", "angry", "furious", "disgusted", "appalled", "shocked",
        "cheap", "shoddy", "substandard", "inferior", "damage", "damaged",
    }
)  # fmt: skip

VERY_NEGATIVE_PHRASES = (
    "complete disaster",
    "total failure",
    "absolute worst",
    "never again",
    "stay away",
    "do not hire",
    "avoid at all costs",
    "waste of money",
    "serious safety",
    "code violation",
    "illegal",
    "not up to code",
)

POSITIVE_KEYWORDS = frozenset(
    {
        "good", "great", "excellent", "professional", "quality", "satisfied",
        "happy", "pleased", "resolved", "fixed", "improved", "better",
    }
)  # fmt: skip

INTENSIFIERS = frozenset({"very", "extremely", "absolutely", "totally", "completely"})
NEGATIONS = frozenset({"not", "don't", "didn't"})

PHRASE_WEIGHT = 0.3
KEYWORD_WEIGHT = 0.1
INTENSIFIER_MULTIPLIER = 1.5
NEGATED_POSITIVE_WEIGHT = 0.1
NEGATED_NEGATIVE_WEIGHT = 0.05
# Complaints lean negative by nature.
COMPLAINT_BIAS = -0.2


def _clamp(value: float, low: float = -1.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def analyze_sentiment(text: str) -> float:
    """Score the sentiment of complaint text.

    Algorithm:
    1. Each very negative phrase found in the text subtracts 0.3.
    2. Each whitespace token scores -0.1 (negative keyword) or +0.1
       (positive keyword), times 1.5 when the previous token is an
       intensifier.
    3. A negation token ("not", "don't", "didn't") subtracts 0.1 before a
       positive keyword and adds 0.05 before a negative one.
    4. The total is divided by sqrt(word count) and clamped to [-1, 1].
    5. A fixed -0.2 bias is applied and the result clamped again.

    Args:
        text: Free complaint text.

    Returns:
        Score from -1.0 (very negative) to 1.0 (very positive). Empty text
        scores the bias value, -0.2.
    """
    lower_text = text.lower()
    score = 0.0

    for phrase in VERY_NEGATIVE_PHRASES:
        if phrase in lower_text:
            score -= PHRASE_WEIGHT

    words = re.split(r"\s+", lower_text)
    word_count = len(words)

    for i, word in enumerate(words):
        next_word = words[i + 1] if i < word_count - 1 else ""
        multiplier = INTENSIFIER_MULTIPLIER if i > 0 and words[i - 1] in INTENSIFIERS else 1.0

        if word in NEGATIVE_KEYWORDS:
            score -= KEYWORD_WEIGHT * multiplier
        if word in POSITIVE_KEYWORDS:
            score += KEYWORD_WEIGHT * multiplier

        if word in NEGATIONS:
            if next_word in POSITIVE_KEYWORDS:
                score -= NEGATED_POSITIVE_WEIGHT
            elif next_word in NEGATIVE_KEYWORDS:
                score += NEGATED_NEGATIVE_WEIGHT

    if word_count > 0:
        score = score / math.sqrt(word_count)

    score = _clamp(score)
    return _clamp(score + COMPLAINT_BIAS)

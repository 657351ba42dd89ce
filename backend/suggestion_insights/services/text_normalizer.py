"""Text normalization for suggestion analysis.

Turns free text into the canonical token sequence used by clustering and
category analysis. No stemming is applied, so "submit" and "submitted" stay
distinct tokens.
"""

import re

# Tokens of this length or shorter are dropped
MIN_TOKEN_LENGTH = 2

# Common English function words plus a few generic verbs. Changing this set
# changes similarity scores and theme output.
STOP_WORDS = frozenset({
    # articles, conjunctions, prepositions
    "the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by",
    # auxiliary verbs
    "is", "are", "was", "were", "be", "been", "being", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might", "can",
    # demonstratives and pronouns
    "this", "that", "these", "those", "i", "you", "he", "she", "it", "we", "they",
    "me", "him", "her", "us", "them", "my", "your", "his", "its", "our", "their",
    # generic verbs
    "get", "like", "want", "need", "use", "make", "see", "know", "think",
})

NON_WORD_PATTERN = re.compile(r"[^\w\s]")
WHITESPACE_PATTERN = re.compile(r"\s+")
NON_ALNUM_PATTERN = re.compile(r"[^a-z0-9 ]")


def normalize(text: str | None) -> list[str]:
    """Normalize text into an ordered list of content tokens.

    Steps: lowercase, replace punctuation with spaces, collapse whitespace,
    split, drop tokens of length <= 2, drop stop words.

    Args:
        text: Raw text, may be empty or None

    Returns:
        Tokens in their original order
    """
    if not text:
        return []

    cleaned = NON_WORD_PATTERN.sub(" ", text.lower())
    cleaned = WHITESPACE_PATTERN.sub(" ", cleaned).strip()
    if not cleaned:
        return []

    return [
        token
        for token in cleaned.split(" ")
        if len(token) > MIN_TOKEN_LENGTH and token not in STOP_WORDS
    ]


def processed_text(tokens: list[str]) -> str:
    """Join normalized tokens into the comparable "processed text" form."""
    return " ".join(tokens)


def coarse_tokens(text: str | None, min_length: int = 4) -> list[str]:
    """Coarse corpus-wide tokenizer used for common themes.

    Unlike :func:`normalize`, non-alphanumeric characters are deleted rather
    than replaced, stop words are kept, and only tokens of at least
    ``min_length`` characters survive.
    """
    if not text:
        return []
    cleaned = NON_ALNUM_PATTERN.sub("", text.lower())
    return [word for word in cleaned.split(" ") if len(word) >= min_length]

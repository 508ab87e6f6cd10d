"""
Text helpers shared by retrieval, memory scoring and synthesis.

Dependencies: re, math
System role: Tokenization, lexical overlap and prompt hygiene
"""

import math
import re

MAX_PROMPT_CHARS = 10_000

_TOKEN_RE = re.compile(r"[a-z0-9]+")
_FENCE_RE = re.compile(r"```")
_BLANK_RUN_RE = re.compile(r"\n{3,}")

STOPWORDS = frozenset(
    {
        "a", "an", "and", "are", "as", "at", "be", "by", "can", "do", "does",
        "for", "from", "how", "i", "in", "is", "it", "its", "me", "of", "on",
        "or", "that", "the", "this", "to", "was", "what", "when", "where",
        "which", "who", "why", "will", "with", "you", "your",
    }
)


def tokenize(text: str) -> list[str]:
    """Lower-cased alphanumeric tokens in order of appearance."""
    return _TOKEN_RE.findall(text.lower())


def query_terms(text: str) -> set[str]:
    """Distinct content terms of a query (stopwords removed)."""
    return {token for token in tokenize(text) if token not in STOPWORDS}


def lexical_overlap(query: str, text: str) -> float:
    """
    Fraction of distinct query terms present in text.

    Args:
        query: Query text
        text: Candidate text

    Returns:
        Score in [0, 1]; 0.0 when the query has no content terms
    """
    terms = query_terms(query)
    if not terms:
        return 0.0
    vocabulary = set(tokenize(text))
    return len(terms & vocabulary) / len(terms)


def normalize_for_dedup(text: str) -> str:
    """Collapse whitespace and case so near-identical texts compare equal."""
    return " ".join(text.lower().split())


def sanitize_for_prompt(text: str, max_chars: int = MAX_PROMPT_CHARS) -> str:
    """
    Neutralize user text before it is placed in a prompt.

    Removes code fence markers, collapses runs of blank lines, trims and
    caps the length.
    """
    cleaned = _FENCE_RE.sub("", text)
    cleaned = _BLANK_RUN_RE.sub("\n\n", cleaned)
    return cleaned.strip()[:max_chars]


def estimate_tokens(text: str) -> int:
    """Rough token count used when a provider reports no usage (4 chars per token)."""
    return math.ceil(len(text) / 4)

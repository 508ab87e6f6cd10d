"""
Sliding-window text chunker.

Splits raw document text into overlapping, ordered character windows and
annotates each with its first markdown heading, a code flag and a word
count.

Dependencies: re, dataclasses, curriculum_rag.core.exceptions
System role: First stage of ingestion
"""

import re
from dataclasses import dataclass

from curriculum_rag.core.exceptions import ValidationError

_HEADING_RE = re.compile(r"^#+\s+(.+)$", re.MULTILINE)
_FENCE = "```"


@dataclass(frozen=True)
class TextChunk:
    """
    One window of a document.

    Attributes:
        index: Ordinal position within the document
        content: Text slice text[start:end]
        heading: First markdown heading inside the slice, if any
        is_code: True when the slice contains a complete fence pair
        word_count: Number of whitespace-separated tokens
        start: Inclusive start offset in the source text
        end: Exclusive end offset in the source text
    """

    index: int
    content: str
    heading: str | None
    is_code: bool
    word_count: int
    start: int
    end: int


class Chunker:
    """
    Deterministic sliding-window chunker.

    Windows are chunk_size characters long and consecutive windows share
    chunk_overlap characters. The last window ends exactly at the end of
    the text.
    """

    def __init__(self, chunk_size: int = 1000, chunk_overlap: int = 200) -> None:
        """
        Args:
            chunk_size: Window length in characters
            chunk_overlap: Characters shared by consecutive windows

        Raises:
            ValidationError: If the window parameters cannot make progress
        """
        if chunk_size <= 0:
            raise ValidationError("chunk_size must be positive", field="chunk_size")
        if chunk_overlap < 0:
            raise ValidationError("chunk_overlap must not be negative", field="chunk_overlap")
        if chunk_overlap >= chunk_size:
            raise ValidationError(
                "chunk_overlap must be smaller than chunk_size",
                field="chunk_overlap",
                details={"chunk_size": chunk_size, "chunk_overlap": chunk_overlap},
            )
        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap

    def split(self, text: str) -> list[TextChunk]:
        """
        Split text into ordered chunks.

        Args:
            text: Raw document text

        Returns:
            Chunks in document order; empty list for empty text
        """
        chunks: list[TextChunk] = []
        length = len(text)
        start = 0
        while start < length:
            end = min(start + self.chunk_size, length)
            content = text[start:end]
            chunks.append(
                TextChunk(
                    index=len(chunks),
                    content=content,
                    heading=extract_heading(content),
                    is_code=content.count(_FENCE) >= 2,
                    word_count=len(content.split()),
                    start=start,
                    end=end,
                )
            )
            if end == length:
                break
            start = end - self.chunk_overlap
        return chunks


def extract_heading(text: str) -> str | None:
    """Return the first markdown heading title in text, if any."""
    match = _HEADING_RE.search(text)
    return match.group(1).strip() if match else None

"""
Text Chunking Module

Splits extracted document text into fixed-size, overlapping character windows.
"""

from dataclasses import dataclass
from typing import List
import logging

from .config import RAGConfig
from .errors import InvalidChunkConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Chunk:
    """A contiguous slice of a source document's text."""
    source_filename: str
    chunk_index: int
    text: str


def split_text(text: str, window: int, overlap: int) -> List[str]:
    """
    Split text into windows of `window` characters, each starting
    `window - overlap` characters after the previous one.

    The last window may be shorter than `window`. Empty text yields no chunks.

    Raises:
        InvalidChunkConfig: if not ``window > overlap >= 0``
    """
    if overlap < 0 or window <= overlap:
        raise InvalidChunkConfig(
            f"Invalid chunk configuration: window={window}, overlap={overlap} "
            "(need window > overlap >= 0)"
        )

    step = window - overlap
    chunks = []
    start = 0
    while start < len(text):
        chunks.append(text[start:start + window])
        # Stop once the window reached the end; another step would only repeat the overlap.
        if start + window >= len(text):
            break
        start += step
    return chunks


class TextChunker:
    """Applies the configured window/overlap policy to whole documents."""

    def __init__(self, config: RAGConfig):
        self.config = config
        # Fail fast before any document is read
        split_text("", config.chunk_size, config.chunk_overlap)

    def chunk_document(self, text: str, filename: str) -> List[Chunk]:
        """
        Split a document's text into numbered chunks.

        Args:
            text: Extracted document text
            filename: Source filename stored with every chunk

        Returns:
            Chunks in document order, indexed from 0
        """
        pieces = split_text(text, self.config.chunk_size, self.config.chunk_overlap)
        chunks = [
            Chunk(source_filename=filename, chunk_index=i, text=piece)
            for i, piece in enumerate(pieces)
        ]
        logger.info(f"Created {len(chunks)} chunks for document {filename}")
        return chunks

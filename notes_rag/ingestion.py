"""
Ingestion Module

Walks a document folder, extracts and chunks each file, embeds every chunk
and upserts it into the vector store under a unique point id.
"""

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple
import hashlib
import itertools
import logging
import os
import threading
import time

from .chunking import Chunk, TextChunker
from .config import RAGConfig
from .document_processor import DocumentProcessor
from .embeddings import EmbeddingClient
from .errors import ExtractionError, RemoteError
from .vector_store import QdrantGateway


logger = logging.getLogger(__name__)


class IdAllocator:
    """
    Thread-safe, strictly increasing point id source.

    Seeded from wall-clock milliseconds times 100, which leaves room for
    100 ids per millisecond before colliding with a later run's seed.
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int(time.time() * 1000) * 100
        self.seed = seed
        self._counter = itertools.count(seed + 1)
        self._lock = threading.Lock()

    def next_id(self, chunk: Optional[Chunk] = None) -> int:
        with self._lock:
            return next(self._counter)


class ContentIdAllocator:
    """Deterministic ids from filename and chunk index, so re-ingestion overwrites."""

    def next_id(self, chunk: Chunk) -> int:
        key = f"{chunk.source_filename}:{chunk.chunk_index}".encode('utf-8')
        return int.from_bytes(hashlib.sha256(key).digest()[:8], 'big')


@dataclass
class IngestionReport:
    """Outcome of one ingestion run."""
    files_processed: int = 0
    files_skipped: int = 0
    failed_files: List[str] = field(default_factory=list)
    chunks_upserted: int = 0
    failed_chunks: List[Tuple[str, int]] = field(default_factory=list)


class IngestionPipeline:
    """Document folder → chunks → embeddings → vector store."""

    def __init__(
        self,
        config: RAGConfig,
        embedder: EmbeddingClient,
        gateway: QdrantGateway,
        extractor: Optional[Callable[[str], str]] = None,
        id_allocator=None,
    ):
        self.config = config
        self.embedder = embedder
        self.gateway = gateway
        self.processor = DocumentProcessor(config)
        self.extract = extractor or self.processor.extract_text
        self.chunker = TextChunker(config)
        if id_allocator is None:
            id_allocator = ContentIdAllocator() if config.point_id_strategy == 'content' else IdAllocator()
        self.id_allocator = id_allocator
        self._report_lock = threading.Lock()

    def ingest(self, root_path: str) -> IngestionReport:
        """
        Ingest every supported document under root_path.

        Files that cannot be extracted are logged and skipped. Embedding or
        store failures abort the run unless ``skip_failed_chunks`` is set.

        Returns:
            IngestionReport with per-run counts
        """
        report = IngestionReport()

        if not os.path.isdir(root_path):
            logger.warning(f"Folder not found: {root_path}")
            return report

        logger.info(
            f"Starting ingestion of {root_path} into '{self.config.collection_name}' "
            f"(model={self.config.embedding_model})"
        )

        for file_path in self.processor.iter_files(root_path):
            filename = os.path.basename(file_path)

            if not self.processor.supports(file_path):
                logger.info(f"Skipping unsupported file: {filename}")
                report.files_skipped += 1
                continue

            try:
                text = self.extract(file_path)
            except ExtractionError as e:
                logger.warning(f"Error reading file: {filename} -> {e.reason}")
                report.failed_files.append(file_path)
                continue

            if not text or not text.strip():
                logger.info(f"Skipping empty file: {filename}")
                report.files_skipped += 1
                continue

            self.ingest_text(text, filename, report)
            report.files_processed += 1

        logger.info(
            f"Ingestion finished: {report.files_processed} files, "
            f"{report.chunks_upserted} vectors upserted, "
            f"{len(report.failed_files)} unreadable files, {len(report.failed_chunks)} failed chunks"
        )
        return report

    def ingest_text(self, text: str, filename: str, report: Optional[IngestionReport] = None) -> IngestionReport:
        """Chunk one document's text and store every chunk."""
        if report is None:
            report = IngestionReport()

        chunks = self.chunker.chunk_document(text, filename)

        if self.config.ingest_workers > 1 and len(chunks) > 1:
            with ThreadPoolExecutor(max_workers=self.config.ingest_workers) as pool:
                # list() re-raises the first worker exception here
                list(pool.map(lambda c: self._store_chunk(c, report), chunks))
        else:
            for chunk in chunks:
                self._store_chunk(chunk, report)

        return report

    def _store_chunk(self, chunk: Chunk, report: IngestionReport) -> None:
        try:
            vector = self.embedder.embed(chunk.text)
            point_id = self.id_allocator.next_id(chunk)
            self.gateway.ensure_and_upsert(
                self.config.collection_name,
                self.config.vector_size,
                self.config.qdrant_distance,
                point_id,
                vector,
                {
                    'filename': chunk.source_filename,
                    'chunk_index': chunk.chunk_index,
                    'text_content': chunk.text,
                },
            )
        except RemoteError as e:
            if not self.config.skip_failed_chunks:
                raise
            logger.error(f"Failed chunk {chunk.chunk_index} from {chunk.source_filename}: {e}")
            with self._report_lock:
                report.failed_chunks.append((chunk.source_filename, chunk.chunk_index))
            return

        with self._report_lock:
            report.chunks_upserted += 1
        logger.info(f"Processed chunk {chunk.chunk_index} (ID: {point_id}) from {chunk.source_filename}")

"""
RAG Configuration Management

Centralized configuration for all RAG pipeline components.
Loads from environment variables with sensible defaults.
"""

import os
from typing import Optional
from dataclasses import dataclass

from .errors import InvalidChunkConfig


DISTANCE_METRICS = {
    'cosine': 'Cosine',
    'euclidean': 'Euclid',
    'dot': 'Dot',
}

POINT_ID_STRATEGIES = ('counter', 'content')


def _env_flag(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ('1', 'true', 'yes', 'on')


@dataclass
class RAGConfig:
    """Configuration class for RAG pipeline settings."""

    # Document Ingestion
    documents_folder: str = './downloads_'
    allowed_extensions: tuple = ('.pdf', '.docx', '.pptx')
    ingest_workers: int = 1
    skip_failed_chunks: bool = False
    point_id_strategy: str = 'counter'  # options: counter, content

    # Text Chunking
    chunk_size: int = 500
    chunk_overlap: int = 50

    # Embedding Model
    embedding_model: str = "text-embedding-3-small"
    vector_size: int = 1536

    # Vector Database
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: Optional[str] = None
    collection_name: str = "class_notes"
    distance_metric: str = "cosine"  # options: cosine, euclidean, dot
    similarity_threshold: float = 0.2
    top_k_results: int = 20

    # LLM Configuration
    openai_api_key: Optional[str] = None
    default_model: str = "gpt-4o-mini"
    max_tokens: int = 1000
    temperature: float = 0.1
    # LLM Provider selection
    llm_provider: str = "openai"  # options: openai, gemini
    gemini_api_key: Optional[str] = None

    # Remote calls
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> 'RAGConfig':
        """Create configuration from environment variables."""
        return cls(
            # Document Ingestion
            documents_folder=os.getenv('DOCUMENTS_FOLDER', cls.documents_folder),
            ingest_workers=int(os.getenv('INGEST_WORKERS', cls.ingest_workers)),
            skip_failed_chunks=_env_flag('SKIP_FAILED_CHUNKS', cls.skip_failed_chunks),
            point_id_strategy=os.getenv('POINT_ID_STRATEGY', cls.point_id_strategy).lower(),

            # Text Chunking
            chunk_size=int(os.getenv('CHUNK_SIZE', cls.chunk_size)),
            chunk_overlap=int(os.getenv('CHUNK_OVERLAP', cls.chunk_overlap)),

            # Embedding Model
            embedding_model=os.getenv('EMBEDDING_MODEL', cls.embedding_model),
            vector_size=int(os.getenv('VECTOR_SIZE', cls.vector_size)),

            # Vector Database
            qdrant_url=os.getenv('QDRANT_URL', cls.qdrant_url).rstrip('/'),
            qdrant_api_key=os.getenv('QDRANT_API_KEY') or None,
            collection_name=os.getenv('COLLECTION_NAME', cls.collection_name),
            distance_metric=os.getenv('DISTANCE_METRIC', cls.distance_metric).lower(),
            similarity_threshold=float(os.getenv('SIMILARITY_THRESHOLD', cls.similarity_threshold)),
            top_k_results=int(os.getenv('TOP_K_RESULTS', cls.top_k_results)),

            # LLM Configuration
            openai_api_key=os.getenv('OPENAI_API_KEY') or os.getenv('OPENAI_KEY'),
            default_model=os.getenv('DEFAULT_MODEL', cls.default_model),
            max_tokens=int(os.getenv('MAX_TOKENS', cls.max_tokens)),
            temperature=float(os.getenv('TEMPERATURE', cls.temperature)),
            llm_provider=os.getenv('LLM_PROVIDER', cls.llm_provider).lower(),
            gemini_api_key=os.getenv('GEMINI_API_KEY'),

            # Remote calls
            request_timeout=float(os.getenv('REQUEST_TIMEOUT', cls.request_timeout)),
        )

    @property
    def qdrant_distance(self) -> str:
        """Distance name as the vector store expects it on the wire."""
        return DISTANCE_METRICS[self.distance_metric]

    def validate(self) -> None:
        """Validate configuration settings."""
        if self.chunk_size <= 0:
            raise InvalidChunkConfig("chunk_size must be positive")
        if self.chunk_overlap < 0 or self.chunk_overlap >= self.chunk_size:
            raise InvalidChunkConfig("chunk_overlap must be between 0 and chunk_size - 1")
        if self.vector_size <= 0:
            raise ValueError("vector_size must be positive")
        if self.distance_metric not in DISTANCE_METRICS:
            raise ValueError(f"distance_metric must be one of: {', '.join(DISTANCE_METRICS)}")
        if self.top_k_results <= 0:
            raise ValueError("top_k_results must be positive")
        if self.ingest_workers <= 0:
            raise ValueError("ingest_workers must be positive")
        if self.point_id_strategy not in POINT_ID_STRATEGIES:
            raise ValueError(f"point_id_strategy must be one of: {', '.join(POINT_ID_STRATEGIES)}")
        if self.llm_provider not in ('openai', 'gemini'):
            raise ValueError("llm_provider must be 'openai' or 'gemini'")
        if self.request_timeout <= 0:
            raise ValueError("request_timeout must be positive")

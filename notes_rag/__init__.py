"""
Class Notes RAG Pipeline

Ingests class notes (PDF, DOCX, PPTX) into a Qdrant collection and
answers questions from them with an LLM.
"""

__version__ = "0.1.0"

# Import main components for easy access
from .config import RAGConfig
from .chunking import Chunk, TextChunker, split_text
from .embeddings import EmbeddingClient
from .vector_store import QdrantGateway, SearchResult
from .document_processor import DocumentProcessor
from .ingestion import IdAllocator, IngestionPipeline, IngestionReport
from .retrieval import ContextBlock, RetrieverEngine
from .response_generator import NO_CONTEXT_ANSWER, ResponseGenerator
from .pipeline import build_ingestion_pipeline, build_response_generator, build_retriever

__all__ = [
    "RAGConfig",
    "Chunk",
    "TextChunker",
    "split_text",
    "EmbeddingClient",
    "QdrantGateway",
    "SearchResult",
    "DocumentProcessor",
    "IdAllocator",
    "IngestionPipeline",
    "IngestionReport",
    "ContextBlock",
    "RetrieverEngine",
    "NO_CONTEXT_ANSWER",
    "ResponseGenerator",
    "build_ingestion_pipeline",
    "build_response_generator",
    "build_retriever",
]

"""
Component wiring.

Builds the ingestion and question-answering pipelines from one RAGConfig
so every component shares the same configured clients.
"""

from typing import Optional

from .config import RAGConfig
from .embeddings import EmbeddingClient
from .ingestion import IngestionPipeline
from .response_generator import ResponseGenerator
from .retrieval import RetrieverEngine
from .vector_store import QdrantGateway


def build_ingestion_pipeline(config: Optional[RAGConfig] = None) -> IngestionPipeline:
    config = config or RAGConfig.from_env()
    config.validate()
    return IngestionPipeline(config, EmbeddingClient(config), QdrantGateway(config))


def build_retriever(config: Optional[RAGConfig] = None) -> RetrieverEngine:
    config = config or RAGConfig.from_env()
    config.validate()
    return RetrieverEngine(config, EmbeddingClient(config), QdrantGateway(config))


def build_response_generator(config: Optional[RAGConfig] = None) -> ResponseGenerator:
    config = config or RAGConfig.from_env()
    return ResponseGenerator(config, build_retriever(config))

"""
Retrieval Engine Module

Embeds a query, searches the vector store and keeps only results
above the relevance threshold.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging

from .config import RAGConfig
from .embeddings import EmbeddingClient
from .vector_store import QdrantGateway


logger = logging.getLogger(__name__)


@dataclass
class ContextBlock:
    """Filtered (filename, text) entries in descending score order."""
    entries: List[Tuple[str, str]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.entries

    def __len__(self) -> int:
        return len(self.entries)

    def to_text(self) -> str:
        """Render one labeled block per entry, separated by blank lines."""
        return "\n".join(
            f"Source ({filename}):\n{text}\n" for filename, text in self.entries
        )


class RetrieverEngine:
    """Main retrieval engine for RAG pipeline."""

    def __init__(self, config: RAGConfig, embedder: EmbeddingClient, gateway: QdrantGateway):
        self.config = config
        self.embedder = embedder
        self.gateway = gateway

    def retrieve_context(
        self,
        query_text: str,
        collection: Optional[str] = None,
        limit: Optional[int] = None,
        score_threshold: Optional[float] = None,
    ) -> ContextBlock:
        """
        Retrieve relevant context for a query.

        Args:
            query_text: User query
            collection: Collection to search (defaults to config.collection_name)
            limit: Number of results to request (defaults to config.top_k_results)
            score_threshold: Results must score strictly above this
                (defaults to config.similarity_threshold)

        Returns:
            ContextBlock, possibly empty
        """
        collection = collection or self.config.collection_name
        if limit is None:
            limit = self.config.top_k_results
        if score_threshold is None:
            score_threshold = self.config.similarity_threshold

        query_vector = self.embedder.embed(query_text)
        results = self.gateway.search(collection, query_vector, limit, with_payload=True)

        block = ContextBlock()
        for result in results:
            logger.debug(f"Score: {result.score:.4f} | File: {result.filename}")
            if result.score > score_threshold:
                block.entries.append((result.filename, result.text))

        logger.info(
            f"Kept {len(block)} of {len(results)} results above threshold {score_threshold}"
        )
        return block

    def get_stats(self) -> Dict[str, Any]:
        """Get retrieval engine statistics."""
        return {
            'vector_store_stats': self.gateway.get_collection_info(self.config.collection_name),
            'config': {
                'top_k_results': self.config.top_k_results,
                'similarity_threshold': self.config.similarity_threshold,
                'embedding_model': self.config.embedding_model,
                'distance_metric': self.config.distance_metric,
            }
        }

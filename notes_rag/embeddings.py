"""
Embedding Client Module

Turns text into fixed-length vectors through the OpenAI embeddings API.
"""

from typing import List, Optional
import logging

import openai

from .config import RAGConfig
from .errors import MalformedResponse, MissingCredential, RemoteRejected, RemoteUnavailable


logger = logging.getLogger(__name__)


class EmbeddingClient:
    """Single-text embedding over the OpenAI API, one request per call."""

    def __init__(self, config: RAGConfig, client: Optional["openai.OpenAI"] = None):
        self.config = config
        if client is None:
            if not config.openai_api_key:
                raise MissingCredential("OPENAI_API_KEY environment variable is not set.")
            # Failures surface to the caller; no silent SDK retries.
            client = openai.OpenAI(
                api_key=config.openai_api_key,
                timeout=config.request_timeout,
                max_retries=0,
            )
        self.client = client

    def embed(self, text: str) -> List[float]:
        """
        Generate the embedding for one text.

        Raises:
            RemoteUnavailable: network failure or timeout
            RemoteRejected: non-success status from the API
            MalformedResponse: response has no usable vector
        """
        try:
            response = self.client.embeddings.create(
                model=self.config.embedding_model,
                input=text,
            )
        except openai.APIConnectionError as e:
            # APITimeoutError is a subclass
            raise RemoteUnavailable(f"Embedding service unreachable: {e}") from e
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else None
            raise RemoteRejected(
                f"OpenAI API call failed: HTTP {e.status_code} - {body}",
                status_code=e.status_code,
                body=body,
            ) from e

        data = getattr(response, 'data', None)
        if not data:
            raise MalformedResponse("OpenAI response did not contain embedding data.")

        vector = getattr(data[0], 'embedding', None)
        if not isinstance(vector, list) or not vector:
            raise MalformedResponse("OpenAI response did not contain an embedding vector.")
        if len(vector) != self.config.vector_size:
            raise MalformedResponse(
                f"Embedding has {len(vector)} dimensions, expected {self.config.vector_size}. "
                "Check EMBEDDING_MODEL and VECTOR_SIZE."
            )

        return [float(x) for x in vector]

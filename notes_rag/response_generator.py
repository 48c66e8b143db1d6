"""
Response Generator Module

Answers questions from retrieved class notes using an LLM
(OpenAI or Gemini). Skips the LLM when nothing relevant was retrieved.
"""

from typing import Any, Dict, List, Optional
import logging

import openai

from .config import RAGConfig
from .errors import MissingCredential, SynthesisError
from .retrieval import RetrieverEngine


logger = logging.getLogger(__name__)

NO_CONTEXT_ANSWER = "I couldn't find any relevant notes in your database."


class ResponseGenerator:
    """Generates AI responses using retrieved context."""

    def __init__(self, config: RAGConfig, retriever: RetrieverEngine, client: Any = None):
        """
        Args:
            config: Pipeline configuration
            retriever: Source of the context block
            client: Pre-built LLM client (``openai.OpenAI`` or a Gemini
                ``GenerativeModel``); built from config when omitted
        """
        self.config = config
        self.retriever = retriever
        self.provider = (self.config.llm_provider or "openai").lower()
        self.client = None
        self.gemini_model = None

        if self.provider == "gemini":
            self.gemini_model = client or self._setup_gemini()
        else:
            self.client = client or self._setup_openai()

    def _setup_openai(self) -> "openai.OpenAI":
        """Initialize the OpenAI client."""
        if not self.config.openai_api_key:
            raise MissingCredential("OPENAI_API_KEY environment variable is not set.")
        client = openai.OpenAI(
            api_key=self.config.openai_api_key,
            timeout=self.config.request_timeout,
            max_retries=0,
        )
        logger.info("OpenAI client initialized successfully")
        return client

    def _setup_gemini(self):
        """Initialize the Gemini model with the study-guide instructions."""
        if not self.config.gemini_api_key:
            raise MissingCredential("GEMINI_API_KEY environment variable is not set.")
        import google.generativeai as genai

        genai.configure(api_key=self.config.gemini_api_key)
        model = genai.GenerativeModel(
            self.config.default_model,
            system_instruction=self._create_system_prompt(),
        )
        logger.info("Gemini client initialized successfully")
        return model

    def answer(self, user_query: str, collection: Optional[str] = None) -> str:
        """
        Answer a question from the notes in a collection.

        Returns:
            The model's answer verbatim, or NO_CONTEXT_ANSWER when no chunk
            passed the relevance threshold

        Raises:
            SynthesisError: the generation service failed
        """
        context = self.retriever.retrieve_context(user_query, collection)

        if context.is_empty():
            logger.info("No relevant context found, skipping generation")
            return NO_CONTEXT_ANSWER

        messages = self._build_messages(user_query, context.to_text())
        logger.info(f"Generating answer with {self.provider} ({len(context)} context blocks)")

        if self.provider == "gemini":
            return self._generate_gemini_response(messages)
        return self._generate_ai_response(messages)

    def _build_messages(self, query: str, context: str) -> List[Dict[str, str]]:
        return [
            {"role": "system", "content": self._create_system_prompt()},
            {"role": "user", "content": self._create_user_prompt(query, context)},
        ]

    def _generate_ai_response(self, messages: List[Dict[str, str]]) -> str:
        """Generate response using OpenAI."""
        try:
            response = self.client.chat.completions.create(
                model=self.config.default_model,
                messages=messages,
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
            )
        except openai.APIStatusError as e:
            body = e.response.text if e.response is not None else None
            raise SynthesisError(
                f"Chat failed: HTTP {e.status_code} - {body}",
                status_code=e.status_code,
                body=body,
            ) from e
        except openai.APIError as e:
            raise SynthesisError(f"Chat failed: {e}") from e

        choices = getattr(response, 'choices', None)
        if not choices or choices[0].message is None or choices[0].message.content is None:
            raise SynthesisError("Chat failed: response contained no message content")

        usage = getattr(response, 'usage', None)
        if usage is not None:
            logger.info(f"OpenAI answer used {usage.total_tokens} tokens")
        return choices[0].message.content

    def _generate_gemini_response(self, messages: List[Dict[str, str]]) -> str:
        """Generate response using Gemini; the system prompt is set on the model."""
        from google.api_core import exceptions as google_exceptions

        user_prompt = messages[-1]["content"]
        try:
            resp = self.gemini_model.generate_content(user_prompt)
            answer = resp.text
        except google_exceptions.GoogleAPIError as e:
            raise SynthesisError(
                f"Gemini API call failed: {e}",
                status_code=getattr(e, 'code', None),
                body=getattr(e, 'message', None),
            ) from e
        except ValueError as e:
            # resp.text raises ValueError when the candidate was blocked or empty
            raise SynthesisError(f"Gemini returned no text: {e}") from e
        return answer

    def _create_system_prompt(self) -> str:
        """Create system prompt for AI model."""
        return (
            "You are an expert study assistant. You create structured study guides "
            "with bullet points for the TOPIC the user provides.\n"
            "Answer the user's question using ONLY the CONTEXT provided. "
            "If the context doesn't contain the answer, say that the question is off topic "
            "and that you are only used to create study guide notes."
        )

    def _create_user_prompt(self, query: str, context: str) -> str:
        """Create user prompt with query and context."""
        return f"CONTEXT:\n{context}\n\nUSER TOPIC:\n{query}"

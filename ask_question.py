"""
Script to ask one question against the ingested class notes.
Usage: python ask_question.py <question words...>
"""
import logging
import os
import sys

from dotenv import load_dotenv

from notes_rag.config import RAGConfig
from notes_rag.errors import RAGError
from notes_rag.pipeline import build_response_generator

DEFAULT_QUESTION = "Create a study guide on topics of mathematical reductions and NP completeness please"


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "WARNING").upper())

    question = " ".join(sys.argv[1:]).strip() or DEFAULT_QUESTION
    print(f"Question: {question}")

    try:
        generator = build_response_generator(RAGConfig.from_env())
        answer = generator.answer(question)
    except RAGError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    print("\n=== ANSWER ===\n")
    print(answer)

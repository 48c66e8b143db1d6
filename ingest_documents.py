"""
Script to ingest every class-notes document in a folder into Qdrant.
Usage: python ingest_documents.py [folder]
"""
import logging
import os
import sys

from dotenv import load_dotenv

from notes_rag.config import RAGConfig
from notes_rag.errors import RAGError
from notes_rag.pipeline import build_ingestion_pipeline


def ingest_documents(folder: str, cfg: RAGConfig) -> bool:
    """Ingest a folder and print a summary of the run."""
    print("--- Starting Document Ingestion into Qdrant ---")
    print(f"Collection: {cfg.collection_name}, Embedding Model: {cfg.embedding_model}")
    print(f"Folder: {folder}")

    try:
        pipeline = build_ingestion_pipeline(cfg)
        report = pipeline.ingest(folder)
    except RAGError as e:
        print(f"\nIngestion aborted: {e}")
        return False

    print(f"\nFiles processed: {report.files_processed}")
    print(f"Files skipped: {report.files_skipped}")
    if report.failed_files:
        print("Unreadable files:")
        for path in report.failed_files:
            print(f"  - {path}")
    if report.failed_chunks:
        print(f"Failed chunks: {len(report.failed_chunks)}")

    print(f"\n--- All files processed! Total vectors upserted: {report.chunks_upserted} ---")
    return True


if __name__ == "__main__":
    load_dotenv()
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())

    cfg = RAGConfig.from_env()
    folder = sys.argv[1] if len(sys.argv) > 1 else cfg.documents_folder
    success = ingest_documents(folder, cfg)
    sys.exit(0 if success else 1)

"""
Document Processing Module

Finds documents under a folder and extracts their text
(PDF, DOCX, PPTX) for chunking.
"""

import os
from typing import Callable, Dict, Iterator, List, Optional
import logging

from pypdf import PdfReader

from .config import RAGConfig
from .errors import ExtractionError


logger = logging.getLogger(__name__)


class DocumentProcessor:
    """Walks a document tree and extracts plain text by file extension."""

    def __init__(self, config: RAGConfig):
        self.config = config
        self._extractors: Dict[str, Callable[[str], str]] = {
            '.pdf': self._extract_pdf_text,
            '.docx': self._extract_docx_text,
            '.pptx': self._extract_pptx_text,
        }

    def supports(self, file_path: str) -> bool:
        """True if the file's extension has an extractor and is allowed by config."""
        ext = os.path.splitext(file_path)[1].lower()
        return ext in self._extractors and ext in self.config.allowed_extensions

    def iter_files(self, root_path: str) -> Iterator[str]:
        """Yield every regular file below root_path, in a stable order."""
        for dirpath, dirnames, filenames in os.walk(root_path):
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = os.path.join(dirpath, filename)
                if os.path.isfile(file_path):
                    yield file_path

    def extract_text(self, file_path: str) -> str:
        """
        Extract text from a supported document.

        Raises:
            ExtractionError: unsupported type, unreadable or corrupt file
        """
        ext = os.path.splitext(file_path)[1].lower()
        extractor = self._extractors.get(ext)
        if extractor is None:
            raise ExtractionError(file_path, f"unsupported file type: {ext or '(none)'}")

        try:
            return extractor(file_path)
        except ExtractionError:
            raise
        except Exception as e:
            # pypdf, python-docx and python-pptx raise a wide range of errors on bad input
            logger.error(f"Text extraction failed for {file_path}: {str(e)}")
            raise ExtractionError(file_path, str(e)) from e

    def _extract_pdf_text(self, file_path: str) -> str:
        """Extract text from PDF file."""
        reader = PdfReader(file_path)
        texts = []
        for page in reader.pages:
            txt = page.extract_text() or ""
            texts.append(txt)
        return "\n".join(texts)

    def _extract_docx_text(self, file_path: str) -> str:
        """Extract paragraph and table text from a DOCX file."""
        from docx import Document

        doc = Document(file_path)
        parts: List[str] = [para.text for para in doc.paragraphs]

        for table in doc.tables:
            for row in table.rows:
                cells = [(cell.text or "").strip() for cell in row.cells]
                line = " | ".join([c for c in cells if c])
                if line:
                    parts.append(line)

        return "\n".join(parts)

    def _extract_pptx_text(self, file_path: str) -> str:
        """Extract slide titles and shape text from a PPTX file, slide by slide."""
        from pptx import Presentation

        presentation = Presentation(file_path)
        lines: List[str] = []

        for slide in presentation.slides:
            title_shape = slide.shapes.title
            title: Optional[str] = title_shape.text_frame.text if title_shape is not None else None
            if title:
                lines.append(title)

            for shape in slide.shapes:
                if shape == title_shape or not shape.has_text_frame:
                    continue
                text = shape.text_frame.text
                if text and text.strip():
                    lines.append(text)

        return "\n".join(lines)

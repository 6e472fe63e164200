"""
Resume text extraction for PDF and DOCX uploads.
"""
import io
from typing import Optional

import docx
import PyPDF2
from loguru import logger

from config import MAX_UPLOAD_BYTES, MIN_RESUME_CHARS
from errors import ExtractionErrorKind, ExtractionFailure
from validation import DOCX, PDF, detect_file_type


class DocumentTextExtractor:
    def __init__(self, max_bytes: int = MAX_UPLOAD_BYTES, min_chars: int = MIN_RESUME_CHARS):
        self.max_bytes = max_bytes
        self.min_chars = min_chars

    def extract(self, data: bytes, filename: str, content_type: Optional[str] = None) -> str:
        """
        Return the plain text of a PDF or DOCX resume.

        Raises:
            ExtractionFailure: unsupported type, too large, no readable text,
                or a file the parser cannot open.
        """
        file_type = detect_file_type(filename, content_type)
        if file_type is None:
            raise ExtractionFailure(
                ExtractionErrorKind.UNSUPPORTED_FORMAT, "Please upload a PDF or DOCX file"
            )
        if len(data) > self.max_bytes:
            raise ExtractionFailure(
                ExtractionErrorKind.TOO_LARGE, "File size must be less than 10MB"
            )

        logger.info(f"Extracting text from {file_type.upper()}: {filename} ({len(data)} bytes)")
        if file_type == PDF:
            text = self._extract_pdf(data)
        else:
            text = self._extract_docx(data)

        text = text.strip()
        if len(text) < self.min_chars:
            raise ExtractionFailure(
                ExtractionErrorKind.EMPTY_OR_IMAGE_ONLY,
                f"{file_type.upper()} appears to be empty or image-based. "
                "Please use a text-based document.",
            )
        logger.debug(f"Extracted {len(text)} characters")
        return text

    def _extract_pdf(self, data: bytes) -> str:
        try:
            reader = PyPDF2.PdfReader(io.BytesIO(data))
            pages = [page.extract_text() or "" for page in reader.pages]
        except Exception as exc:
            raise ExtractionFailure(
                ExtractionErrorKind.CORRUPTED,
                "Failed to extract text from PDF. The file may be corrupted or password-protected.",
            ) from exc
        return "\n".join(pages)

    def _extract_docx(self, data: bytes) -> str:
        try:
            document = docx.Document(io.BytesIO(data))
        except Exception as exc:
            raise ExtractionFailure(
                ExtractionErrorKind.CORRUPTED,
                "Failed to extract text from DOCX. The file may be corrupted or in an unsupported format.",
            ) from exc

        lines = [p.text for p in document.paragraphs]
        for table in document.tables:
            for row in table.rows:
                lines.append(" ".join(cell.text for cell in row.cells))
        return "\n".join(lines)

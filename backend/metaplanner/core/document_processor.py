"""
Copyright 2024 Metacognitive Study Planner Contributors

Licensed under the Apache License, Version 2.0 (the "License");
you may not use this file except in compliance with the License.
You may obtain a copy of the License at

    http://www.apache.org/licenses/LICENSE-2.0

Unless required by applicable law or agreed to in writing, software
distributed under the License is distributed on an "AS IS" BASIS,
WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
See the License for the specific language governing permissions and
limitations under the License.
"""

"""
Document text extraction for uploaded study plans.

Turns an uploaded plain-text, PDF or DOCX file into a single plain-text
string. PDFs are read with PyMuPDF and DOCX files with python-docx; every
other accepted type is decoded verbatim as UTF-8.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import io
from pathlib import PurePath
from typing import List, Optional

from docx import Document as DocxDocument
from docx.text.paragraph import Paragraph
import fitz  # PyMuPDF

from metaplanner.core.errors import ExtractionError
from metaplanner.utils.logging import get_logger

logger = get_logger(__name__)

PDF_MIME_TYPE = "application/pdf"
DOCX_MIME_TYPE = (
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
)
TEXT_MIME_TYPES = {"application/json", "text/csv", "text/markdown", "text/plain"}
TEXT_EXTENSIONS = {".txt", ".md", ".csv", ".json"}
ACCEPTED_EXTENSIONS = TEXT_EXTENSIONS | {".pdf", ".docx"}

PAGE_SEPARATOR = "\n\n"
PARAGRAPH_SEPARATOR = "\n\n"


class DocumentKind(Enum):
    """Closed set of upload formats, resolved once per upload."""

    PLAIN_TEXT = "plain_text"
    PDF = "pdf"
    DOCX = "docx"
    UNSUPPORTED = "unsupported"


@dataclass
class UploadedDocument:
    """An uploaded file as received from the browser."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class DocumentContent:
    """Extracted content from a document."""

    text: str
    kind: DocumentKind
    word_count: int = 0
    page_count: Optional[int] = None
    warnings: List[str] = field(default_factory=list)
    extraction_time: Optional[float] = None

    def __post_init__(self):
        """Calculate word count if not provided."""
        if self.text and self.word_count == 0:
            self.word_count = len(self.text.split())


def resolve_document_kind(
    filename: str, content_type: Optional[str] = None
) -> DocumentKind:
    """
    Decide how an upload will be parsed.

    The declared MIME type wins; the filename extension is the fallback when
    the browser sends no type or a generic one.
    """
    mime = (content_type or "").split(";")[0].strip().lower()
    suffix = PurePath(filename or "").suffix.lower()

    if mime == PDF_MIME_TYPE:
        return DocumentKind.PDF
    if mime == DOCX_MIME_TYPE:
        return DocumentKind.DOCX
    if mime in TEXT_MIME_TYPES or mime.startswith("text/"):
        return DocumentKind.PLAIN_TEXT

    if suffix == ".pdf":
        return DocumentKind.PDF
    if suffix == ".docx":
        return DocumentKind.DOCX
    if suffix in TEXT_EXTENSIONS:
        return DocumentKind.PLAIN_TEXT

    return DocumentKind.UNSUPPORTED


class DocumentProcessor:
    """Extracts plain text from uploaded study plans."""

    def extract(self, document: UploadedDocument) -> DocumentContent:
        """
        Extract text from an uploaded document.

        Args:
            document: The uploaded file

        Returns:
            DocumentContent with the extracted text and metadata

        Raises:
            ExtractionError: the file is unsupported, corrupt or undecodable
        """
        start_time = datetime.now()
        kind = resolve_document_kind(document.filename, document.content_type)

        try:
            if kind is DocumentKind.PDF:
                content = self._extract_pdf(document.content)
            elif kind is DocumentKind.DOCX:
                content = self._extract_docx(document.content)
            elif kind is DocumentKind.PLAIN_TEXT:
                content = self._extract_text(document.content)
            else:
                raise ValueError(
                    f"Unsupported file type: {document.content_type or document.filename}"
                )
        except ExtractionError:
            raise
        except Exception as e:
            logger.error(f"Failed to extract text from {document.filename}: {e}")
            raise ExtractionError() from e

        for warning in content.warnings:
            logger.warning(f"{document.filename}: {warning}")

        content.extraction_time = (datetime.now() - start_time).total_seconds()
        logger.info(
            f"Extracted {content.word_count} words from {document.filename} "
            f"({kind.value}) in {content.extraction_time:.2f}s"
        )
        return content

    def _extract_pdf(self, data: bytes) -> DocumentContent:
        """Extract text page by page, keeping pages in ascending order."""
        with fitz.open(stream=data, filetype="pdf") as doc:
            page_texts = [
                self._clean_page_text(doc.load_page(page_number).get_text())
                for page_number in range(doc.page_count)
            ]

        return DocumentContent(
            text=PAGE_SEPARATOR.join(page_texts),
            kind=DocumentKind.PDF,
            page_count=len(page_texts),
        )

    def _clean_page_text(self, text: str) -> str:
        """Normalise line endings and trim the page's outer whitespace."""
        return text.replace("\r\n", "\n").strip()

    def _extract_docx(self, data: bytes) -> DocumentContent:
        """Extract raw body text from a DOCX, paragraphs and tables in body order."""
        doc = DocxDocument(io.BytesIO(data))
        warnings: List[str] = []
        text_parts = []
        table_number = 0

        for block in doc.iter_inner_content():
            if isinstance(block, Paragraph):
                text_parts.append(block.text)
                continue

            table_number += 1
            try:
                table_text = self._extract_table_text(block)
            except Exception as e:
                warnings.append(f"Skipped unreadable table {table_number}: {e}")
                continue
            if table_text.strip():
                text_parts.append(table_text)

        # Trailing empty paragraphs carry no content
        while text_parts and not text_parts[-1].strip():
            text_parts.pop()

        if not text_parts:
            warnings.append("Document body contains no text")

        return DocumentContent(
            text=PARAGRAPH_SEPARATOR.join(text_parts),
            kind=DocumentKind.DOCX,
            warnings=warnings,
        )

    def _extract_table_text(self, table) -> str:
        """Flatten a table row by row, cells separated by a pipe."""
        table_parts = []

        for row in table.rows:
            row_cells = []
            for cell in row.cells:
                cell_text = cell.text.strip()
                # Merged cells repeat in python-docx
                if cell_text and (not row_cells or row_cells[-1] != cell_text):
                    row_cells.append(cell_text)
            if row_cells:
                table_parts.append(" | ".join(row_cells))

        return "\n".join(table_parts)

    def _extract_text(self, data: bytes) -> DocumentContent:
        """Decode a text file verbatim as UTF-8."""
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error(f"Text upload is not valid UTF-8: {e}")
            raise ExtractionError() from e

        return DocumentContent(text=text, kind=DocumentKind.PLAIN_TEXT)


_document_processor = None


def get_document_processor() -> DocumentProcessor:
    """Get the global document processor instance."""
    global _document_processor
    if _document_processor is None:
        _document_processor = DocumentProcessor()
    return _document_processor


# Convenience function for simple usage
def extract_text_from_upload(
    filename: str, content: bytes, content_type: Optional[str] = None
) -> str:
    """
    Extract the plain text of an uploaded file.

    Raises ExtractionError if the file cannot be read.
    """
    document = UploadedDocument(
        filename=filename, content=content, content_type=content_type
    )
    return get_document_processor().extract(document).text

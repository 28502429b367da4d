"""Document retrieval and PDF text extraction."""

from researchly.boundary.storage.document_fetcher import DocumentFetcher
from researchly.boundary.storage.pdf_text import PdfTextExtractor

__all__ = ["DocumentFetcher", "PdfTextExtractor"]

"""
PDF processing service for extracting text from PDF files.
"""

import PyPDF2
from io import BytesIO
from pathlib import Path
from typing import Union

from ..exceptions import PdfExtractionError
from ..utils import (
    measure_time,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


PdfSource = Union[str, Path, bytes]


class PDFProcessor:
    """Service for processing PDF files and extracting text."""
    
    def _open(self, source: PdfSource) -> PyPDF2.PdfReader:
        if isinstance(source, bytes):
            return PyPDF2.PdfReader(BytesIO(source))
        return PyPDF2.PdfReader(str(source))
    
    @measure_time
    def extract_text_from_pdf(self, source: PdfSource, filename: str) -> str:
        """
        Extract the text of every page of a PDF.
        
        Args:
            source: Path to the PDF file or its content as bytes
            filename: Name of the PDF file, used for logging
            
        Returns:
            Page texts joined with newlines
            
        Raises:
            PdfExtractionError: If the file cannot be read as a PDF
        """
        try:
            pdf_reader = self._open(source)
            total_pages = len(pdf_reader.pages)
        except Exception as e:
            error_info = handle_processing_error(
                "pdf_extraction",
                e,
                {"filename": filename}
            )
            raise PdfExtractionError(f"Failed to read PDF {filename}: {error_info['error_message']}") from e
        
        log_processing_info("PDF extraction started", {
            "filename": filename,
            "total_pages": total_pages
        })
        
        page_texts = []
        for page_num, page in enumerate(pdf_reader.pages):
            try:
                page_text = page.extract_text()
                if page_text:
                    page_texts.append(page_text)
            
            except Exception as page_error:
                error_info = handle_processing_error(
                    "page_extraction",
                    page_error,
                    {"filename": filename, "page": page_num + 1}
                )
                logger.warning(f"Skipping page {page_num + 1}: {error_info}")
                continue
        
        text = "\n".join(page_texts)
        log_processing_info("PDF extraction completed", {
            "filename": filename,
            "pages_with_text": len(page_texts),
            "total_pages": total_pages,
            "text_length": len(text)
        })
        
        return text
    
    def validate_pdf_content(self, file_content: bytes, filename: str) -> bool:
        """
        Validate PDF file content.
        
        Args:
            file_content: PDF file content as bytes
            filename: Name of the file
            
        Returns:
            True if valid, False otherwise
        """
        try:
            # Check if content is not empty
            if not file_content:
                logger.warning(f"Empty file content for {filename}")
                return False
            
            # Try to read the PDF to validate it
            pdf_reader = self._open(file_content)
            
            # Check if PDF has pages
            if len(pdf_reader.pages) == 0:
                logger.warning(f"PDF {filename} has no pages")
                return False
            
            return True
            
        except Exception as e:
            logger.error(f"PDF validation failed for {filename}: {str(e)}")
            return False

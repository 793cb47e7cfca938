"""
Document service that stores uploaded PDFs and drives their processing lifecycle:
UPLOADED -> PROCESSING -> COMPLETED | FAILED.
"""

import re
from pathlib import Path
from typing import List, Optional

from sqlalchemy.orm import Session

from .completion_client import CompletionClient
from .db_repositories import PdfDocumentRepository
from .pdf_processor import PDFProcessor
from ..config import Settings, settings as default_settings
from ..db import SessionLocal
from ..exceptions import (
    PdfDocumentNotFoundError,
    PdfNotReadyError,
    PdfTextUnavailableError,
    PdfUploadError,
    SummaryGenerationError
)
from ..models import PdfSummaryRequest
from ..models_db import PdfDocument, ProcessingStatus
from ..utils import (
    generate_stored_file_name,
    sanitize_filename,
    measure_time,
    log_processing_info,
    handle_processing_error
)
import logging

logger = logging.getLogger(__name__)


SUMMARY_SYSTEM_PROMPT = """
You are a document summarization expert.
Summarize the given text concisely and clearly in Korean.

Summary format:
1. Main topic and purpose
2. 3-5 key points
3. Important keywords
4. Conclusion or main takeaways
""".strip()

SUMMARY_USER_PREFIX = "Please summarize the following document:\n\n"

ANALYSIS_SYSTEM_PROMPT = (
    "You are a document analysis expert. "
    "Analyze the document and answer according to the user's request."
)

BASIC_SUMMARY_HEADER = "Document summary:\n\n"
NO_TEXT_SUMMARY = "Could not extract text."
BASIC_SUMMARY_MAX_SENTENCES = 5
BASIC_SUMMARY_MIN_SENTENCE_LENGTH = 10

_SENTENCE_BOUNDARY = re.compile(r"[.!?]")


class DocumentService:
    """Service for PDF storage, text extraction and summaries."""
    
    def __init__(
        self,
        completion_client: Optional[CompletionClient] = None,
        settings: Optional[Settings] = None,
        upload_dir: Optional[str] = None
    ):
        """Initialize the document service."""
        self.settings = settings or default_settings
        self.completion_client = completion_client or CompletionClient(self.settings)
        self.upload_dir = Path(upload_dir or self.settings.pdf_upload_dir)
        self.pdf_processor = PDFProcessor()
        self.documents = PdfDocumentRepository()
    
    @measure_time
    def upload_and_process_pdf(
        self,
        db: Session,
        content: bytes,
        original_file_name: str,
        description: Optional[str] = None,
        defer_processing: bool = False
    ) -> PdfDocument:
        """
        Store an uploaded PDF and process it.
        
        Args:
            db: Database session
            content: PDF file content as bytes
            original_file_name: File name as sent by the client
            description: Optional description of the document
            defer_processing: Leave the document UPLOADED so the caller can
                schedule process_pdf_by_id
            
        Returns:
            The stored PdfDocument
            
        Raises:
            PdfUploadError: If the file or its record cannot be saved
        """
        logger.info(f"PDF upload started: {original_file_name}")
        try:
            document = self._save_pdf_file(db, content, original_file_name, description)
        except Exception as e:
            db.rollback()
            error_info = handle_processing_error(
                "pdf_upload",
                e,
                {"filename": original_file_name}
            )
            raise PdfUploadError(f"Failed to upload the PDF file: {error_info['error_message']}") from e
        
        if not defer_processing:
            self.process_pdf(db, document)
        return document
    
    def _save_pdf_file(
        self,
        db: Session,
        content: bytes,
        original_file_name: str,
        description: Optional[str]
    ) -> PdfDocument:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        
        stored_name = generate_stored_file_name(original_file_name)
        file_path = self.upload_dir / stored_name
        file_path.write_bytes(content)
        
        document = PdfDocument(
            file_name=stored_name,
            original_file_name=sanitize_filename(original_file_name),
            file_path=str(file_path),
            file_size=len(content),
            description=description,
            status=ProcessingStatus.UPLOADED
        )
        return self.documents.save(db, document)
    
    @measure_time
    def process_pdf(self, db: Session, document: PdfDocument) -> PdfDocument:
        """Extract text and summary for a document, recording the outcome in its status."""
        if document.status != ProcessingStatus.UPLOADED:
            logger.warning(f"Document {document.id} is {document.status.value}, skipping processing")
            return document
        
        try:
            log_processing_info("PDF processing started", {
                "document_id": document.id,
                "file_name": document.file_name
            })
            
            document.mark_processing()
            self.documents.save(db, document)
            
            extracted_text = self.pdf_processor.extract_text_from_pdf(
                document.file_path,
                document.original_file_name
            )
            summary = self.generate_summary(extracted_text)
            
            document.mark_completed(extracted_text, summary)
            self.documents.save(db, document)
            
            log_processing_info("PDF processing completed", {
                "document_id": document.id,
                "text_length": len(extracted_text),
                "summary_length": len(summary)
            })
            
        except Exception as e:
            handle_processing_error(
                "pdf_processing",
                e,
                {"document_id": document.id, "file_name": document.file_name}
            )
            db.rollback()
            document.mark_failed(str(e))
            self.documents.save(db, document)
        
        return document
    
    def process_pdf_by_id(self, document_id: int) -> None:
        """Process a document in its own database session, for use as a background task."""
        db = SessionLocal()
        try:
            document = self.documents.get(db, document_id)
            if document is None:
                logger.warning(f"Document {document_id} disappeared before processing")
                return
            self.process_pdf(db, document)
        finally:
            db.close()
    
    def generate_summary(self, text: str) -> str:
        """
        Summarize extracted text with the completion API.
        
        Falls back to generate_basic_summary when the API is not configured
        or the call fails.
        """
        if not self.completion_client.is_configured():
            logger.warning("Completion API settings are not valid. Generating a basic summary.")
            return self.generate_basic_summary(text)
        
        try:
            return self.completion_client.complete(
                SUMMARY_SYSTEM_PROMPT,
                SUMMARY_USER_PREFIX + text,
                max_tokens=self.settings.summary_max_tokens,
                temperature=self.settings.summary_temperature,
                timeout=self.settings.summary_timeout_seconds
            )
        except Exception as e:
            handle_processing_error("summary_generation", e, {"text_length": len(text or "")})
            return self.generate_basic_summary(text)
    
    @staticmethod
    def generate_basic_summary(text: Optional[str]) -> str:
        """Bullet list of the first sentences of the text."""
        if text is None or not text.strip():
            return NO_TEXT_SUMMARY
        
        sentences = _SENTENCE_BOUNDARY.split(text)[:BASIC_SUMMARY_MAX_SENTENCES]
        summary = BASIC_SUMMARY_HEADER
        for sentence in sentences:
            sentence = sentence.strip()
            if len(sentence) > BASIC_SUMMARY_MIN_SENTENCE_LENGTH:
                summary += f"• {sentence}\n"
        return summary
    
    def summarize_with_custom_prompt(self, db: Session, request: PdfSummaryRequest) -> str:
        """
        Summarize a processed document with the request's prompt.
        
        Raises:
            PdfDocumentNotFoundError: If the document does not exist
            PdfNotReadyError: If processing has not completed
            PdfTextUnavailableError: If the document has no extracted text
            SummaryGenerationError: If the completion API call fails
        """
        document = self.get_pdf_document(db, request.pdf_id)
        
        if not document.is_completed():
            raise PdfNotReadyError(document.status.value)
        if not document.has_extracted_text():
            raise PdfTextUnavailableError()
        
        try:
            return self.completion_client.complete(
                ANALYSIS_SYSTEM_PROMPT,
                request.effective_prompt() + "\n\nDocument content:\n" + document.extracted_text,
                max_tokens=self.settings.custom_summary_max_tokens,
                temperature=self.settings.custom_summary_temperature,
                timeout=self.settings.summary_timeout_seconds
            )
        except Exception as e:
            error_info = handle_processing_error(
                "custom_summary",
                e,
                {"document_id": document.id}
            )
            raise SummaryGenerationError(
                f"Failed to generate the summary: {error_info['error_message']}"
            ) from e
    
    def get_pdf_document(self, db: Session, document_id: int) -> PdfDocument:
        document = self.documents.get(db, document_id)
        if document is None:
            raise PdfDocumentNotFoundError(document_id)
        return document
    
    def get_all_pdf_documents(self, db: Session) -> List[PdfDocument]:
        return self.documents.find_recent(db)
    
    def delete_pdf_document(self, db: Session, document_id: int) -> None:
        """Delete the stored file and the document record."""
        document = self.get_pdf_document(db, document_id)
        
        try:
            Path(document.file_path).unlink(missing_ok=True)
        except OSError as e:
            logger.warning(f"Failed to delete file {document.file_path}: {e}")
        
        self.documents.delete(db, document)
        log_processing_info("PDF document deleted", {"document_id": document_id})
    
    def health_check(self, db: Session) -> dict:
        """
        Report document storage health.
        
        Returns:
            Dictionary with health status information
        """
        try:
            counts = self.documents.count_by_status(db)
            return {
                "status": "healthy",
                "upload_dir": str(self.upload_dir),
                "documents": counts
            }
        except Exception as e:
            handle_processing_error("document_health_check", e)
            return {
                "status": "unhealthy",
                "error": str(e)
            }

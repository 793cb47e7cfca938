"""
Chat service: input validation, expert mode prompt selection and PDF context injection.
"""

import enum
from typing import Dict, Any, Optional

from langchain_core.exceptions import (
    ModelAuthenticationError,
    ModelRateLimitError,
    ModelTimeoutError
)
from sqlalchemy.orm import Session

from .completion_client import CompletionClient
from .db_repositories import PdfDocumentRepository
from ..config import Settings, settings as default_settings
from ..expert_modes import ExpertMode
from ..models import ChatRequest, PdfChatRequest
from ..models_db import PdfDocument
from ..utils import measure_time, log_processing_info, handle_processing_error
import logging

logger = logging.getLogger(__name__)


DEFAULT_SYSTEM_PROMPT = """
You are a helpful AI assistant.
Answer in Korean, in a friendly and accurate way.
""".strip()

PDF_CONTEXT_TEMPLATE = """

[Reference document]
File name: {file_name}
Uploaded at: {uploaded_at}
Document summary: {summary}

[Document content]
{content}

Answer the user's question by referring to the content of the document above.
If the document does not contain the information, answer clearly: "The information could not be found in the document."
"""

EMPTY_MESSAGE_REPLY = "Please enter a message."
TOO_LONG_MESSAGE_REPLY = "The message is too long. Please keep it within {limit} characters."
NOT_CONFIGURED_REPLY = "There is a problem with the service configuration. Please contact the administrator."
PDF_NOT_FOUND_REPLY = "The PDF document could not be found."
PDF_NOT_READY_REPLY = "PDF processing is not complete. Please try again shortly."
PDF_NO_TEXT_REPLY = "No text could be extracted from the PDF."
NO_SUMMARY = "No summary"

AUTHENTICATION_ERROR_REPLY = "Authentication failed. Please check the API key."
RATE_LIMIT_ERROR_REPLY = "The request limit was exceeded. Please try again shortly."
TIMEOUT_ERROR_REPLY = "The request timed out. Please try again."
GENERIC_ERROR_REPLY = "Sorry, the service is currently having problems. Please try again shortly."

_AUTHENTICATION_ERRORS = {"AuthenticationError", "AuthenticationException", "Unauthenticated", "PermissionDenied"}
_RATE_LIMIT_ERRORS = {"RateLimitError", "RateLimitException", "ResourceExhausted", "TooManyRequests"}
_TIMEOUT_ERRORS = {"TimeoutError", "TimeoutException", "DeadlineExceeded", "ReadTimeout", "Timeout"}
_INVALID_API_KEY_MARKER = "API key not valid"


class ValidationResult(enum.Enum):
    VALID = "valid"
    EMPTY = "empty"
    TOO_LONG = "too_long"


class ChatService:
    """Service for generating chat replies using the completion API."""
    
    def __init__(
        self,
        completion_client: Optional[CompletionClient] = None,
        settings: Optional[Settings] = None
    ):
        """Initialize the chat service."""
        self.settings = settings or default_settings
        self.completion_client = completion_client or CompletionClient(self.settings)
        self.documents = PdfDocumentRepository()
    
    def validate_input(self, message: Optional[str]) -> ValidationResult:
        if message is None or not message.strip():
            return ValidationResult.EMPTY
        if len(message) > self.settings.max_message_length:
            return ValidationResult.TOO_LONG
        return ValidationResult.VALID
    
    def _rejection_reply(self, result: ValidationResult) -> str:
        if result is ValidationResult.EMPTY:
            return EMPTY_MESSAGE_REPLY
        return TOO_LONG_MESSAGE_REPLY.format(limit=self.settings.max_message_length)
    
    def send_message(self, message: Optional[str]) -> str:
        """Reply to a plain message with the default assistant prompt."""
        result = self.validate_input(message)
        if result is not ValidationResult.VALID:
            return self._rejection_reply(result)
        
        logger.info(f"Processing user message: {message}")
        return self._complete(DEFAULT_SYSTEM_PROMPT, message, "chat")
    
    def send_message_with_expert_mode(self, chat_request: ChatRequest) -> str:
        """Reply to a message using the system prompt of the requested expert mode."""
        result = self.validate_input(chat_request.message)
        if result is not ValidationResult.VALID:
            return self._rejection_reply(result)
        
        logger.info(f"Processing expert mode message: {chat_request.message} (mode: {chat_request.expert_mode})")
        expert_mode = ExpertMode.from_code(chat_request.expert_mode)
        return self._complete(expert_mode.prompt, chat_request.message, "expert_chat")
    
    def send_message_with_pdf(self, db: Session, pdf_chat_request: PdfChatRequest) -> str:
        """Reply to a message about an uploaded PDF, injecting the document into the system prompt."""
        result = self.validate_input(pdf_chat_request.message)
        if result is not ValidationResult.VALID:
            return self._rejection_reply(result)
        
        logger.info(f"Processing PDF message: {pdf_chat_request.message} (PDF ID: {pdf_chat_request.pdf_id})")
        
        if not self.completion_client.is_configured():
            logger.error("Completion API settings are not valid.")
            return NOT_CONFIGURED_REPLY
        
        document = self.documents.get(db, pdf_chat_request.pdf_id)
        if document is None:
            return PDF_NOT_FOUND_REPLY
        if not document.is_completed():
            return PDF_NOT_READY_REPLY
        if not document.has_extracted_text():
            return PDF_NO_TEXT_REPLY
        
        expert_mode = ExpertMode.from_code(pdf_chat_request.expert_mode)
        system_prompt = build_pdf_system_prompt(expert_mode, document)
        return self._complete(system_prompt, pdf_chat_request.message, "pdf_chat")
    
    @measure_time
    def _complete(self, system_prompt: str, message: str, operation: str) -> str:
        if not self.completion_client.is_configured():
            logger.error("Completion API settings are not valid.")
            return NOT_CONFIGURED_REPLY
        
        try:
            answer = self.completion_client.complete(
                system_prompt,
                message,
                timeout=self.settings.chat_timeout_seconds
            )
            log_processing_info("Response generated", {
                "operation": operation,
                "message_length": len(message),
                "answer_length": len(answer)
            })
            return answer
            
        except Exception as e:
            handle_processing_error(operation, e, {"message_length": len(message)})
            return error_reply_for(e)
    
    def health_check(self) -> Dict[str, Any]:
        """
        Report whether the chat service can reach the completion API.
        
        Returns:
            Dictionary with health status information
        """
        configured = self.completion_client.is_configured()
        return {
            "status": "healthy" if configured else "degraded",
            "model": self.settings.google_chat_model,
            "configured": configured
        }


def build_pdf_system_prompt(expert_mode: ExpertMode, document: PdfDocument) -> str:
    """Expert mode prompt followed by the reference document block."""
    pdf_context = PDF_CONTEXT_TEMPLATE.format(
        file_name=document.original_file_name,
        uploaded_at=document.uploaded_at,
        summary=document.summary if document.summary is not None else NO_SUMMARY,
        content=document.extracted_text
    )
    return expert_mode.prompt + pdf_context


def error_reply_for(error: Exception) -> str:
    """Map a completion failure to a message the user can act on."""
    error_names = {cls.__name__ for cls in type(error).__mro__}
    status_code = _status_code_of(error)
    
    if (
        isinstance(error, ModelAuthenticationError)
        or error_names & _AUTHENTICATION_ERRORS
        or status_code in (401, 403)
        # Gemini answers a bad key with 400 INVALID_ARGUMENT
        or _INVALID_API_KEY_MARKER in str(error)
    ):
        return AUTHENTICATION_ERROR_REPLY
    if isinstance(error, ModelRateLimitError) or error_names & _RATE_LIMIT_ERRORS or status_code == 429:
        return RATE_LIMIT_ERROR_REPLY
    if isinstance(error, ModelTimeoutError) or error_names & _TIMEOUT_ERRORS or status_code in (408, 504):
        return TIMEOUT_ERROR_REPLY
    return GENERIC_ERROR_REPLY


def _status_code_of(error: Exception) -> Optional[int]:
    # grpc errors expose code() as a method
    for attribute in ("status_code", "code"):
        value = getattr(error, attribute, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None

"""
Services package for the Chatboat Backend.
"""

from .completion_client import CompletionClient
from .pdf_processor import PDFProcessor
from .chat_service import ChatService
from .document_service import DocumentService

__all__ = [
    "CompletionClient",
    "PDFProcessor",
    "ChatService",
    "DocumentService"
]

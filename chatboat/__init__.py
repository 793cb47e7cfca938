"""
Chatboat Backend Application

A chat backend that forwards user messages to an LLM completion API with
expert-mode and PDF-document context, and manages uploaded PDF documents.

Features:
- Expert modes (Java, Python, JavaScript, General) as system prompts
- PDF upload, text extraction and AI summaries
- Chat grounded on an uploaded PDF document
- Document processing status tracking
- Structured logging
"""

__version__ = "1.0.0"
__author__ = "Chatboat Team"
__description__ = "An expert-mode chat backend with PDF summarization"

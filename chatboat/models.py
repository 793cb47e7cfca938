"""
Pydantic models for request/response validation.
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, validator

from .expert_modes import ExpertMode


DEFAULT_EXPERT_MODE = ExpertMode.GENERAL.code

DEFAULT_SUMMARY_PROMPT = """
Please summarize the content of the following PDF document:

1. The main topic and purpose of the document
2. A summary of 3-5 key points
3. Important keywords or concepts
4. The conclusion or main takeaways

Write it concisely and clearly in Korean.
""".strip()


class ChatMessage(BaseModel):
    """A single chat turn exchanged with the client."""
    role: Optional[str] = Field(default="user", description="Message role: user, assistant or system")
    content: Optional[str] = Field(default=None, description="Message text")

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(cls, content: str) -> "ChatMessage":
        return cls(role="assistant", content=content)

    @classmethod
    def system(cls, content: str) -> "ChatMessage":
        return cls(role="system", content=content)

    def is_user(self) -> bool:
        return self.role == "user"

    def is_assistant(self) -> bool:
        return self.role == "assistant"

    def is_system(self) -> bool:
        return self.role == "system"


class _ExpertModeRequest(BaseModel):
    """Shared expert mode handling for chat requests."""
    expert_mode: Optional[str] = Field(default=DEFAULT_EXPERT_MODE, description="Expert mode code")

    @validator("expert_mode", pre=True)
    def default_expert_mode(cls, v):
        """Missing or blank expert modes fall back to the general mode."""
        if v is None or not str(v).strip():
            return DEFAULT_EXPERT_MODE
        return v

    def is_expert_mode(self, mode: Optional[str] = None) -> bool:
        if mode is None:
            return self.expert_mode != DEFAULT_EXPERT_MODE
        return self.expert_mode == mode


class ChatRequest(_ExpertModeRequest):
    """Request model for expert mode chat."""
    message: Optional[str] = Field(default=None, description="User's message")
    role: str = Field(default="user", description="Role of the sender")

    @classmethod
    def user(cls, message: str, expert_mode: str = DEFAULT_EXPERT_MODE) -> "ChatRequest":
        return cls(message=message, role="user", expert_mode=expert_mode)

    @classmethod
    def system(cls, message: str) -> "ChatRequest":
        return cls(message=message, role="system", expert_mode=DEFAULT_EXPERT_MODE)


class PdfChatRequest(_ExpertModeRequest):
    """Request model for chatting about an uploaded PDF document."""
    message: Optional[str] = Field(default=None, description="User's message")
    role: str = Field(default="user", description="Role of the sender")
    pdf_id: int = Field(..., description="ID of the PDF document to reference")

    @classmethod
    def user(cls, message: str, pdf_id: int, expert_mode: str = DEFAULT_EXPERT_MODE) -> "PdfChatRequest":
        return cls(message=message, role="user", pdf_id=pdf_id, expert_mode=expert_mode)


class PdfSummaryRequest(BaseModel):
    """Request model for summarizing a PDF with an optional custom prompt."""
    pdf_id: int = Field(..., description="ID of the PDF document")
    custom_prompt: Optional[str] = Field(default=None, description="Custom summary instructions")

    def has_custom_prompt(self) -> bool:
        return self.custom_prompt is not None and bool(self.custom_prompt.strip())

    def effective_prompt(self) -> str:
        return self.custom_prompt if self.has_custom_prompt() else DEFAULT_SUMMARY_PROMPT


class PdfUploadResponse(BaseModel):
    """Response model for PDF upload."""
    id: Optional[int] = Field(default=None, description="Document ID")
    file_name: Optional[str] = Field(default=None, description="Stored file name")
    original_file_name: Optional[str] = Field(default=None, description="Uploaded file name")
    file_size: Optional[int] = Field(default=None, description="File size in bytes")
    status: str = Field(..., description="Processing status")
    uploaded_at: datetime = Field(..., description="Upload timestamp")
    message: str = Field(..., description="Result message")

    @classmethod
    def success(cls, document) -> "PdfUploadResponse":
        return cls(
            id=document.id,
            file_name=document.file_name,
            original_file_name=document.original_file_name,
            file_size=document.file_size,
            status=document.status.value,
            uploaded_at=document.uploaded_at,
            message="The PDF file was uploaded successfully."
        )

    @classmethod
    def failure(cls, message: str) -> "PdfUploadResponse":
        return cls(
            status="FAILED",
            uploaded_at=datetime.utcnow(),
            message=message
        )


class PdfDocumentResponse(BaseModel):
    """Read model for a stored PDF document."""
    id: int
    file_name: str
    original_file_name: str
    file_path: str
    file_size: int
    description: Optional[str] = None
    extracted_text: Optional[str] = None
    summary: Optional[str] = None
    uploaded_at: datetime
    processed_at: Optional[datetime] = None
    status: str
    error_message: Optional[str] = None

    class Config:
        from_attributes = True

    @validator("status", pre=True)
    def status_value(cls, v):
        return getattr(v, "value", v)


class ExpertModeResponse(BaseModel):
    """Response model describing an expert mode."""
    code: str = Field(..., description="Code sent in requests")
    name: str = Field(..., description="Enum name")
    display_name: str = Field(..., description="Human readable name")

    @classmethod
    def from_mode(cls, mode: ExpertMode) -> "ExpertModeResponse":
        return cls(code=mode.code, name=mode.name, display_name=mode.display_name)


class ChatHealthResponse(BaseModel):
    """Response model for the chat service liveness check."""
    message: str
    status: bool


class HealthResponse(BaseModel):
    """Response model for health check."""
    status: str = Field(..., description="Health status")
    message: str = Field(..., description="Status message")
    version: str = Field(..., description="Application version")
    timestamp: str = Field(..., description="Current timestamp")


class ErrorResponse(BaseModel):
    """Response model for errors."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")
    status_code: int = Field(..., description="HTTP status code")

"""
FastAPI application for the Chatboat Backend.
"""

from typing import List, Optional
from fastapi import FastAPI, File, Form, UploadFile, HTTPException, Depends, Body, BackgroundTasks
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from sqlalchemy import text
from sqlalchemy.orm import Session as OrmSession
import logging

from .config import settings, validate_required_settings
from .db import Base, engine, get_db
from .exceptions import ChatboatError, PdfDocumentNotFoundError, PdfUploadError
from .expert_modes import ExpertMode
from .models import (
    ChatMessage, ChatRequest, PdfChatRequest, PdfSummaryRequest,
    PdfUploadResponse, PdfDocumentResponse, ExpertModeResponse,
    ChatHealthResponse, HealthResponse, ErrorResponse
)
from .services import ChatService, DocumentService
from .services.chat_service import EMPTY_MESSAGE_REPLY, GENERIC_ERROR_REPLY
from .utils import format_timestamp, validate_content_type, validate_file_size

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

INVALID_REQUEST_REPLY = "Invalid request."
UNSUPPORTED_MODE_REPLY = "Unsupported expert mode."

# Warn about missing settings on startup, chat replies explain the problem to users
missing_settings = validate_required_settings()
if missing_settings:
    logger.warning(
        f"Missing completion API settings: {', '.join(missing_settings)}. "
        "Chat replies and AI summaries are disabled until they are set."
    )

# Initialize FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="An expert-mode chat backend with PDF summarization",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize services
chat_service = ChatService()
document_service = DocumentService()


@app.on_event("startup")
def on_startup_create_tables():
    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables ensured.")
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request, exc):
    """Malformed request bodies are client errors."""
    logger.warning(f"Invalid request to {request.url.path}: {exc.errors()}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=INVALID_REQUEST_REPLY,
            detail=str(exc.errors()) if settings.debug else None,
            status_code=400
        ).model_dump()
    )


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if settings.debug else "An unexpected error occurred",
            status_code=500
        ).model_dump()
    )


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _bad_chat_request(reply: str) -> JSONResponse:
    return JSONResponse(status_code=400, content=ChatMessage.assistant(reply).model_dump())


def _upload_failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=jsonable_encoder(PdfUploadResponse.failure(message))
    )


@app.get("/", response_model=dict)
async def root():
    """Root endpoint."""
    return {
        "message": "Chatboat API is running",
        "name": settings.app_name,
        "version": settings.app_version,
        "timestamp": format_timestamp()
    }


@app.get("/health", response_model=HealthResponse)
def health_check(db: OrmSession = Depends(get_db)):
    """Health check covering the database and completion API configuration."""
    try:
        db.execute(text("SELECT 1"))
        chat_health = chat_service.health_check()

        return HealthResponse(
            status="healthy",
            message=f"Database reachable, completion API configured: {chat_health['configured']}",
            version=settings.app_version,
            timestamp=format_timestamp()
        )
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(status_code=503, detail="Health check failed")


# ============================================================================
# CHAT ENDPOINTS
# ============================================================================

@app.post("/api/chat/message", response_model=ChatMessage)
def send_message(request: Optional[ChatMessage] = Body(None)):
    """Send a message with the default assistant prompt."""
    if request is None:
        return _bad_chat_request(INVALID_REQUEST_REPLY)
    if _is_blank(request.content):
        return _bad_chat_request(EMPTY_MESSAGE_REPLY)

    try:
        logger.info(f"User message received: {request.content}")
        answer = chat_service.send_message(request.content)
        return ChatMessage.assistant(answer)

    except Exception as e:
        logger.error(f"Chat processing failed: {str(e)}")
        return ChatMessage.assistant(GENERIC_ERROR_REPLY)


@app.post("/api/chat/expert", response_model=ChatMessage)
def send_expert_message(request: Optional[ChatRequest] = Body(None)):
    """Send a message using the system prompt of an expert mode."""
    if request is None:
        return _bad_chat_request(INVALID_REQUEST_REPLY)
    if _is_blank(request.message):
        return _bad_chat_request(EMPTY_MESSAGE_REPLY)
    if not ExpertMode.is_supported(request.expert_mode):
        return _bad_chat_request(UNSUPPORTED_MODE_REPLY)

    try:
        logger.info(f"Expert mode message received: {request.message} (mode: {request.expert_mode})")
        answer = chat_service.send_message_with_expert_mode(request)
        return ChatMessage.assistant(answer)

    except Exception as e:
        logger.error(f"Expert mode chat processing failed: {str(e)}")
        return ChatMessage.assistant(GENERIC_ERROR_REPLY)


@app.post("/api/chat/pdf", response_model=ChatMessage)
def send_pdf_message(
    request: Optional[PdfChatRequest] = Body(None),
    db: OrmSession = Depends(get_db)
):
    """Send a message about an uploaded PDF document."""
    if request is None:
        return _bad_chat_request(INVALID_REQUEST_REPLY)
    if _is_blank(request.message):
        return _bad_chat_request(EMPTY_MESSAGE_REPLY)
    if not ExpertMode.is_supported(request.expert_mode):
        return _bad_chat_request(UNSUPPORTED_MODE_REPLY)

    try:
        logger.info(f"PDF message received: {request.message} (PDF ID: {request.pdf_id})")
        answer = chat_service.send_message_with_pdf(db, request)
        return ChatMessage.assistant(answer)

    except Exception as e:
        logger.error(f"PDF chat processing failed: {str(e)}")
        return ChatMessage.assistant(GENERIC_ERROR_REPLY)


@app.get("/api/chat/expert-modes", response_model=List[ExpertModeResponse])
async def get_expert_modes():
    """List the available expert modes."""
    return [ExpertModeResponse.from_mode(mode) for mode in ExpertMode.available_modes()]


@app.get("/api/chat/health", response_model=ChatHealthResponse)
async def chat_health():
    """Liveness check for the chat service."""
    return ChatHealthResponse(message="ChatBot Service is running", status=True)


# ============================================================================
# PDF ENDPOINTS
# ============================================================================

@app.post("/api/pdf/upload", response_model=PdfUploadResponse)
def upload_pdf(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    description: Optional[str] = Form(None),
    db: OrmSession = Depends(get_db)
):
    """Upload a PDF, extract its text and generate a summary."""
    try:
        logger.info(f"PDF upload request: {file.filename}")
        content = file.file.read()

        if not content:
            return _upload_failure(400, "The file is empty.")

        if not validate_content_type(file.content_type):
            return _upload_failure(400, "Only PDF files can be uploaded.")

        if not validate_file_size(len(content)):
            return _upload_failure(
                400, f"The file size cannot exceed {settings.max_file_size_mb}MB."
            )

        document = document_service.upload_and_process_pdf(
            db,
            content,
            file.filename,
            description=description,
            defer_processing=settings.process_in_background
        )
        if settings.process_in_background:
            background_tasks.add_task(document_service.process_pdf_by_id, document.id)

        return PdfUploadResponse.success(document)

    except PdfUploadError as e:
        logger.error(f"Upload failed: {str(e)}")
        return _upload_failure(500, str(e))
    except Exception as e:
        logger.error(f"Upload failed: {str(e)}")
        return _upload_failure(500, f"Failed to upload the PDF: {str(e)}")


@app.get("/api/pdf/list", response_model=List[PdfDocumentResponse])
def list_pdf_documents(db: OrmSession = Depends(get_db)):
    """List uploaded documents, most recent first."""
    try:
        return document_service.get_all_pdf_documents(db)
    except Exception as e:
        logger.error(f"Failed to list PDF documents: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to list PDF documents")


@app.get("/api/pdf/{document_id}", response_model=PdfDocumentResponse)
def get_pdf_document(document_id: int, db: OrmSession = Depends(get_db)):
    """Get a single document."""
    try:
        return document_service.get_pdf_document(db, document_id)
    except PdfDocumentNotFoundError as e:
        logger.warning(f"PDF document lookup failed: {str(e)}")
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/api/pdf/{document_id}/summary", response_class=PlainTextResponse)
def get_pdf_summary(document_id: int, db: OrmSession = Depends(get_db)):
    """Get the summary generated when the document was processed."""
    try:
        document = document_service.get_pdf_document(db, document_id)
    except PdfDocumentNotFoundError as e:
        logger.warning(f"PDF summary lookup failed: {str(e)}")
        raise HTTPException(status_code=404, detail=str(e))

    if not document.is_completed():
        return PlainTextResponse(
            f"PDF processing is not complete. Status: {document.status.value}",
            status_code=400
        )

    if _is_blank(document.summary):
        return PlainTextResponse("The PDF summary has not been generated.", status_code=400)

    return PlainTextResponse(document.summary)


@app.post("/api/pdf/{document_id}/summarize", response_class=PlainTextResponse)
def summarize_pdf(
    document_id: int,
    request: PdfSummaryRequest = Body(..., description="Summary request payload"),
    db: OrmSession = Depends(get_db)
):
    """Summarize a document with a custom prompt."""
    if document_id != request.pdf_id:
        return PlainTextResponse(
            "The ID in the URL does not match the ID in the request body.",
            status_code=400
        )

    try:
        summary = document_service.summarize_with_custom_prompt(db, request)
        return PlainTextResponse(summary)

    except PdfDocumentNotFoundError as e:
        logger.warning(f"Custom summary failed: {str(e)}")
        return PlainTextResponse(str(e), status_code=404)
    except ChatboatError as e:
        logger.warning(f"Custom summary failed: {str(e)}")
        return PlainTextResponse(str(e), status_code=400)


@app.delete("/api/pdf/{document_id}", response_class=PlainTextResponse)
def delete_pdf_document(document_id: int, db: OrmSession = Depends(get_db)):
    """Delete a document and its stored file."""
    try:
        document_service.delete_pdf_document(db, document_id)
        return PlainTextResponse("The PDF document was deleted.")

    except PdfDocumentNotFoundError as e:
        logger.warning(f"PDF document deletion failed: {str(e)}")
        raise HTTPException(status_code=404, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "chatboat.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )

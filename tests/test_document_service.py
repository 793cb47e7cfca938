import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from chatboat.exceptions import (
    InvalidStatusTransitionError,
    PdfDocumentNotFoundError,
    PdfExtractionError,
    PdfNotReadyError,
    PdfTextUnavailableError,
    SummaryGenerationError,
)
from chatboat.models import PdfSummaryRequest
from chatboat.models_db import PdfDocument, ProcessingStatus
from chatboat.services.document_service import (
    ANALYSIS_SYSTEM_PROMPT,
    NO_TEXT_SUMMARY,
    SUMMARY_SYSTEM_PROMPT,
    SUMMARY_USER_PREFIX,
    DocumentService,
)

SAMPLE_TEXT = (
    "This report describes the quarterly results. "
    "Revenue grew by ten percent! "
    "Short. "
    "Costs were kept under control during the period? "
    "The outlook for next year is positive."
)


@pytest.fixture
def extracted_text(monkeypatch, document_service):
    monkeypatch.setattr(
        document_service.pdf_processor,
        "extract_text_from_pdf",
        lambda source, filename: SAMPLE_TEXT
    )
    return SAMPLE_TEXT


def test_basic_summary_keeps_long_sentences():
    summary = DocumentService.generate_basic_summary(SAMPLE_TEXT)

    assert summary.startswith("Document summary:\n\n")
    assert "• This report describes the quarterly results\n" in summary
    assert "• Revenue grew by ten percent\n" in summary
    assert "Short" not in summary


def test_basic_summary_limits_sentence_count():
    text = ". ".join(f"Sentence number {i} is long enough" for i in range(10))

    summary = DocumentService.generate_basic_summary(text)

    assert summary.count("•") == 5


def test_basic_summary_without_text():
    assert DocumentService.generate_basic_summary(None) == NO_TEXT_SUMMARY
    assert DocumentService.generate_basic_summary("   ") == NO_TEXT_SUMMARY


def test_upload_stores_file_and_completes(document_service, db_session, blank_pdf_bytes, upload_dir, fake_client):
    fake_client.configured = False

    document = document_service.upload_and_process_pdf(
        db_session, blank_pdf_bytes, "my report.pdf", description="Quarterly"
    )

    assert document.id is not None
    assert document.status == ProcessingStatus.COMPLETED
    assert document.original_file_name == "my report.pdf"
    assert document.file_name.endswith(".pdf")
    assert document.file_name != document.original_file_name
    assert document.file_size == len(blank_pdf_bytes)
    assert document.description == "Quarterly"
    assert document.processed_at is not None
    assert document.summary == NO_TEXT_SUMMARY
    assert Path(document.file_path).parent == upload_dir
    assert Path(document.file_path).read_bytes() == blank_pdf_bytes


def test_upload_with_ai_summary(document_service, db_session, blank_pdf_bytes, fake_client, extracted_text):
    fake_client.reply = "AI summary"

    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")

    assert document.status == ProcessingStatus.COMPLETED
    assert document.extracted_text == SAMPLE_TEXT
    assert document.summary == "AI summary"
    call = fake_client.calls[0]
    assert call["system_prompt"] == SUMMARY_SYSTEM_PROMPT
    assert call["user_message"] == SUMMARY_USER_PREFIX + SAMPLE_TEXT
    assert call["max_tokens"] == 1000
    assert call["temperature"] == 0.3


def test_summary_falls_back_when_completion_fails(document_service, db_session, blank_pdf_bytes, fake_client, extracted_text):
    fake_client.error = RuntimeError("quota")

    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")

    assert document.status == ProcessingStatus.COMPLETED
    assert document.summary.startswith("Document summary:")


def test_upload_marks_document_failed_when_extraction_fails(document_service, db_session, blank_pdf_bytes):
    with patch.object(
        document_service.pdf_processor,
        "extract_text_from_pdf",
        side_effect=PdfExtractionError("broken file")
    ) as extract:
        document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")

    extract.assert_called_once()
    assert document.status == ProcessingStatus.FAILED
    assert "broken file" in document.error_message
    assert document.processed_at is None


def test_invalid_pdf_bytes_fail_processing(document_service, db_session):
    document = document_service.upload_and_process_pdf(db_session, b"not a pdf", "fake.pdf")

    assert document.status == ProcessingStatus.FAILED
    assert document.error_message


def test_deferred_upload_stays_uploaded(document_service, db_session, blank_pdf_bytes):
    document = document_service.upload_and_process_pdf(
        db_session, blank_pdf_bytes, "report.pdf", defer_processing=True
    )

    assert document.status == ProcessingStatus.UPLOADED

    document_service.process_pdf_by_id(document.id)
    db_session.expire_all()

    assert document_service.get_pdf_document(db_session, document.id).is_completed()


def test_process_pdf_skips_finished_documents(document_service, db_session, blank_pdf_bytes, fake_client):
    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")
    calls = len(fake_client.calls)

    document_service.process_pdf(db_session, document)

    assert document.status == ProcessingStatus.COMPLETED
    assert len(fake_client.calls) == calls


def test_uploaded_document_can_fail_directly():
    document = PdfDocument(status=ProcessingStatus.UPLOADED)

    document.mark_failed("storage unavailable")

    assert document.status == ProcessingStatus.FAILED
    assert document.error_message == "storage unavailable"


def test_status_transitions_are_enforced():
    document = PdfDocument(status=ProcessingStatus.UPLOADED)

    with pytest.raises(InvalidStatusTransitionError):
        document.mark_completed("text", "summary")

    document.mark_processing()
    document.mark_completed("text", "summary")

    with pytest.raises(InvalidStatusTransitionError):
        document.mark_failed("late failure")
    with pytest.raises(InvalidStatusTransitionError):
        document.mark_processing()


def test_custom_summary(document_service, db_session, blank_pdf_bytes, fake_client, extracted_text):
    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")
    fake_client.reply = "Custom summary"

    summary = document_service.summarize_with_custom_prompt(
        db_session, PdfSummaryRequest(pdf_id=document.id, custom_prompt="List the numbers")
    )

    assert summary == "Custom summary"
    call = fake_client.calls[-1]
    assert call["system_prompt"] == ANALYSIS_SYSTEM_PROMPT
    assert call["user_message"] == "List the numbers\n\nDocument content:\n" + SAMPLE_TEXT
    assert call["max_tokens"] == 2000
    assert call["temperature"] == 0.7


def test_custom_summary_errors(document_service, db_session, blank_pdf_bytes, fake_client, extracted_text):
    with pytest.raises(PdfDocumentNotFoundError):
        document_service.summarize_with_custom_prompt(db_session, PdfSummaryRequest(pdf_id=42))

    pending = document_service.upload_and_process_pdf(
        db_session, blank_pdf_bytes, "pending.pdf", defer_processing=True
    )
    with pytest.raises(PdfNotReadyError):
        document_service.summarize_with_custom_prompt(db_session, PdfSummaryRequest(pdf_id=pending.id))

    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")
    fake_client.error = RuntimeError("quota")
    with pytest.raises(SummaryGenerationError):
        document_service.summarize_with_custom_prompt(db_session, PdfSummaryRequest(pdf_id=document.id))


def test_custom_summary_without_text(document_service, db_session, blank_pdf_bytes):
    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "blank.pdf")

    with pytest.raises(PdfTextUnavailableError):
        document_service.summarize_with_custom_prompt(db_session, PdfSummaryRequest(pdf_id=document.id))


def test_delete_removes_file_and_record(document_service, db_session, blank_pdf_bytes):
    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")
    file_path = Path(document.file_path)
    document_id = document.id

    document_service.delete_pdf_document(db_session, document_id)

    assert not file_path.exists()
    with pytest.raises(PdfDocumentNotFoundError):
        document_service.get_pdf_document(db_session, document_id)


def test_delete_keeps_going_when_file_removal_fails(document_service, db_session, blank_pdf_bytes, caplog):
    document = document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")
    document_id = document.id

    with patch("chatboat.services.document_service.Path.unlink", side_effect=OSError("device busy")):
        with caplog.at_level(logging.WARNING, logger="chatboat.services.document_service"):
            document_service.delete_pdf_document(db_session, document_id)

    assert "device busy" in caplog.text
    with pytest.raises(PdfDocumentNotFoundError):
        document_service.get_pdf_document(db_session, document_id)


def test_delete_missing_document(document_service, db_session):
    with pytest.raises(PdfDocumentNotFoundError):
        document_service.delete_pdf_document(db_session, 123)


def test_health_check_counts_documents(document_service, db_session, blank_pdf_bytes):
    document_service.upload_and_process_pdf(db_session, blank_pdf_bytes, "report.pdf")

    health = document_service.health_check(db_session)

    assert health["status"] == "healthy"
    assert health["documents"]["COMPLETED"] == 1
    assert health["documents"]["FAILED"] == 0

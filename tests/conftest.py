"""Pytest configuration for test suite."""

import os
from io import BytesIO

# Settings are read when chatboat is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["GOOGLE_API_KEY"] = ""
os.environ["PROCESS_IN_BACKGROUND"] = "false"

import PyPDF2
import pytest
from fastapi.testclient import TestClient

from chatboat import main
from chatboat.db import Base, SessionLocal, engine
from chatboat.services import ChatService, DocumentService


class FakeCompletionClient:
    """Stands in for the LLM so tests never reach the network."""

    def __init__(self, reply="Hello! How can I help you?", configured=True, error=None):
        self.reply = reply
        self.configured = configured
        self.error = error
        self.calls = []

    def is_configured(self):
        return self.configured

    def complete(self, system_prompt, user_message, **kwargs):
        self.calls.append({
            "system_prompt": system_prompt,
            "user_message": user_message,
            **kwargs
        })
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def fake_client():
    return FakeCompletionClient()


@pytest.fixture
def db_session():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def chat_service(fake_client):
    return ChatService(completion_client=fake_client)


@pytest.fixture
def document_service(fake_client, upload_dir):
    return DocumentService(completion_client=fake_client, upload_dir=str(upload_dir))


@pytest.fixture
def client(monkeypatch, chat_service, document_service, db_session):
    monkeypatch.setattr(main, "chat_service", chat_service)
    monkeypatch.setattr(main, "document_service", document_service)
    with TestClient(main.app) as test_client:
        yield test_client


@pytest.fixture
def blank_pdf_bytes():
    """A valid single page PDF without any text."""
    writer = PyPDF2.PdfWriter()
    writer.add_blank_page(width=200, height=200)
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()

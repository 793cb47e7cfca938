import enum
from datetime import datetime
from sqlalchemy import String, DateTime, Integer, BigInteger, Text, Enum as SqlEnum
from sqlalchemy.orm import Mapped, mapped_column

from .db import Base
from .exceptions import InvalidStatusTransitionError


class ProcessingStatus(str, enum.Enum):
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


_ALLOWED_TRANSITIONS = {
    ProcessingStatus.UPLOADED: {ProcessingStatus.PROCESSING, ProcessingStatus.FAILED},
    ProcessingStatus.PROCESSING: {ProcessingStatus.COMPLETED, ProcessingStatus.FAILED},
    ProcessingStatus.COMPLETED: set(),
    ProcessingStatus.FAILED: set(),
}


class PdfDocument(Base):
    __tablename__ = "pdf_documents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    file_name: Mapped[str] = mapped_column(String, nullable=False, index=True)  # stored unique name
    original_file_name: Mapped[str] = mapped_column(String, nullable=False)
    file_path: Mapped[str] = mapped_column(String, nullable=False)
    file_size: Mapped[int] = mapped_column(BigInteger, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    extracted_text: Mapped[str | None] = mapped_column(Text, nullable=True)
    summary: Mapped[str | None] = mapped_column(Text, nullable=True)
    uploaded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    processed_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    status: Mapped[ProcessingStatus] = mapped_column(
        SqlEnum(ProcessingStatus, native_enum=False, length=20),
        default=ProcessingStatus.UPLOADED,
        nullable=False,
    )
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

    def _transition(self, target: ProcessingStatus) -> None:
        current = self.status or ProcessingStatus.UPLOADED
        if target not in _ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransitionError(current.value, target.value)
        self.status = target

    def mark_processing(self) -> None:
        self._transition(ProcessingStatus.PROCESSING)

    def mark_completed(self, extracted_text: str, summary: str) -> None:
        self._transition(ProcessingStatus.COMPLETED)
        self.extracted_text = extracted_text
        self.summary = summary
        self.processed_at = datetime.utcnow()

    def mark_failed(self, error_message: str) -> None:
        self._transition(ProcessingStatus.FAILED)
        self.error_message = error_message

    def is_completed(self) -> bool:
        return self.status == ProcessingStatus.COMPLETED

    def has_extracted_text(self) -> bool:
        return bool(self.extracted_text and self.extracted_text.strip())

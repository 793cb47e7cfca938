from datetime import datetime
from typing import Dict, Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import func, select

from ..models_db import PdfDocument, ProcessingStatus


class PdfDocumentRepository:
    def save(self, db: Session, document: PdfDocument) -> PdfDocument:
        db.add(document)
        db.commit()
        db.refresh(document)
        return document

    def get(self, db: Session, document_id: int) -> Optional[PdfDocument]:
        return db.get(PdfDocument, document_id)

    def find_by_file_name(self, db: Session, file_name: str) -> Optional[PdfDocument]:
        return db.scalars(select(PdfDocument).where(PdfDocument.file_name == file_name)).first()

    def find_by_status(self, db: Session, status: ProcessingStatus) -> List[PdfDocument]:
        return db.scalars(select(PdfDocument).where(PdfDocument.status == status).order_by(PdfDocument.id.asc())).all()

    def find_recent(self, db: Session) -> List[PdfDocument]:
        return db.scalars(select(PdfDocument).order_by(PdfDocument.uploaded_at.desc(), PdfDocument.id.desc())).all()

    def find_by_date_range(self, db: Session, start: datetime, end: datetime) -> List[PdfDocument]:
        return db.scalars(
            select(PdfDocument)
            .where(PdfDocument.uploaded_at.between(start, end))
            .order_by(PdfDocument.uploaded_at.desc(), PdfDocument.id.desc())
        ).all()

    def find_by_file_name_containing(self, db: Session, keyword: str) -> List[PdfDocument]:
        return db.scalars(
            select(PdfDocument)
            .where(PdfDocument.original_file_name.contains(keyword, autoescape=True))
            .order_by(PdfDocument.uploaded_at.desc(), PdfDocument.id.desc())
        ).all()

    def delete(self, db: Session, document: PdfDocument) -> None:
        db.delete(document)
        db.commit()

    def count_by_status(self, db: Session) -> Dict[str, int]:
        rows = db.execute(select(PdfDocument.status, func.count()).group_by(PdfDocument.status)).all()
        counts = {status.value: 0 for status in ProcessingStatus}
        for status, count in rows:
            counts[status.value] = count
        return counts

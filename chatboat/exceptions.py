"""
Domain exceptions raised by the services and translated to HTTP responses in main.
"""


class ChatboatError(Exception):
    """Base class for errors the API reports back to the client."""


class PdfDocumentNotFoundError(ChatboatError):
    def __init__(self, document_id: int):
        self.document_id = document_id
        super().__init__("The PDF document could not be found.")


class PdfNotReadyError(ChatboatError):
    def __init__(self, status: str):
        self.status = status
        super().__init__("PDF processing is not complete.")


class PdfTextUnavailableError(ChatboatError):
    def __init__(self):
        super().__init__("No text could be extracted from the PDF.")


class PdfExtractionError(ChatboatError):
    pass


class PdfUploadError(ChatboatError):
    pass


class SummaryGenerationError(ChatboatError):
    pass


class InvalidStatusTransitionError(ChatboatError):
    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Cannot change document status from {current} to {target}")

"""
Utility functions for the Chatboat Backend.
"""

import functools
import os
import time
import uuid
from typing import Dict, Any, Optional
from datetime import datetime
import logging

from .config import settings

logger = logging.getLogger(__name__)

DEFAULT_PDF_EXTENSION = ".pdf"


def get_file_extension(filename: Optional[str]) -> str:
    """Return the extension of a file name including the dot, '.pdf' if it has none."""
    if not filename or "." not in filename:
        return DEFAULT_PDF_EXTENSION
    return filename[filename.rindex("."):]


def generate_stored_file_name(original_filename: Optional[str]) -> str:
    """Generate a unique name for storing an uploaded file on disk."""
    return f"{uuid.uuid4()}{get_file_extension(original_filename)}"


def validate_content_type(content_type: Optional[str]) -> bool:
    """Validate if the upload content type is allowed."""
    if not content_type:
        return False
    return content_type in settings.allowed_content_types


def validate_file_size(file_size: int) -> bool:
    """Validate if the file size is within limits."""
    return file_size <= settings.max_file_size_bytes


def sanitize_filename(filename: str) -> str:
    """Sanitize filename for safe storage."""
    # Keep only the last path component
    sanitized = os.path.basename(filename.replace("\\", "/"))
    dangerous_chars = [':', '*', '?', '"', '<', '>', '|']
    
    for char in dangerous_chars:
        sanitized = sanitized.replace(char, '_')
    
    # Limit length
    if len(sanitized) > 255:
        name, ext = sanitized.rsplit('.', 1) if '.' in sanitized else (sanitized, '')
        sanitized = name[:255-len(ext)-1] + ('.' + ext if ext else '')
    
    return sanitized


def format_timestamp() -> str:
    """Get current timestamp in ISO format."""
    return datetime.utcnow().isoformat()


def measure_time(func):
    """Decorator to measure function execution time."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        start_time = time.time()
        result = func(*args, **kwargs)
        end_time = time.time()
        execution_time = end_time - start_time
        
        logger.info(f"{func.__name__} executed in {execution_time:.2f} seconds")
        return result
    return wrapper


def log_processing_info(operation: str, details: Dict[str, Any]) -> None:
    """Log processing information."""
    logger.info(f"{operation}: {details}")


def handle_processing_error(operation: str, error: Exception, context: Dict[str, Any] = None) -> Dict[str, Any]:
    """Handle and log processing errors."""
    error_info = {
        'operation': operation,
        'error_type': type(error).__name__,
        'error_message': str(error),
        'timestamp': format_timestamp()
    }
    
    if context:
        error_info.update(context)
    
    logger.error(f"Processing error: {error_info}")
    return error_info

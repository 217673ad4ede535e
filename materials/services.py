# materials/services.py
import logging
import os
import tempfile
from contextlib import contextmanager

import PyPDF2
import docx
from django.conf import settings

from core.exceptions import FileProcessingError, FileTooLargeError

logger = logging.getLogger(__name__)

PDF_MIME = 'application/pdf'
DOCX_MIME = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'
TEXT_MIME = 'text/plain'

ALLOWED_MIME_TYPES = frozenset({PDF_MIME, DOCX_MIME, TEXT_MIME})
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB

_SUFFIXES = {PDF_MIME: '.pdf', DOCX_MIME: '.docx', TEXT_MIME: '.txt'}


class MaterialService:
    """
    A service class for handling study material uploads: validation,
    temporary storage and text extraction.
    """

    @staticmethod
    def validate_upload(file):
        """
        Reject uploads with an unsupported declared MIME type or an oversized body.

        Raises:
            FileProcessingError: unsupported type (400).
            FileTooLargeError: over the configured size cap (413).
        """
        if file.content_type not in ALLOWED_MIME_TYPES:
            logger.warning(f"Rejected upload {file.name!r} with type {file.content_type!r}")
            raise FileProcessingError('Unsupported file type')

        max_size = getattr(settings, 'QUIZ_MAX_UPLOAD_BYTES', MAX_FILE_SIZE)
        if file.size > max_size:
            logger.warning(f"Rejected upload {file.name!r}: {file.size} bytes > {max_size}")
            raise FileTooLargeError('File too large')

    @staticmethod
    @contextmanager
    def stored_upload(file):
        """
        Write the upload to a temporary file and yield its path.

        The file is removed when the block exits, whichever way it exits.
        """
        upload_dir = getattr(settings, 'QUIZ_UPLOAD_DIR', None) or None
        if upload_dir:
            os.makedirs(upload_dir, exist_ok=True)

        handle = tempfile.NamedTemporaryFile(
            delete=False,
            dir=upload_dir,
            prefix='upload-',
            suffix=_SUFFIXES.get(file.content_type, ''),
        )
        path = handle.name
        try:
            with handle:
                for chunk in file.chunks():
                    handle.write(chunk)
            yield path
        finally:
            if os.path.exists(path):
                try:
                    os.unlink(path)
                except OSError as e:
                    logger.warning(f"Could not delete temporary file {path}: {e}")

    @staticmethod
    def extract_text_from_path(path: str, content_type: str) -> str:
        """
        Extracts text content from a stored upload.

        Args:
            path: Location of the temporary copy of the upload.
            content_type: The declared MIME type of the upload.

        Returns:
            str: The extracted text, stripped of surrounding whitespace.

        Raises:
            FileProcessingError: If the file is unsupported, unreadable, or has no text.
        """
        try:
            if content_type == PDF_MIME:
                pdf_reader = PyPDF2.PdfReader(path)
                text = '\n'.join(page.extract_text() or '' for page in pdf_reader.pages)
            elif content_type == DOCX_MIME:
                doc = docx.Document(path)
                text = '\n'.join(para.text for para in doc.paragraphs)
            elif content_type == TEXT_MIME:
                with open(path, 'rb') as f:
                    text = f.read().decode('utf-8', errors='ignore')
            else:
                raise FileProcessingError(f'Unsupported file type: {content_type}')

        except FileProcessingError:
            raise
        except Exception as e:
            logger.error(f"Text extraction failed for {path}: {e}", exc_info=True)
            raise FileProcessingError(f'Failed to extract text: {e}')

        text = text.strip()
        if not text:
            raise FileProcessingError('Could not extract text from the file. The file is empty or damaged.')
        return text

    @staticmethod
    def extract_text_from_upload(file) -> str:
        """Validate, store, extract and clean up in one step."""
        MaterialService.validate_upload(file)
        with MaterialService.stored_upload(file) as path:
            return MaterialService.extract_text_from_path(path, file.content_type)

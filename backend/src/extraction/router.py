"""FastAPI router for document extraction.

POST /api/extract takes one exam document (multipart field "image", which
may also carry a PDF) and returns the normalized ExamRecord.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from config import Settings
from dependencies import get_app_settings, get_extraction_service
from domain.ai.ports import ExamDocument
from domain.documents.validation import validate_document
from domain.errors import InvalidDocument
from domain.exams.models import ExamRecord
from .service import ExtractionService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["extraction"])


@router.post("/extract", response_model=ExamRecord)
def extract_exam(
    image: Optional[UploadFile] = File(None),
    settings: Settings = Depends(get_app_settings),
    service: ExtractionService = Depends(get_extraction_service),
) -> ExamRecord:
    """Extract structured exam data from an uploaded image or PDF.

    Raises:
        InvalidDocument: No file, an empty file, or a file over the size limit (400)
        UnsupportedInput: Media type outside the allowlist (400)
        NoResponseContent / MalformedResponse: Unusable engine output (500)
        LLMError: Engine call failed (429/502/504)
    """
    if image is None:
        raise InvalidDocument("No image provided")

    # One byte past the limit is enough to reject an oversized upload
    content = image.file.read(settings.MAX_UPLOAD_SIZE_BYTES + 1)
    validate_document(image.content_type, len(content), settings.MAX_UPLOAD_SIZE_BYTES)

    logger.info(
        f"Extracting {len(content)} byte document",
        extra={"media_type": image.content_type},
    )

    document = ExamDocument(
        content=content,
        media_type=image.content_type,
        filename=image.filename or "exam",
    )
    return service.extract(document)

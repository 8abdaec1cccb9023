"""
Scan API router for reading product labels.
"""

from fastapi import APIRouter, HTTPException, UploadFile, File, Form
from fastapi.concurrency import run_in_threadpool
from typing import Optional
import logging

from shelfscan.config import settings
from shelfscan.models.label import ScanResponse, TextScanRequest
from shelfscan.services.extractor import extract_details
from shelfscan.services.ocr import OCRError, get_ocr_engine
from shelfscan.services.status import expiry_status

router = APIRouter(prefix="/scan", tags=["scan"])
logger = logging.getLogger(__name__)

ALLOWED_TYPES = ["image/jpeg", "image/jpg", "image/png", "image/webp"]


@router.post("", response_model=ScanResponse)
async def scan_label(
    file: UploadFile = File(...),
    engine: Optional[str] = Form(None)
):
    """
    Scan a label image and extract expiry details.

    This endpoint:
    1. Accepts an image upload (JPG, PNG, WEBP)
    2. Runs OCR with the requested or configured engine
    3. Extracts label fields from the recognized text
    4. Returns the fields with a days-left status

    Args:
        file: Uploaded label image
        engine: Optional OCR engine override ("tesseract" or "vision")

    Returns:
        ScanResponse
    """
    try:
        if file.content_type not in ALLOWED_TYPES:
            raise HTTPException(
                status_code=400,
                detail=f"Invalid file type: {file.content_type}. Allowed: JPG, PNG, WEBP"
            )

        image_data = await file.read()
        if not image_data:
            raise HTTPException(status_code=400, detail="Empty file")

        file_size_mb = len(image_data) / (1024 * 1024)
        if file_size_mb > settings.MAX_UPLOAD_MB:
            raise HTTPException(
                status_code=400,
                detail=f"File too large: {file_size_mb:.2f}MB. Maximum: {settings.MAX_UPLOAD_MB:g}MB"
            )

        try:
            ocr = get_ocr_engine(engine, settings)
        except OCRError as e:
            raise HTTPException(status_code=400, detail=str(e))

        logger.debug("Running OCR", extra={"engine": ocr.name, "upload_name": file.filename})
        try:
            text = await run_in_threadpool(ocr.extract_text, image_data)
        except OCRError as e:
            logger.warning("OCR failed", extra={
                "engine": ocr.name,
                "upload_name": file.filename,
                "error": str(e)
            })
            raise HTTPException(status_code=502, detail=str(e))

        details = extract_details(text)

        logger.info("Label scanned", extra={
            "engine": ocr.name,
            "upload_name": file.filename,
            "expiry_date": details.expiry_date,
            "fields": list(details.labels)
        })

        return ScanResponse(
            details=details,
            status=expiry_status(details.expiry_date),
            engine=ocr.name
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error("Scan failed", extra={
            "upload_name": file.filename if file else None,
            "error": str(e)
        }, exc_info=True)
        raise HTTPException(
            status_code=500,
            detail=f"Scan failed: {str(e)}"
        )


@router.post("/text", response_model=ScanResponse)
async def scan_text(request: TextScanRequest):
    """
    Extract label details from text that was already recognized elsewhere.

    Args:
        request: Recognized text

    Returns:
        ScanResponse without an engine
    """
    details = extract_details(request.text)
    return ScanResponse(details=details, status=expiry_status(details.expiry_date))

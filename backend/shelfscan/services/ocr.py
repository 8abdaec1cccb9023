"""
OCR service for extracting text from product label images.

Two engines sit behind one interface: local Tesseract and the Google Cloud
Vision text-detection API. The extraction core never sees which one ran.
"""

import io
import base64
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import pytesseract
import requests
from PIL import Image, ImageEnhance

from shelfscan.config import Settings, settings as default_settings

logger = logging.getLogger(__name__)


class OCRError(Exception):
    """Raised when an OCR engine cannot produce text for an image."""


class OCREngine(ABC):
    """Capability interface for turning image bytes into recognized text."""

    name: str = ""

    def __init__(self, settings: Settings):
        self.settings = settings

    @abstractmethod
    def extract_text(self, image_data: bytes) -> str:
        """
        Extract text from an image.

        Args:
            image_data: Raw image bytes (JPEG, PNG, etc.)

        Returns:
            Recognized text (may be empty)

        Raises:
            OCRError: if the engine fails
        """


class TesseractOCR(OCREngine):
    """Local recognition with Tesseract."""

    name = "tesseract"

    def __init__(self, settings: Settings):
        super().__init__(settings)
        if settings.TESSERACT_CMD:
            pytesseract.pytesseract.tesseract_cmd = settings.TESSERACT_CMD

    def extract_text(self, image_data: bytes) -> str:
        try:
            image = Image.open(io.BytesIO(image_data))
            image.load()
        except OSError as e:
            raise OCRError(f"Could not read image: {e}") from e

        image = self._preprocess_image(image)

        try:
            text = pytesseract.image_to_string(
                image,
                lang=self.settings.OCR_LANGUAGE,
                config=self.settings.TESSERACT_CONFIG,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as e:
            raise OCRError(f"Tesseract failed: {e}") from e

        logger.debug("Tesseract recognized %d characters", len(text))
        return text.strip()

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image to improve OCR accuracy.

        Args:
            image: PIL Image object

        Returns:
            Grayscale, contrast-boosted image
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = image.convert('L')

        # Boost contrast for faint printed date codes
        return ImageEnhance.Contrast(image).enhance(2.0)


class VisionOCR(OCREngine):
    """Remote recognition with Google Cloud Vision TEXT_DETECTION."""

    name = "vision"

    def build_request(self, image_data: bytes) -> Dict[str, Any]:
        """Build the images:annotate request body for one image."""
        return {
            'requests': [
                {
                    'image': {'content': base64.b64encode(image_data).decode('ascii')},
                    'features': [{'type': 'TEXT_DETECTION'}],
                    'imageContext': {'languageHints': list(self.settings.VISION_LANGUAGE_HINTS)},
                }
            ]
        }

    def extract_text(self, image_data: bytes) -> str:
        api_key = self.settings.GOOGLE_VISION_API_KEY
        if not api_key:
            raise OCRError("Missing Google Cloud Vision API key")

        try:
            response = requests.post(
                self.settings.VISION_ENDPOINT,
                params={'key': api_key},
                json=self.build_request(image_data),
                timeout=self.settings.VISION_TIMEOUT,
            )
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            raise OCRError(f"Vision API request failed: {e}") from e
        except ValueError as e:
            raise OCRError("Vision API returned invalid JSON") from e

        text = self.parse_response(data)
        logger.debug("Vision recognized %d characters", len(text))
        return text

    @staticmethod
    def parse_response(data: Dict[str, Any]) -> str:
        """
        Pull the transcript out of an images:annotate response.

        Prefers fullTextAnnotation.text, then the first textAnnotations
        description, else an empty string.
        """
        responses = data.get('responses') or [{}]
        first = responses[0] or {}

        error = first.get('error')
        if error:
            message = error.get('message') if isinstance(error, dict) else str(error)
            raise OCRError(message or "Vision API error")

        text = (first.get('fullTextAnnotation') or {}).get('text')
        if not text:
            annotations = first.get('textAnnotations') or []
            text = annotations[0].get('description') if annotations else ""

        return text or ""


ENGINES = {
    TesseractOCR.name: TesseractOCR,
    VisionOCR.name: VisionOCR,
}


def get_ocr_engine(engine: Optional[str] = None, settings: Optional[Settings] = None) -> OCREngine:
    """
    Select an OCR engine.

    An explicit engine name wins, then settings.OCR_ENGINE; otherwise Vision
    is used when an API key is configured and Tesseract when it is not.

    Raises:
        OCRError: for unknown engine names
    """
    settings = settings or default_settings
    name = engine or settings.OCR_ENGINE
    if not name:
        name = VisionOCR.name if settings.GOOGLE_VISION_API_KEY else TesseractOCR.name

    engine_cls = ENGINES.get(name.strip().lower())
    if engine_cls is None:
        raise OCRError(f"Unknown OCR engine: {name}")

    return engine_cls(settings)

"""
Test suite for OCR engines and engine selection.

Network and the tesseract binary are stubbed with monkeypatch; these tests
only check how each engine talks to its backend and maps failures.
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

import base64
import io
import pytest
import requests
from PIL import Image

from shelfscan.config import Settings
from shelfscan.services import ocr
from shelfscan.services.ocr import OCRError, TesseractOCR, VisionOCR, get_ocr_engine


def _png_bytes() -> bytes:
    buffer = io.BytesIO()
    Image.new('RGB', (40, 20), color='white').save(buffer, format='PNG')
    return buffer.getvalue()


class FakeResponse:
    """Minimal stand-in for requests.Response."""

    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("No JSON")
        return self.payload


class TestEngineSelection:
    """get_ocr_engine picks the engine from argument, settings, then API key."""

    def test_explicit_engine_wins(self):
        config = Settings(OCR_ENGINE="vision", GOOGLE_VISION_API_KEY="key")
        assert isinstance(get_ocr_engine("tesseract", config), TesseractOCR)

    def test_configured_engine(self):
        config = Settings(OCR_ENGINE="Vision")
        assert isinstance(get_ocr_engine(None, config), VisionOCR)

    def test_api_key_selects_vision(self):
        config = Settings(OCR_ENGINE="", GOOGLE_VISION_API_KEY="key")
        assert isinstance(get_ocr_engine(None, config), VisionOCR)

    def test_defaults_to_tesseract(self):
        config = Settings(OCR_ENGINE="", GOOGLE_VISION_API_KEY="")
        engine = get_ocr_engine(None, config)

        assert isinstance(engine, TesseractOCR)
        assert engine.name == "tesseract"

    def test_unknown_engine(self):
        with pytest.raises(OCRError, match="Unknown OCR engine"):
            get_ocr_engine("abbyy", Settings())


class TestVisionOCR:
    """Google Cloud Vision request building and response parsing."""

    def test_request_payload(self, monkeypatch):
        captured = {}

        def fake_post(url, params=None, json=None, timeout=None):
            captured.update(url=url, params=params, json=json, timeout=timeout)
            return FakeResponse({'responses': [{'fullTextAnnotation': {'text': 'EXP 2026-01-15'}}]})

        monkeypatch.setattr(ocr.requests, "post", fake_post)
        config = Settings(GOOGLE_VISION_API_KEY="secret", VISION_TIMEOUT=5.0)

        text = VisionOCR(config).extract_text(b"image-bytes")

        assert text == "EXP 2026-01-15"
        assert captured['url'] == config.VISION_ENDPOINT
        assert captured['params'] == {'key': 'secret'}
        assert captured['timeout'] == 5.0
        request = captured['json']['requests'][0]
        assert base64.b64decode(request['image']['content']) == b"image-bytes"
        assert request['features'] == [{'type': 'TEXT_DETECTION'}]
        assert request['imageContext'] == {'languageHints': ['en']}

    def test_falls_back_to_text_annotations(self):
        data = {'responses': [{'textAnnotations': [{'description': 'MRP 45'}, {'description': 'MRP'}]}]}
        assert VisionOCR.parse_response(data) == "MRP 45"

    def test_empty_response(self):
        assert VisionOCR.parse_response({'responses': [{}]}) == ""
        assert VisionOCR.parse_response({}) == ""

    def test_error_payload(self):
        data = {'responses': [{'error': {'code': 3, 'message': 'Bad image data.'}}]}
        with pytest.raises(OCRError, match="Bad image data"):
            VisionOCR.parse_response(data)

    def test_plain_string_error_payload(self):
        data = {'responses': [{'error': 'quota exceeded'}]}
        with pytest.raises(OCRError, match="quota exceeded"):
            VisionOCR.parse_response(data)

    def test_missing_api_key(self, monkeypatch):
        def fail_post(*args, **kwargs):
            raise AssertionError("request should not be sent")

        monkeypatch.setattr(ocr.requests, "post", fail_post)
        with pytest.raises(OCRError, match="Missing Google Cloud Vision API key"):
            VisionOCR(Settings(GOOGLE_VISION_API_KEY="")).extract_text(b"x")

    @pytest.mark.parametrize("outcome", [
        requests.Timeout("timed out"),
        requests.ConnectionError("refused"),
        FakeResponse({'error': {'message': 'API key not valid'}}, status_code=400),
        FakeResponse(invalid_json=True),
    ])
    def test_failures_become_ocr_errors(self, monkeypatch, outcome):
        def fake_post(*args, **kwargs):
            if isinstance(outcome, Exception):
                raise outcome
            return outcome

        monkeypatch.setattr(ocr.requests, "post", fake_post)
        with pytest.raises(OCRError):
            VisionOCR(Settings(GOOGLE_VISION_API_KEY="key")).extract_text(b"x")


class TestTesseractOCR:
    """Local Tesseract engine with the binary stubbed out."""

    def test_preprocesses_and_passes_settings(self, monkeypatch):
        captured = {}

        def fake_image_to_string(image, lang=None, config=None):
            captured.update(mode=image.mode, lang=lang, config=config)
            return "  Best Before Mar 2026 \n"

        monkeypatch.setattr(ocr.pytesseract, "image_to_string", fake_image_to_string)
        config = Settings(OCR_LANGUAGE="eng+hin", TESSERACT_CONFIG="--psm 11")

        text = TesseractOCR(config).extract_text(_png_bytes())

        assert text == "Best Before Mar 2026"
        assert captured == {'mode': 'L', 'lang': 'eng+hin', 'config': '--psm 11'}

    def test_unreadable_image(self):
        with pytest.raises(OCRError, match="Could not read image"):
            TesseractOCR(Settings()).extract_text(b"not an image")

    def test_tesseract_missing(self, monkeypatch):
        def fake_image_to_string(*args, **kwargs):
            raise ocr.pytesseract.TesseractNotFoundError()

        monkeypatch.setattr(ocr.pytesseract, "image_to_string", fake_image_to_string)
        with pytest.raises(OCRError, match="Tesseract failed"):
            TesseractOCR(Settings()).extract_text(_png_bytes())

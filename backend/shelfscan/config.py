from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    # App
    APP_NAME: str = "ShelfScan"
    DEBUG: bool = False

    # CORS
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000"]

    # OCR engine: "tesseract", "vision", or empty to pick by API key
    OCR_ENGINE: str = ""

    # Tesseract
    TESSERACT_CMD: str = ""  # Empty uses tesseract from PATH
    TESSERACT_CONFIG: str = "--oem 3 --psm 6"
    OCR_LANGUAGE: str = "eng"

    # Google Cloud Vision
    GOOGLE_VISION_API_KEY: str = ""
    VISION_ENDPOINT: str = "https://vision.googleapis.com/v1/images:annotate"
    VISION_LANGUAGE_HINTS: List[str] = ["en"]
    VISION_TIMEOUT: float = 15.0

    # Uploads
    MAX_UPLOAD_MB: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

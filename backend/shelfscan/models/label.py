"""
Pydantic models for scanned product labels.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Literal, Optional
from datetime import date


class ReadOnlyLabels(dict):
    """Display labels that refuse changes once built."""

    def _read_only(self, *args, **kwargs):
        raise TypeError("labels are read-only")

    __setitem__ = __delitem__ = __ior__ = _read_only
    clear = pop = popitem = setdefault = update = _read_only


class ExtractionResult(BaseModel):
    """Facts extracted from one OCR transcript. Never mutated after construction."""
    raw_text: str
    expiry_date: Optional[date] = None
    manufactured_date: Optional[date] = None
    batch: Optional[str] = None
    mrp: Optional[str] = None  # Display string, e.g. "Rs.45.00"
    product_name: Optional[str] = None
    # Display name -> value, in display order
    labels: Dict[str, str] = Field(default_factory=dict, validate_default=True)

    @field_validator('labels')
    @classmethod
    def freeze_labels(cls, value: Dict[str, str]) -> Dict[str, str]:
        return ReadOnlyLabels(value)

    class Config:
        frozen = True


class ExpiryStatus(BaseModel):
    """Human-readable expiry state derived from an expiry date."""
    label: str
    tone: Literal["destructive", "secondary", "primary", "muted"]
    days_left: Optional[int] = None


class TextScanRequest(BaseModel):
    """Request model for extracting label facts from already-recognized text."""
    text: str


class ScanResponse(BaseModel):
    """Model for scan API responses."""
    details: ExtractionResult
    status: ExpiryStatus
    engine: Optional[str] = None  # OCR engine that produced the text

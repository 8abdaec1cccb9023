"""
Label field extractor for turning an OCR transcript into structured facts.
"""

import re
import logging
from datetime import date
from typing import Dict, List, Optional

from shelfscan.models.label import ExtractionResult
from shelfscan.services.dates import DateResolver

logger = logging.getLogger(__name__)


# Markers are matched against the uppercased working text
EXPIRY_MARKER = re.compile(
    r'(?<![A-Z])(?:EXP(?:IRY|IRATION|IRES)?|USE\s*BY|BEST\s*BEFORE|BBE)(?![A-Z])'
)

MANUFACTURED_SPAN = re.compile(
    r'(?<![A-Z])(?:MANUFACTURED|MFD|MFG)(?![A-Z])(.*?)(?=LOT|BATCH|EXP|USE|BEST|$)',
    re.DOTALL
)

BATCH_PATTERN = re.compile(
    r'(?<![A-Z])(?:LOT|BATCH)(?![A-Z])'
    r'(?:\s*(?:NO|NUMBER)(?![A-Z])\.?|\s*#)?'
    r'[\s:#.\-]*([A-Z0-9][A-Z0-9\-]*)'
)

MRP_PATTERN = re.compile(
    r'(?<![A-Z])MRP(?![A-Z])[^\d₹$]*?((?:(?<![A-Z])RS\.?|(?<![A-Z])INR|₹|\$)?\s*\d[\d.,]*)',
    re.IGNORECASE
)

PRODUCT_NAME_STOPWORDS = (
    'EXP', 'MFD', 'MFG', 'LOT', 'BATCH', 'BEST', 'BEFORE', 'USE', 'BY', 'MRP', 'DATE',
)


class LabelExtractor:
    """Service for extracting expiry, manufacture, batch, price and name from label text."""

    def __init__(self, resolver: Optional[DateResolver] = None):
        self.resolver = resolver or DateResolver()

    def extract(self, raw_text: str) -> ExtractionResult:
        """
        Extract all available label fields.

        Each field degrades to None independently; this method does not raise
        for malformed input.

        Args:
            raw_text: OCR transcript, verbatim

        Returns:
            ExtractionResult
        """
        raw_text = raw_text or ""
        text = re.sub(r'\s+', ' ', raw_text).strip()
        upper = text.upper()

        expiry = self.extract_expiry_date(upper)
        manufactured = self.extract_manufactured_date(upper)
        batch = self.extract_batch(upper)
        mrp = self.extract_mrp(text)
        product_name = self.extract_product_name(raw_text)

        labels: Dict[str, str] = {}
        if batch:
            labels['Batch/Lot'] = batch
        if mrp:
            labels['MRP'] = mrp
        if manufactured:
            labels['Manufactured'] = manufactured.isoformat()

        logger.debug("Extracted label fields", extra={
            "expiry_date": expiry,
            "manufactured_date": manufactured,
            "batch": batch,
            "mrp": mrp,
            "product_name": product_name,
        })

        return ExtractionResult(
            raw_text=raw_text,
            expiry_date=expiry,
            manufactured_date=manufactured,
            batch=batch,
            mrp=mrp,
            product_name=product_name,
            labels=labels,
        )

    def extract_expiry_date(self, upper: str) -> Optional[date]:
        """
        Extract expiry date, preferring dates that follow an expiry marker.

        The marker itself stays in the searched segment so "BEST BEFORE <month>"
        is read as the end of that month. Falls back to the whole text.
        """
        try:
            expiry = None

            marker = EXPIRY_MARKER.search(upper)
            if marker:
                # Whitespace is collapsed, so the segment runs to the end of the text
                segment = upper[marker.start():]
                expiry = self.resolver.resolve(segment)

            if expiry is None:
                expiry = self.resolver.resolve(upper)

            return expiry

        except Exception:
            logger.warning("Error extracting expiry date", exc_info=True)
            return None

    def extract_manufactured_date(self, upper: str) -> Optional[date]:
        """Extract the date between a manufacture marker and the next LOT/BATCH/EXP/USE/BEST."""
        try:
            match = MANUFACTURED_SPAN.search(upper)
            if not match or not match.group(1).strip():
                return None
            return self.resolver.resolve(match.group(1))

        except Exception:
            logger.warning("Error extracting manufactured date", exc_info=True)
            return None

    def extract_batch(self, upper: str) -> Optional[str]:
        """Extract the batch/lot token (uppercase, hyphens allowed)."""
        try:
            match = BATCH_PATTERN.search(upper)
            if not match:
                return None
            return match.group(1).rstrip('-') or None

        except Exception:
            logger.warning("Error extracting batch", exc_info=True)
            return None

    def extract_mrp(self, text: str) -> Optional[str]:
        """
        Extract the MRP display string.

        Currency prefix is kept and internal whitespace removed,
        e.g. "MRP Rs. 45.00" -> "Rs.45.00".
        """
        try:
            match = MRP_PATTERN.search(text)
            if not match:
                return None
            value = re.sub(r'\s+', '', match.group(1)).rstrip('.,')
            return value or None

        except Exception:
            logger.warning("Error extracting MRP", exc_info=True)
            return None

    def extract_product_name(self, raw_text: str) -> Optional[str]:
        """Pick the first line longer than 3 characters that has no label keyword in it."""
        try:
            lines: List[str] = [line.strip() for line in re.split(r'[\r\n]', raw_text)]
            for line in lines:
                line_upper = line.upper()
                if len(line_upper) > 3 and not any(kw in line_upper for kw in PRODUCT_NAME_STOPWORDS):
                    return line
            return None

        except Exception:
            logger.warning("Error extracting product name", exc_info=True)
            return None


_extractor = LabelExtractor()


def extract_details(raw_text: str) -> ExtractionResult:
    """Extract structured label facts from an OCR transcript."""
    return _extractor.extract(raw_text)

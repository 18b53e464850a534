"""Funding acknowledgment extraction for research papers."""

from funding_scanner.acknowledgments import extract_acknowledgment_section
from funding_scanner.extraction import extract_funding_info
from funding_scanner.formatting import format_funding
from funding_scanner.models import (
    AcknowledgmentSection,
    FundingInfo,
    FundingResult,
)

__version__ = "0.1.0"

__all__ = [
    "AcknowledgmentSection",
    "FundingInfo",
    "FundingResult",
    "extract_acknowledgment_section",
    "extract_funding_info",
    "format_funding",
]

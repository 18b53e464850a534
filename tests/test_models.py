"""Tests for data models."""

import re

import pytest
from pydantic import ValidationError

from funding_scanner.models import (
    AcknowledgmentSection,
    CandidateMatch,
    FunderPattern,
    FundingInfo,
    FundingResult,
)


@pytest.fixture
def funder() -> FunderPattern:
    return FunderPattern(
        id="NSFC",
        name="National Natural Science Foundation of China",
        aliases=("国家自然科学基金",),
        patterns=(r"NSFC\s+(\d{8})",),
        priority=100,
        category="china",
    )


class TestFunderPattern:
    """Tests for registry entries."""

    def test_patterns_compiled(self, funder: FunderPattern) -> None:
        assert isinstance(funder.patterns[0], re.Pattern)
        assert funder.next_pattern is None
        assert funder.has_grant_number is True

    def test_immutable(self, funder: FunderPattern) -> None:
        with pytest.raises(ValidationError):
            funder.priority = 1

    def test_invalid_category(self) -> None:
        with pytest.raises(ValidationError):
            FunderPattern(id="X", name="X", patterns=("x",), priority=1, category="moon")


class TestCandidateMatch:
    """Tests for candidate span arithmetic."""

    def test_overlaps(self, funder: FunderPattern) -> None:
        a = CandidateMatch(funder, "12345678", "NSFC 12345678", 0, 13, 0.6)
        b = CandidateMatch(funder, "12345678", "12345678", 5, 8, 0.6)
        c = CandidateMatch(funder, "87654321", "87654321", 13, 8, 0.6)

        assert a.end == 13
        assert a.overlaps(b) and b.overlaps(a)
        assert not a.overlaps(c)


class TestResults:
    """Tests for extraction results."""

    def test_confidence_bounds(self) -> None:
        with pytest.raises(ValidationError):
            FundingInfo(
                funder_id="NSFC",
                funder_name="NSFC",
                confidence=1.2,
                raw_match="NSFC",
                position=0,
                category="china",
            )

    def test_defaults(self) -> None:
        result = FundingResult()
        assert result.title == ""
        assert result.arxiv_id is None
        assert result.source == "none"
        assert not result.has_funding()

    def test_section_is_frozen(self) -> None:
        section = AcknowledgmentSection(
            start_index=0, end_index=4, text="text", language="en", source="full_text"
        )
        with pytest.raises(ValidationError):
            section.text = "changed"

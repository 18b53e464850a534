"""Tests for the document service."""

from pathlib import Path
from unittest.mock import MagicMock

from funding_scanner.config import Settings
from funding_scanner.service import FundingService, extract_from_text, read_text_file

DOCUMENT = (
    "Measurement of something\n"
    "Body text with no funders.\n"
    "Acknowledgments\n"
    "This work was supported by NSFC under Grant No. 12125507 and by the U.S. "
    "Department of Energy under Contract No. DE-SC0012704.\n"
    "References\n"
    "[1] Supported by the NSFC under Grant No. 11111111.\n"
)


class TestExtractFromText:
    """Tests for the text convenience wrapper."""

    def test_uses_acknowledgment_section(self) -> None:
        result = extract_from_text(DOCUMENT, title="Paper", arxiv_id="2401.01234")

        assert result.title == "Paper"
        assert result.arxiv_id == "2401.01234"
        assert result.source == "pdf"
        grants = {(f.funder_id, f.grant_number) for f in result.funding}
        assert ("NSFC", "12125507") in grants
        assert ("DOE", "DE-SC0012704") in grants
        assert ("NSFC", "11111111") not in grants

    def test_no_funding_is_still_pdf(self) -> None:
        result = extract_from_text("Nothing to see here.")
        assert result.source == "pdf"
        assert result.funding == []


class TestFundingService:
    """Tests for caching and filtered reads."""

    def test_extracts_once_per_document(self) -> None:
        service = FundingService()
        text_source = MagicMock(return_value=DOCUMENT)

        first = service.get_funding("doc", "Paper", text_source)
        second = service.get_funding("doc", "Paper", text_source)

        text_source.assert_called_once()
        assert first == second
        assert first.has_funding()

    def test_no_text(self) -> None:
        service = FundingService()
        text_source = MagicMock(return_value=None)

        result = service.get_funding("doc", "Paper", text_source, doi="10.1000/xyz")
        service.get_funding("doc", "Paper", text_source)

        assert result.source == "none"
        assert result.funding == []
        assert result.doi == "10.1000/xyz"
        text_source.assert_called_once()

    def test_china_only_is_a_read_time_view(self) -> None:
        service = FundingService()
        text_source = MagicMock(return_value=DOCUMENT)

        china = service.get_funding("doc", "Paper", text_source, china_only=True)
        everything = service.get_funding("doc", "Paper", text_source, china_only=False)

        assert china.funding
        assert all(f.category == "china" for f in china.funding)
        assert any(f.funder_id == "DOE" for f in everything.funding)
        text_source.assert_called_once()

    def test_china_only_from_settings(self) -> None:
        service = FundingService(settings=Settings(china_only=True))
        result = service.get_funding("doc", "Paper", lambda: DOCUMENT)
        assert all(f.category == "china" for f in result.funding)

    def test_forget_triggers_re_extraction(self) -> None:
        service = FundingService()
        text_source = MagicMock(return_value=DOCUMENT)

        service.get_funding("doc", "Paper", text_source)
        service.forget("doc")
        service.get_funding("doc", "Paper", text_source)

        assert text_source.call_count == 2

    def test_cache_size_from_settings(self) -> None:
        service = FundingService(settings=Settings(cache_size=1))
        service.get_funding("a", "A", lambda: DOCUMENT)
        service.get_funding("b", "B", lambda: DOCUMENT)

        assert len(service.cache) == 1
        assert "b" in service.cache


class TestReadTextFile:
    """Tests for the file-backed text source."""

    def test_reads_file(self, tmp_path: Path) -> None:
        path = tmp_path / "paper.md"
        path.write_text(DOCUMENT, encoding="utf-8")
        assert read_text_file(path)() == DOCUMENT

    def test_missing_file_is_no_text(self, tmp_path: Path) -> None:
        assert read_text_file(tmp_path / "missing.txt")() is None

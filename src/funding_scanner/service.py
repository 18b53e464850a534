import logging
from collections.abc import Callable, Hashable
from pathlib import Path

from funding_scanner.acknowledgments import extract_acknowledgment_section
from funding_scanner.cache import FundingCache, filter_by_category
from funding_scanner.config import Settings, settings as default_settings
from funding_scanner.extraction import extract_funding_info
from funding_scanner.models import FunderPattern, FundingResult

logger = logging.getLogger(__name__)

# Returns the document text, or None when no text is available
TextSource = Callable[[], str | None]


def extract_from_text(
    text: str,
    title: str = "",
    arxiv_id: str | None = None,
    doi: str | None = None,
    registry: tuple[FunderPattern, ...] | None = None,
    settings: Settings | None = None,
) -> FundingResult:
    """Locate the acknowledgment section of ``text`` and extract its funding."""
    settings = settings or default_settings

    section = extract_acknowledgment_section(text, settings=settings)
    logger.debug(
        f"Analysing {section.source} section ({len(section.text)} chars, {section.language})"
    )
    funding = extract_funding_info(section.text, registry=registry, settings=settings)

    return FundingResult(
        title=title,
        arxiv_id=arxiv_id,
        doi=doi,
        funding=funding,
        source="pdf",
    )


def read_text_file(path: Path) -> TextSource:
    """Text source backed by a converted document (.txt or .md)."""

    def _read() -> str | None:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning(f"Could not read {path}: {e}")
            return None

    return _read


class FundingService:
    """Extracts funding once per document and serves filtered views of it."""

    def __init__(
        self,
        cache: FundingCache | None = None,
        settings: Settings | None = None,
        registry: tuple[FunderPattern, ...] | None = None,
    ):
        self.settings = settings or default_settings
        self.cache = cache if cache is not None else FundingCache(self.settings.cache_size)
        self.registry = registry

    def get_funding(
        self,
        key: Hashable,
        title: str,
        text_source: TextSource,
        arxiv_id: str | None = None,
        doi: str | None = None,
        china_only: bool | None = None,
    ) -> FundingResult:
        """
        Funding for one document, filtered by the China-only preference.

        The unfiltered result is cached under ``key``; ``text_source`` is only
        called on a cache miss. A document without text yields an empty result
        with source ``none``, which is cached as well.
        """
        if china_only is None:
            china_only = self.settings.china_only

        cached = self.cache.get(key, china_only=china_only)
        if cached is not None:
            return cached

        result = self._extract(title, text_source, arxiv_id, doi)
        self.cache.set(key, result)
        return filter_by_category(result, ["china"] if china_only else None)

    def forget(self, key: Hashable) -> None:
        self.cache.forget(key)

    def _extract(
        self,
        title: str,
        text_source: TextSource,
        arxiv_id: str | None,
        doi: str | None,
    ) -> FundingResult:
        text = text_source()
        if not text:
            logger.debug(f"No text available for '{title}'")
            return FundingResult(title=title, arxiv_id=arxiv_id, doi=doi, source="none")

        return extract_from_text(
            text,
            title=title,
            arxiv_id=arxiv_id,
            doi=doi,
            registry=self.registry,
            settings=self.settings,
        )

import re
import logging
from dataclasses import dataclass
from functools import lru_cache

from funding_scanner.config import Settings, settings as default_settings
from funding_scanner.config_loader import load_section_patterns
from funding_scanner.exceptions import RegistryError
from funding_scanner.models import AcknowledgmentSection, SectionSource

logger = logging.getLogger(__name__)

SOURCE_PRIORITY: dict[str, int] = {
    "acknowledgments": 3,
    "funding": 2,
    "footnote": 1,
}

_CJK_RE = re.compile(r"[一-鿿]")
_LATIN_WORD_RE = re.compile(r"[a-zA-Z]{3,}")


@dataclass(frozen=True)
class SectionHeading:
    pattern: re.Pattern
    source: SectionSource


@dataclass(frozen=True)
class SectionVocabulary:
    headings: tuple[SectionHeading, ...]
    terminators: tuple[re.Pattern, ...]


@lru_cache(maxsize=4)
def load_section_vocabulary(
    sections_file: str | None = None, custom_config_dir: str | None = None
) -> SectionVocabulary:
    data = load_section_patterns(sections_file, custom_config_dir)

    try:
        headings = tuple(
            SectionHeading(pattern=re.compile(entry['pattern']), source=entry['source'])
            for entry in data['headings']
        )
        terminators = tuple(re.compile(pattern) for pattern in data['terminators'])
    except (re.error, KeyError, TypeError) as e:
        raise RegistryError(f"Invalid section vocabulary: {e}") from e

    for heading in headings:
        if heading.source not in SOURCE_PRIORITY:
            raise RegistryError(f"Unknown section source: {heading.source}")

    return SectionVocabulary(headings=headings, terminators=terminators)


def detect_language(text: str) -> str:
    has_chinese = bool(_CJK_RE.search(text))
    has_english = bool(_LATIN_WORD_RE.search(text))
    if has_chinese and has_english:
        return "mixed"
    if has_chinese:
        return "zh"
    return "en"


def find_section_start(text: str, vocabulary: SectionVocabulary) -> tuple[int, str] | None:
    best: tuple[int, int, int, str] | None = None

    for heading in vocabulary.headings:
        match = heading.pattern.search(text)
        if not match:
            continue

        priority = SOURCE_PRIORITY[heading.source]
        candidate = (priority, match.start(), match.end(), heading.source)
        if best is None or priority > best[0] or (priority == best[0] and match.start() < best[1]):
            best = candidate

    if best is None:
        return None
    return best[2], best[3]


def find_section_end(remaining: str, vocabulary: SectionVocabulary) -> int:
    end_offset = len(remaining)
    for terminator in vocabulary.terminators:
        match = terminator.search(remaining)
        if match and match.start() < end_offset:
            end_offset = match.start()
    return end_offset


def extract_acknowledgment_section(
    text: str,
    settings: Settings | None = None,
    vocabulary: SectionVocabulary | None = None,
) -> AcknowledgmentSection:
    """Locate the acknowledgment/funding section of a document.

    Falls back to the whole document (source ``full_text``) when no heading
    is found.

    Args:
        text: Full document text
        settings: Overrides for the footnote length cap
        vocabulary: Heading/terminator patterns (defaults to the bundled set)

    Returns:
        The located section, never None
    """
    settings = settings or default_settings
    vocabulary = vocabulary or load_section_vocabulary(custom_config_dir=settings.config_dir)

    start = find_section_start(text, vocabulary)
    if start is None:
        logger.debug("No acknowledgment heading found, scanning full text")
        return AcknowledgmentSection(
            start_index=0,
            end_index=len(text),
            text=text,
            language=detect_language(text),
            source="full_text",
        )

    start_index, source = start
    remaining = text[start_index:]
    end_offset = find_section_end(remaining, vocabulary)

    if source == "footnote":
        end_offset = min(end_offset, settings.footnote_search_limit)

    section_text = remaining[:end_offset].strip()
    return AcknowledgmentSection(
        start_index=start_index,
        end_index=start_index + end_offset,
        text=section_text,
        language=detect_language(section_text),
        source=source,
    )

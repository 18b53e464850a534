import re

FULL_WIDTH_START = 0xFF01
FULL_WIDTH_END = 0xFF5E
FULL_WIDTH_OFFSET = 0xFEE0
IDEOGRAPHIC_SPACE = "　"

_FULL_WIDTH_RE = re.compile("[！-～]")

# Lines that carry nothing but a page number
_PAGE_NUMBER_LINE_RE = re.compile(r"^[ \t]*\d+[ \t]*$", re.MULTILINE)

# Running headers, e.g. "Eur. Phys. J. C (2024) 84:191 Page 11 of 13 191"
_RUNNING_HEADER_RES = [
    re.compile(r"^.*Page \d+ of \d+.*$", re.IGNORECASE | re.MULTILINE),
    re.compile(r"Eur\.\s*Phys\.\s*J\.\s*C[^\n]*", re.IGNORECASE),
]

_LINE_BREAK_RE = re.compile(r"[\r\n]+")


def fold_full_width(text: str) -> str:
    """Fold full-width forms (１２３, ：) to their ASCII counterparts."""
    text = _FULL_WIDTH_RE.sub(lambda m: chr(ord(m.group(0)) - FULL_WIDTH_OFFSET), text)
    return text.replace(IDEOGRAPHIC_SPACE, " ")


def remove_page_artifacts(text: str) -> str:
    """Blank page numbers and running headers so text continues across pages."""
    text = _PAGE_NUMBER_LINE_RE.sub(" ", text)
    for header_re in _RUNNING_HEADER_RES:
        text = header_re.sub(" ", text)
    return text


def normalize_text(text: str) -> str:
    """
    Normalize document text before pattern matching: fold full-width
    characters, blank page numbers and running headers, and join lines so a
    funding statement broken across lines matches as a single run.

    A second pass usually changes nothing, but joining lines can complete a
    running header such as "Page 3 of 5" that only the next pass removes.
    """
    normalized = text.replace("\r\n", "\n").replace("\r", "\n")
    normalized = fold_full_width(normalized)
    normalized = remove_page_artifacts(normalized)
    normalized = _LINE_BREAK_RE.sub(" ", normalized)
    return normalized

import json
import os
import re
from collections.abc import Sequence
from pathlib import Path

from funding_scanner.models import FundingResult, ProcessingStats

TEXT_SUFFIXES = (".txt", ".md")


def find_text_files(directory: str | Path) -> list[Path]:
    path = Path(directory)

    if not path.exists():
        raise ValueError(f"Directory {directory} does not exist")

    text_files = [
        file_path
        for file_path in path.rglob('*')
        if file_path.is_file() and file_path.suffix.lower() in TEXT_SUFFIXES
    ]
    return sorted(text_files)


def collect_inputs(inputs: Sequence[str | Path]) -> list[Path]:
    """Expand files and directories into a de-duplicated list of documents."""
    files: list[Path] = []
    seen: set[Path] = set()

    for entry in inputs:
        entry = Path(entry)
        candidates = find_text_files(entry) if entry.is_dir() else [entry]
        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved not in seen:
                seen.add(resolved)
                files.append(candidate)

    return files


def save_results(output_file: str | Path, results: Sequence[FundingResult], stats: ProcessingStats):
    payload = {
        'results': [result.model_dump() for result in results],
        'stats': stats.model_dump(),
    }

    output_file = str(output_file)
    temp_file = output_file + '.tmp'
    with open(temp_file, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2, ensure_ascii=False)

    os.replace(temp_file, output_file)


_ARXIV_ID_RE = re.compile(r"(\d{4}\.\d{4,5})(?:v\d+)?")
_OLD_ARXIV_ID_RE = re.compile(r"([a-z\-]+(?:\.[A-Z]{2})?)[/_](\d{7})(?:v\d+)?")


def arxiv_id_from_filename(file_path: str | Path) -> str | None:
    """2401.01234v2.md -> 2401.01234, hep-th_9901001.txt -> hep-th/9901001"""
    stem = Path(file_path).stem
    match = _ARXIV_ID_RE.search(stem)
    if match:
        return match.group(1)
    match = _OLD_ARXIV_ID_RE.search(stem)
    if match:
        return f"{match.group(1)}/{match.group(2)}"
    return None


def title_from_text(text: str | None, fallback: str) -> str:
    """First markdown heading of the document, else ``fallback``."""
    for line in (text or "").splitlines():
        stripped = line.strip()
        if stripped.startswith('#'):
            title = stripped.lstrip('#').strip()
            if title:
                return title
    return fallback

"""Funding extraction engine.

Matches every funder pattern of the registry against normalized text,
resolves overlapping candidates by funder priority, validates and normalizes
grant numbers, deduplicates, and merges DFG project ids with the
collaborative-centre codes that name the same project.
"""

import logging
import re

from funding_scanner.config import Settings, settings as default_settings
from funding_scanner.models import CandidateMatch, FunderPattern, FundingInfo
from funding_scanner.normalization import normalize_text
from funding_scanner.registry import (
    get_registry,
    normalize_grant_number,
    validate_grant_number,
)

logger = logging.getLogger(__name__)

BASE_CONFIDENCE = 0.6
ALIAS_BONUS = 0.25
CONTEXT_BONUS = 0.1
SECTION_BONUS = 0.05

CONTEXT_KEYWORDS = [
    re.compile(r"grant", re.IGNORECASE),
    re.compile(r"supported", re.IGNORECASE),
    re.compile(r"funded", re.IGNORECASE),
    re.compile(r"资助"),
    re.compile(r"acknowledge", re.IGNORECASE),
    re.compile(r"致谢"),
    re.compile(r"project", re.IGNORECASE),
    re.compile(r"项目"),
]

_ACK_HEADING_RE = re.compile(r"acknowledge?ments?|致\s*谢", re.IGNORECASE)
_REFERENCES_HEADING_RE = re.compile(r"references?|参考文献", re.IGNORECASE)

_DFG_PROJECT_ID_RE = re.compile(r"^\d{9}$")
_DFG_CENTRE_CODE_RE = re.compile(r"^(?:SFB|TRR|CRC)\s?\d{2,4}$", re.IGNORECASE)


def find_acknowledgment_span(text: str) -> tuple[int, int] | None:
    """Offsets of the first acknowledgment and first references mention."""
    ack = _ACK_HEADING_RE.search(text)
    ref = _REFERENCES_HEADING_RE.search(text)
    if ack is None or ref is None:
        return None
    return ack.start(), ref.start()


def calculate_confidence(
    funder: FunderPattern,
    raw_match: str,
    index: int,
    ack_span: tuple[int, int] | None,
) -> float:
    confidence = BASE_CONFIDENCE

    match_lower = raw_match.lower()
    if any(alias.lower() in match_lower for alias in funder.aliases):
        confidence += ALIAS_BONUS

    if any(keyword.search(raw_match) for keyword in CONTEXT_KEYWORDS):
        confidence += CONTEXT_BONUS

    if ack_span is not None:
        ack_index, ref_index = ack_span
        if ack_index < index < ref_index:
            confidence += SECTION_BONUS

    return min(confidence, 1.0)


def _grant_from_match(match: re.Match) -> str:
    if match.re.groups == 0:
        return ""
    return (match.group(1) or "").strip()


def _chained_candidates(
    funder: FunderPattern,
    text: str,
    position: int,
    ack_span: tuple[int, int] | None,
) -> list[CandidateMatch]:
    """Follow a delimited list of grant numbers right after a match."""
    candidates: list[CandidateMatch] = []

    while True:
        next_match = funder.next_pattern.match(text, position)
        if next_match is None:
            break
        grant_number = _grant_from_match(next_match)
        if not grant_number or next_match.end() == position:
            break

        if validate_grant_number(funder.id, grant_number):
            candidates.append(
                CandidateMatch(
                    funder=funder,
                    grant_number=grant_number,
                    raw_match=next_match.group(0),
                    index=next_match.start(),
                    length=len(next_match.group(0)),
                    confidence=calculate_confidence(
                        funder, next_match.group(0), next_match.start(), ack_span
                    ),
                )
            )
        position = next_match.end()

    return candidates


def generate_candidates(
    text: str, registry: tuple[FunderPattern, ...]
) -> list[CandidateMatch]:
    """Collect every accepted match of every pattern, in registry order."""
    ack_span = find_acknowledgment_span(text)
    candidates: list[CandidateMatch] = []

    for funder in registry:
        for pattern in funder.patterns:
            for match in pattern.finditer(text):
                grant_number = _grant_from_match(match)

                if funder.has_grant_number:
                    if not grant_number or not validate_grant_number(funder.id, grant_number):
                        continue

                candidates.append(
                    CandidateMatch(
                        funder=funder,
                        grant_number=grant_number,
                        raw_match=match.group(0),
                        index=match.start(),
                        length=len(match.group(0)),
                        confidence=calculate_confidence(
                            funder, match.group(0), match.start(), ack_span
                        ),
                    )
                )

                if funder.next_pattern is not None and funder.has_grant_number:
                    candidates.extend(
                        _chained_candidates(funder, text, match.end(), ack_span)
                    )

    return candidates


def resolve_overlaps(candidates: list[CandidateMatch]) -> list[CandidateMatch]:
    """
    Keep non-overlapping candidates. An overlapping candidate replaces the
    accepted one only when its funder priority is strictly higher; otherwise
    the candidate seen first (by offset, then registry order) wins.
    """
    accepted: list[CandidateMatch] = []

    for candidate in sorted(candidates, key=lambda c: c.index):
        overlap_idx = next(
            (i for i, kept in enumerate(accepted) if candidate.overlaps(kept)),
            None,
        )
        if overlap_idx is None:
            accepted.append(candidate)
        elif candidate.funder.priority > accepted[overlap_idx].funder.priority:
            accepted[overlap_idx] = candidate

    accepted.sort(key=lambda c: c.index)
    return accepted


def build_funding_records(candidates: list[CandidateMatch]) -> list[FundingInfo]:
    """Normalize grant numbers and drop repeated (funder, grant) pairs."""
    records: list[FundingInfo] = []
    seen: set[tuple[str, str]] = set()

    for candidate in candidates:
        grant_number = normalize_grant_number(candidate.funder.id, candidate.grant_number)
        key = (candidate.funder.id, grant_number)
        if key in seen:
            continue
        seen.add(key)

        records.append(
            FundingInfo(
                funder_id=candidate.funder.id,
                funder_name=candidate.funder.name,
                grant_number=grant_number,
                confidence=candidate.confidence,
                raw_match=candidate.raw_match,
                position=candidate.index,
                category=candidate.funder.category,
            )
        )

    return records


def merge_dfg_grants(records: list[FundingInfo], max_distance: int = 120) -> list[FundingInfo]:
    """Merge a DFG project id with a nearby SFB/TRR/CRC code of the same project.

    "279384907 - SFB 1245" becomes a single record "279384907 [SFB 1245]";
    the numeric id is kept as the primary identifier. Each id takes at most
    one code; a code with no free id in range stays a record of its own.
    """
    dfg_records = [r for r in records if r.funder_id == "DFG"]
    if len(dfg_records) < 2:
        return records

    project_ids = [r for r in dfg_records if _DFG_PROJECT_ID_RE.match(r.grant_number)]
    centre_codes = [r for r in dfg_records if _DFG_CENTRE_CODE_RE.match(r.grant_number)]

    removed: set[tuple[str, int]] = set()
    merged: dict[tuple[str, int], str] = {}

    for code in centre_codes:
        for project in project_ids:
            project_key = (project.grant_number, project.position)
            if project_key in merged:
                continue
            if abs(code.position - project.position) < max_distance:
                removed.add((code.grant_number, code.position))
                merged[project_key] = code.grant_number
                break

    result: list[FundingInfo] = []
    for record in records:
        if record.funder_id != "DFG":
            result.append(record)
            continue

        key = (record.grant_number, record.position)
        if key in removed:
            continue
        if key in merged:
            record = record.model_copy(
                update={"grant_number": f"{record.grant_number} [{merged[key]}]"}
            )
        result.append(record)

    return result


def extract_funding_info(
    text: str,
    registry: tuple[FunderPattern, ...] | None = None,
    settings: Settings | None = None,
) -> list[FundingInfo]:
    """Extract funders and grant numbers from text.

    Args:
        text: Text to analyse, usually an acknowledgment section
        registry: Funder registry (defaults to the bundled registry)
        settings: Overrides for the length cap and merge distance

    Returns:
        Funding records ordered by their position in the normalized text
    """
    settings = settings or default_settings
    registry = registry if registry is not None else get_registry()

    if len(text) > settings.max_text_length:
        logger.warning(
            f"Text too long ({len(text)} chars), truncating to {settings.max_text_length}"
        )
        text = text[:settings.max_text_length]

    normalized = normalize_text(text)

    candidates = generate_candidates(normalized, registry)
    accepted = resolve_overlaps(candidates)
    records = build_funding_records(accepted)

    logger.debug(
        f"{len(candidates)} candidates, {len(accepted)} accepted, {len(records)} unique"
    )
    return merge_dfg_grants(records, settings.dfg_merge_distance)

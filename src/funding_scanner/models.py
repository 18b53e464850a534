import re
from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Category = Literal["china", "us", "eu", "asia", "intl"]
Language = Literal["en", "zh", "mixed"]
SectionSource = Literal["acknowledgments", "funding", "footnote", "full_text"]
ResultSource = Literal["pdf", "none"]


class FunderPattern(BaseModel):
    """A funder entry of the pattern registry."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(description="Short stable code, e.g. NSFC")
    name: str = Field(description="Full display name")
    aliases: tuple[str, ...] = Field(
        default=(), description="Alternative names in any language"
    )
    patterns: tuple[re.Pattern, ...] = Field(
        description="Grant-number regexes, each with at most one capture group"
    )
    next_pattern: re.Pattern | None = Field(
        default=None,
        description="Regex for a following list entry, matched right after a hit",
    )
    priority: int = Field(description="Higher priority wins overlapping matches")
    category: Category = Field(description="Geographic/administrative group")
    has_grant_number: bool = Field(
        default=True, description="False when the funder is identified by name only"
    )


class AcknowledgmentSection(BaseModel):
    """Span of the document that holds funding statements."""

    model_config = ConfigDict(frozen=True)

    start_index: int = Field(description="Offset of the section body in the source")
    end_index: int = Field(description="Offset where the section ends")
    text: str = Field(description="Extracted section text")
    language: Language = Field(description="Detected language of the section")
    source: SectionSource = Field(description="Which heading located the section")


@dataclass
class CandidateMatch:
    """Provisional match produced before overlap resolution."""

    funder: FunderPattern
    grant_number: str
    raw_match: str
    index: int
    length: int
    confidence: float

    @property
    def end(self) -> int:
        return self.index + self.length

    def overlaps(self, other: "CandidateMatch") -> bool:
        return self.index < other.end and self.end > other.index


class FundingInfo(BaseModel):
    """A funder (and grant number, when present) found in a document."""

    model_config = ConfigDict(frozen=True)

    funder_id: str = Field(description="Registry id of the funder")
    funder_name: str = Field(description="Full English name of the funder")
    grant_number: str = Field(
        default="", description="Normalized grant number, empty when none"
    )
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence score 0-1")
    raw_match: str = Field(description="Text the pattern matched")
    position: int = Field(description="Offset of the match in the analysed text")
    category: Category = Field(description="Category of the funder")


class FundingResult(BaseModel):
    """Funding found for one document."""

    title: str = Field(default="", description="Document title")
    arxiv_id: str | None = Field(default=None, description="arXiv identifier")
    doi: str | None = Field(default=None, description="Document DOI")
    funding: list[FundingInfo] = Field(
        default_factory=list, description="Funding records in text order"
    )
    source: ResultSource = Field(
        default="none", description="pdf when document text was analysed"
    )

    def has_funding(self) -> bool:
        return len(self.funding) > 0


class ProcessingStats(BaseModel):
    """Summary of a batch run."""

    total_documents: int = Field(description="Documents processed")
    with_funding: int = Field(description="Documents with at least one funder")
    unique_funders: int = Field(description="Distinct funders across documents")
    total_grants: int = Field(description="Funding records carrying a grant number")

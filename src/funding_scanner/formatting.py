"""Aggregate extracted funding per funder and render it as text."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from funding_scanner.config import settings as default_settings
from funding_scanner.models import FundingInfo, FundingResult

TABLE_HEADER = "Title\tarXiv\tFunding"


@dataclass
class FunderGroup:
    funder_id: str
    category: str
    first_position: int
    grants: list[str] = field(default_factory=list)


def group_by_funder(result: FundingResult) -> list[FunderGroup]:
    """Group records per funder, keeping first-seen order and distinct grants."""
    groups: dict[str, FunderGroup] = {}

    for info in result.funding:
        group = groups.get(info.funder_id)
        if group is None:
            group = FunderGroup(
                funder_id=info.funder_id,
                category=info.category,
                first_position=info.position,
            )
            groups[info.funder_id] = group

        if info.grant_number and info.grant_number not in group.grants:
            group.grants.append(info.grant_number)

    return list(groups.values())


def find_joint_funded(funding: Sequence[FundingInfo], distance: int | None = None) -> set[str]:
    """
    Ids of non-Chinese funders mentioned shortly after a Chinese funder,
    e.g. the DFG side of an NSFC-DFG joint programme.
    """
    if distance is None:
        distance = default_settings.joint_funding_distance

    china_positions = [f.position for f in funding if f.category == "china"]
    joint: set[str] = set()

    for info in funding:
        if info.category == "china":
            continue
        if any(0 < info.position - pos < distance for pos in china_positions):
            joint.add(info.funder_id)

    return joint


def format_funding_single(result: FundingResult, joint_distance: int | None = None) -> str:
    """Render one result as ``"NSFC: 12345678, 12345679; DFG: TRR110; CAS"``."""
    if not result.funding:
        return ""

    groups = group_by_funder(result)
    joint = find_joint_funded(result.funding, joint_distance)
    groups.sort(key=lambda g: (g.funder_id in joint, g.first_position))

    parts = []
    for group in groups:
        if group.grants:
            parts.append(f"{group.funder_id}: {', '.join(group.grants)}")
        else:
            parts.append(group.funder_id)
    return "; ".join(parts)


def _clean_cell(value: str) -> str:
    return value.replace("\t", " ").replace("\r", " ").replace("\n", " ")


def format_funding_table(results: Sequence[FundingResult], joint_distance: int | None = None) -> str:
    rows = [TABLE_HEADER]
    for result in results:
        rows.append(
            "\t".join(
                [
                    _clean_cell(result.title),
                    result.arxiv_id or "",
                    format_funding_single(result, joint_distance),
                ]
            )
        )
    return "\n".join(rows)


def format_funding(results: Sequence[FundingResult], joint_distance: int | None = None) -> str:
    """Compact single-line form for one result, tab-separated table otherwise."""
    if len(results) == 1:
        return format_funding_single(results[0], joint_distance)
    return format_funding_table(results, joint_distance)


def count_unique_funders(results: Sequence[FundingResult]) -> int:
    return len({info.funder_id for result in results for info in result.funding})


def count_total_grants(results: Sequence[FundingResult]) -> int:
    return sum(1 for result in results for info in result.funding if info.grant_number)

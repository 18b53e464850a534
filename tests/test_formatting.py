"""Tests for grouping and rendering funding results."""

from funding_scanner.extraction import extract_funding_info
from funding_scanner.formatting import (
    TABLE_HEADER,
    count_total_grants,
    count_unique_funders,
    find_joint_funded,
    format_funding,
    format_funding_single,
    format_funding_table,
    group_by_funder,
)
from funding_scanner.models import FundingInfo, FundingResult


def _info(funder_id: str, grant_number: str, position: int, category: str = "china") -> FundingInfo:
    return FundingInfo(
        funder_id=funder_id,
        funder_name=funder_id,
        grant_number=grant_number,
        confidence=0.85,
        raw_match=f"{funder_id} {grant_number}",
        position=position,
        category=category,
    )


def _result(*funding: FundingInfo, title: str = "Paper", arxiv_id: str | None = None) -> FundingResult:
    return FundingResult(title=title, arxiv_id=arxiv_id, funding=list(funding), source="pdf")


class TestGrouping:
    """Tests for per-funder grouping."""

    def test_group_by_funder(self) -> None:
        result = _result(
            _info("NSFC", "12175016", 10),
            _info("MoST", "2023YFA1606000", 40),
            _info("NSFC", "12247103", 70),
            _info("CAS", "", 90),
        )
        groups = group_by_funder(result)

        assert [g.funder_id for g in groups] == ["NSFC", "MoST", "CAS"]
        assert groups[0].grants == ["12175016", "12247103"]
        assert groups[0].first_position == 10
        assert groups[0].category == "china"
        assert groups[2].grants == []

    def test_joint_funding(self) -> None:
        funding = [
            _info("NSFC", "11621131001", 1),
            _info("DFG", "TRR110", 29, category="eu"),
            _info("ERC", "101002043", 200, category="eu"),
        ]
        assert find_joint_funded(funding) == {"DFG"}

    def test_joint_funding_is_strict(self) -> None:
        funding = [
            _info("NSFC", "11621131001", 100),
            _info("DFG", "TRR110", 100, category="eu"),
            _info("DOE", "DE-SC0012704", 150, category="us"),
            _info("ERC", "101002043", 90, category="eu"),
        ]
        assert find_joint_funded(funding) == set()

    def test_joint_funding_custom_distance(self) -> None:
        funding = [
            _info("NSFC", "11621131001", 0),
            _info("DOE", "DE-SC0012704", 80, category="us"),
        ]
        assert find_joint_funded(funding) == set()
        assert find_joint_funded(funding, distance=100) == {"DOE"}


class TestSingleFormat:
    """Tests for the compact single-document string."""

    def test_joint_nsfc_dfg(self) -> None:
        result = _result(*extract_funding_info("(NSFC Grant No. 11621131001, DFG Grant No. TRR110)"))
        assert format_funding_single(result) == "NSFC: 11621131001; DFG: TRR110"

    def test_joint_funder_moves_last(self) -> None:
        result = _result(
            _info("DFG", "TRR110", 29, category="eu"),
            _info("NSFC", "11621131001", 1),
            _info("MoST", "2023YFA1606000", 120),
        )
        assert format_funding_single(result) == (
            "NSFC: 11621131001; MoST: 2023YFA1606000; DFG: TRR110"
        )

    def test_name_only_funder(self) -> None:
        result = _result(
            _info("NSFC", "12175016", 0),
            _info("Fermilab", "", 300, category="us"),
        )
        assert format_funding_single(result) == "NSFC: 12175016; Fermilab"

    def test_empty(self) -> None:
        assert format_funding_single(_result()) == ""


class TestTableFormat:
    """Tests for the multi-document table."""

    def test_table_with_empty_row(self) -> None:
        results = [
            _result(_info("NSFC", "12125507", 0), title="With funding", arxiv_id="2401.01234"),
            _result(title="Without funding"),
        ]
        table = format_funding_table(results)
        rows = table.split("\n")

        assert rows[0] == TABLE_HEADER == "Title\tarXiv\tFunding"
        assert len(rows) == 3
        assert rows[1] == "With funding\t2401.01234\tNSFC: 12125507"
        assert rows[2] == "Without funding\t\t"
        assert rows[2].split("\t")[2] == ""

    def test_title_whitespace_collapsed(self) -> None:
        table = format_funding_table([_result(title="A\ttitle\nover lines")])
        assert table.split("\n")[1] == "A title over lines\t\t"

    def test_format_funding_dispatch(self) -> None:
        single = _result(_info("NSFC", "12125507", 0))
        assert format_funding([single]) == "NSFC: 12125507"
        assert format_funding([single, single]).startswith(TABLE_HEADER)
        assert format_funding([]) == TABLE_HEADER


class TestCounts:
    """Tests for the summary counts."""

    def test_counts(self) -> None:
        results = [
            _result(_info("NSFC", "12175016", 0), _info("NSFC", "12247103", 20), _info("CAS", "", 40)),
            _result(_info("NSFC", "12125507", 0), _info("DOE", "DE-SC0012704", 50, category="us")),
            _result(),
        ]
        assert count_unique_funders(results) == 3
        assert count_total_grants(results) == 4

    def test_counts_empty(self) -> None:
        assert count_unique_funders([]) == 0
        assert count_total_grants([]) == 0

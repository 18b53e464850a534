import logging
from pathlib import Path

import click
from dotenv import load_dotenv

from funding_scanner.config import Settings
from funding_scanner.formatting import (
    count_total_grants,
    count_unique_funders,
    format_funding_single,
    format_funding_table,
)
from funding_scanner.models import FundingResult, ProcessingStats
from funding_scanner.registry import load_registry
from funding_scanner.service import FundingService, read_text_file
from funding_scanner.utils import (
    arxiv_id_from_filename,
    collect_inputs,
    save_results,
    title_from_text,
)

logger = logging.getLogger(__name__)


def build_stats(results: list[FundingResult]) -> ProcessingStats:
    return ProcessingStats(
        total_documents=len(results),
        with_funding=sum(1 for r in results if r.has_funding()),
        unique_funders=count_unique_funders(results),
        total_grants=count_total_grants(results),
    )


@click.command()
@click.argument(
    "inputs",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, path_type=Path),
)
@click.option(
    "-o",
    "--output",
    type=click.Path(path_type=Path),
    help="Output file path for results (JSON format)",
)
@click.option(
    "--table",
    "layout",
    flag_value="table",
    help="Print a tab-separated table (default for several documents)",
)
@click.option(
    "--compact",
    "layout",
    flag_value="compact",
    help="Print one line per document (default for a single document)",
)
@click.option(
    "--china-only",
    is_flag=True,
    help="Only report Chinese funders (can also use FUNDING_SCANNER_CHINA_ONLY)",
)
@click.option(
    "--patterns-file",
    type=click.Path(exists=True, path_type=Path),
    help="YAML file containing funder patterns",
)
@click.option(
    "--config-dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Custom directory containing configuration files",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
def main(
    inputs: tuple[Path, ...],
    output: Path | None,
    layout: str | None,
    china_only: bool,
    patterns_file: Path | None,
    config_dir: Path | None,
    verbose: bool,
) -> None:
    """Extract funding acknowledgments from research papers.

    INPUTS: Text or markdown documents, or directories containing them
    """
    load_dotenv()
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        overrides = {}
        if config_dir:
            overrides["config_dir"] = str(config_dir)
        if china_only:
            overrides["china_only"] = True
        settings = Settings(**overrides)

        registry = load_registry(
            str(patterns_file) if patterns_file else None,
            settings.config_dir,
        )
        service = FundingService(settings=settings, registry=registry)

        files = collect_inputs(inputs)
        if verbose:
            click.echo(f"Processing {len(files)} document(s)")
            click.echo(f"Registry: {len(registry)} funders")

        results = []
        for file_path in files:
            text = read_text_file(file_path)()
            result = service.get_funding(
                key=str(file_path.resolve()),
                title=title_from_text(text, file_path.stem),
                text_source=lambda text=text: text,
                arxiv_id=arxiv_id_from_filename(file_path),
            )
            logger.debug(f"{file_path}: {len(result.funding)} funding record(s)")
            results.append(result)

        if layout in ("table", "compact"):
            table = layout == "table"
        else:
            table = len(results) != 1

        if table:
            click.echo(format_funding_table(results, settings.joint_funding_distance))
        elif len(results) == 1:
            click.echo(format_funding_single(results[0], settings.joint_funding_distance))
        else:
            for result in results:
                click.echo(f"{result.title}: {format_funding_single(result, settings.joint_funding_distance)}")

        stats = build_stats(results)
        click.echo("\nProcessing complete:")
        click.echo(f"  Total documents: {stats.total_documents}")
        click.echo(f"  With funding: {stats.with_funding}")
        click.echo(f"  Unique funders: {stats.unique_funders}")
        click.echo(f"  Grant numbers: {stats.total_grants}")

        if output:
            save_results(output, results, stats)
            click.echo(f"\nResults saved to: {output}")

    except Exception as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()

"""CLI entry point for Logquartz."""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.table import Table

from logseq_dialect.graph import GraphPaths
from logseq_dialect.index import PageIndex
from logseq_dialect.links import LinkResolver
from logseq_dialect.query import QueryOptions, run_query
from logquartz import __version__
from logquartz.config import load_config
from logquartz.models.config import PublishConfig
from logquartz.services.exceptions import PublishError
from logquartz.services.git_dates import collect_git_dates
from logquartz.services.publisher import PublishStats, Publisher, journal_overlay
from logquartz.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)
console = Console()

input_option = click.option(
    "--input", "-i", "graph_path",
    type=click.Path(file_okay=False, path_type=Path),
    help="Path to Logseq graph root (contains pages/, journals/, logseq/)",
)
config_option = click.option(
    "--config", "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (default: ~/.config/logquartz/config.yaml)",
)


def load_publish_config(config_path: Optional[Path] = None, **overrides) -> PublishConfig:
    """
    Load configuration, turning loader errors into click errors.

    Raises:
        click.ClickException: If no graph is configured or validation fails
    """
    try:
        return load_config(config_path, **overrides)
    except FileNotFoundError as e:
        logger.error("config_not_found", error=str(e))
        raise click.ClickException(str(e))
    except ValueError as e:
        logger.error("config_validation_error", error=str(e))
        raise click.ClickException(str(e))


def build_index(config: PublishConfig) -> PageIndex:
    """Index pages plus the journal overlay, the same way a build does."""
    try:
        graph = GraphPaths(config.graph_path)
    except ValueError as e:
        raise click.ClickException(str(e))

    dates = collect_git_dates(graph.graph_path)
    pages = PageIndex.build(graph.load_sources(graph.pages_dir), dates)
    journals = PageIndex.build(graph.load_sources(graph.journals_dir), dates)
    return pages.with_overlay(journal_overlay(journals), config.journals_prefix)


@click.group()
@click.version_option(version=__version__, prog_name="logquartz")
@click.option("--verbose", "-v", is_flag=True, help="Log to stderr at DEBUG level")
@click.pass_context
def cli(ctx: click.Context, verbose: bool):
    """Logquartz: Publish a Logseq graph as Quartz-ready markdown."""
    configure_logging(verbose=verbose)
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose


@cli.command()
@input_option
@click.option("--output", "-o", "output_dir", type=click.Path(file_okay=False, path_type=Path),
              help="Output directory for Quartz content (default: quartz-content)")
@click.option("--include-private", is_flag=True, default=None, help="Include pages marked private:: true")
@click.option("--create-stubs", is_flag=True, default=None, help="Create stub pages for missing links")
@click.option("--workers", type=click.IntRange(1, 64), help="Number of transform threads")
@config_option
def build(
    graph_path: Optional[Path],
    output_dir: Optional[Path],
    include_private: Optional[bool],
    create_stubs: Optional[bool],
    workers: Optional[int],
    config_path: Optional[Path],
):
    """
    Convert a Logseq graph into a Quartz content folder.

    Examples:
        logquartz build --input ~/notes --output quartz/content
        logquartz build --include-private --create-stubs
    """
    config = load_publish_config(
        config_path,
        graph_path=graph_path,
        output_dir=output_dir,
        include_private=include_private,
        create_stubs=create_stubs,
        workers=workers,
    )
    logger.info("build_command_started", graph_path=str(config.graph_path), output_dir=str(config.output_dir))

    console.print("Preprocessing Logseq content for Quartz...")
    try:
        with console.status("[bold green]Publishing..."):
            stats = Publisher(config).run()
    except PublishError as e:
        logger.error("build_failed", error=str(e))
        raise click.ClickException(str(e))

    console.print(summary_table(stats))
    for path in stats.failures:
        console.print(f"[red]Failed:[/red] {path}")
    logger.info("build_command_completed")


def summary_table(stats: PublishStats) -> Table:
    table = Table(title="Preprocessing complete")
    table.add_column("Item")
    table.add_column("Count", justify="right")
    table.add_row("Pages published", str(stats.pages_published))
    table.add_row("Pages skipped", str(stats.pages_skipped))
    table.add_row("Failed", str(stats.pages_failed))
    table.add_row("Journals", str(stats.journals_published))
    table.add_row("Favorites", str(stats.favorites_created))
    table.add_row("Stubs", str(stats.stubs_created))
    table.add_row("Assets", str(stats.assets_copied))
    table.add_row("Time", f"{stats.elapsed_seconds:.2f}s")
    return table


@cli.command()
@click.argument("query")
@input_option
@click.option("--sort-by", help="Property to sort results by")
@click.option("--desc", is_flag=True, help="Sort descending")
@click.option("--list", "as_list", is_flag=True, help="Render a link list instead of a table")
@click.option("--properties", help="Comma-separated table columns")
@config_option
def query(
    query: str,
    graph_path: Optional[Path],
    sort_by: Optional[str],
    desc: bool,
    as_list: bool,
    properties: Optional[str],
    config_path: Optional[Path],
):
    """
    Run a Logseq simple query against a graph and print the markdown result.

    Examples:
        logquartz query "(page-tags [[book]])" --input ~/notes
        logquartz query "(and (task TODO) (priority A))" --list
    """
    config = load_publish_config(config_path, graph_path=graph_path)
    index = build_index(config)
    options = QueryOptions(
        sort_by=sort_by,
        sort_desc=desc,
        table=False if as_list else None,
        properties=tuple(p.strip() for p in (properties or "").split(",") if p.strip()),
    )
    logger.info("query_command_started", query=query, documents=len(index))
    click.echo(run_query(query, index, options))


@cli.command()
@click.argument("link")
@input_option
@config_option
def resolve(link: str, graph_path: Optional[Path], config_path: Optional[Path]):
    """
    Print the page a link resolves to.

    Examples:
        logquartz resolve "cv/districts" --input ~/notes
    """
    config = load_publish_config(config_path, graph_path=graph_path)
    resolver = LinkResolver(build_index(config))
    click.echo(resolver.resolve(link.strip().removeprefix("[[").removesuffix("]]")))


def main():
    """Main entry point for setuptools console script."""
    cli()


if __name__ == "__main__":
    main()

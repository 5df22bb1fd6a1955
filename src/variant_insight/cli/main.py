"""Main CLI entry point for variant-insight.

Provides command group with global options and subcommands for parsing
and analysing genomic input files.
"""

import logging
from pathlib import Path

import click

from variant_insight import __version__
from variant_insight.config.loader import load_config
from variant_insight.cli.analyze_cmd import analyze, parse


# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


@click.group()
@click.option(
    '--config',
    type=click.Path(exists=True, path_type=Path),
    default='config/default.yaml',
    help='Path to configuration YAML file'
)
@click.option(
    '--verbose',
    is_flag=True,
    help='Enable verbose logging (DEBUG level)'
)
@click.pass_context
def cli(ctx, config, verbose):
    """Variant-insight: parse, enrich and summarize personal genomic variants.

    Reads VCF files, 23andMe exports or pasted rsID lists, annotates the
    variants against MyVariant.info and produces a clinical summary, falling
    back to a built-in knowledge base when remote services are unavailable.
    """
    ctx.ensure_object(dict)
    ctx.obj['config_path'] = config
    ctx.obj['verbose'] = verbose

    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
        logging.debug("Verbose logging enabled")


@cli.command()
@click.pass_context
def info(ctx):
    """Display version and configuration summary."""
    config_path = ctx.obj['config_path']

    click.echo(f"Variant Insight v{__version__}")
    click.echo(f"Config: {config_path}")
    click.echo()

    try:
        config = load_config(config_path)

        config_hash = config.config_hash()
        click.echo(f"Config Hash: {config_hash[:16]}...")
        click.echo()

        click.echo(click.style("Network:", bold=True))
        click.echo(f"  Timeout:      {config.fetch.timeout_seconds}s")
        click.echo(f"  Max Attempts: {config.fetch.max_attempts}")
        click.echo(f"  Chunk Size:   {config.fetch.chunk_size}")
        click.echo()

        click.echo(click.style("Annotation Service:", bold=True))
        click.echo(f"  Base URL: {config.annotation.base_url}")
        click.echo(f"  Fields:   {config.annotation.fields}")
        click.echo(f"  Max Identifiers: {config.annotation.max_identifiers}")
        click.echo()

        click.echo(click.style("Summarization:", bold=True))
        click.echo(f"  Provider: {config.ai.provider}")
        click.echo(f"  Model:    {config.ai.model}")
        click.echo(f"  API Key Variable: {config.ai.api_key_env}")
        click.echo()

        click.echo(f"Output Directory: {config.output_dir}")

    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        ctx.exit(1)


# Register commands
cli.add_command(parse)
cli.add_command(analyze)


if __name__ == '__main__':
    cli()

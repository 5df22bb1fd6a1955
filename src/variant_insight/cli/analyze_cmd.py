"""Analysis commands: parse genomic input and run the enrichment pipeline."""

import asyncio
import logging
import sys
from pathlib import Path

import click

from variant_insight.ai.provider import provider_from_config
from variant_insight.annotation.service import VariantEnrichmentService
from variant_insight.api_clients.base import ResilientFetchClient
from variant_insight.config.loader import load_config
from variant_insight.config.schema import InsightConfig
from variant_insight.errors import AIConfigurationError
from variant_insight.orchestrator import AnalysisPhase, AnalysisRun, EnrichmentOrchestrator
from variant_insight.output.writers import write_analysis_output
from variant_insight.parsing.formats import detect_format, parse_genomic_input
from variant_insight.parsing.identifiers import LLMIdentifierExtractor

logger = logging.getLogger(__name__)

FOCUS_CHOICES = ['COMPREHENSIVE', 'PHARMA', 'ONCOLOGY', 'RARE_DISEASE']
ANCESTRY_CHOICES = ['GLOBAL', 'AFRICAN', 'EAST_ASIAN', 'EUROPEAN', 'LATINO', 'SOUTH_ASIAN']


def _read_input(input_path: Path) -> str:
    with open(input_path, encoding='utf-8', errors='replace') as f:
        return f.read()


def _echo_status(phase: AnalysisPhase, message: str) -> None:
    color = 'yellow' if phase is AnalysisPhase.OFFLINE_FALLBACK else None
    click.echo(click.style(f"[{phase.value}] {message}", fg=color))


async def run_analysis(
    raw_input: str,
    config: InsightConfig,
    focus: tuple[str, ...],
    ancestry: str,
    offline: bool,
) -> AnalysisRun:
    """Wire collaborators from config and run one analysis."""
    async with ResilientFetchClient.from_config(config.fetch) as fetch_client:
        enrichment = VariantEnrichmentService.from_config(config.annotation, fetch_client)

        provider = None
        extractor = None
        if not offline:
            try:
                provider = provider_from_config(config.ai, fetch_client)
                extractor = LLMIdentifierExtractor(
                    provider, max_chars=config.analysis.max_prompt_chars
                )
            except AIConfigurationError as e:
                click.echo(click.style(f"  {e}", fg='yellow'))

        orchestrator = EnrichmentOrchestrator(
            enrichment=enrichment,
            provider=provider,
            extractor=extractor,
            config=config,
        )
        return await orchestrator.analyze(
            raw_input,
            focus=focus,
            ancestry=ancestry,
            on_status=_echo_status,
            offline=offline,
        )


@click.command('parse')
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
def parse(input_path):
    """Parse a VCF or 23andMe file locally and list the variants kept.

    Wildtype (0/0) and no-call genotypes are filtered out. No network
    access is performed.
    """
    raw_input = _read_input(input_path)
    input_format = detect_format(raw_input)
    variants = parse_genomic_input(raw_input)

    click.echo(f"Format: {input_format.value}")
    click.echo(f"Variants: {len(variants)}")
    for variant in variants:
        click.echo(
            f"  {variant.identifier}\t{variant.chromosome}:{variant.position}\t"
            f"{variant.reference_allele}>{variant.alternate_allele}\t{variant.zygosity.value}"
        )


@click.command('analyze')
@click.argument('input_path', type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    '--offline',
    is_flag=True,
    help='Skip remote services and use the built-in knowledge base'
)
@click.option(
    '--output-dir',
    type=click.Path(path_type=Path),
    default=None,
    help='Override output directory from config'
)
@click.option(
    '--focus',
    type=click.Choice(FOCUS_CHOICES, case_sensitive=False),
    multiple=True,
    default=['COMPREHENSIVE'],
    help='Analysis focus area (repeatable)'
)
@click.option(
    '--ancestry',
    type=click.Choice(ANCESTRY_CHOICES, case_sensitive=False),
    default='GLOBAL',
    help='Declared ancestry group'
)
@click.pass_context
def analyze(ctx, input_path, offline, output_dir, focus, ancestry):
    """Analyze a genomic input file and write the report.

    Runs local parsing, remote annotation and clinical summarization. When
    remote services are unavailable the built-in knowledge base is used
    and the output is marked OFFLINE_FALLBACK.

    Examples:

        # Online analysis (needs GEMINI_API_KEY)
        variant-insight analyze sample.vcf

        # Offline analysis into a custom directory
        variant-insight analyze sample.vcf --offline --output-dir out/
    """
    config_path = ctx.obj['config_path']

    click.echo(click.style("=== Variant Analysis ===", bold=True))
    click.echo()

    try:
        config = load_config(config_path)
    except Exception as e:
        click.echo(click.style(f"Error loading config: {e}", fg='red'), err=True)
        sys.exit(1)

    raw_input = _read_input(input_path)
    focus = tuple(item.upper() for item in focus)

    try:
        run = asyncio.run(run_analysis(raw_input, config, focus, ancestry.upper(), offline))
    except Exception as e:
        click.echo(click.style(f"Analysis failed: {e}", fg='red'), err=True)
        logger.exception("Analysis failed")
        sys.exit(1)

    click.echo()
    if run.user_message:
        click.echo(click.style(run.user_message, fg='yellow'))

    result = run.result
    click.echo(click.style("=== Summary ===", bold=True))
    click.echo(f"Mode: {run.mode.value}")
    click.echo(f"Overall Risk Score: {result.overall_risk_score:g}")
    if result.clinical_synthesis is not None:
        click.echo(f"Overall Risk Level: {result.clinical_synthesis.overall_risk_level}")
    click.echo(f"Variants Reported: {len(result.variants)}")
    if run.failed_chunks:
        click.echo(click.style(f"Annotation chunks failed: {run.failed_chunks}", fg='yellow'))
    click.echo()
    click.echo(result.patient_summary)
    click.echo()

    paths = write_analysis_output(run, output_dir or config.output_dir)
    click.echo(click.style("Output files:", bold=True))
    for kind, path in paths.items():
        click.echo(f"  {kind}: {path}")
